"""Linear undo/redo history built from whole-project snapshots."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import ProjectNotFound
from ..models import Project, Snapshot
from .files import FileStore

LOGGER = logging.getLogger(__name__)


class SnapshotEngine:
    """Record and restore point-in-time captures of a project's files.

    History is a single chain: ``order`` runs contiguously from 0 and
    ``Project.snapshot_index`` always points at one of those orders.
    Committing after an undo discards the abandoned redo branch. Undo and
    redo only move the pointer and restore files; they never add or remove
    snapshots.

    Like :class:`FileStore`, the engine works inside the caller's session.
    """

    def __init__(self, files: FileStore) -> None:
        self.files = files

    def seed(
        self, session: Session, project: Project, label: str, timestamp: datetime
    ) -> Snapshot:
        """Write the order-0 snapshot for a freshly created ``project``."""

        snapshot = Snapshot(
            project_id=project.id,
            order=0,
            label=label,
            files=self._capture(session, project.id),
            created_at=timestamp,
        )
        session.add(snapshot)
        project.snapshot_index = 0
        session.flush()
        return snapshot

    def commit(
        self, session: Session, project_id: str, label: str | None = None
    ) -> Snapshot:
        """Capture the current file set as the next entry in the history."""

        project = self._load_project(session, project_id)
        current = project.snapshot_index or 0

        stale = session.scalars(
            select(Snapshot).where(
                Snapshot.project_id == project_id, Snapshot.order > current
            )
        ).all()
        for snapshot in stale:
            session.delete(snapshot)
        if stale:
            session.flush()
            LOGGER.debug(
                "Discarded %d redo snapshot(s) for project %s", len(stale), project_id
            )

        now = datetime.now(timezone.utc)
        snapshot = Snapshot(
            project_id=project_id,
            order=current + 1,
            label=label,
            files=self._capture(session, project_id),
            created_at=now,
        )
        session.add(snapshot)
        project.snapshot_index = snapshot.order
        project.updated_at = now
        session.flush()
        LOGGER.info(
            "Committed snapshot %d for project %s (%s)",
            snapshot.order,
            project_id,
            label or "unlabeled",
        )
        return snapshot

    def undo(self, session: Session, project_id: str) -> bool:
        """Step back one snapshot; ``False`` when already at the beginning."""

        project = session.get(Project, project_id)
        if project is None or project.snapshot_index <= 0:
            return False
        return self._restore(session, project, project.snapshot_index - 1)

    def redo(self, session: Session, project_id: str) -> bool:
        """Step forward one snapshot; ``False`` when there is nothing to redo."""

        project = session.get(Project, project_id)
        if project is None:
            return False
        return self._restore(session, project, project.snapshot_index + 1)

    def get(self, session: Session, project_id: str, order: int) -> Snapshot | None:
        return session.scalar(
            select(Snapshot).where(
                Snapshot.project_id == project_id, Snapshot.order == order
            )
        )

    def history(self, session: Session, project_id: str) -> list[Snapshot]:
        statement = (
            select(Snapshot)
            .where(Snapshot.project_id == project_id)
            .order_by(Snapshot.order)
        )
        return list(session.scalars(statement).all())

    def _restore(self, session: Session, project: Project, target: int) -> bool:
        snapshot = self.get(session, project.id, target)
        if snapshot is None:
            return False

        self.files.replace_all(session, project.id, snapshot.files or [])
        project.snapshot_index = target
        project.updated_at = datetime.now(timezone.utc)
        session.flush()
        LOGGER.info("Restored project %s to snapshot %d", project.id, target)
        return True

    def _capture(self, session: Session, project_id: str) -> list[dict[str, object]]:
        return [
            record.as_state()
            for record in self.files.list_by_project(session, project_id)
        ]

    @staticmethod
    def _load_project(session: Session, project_id: str) -> Project:
        project = session.get(Project, project_id)
        if project is None:
            raise ProjectNotFound(project_id)
        return project


__all__ = ["SnapshotEngine"]
