"""CRUD over the current files of a project."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, Iterable, Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import FileConflict, FileNotFound, InvalidPath
from ..fingerprint import fingerprint
from ..models import ProjectFile

LOGGER = logging.getLogger(__name__)


class FileStore:
    """Persist ``(project_id, path) -> content`` rows inside a caller's session.

    The store never commits; every method runs in the transaction owned by
    the caller so a file write and the snapshot that records it land
    together.
    """

    @staticmethod
    def validate_path(path: str) -> str:
        """Normalise ``path`` and reject values that escape the project."""

        candidate = (path or "").strip().replace("\\", "/")
        if not candidate:
            raise InvalidPath("File path cannot be empty")
        if candidate.startswith("/"):
            raise InvalidPath(f"File path must be relative: {path}")
        parts = PurePosixPath(candidate).parts
        if any(part == ".." for part in parts):
            raise InvalidPath(f"File path may not contain '..': {path}")
        return "/".join(part for part in parts if part != ".")

    def get(self, session: Session, project_id: str, path: str) -> ProjectFile | None:
        return session.get(ProjectFile, (project_id, self.validate_path(path)))

    def create(
        self, session: Session, project_id: str, path: str, content: str = ""
    ) -> ProjectFile:
        """Insert a new file, raising :class:`FileConflict` if it exists."""

        path = self.validate_path(path)
        if self.get(session, project_id, path) is not None:
            raise FileConflict(project_id, path)
        record = ProjectFile(
            project_id=project_id,
            path=path,
            content=content,
            fingerprint=fingerprint(content),
            updated_at=datetime.now(timezone.utc),
        )
        session.add(record)
        session.flush()
        LOGGER.debug("Created %s in project %s", path, project_id)
        return record

    def update(
        self, session: Session, project_id: str, path: str, content: str
    ) -> ProjectFile:
        """Upsert ``content`` for ``path`` and refresh its fingerprint."""

        path = self.validate_path(path)
        record = self.get(session, project_id, path)
        now = datetime.now(timezone.utc)
        if record is None:
            record = ProjectFile(project_id=project_id, path=path)
            session.add(record)
        record.content = content
        record.fingerprint = fingerprint(content)
        record.updated_at = now
        session.flush()
        return record

    def delete(self, session: Session, project_id: str, path: str) -> None:
        """Remove ``path`` if present."""

        record = self.get(session, project_id, self.validate_path(path))
        if record is None:
            return
        session.delete(record)
        session.flush()

    def rename(
        self, session: Session, project_id: str, source: str, target: str
    ) -> ProjectFile:
        """Move ``source`` to ``target`` within the caller's transaction."""

        source = self.validate_path(source)
        target = self.validate_path(target)
        if self.get(session, project_id, target) is not None:
            raise FileConflict(project_id, target)
        record = self.get(session, project_id, source)
        if record is None:
            raise FileNotFound(project_id, source)

        content = record.content
        session.delete(record)
        session.flush()
        renamed = ProjectFile(
            project_id=project_id,
            path=target,
            content=content,
            fingerprint=fingerprint(content),
            updated_at=datetime.now(timezone.utc),
        )
        session.add(renamed)
        session.flush()
        LOGGER.debug("Renamed %s to %s in project %s", source, target, project_id)
        return renamed

    def list_by_project(self, session: Session, project_id: str) -> list[ProjectFile]:
        statement = (
            select(ProjectFile)
            .where(ProjectFile.project_id == project_id)
            .order_by(ProjectFile.path)
        )
        return list(session.scalars(statement).all())

    def seed(
        self,
        session: Session,
        project_id: str,
        files: Mapping[str, str],
        timestamp: datetime,
    ) -> list[ProjectFile]:
        """Insert the initial file set of a new project.

        Raises :class:`InvalidPath` when two keys normalise to the same path.
        """

        normalised: dict[str, str] = {}
        for path, content in files.items():
            key = self.validate_path(path)
            if key in normalised:
                raise InvalidPath(f"Duplicate file path after normalisation: {path}")
            normalised[key] = content

        records = [
            ProjectFile(
                project_id=project_id,
                path=path,
                content=content,
                fingerprint=fingerprint(content),
                updated_at=timestamp,
            )
            for path, content in normalised.items()
        ]
        session.add_all(records)
        session.flush()
        return records

    def replace_all(
        self, session: Session, project_id: str, states: Iterable[Mapping[str, Any]]
    ) -> list[ProjectFile]:
        """Swap the project's file set for ``states`` taken from a snapshot.

        Content and fingerprint are restored verbatim; only the bookkeeping
        timestamp is refreshed.
        """

        for record in self.list_by_project(session, project_id):
            session.delete(record)
        session.flush()

        now = datetime.now(timezone.utc)
        records = [
            ProjectFile(
                project_id=project_id,
                path=state["path"],
                content=state["content"],
                fingerprint=state.get("fingerprint") or fingerprint(state["content"]),
                updated_at=now,
            )
            for state in states
        ]
        session.add_all(records)
        session.flush()
        return records


__all__ = ["FileStore"]
