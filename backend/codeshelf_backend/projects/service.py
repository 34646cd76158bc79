"""Project lifecycle and the transactional entry points of the store."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterable, Iterator, Mapping

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..config import Settings
from ..database import create_db_engine, create_session_factory, session_scope
from ..errors import (
    CapacityExceeded,
    FileNotFound,
    InvalidPath,
    ProjectNotFound,
    TemplateNotFound,
    TransactionFailure,
)
from ..models import Project, ProjectFile, Snapshot
from ..state import ActiveProjectPointer
from .files import FileStore
from .snapshots import SnapshotEngine
from .templates import ProjectTemplate, get_template, load_templates

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_PROJECTS = 10


class ProjectStore:
    """Create, mutate and destroy projects while keeping history consistent.

    Each public method runs in exactly one database transaction, so a file
    write and the snapshot recording it either both persist or neither does.
    Capacity refusals are reported as ``None`` rather than raised.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        max_projects: int = DEFAULT_MAX_PROJECTS,
        templates: Iterable[ProjectTemplate] | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.max_projects = max_projects
        self.templates = list(templates) if templates is not None else load_templates()
        self.files = FileStore()
        self.snapshots = SnapshotEngine(self.files)

    @classmethod
    def from_settings(cls, settings: Settings) -> ProjectStore:
        """Build a store bound to the database named in ``settings``."""

        engine = create_db_engine(settings.database_url)
        return cls(
            create_session_factory(engine),
            max_projects=settings.max_projects,
            templates=load_templates(settings.templates_path),
        )

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        try:
            with session_scope(self.session_factory) as session:
                yield session
        except SQLAlchemyError as exc:
            LOGGER.exception("Transaction failed and was rolled back")
            raise TransactionFailure(str(exc)) from exc

    # Queries

    def list(self) -> list[Project]:
        """Return all projects, most recently updated first."""

        with self._transaction() as session:
            statement = select(Project).order_by(Project.updated_at.desc())
            return list(session.scalars(statement).all())

    def get(self, project_id: str) -> Project | None:
        with self._transaction() as session:
            return session.get(Project, project_id)

    def count(self) -> int:
        with self._transaction() as session:
            return self._count(session)

    def list_files(self, project_id: str) -> list[ProjectFile]:
        with self._transaction() as session:
            self._require_project(session, project_id)
            return self.files.list_by_project(session, project_id)

    def read_file(self, project_id: str, path: str) -> ProjectFile | None:
        try:
            path = self.files.validate_path(path)
        except InvalidPath:
            return None
        with self._transaction() as session:
            return self.files.get(session, project_id, path)

    def history(self, project_id: str) -> list[Snapshot]:
        with self._transaction() as session:
            self._require_project(session, project_id)
            return self.snapshots.history(session, project_id)

    def resolve_active(self, pointer: ActiveProjectPointer) -> Project | None:
        """Return the remembered project, or the most recently updated one."""

        project_id = pointer.get()
        if project_id:
            project = self.get(project_id)
            if project is not None:
                return project
            LOGGER.info("Active project %s no longer exists", project_id)
        projects = self.list()
        return projects[0] if projects else None

    # Project lifecycle

    def create(
        self, template: ProjectTemplate, name: str | None = None
    ) -> Project | None:
        """Create a project seeded from ``template``; ``None`` at capacity."""

        return self.create_seeded(
            name=(name or "").strip() or f"{template.name} Project",
            framework=template.framework,
            entry_file=template.entry_file,
            files=template.files,
            label="Initial template",
        )

    def create_from_template_id(
        self, template_id: str, name: str | None = None
    ) -> Project | None:
        template = get_template(template_id, self.templates)
        if template is None:
            raise TemplateNotFound(template_id)
        return self.create(template, name)

    def create_seeded(
        self,
        *,
        name: str,
        framework: str,
        entry_file: str,
        files: Mapping[str, str],
        label: str,
    ) -> Project | None:
        """Create a project with ``files`` as its order-0 snapshot."""

        try:
            with self._transaction() as session:
                project = self._seed(
                    session,
                    name=name,
                    framework=framework,
                    entry_file=entry_file,
                    files=files,
                    label=label,
                )
        except CapacityExceeded as exc:
            LOGGER.warning("Cannot create project '%s': %s", name, exc)
            return None
        LOGGER.info("Created project %s (%s)", project.id, project.name)
        return project

    def duplicate(self, project_id: str) -> Project | None:
        """Copy a project's current files into a new project with fresh history."""

        try:
            with self._transaction() as session:
                source = session.get(Project, project_id)
                if source is None:
                    LOGGER.warning("Cannot duplicate missing project %s", project_id)
                    return None
                files = {
                    record.path: record.content
                    for record in self.files.list_by_project(session, project_id)
                }
                project = self._seed(
                    session,
                    name=f"{source.name} Copy",
                    framework=source.framework,
                    entry_file=source.entry_file,
                    files=files,
                    label="Duplicated project",
                )
        except CapacityExceeded as exc:
            LOGGER.warning("Cannot duplicate project %s: %s", project_id, exc)
            return None
        LOGGER.info("Duplicated project %s into %s", project_id, project.id)
        return project

    def rename(self, project_id: str, name: str) -> None:
        trimmed = name.strip()
        if not trimmed:
            return
        with self._transaction() as session:
            project = self._require_project(session, project_id)
            project.name = trimmed
            project.updated_at = datetime.now(timezone.utc)

    def delete(self, project_id: str) -> None:
        """Delete a project together with its files and snapshots."""

        with self._transaction() as session:
            project = session.get(Project, project_id)
            if project is None:
                return
            session.delete(project)
        LOGGER.info("Deleted project %s", project_id)

    # File mutations

    def create_file(
        self, project_id: str, path: str, content: str = ""
    ) -> ProjectFile:
        with self._transaction() as session:
            self._require_project(session, project_id)
            record = self.files.create(session, project_id, path, content)
            self.snapshots.commit(session, project_id, f"Created {record.path}")
        return record

    def update_file(
        self,
        project_id: str,
        path: str,
        content: str,
        *,
        snapshot_label: str | None = None,
        skip_snapshot: bool = False,
    ) -> ProjectFile:
        """Write ``content`` to ``path`` and record the result in history.

        ``skip_snapshot`` stores a draft: the file changes but no history
        entry is committed, so the next undo returns to the last snapshot.
        """

        with self._transaction() as session:
            project = self._require_project(session, project_id)
            record = self.files.update(session, project_id, path, content)
            if skip_snapshot:
                project.updated_at = record.updated_at
            else:
                self.snapshots.commit(
                    session, project_id, snapshot_label or f"Updated {record.path}"
                )
        return record

    def delete_file(self, project_id: str, path: str) -> None:
        path = self.files.validate_path(path)
        with self._transaction() as session:
            self._require_project(session, project_id)
            self.files.delete(session, project_id, path)
            self.snapshots.commit(session, project_id, f"Deleted {path}")

    def rename_file(self, project_id: str, source: str, target: str) -> ProjectFile:
        source = self.files.validate_path(source)
        target = self.files.validate_path(target)
        with self._transaction() as session:
            self._require_project(session, project_id)
            if source == target:
                record = self.files.get(session, project_id, source)
                if record is None:
                    raise FileNotFound(project_id, source)
                return record
            record = self.files.rename(session, project_id, source, target)
            self.snapshots.commit(session, project_id, f"Renamed {source}")
        return record

    # History

    def undo(self, project_id: str) -> bool:
        with self._transaction() as session:
            return self.snapshots.undo(session, project_id)

    def redo(self, project_id: str) -> bool:
        with self._transaction() as session:
            return self.snapshots.redo(session, project_id)

    # Helpers

    @staticmethod
    def _count(session: Session) -> int:
        return session.scalar(select(func.count()).select_from(Project)) or 0

    @staticmethod
    def _require_project(session: Session, project_id: str) -> Project:
        project = session.get(Project, project_id)
        if project is None:
            raise ProjectNotFound(project_id)
        return project

    def _seed(
        self,
        session: Session,
        *,
        name: str,
        framework: str,
        entry_file: str,
        files: Mapping[str, str],
        label: str,
    ) -> Project:
        if self._count(session) >= self.max_projects:
            raise CapacityExceeded(self.max_projects)

        now = datetime.now(timezone.utc)
        project = Project(
            name=name,
            framework=framework,
            entry_file=entry_file,
            snapshot_index=0,
            created_at=now,
            updated_at=now,
        )
        session.add(project)
        session.flush()
        self.files.seed(session, project.id, files, now)
        self.snapshots.seed(session, project, label, now)
        return project


__all__ = ["DEFAULT_MAX_PROJECTS", "ProjectStore"]
