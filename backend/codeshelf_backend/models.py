"""Database models for the Codeshelf backend."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base

FRAMEWORKS = ("react", "vanilla")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class Project(Base):
    """An independently versioned collection of files."""

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    framework: Mapped[str] = mapped_column(String(16), default="vanilla")
    entry_file: Mapped[str] = mapped_column(String(512), default="index.html")
    snapshot_index: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, index=True
    )

    files: Mapped[list[ProjectFile]] = relationship(
        back_populates="project", cascade="all, delete-orphan"
    )
    snapshots: Mapped[list[Snapshot]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Snapshot.order",
    )


class ProjectFile(Base):
    """Current content of one file within a project."""

    __tablename__ = "project_files"

    project_id: Mapped[str] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True
    )
    path: Mapped[str] = mapped_column(String(1024), primary_key=True)
    content: Mapped[str] = mapped_column(Text(), default="")
    fingerprint: Mapped[str] = mapped_column(String(40), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )

    project: Mapped[Project] = relationship(back_populates="files")

    def as_state(self) -> dict[str, Any]:
        """Return the immutable copy stored inside a snapshot."""

        return {
            "path": self.path,
            "content": self.content,
            "fingerprint": self.fingerprint,
            "updated_at": self.updated_at.isoformat(),
        }


class Snapshot(Base):
    """Immutable point-in-time copy of a project's entire file set."""

    __tablename__ = "snapshots"
    __table_args__ = (
        UniqueConstraint("project_id", "order", name="uq_snapshots_project_order"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    project_id: Mapped[str] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    label: Mapped[str | None] = mapped_column(String(255))
    files: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )

    project: Mapped[Project] = relationship(back_populates="snapshots")


__all__ = ["FRAMEWORKS", "Project", "ProjectFile", "Snapshot"]
