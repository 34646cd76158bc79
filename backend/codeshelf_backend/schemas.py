"""Pydantic schemas for the Codeshelf API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TemplateModel(BaseModel):
    """Catalog entry offered when creating a project."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    framework: str
    entry_file: str
    description: str | None = None
    paths: list[str] = Field(default_factory=list)


class ProjectCreateRequest(BaseModel):
    """Request body for creating a project from a template."""

    template_id: str = Field(..., min_length=1)
    name: str | None = None


class ProjectRenameRequest(BaseModel):
    name: str


class ProjectModel(BaseModel):
    """Project metadata without file contents."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    framework: str
    entry_file: str
    snapshot_index: int
    created_at: datetime
    updated_at: datetime


class FileModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    path: str
    content: str
    fingerprint: str
    updated_at: datetime


class ProjectDetail(ProjectModel):
    """Project metadata together with its current files."""

    files: list[FileModel] = Field(default_factory=list)


class FileCreateRequest(BaseModel):
    path: str = Field(..., min_length=1)
    content: str = ""


class FileUpdateRequest(BaseModel):
    content: str
    snapshot_label: str | None = None
    skip_snapshot: bool = False


class FileRenameRequest(BaseModel):
    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)


class SnapshotModel(BaseModel):
    """Representation of one history entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    order: int
    label: str | None
    created_at: datetime
    files: list[dict[str, Any]]


class HistoryResponse(BaseModel):
    """Result of an undo or redo request."""

    changed: bool
    snapshot_index: int


class ActiveProjectRequest(BaseModel):
    project_id: str


class ActiveProjectResponse(BaseModel):
    project: ProjectModel | None = None


__all__ = [
    "ActiveProjectRequest",
    "ActiveProjectResponse",
    "FileCreateRequest",
    "FileModel",
    "FileRenameRequest",
    "FileUpdateRequest",
    "HistoryResponse",
    "ProjectCreateRequest",
    "ProjectDetail",
    "ProjectModel",
    "ProjectRenameRequest",
    "SnapshotModel",
    "TemplateModel",
]
