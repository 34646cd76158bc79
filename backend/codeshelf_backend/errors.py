"""Exceptions raised by the Codeshelf storage engine."""

from __future__ import annotations


class StoreError(RuntimeError):
    """Base class for storage engine failures."""


class CapacityExceeded(StoreError):
    """Raised internally when the project cap has been reached."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"Project limit of {limit} reached")
        self.limit = limit


class FileConflict(StoreError):
    """Raised when a target path already exists within a project."""

    def __init__(self, project_id: str, path: str) -> None:
        super().__init__(f"File '{path}' already exists in project {project_id}")
        self.project_id = project_id
        self.path = path


class NotFound(StoreError):
    """Raised when an operation references a missing entity."""


class ProjectNotFound(NotFound):
    def __init__(self, project_id: str) -> None:
        super().__init__(f"Project {project_id} not found")
        self.project_id = project_id


class FileNotFound(NotFound):
    def __init__(self, project_id: str, path: str) -> None:
        super().__init__(f"File '{path}' not found in project {project_id}")
        self.project_id = project_id
        self.path = path


class TemplateNotFound(NotFound):
    def __init__(self, template_id: str) -> None:
        super().__init__(f"Unknown template '{template_id}'")
        self.template_id = template_id


class InvalidPath(StoreError, ValueError):
    """Raised when a file path is empty or escapes the project."""


class ArchiveError(StoreError, ValueError):
    """Raised when an uploaded archive cannot be read."""


class TransactionFailure(StoreError):
    """Raised when the underlying database transaction fails and was rolled back."""


__all__ = [
    "ArchiveError",
    "CapacityExceeded",
    "FileConflict",
    "FileNotFound",
    "InvalidPath",
    "NotFound",
    "ProjectNotFound",
    "StoreError",
    "TemplateNotFound",
    "TransactionFailure",
]
