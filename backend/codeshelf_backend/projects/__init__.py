"""Project storage: files, snapshot history, lifecycle and archives."""

from .archive import ArchiveCodec
from .files import FileStore
from .service import ProjectStore
from .snapshots import SnapshotEngine
from .templates import ProjectTemplate, get_template, load_templates

__all__ = [
    "ArchiveCodec",
    "FileStore",
    "ProjectStore",
    "ProjectTemplate",
    "SnapshotEngine",
    "get_template",
    "load_templates",
]
