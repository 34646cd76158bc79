"""Local, version-controlled file store for multi-file coding projects."""

from importlib import metadata

from .fingerprint import fingerprint
from .projects import ArchiveCodec, FileStore, ProjectStore, SnapshotEngine

__all__ = [
    "__version__",
    "ArchiveCodec",
    "FileStore",
    "ProjectStore",
    "SnapshotEngine",
    "fingerprint",
]


def __getattr__(name: str) -> str:
    if name == "__version__":
        try:
            return metadata.version("codeshelf")
        except (
            metadata.PackageNotFoundError
        ):  # pragma: no cover - fallback for dev installs
            return "0.0.0"
    raise AttributeError(name)
