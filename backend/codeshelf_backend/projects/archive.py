"""Zip export and import of a project's current files."""

from __future__ import annotations

import io
import logging
import re
import zipfile
from typing import Iterable

from ..errors import ArchiveError, InvalidPath
from ..models import Project
from .files import FileStore
from .service import ProjectStore

LOGGER = logging.getLogger(__name__)

_REACT_PATTERN = re.compile(r"react", re.IGNORECASE)
_REACT_EXTENSIONS = (".tsx", ".jsx")
_ZIP_SUFFIX = re.compile(r"\.zip$", re.IGNORECASE)
DEFAULT_IMPORT_NAME = "Imported Project"


def detect_framework(entries: Iterable[tuple[str, str]]) -> str:
    """Guess whether archive entries belong to a React or vanilla project."""

    for path, content in entries:
        if _REACT_PATTERN.search(content) or path.endswith(_REACT_EXTENSIONS):
            return "react"
    return "vanilla"


def infer_entry_file(framework: str, paths: Iterable[str]) -> str:
    """Pick the file an editor should open first."""

    available = list(paths)
    if framework == "react":
        for candidate in ("src/App.tsx", "src/App.jsx"):
            if candidate in available:
                return candidate
    if "index.html" in available:
        return "index.html"
    return available[0] if available else "index.html"


def project_name_from_filename(filename: str | None) -> str:
    stem = _ZIP_SUFFIX.sub("", (filename or "").strip())
    return stem or DEFAULT_IMPORT_NAME


def read_entries(data: bytes) -> list[tuple[str, str]]:
    """Return ``(path, text)`` pairs for every file entry of a zip archive.

    Entries are decoded as UTF-8; undecodable bytes are replaced because
    binary files are not supported.
    """

    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            return [
                (info.filename, archive.read(info).decode("utf-8", errors="replace"))
                for info in archive.infolist()
                if not info.is_dir()
            ]
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        RuntimeError,
        NotImplementedError,
        EOFError,
    ) as exc:
        # RuntimeError: encrypted entry; NotImplementedError: unsupported compression.
        raise ArchiveError(f"Archive could not be read: {exc}") from exc


def check_entry_names(entries: Iterable[tuple[str, str]]) -> None:
    """Raise :class:`ArchiveError` unless every entry name is a canonical path.

    Names are stored verbatim so an exported archive reproduces the imported
    one; names the file store would rewrite are refused instead.
    """

    for name, _ in entries:
        try:
            canonical = FileStore.validate_path(name)
        except InvalidPath as exc:
            raise ArchiveError(f"Archive entry has an invalid path: {name!r}") from exc
        if canonical != name:
            raise ArchiveError(
                f"Archive entry {name!r} is not a canonical path (expected {canonical!r})"
            )


class ArchiveCodec:
    """Serialise projects to zip archives and seed projects from them."""

    def __init__(self, store: ProjectStore) -> None:
        self.store = store

    def export(self, project_id: str) -> bytes | None:
        """Return a zip of the project's current files, or ``None`` if missing."""

        if self.store.get(project_id) is None:
            return None
        files = self.store.list_files(project_id)

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for record in files:
                archive.writestr(record.path, record.content)
        LOGGER.info("Exported %d file(s) from project %s", len(files), project_id)
        return buffer.getvalue()

    def import_archive(self, data: bytes, filename: str | None = None) -> Project | None:
        """Create a project from a zip archive; ``None`` if empty or at capacity."""

        entries = read_entries(data)
        if not entries:
            LOGGER.warning("Archive %s contains no files", filename or "<upload>")
            return None
        check_entry_names(entries)

        files = dict(entries)
        framework = detect_framework(entries)
        return self.store.create_seeded(
            name=project_name_from_filename(filename),
            framework=framework,
            entry_file=infer_entry_file(framework, files),
            files=files,
            label="Imported archive",
        )


__all__ = [
    "ArchiveCodec",
    "check_entry_names",
    "DEFAULT_IMPORT_NAME",
    "detect_framework",
    "infer_entry_file",
    "project_name_from_filename",
    "read_entries",
]
