"""Persisted pointer to the project a caller last worked on."""

from __future__ import annotations

import json
import logging
from pathlib import Path

LOGGER = logging.getLogger(__name__)

_KEY = "active_project_id"


class ActiveProjectPointer:
    """Small JSON document remembering the last active project id.

    It lives outside the transactional store; losing it is harmless because
    callers fall back to the most recently updated project.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def get(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.warning("Failed to read active project from %s: %s", self.path, exc)
            return None
        value = payload.get(_KEY) if isinstance(payload, dict) else None
        return value if isinstance(value, str) and value else None

    def set(self, project_id: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({_KEY: project_id}), encoding="utf-8")
        except OSError as exc:
            LOGGER.warning("Failed to persist active project to %s: %s", self.path, exc)

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.warning("Failed to clear active project at %s: %s", self.path, exc)


__all__ = ["ActiveProjectPointer"]
