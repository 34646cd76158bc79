"""HTTP client for communicating with the Codeshelf API."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import requests

_LOGGER = logging.getLogger(__name__)


class ApiError(RuntimeError):
    """Raised when the API returns an error response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApiClient:
    """Simple HTTP client for interacting with the Codeshelf API."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url or os.environ.get(
            "CODESHELF_API_URL", "http://localhost:8000"
        )
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = self._url(path)
        _LOGGER.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:  # pragma: no cover - network errors
            raise ApiError(f"Failed to reach API at {url}") from exc

        if response.status_code >= 400:
            _LOGGER.error(
                "API returned error %s: %s", response.status_code, response.text
            )
            raise ApiError(
                f"API returned error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return response

    def _json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._request(method, path, **kwargs)
        try:
            return response.json()
        except ValueError as exc:  # pragma: no cover - unexpected API payloads
            raise ApiError("API response was not valid JSON") from exc

    def list_projects(self) -> list[dict[str, Any]]:
        return self._json("GET", "/projects")

    def create_project(self, template_id: str, name: str | None = None) -> dict[str, Any]:
        """Create a project from a template and return its metadata."""

        data = self._json(
            "POST", "/projects", json={"template_id": template_id, "name": name}
        )
        _LOGGER.info("Project %s created from template %s", data.get("id"), template_id)
        return data

    def import_archive(self, archive_path: Path) -> dict[str, Any]:
        """Upload a zip archive as a new project."""

        with archive_path.open("rb") as handle:
            files = {"archive": (archive_path.name, handle, "application/zip")}
            data = self._json("POST", "/projects/import", files=files)
        _LOGGER.info("Imported %s as project %s", archive_path, data.get("id"))
        return data

    def export_project(self, project_id: str) -> bytes:
        response = self._request("GET", f"/projects/{project_id}/export")
        return response.content

    def undo(self, project_id: str) -> dict[str, Any]:
        return self._json("POST", f"/projects/{project_id}/undo")

    def redo(self, project_id: str) -> dict[str, Any]:
        return self._json("POST", f"/projects/{project_id}/redo")


__all__ = ["ApiClient", "ApiError"]
