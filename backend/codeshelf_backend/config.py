"""Application configuration and settings management."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the Codeshelf backend."""

    model_config = SettingsConfigDict(
        env_prefix="CODESHELF_", env_file=".env", extra="ignore"
    )

    database_url: str = "sqlite:///./codeshelf.db"
    max_projects: int = 10
    state_path: Path = Path("./.codeshelf/state.json")
    templates_path: Path | None = None
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of :class:`Settings`."""

    return Settings()


__all__ = ["Settings", "get_settings"]
