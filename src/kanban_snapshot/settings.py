"""
Kanban Snapshot Settings.

Configuration is read from environment variables prefixed with
``KANBAN_`` (or a local ``.env`` file).

Environment Variables:
    KANBAN_BACKEND_URL: Base URL of the kanban REST backend
    KANBAN_API_TOKEN: Bearer token sent with every backend request
    KANBAN_TIMEOUT: Request timeout in seconds
    KANBAN_EXPORT_DIR: Directory export files are written to
    KANBAN_DEFAULT_IMPORT_MODE: 'merge' or 'replace'
    KANBAN_LOG_LEVEL: Logging level name
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kanban_snapshot.constants import ImportMode


class Settings(BaseSettings):
    """Runtime settings for the snapshot server and backend adapter."""

    model_config = SettingsConfigDict(
        env_prefix="KANBAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend_url: str = Field(default="http://localhost:8000/api")
    api_token: Optional[str] = Field(default=None)
    timeout: float = Field(default=30.0, gt=0)
    export_dir: Path = Field(default=Path("."))
    default_import_mode: ImportMode = Field(default=ImportMode.MERGE)
    log_level: str = Field(default="INFO")

    @field_validator("backend_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()
