"""Configuration management for the Cline issue reporter."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_IDE_COMMANDS: tuple[str, ...] = ("code", "cursor", "windsurf")


class ReporterSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    repository: str = Field(default="cline/cline", validation_alias="CLINE_REPORTER_REPOSITORY")
    gh_path: str = Field(default="gh", validation_alias="CLINE_REPORTER_GH_PATH")
    extension_id: str = Field(
        default="saoudrizwan.claude-dev", validation_alias="CLINE_REPORTER_EXTENSION_ID"
    )
    ide_commands: Annotated[tuple[str, ...], NoDecode] = Field(
        default=DEFAULT_IDE_COMMANDS, validation_alias="CLINE_REPORTER_IDE_COMMANDS"
    )
    labels_path: Path | None = Field(default=None, validation_alias="CLINE_REPORTER_LABELS_PATH")
    log_level: str = Field(default="INFO", validation_alias="CLINE_REPORTER_LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "CLINE_REPORTER_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("repository")
    @classmethod
    def _validate_repository(cls, value: str) -> str:
        normalized = value.strip()
        owner, sep, name = normalized.partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError("CLINE_REPORTER_REPOSITORY must look like 'owner/name'")
        return normalized

    @field_validator("ide_commands", mode="before")
    @classmethod
    def _parse_ide_commands(cls, value):
        if value is None or value == "":
            return DEFAULT_IDE_COMMANDS
        if isinstance(value, (list, tuple)):
            return tuple(str(item).strip() for item in value if str(item).strip())
        if isinstance(value, str):
            parts = [part.strip() for part in value.split(",") if part.strip()]
            return tuple(parts) or DEFAULT_IDE_COMMANDS
        raise ValueError("CLINE_REPORTER_IDE_COMMANDS must be a list or a comma-separated string")

    @field_validator("labels_path", mode="before")
    @classmethod
    def _blank_labels_path(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


@lru_cache(maxsize=1)
def get_settings() -> ReporterSettings:
    """Return cached settings instance."""

    settings = ReporterSettings()
    if settings.labels_path is not None:
        settings.labels_path = settings.labels_path.expanduser().resolve()
    return settings


__all__ = ["DEFAULT_IDE_COMMANDS", "ReporterSettings", "get_settings"]
