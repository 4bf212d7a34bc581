"""Locate the active Cline task and read its model/provider metadata."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Mapping

from pydantic import ValidationError

from .models import ApiMetadata, CandidateDirectory, TaskMetadata

logger = logging.getLogger(__name__)

IDE_APPS: tuple[str, ...] = ("Code", "Cursor", "Windsurf")
DEFAULT_EXTENSION_ID = "saoudrizwan.claude-dev"
METADATA_FILENAME = "task_metadata.json"


class MetadataLocatorError(RuntimeError):
    """Base class for metadata lookup failures."""


class UnsupportedPlatformError(MetadataLocatorError):
    """Raised when the host platform has no known storage convention."""


class TaskNotFoundError(MetadataLocatorError):
    """Raised when no candidate directory holds a numeric task record."""


class MetadataFormatError(MetadataLocatorError):
    """Raised when the task metadata file is missing, unparseable, or invalid."""


def _storage_root(platform: str, home: Path, environ: Mapping[str, str]) -> Path:
    if platform == "win32":
        app_data = environ.get("APPDATA")
        if not app_data:
            raise UnsupportedPlatformError("APPDATA environment variable is not defined")
        return Path(app_data)
    if platform == "darwin":
        return home / "Library" / "Application Support"
    if platform.startswith("linux"):
        return home / ".config"
    raise UnsupportedPlatformError(f"Unsupported operating system: {platform}")


def _latest_task_number(path: Path) -> int | None:
    try:
        numbers = [
            int(entry.name)
            for entry in path.iterdir()
            if entry.name.isascii() and entry.name.isdigit() and entry.is_dir()
        ]
    except OSError as exc:
        logger.debug("Skipping task directory %s: %s", path, exc)
        return None
    return max(numbers) if numbers else None


class MetadataLocator:
    """Finds the most recent Cline task across supported IDE installations.

    Platform, home directory and environment are read at lookup time unless
    given explicitly, so a single locator can serve many requests.
    """

    def __init__(
        self,
        extension_id: str = DEFAULT_EXTENSION_ID,
        *,
        platform: str | None = None,
        home: Path | None = None,
        environ: Mapping[str, str] | None = None,
        ide_apps: tuple[str, ...] = IDE_APPS,
    ) -> None:
        self._extension_id = extension_id
        self._platform = platform
        self._home = home
        self._environ = environ
        self._ide_apps = ide_apps

    @property
    def extension_id(self) -> str:
        return self._extension_id

    def candidate_directories(self) -> list[CandidateDirectory]:
        """Return one ``tasks`` directory per supported IDE for this platform."""

        platform = self._platform or sys.platform
        home = self._home or Path.home()
        environ = self._environ if self._environ is not None else os.environ
        root = _storage_root(platform, home, environ)
        return [
            CandidateDirectory(
                ide=app,
                path=root / app / "User" / "globalStorage" / self._extension_id / "tasks",
            )
            for app in self._ide_apps
        ]

    def latest_task(self) -> tuple[CandidateDirectory, int]:
        """Return the candidate holding the highest task number, and that number."""

        best: tuple[CandidateDirectory, int] | None = None
        for candidate in self.candidate_directories():
            if not candidate.path.is_dir():
                continue
            number = _latest_task_number(candidate.path)
            if number is None:
                continue
            if best is None or number > best[1]:
                best = (candidate, number)

        if best is None:
            raise TaskNotFoundError("Could not find any valid task directories")
        return best

    def read_task_metadata(self, task_dir: Path) -> TaskMetadata:
        metadata_file = task_dir / METADATA_FILENAME
        try:
            document = json.loads(metadata_file.read_text(encoding="utf-8"))
            return TaskMetadata.model_validate(document)
        except (OSError, ValueError) as exc:
            # pydantic's ValidationError is a ValueError
            reason = _describe(exc)
            raise MetadataFormatError(f"Error reading or parsing metadata file: {reason}") from exc

    def locate(self) -> ApiMetadata:
        """Return provider, model and IDE for the most recent task."""

        candidate, number = self.latest_task()
        ide_used = candidate.ide
        metadata = self.read_task_metadata(candidate.path / str(number))

        latest = metadata.latest_usage()
        if latest is None:
            raise MetadataFormatError(
                "Error reading or parsing metadata file: "
                "Invalid metadata format: no model_usage entry has a timestamp"
            )
        if not latest.model_provider_id or not latest.model_id:
            raise MetadataFormatError(
                "Error reading or parsing metadata file: "
                "Invalid metadata format: latest entry missing required fields"
            )

        logger.debug(
            "Located task metadata",
            extra={"task": number, "ide": ide_used, "path": str(candidate.path)},
        )
        return ApiMetadata(
            api_provider=latest.model_provider_id,
            model_name=latest.model_id,
            ide_used=ide_used,
        )


def _describe(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        errors = exc.errors()
        if any(tuple(error.get("loc", ())) == ("model_usage",) for error in errors):
            return "Invalid metadata format: model_usage array missing or empty"
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "document"
        return f"Invalid metadata format: {location}: {first.get('msg')}"
    if isinstance(exc, FileNotFoundError):
        return f"{exc.filename} does not exist"
    return str(exc)


__all__ = [
    "DEFAULT_EXTENSION_ID",
    "IDE_APPS",
    "METADATA_FILENAME",
    "MetadataFormatError",
    "MetadataLocator",
    "MetadataLocatorError",
    "TaskNotFoundError",
    "UnsupportedPlatformError",
]
