"""Models for Cline task metadata sidecar files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ModelUsageEntry(BaseModel):
    """One model/provider usage record inside ``task_metadata.json``."""

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    ts: float | None = Field(default=None, description="Epoch timestamp of the usage record.")
    model_id: str | None = Field(default=None, description="Model identifier.")
    model_provider_id: str | None = Field(default=None, description="API provider identifier.")
    mode: str | None = Field(default=None, description="Cline mode active at the time, if any.")


class TaskMetadata(BaseModel):
    """Top-level structure of ``task_metadata.json``."""

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    model_usage: list[ModelUsageEntry] = Field(
        ...,
        min_length=1,
        description="Usage history; the entry with the highest timestamp is authoritative.",
    )

    def latest_usage(self) -> ModelUsageEntry | None:
        """Return the entry with the maximum timestamp (first one on ties).

        Entries without a timestamp are skipped; ``None`` when no entry has one.
        """

        stamped = [entry for entry in self.model_usage if entry.ts is not None]
        if not stamped:
            return None
        return max(stamped, key=lambda entry: entry.ts)


@dataclass(frozen=True, slots=True)
class CandidateDirectory:
    ide: str
    path: Path


@dataclass(frozen=True, slots=True)
class ApiMetadata:
    api_provider: str
    model_name: str
    ide_used: str

    def as_dict(self) -> dict[str, str]:
        return {
            "api_provider": self.api_provider,
            "model_name": self.model_name,
            "ide_used": self.ide_used,
        }


__all__ = ["ApiMetadata", "CandidateDirectory", "ModelUsageEntry", "TaskMetadata"]
