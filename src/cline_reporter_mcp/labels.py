"""GitHub label vocabulary accepted by the reporting tools."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_LABELS: tuple[str, ...] = (
    "Bounty",
    "Bug",
    "dependencies",
    "documentation",
    "Enhancement",
    "Good First Issue",
    "Help Wanted",
    "In Progress",
    "Invalid",
    "javascript",
    "Question",
    "Reported by Cline",
    "RFR",
    "Triaged",
    "Won't/Unable to Fix",
)


class LabelLoadError(RuntimeError):
    """Raised when a label vocabulary file cannot be parsed."""


class LabelVocabulary(BaseModel):
    """Label names that callers may attach to an issue."""

    labels: tuple[str, ...] = Field(..., min_length=1)

    @field_validator("labels", mode="before")
    @classmethod
    def _normalize(cls, value):
        if not isinstance(value, (list, tuple)):
            raise ValueError("labels must be a list of strings")
        normalized: list[str] = []
        for item in value:
            if not isinstance(item, str) or not item.strip():
                raise ValueError("labels must be non-empty strings")
            if item.strip() not in normalized:
                normalized.append(item.strip())
        return tuple(normalized)


def load_labels(path: Path | None = None) -> tuple[str, ...]:
    """Return the label vocabulary, read from ``path`` when one is given.

    The file may hold either a plain YAML list or a mapping with a ``labels``
    key.
    """

    if path is None:
        return DEFAULT_LABELS

    try:
        document = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise LabelLoadError(f"Failed to read label file {path}: {exc}") from exc
    except yaml.YAMLError as exc:  # pragma: no cover - library type
        raise LabelLoadError(f"Failed to parse YAML in {path}: {exc}") from exc

    if isinstance(document, list):
        document = {"labels": document}
    if not isinstance(document, dict):
        raise LabelLoadError(f"Label file {path} must contain a list or a 'labels' mapping")

    try:
        return LabelVocabulary.model_validate(document).labels
    except ValidationError as exc:
        raise LabelLoadError(f"Label validation error in {path}: {exc}") from exc


__all__ = ["DEFAULT_LABELS", "LabelLoadError", "LabelVocabulary", "load_labels"]
