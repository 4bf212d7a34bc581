"""Cline task metadata discovery."""

from .locator import (
    IDE_APPS,
    MetadataFormatError,
    MetadataLocator,
    MetadataLocatorError,
    TaskNotFoundError,
    UnsupportedPlatformError,
)
from .models import ApiMetadata, CandidateDirectory, ModelUsageEntry, TaskMetadata

__all__ = [
    "ApiMetadata",
    "CandidateDirectory",
    "IDE_APPS",
    "MetadataFormatError",
    "MetadataLocator",
    "MetadataLocatorError",
    "ModelUsageEntry",
    "TaskMetadata",
    "TaskNotFoundError",
    "UnsupportedPlatformError",
]
