"""Issue report composition and submission through the GitHub CLI."""

from __future__ import annotations

import json
import logging
import platform
import re
import sys
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .commands import CommandRunner, CommandRunnerError
from .metadata import ApiMetadata

logger = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"
NO_STDOUT_MESSAGE = "Issue reported successfully (no stdout from gh)."
GH_NOT_FOUND_MESSAGE = (
    "Error: GitHub CLI ('gh') not found. Please install it and authenticate (`gh auth login`)."
)
GH_AUTH_MESSAGE = "Error: GitHub CLI authentication required. Please run `gh auth login`."

_NOT_FOUND_MARKERS = ("gh not found", "command not found")
_AUTH_MARKERS = ("authentication required",)


class IssueSubmissionError(RuntimeError):
    """Raised when ``gh issue create`` does not produce an issue."""


@dataclass(frozen=True, slots=True)
class EnvironmentInfo:
    os_platform: str
    os_release: str


def collect_environment() -> EnvironmentInfo:
    return EnvironmentInfo(os_platform=sys.platform, os_release=platform.release())


async def detect_extension_version(
    runner: CommandRunner,
    ide_commands: Iterable[str],
    extension_id: str,
) -> str:
    """Ask each IDE CLI in turn for the installed extension version.

    The first IDE whose extension listing mentions ``extension_id`` wins.
    Returns :data:`UNKNOWN_VERSION` when none does.
    """

    pattern = re.compile(rf"{re.escape(extension_id)}@([\d.]+)")
    for ide in ide_commands:
        try:
            result = await runner.run(ide, ["--list-extensions", "--show-versions"])
        except CommandRunnerError as exc:
            logger.debug("Extension listing unavailable for %s: %s", ide, exc)
            continue
        if not result.ok:
            logger.debug("Extension listing failed for %s with exit code %s", ide, result.returncode)
            continue
        match = pattern.search(result.stdout)
        if match:
            return match.group(1)

    logger.warning("Could not determine Cline version from any IDE")
    return UNKNOWN_VERSION


def format_issue_body(
    *,
    description: str,
    version: str,
    metadata: ApiMetadata,
    environment: EnvironmentInfo,
) -> str:
    return (
        "**Reported by:** User via Cline Issue Reporter MCP\n"
        f"**Cline Version:** {version}\n"
        f"**IDE:** {metadata.ide_used}\n"
        f"**OS:** {environment.os_platform} ({environment.os_release})\n"
        f"**API Provider:** {metadata.api_provider}\n"
        f"**Model:** {metadata.model_name}\n"
        "\n"
        "---\n"
        "\n"
        "**Description:**\n"
        f"{description}"
    )


@dataclass(slots=True)
class IssueReport:
    """A formatted issue ready to preview or submit."""

    title: str
    body: str
    repository: str
    labels: list[str] = field(default_factory=list)

    def preview(self) -> dict[str, object]:
        return {
            "title": self.title,
            "body": self.body,
            "labels": list(self.labels),
            "repository": self.repository,
        }

    def preview_json(self) -> str:
        return json.dumps(self.preview(), indent=2)

    def gh_arguments(self) -> list[str]:
        """Arguments for ``gh`` that create this issue."""

        args = [
            "issue",
            "create",
            "--repo",
            self.repository,
            "--title",
            self.title,
            "--body",
            self.body,
        ]
        if self.labels:
            args.extend(["--label", ",".join(self.labels)])
        return args


def _remediation(error_text: str, returncode: int | None = None) -> str:
    if returncode == 127 or any(marker in error_text for marker in _NOT_FOUND_MARKERS):
        return GH_NOT_FOUND_MESSAGE
    if any(marker in error_text for marker in _AUTH_MARKERS):
        return GH_AUTH_MESSAGE
    return f"Command execution failed: {error_text}"


async def submit_issue(runner: CommandRunner, report: IssueReport, *, gh_path: str = "gh") -> str:
    """Create the issue with ``gh`` and return its output (usually the issue URL).

    Raises :class:`IssueSubmissionError` carrying a user-facing message when
    the CLI is missing, unauthenticated, or otherwise fails.
    """

    args = report.gh_arguments()
    logger.info("Executing gh issue create", extra={"repository": report.repository, "title": report.title})

    try:
        result = await runner.run(gh_path, args)
    except CommandRunnerError as exc:
        logger.error("gh invocation failed: %s", exc)
        raise IssueSubmissionError(_remediation(str(exc))) from exc

    if not result.ok:
        error_text = result.stderr or result.stdout or f"exit code {result.returncode}"
        logger.error("gh exited with code %s: %s", result.returncode, error_text.strip())
        raise IssueSubmissionError(_remediation(error_text, result.returncode))

    if result.stderr:
        # gh writes progress text to stderr even on success
        if result.stdout:
            logger.info("gh command stderr alongside stdout: %s", result.stderr.strip())
        else:
            logger.error("gh command stderr: %s", result.stderr.strip())
            raise IssueSubmissionError(f"GitHub CLI Error: {result.stderr}")

    return result.stdout or NO_STDOUT_MESSAGE


def normalize_labels(labels: Sequence[str] | None) -> list[str]:
    return list(labels) if labels else []


__all__ = [
    "EnvironmentInfo",
    "GH_AUTH_MESSAGE",
    "GH_NOT_FOUND_MESSAGE",
    "IssueReport",
    "IssueSubmissionError",
    "NO_STDOUT_MESSAGE",
    "UNKNOWN_VERSION",
    "collect_environment",
    "detect_extension_version",
    "format_issue_body",
    "normalize_labels",
    "submit_issue",
]
