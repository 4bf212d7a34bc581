"""Tool registration for the Cline issue reporter."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Literal, Sequence

from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from ..commands import CommandRunner
from ..config import ReporterSettings
from ..labels import DEFAULT_LABELS
from ..metadata import MetadataLocator, MetadataLocatorError
from ..report import (
    IssueReport,
    IssueSubmissionError,
    collect_environment,
    detect_extension_version,
    format_issue_body,
    normalize_labels,
    submit_issue,
)

PREVIEW_TOOL = "preview_cline_issue"
REPORT_TOOL = "report_cline_issue"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ToolHandles:
    preview_issue: Any
    report_issue: Any
    labels: tuple[str, ...]


def register_tools(
    server: FastMCP,
    *,
    settings: ReporterSettings,
    locator: MetadataLocator,
    runner: CommandRunner,
    labels: Sequence[str] = DEFAULT_LABELS,
) -> ToolHandles:
    """Register the preview and report tools on the server."""

    vocabulary = tuple(labels)
    LabelName = Literal[vocabulary]  # type: ignore[valid-type]

    Title = Annotated[str, Field(description="The title for the GitHub issue.")]
    Description = Annotated[str, Field(description="The user's detailed description of the problem.")]
    Labels = Annotated[
        list[LabelName] | None,  # type: ignore[valid-type]
        Field(description="Optional: Array of allowed labels to apply to the issue."),
    ]

    async def _build_report(
        title: str,
        description: str,
        labels: list[str] | None,
        context: Context | None,
    ) -> IssueReport:
        environment = collect_environment()

        try:
            metadata = await asyncio.to_thread(locator.locate)
        except MetadataLocatorError as exc:
            _emit_log(context, "warning", "API metadata lookup failed", extra={"error": str(exc)})
            raise ToolError(
                f"Error retrieving API metadata: {exc}. "
                "Please try again or provide apiProvider and modelName manually."
            ) from exc

        version = await detect_extension_version(runner, settings.ide_commands, settings.extension_id)

        body = format_issue_body(
            description=description,
            version=version,
            metadata=metadata,
            environment=environment,
        )
        return IssueReport(
            title=title,
            body=body,
            repository=settings.repository,
            labels=normalize_labels(labels),
        )

    async def _preview_issue(
        title: Title,
        description: Description,
        labels: Labels = None,
        context: Context | None = None,
    ) -> str:
        """Return the issue that would be filed, as JSON, without submitting it."""

        report = await _build_report(title, description, labels, context)
        _emit_log(
            context,
            "debug",
            "Previewed issue",
            extra={"repository": report.repository, "label_count": len(report.labels)},
        )
        return report.preview_json()

    async def _report_issue(
        title: Title,
        description: Description,
        labels: Labels = None,
        context: Context | None = None,
    ) -> str:
        """File the issue with the GitHub CLI and return its output."""

        report = await _build_report(title, description, labels, context)
        try:
            output = await submit_issue(runner, report, gh_path=settings.gh_path)
        except IssueSubmissionError as exc:
            _emit_log(context, "error", "Issue submission failed", extra={"error": str(exc)})
            raise ToolError(str(exc)) from exc

        _emit_log(
            context,
            "info",
            "Reported issue",
            extra={"repository": report.repository, "output": output.strip()[:200]},
        )
        return output

    tool_preview = server.tool(
        name=PREVIEW_TOOL,
        description=(
            "Previews how an issue would look when reported to GitHub. Gathers OS info and "
            "Cline version automatically but does not submit the issue. This tool is always "
            "called first to preview the issue before reporting it."
        ),
    )(_preview_issue)

    tool_report = server.tool(
        name=REPORT_TOOL,
        description=(
            "Reports an issue to a GitHub repository using the locally authenticated GitHub "
            "CLI (`gh`). Gathers OS info and Cline version automatically."
        ),
    )(_report_issue)

    return ToolHandles(preview_issue=tool_preview, report_issue=tool_report, labels=vocabulary)


def _emit_log(
    context: Context | None,
    level: str,
    message: str,
    *,
    extra: dict[str, Any] | None = None,
) -> None:
    """Best-effort logging that prefers the MCP context logger when available."""

    payload = extra or {}

    if context is not None:
        ctx_logger = getattr(context, "logger", None)
        if ctx_logger is not None:
            log_method = getattr(ctx_logger, level, None)
            if callable(log_method):
                log_method(message, extra=payload)
                return

    fallback = getattr(logger, level, logger.info)
    fallback(message, extra=payload)


__all__ = ["PREVIEW_TOOL", "REPORT_TOOL", "ToolHandles", "register_tools"]
