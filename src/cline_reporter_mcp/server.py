"""FastMCP server bootstrap for the Cline issue reporter."""

import json
import logging
import shutil
import sys
from datetime import datetime, timezone
from typing import Optional, Sequence

from fastmcp import Context, FastMCP

from . import __version__
from .commands import CommandRunner
from .config import ReporterSettings, get_settings
from .labels import load_labels
from .metadata import MetadataLocator, MetadataLocatorError
from .report import collect_environment
from .tools import register_tools


def configure_logging(level: str) -> None:
    """Configure root logging; records go to stderr since stdout carries the protocol."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def create_server(
    settings: Optional[ReporterSettings] = None,
    *,
    locator: MetadataLocator | None = None,
    runner: CommandRunner | None = None,
    labels: Sequence[str] | None = None,
) -> FastMCP:
    """Instantiate the FastMCP server with both reporting tools and a status resource."""

    settings = settings or get_settings()
    locator = locator or MetadataLocator(settings.extension_id)
    runner = runner or CommandRunner()
    vocabulary = tuple(labels) if labels is not None else load_labels(settings.labels_path)

    server = FastMCP(
        name="cline-issue-reporter",
        version=__version__,
        instructions=(
            "Collects Cline diagnostics (version, IDE, OS, API provider and model) and files "
            f"GitHub issues against {settings.repository}. Always call preview_cline_issue "
            "and confirm with the user before report_cline_issue."
        ),
    )

    handles = register_tools(
        server,
        settings=settings,
        locator=locator,
        runner=runner,
        labels=vocabulary,
    )

    def _status(context: Context | None = None) -> str:
        """Return a JSON string summarizing reporter readiness."""

        environment = collect_environment()
        try:
            metadata = locator.locate().as_dict()
            metadata_error: str | None = None
        except MetadataLocatorError as exc:
            metadata = None
            metadata_error = str(exc)

        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "server_version": __version__,
            "log_level": settings.log_level,
            "repository": settings.repository,
            "labels": list(handles.labels),
            "os": {
                "platform": environment.os_platform,
                "release": environment.os_release,
            },
            "gh": {
                "path": settings.gh_path,
                "available": shutil.which(settings.gh_path) is not None,
            },
            "metadata": {
                "extension_id": locator.extension_id,
                "result": metadata,
                "error": metadata_error,
            },
            "request_id": getattr(context, "request_id", None),
        }
        return json.dumps(payload)

    server.resource(
        "resource://cline-reporter/status",
        name="cline_reporter_status",
        title="Cline Issue Reporter Status",
        description="Reports whether metadata and the GitHub CLI are available to the reporter.",
        mime_type="application/json",
        tags={"status", "health"},
    )(_status)

    setattr(server, "locator", locator)
    setattr(server, "command_runner", runner)
    setattr(server, "tool_handles", handles)
    setattr(server, "status_resource", _status)
    return server


def main() -> None:
    """Entry point for running the reporter MCP server via CLI."""

    settings = get_settings()
    configure_logging(settings.log_level)

    server = create_server(settings)
    logging.getLogger(__name__).info(
        "Launching Cline issue reporter MCP server",
        extra={
            "version": __version__,
            "log_level": settings.log_level,
            "repository": settings.repository,
        },
    )
    server.run()


if __name__ == "__main__":
    main()
