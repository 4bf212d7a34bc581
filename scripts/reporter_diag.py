"""Cline issue reporter diagnostics CLI."""

from __future__ import annotations

import argparse
import asyncio
import json

from cline_reporter_mcp.commands import CommandRunner
from cline_reporter_mcp.config import ReporterSettings
from cline_reporter_mcp.labels import LabelLoadError, load_labels
from cline_reporter_mcp.metadata import ApiMetadata, MetadataLocator, MetadataLocatorError
from cline_reporter_mcp.report import (
    IssueReport,
    collect_environment,
    detect_extension_version,
    format_issue_body,
)


def load_settings() -> ReporterSettings:
    return ReporterSettings()


def build_runner() -> CommandRunner:
    return CommandRunner()


def locate_metadata(settings: ReporterSettings) -> ApiMetadata:
    try:
        return MetadataLocator(settings.extension_id).locate()
    except MetadataLocatorError as exc:
        print(f"Metadata unavailable: {exc}")
        raise SystemExit(1)


def cmd_metadata(args: argparse.Namespace) -> None:
    settings = load_settings()
    metadata = locate_metadata(settings)
    if args.json:
        print(json.dumps(metadata.as_dict(), indent=2))
    else:
        print(f"{metadata.ide_used}: {metadata.api_provider} / {metadata.model_name}")


def cmd_version(args: argparse.Namespace) -> None:
    settings = load_settings()
    version = asyncio.run(
        detect_extension_version(build_runner(), settings.ide_commands, settings.extension_id)
    )
    print(version)


def cmd_preview(args: argparse.Namespace) -> None:
    settings = load_settings()
    labels = list(args.label or [])
    try:
        vocabulary = load_labels(settings.labels_path)
    except LabelLoadError as exc:
        print(f"Labels unavailable: {exc}")
        raise SystemExit(1)
    unknown = [label for label in labels if label not in vocabulary]
    if unknown:
        print(f"Unknown labels: {', '.join(unknown)}")
        raise SystemExit(2)

    metadata = locate_metadata(settings)
    version = asyncio.run(
        detect_extension_version(build_runner(), settings.ide_commands, settings.extension_id)
    )
    report = IssueReport(
        title=args.title,
        body=format_issue_body(
            description=args.description,
            version=version,
            metadata=metadata,
            environment=collect_environment(),
        ),
        repository=settings.repository,
        labels=labels,
    )
    print(report.preview_json())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cline issue reporter diagnostics")
    sub = parser.add_subparsers(dest="cmd")

    p_metadata = sub.add_parser("metadata", help="Show the provider, model and IDE of the latest task")
    p_metadata.add_argument("--json", action="store_true", help="Output JSON")
    p_metadata.set_defaults(func=cmd_metadata)

    p_version = sub.add_parser("version", help="Probe IDE CLIs for the installed Cline version")
    p_version.set_defaults(func=cmd_version)

    p_preview = sub.add_parser("preview", help="Print the issue preview without submitting it")
    p_preview.add_argument("--title", required=True)
    p_preview.add_argument("--description", required=True)
    p_preview.add_argument(
        "--label",
        action="append",
        help="Label to attach (repeatable)",
    )
    p_preview.set_defaults(func=cmd_preview)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
