from __future__ import annotations

import asyncio
import json
import logging

import pytest

from cline_reporter_mcp.commands import CommandNotFoundError, CommandResult, CommandRunnerError, FakeCommandRunner
from cline_reporter_mcp.metadata import ApiMetadata
from cline_reporter_mcp.report import (
    GH_AUTH_MESSAGE,
    GH_NOT_FOUND_MESSAGE,
    NO_STDOUT_MESSAGE,
    EnvironmentInfo,
    IssueReport,
    IssueSubmissionError,
    detect_extension_version,
    format_issue_body,
    submit_issue,
)

EXTENSION = "saoudrizwan.claude-dev"


def result(stdout: str = "", stderr: str = "", returncode: int = 0) -> CommandResult:
    return CommandResult(command="stub", returncode=returncode, stdout=stdout, stderr=stderr)


def make_report(labels: list[str] | None = None) -> IssueReport:
    return IssueReport(title="T", body="B", repository="cline/cline", labels=labels or [])


def test_version_from_first_ide_that_knows_it() -> None:
    runner = FakeCommandRunner(
        {
            "code": result(returncode=1, stderr="boom"),
            "cursor": result(stdout="ms-python.python@2024.1.0\nsaoudrizwan.claude-dev@3.12.1\n"),
            "windsurf": result(stdout="saoudrizwan.claude-dev@9.9.9\n"),
        }
    )

    version = asyncio.run(detect_extension_version(runner, ("code", "cursor", "windsurf"), EXTENSION))

    assert version == "3.12.1"
    assert [program for program, _ in runner.invocations] == ["code", "cursor"]
    assert runner.invocations[0][1] == ("--list-extensions", "--show-versions")


def test_version_unknown_when_no_ide_available(caplog: pytest.LogCaptureFixture) -> None:
    runner = FakeCommandRunner(
        {
            "code": result(stdout="other.extension@1.0.0\n"),
            "windsurf": CommandRunnerError("permission denied"),
        }
    )

    with caplog.at_level(logging.WARNING):
        version = asyncio.run(detect_extension_version(runner, ("code", "cursor", "windsurf"), EXTENSION))

    assert version == "unknown"
    assert "Could not determine Cline version" in caplog.text


def test_body_layout() -> None:
    body = format_issue_body(
        description="Line one\nLine *two*",
        version="3.12.1",
        metadata=ApiMetadata(api_provider="anthropic", model_name="claude-sonnet", ide_used="Code"),
        environment=EnvironmentInfo(os_platform="linux", os_release="6.8.0"),
    )

    assert body == (
        "**Reported by:** User via Cline Issue Reporter MCP\n"
        "**Cline Version:** 3.12.1\n"
        "**IDE:** Code\n"
        "**OS:** linux (6.8.0)\n"
        "**API Provider:** anthropic\n"
        "**Model:** claude-sonnet\n"
        "\n"
        "---\n"
        "\n"
        "**Description:**\n"
        "Line one\nLine *two*"
    )


def test_preview_json_defaults_labels() -> None:
    payload = json.loads(make_report().preview_json())

    assert payload == {"title": "T", "body": "B", "labels": [], "repository": "cline/cline"}


def test_gh_arguments_join_labels() -> None:
    args = make_report(["Bug", "Help Wanted"]).gh_arguments()

    assert args == [
        "issue",
        "create",
        "--repo",
        "cline/cline",
        "--title",
        "T",
        "--body",
        "B",
        "--label",
        "Bug,Help Wanted",
    ]
    assert "--label" not in make_report().gh_arguments()


def test_submit_returns_stdout_unmodified_despite_stderr() -> None:
    url = "https://github.com/cline/cline/issues/4242\n"
    runner = FakeCommandRunner({"gh": result(stdout=url, stderr="Creating issue in cline/cline\n")})

    output = asyncio.run(submit_issue(runner, make_report(["Bug"])))

    assert output == url
    program, args = runner.invocations[0]
    assert program == "gh"
    assert args[-2:] == ("--label", "Bug")


def test_submit_stderr_only_is_failure() -> None:
    runner = FakeCommandRunner({"gh": result(stderr="could not add label: 'Nope' not found")})

    with pytest.raises(IssueSubmissionError) as excinfo:
        asyncio.run(submit_issue(runner, make_report()))

    assert str(excinfo.value) == "GitHub CLI Error: could not add label: 'Nope' not found"


def test_submit_empty_output_reports_success() -> None:
    runner = FakeCommandRunner({"gh": result()})

    assert asyncio.run(submit_issue(runner, make_report())) == NO_STDOUT_MESSAGE


@pytest.mark.parametrize(
    ("response", "expected"),
    [
        (CommandNotFoundError("gh: command not found"), GH_NOT_FOUND_MESSAGE),
        (result(returncode=127, stderr="sh: 1: gh: not found"), GH_NOT_FOUND_MESSAGE),
        (result(returncode=4, stderr="To get started with GitHub CLI, authentication required"), GH_AUTH_MESSAGE),
        (result(returncode=1, stderr="GraphQL: Could not resolve to a Repository"), "Command execution failed: GraphQL: Could not resolve to a Repository"),
        (result(returncode=2), "Command execution failed: exit code 2"),
    ],
)
def test_submit_failures_map_to_remediation(response, expected: str) -> None:
    runner = FakeCommandRunner({"gh": response})

    with pytest.raises(IssueSubmissionError) as excinfo:
        asyncio.run(submit_issue(runner, make_report()))

    assert str(excinfo.value) == expected


def test_submit_uses_configured_gh_path() -> None:
    runner = FakeCommandRunner({"/opt/gh/bin/gh": result(stdout="https://example/1")})

    asyncio.run(submit_issue(runner, make_report(), gh_path="/opt/gh/bin/gh"))

    assert runner.invocations[0][0] == "/opt/gh/bin/gh"
