from __future__ import annotations

import asyncio
import subprocess
from pathlib import Path

import pytest

from cline_reporter_mcp.commands import (
    CommandNotFoundError,
    CommandResult,
    CommandRunner,
    FakeCommandRunner,
    escape_shell_arg,
    shell_join,
)
from cline_reporter_mcp.commands.utils import sanitize_environment


def _write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    path.chmod(0o755)
    return path


def test_runner_executes_script(tmp_path: Path) -> None:
    script = _write_script(tmp_path / "code", "echo 'saoudrizwan.claude-dev@3.8.4'\n")

    result = asyncio.run(CommandRunner().run(str(script), ["--list-extensions"]))

    assert result.ok
    assert "saoudrizwan.claude-dev@3.8.4" in result.stdout
    assert result.command.startswith(escape_shell_arg(str(script)))


def test_runner_captures_stderr_and_exit_code(tmp_path: Path) -> None:
    script = _write_script(tmp_path / "gh", "echo 'HTTP 401: authentication required' >&2\nexit 4\n")

    result = asyncio.run(CommandRunner().run(str(script), ["issue", "create"]))

    assert not result.ok
    assert result.returncode == 4
    assert result.stdout == ""
    assert "authentication required" in result.stderr


def test_runner_passes_hostile_arguments_verbatim(tmp_path: Path) -> None:
    script = _write_script(tmp_path / "echo-args", 'for arg in "$@"; do printf "%s\\n" "$arg"; done\n')
    title = "It's broken; rm -rf / && echo $HOME `id`"

    result = asyncio.run(CommandRunner().run(str(script), ["--title", title, "--body", "two\nlines"]))

    assert result.stdout.splitlines() == ["--title", title, "--body", "two", "lines"]


def test_runner_missing_executable(tmp_path: Path) -> None:
    with pytest.raises(CommandNotFoundError, match="command not found"):
        asyncio.run(CommandRunner().run(str(tmp_path / "missing")))


def test_runner_missing_program_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("cline_reporter_mcp.commands.runner.shutil.which", lambda _: None)

    with pytest.raises(CommandNotFoundError, match="gh: command not found"):
        asyncio.run(CommandRunner().run("gh", ["--version"]))


def test_escape_shell_arg_survives_shell_round_trip() -> None:
    title = "Can't save; settings';echo pwned"

    process = subprocess.run(
        ["sh", "-c", f"printf '%s' {escape_shell_arg(title)}"],
        capture_output=True,
        text=True,
        check=True,
    )

    assert process.stdout == title


def test_escape_shell_arg_wraps_quotes() -> None:
    assert escape_shell_arg("plain") == "'plain'"
    assert escape_shell_arg("it's") == "'it'\\''s'"
    assert shell_join(["gh", "a b"]) == "'gh' 'a b'"


def test_fake_runner_records_invocations() -> None:
    fake = FakeCommandRunner(
        {"gh": CommandResult(command="gh", returncode=0, stdout="ok", stderr="")},
    )

    result = asyncio.run(fake.run("gh", ["issue", "create"]))

    assert result.stdout == "ok"
    assert fake.invocations == [("gh", ("issue", "create"))]


def test_fake_runner_unknown_program_is_not_found() -> None:
    fake = FakeCommandRunner()

    with pytest.raises(CommandNotFoundError):
        asyncio.run(fake.run("cursor"))


def test_sanitize_environment_strips_virtualenv(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYTHONPATH", "value")
    env = sanitize_environment({"GH_PROMPT_DISABLED": "1"})
    assert "PYTHONPATH" not in env
    assert env["GH_PROMPT_DISABLED"] == "1"
