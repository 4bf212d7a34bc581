"""Async runner for external command-line tools (``gh`` and IDE CLIs)."""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from .utils import sanitize_environment, shell_join


class CommandRunnerError(RuntimeError):
    """Base class for command runner errors."""


class CommandNotFoundError(CommandRunnerError):
    """Raised when an executable cannot be located."""


@dataclass(slots=True)
class CommandResult:
    """Holds the outcome of a command invocation."""

    command: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Execute shell-escaped commands asynchronously.

    Arguments are quoted individually and the resulting command line is handed
    to the system shell, so user-supplied text never reaches the shell
    unquoted.
    """

    @staticmethod
    def resolve_executable(program: str) -> str:
        candidate = Path(program)
        if candidate.is_absolute() or len(candidate.parts) > 1:
            if candidate.exists() and candidate.is_file():
                return str(candidate)
            raise CommandNotFoundError(f"{program}: command not found")

        binary = shutil.which(program)
        if binary is None:
            raise CommandNotFoundError(f"{program}: command not found")
        return binary

    async def run(self, program: str, args: Sequence[str] = ()) -> CommandResult:
        executable = self.resolve_executable(program)
        command = shell_join([executable, *args])
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=sanitize_environment(),
            )
        except OSError as exc:
            raise CommandRunnerError(f"Failed to launch {program}: {exc}") from exc
        stdout_bytes, stderr_bytes = await process.communicate()
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        return CommandResult(command=command, returncode=process.returncode, stdout=stdout, stderr=stderr)


class FakeCommandRunner(CommandRunner):
    """Test double that returns canned results instead of spawning processes.

    ``responses`` maps a program name to a result, an exception to raise, or a
    list of either consumed in order. Unknown programs raise
    :class:`CommandNotFoundError`.
    """

    def __init__(
        self,
        responses: dict[str, CommandResult | Exception | Iterable[CommandResult | Exception]] | None = None,
    ) -> None:
        self._responses: dict[str, list[CommandResult | Exception]] = {}
        for program, response in (responses or {}).items():
            if isinstance(response, (CommandResult, Exception)):
                self._responses[program] = [response]
            else:
                self._responses[program] = list(response)
        self._invocations: list[tuple[str, tuple[str, ...]]] = []

    async def run(self, program: str, args: Sequence[str] = ()) -> CommandResult:  # type: ignore[override]
        self._invocations.append((program, tuple(args)))
        queue = self._responses.get(program)
        if not queue:
            raise CommandNotFoundError(f"{program}: command not found")
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def invocations(self) -> list[tuple[str, tuple[str, ...]]]:
        return self._invocations


__all__ = [
    "CommandNotFoundError",
    "CommandResult",
    "CommandRunner",
    "CommandRunnerError",
    "FakeCommandRunner",
]
