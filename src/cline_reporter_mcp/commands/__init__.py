"""External command orchestration utilities."""

from .runner import (
    CommandNotFoundError,
    CommandResult,
    CommandRunner,
    CommandRunnerError,
    FakeCommandRunner,
)
from .utils import escape_shell_arg, shell_join

__all__ = [
    "CommandNotFoundError",
    "CommandResult",
    "CommandRunner",
    "CommandRunnerError",
    "FakeCommandRunner",
    "escape_shell_arg",
    "shell_join",
]
