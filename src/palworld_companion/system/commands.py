"""External command execution.

Commands are run with an argument vector (never through a shell) and their
standard output captured. Rather than folding failures into the output
string, run_command returns a CommandResult that callers can inspect,
unwrap into the output, or describe for logging.

Example usage:
    from palworld_companion.system.commands import run_command

    result = run_command(["id", "-u"])
    if result.ok:
        print(result.output)
    else:
        print(result.describe())
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

import structlog

logger = structlog.get_logger(__name__)


class CommandFailedError(Exception):
    """Raised when an external command cannot be run or exits non-zero."""

    def __init__(
        self,
        args: Sequence[str],
        exit_code: Optional[int] = None,
        output: str = "",
    ) -> None:
        self.command = list(args)
        self.exit_code = exit_code
        self.output = output
        if exit_code is None:
            message = f"Command could not be started: {' '.join(self.command)}"
        else:
            message = f"Command {' '.join(self.command)!r} failed with exit code {exit_code}"
        super().__init__(message)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of an external command.

    Attributes:
        args: Argument vector that was executed.
        exit_code: Process exit status.
        output: Captured standard output, stripped of surrounding whitespace.
    """

    args: Sequence[str]
    exit_code: int
    output: str

    @property
    def ok(self) -> bool:
        """True when the command exited with status 0."""
        return self.exit_code == 0

    def unwrap(self) -> str:
        """Return the output, raising CommandFailedError on a non-zero exit."""
        if not self.ok:
            raise CommandFailedError(self.args, self.exit_code, self.output)
        return self.output

    def describe(self) -> str:
        """Output on success, otherwise a one-line failure summary."""
        if self.ok:
            return self.output
        return f"Command failed with exit code {self.exit_code}"


def run_command(args: Sequence[str]) -> CommandResult:
    """Run an external command and capture its standard output.

    Standard error is inherited so the command's diagnostics end up next to
    our own log output.

    Args:
        args: Argument vector, e.g. ["ps", "-p", "1234", "-o", "%mem"].

    Returns:
        CommandResult with the exit code and stripped standard output.

    Raises:
        CommandFailedError: If the executable cannot be found or started.
    """
    if not args:
        raise ValueError("Cannot run an empty command")

    logger.debug("command_starting", command=list(args))
    try:
        completed = subprocess.run(
            list(args),
            stdout=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            text=True,
            check=False,
        )
    except OSError as e:
        raise CommandFailedError(args) from e

    result = CommandResult(
        args=tuple(args),
        exit_code=completed.returncode,
        output=(completed.stdout or "").strip(),
    )
    if not result.ok:
        logger.debug("command_failed", command=list(args), exit_code=result.exit_code)
    return result
