"""Probes for the local system: privileges and server memory usage."""

from __future__ import annotations

from typing import Callable, Sequence

import structlog

from .commands import CommandFailedError, CommandResult, run_command

logger = structlog.get_logger(__name__)

CommandRunner = Callable[[Sequence[str]], CommandResult]


class MemorySamplingError(Exception):
    """Raised when the server's memory usage cannot be determined."""

    def __init__(self, message: str, process_name: str) -> None:
        self.message = message
        self.process_name = process_name
        super().__init__(message)


def is_root_user(runner: CommandRunner = run_command) -> bool:
    """Check whether the current user is root according to `id -u`."""
    try:
        user_id = runner(["id", "-u"]).unwrap()
    except CommandFailedError as e:
        logger.warning("privilege_check_failed", error=str(e))
        return False
    return user_id.strip() == "0"


def parse_memory_output(output: str) -> float:
    """Parse the output of `ps -o %mem` into a percentage.

    The first line is the column header; the second line holds the value.

    Example:
        >>> parse_memory_output("%MEM\\n 3.5\\n")
        3.5

    Raises:
        ValueError: If there is no value line or it is not a number.
    """
    lines = output.split("\n")
    if len(lines) < 2:
        raise ValueError(f"Unexpected ps output: {output!r}")
    return float(lines[1].strip())


def find_pid(process_name: str, runner: CommandRunner = run_command) -> str:
    """Look up the PID of a running process with `pidof`.

    pidof prints every matching PID; the first one is used.

    Raises:
        MemorySamplingError: If no process with that name is running.
    """
    try:
        output = runner(["pidof", process_name]).unwrap()
    except CommandFailedError as e:
        raise MemorySamplingError(
            f"Process '{process_name}' is not running", process_name
        ) from e

    pids = output.split()
    if not pids:
        raise MemorySamplingError(f"Process '{process_name}' is not running", process_name)
    return pids[0]


def get_memory_usage_percentage(
    process_name: str,
    runner: CommandRunner = run_command,
) -> float:
    """Sample the memory usage of a process as a percentage of system memory.

    Args:
        process_name: Name of the process to look up with pidof.
        runner: Command runner, replaceable for testing.

    Returns:
        Memory usage percentage reported by ps.

    Raises:
        MemorySamplingError: If the process cannot be found or ps output cannot be parsed.
    """
    pid = find_pid(process_name, runner)

    try:
        output = runner(["ps", "-p", pid, "-o", "%mem"]).unwrap()
        usage = parse_memory_output(output)
    except (CommandFailedError, ValueError) as e:
        raise MemorySamplingError(
            f"Cannot read memory usage of '{process_name}' (PID {pid}): {e}",
            process_name,
        ) from e

    logger.debug("memory_sampled", process=process_name, pid=pid, percentage=usage)
    return usage
