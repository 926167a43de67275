"""Local system access: running commands and probing processes."""

from palworld_companion.system.commands import CommandFailedError, CommandResult, run_command
from palworld_companion.system.process import (
    MemorySamplingError,
    find_pid,
    get_memory_usage_percentage,
    is_root_user,
    parse_memory_output,
)

__all__ = [
    "CommandFailedError",
    "CommandResult",
    "MemorySamplingError",
    "find_pid",
    "get_memory_usage_percentage",
    "is_root_user",
    "parse_memory_output",
    "run_command",
]
