"""Graceful server restart: countdown schedule and restart sequence."""

from palworld_companion.restart.schedule import (
    DEFAULT_WARNING_SCHEDULE,
    WarningCheckpoint,
    compute_pauses,
    format_restart_warning,
    minutes,
    pluralize,
    seconds,
    validate_schedule,
)
from palworld_companion.restart.sequencer import (
    RestartOutcome,
    RestartSequencer,
    restart_server,
)

__all__ = [
    "DEFAULT_WARNING_SCHEDULE",
    "RestartOutcome",
    "RestartSequencer",
    "WarningCheckpoint",
    "compute_pauses",
    "format_restart_warning",
    "minutes",
    "pluralize",
    "restart_server",
    "seconds",
    "validate_schedule",
]
