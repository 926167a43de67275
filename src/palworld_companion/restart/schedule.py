"""Countdown schedule for restart warnings.

A schedule is an ordered list of checkpoints such as 10 minutes, 5 minutes,
1 minute, 30 seconds, ... 1 second. A warning is broadcast at each
checkpoint, and the pause before the next warning is the difference between
the two checkpoints. After the last checkpoint the remaining time is slept
out before the server is restarted.

Example usage:
    from palworld_companion.restart.schedule import (
        DEFAULT_WARNING_SCHEDULE,
        compute_pauses,
        format_restart_warning,
    )

    for checkpoint, pause in zip(DEFAULT_WARNING_SCHEDULE, compute_pauses(DEFAULT_WARNING_SCHEDULE)):
        print(format_restart_warning(checkpoint), pause)
"""

from __future__ import annotations

from datetime import timedelta
from typing import List, Literal, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

TimeUnit = Literal["minutes", "seconds"]

RESTART_MESSAGE = "Restarting server"


class WarningCheckpoint(BaseModel):
    """A point in the countdown at which players are warned.

    Attributes:
        duration: Time remaining until the restart, in `unit`.
        unit: Granularity used both for the duration and the broadcast text.
    """

    model_config = ConfigDict(frozen=True)

    duration: int = Field(..., ge=0, description="Time remaining until restart")
    unit: TimeUnit = Field(..., description="Unit of duration: minutes or seconds")

    @property
    def remaining(self) -> timedelta:
        """Time remaining until the restart as a timedelta."""
        if self.unit == "minutes":
            return timedelta(minutes=self.duration)
        return timedelta(seconds=self.duration)


def minutes(*values: int) -> List[WarningCheckpoint]:
    """Build minute-granularity checkpoints."""
    return [WarningCheckpoint(duration=value, unit="minutes") for value in values]


def seconds(*values: int) -> List[WarningCheckpoint]:
    """Build second-granularity checkpoints."""
    return [WarningCheckpoint(duration=value, unit="seconds") for value in values]


DEFAULT_WARNING_SCHEDULE: Tuple[WarningCheckpoint, ...] = tuple(
    minutes(10, 5, 1) + seconds(30, 10, 9, 8, 7, 6, 5, 4, 3, 2, 1)
)


def pluralize(value: int, noun: str) -> str:
    """Render `value noun`, adding an "s" unless value is exactly 1.

    Example:
        >>> pluralize(1, "minute")
        '1 minute'
        >>> pluralize(0, "second")
        '0 seconds'
    """
    if value == 1:
        return f"{value} {noun}"
    return f"{value} {noun}s"


def format_restart_warning(checkpoint: WarningCheckpoint) -> str:
    """Build the broadcast text for a checkpoint, e.g. "Restarting server in 5 minutes"."""
    noun = "minute" if checkpoint.unit == "minutes" else "second"
    return f"{RESTART_MESSAGE} in {pluralize(checkpoint.duration, noun)}"


def validate_schedule(checkpoints: Sequence[WarningCheckpoint]) -> None:
    """Check that checkpoints are strictly decreasing in remaining time.

    Raises:
        ValueError: If the schedule is empty or not strictly decreasing.
    """
    if not checkpoints:
        raise ValueError("Warning schedule must contain at least one checkpoint")

    for current, following in zip(checkpoints, checkpoints[1:]):
        if following.remaining >= current.remaining:
            raise ValueError(
                "Warning schedule must be strictly decreasing, but "
                f"{pluralize(following.duration, following.unit[:-1])} follows "
                f"{pluralize(current.duration, current.unit[:-1])}"
            )


def compute_pauses(checkpoints: Sequence[WarningCheckpoint]) -> List[timedelta]:
    """Compute how long to wait after each checkpoint.

    The pause after a checkpoint is the gap to the next checkpoint; the pause
    after the last checkpoint is its full remaining time. The pauses therefore
    always add up to the remaining time of the first checkpoint.

    Args:
        checkpoints: Strictly decreasing checkpoints.

    Returns:
        One pause per checkpoint, in the same order.
    """
    pauses: List[timedelta] = []
    for index, checkpoint in enumerate(checkpoints):
        if index + 1 < len(checkpoints):
            pauses.append(checkpoint.remaining - checkpoints[index + 1].remaining)
        else:
            pauses.append(checkpoint.remaining)
    return pauses
