"""Graceful restart of the Palworld server.

The restart runs in two stages:
1. RestartSequencer counts down over RCON (one broadcast per checkpoint),
   then announces the restart, saves the world and closes the session.
2. restart_server runs the configured restart command.

Every RCON step is allowed to fail. A failed broadcast is logged and the
countdown carries on with its original timing; a failed save or disconnect
is logged as well. The restart command runs no matter what happened during
the countdown, since restarting the server is the point of the exercise.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

import structlog

from palworld_companion.rcon import RconClient, RconError
from palworld_companion.system.commands import CommandFailedError, CommandResult, run_command

from .schedule import (
    DEFAULT_WARNING_SCHEDULE,
    RESTART_MESSAGE,
    WarningCheckpoint,
    compute_pauses,
    format_restart_warning,
    validate_schedule,
)

if TYPE_CHECKING:
    from palworld_companion.config import CompanionSettings

SleepFunc = Callable[[float], None]
CommandRunner = Callable[[Sequence[str]], CommandResult]


@dataclass
class RestartOutcome:
    """What happened during one restart attempt.

    A restart counts as attempted as soon as it is started, whatever the
    individual steps did, so the caller always reconnects afterwards.
    """

    warnings_sent: int = 0
    warnings_failed: int = 0
    saved: bool = False
    disconnected: bool = False
    restart_command_succeeded: bool = False


class RestartSequencer:
    """Counts down to a restart over RCON, then saves and disconnects.

    Example:
        >>> sequencer = RestartSequencer(client, DEFAULT_WARNING_SCHEDULE)
        >>> outcome = sequencer.run()
        >>> outcome.saved
        True
    """

    def __init__(
        self,
        client: RconClient,
        schedule: Sequence[WarningCheckpoint] = DEFAULT_WARNING_SCHEDULE,
        *,
        sleep: SleepFunc = time.sleep,
        logger: Optional[Any] = None,
    ) -> None:
        """Initialize the sequencer.

        Args:
            client: RCON client, borrowed from the monitor loop.
            schedule: Strictly decreasing countdown checkpoints.
            sleep: Blocking sleep function, replaceable for testing.
            logger: Bound logger; defaults to this module's structlog logger.

        Raises:
            ValueError: If the schedule is empty or not strictly decreasing.
        """
        validate_schedule(schedule)
        self.client = client
        self.schedule = list(schedule)
        self._sleep = sleep
        self._log = logger or structlog.get_logger(__name__)

    def run(self, outcome: Optional[RestartOutcome] = None) -> RestartOutcome:
        """Run the countdown, announce the restart, save and disconnect.

        Never raises for RCON failures; they are logged and recorded in the
        returned outcome.
        """
        outcome = outcome or RestartOutcome()
        self.count_down(outcome)

        self._broadcast(RESTART_MESSAGE, outcome)

        try:
            saved_message = self.client.save().strip()
            outcome.saved = True
            self._log.info("world_saved", response=saved_message)
        except RconError as e:
            self._log.error("save_failed", error=str(e))

        try:
            self.client.disconnect()
            outcome.disconnected = True
        except RconError as e:
            self._log.error("disconnect_failed", error=str(e))

        return outcome

    def count_down(self, outcome: RestartOutcome) -> None:
        """Broadcast each checkpoint and sleep until the next one."""
        for checkpoint, pause in zip(self.schedule, compute_pauses(self.schedule)):
            message = format_restart_warning(checkpoint)
            self._log.info("restart_warning", message=message)
            self._broadcast(message, outcome, count=True)
            self._sleep(pause.total_seconds())

    def _broadcast(self, message: str, outcome: RestartOutcome, count: bool = False) -> None:
        try:
            self.client.broadcast(message)
        except RconError as e:
            self._log.error("broadcast_failed", message=message, error=str(e))
            if count:
                outcome.warnings_failed += 1
            return
        if count:
            outcome.warnings_sent += 1


def restart_server(
    settings: "CompanionSettings",
    client: RconClient,
    *,
    sleep: SleepFunc = time.sleep,
    runner: CommandRunner = run_command,
    logger: Optional[Any] = None,
) -> RestartOutcome:
    """Gracefully restart the server.

    Runs the RCON countdown with the configured schedule, then the
    configured restart command. The command runs even if every RCON step
    failed.

    Args:
        settings: Loaded configuration.
        client: RCON client owned by the monitor loop.
        sleep: Blocking sleep function, replaceable for testing.
        runner: Command runner, replaceable for testing.
        logger: Bound logger; defaults to this module's structlog logger.

    Returns:
        RestartOutcome describing each step.
    """
    log = logger or structlog.get_logger(__name__)
    outcome = RestartOutcome()

    sequencer = RestartSequencer(
        client,
        settings.warning_schedule,
        sleep=sleep,
        logger=log,
    )
    try:
        sequencer.run(outcome)
    except Exception as e:
        log.error("restart_sequence_failed", error=str(e))

    restart_args = settings.get_restart_args()
    log.info("restarting_server", command=restart_args)
    try:
        result = runner(restart_args)
    except CommandFailedError as e:
        log.error("restart_command_failed", command=restart_args, error=str(e))
        return outcome

    outcome.restart_command_succeeded = result.ok
    if result.ok:
        log.info("restart_command_complete", output=result.output)
    else:
        log.error(
            "restart_command_failed",
            command=restart_args,
            exit_code=result.exit_code,
            output=result.output,
        )
    return outcome
