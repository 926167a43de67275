"""Memory monitor loop.

The monitor first waits for an RCON session, retrying every 10 seconds for
as long as it takes. It then checks the server's memory usage once per check
interval. When usage is above the threshold it restarts the server, sleeps
for the check interval to give the server time to come back up, and
reconnects.

Only one thing happens at a time: sample, maybe restart, sleep, maybe
reconnect, repeat. The RCON client is owned by the loop and lent to the
restart sequence.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, Callable, Optional

import structlog
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_never,
    wait_fixed,
)

from palworld_companion.config import CompanionSettings
from palworld_companion.rcon import ConnectionError, RconClient, RconError
from palworld_companion.restart import RestartOutcome, restart_server
from palworld_companion.system import MemorySamplingError, get_memory_usage_percentage

RECONNECT_DELAY_SECONDS = 10

SleepFunc = Callable[[float], None]
MemorySampler = Callable[[], float]
Restarter = Callable[[RconClient], RestartOutcome]


class MonitorState(Enum):
    """Lifecycle state of the monitor loop."""

    AWAITING_CONNECTION = "awaiting_connection"
    MONITORING = "monitoring"


class MonitorLoop:
    """Watches server memory usage and restarts the server when it runs high.

    Example:
        >>> client = RconClient(settings.server_host, settings.rcon_port, settings.rcon_password)
        >>> MonitorLoop(settings, client).run()  # never returns
    """

    def __init__(
        self,
        settings: CompanionSettings,
        client: RconClient,
        *,
        sampler: Optional[MemorySampler] = None,
        restarter: Optional[Restarter] = None,
        sleep: SleepFunc = time.sleep,
        logger: Optional[Any] = None,
    ) -> None:
        """Initialize the loop.

        Args:
            settings: Loaded configuration.
            client: RCON client; the loop takes ownership of it.
            sampler: Returns the server's memory usage percentage. Defaults
                to sampling settings.process_name with pidof and ps.
            restarter: Restarts the server. Defaults to restart_server.
            sleep: Blocking sleep function, replaceable for testing.
            logger: Bound logger; defaults to this module's structlog logger.
        """
        self.settings = settings
        self.client = client
        self.state = MonitorState.AWAITING_CONNECTION
        self._sleep = sleep
        self._log = logger or structlog.get_logger(__name__)
        self._sampler = sampler or self._sample_memory
        self._restarter = restarter or self._restart

    def run(self, max_iterations: Optional[int] = None) -> None:
        """Connect, then monitor forever.

        Args:
            max_iterations: Stop after this many checks. None (the default)
                runs until the process is killed.
        """
        self.wait_for_connection()

        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            self.run_iteration()
            iterations += 1

    def wait_for_connection(self) -> None:
        """Connect to RCON, retrying every RECONNECT_DELAY_SECONDS until it works."""
        self.state = MonitorState.AWAITING_CONNECTION
        self._log.info(
            "connecting_to_server",
            host=self.settings.server_host,
            port=self.settings.rcon_port,
        )

        retrying = Retrying(
            stop=stop_never,
            wait=wait_fixed(RECONNECT_DELAY_SECONDS),
            retry=retry_if_exception_type(ConnectionError),
            before_sleep=self._log_connect_failure,
            sleep=self._sleep,
            reraise=True,
        )
        retrying(self.client.connect)

        self.state = MonitorState.MONITORING
        self._log.info("connected_to_server")

    def run_iteration(self) -> bool:
        """Run one check: sample, maybe restart, sleep, maybe reconnect.

        Returns:
            True if the server was restarted during this iteration.
        """
        restarted = self.check_memory()
        self._sleep(self.settings.check_interval_seconds)
        if restarted:
            self.reconnect()
        return restarted

    def check_memory(self) -> bool:
        """Sample memory usage and restart the server if it is over the threshold.

        Returns:
            True if a restart was attempted.
        """
        try:
            usage = self._sampler()
        except MemorySamplingError as e:
            self._log.warning("memory_sampling_failed", error=str(e))
            return False

        if usage <= self.settings.max_memory_percentage:
            self._log.debug(
                "memory_usage_ok",
                percentage=usage,
                threshold=self.settings.max_memory_percentage,
            )
            return False

        self._log.info(
            "memory_threshold_exceeded",
            percentage=usage,
            threshold=self.settings.max_memory_percentage,
        )
        try:
            self._restarter(self.client)
        except Exception as e:
            self._log.error("restart_failed", error=str(e))
        return True

    def reconnect(self) -> bool:
        """Reconnect once after a restart.

        A failure is logged and otherwise ignored; the client reconnects on
        its own the next time a command fails.

        Returns:
            True if the reconnect succeeded.
        """
        try:
            self.client.connect()
        except RconError as e:
            self._log.error("reconnect_failed", error=str(e))
            return False
        self._log.info("reconnected_to_server")
        return True

    def _sample_memory(self) -> float:
        return get_memory_usage_percentage(self.settings.process_name)

    def _restart(self, client: RconClient) -> RestartOutcome:
        return restart_server(self.settings, client, sleep=self._sleep, logger=self._log)

    def _log_connect_failure(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        self._log.error(
            "connect_failed",
            attempt=retry_state.attempt_number,
            retry_in_seconds=RECONNECT_DELAY_SECONDS,
            error=str(error),
        )
