"""
Entry point for the palworld-companion service.

Usage:
    palworld-companion        Run the memory monitor (reads ./config.json)

The service takes no command line options; everything is configured in
config.json (or the file named by the CONFIG_PATH environment variable).
It must run as root so the restart command can manage the server.

Exit Codes:
    0 - Stopped with Ctrl+C
    1 - Not running as root, or configuration missing/invalid
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from palworld_companion.config import CompanionSettings

from palworld_companion import __version__

# Exit codes
EXIT_SUCCESS = 0
EXIT_STARTUP_ERROR = 1


def print_banner(config: "CompanionSettings") -> None:
    """Print startup banner with version and configuration summary."""
    lines = [
        "",
        f"Palworld Companion v{__version__}",
        "=" * 40,
        f"Server:         {config.server_host}:{config.rcon_port}",
        f"Process:        {config.process_name}",
        f"Check Interval: {config.check_interval_minutes:g} min",
        f"Memory Limit:   {config.max_memory_percentage:g}%",
        f"Log Level:      {config.log_level}",
        "=" * 40,
        "",
    ]

    for line in lines:
        print(line)


def main() -> int:
    """Main entry point for palworld-companion.

    Returns:
        Exit code (0=stopped by user, 1=startup error). Under normal
        operation this never returns.
    """
    from palworld_companion.config import ConfigurationError, load_config
    from palworld_companion.logging import configure_logging, get_logger
    from palworld_companion.monitor import MonitorLoop
    from palworld_companion.rcon import RconClient, RconError
    from palworld_companion.system import is_root_user

    # Defaults until the config file has been read
    configure_logging()
    log = get_logger()

    if not is_root_user():
        log.error("not_root", message="This program must be run as root")
        return EXIT_STARTUP_ERROR

    try:
        config = load_config()
    except ConfigurationError as e:
        log.error("config_invalid", error=str(e))
        return EXIT_STARTUP_ERROR

    configure_logging(log_format=config.log_format, log_level=config.log_level)
    log = get_logger()

    print_banner(config)
    log.info("starting", version=__version__)

    client = RconClient(config.server_host, config.rcon_port, config.rcon_password)
    loop = MonitorLoop(config, client)

    try:
        loop.run()
    except KeyboardInterrupt:
        log.info("shutdown", reason="keyboard interrupt")
        try:
            client.disconnect()
        except RconError as e:
            log.warning("disconnect_failed", error=str(e))
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
