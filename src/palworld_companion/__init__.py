"""
Palworld Companion - Keep a Palworld dedicated server's memory usage in check.

This package watches the memory usage of a running Palworld server and, when
it climbs past a configured threshold, restarts the server gracefully:
players are warned over RCON with a countdown, the world is saved, and the
configured restart command is executed.

Features:
- Configuration via a JSON file validated with pydantic
- Structured logging (text for terminals, JSON for log shippers)
- RCON session that reconnects and retries once on transient failure
- Configurable countdown schedule for restart warnings
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
