"""RCON client module.

This module provides the RconClient class for talking to a Palworld
server's RCON port, along with custom exceptions for connection and command
failures.
"""

from palworld_companion.rcon.client import RconClient
from palworld_companion.rcon.exceptions import (
    AuthenticationError,
    CommandError,
    ConnectionError,
    RconError,
)

__all__ = [
    # Client
    "RconClient",
    # Exceptions
    "AuthenticationError",
    "CommandError",
    "ConnectionError",
    "RconError",
]
