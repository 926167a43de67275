"""Custom exceptions for RCON operations.

All exceptions inherit from RconError for consistent error handling.
Each exception includes helpful messages for server admins.
"""

from typing import Optional


class RconError(Exception):
    """Base exception for all RCON errors.

    Attributes:
        message: Human-readable error message.
        hint: Optional troubleshooting hint.
    """

    def __init__(
        self,
        message: str,
        hint: Optional[str] = None,
    ) -> None:
        self.message = message
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional hint."""
        if self.hint:
            return f"{self.message}\n\nHint: {self.hint}"
        return self.message


class ConnectionError(RconError):
    """Cannot open an RCON session with the server.

    This typically occurs when:
    - The server is not running or is still starting up
    - Incorrect host or RCON port
    - RCONEnabled is False in PalWorldSettings.ini
    """

    def __init__(
        self,
        message: str = "Cannot connect to the server's RCON port",
        hint: Optional[str] = None,
    ) -> None:
        if hint is None:
            hint = (
                "Is the server running with RCONEnabled=True? "
                "Check serverHost and rconPort in config.json."
            )
        super().__init__(message=message, hint=hint)


class AuthenticationError(ConnectionError):
    """The server rejected the RCON password."""

    def __init__(
        self,
        message: str = "RCON authentication failed",
        hint: Optional[str] = None,
    ) -> None:
        if hint is None:
            hint = "rconPassword must match AdminPassword in PalWorldSettings.ini."
        super().__init__(message=message, hint=hint)


class CommandError(RconError):
    """An RCON command failed, including the retry after reconnecting."""

    def __init__(
        self,
        command: str,
        message: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        self.command = command
        super().__init__(
            message=message or f"RCON command failed: {command}",
            hint=hint,
        )
