"""RCON client that survives dropped connections.

Palworld closes idle RCON connections and drops them entirely while the
server restarts, so a long-lived session regularly goes stale without any
notice. RconClient wraps the Source RCON protocol client from the ``rcon``
library and repairs the session when a command fails: it disconnects,
reconnects with the original credentials and retries the command once.

Example usage:
    from palworld_companion.rcon import RconClient

    client = RconClient("127.0.0.1", 25575, "secret")
    client.connect()
    try:
        client.broadcast("Hello everyone")
        print(client.save())
    finally:
        client.disconnect()
"""

from typing import Any, Callable, Optional

import structlog
from rcon.exceptions import WrongPassword
from rcon.source import Client

from .exceptions import AuthenticationError, CommandError, ConnectionError, RconError

ClientFactory = Callable[..., Client]


class RconClient:
    """Client for a Palworld server's RCON port.

    Holds at most one protocol session at a time. The session is replaced on
    every connect, since a socket cannot be reused once closed.

    Attributes:
        host: Server hostname or IP address.
        port: RCON port.
        timeout: Socket timeout in seconds, None for the library default.
    """

    def __init__(
        self,
        host: str,
        port: int,
        password: str,
        *,
        timeout: Optional[float] = None,
        client_factory: ClientFactory = Client,
        logger: Optional[Any] = None,
    ) -> None:
        """Initialize the client without connecting.

        Args:
            host: Server hostname or IP address.
            port: RCON port.
            password: RCON admin password.
            timeout: Optional socket timeout in seconds.
            client_factory: Builds protocol sessions, replaceable for testing.
            logger: Bound logger; defaults to this module's structlog logger.
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self._password = password
        self._client_factory = client_factory
        self._session: Optional[Client] = None
        self._log = logger or structlog.get_logger(__name__)

    @property
    def is_connected(self) -> bool:
        """True while a session is open."""
        return self._session is not None

    def connect(self) -> None:
        """Open and authenticate a new RCON session.

        Any existing session is closed first.

        Raises:
            AuthenticationError: The server rejected the password.
            ConnectionError: The server is unreachable or the handshake failed.
        """
        if self._session is not None:
            self._disconnect_for_repair()

        self._log.debug("rcon_connecting", host=self.host, port=self.port)
        session = self._client_factory(
            self.host,
            self.port,
            passwd=self._password,
            timeout=self.timeout,
        )
        try:
            session.connect(login=True)
        except WrongPassword as e:
            session.close()
            raise AuthenticationError() from e
        except Exception as e:
            session.close()
            raise ConnectionError(
                f"Cannot connect to RCON at {self.host}:{self.port}: {e}"
            ) from e

        self._session = session
        self._log.info("rcon_connected", host=self.host, port=self.port)

    def disconnect(self) -> None:
        """Close the session.

        Safe to call when already disconnected.

        Raises:
            ConnectionError: Closing the underlying socket failed. The client
                is disconnected regardless.
        """
        session, self._session = self._session, None
        if session is None:
            return

        try:
            session.close()
        except OSError as e:
            raise ConnectionError(f"Error while disconnecting: {e}") from e
        self._log.debug("rcon_disconnected", host=self.host, port=self.port)

    def execute_command(self, payload: str) -> str:
        """Run a command and return the server's response.

        If the command fails, the session is torn down, reopened and the
        command retried exactly once.

        Args:
            payload: Full command line, e.g. "save".

        Returns:
            Response text from the server.

        Raises:
            CommandError: The command failed again after reconnecting, or
                the reconnect itself failed.
        """
        try:
            return self._run(payload)
        except Exception as e:
            self._log.error("rcon_command_failed", command=payload, error=str(e))

        self._disconnect_for_repair()
        try:
            self.connect()
            return self._run(payload)
        except Exception as e:
            raise CommandError(payload, f"RCON command failed after reconnecting: {payload}") from e

    def broadcast(self, message: str) -> str:
        """Show a message to every connected player.

        Palworld's broadcast command ends the message at the first space, so
        spaces are sent as underscores.
        """
        return self.execute_command(f"broadcast {message.replace(' ', '_')}")

    def save(self) -> str:
        """Save the world and return the server's confirmation."""
        return self.execute_command("save")

    def _run(self, payload: str) -> str:
        if self._session is None:
            raise ConnectionError("Not connected to RCON")
        return self._session.run(payload)

    def _disconnect_for_repair(self) -> None:
        try:
            self.disconnect()
        except RconError as e:
            self._log.error("rcon_disconnect_failed", error=str(e))
