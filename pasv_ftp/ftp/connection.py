"""FTP control connection management.

Provides the ConnectionState and TransferType enums and the
ControlConnection class, which owns the control socket, sends command
lines, reads replies and creates data connections on demand.
"""

import logging
import socket
from datetime import datetime
from enum import Enum
from typing import BinaryIO, Callable, Optional

from pasv_ftp.ftp.data_connection import DataConnection, negotiate_passive
from pasv_ftp.ftp.endpoint import Endpoint
from pasv_ftp.ftp.exceptions import (
    FTPAuthenticationError,
    FTPDataConnectionBusyError,
    FTPNotConnectedError,
    UnexpectedResponseError,
)
from pasv_ftp.ftp.reply import Reply, check_reply, read_reply
from pasv_ftp.ftp.transport import (
    CRLF,
    ENCODING,
    close_socket,
    open_socket,
    transport_errors,
)

logger = logging.getLogger("pasv_ftp.connection")

# Receives every raw line read from the control or data channel
LineHook = Callable[[str], None]


class ConnectionState(Enum):
    """Control connection state."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    LOGGED_IN = "logged_in"


class TransferType(Enum):
    """Representation type selected with TYPE."""
    ASCII = "A"
    BINARY = "I"


class ControlConnection:
    """Owns the control socket and the login state of one FTP session."""

    def __init__(
        self,
        endpoint: Endpoint,
        timeout_ms: int = 0,
        on_line: Optional[LineHook] = None,
    ):
        """
        Initialize the control connection. Nothing is opened until connect().

        Args:
            endpoint: Server to connect to
            timeout_ms: Connect/read/write timeout in milliseconds, 0 for none
            on_line: Optional hook receiving every line read
        """
        self._endpoint = endpoint
        self.timeout_ms = timeout_ms
        self.on_line = on_line
        self.transfer_type: Optional[TransferType] = None

        self._socket: Optional[socket.socket] = None
        self._reader: Optional[BinaryIO] = None
        self._data: Optional[DataConnection] = None
        self._state = ConnectionState.DISCONNECTED
        self._closed = False
        self._connected_at: Optional[datetime] = None
        self._last_activity: Optional[datetime] = None

    @property
    def endpoint(self) -> Endpoint:
        """Server this connection targets."""
        return self._endpoint

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def is_logged_in(self) -> bool:
        """True once the login sequence has completed."""
        return self._state == ConnectionState.LOGGED_IN

    @property
    def is_closed(self) -> bool:
        """True after close() or a failed login; the instance is then spent."""
        return self._closed

    @property
    def connected_at(self) -> Optional[datetime]:
        """Timestamp when the control socket was opened."""
        return self._connected_at

    @property
    def last_activity(self) -> Optional[datetime]:
        """Timestamp of the last reply received."""
        return self._last_activity

    def connect(self) -> None:
        """
        Open the control socket and log in. No-op when already logged in.

        Raises:
            FTPNotConnectedError: If this connection was closed
            FTPAuthenticationError: If the greeting or login got a disallowed code
            FTPTransportError: If the socket could not be opened or used
        """
        if self._closed:
            raise FTPNotConnectedError("Login")
        if self._state == ConnectionState.LOGGED_IN:
            return

        endpoint = self._endpoint
        logger.info(f"Connecting to {endpoint.host}:{endpoint.port}")
        self._socket = open_socket(endpoint.host, endpoint.port, self.timeout_ms)
        self._reader = self._socket.makefile("rb")
        self._state = ConnectionState.CONNECTED
        self._connected_at = datetime.now()

        try:
            self.read_reply(220)
            reply = self.send_command(f"USER {endpoint.user}", 331, 230)
            if reply.code == 331:
                self.send_command(f"PASS {endpoint.password}", 230, 202)
        except UnexpectedResponseError as e:
            self._release()
            raise FTPAuthenticationError(endpoint.user, e) from e
        except BaseException:
            self._release()
            raise

        self._state = ConnectionState.LOGGED_IN
        logger.info(f"Logged in to {endpoint.host}:{endpoint.port} as {endpoint.user}")

    def send_command(self, command: str, *allowed: int) -> Reply:
        """
        Send one command line and read its reply.

        Args:
            command: Command text without line terminator
            *allowed: Acceptable reply codes; none means any code

        Returns:
            Parsed reply

        Raises:
            UnexpectedResponseError: If the code is not allowed
            FTPTransportError: On socket failure or timeout
        """
        sock = self._require_socket(command.split(" ", 1)[0])
        logger.debug(f"> {command}")
        with transport_errors(f"sending {command.split(' ', 1)[0]}", self.timeout_ms):
            sock.sendall((command + CRLF).encode(ENCODING))
        return self.read_reply(*allowed)

    def read_reply(self, *allowed: int) -> Reply:
        """
        Read one reply without sending anything first.

        Raises:
            UnexpectedResponseError: If the code is not allowed
            FTPTransportError: On socket failure or timeout
        """
        self._require_socket("Reading a reply")
        with transport_errors("reading reply", self.timeout_ms):
            reply = read_reply(self._readline, self.emit_line)
        self._last_activity = datetime.now()
        return check_reply(reply, allowed)

    def emit_line(self, line: str) -> None:
        """Forward one raw line to the debug log and the line hook."""
        logger.debug(f"< {line}")
        if self.on_line is not None:
            self.on_line(line)

    def open_data_connection(self) -> DataConnection:
        """
        Negotiate PASV and connect the data socket.

        Raises:
            FTPDataConnectionBusyError: If a data connection is still open
            UnexpectedResponseError: If PASV is not answered with 227
            MalformedPassiveReplyError: If the PASV reply cannot be decoded
            FTPTransportError: If the data socket cannot be connected
        """
        if self._data is not None and self._data.is_open:
            raise FTPDataConnectionBusyError()
        endpoint = negotiate_passive(self)
        self._data = DataConnection.open(endpoint, self.timeout_ms)
        return self._data

    def close_data_connection(self) -> None:
        """Close the current data connection, if any."""
        if self._data is not None:
            self._data.close()
            self._data = None

    def close(self) -> None:
        """Send a best-effort QUIT and release both sockets. Idempotent."""
        try:
            self.close_data_connection()
            if self._socket is not None:
                try:
                    self.send_command("QUIT")
                except Exception as e:
                    # Best effort, cleanup continues
                    logger.debug(f"QUIT failed: {e}")
                logger.info(f"Disconnected from {self._endpoint.host}:{self._endpoint.port}")
        finally:
            self._release()

    def _release(self) -> None:
        """Drop the sockets without talking to the server."""
        self.close_data_connection()
        if self._reader is not None:
            self._reader.close()
            self._reader = None
        close_socket(self._socket)
        self._socket = None
        self._state = ConnectionState.DISCONNECTED
        self._closed = True

    def _readline(self) -> Optional[str]:
        raw = self._reader.readline()
        if not raw:
            return None
        return raw.decode(ENCODING, errors="replace").rstrip("\r\n")

    def _require_socket(self, operation: str) -> socket.socket:
        if self._socket is None:
            raise FTPNotConnectedError(operation)
        return self._socket

    def __enter__(self) -> "ControlConnection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
