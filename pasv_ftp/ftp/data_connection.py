"""Passive-mode data connection for the FTP client.

A DataConnection is negotiated with PASV, carries exactly one transfer
and is then closed. It never outlives the operation that opened it.
"""

import io
import logging
import socket
from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO, Callable, Optional

from pasv_ftp.ftp.exceptions import MalformedPassiveReplyError
from pasv_ftp.ftp.transport import close_socket, open_socket, transport_errors
from pasv_ftp.utils.validators import validate_ip_address

if TYPE_CHECKING:
    from pasv_ftp.ftp.connection import ControlConnection

logger = logging.getLogger("pasv_ftp.data_connection")

PASV_GROUPS = 6

# Called with the number of bytes moved by each block
ChunkCallback = Callable[[int], None]


@dataclass(frozen=True)
class PassiveEndpoint:
    """Address the server designated for the data connection."""
    ip: str
    port: int

    def __str__(self) -> str:
        return f"{self.ip}:{self.port}"


def parse_pasv_reply(text: str) -> PassiveEndpoint:
    """
    Decode a 227 reply into an address and port.

    Numeric groups are collected from inside the parentheses when present,
    otherwise from the text after the status code, with any non-digit
    acting as a separator. The first six groups are used.

    Args:
        text: Full PASV reply text

    Returns:
        PassiveEndpoint with port = p1 * 256 + p2

    Raises:
        MalformedPassiveReplyError: If fewer than six groups are found or
            a group does not fit in a byte
    """
    start = text.find("(")
    if start >= 0:
        end = text.find(")", start)
        payload = text[start + 1:end] if end >= 0 else text[start + 1:]
    else:
        payload = text[3:]

    groups = []
    digits = ""
    for char in payload:
        if char.isascii() and char.isdigit():
            digits += char
        elif digits:
            groups.append(int(digits))
            digits = ""
    if digits:
        groups.append(int(digits))

    if len(groups) < PASV_GROUPS:
        raise MalformedPassiveReplyError(text)

    a, b, c, d, p1, p2 = groups[:PASV_GROUPS]
    ip = f"{a}.{b}.{c}.{d}"
    is_valid, _ = validate_ip_address(ip)
    if not is_valid or p1 > 255 or p2 > 255:
        raise MalformedPassiveReplyError(text)

    return PassiveEndpoint(ip=ip, port=(p1 << 8) + p2)


def negotiate_passive(control: "ControlConnection") -> PassiveEndpoint:
    """
    Ask the server for a passive data endpoint.

    Args:
        control: Logged-in control connection

    Returns:
        Endpoint to connect the data socket to

    Raises:
        UnexpectedResponseError: If PASV is not answered with 227
        MalformedPassiveReplyError: If the reply cannot be decoded
    """
    reply = control.send_command("PASV", 227)
    endpoint = parse_pasv_reply(reply.text)
    logger.debug(f"Passive endpoint: {endpoint}")
    return endpoint


class DataConnection:
    """Socket for a single passive-mode transfer."""

    BLOCK_SIZE = 8192

    def __init__(self, sock: socket.socket, endpoint: PassiveEndpoint, timeout_ms: int = 0):
        """
        Wrap an already connected data socket.

        Args:
            sock: Connected socket
            endpoint: Endpoint the socket is connected to
            timeout_ms: Timeout used for error reporting
        """
        self._socket: Optional[socket.socket] = sock
        self._endpoint = endpoint
        self._timeout_ms = timeout_ms

    @classmethod
    def open(cls, endpoint: PassiveEndpoint, timeout_ms: int = 0) -> "DataConnection":
        """Connect to a passive endpoint using the control socket's timeout policy."""
        sock = open_socket(endpoint.ip, endpoint.port, timeout_ms)
        logger.debug(f"Data connection opened to {endpoint}")
        return cls(sock, endpoint, timeout_ms)

    @property
    def endpoint(self) -> PassiveEndpoint:
        """Endpoint this connection was opened to."""
        return self._endpoint

    @property
    def is_open(self) -> bool:
        """True until close() is called."""
        return self._socket is not None

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            raise ValueError("Data connection is closed")
        return self._socket

    def read_into(self, sink: BinaryIO, on_chunk: Optional[ChunkCallback] = None) -> int:
        """
        Copy everything the server sends into sink until end of stream.

        Returns:
            Number of bytes received
        """
        sock = self._require_socket()
        total = 0
        with transport_errors(f"data read from {self._endpoint}", self._timeout_ms):
            while True:
                block = sock.recv(self.BLOCK_SIZE)
                if not block:
                    break
                sink.write(block)
                total += len(block)
                if on_chunk:
                    on_chunk(len(block))
        return total

    def read_all(self) -> bytes:
        """Read until end of stream and return the bytes."""
        buf = io.BytesIO()
        self.read_into(buf)
        return buf.getvalue()

    def write_from(self, source: BinaryIO, on_chunk: Optional[ChunkCallback] = None) -> int:
        """
        Send everything source yields, block by block.

        Returns:
            Number of bytes sent
        """
        self._require_socket()
        total = 0
        while True:
            block = source.read(self.BLOCK_SIZE)
            if not block:
                break
            self.send(block)
            total += len(block)
            if on_chunk:
                on_chunk(len(block))
        return total

    def send(self, data: bytes) -> None:
        """Send all of data on the data socket."""
        sock = self._require_socket()
        with transport_errors(f"data write to {self._endpoint}", self._timeout_ms):
            sock.sendall(data)

    def close(self) -> None:
        """Close the data socket. Safe to call more than once."""
        if self._socket is not None:
            close_socket(self._socket)
            self._socket = None
            logger.debug(f"Data connection to {self._endpoint} closed")

    def __enter__(self) -> "DataConnection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
