"""Socket helpers shared by the control and data connections.

Both sockets follow the same timeout policy: one value in milliseconds
applied to connect, receive and send, with 0 meaning no timeout.
"""

import socket
from contextlib import contextmanager
from typing import Iterator, Optional

from pasv_ftp.ftp.exceptions import FTPTimeoutError, FTPTransportError


ENCODING = "utf-8"
CRLF = "\r\n"


def timeout_seconds(timeout_ms: int) -> Optional[float]:
    """Convert a millisecond timeout to socket form (None = blocking)."""
    return timeout_ms / 1000.0 if timeout_ms > 0 else None


@contextmanager
def transport_errors(operation: str, timeout_ms: int = 0) -> Iterator[None]:
    """Translate socket errors raised inside the block into FTP errors."""
    try:
        yield
    except socket.timeout as e:
        raise FTPTimeoutError(operation, timeout_ms) from e
    except OSError as e:
        raise FTPTransportError(operation, e) from e


def open_socket(host: str, port: int, timeout_ms: int = 0) -> socket.socket:
    """
    Connect a TCP socket.

    Args:
        host: Host name or address
        port: TCP port
        timeout_ms: Connect/read/write timeout in milliseconds, 0 for none

    Returns:
        Connected socket

    Raises:
        FTPTimeoutError: If the connect timed out
        FTPTransportError: If the connect failed
    """
    with transport_errors(f"connect to {host}:{port}", timeout_ms):
        sock = socket.create_connection((host, port), timeout=timeout_seconds(timeout_ms))
    return sock


def close_socket(sock: Optional[socket.socket]) -> None:
    """Shut down and close a socket, ignoring errors from a dead peer."""
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass
    sock.close()
