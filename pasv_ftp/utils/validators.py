"""Input validators for the passive-mode FTP client.

Provides validation functions for endpoint fields, timeouts and
remote path arguments.
"""

import re
from typing import Optional, Tuple


# IPv4 address pattern
IPV4_PATTERN = re.compile(
    r'^(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}'
    r'(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)$'
)

# Characters the server would treat as a glob
WILDCARD_PATTERN = re.compile(r'[*%]')

TRANSFER_TYPE_CODES = ("", "A", "I")


def validate_ip_address(ip: str) -> Tuple[bool, Optional[str]]:
    """
    Validate an IPv4 address.

    Args:
        ip: IP address string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not ip or not ip.strip():
        return False, "IP address is required"

    ip = ip.strip()

    if IPV4_PATTERN.match(ip):
        return True, None

    return False, f"Invalid IP address format: {ip}"


def validate_host(host: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a host. Any non-empty string without whitespace is accepted;
    resolution is left to the socket layer.

    Args:
        host: Host string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not host:
        return False, "Host is required"

    if any(c.isspace() for c in host):
        return False, f"Invalid host: {host!r}"

    return True, None


def validate_port(port: int) -> Tuple[bool, Optional[str]]:
    """
    Validate a port number.

    Args:
        port: Port number to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(port, int):
        try:
            port = int(port)
        except (ValueError, TypeError):
            return False, "Port must be a number"

    if port < 1 or port > 65535:
        return False, f"Port must be between 1 and 65535, got {port}"

    return True, None


def validate_timeout(timeout_ms: int) -> Tuple[bool, Optional[str]]:
    """
    Validate a timeout value in milliseconds (0 disables the timeout).

    Args:
        timeout_ms: Timeout in milliseconds

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, int):
        return False, "Timeout must be a whole number of milliseconds"

    if timeout_ms < 0:
        return False, f"Timeout must not be negative, got {timeout_ms}"

    return True, None


def validate_transfer_type(code: str) -> Tuple[bool, Optional[str]]:
    """Validate a persisted transfer type code ("" means server default)."""
    if code not in TRANSFER_TYPE_CODES:
        return False, f"Transfer type must be 'A', 'I' or empty, got {code!r}"
    return True, None


def validate_literal_path(path: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a remote path that must name exactly one entry.

    Args:
        path: Remote path to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if WILDCARD_PATTERN.search(path):
        return False, f"Wildcards are not allowed in path '{path}'"

    return True, None
