"""Keyring-backed password store for FTP endpoints.

Lets endpoint URLs be written as ftp://user:@host:port, with the
password looked up in the system keyring (Windows Credential Manager,
macOS Keychain, Linux Secret Service) when the client is built.
"""

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError

from pasv_ftp.ftp.endpoint import Endpoint

logger = logging.getLogger("pasv_ftp.credentials")


def credential_key(endpoint: Endpoint) -> str:
    """Keyring entry name for an endpoint: host:port:user."""
    return f"{endpoint.host}:{endpoint.port}:{endpoint.user}"


class CredentialManager:
    """Stores one password per host, port and user in the system keyring."""

    SERVICE_NAME = "pasv-ftp-client"

    def save_password(self, endpoint: Endpoint) -> bool:
        """
        Store the password carried by endpoint.

        Returns:
            True if the keyring accepted it, False otherwise
        """
        try:
            keyring.set_password(self.SERVICE_NAME, credential_key(endpoint), endpoint.password)
            return True
        except KeyringError as e:
            logger.warning(f"Could not store password for {endpoint}: {e}")
            return False

    def get_password(self, endpoint: Endpoint) -> Optional[str]:
        """Stored password for endpoint, or None if absent or unreadable."""
        try:
            return keyring.get_password(self.SERVICE_NAME, credential_key(endpoint))
        except KeyringError as e:
            logger.warning(f"Could not read password for {endpoint}: {e}")
            return None

    def delete_password(self, endpoint: Endpoint) -> bool:
        try:
            keyring.delete_password(self.SERVICE_NAME, credential_key(endpoint))
            return True
        except KeyringError:
            return False

    def has_password(self, endpoint: Endpoint) -> bool:
        return self.get_password(endpoint) is not None

    def resolve(self, endpoint: Endpoint) -> Endpoint:
        """
        Fill in a blank password from the keyring.

        Endpoints that already carry a password, or have nothing stored,
        are returned unchanged.
        """
        if endpoint.password:
            return endpoint
        stored = self.get_password(endpoint)
        if not stored:
            logger.debug(f"No stored password for {endpoint}")
            return endpoint
        return endpoint.with_password(stored)
