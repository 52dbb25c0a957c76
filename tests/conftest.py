"""Pytest configuration and shared fixtures for the passive-mode FTP client tests."""

from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest

from pasv_ftp.ftp.endpoint import Endpoint


# Test constants
TEST_FTP_HOST = "ftp.example.com"
TEST_FTP_USER = "alice"
TEST_FTP_PASS = "secret"
TEST_FTP_URL = f"ftp://{TEST_FTP_USER}:{TEST_FTP_PASS}@{TEST_FTP_HOST}"


@pytest.fixture
def ftp_url() -> str:
    """URL of the scripted test server."""
    return TEST_FTP_URL


@pytest.fixture
def endpoint() -> Endpoint:
    """Endpoint matching TEST_FTP_URL."""
    return Endpoint(user=TEST_FTP_USER, password=TEST_FTP_PASS, host=TEST_FTP_HOST)


@pytest.fixture
def create_connection() -> Generator[MagicMock, None, None]:
    """Patch socket.create_connection; set side_effect to a list of sockets."""
    with patch("pasv_ftp.ftp.transport.socket.create_connection") as mock_create:
        yield mock_create


@pytest.fixture
def temp_settings_file(tmp_path: Path) -> Generator[Path, None, None]:
    """Provide a temporary settings file path for testing."""
    settings_file = tmp_path / "settings.json"
    yield settings_file
