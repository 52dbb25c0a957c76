"""Passive-mode FTP client.

Drives an FTP control connection and opens one passive data connection
per listing or file transfer.
"""

from pasv_ftp.ftp.client import FTPClient, TransferProgress
from pasv_ftp.ftp.connection import ConnectionState, TransferType
from pasv_ftp.ftp.endpoint import Endpoint, parse_endpoint

__all__ = [
    "FTPClient",
    "TransferProgress",
    "ConnectionState",
    "TransferType",
    "Endpoint",
    "parse_endpoint",
]
