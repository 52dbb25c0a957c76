"""FTP protocol module for the passive-mode FTP client.

This module handles all FTP-related functionality:
- Endpoint: ftp:// URL parsing
- Reply parsing: multi-line reply boundaries and status codes
- ControlConnection: control socket, login state and transfer type
- DataConnection: PASV negotiation and one-shot data sockets
- FTPClient: high-level operations
- Exceptions: FTP-specific error types
"""
