"""Configuration module for the passive-mode FTP client.

This module handles client settings and credentials:
- SettingsManager: JSON-based settings persistence
- CredentialManager: Secure credential storage via keyring
- Paths: Settings and log locations
- ClientSettings: Settings dataclass
"""
