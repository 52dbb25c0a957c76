"""Client settings management for the passive-mode FTP client.

Provides ClientSettings dataclass and SettingsManager for persistence.
"""

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from pasv_ftp.config.paths import get_settings_path
from pasv_ftp.utils.validators import validate_timeout, validate_transfer_type


@dataclass
class ClientSettings:
    """Client settings that persist between sessions."""

    # Connect/read/write timeout in milliseconds, 0 disables it
    timeout_ms: int = 30000

    # "A", "I" or "" to leave the server default alone
    transfer_type: str = ""

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = False

    def __post_init__(self):
        """Validate settings after initialization."""
        is_valid, error = validate_timeout(self.timeout_ms)
        if not is_valid:
            raise ValueError(error)
        is_valid, error = validate_transfer_type(self.transfer_type)
        if not is_valid:
            raise ValueError(error)

    def to_dict(self) -> dict:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ClientSettings":
        """Create settings from dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)


class SettingsManager:
    """Manages client settings persistence."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            config_path: Optional custom path, defaults to platform standard
        """
        self._config_path = config_path or get_settings_path()
        self._settings: Optional[ClientSettings] = None

    @property
    def config_path(self) -> Path:
        """Path to settings file."""
        return self._config_path

    def load(self) -> ClientSettings:
        """
        Load settings from disk.

        Returns:
            ClientSettings instance (defaults if file not found or invalid)
        """
        if self._config_path.exists():
            try:
                with open(self._config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                self._settings = ClientSettings.from_dict(data)
            except (json.JSONDecodeError, IOError, ValueError, TypeError):
                # Invalid or unreadable file, use defaults
                self._settings = ClientSettings()
        else:
            self._settings = ClientSettings()

        return self._settings

    def save(self, settings: ClientSettings) -> None:
        """
        Persist settings to disk.

        Args:
            settings: Settings to save
        """
        self._settings = settings

        self._config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self._config_path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)

    def reset(self) -> ClientSettings:
        """
        Reset to default settings.

        Returns:
            Default ClientSettings instance
        """
        self._settings = ClientSettings()

        if self._config_path.exists():
            self._config_path.unlink()

        return self._settings

    def update(self, **kwargs) -> ClientSettings:
        """
        Update specific settings fields.

        Args:
            **kwargs: Field names and new values

        Returns:
            Updated ClientSettings instance

        Raises:
            ValueError: If the updated settings are invalid
        """
        if self._settings is None:
            self.load()

        data = self._settings.to_dict()
        for key, value in kwargs.items():
            if key in data:
                data[key] = value

        self.save(ClientSettings.from_dict(data))
        return self._settings
