"""Logging configuration for the passive-mode FTP client.

Provides centralized logging with PII redaction to ensure passwords
sent with PASS or embedded in endpoint URLs are never written to logs.
"""

import logging
import re
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pasv_ftp.config.paths import get_log_file_path

if TYPE_CHECKING:
    from pasv_ftp.config.settings import ClientSettings


LOGGER_NAME = "pasv_ftp"

# PII patterns to redact from logs
PII_PATTERNS = [
    # PASS command as sent on the control channel
    (re.compile(r'(\bPASS )\S+', re.IGNORECASE), r'\1[REDACTED]'),
    # Password in key/value formats
    (re.compile(r'(password["\s:=]+)[^\s,}\]]+', re.IGNORECASE), r'\1[REDACTED]'),
    (re.compile(r'(passwd["\s:=]+)[^\s,}\]]+', re.IGNORECASE), r'\1[REDACTED]'),
    # FTP URLs with credentials
    (re.compile(r'ftp://[^:/\s]+:[^@\s]+@', re.IGNORECASE), 'ftp://[REDACTED]@'),
]


class PIIRedactingFormatter(logging.Formatter):
    """Custom formatter that redacts PII from log messages."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record, redacting any PII."""
        message = super().format(record)
        for pattern, replacement in PII_PATTERNS:
            message = pattern.sub(replacement, message)
        return message


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure client logging with PII redaction.

    Args:
        level: Logging level (default INFO)
        log_file: Optional file path for log output
        console: Whether to output to console (default True)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Clear any existing handlers
    logger.handlers.clear()

    formatter = PIIRedactingFormatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_logging_from_settings(settings: "ClientSettings", console: bool = True) -> logging.Logger:
    """
    Configure logging from persisted client settings.

    Unknown level names fall back to INFO.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    log_file = get_log_file_path() if settings.log_to_file else None
    return setup_logging(level=level, log_file=log_file, console=console)

