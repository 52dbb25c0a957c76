"""Utility module for the passive-mode FTP client.

This module provides cross-cutting utilities:
- Logging: Configured logging with PII redaction
- Validators: Input validation for hosts, ports, timeouts and paths
"""
