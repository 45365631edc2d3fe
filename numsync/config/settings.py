"""
numsync Configuration Settings

This module contains all configuration constants for the numsync server
and client. Values can be overridden through environment variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server and client configuration settings."""

    # Network settings
    HOST: str = os.environ.get("NUMSYNC_HOST", "0.0.0.0")
    CLIENT_HOST: str = os.environ.get("NUMSYNC_CLIENT_HOST", "localhost")
    PORT: int = int(os.environ.get("NUMSYNC_PORT", "1234"))

    # Protocol settings
    MAX_LINE_LENGTH: int = 255  # Payload bytes, terminator excluded
    READ_CHUNK_SIZE: int = 256
    TERMINATOR: str = os.environ.get("NUMSYNC_TERMINATOR", "newline")  # newline | nul

    # Connection settings
    MAX_CONNECTIONS: int = int(os.environ.get("NUMSYNC_MAX_CONNECTIONS", "0"))  # 0 = unbounded
    LISTEN_BACKLOG: int = 128

    # Client settings
    POLL_INTERVAL: float = float(os.environ.get("NUMSYNC_POLL_INTERVAL", "1.0"))

    # Logging settings
    DEBUG: bool = os.environ.get("NUMSYNC_DEBUG", "false").lower() == "true"


# Global settings instance
settings = Settings()
