"""
KV-Loop Configuration Settings

This module contains all configuration values for the KV-Loop server.
Every value can be overridden through a KVLOOP_* environment variable.
"""

import os
import socket
from dataclasses import dataclass


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings
    HOST: str = os.environ.get("KVLOOP_HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("KVLOOP_PORT", "8080"))
    BACKLOG: int = int(os.environ.get("KVLOOP_BACKLOG", str(socket.SOMAXCONN)))

    # Protocol settings
    MAX_MSG_SIZE: int = int(os.environ.get("KVLOOP_MAX_MSG_SIZE", "4096"))

    # Event loop settings
    POLL_TIMEOUT: float = float(os.environ.get("KVLOOP_POLL_TIMEOUT", "1.0"))

    # Logging settings
    DEBUG: bool = os.environ.get("KVLOOP_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("KVLOOP_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
