"""Configuration module for KV-Loop."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
