"""Configuration module for Archivist."""

from archivist.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
