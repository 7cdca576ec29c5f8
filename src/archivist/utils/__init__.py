"""Utility modules for Archivist."""

from archivist.utils.exceptions import (
    ArchivistError,
    ConfigurationError,
    StorageError,
)

__all__ = [
    "ArchivistError",
    "ConfigurationError",
    "StorageError",
]
