"""Custom exceptions for Archivist."""


class ArchivistError(Exception):
    """Base exception for all Archivist errors."""

    pass


class ConfigurationError(ArchivistError):
    """Error in configuration, settings or static rule tables."""

    pass


class StorageError(ArchivistError):
    """Error raised by a persistence backend."""

    pass
