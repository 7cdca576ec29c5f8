"""Core services and utilities for Archivist."""

from .exceptions import (
    ApprovalRequiredError,
    ConcurrentModificationError,
    DocumentNotFoundError,
    LifecycleError,
    PermissionDeniedError,
    TerminalStateError,
    TransitionNotAllowedError,
    UnknownClassificationError,
    VersionLockedError,
    VersionNotFoundError,
)
from .logging import LogContext, get_logger, setup_logging

__all__ = [
    # Exceptions
    "ApprovalRequiredError",
    "ConcurrentModificationError",
    "DocumentNotFoundError",
    "LifecycleError",
    "PermissionDeniedError",
    "TerminalStateError",
    "TransitionNotAllowedError",
    "UnknownClassificationError",
    "VersionLockedError",
    "VersionNotFoundError",
    # Logging
    "LogContext",
    "get_logger",
    "setup_logging",
]
