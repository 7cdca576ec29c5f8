"""Database-backed implementations of the lifecycle collaborators."""

from .audit import SqlAuditSink
from .document import SqlDocumentStore

__all__ = [
    "SqlAuditSink",
    "SqlDocumentStore",
]
