"""Persistence layer for Archivist."""

from archivist.db.config import (
    close_db,
    create_engine_from_settings,
    create_session_factory,
    get_async_session,
    init_db,
)
from archivist.db.repositories import SqlAuditSink, SqlDocumentStore

__all__ = [
    "close_db",
    "create_engine_from_settings",
    "create_session_factory",
    "get_async_session",
    "init_db",
    "SqlAuditSink",
    "SqlDocumentStore",
]
