"""Database models for Archivist."""

from .audit import AuditEventRecord
from .base import Base, PortableJSON, PortableUUID, TimestampMixin, UTCDateTime
from .document import DocumentRecord

__all__ = [
    "Base",
    "TimestampMixin",
    "PortableJSON",
    "PortableUUID",
    "UTCDateTime",
    "DocumentRecord",
    "AuditEventRecord",
]
