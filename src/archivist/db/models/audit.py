"""Persisted lifecycle audit events."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, PortableJSON, PortableUUID, UTCDateTime


class AuditEventRecord(Base):
    """Immutable, append-only lifecycle audit log entry."""

    __tablename__ = "lifecycle_audit_events"

    # UUIDv7 is time-ordered, making audit events naturally sortable by ID
    event_id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, default="info")

    document_id: Mapped[UUID | None] = mapped_column(PortableUUID(), nullable=True)
    actor: Mapped[str] = mapped_column(String(255), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    # Event data (structured JSON)
    details: Mapped[dict] = mapped_column(PortableJSON(), nullable=False)

    # Insertion time (immutable, set by the database)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_lifecycle_audit_document", "document_id"),
        Index("idx_lifecycle_audit_event_type", "event_type"),
        Index("idx_lifecycle_audit_occurred", "occurred_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditEventRecord(id={self.event_id}, type={self.event_type}, "
            f"severity={self.severity})>"
        )
