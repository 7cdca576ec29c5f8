"""Persisted lifecycle documents."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, PortableJSON, PortableUUID, TimestampMixin, UTCDateTime


class DocumentRecord(Base, TimestampMixin):
    """A lifecycle document stored as a JSON payload.

    Status, classification and retention end date are duplicated into
    indexed columns so the retention sweep can select due documents in SQL.
    The payload is the authoritative copy.
    """

    __tablename__ = "lifecycle_documents"

    document_id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    classification: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    retention_end_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    # Optimistic concurrency counter, compared on every update
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    payload: Mapped[dict] = mapped_column(PortableJSON(), nullable=False)

    __table_args__ = (
        Index("idx_lifecycle_documents_status", "status"),
        Index("idx_lifecycle_documents_classification", "classification"),
        Index("idx_lifecycle_documents_retention_end", "retention_end_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<DocumentRecord(id={self.document_id}, status={self.status}, "
            f"revision={self.revision})>"
        )
