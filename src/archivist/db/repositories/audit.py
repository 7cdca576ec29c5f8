"""SQL-backed audit sink and audit queries."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from archivist.db.config import get_async_session
from archivist.db.models.audit import AuditEventRecord
from archivist.lifecycle.audit import AuditEvent, AuditEventType, AuditSeverity, AuditSink
from archivist.utils.exceptions import StorageError


class SqlAuditSink(AuditSink):
    """Appends lifecycle audit events to the lifecycle_audit_events table.

    Events are never updated or deleted through this class.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record(self, event: AuditEvent) -> None:
        try:
            async with get_async_session(self.session_factory) as session:
                session.add(
                    AuditEventRecord(
                        event_id=event.event_id,
                        event_type=event.event_type.value,
                        severity=event.severity.value,
                        document_id=event.document_id,
                        actor=event.actor,
                        occurred_at=event.occurred_at,
                        details=event.model_dump(mode="json")["details"],
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to record audit event {event.event_id}: {e}") from e

    async def query_events(
        self,
        document_id: UUID | None = None,
        event_type: AuditEventType | str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditEvent]:
        """Query audit events with filters.

        Args:
            document_id: Filter by document
            event_type: Filter by event type
            start_date: Filter events at or after this time
            end_date: Filter events at or before this time
            limit: Max results (max 1000)
            offset: Pagination offset

        Returns:
            Matching events, oldest first
        """
        if isinstance(event_type, AuditEventType):
            event_type = event_type.value

        query = select(AuditEventRecord).order_by(
            AuditEventRecord.occurred_at,
            AuditEventRecord.event_id,  # Secondary sort for equal timestamps
        )
        if document_id is not None:
            query = query.where(AuditEventRecord.document_id == document_id)
        if event_type is not None:
            query = query.where(AuditEventRecord.event_type == event_type)
        if start_date is not None:
            query = query.where(AuditEventRecord.occurred_at >= start_date)
        if end_date is not None:
            query = query.where(AuditEventRecord.occurred_at <= end_date)

        query = query.limit(min(limit, 1000)).offset(offset)

        try:
            async with get_async_session(self.session_factory) as session:
                result = await session.execute(query)
                return [self._to_event(r) for r in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to query audit events: {e}") from e

    @staticmethod
    def _to_event(record: AuditEventRecord) -> AuditEvent:
        return AuditEvent(
            event_id=record.event_id,
            event_type=AuditEventType(record.event_type),
            document_id=record.document_id,
            actor=record.actor,
            occurred_at=record.occurred_at,
            severity=AuditSeverity(record.severity),
            details=record.details,
        )
