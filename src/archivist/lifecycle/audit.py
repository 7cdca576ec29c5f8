"""Lifecycle audit events and audit sinks.

Audit events are immutable, append-only records of every committed
lifecycle change. The engine hands them to an AuditSink; the sinks shipped
here keep them in memory or write them to the structured log. A database
sink lives in archivist.db.repositories.audit.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from uuid_utils.compat import uuid7

from archivist.core.logging import get_logger

logger = get_logger(__name__)


class AuditEventType(str, Enum):
    """Types of lifecycle audit events."""

    DOCUMENT_CREATED = "lifecycle.document_created"
    TRANSITION = "lifecycle.transition"
    VERSION_CREATED = "lifecycle.version_created"
    VERSION_LOCKED = "lifecycle.version_locked"
    INTEGRITY_VERIFIED = "lifecycle.integrity_verified"
    DESTRUCTION_CERTIFIED = "lifecycle.destruction_certified"
    SWEEP_COMPLETED = "lifecycle.sweep_completed"


class AuditSeverity(str, Enum):
    """Severity levels for audit events."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """Immutable audit record of a lifecycle change.

    Attributes:
        event_id: Time-ordered identifier
        event_type: What happened
        document_id: Affected document (None for sweep summaries)
        actor: Who caused it ("system" for automatic transitions)
        occurred_at: When it happened, from the engine clock
        severity: Severity of the event
        details: Event-specific structured data (JSON serializable)
    """

    model_config = ConfigDict(frozen=True)

    event_id: UUID = Field(default_factory=uuid7)
    event_type: AuditEventType
    document_id: UUID | None = None
    actor: str
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    severity: AuditSeverity = AuditSeverity.INFO
    details: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Audit Sinks
# =============================================================================


class AuditSink:
    """Protocol for audit event destinations."""

    async def record(self, event: AuditEvent) -> None:
        """Record an audit event."""
        ...


class InMemoryAuditSink(AuditSink):
    """In-memory audit sink for testing."""

    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    async def record(self, event: AuditEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        """Get recorded events of one type, in recording order."""
        return [e for e in self.events if e.event_type == event_type]

    def for_document(self, document_id: UUID) -> list[AuditEvent]:
        """Get recorded events for one document, in recording order."""
        return [e for e in self.events if e.document_id == document_id]

    def clear(self) -> None:
        self.events.clear()


class LoggingAuditSink(AuditSink):
    """Audit sink that writes every event to the structured log."""

    def __init__(self, logger_name: str = "archivist.audit"):
        self._logger = get_logger(logger_name)

    async def record(self, event: AuditEvent) -> None:
        log = self._logger.warning if event.severity == AuditSeverity.WARNING else self._logger.info
        log(
            "audit_event",
            event_id=str(event.event_id),
            event_type=event.event_type.value,
            document_id=str(event.document_id) if event.document_id else None,
            actor=event.actor,
            occurred_at=event.occurred_at.isoformat(),
            severity=event.severity.value,
            details=event.details,
        )
