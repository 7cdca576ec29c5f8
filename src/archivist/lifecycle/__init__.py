"""Archival lifecycle engine.

This package governs how a document moves through its legal custody
phases, including:

- The explicit transition graph and approval gating
- Retention rules per classification and status
- Per-status permission gating
- A tamper-evident, lockable version ledger
- PDF/A conversion advice before long-term custody
- The automatic retention sweep and destruction certificates

Usage:
    from archivist.lifecycle import (
        ArchivalStatus,
        InMemoryDocumentStore,
        TransitionEngine,
    )

    engine = TransitionEngine(store=InMemoryDocumentStore())
    document = await engine.create_document("Facture 2024-001", "facture", author="alice")
    result = await engine.request_transition(
        document.document_id,
        ArchivalStatus.SEMI_ACTIVE,
        actor="alice",
    )
    if result.conversion_summary and result.conversion_summary.requires_conversion:
        # Hand the attachments to the conversion service
        ...
"""

from archivist.lifecycle.audit import (
    AuditEvent,
    AuditEventType,
    AuditSeverity,
    AuditSink,
    InMemoryAuditSink,
    LoggingAuditSink,
)
from archivist.lifecycle.certificates import (
    DestructionCertificate,
    issue_certificate,
    verify_certificate,
)
from archivist.lifecycle.clock import Clock, FixedClock, SystemClock
from archivist.lifecycle.conversion import ConversionSummary, PdfaConversionAdvisor
from archivist.lifecycle.engine import (
    SweepFailure,
    SweepReport,
    TransitionEngine,
    TransitionResult,
)
from archivist.lifecycle.ledger import VersionLedger, compute_content_hash
from archivist.lifecycle.models import Attachment, Document, Version
from archivist.lifecycle.permissions import (
    PERMISSION_TABLE,
    allowed_actions,
    is_action_allowed,
)
from archivist.lifecycle.reporting import ExpiringDocument, RetentionReport
from archivist.lifecycle.retention import (
    RetentionPolicyResolver,
    compute_retention_end_date,
    days_remaining,
    resolve_disposition,
    urgency,
)
from archivist.lifecycle.rules import (
    RetentionRule,
    RetentionRuleSet,
    TransitionGraph,
    TransitionRule,
)
from archivist.lifecycle.scheduler import (
    RetentionScheduler,
    get_retention_scheduler,
    initialize_retention_scheduler,
)
from archivist.lifecycle.store import DocumentStore, InMemoryDocumentStore
from archivist.lifecycle.types import (
    PERMANENT,
    ArchivalStatus,
    ChangeType,
    DocumentAction,
    DocumentClassification,
    FinalDisposition,
    MediaKind,
    Role,
    Urgency,
)

__all__ = [
    # Types
    "ArchivalStatus",
    "ChangeType",
    "DocumentAction",
    "DocumentClassification",
    "FinalDisposition",
    "MediaKind",
    "PERMANENT",
    "Role",
    "Urgency",
    # Models
    "Attachment",
    "Document",
    "Version",
    # Rules
    "RetentionRule",
    "RetentionRuleSet",
    "TransitionGraph",
    "TransitionRule",
    # Permissions
    "PERMISSION_TABLE",
    "allowed_actions",
    "is_action_allowed",
    # Retention
    "RetentionPolicyResolver",
    "compute_retention_end_date",
    "days_remaining",
    "resolve_disposition",
    "urgency",
    # Conversion
    "ConversionSummary",
    "PdfaConversionAdvisor",
    # Ledger
    "VersionLedger",
    "compute_content_hash",
    # Certificates
    "DestructionCertificate",
    "issue_certificate",
    "verify_certificate",
    # Reporting
    "ExpiringDocument",
    "RetentionReport",
    # Engine
    "SweepFailure",
    "SweepReport",
    "TransitionEngine",
    "TransitionResult",
    "RetentionScheduler",
    "get_retention_scheduler",
    "initialize_retention_scheduler",
    # Collaborators
    "AuditEvent",
    "AuditEventType",
    "AuditSeverity",
    "AuditSink",
    "Clock",
    "DocumentStore",
    "FixedClock",
    "InMemoryAuditSink",
    "InMemoryDocumentStore",
    "LoggingAuditSink",
    "SystemClock",
]
