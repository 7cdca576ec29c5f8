"""Transition engine: the entry point of the archival lifecycle.

The engine orchestrates every change to a document:
- Validates requested transitions against the transition graph
- Enforces approval gating and the permission table
- Recomputes retention and final disposition on each transition
- Locks versions and issues destruction certificates
- Emits audit events and metrics
- Applies automatic transitions in the retention sweep

Every mutating operation runs under a per-document lock, works on a
private copy loaded from the store and commits it with a compare-and-swap
on the document revision. A failure at any step leaves the stored
document untouched.
"""

import asyncio
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from archivist.config.settings import Settings, get_settings
from archivist.core.exceptions import (
    ApprovalRequiredError,
    DocumentNotFoundError,
    LifecycleError,
    PermissionDeniedError,
    TerminalStateError,
    TransitionNotAllowedError,
)
from archivist.core.logging import LogContext, get_logger
from archivist.lifecycle.audit import (
    AuditEvent,
    AuditEventType,
    AuditSeverity,
    AuditSink,
    LoggingAuditSink,
)
from archivist.lifecycle.certificates import DestructionCertificate, issue_certificate
from archivist.lifecycle.clock import Clock, SystemClock
from archivist.lifecycle.conversion import ConversionSummary, PdfaConversionAdvisor
from archivist.lifecycle.ledger import VersionLedger
from archivist.lifecycle.models import Attachment, Document, Version
from archivist.lifecycle.permissions import is_action_allowed
from archivist.lifecycle.reporting import RetentionReport, build_report
from archivist.lifecycle.retention import RetentionPolicyResolver
from archivist.lifecycle.rules import (
    RetentionRule,
    RetentionRuleSet,
    TransitionGraph,
    TransitionRule,
)
from archivist.lifecycle.store import DocumentStore
from archivist.lifecycle.types import (
    DURABLE_FORMAT_STATUSES,
    LOCKING_STATUSES,
    ArchivalStatus,
    ChangeType,
    DocumentAction,
)
from archivist.observability.metrics import (
    observe_sweep,
    record_integrity_check,
    record_transition,
    record_transition_failure,
    record_version_created,
)
from archivist.utils.exceptions import ArchivistError

logger = get_logger(__name__)

TRIGGER_MANUAL = "manual"
TRIGGER_SWEEP = "sweep"


@dataclass
class TransitionResult:
    """Outcome of a committed transition."""

    document: Document
    from_status: ArchivalStatus
    to_status: ArchivalStatus
    trigger: str
    event: AuditEvent
    conversion_summary: ConversionSummary | None = None
    certificate: DestructionCertificate | None = None


@dataclass
class SweepFailure:
    """A document the sweep could not transition."""

    document_id: UUID
    from_status: ArchivalStatus
    target_status: ArchivalStatus | None
    error_type: str
    message: str


@dataclass
class SweepReport:
    """Summary of one retention sweep run."""

    run_at: datetime
    transitioned: list[TransitionResult] = field(default_factory=list)
    skipped: list[UUID] = field(default_factory=list)
    failures: list[SweepFailure] = field(default_factory=list)

    @property
    def examined_count(self) -> int:
        return len(self.transitioned) + len(self.skipped) + len(self.failures)

    def outcome_counts(self) -> dict[str, int]:
        return {
            "transitioned": len(self.transitioned),
            "skipped": len(self.skipped),
            "failed": len(self.failures),
        }


class TransitionEngine:
    """Orchestrates document lifecycle operations.

    Usage:
        engine = TransitionEngine(store=InMemoryDocumentStore())
        document = await engine.create_document("Bail commercial", "contrat", author="alice")
        result = await engine.request_transition(
            document.document_id,
            ArchivalStatus.ARCHIVED,
            actor="alice",
            justification="contract concluded",
        )
    """

    def __init__(
        self,
        store: DocumentStore,
        audit_sink: AuditSink | None = None,
        clock: Clock | None = None,
        transition_graph: TransitionGraph | None = None,
        retention_rules: RetentionRuleSet | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the engine.

        Args:
            store: Document persistence backend
            audit_sink: Destination of audit events (defaults to the structured log)
            clock: Time source (defaults to UTC wall clock)
            transition_graph: Legal transitions (defaults to the shipped graph)
            retention_rules: Retention table (defaults to the shipped table)
            settings: Application settings (defaults to get_settings())

        Raises:
            ConfigurationError: If the retention table is inconsistent with the graph
        """
        self.settings = settings or get_settings()
        self.store = store
        self.audit_sink = audit_sink or LoggingAuditSink()
        self.clock = clock or SystemClock()
        self.transition_graph = transition_graph or TransitionGraph.with_default_rules()
        self.retention_rules = retention_rules or RetentionRuleSet.with_default_rules(
            default_classification=self.settings.default_classification
        )
        self.retention_rules.validate(self.transition_graph)

        self.resolver = RetentionPolicyResolver(
            self.retention_rules, strict=self.settings.strict_classification
        )
        self.ledger = VersionLedger(self.clock)
        self.advisor = PdfaConversionAdvisor(self.settings.pdfa_target_format)
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._lock_holders: dict[UUID, int] = {}

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_document(self, document_id: UUID) -> Document:
        """Load a private copy of a document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        document = await self.store.load(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    def get_available_transitions(self, status: ArchivalStatus) -> list[TransitionRule]:
        """Configured transitions out of a status, ordered by target status.

        For presentation only; request_transition re-validates everything.
        """
        return self.transition_graph.rules_from(status)

    def is_action_allowed(self, status: ArchivalStatus, action: DocumentAction) -> bool:
        return is_action_allowed(status, action)

    def resolve_rule(self, classification: str, status: ArchivalStatus) -> RetentionRule:
        return self.resolver.resolve_rule(classification, status)

    async def conversion_summary(self, document: Document | UUID) -> ConversionSummary:
        """PDF/A conversion advice for a document's current version."""
        if isinstance(document, UUID):
            document = await self.get_document(document)
        return self.advisor.conversion_summary(document)

    # =========================================================================
    # Document creation
    # =========================================================================

    async def create_document(
        self,
        title: str,
        classification: str,
        author: str,
        attachments: Sequence[Attachment] | None = None,
        document_id: UUID | None = None,
    ) -> Document:
        """Create an active document with its first version.

        Args:
            title: Document title
            classification: Document type used to select retention rules
            author: Creator, recorded on version 1
            attachments: Initial attachment set
            document_id: Explicit identifier (generated when omitted)

        Returns:
            The committed document

        Raises:
            UnknownClassificationError: If strict classification is enabled
                and the classification is unknown
        """
        now = self.clock.now()
        rule = self.resolver.resolve_rule(classification, ArchivalStatus.ACTIVE)

        document = Document(
            title=title,
            classification=classification,
            created_at=now,
            status_changed_at=now,
            status_changed_by=author,
            retention_end_date=self.resolver.compute_retention_end_date(rule, now),
        )
        if document_id is not None:
            document.document_id = document_id
        version = self.ledger.create_initial_version(document, author, attachments)

        await self.store.save(document, expected_revision=None)

        await self._emit(
            AuditEvent(
                event_type=AuditEventType.DOCUMENT_CREATED,
                document_id=document.document_id,
                actor=author,
                occurred_at=now,
                details={
                    "title": title,
                    "classification": classification,
                    "status": document.status.value,
                    "retention_end_date": _isoformat(document.retention_end_date),
                    "content_hash": version.content_hash,
                },
            )
        )
        record_version_created(version.change_type.value)
        logger.info(
            "document_created",
            document_id=document.document_id,
            classification=classification,
            retention_end_date=_isoformat(document.retention_end_date),
        )
        return document.copy()

    # =========================================================================
    # Transitions
    # =========================================================================

    async def request_transition(
        self,
        document_id: UUID,
        target: ArchivalStatus,
        actor: str,
        justification: str = "",
    ) -> TransitionResult:
        """Move a document to a later custody phase.

        The actor's role is not checked against the rule's approver_role;
        the caller is expected to have authorized the actor beforehand.

        Args:
            document_id: Document to transition
            target: Requested status
            actor: Authenticated actor requesting the change
            justification: Reason; mandatory on approval-gated transitions

        Returns:
            TransitionResult with the committed document

        Raises:
            DocumentNotFoundError: If the document does not exist
            TerminalStateError: If the document is already destroyed
            TransitionNotAllowedError: If the edge is not configured
            ApprovalRequiredError: If a gated edge has a blank justification
            PermissionDeniedError: If change-status is denied in the current status
            ConcurrentModificationError: If another writer committed first
        """
        with LogContext(operation="transition", document_id=str(document_id)):
            async with self._document_lock(document_id):
                document = await self.get_document(document_id)
                return await self._apply_transition(
                    document,
                    target,
                    actor=actor,
                    justification=justification,
                    trigger=TRIGGER_MANUAL,
                )

    def _validate_transition(
        self,
        document: Document,
        target: ArchivalStatus,
        justification: str,
        check_approval: bool,
    ) -> TransitionRule:
        if document.status.is_terminal:
            raise TerminalStateError(document.document_id)

        rule = self.transition_graph.get_rule(document.status, target)
        if rule is None:
            raise TransitionNotAllowedError(document.status, target, document.document_id)

        if check_approval and rule.requires_approval and not justification.strip():
            raise ApprovalRequiredError(
                document.status, target, rule.approver_role, document.document_id
            )

        if not is_action_allowed(document.status, DocumentAction.CHANGE_STATUS):
            raise PermissionDeniedError(
                document.status, DocumentAction.CHANGE_STATUS, document.document_id
            )
        return rule

    async def _apply_transition(
        self,
        document: Document,
        target: ArchivalStatus,
        actor: str,
        justification: str,
        trigger: str,
        at: datetime | None = None,
    ) -> TransitionResult:
        """Validate and commit a transition. The caller holds the document lock."""
        try:
            self._validate_transition(
                document, target, justification, check_approval=trigger == TRIGGER_MANUAL
            )
            retention_rule = self.resolver.resolve_rule(document.classification, target)
        except LifecycleError as e:
            record_transition_failure(type(e).__name__)
            logger.info(
                "transition_rejected",
                from_status=document.status.value,
                to_status=target.value,
                reason=type(e).__name__,
                actor=actor,
            )
            raise

        now = at or self.clock.now()
        expected_revision = document.revision
        from_status = document.status

        document.status = target
        document.status_changed_at = now
        document.status_changed_by = actor
        document.retention_end_date = self.resolver.compute_retention_end_date(
            retention_rule, now
        )
        if target in (ArchivalStatus.ARCHIVED, ArchivalStatus.DESTRUCTION):
            document.final_disposition = self.resolver.resolve_disposition(
                retention_rule, target
            )

        newly_locked: Version | None = None
        if target in LOCKING_STATUSES:
            current = document.current_version
            if current is not None and not current.is_locked:
                newly_locked = self.ledger.lock_current_version(document)

        summary = None
        if target in DURABLE_FORMAT_STATUSES:
            summary = self.advisor.conversion_summary(document)

        certificate = None
        if target == ArchivalStatus.DESTRUCTION:
            certificate = issue_certificate(document, justification, actor, now)

        try:
            await self.store.save(document, expected_revision)
        except ArchivistError as e:
            record_transition_failure(type(e).__name__)
            raise

        event = AuditEvent(
            event_type=AuditEventType.TRANSITION,
            document_id=document.document_id,
            actor=actor,
            occurred_at=now,
            details={
                "from_status": from_status.value,
                "to_status": target.value,
                "justification": justification,
                "trigger": trigger,
                "retention_end_date": _isoformat(document.retention_end_date),
                "final_disposition": (
                    document.final_disposition.value if document.final_disposition else None
                ),
            },
        )
        await self._emit(event)

        if newly_locked is not None:
            await self._emit(
                AuditEvent(
                    event_type=AuditEventType.VERSION_LOCKED,
                    document_id=document.document_id,
                    actor=actor,
                    occurred_at=now,
                    details={
                        "version_number": newly_locked.version_number,
                        "content_hash": newly_locked.content_hash,
                    },
                )
            )
        if certificate is not None:
            await self._emit(
                AuditEvent(
                    event_type=AuditEventType.DESTRUCTION_CERTIFIED,
                    document_id=document.document_id,
                    actor=actor,
                    occurred_at=now,
                    details=certificate.model_dump(mode="json"),
                )
            )

        record_transition(from_status.value, target.value, trigger)
        logger.info(
            "transition_applied",
            from_status=from_status.value,
            to_status=target.value,
            actor=actor,
            trigger=trigger,
            conversion_needed=summary.count if summary else None,
        )

        return TransitionResult(
            document=document.copy(),
            from_status=from_status,
            to_status=target,
            trigger=trigger,
            event=event,
            conversion_summary=summary,
            certificate=certificate,
        )

    # =========================================================================
    # Versions
    # =========================================================================

    async def append_version(
        self,
        document_id: UUID,
        change_type: ChangeType,
        change_description: str,
        author: str,
        attachments: Sequence[Attachment] | None = None,
        label: str | None = None,
    ) -> Version:
        """Append a new current version to a document.

        Raises:
            DocumentNotFoundError: If the document does not exist
            TerminalStateError: If the document is destroyed
            PermissionDeniedError: If add-version is denied in the current status
            ConcurrentModificationError: If another writer committed first
        """
        with LogContext(operation="append_version", document_id=str(document_id)):
            async with self._document_lock(document_id):
                document = await self.get_document(document_id)
                expected_revision = document.revision
                version = self.ledger.append_version(
                    document,
                    change_type,
                    change_description,
                    author,
                    attachments=attachments,
                    label=label,
                )
                await self.store.save(document, expected_revision)

            await self._emit(
                AuditEvent(
                    event_type=AuditEventType.VERSION_CREATED,
                    document_id=document_id,
                    actor=author,
                    occurred_at=version.created_at,
                    details={
                        "version_number": version.version_number,
                        "change_type": version.change_type.value,
                        "content_hash": version.content_hash,
                        "attachment_count": len(version.attachment_snapshot),
                    },
                )
            )
            record_version_created(version.change_type.value)
            logger.info(
                "version_created",
                version_number=version.version_number,
                change_type=version.change_type.value,
            )
            return version

    async def relabel_version(
        self,
        document_id: UUID,
        version_number: int,
        label: str,
    ) -> Version:
        """Change the display label of an unlocked version.

        Raises:
            VersionLockedError: If the version is locked
            PermissionDeniedError: If edit is denied in the current status
        """
        async with self._document_lock(document_id):
            document = await self.get_document(document_id)
            expected_revision = document.revision
            version = self.ledger.relabel_version(document, version_number, label)
            await self.store.save(document, expected_revision)
        logger.debug("version_relabelled", document_id=document_id, version_number=version_number)
        return version

    async def verify_integrity(
        self,
        document_id: UUID,
        version_number: int | None = None,
        actor: str | None = None,
    ) -> bool:
        """Recompute a version's content hash and compare it with the stored one.

        A mismatch is recorded as a warning-level audit event.

        Raises:
            DocumentNotFoundError: If the document does not exist
            PermissionDeniedError: If verify-integrity is denied in the current status
            VersionNotFoundError: If the version does not exist
        """
        document = await self.get_document(document_id)
        valid = self.ledger.verify_integrity(document, version_number)
        checked = version_number or (
            document.current_version.version_number if document.current_version else None
        )

        await self._emit(
            AuditEvent(
                event_type=AuditEventType.INTEGRITY_VERIFIED,
                document_id=document_id,
                actor=actor or self.settings.system_actor,
                occurred_at=self.clock.now(),
                severity=AuditSeverity.INFO if valid else AuditSeverity.WARNING,
                details={"version_number": checked, "valid": valid},
            )
        )
        record_integrity_check(valid)
        if not valid:
            logger.warning("integrity_check_failed", document_id=document_id, version_number=checked)
        return valid

    # =========================================================================
    # Retention sweep and reporting
    # =========================================================================

    async def sweep(self, now: datetime | None = None) -> SweepReport:
        """Apply automatic transitions to documents whose retention has lapsed.

        Automatic transitions skip the approval check only. Failures are
        collected in the report and never abort the run. Transitioned
        documents get a retention end date after ``now``, so running the
        sweep again with the same ``now`` changes nothing.
        """
        now = now or self.clock.now()
        report = SweepReport(run_at=now)
        batch_size = self.settings.sweep_batch_size
        seen: set[UUID] = set()

        with observe_sweep() as ctx:
            while True:
                due = await self.store.list_due(now, limit=batch_size + len(seen))
                batch = [d for d in due if d.document_id not in seen]
                if not batch:
                    break
                for candidate in batch:
                    seen.add(candidate.document_id)
                    await self._sweep_one(candidate, now, report)
            ctx["outcomes"] = report.outcome_counts()

        await self._emit(
            AuditEvent(
                event_type=AuditEventType.SWEEP_COMPLETED,
                actor=self.settings.system_actor,
                occurred_at=now,
                severity=AuditSeverity.WARNING if report.failures else AuditSeverity.INFO,
                details=report.outcome_counts(),
            )
        )
        logger.info("sweep_completed", run_at=now.isoformat(), **report.outcome_counts())
        return report

    async def _sweep_one(self, candidate: Document, now: datetime, report: SweepReport) -> None:
        document_id = candidate.document_id
        target: ArchivalStatus | None = None
        with LogContext(operation="sweep", document_id=str(document_id)):
            try:
                async with self._document_lock(document_id):
                    document = await self.get_document(document_id)
                    # Re-check under the lock: a manual transition may have won the race
                    if (
                        document.retention_end_date is None
                        or document.retention_end_date > now
                        or document.status.is_terminal
                    ):
                        report.skipped.append(document_id)
                        return
                    rule = self.resolver.resolve_rule(document.classification, document.status)
                    target = rule.auto_transition_to
                    if target is None:
                        report.skipped.append(document_id)
                        return
                    result = await self._apply_transition(
                        document,
                        target,
                        actor=self.settings.system_actor,
                        justification=self.settings.sweep_justification,
                        trigger=TRIGGER_SWEEP,
                        at=now,
                    )
                report.transitioned.append(result)
            except ArchivistError as e:
                logger.warning("sweep_transition_failed", error=str(e), error_type=type(e).__name__)
                report.failures.append(
                    SweepFailure(
                        document_id=document_id,
                        from_status=candidate.status,
                        target_status=target,
                        error_type=type(e).__name__,
                        message=str(e),
                    )
                )

    async def generate_report(
        self,
        now: datetime | None = None,
        horizon_days: int | None = None,
    ) -> RetentionReport:
        """Summarise retention status across every stored document."""
        now = now or self.clock.now()
        horizon = self.settings.report_horizon_days if horizon_days is None else horizon_days
        documents = await self.store.list_all()
        return build_report(documents, self.resolver, now, horizon)

    # =========================================================================
    # Helpers
    # =========================================================================

    @asynccontextmanager
    async def _document_lock(self, document_id: UUID) -> AsyncGenerator[None, None]:
        """Hold the per-document lock.

        The lock is dropped from the map once its last holder or waiter leaves.
        """
        lock = self._locks.get(document_id)
        if lock is None:
            lock = self._locks[document_id] = asyncio.Lock()
        self._lock_holders[document_id] = self._lock_holders.get(document_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_holders[document_id] -= 1
            if not self._lock_holders[document_id]:
                del self._lock_holders[document_id]
                del self._locks[document_id]

    async def _emit(self, event: AuditEvent) -> None:
        """Record an audit event for an already-committed change.

        Sink failures are logged and never propagated: the commit stands.
        """
        try:
            await self.audit_sink.record(event)
        except Exception as e:
            logger.error(
                "audit_sink_failed",
                event_type=event.event_type.value,
                event_id=str(event.event_id),
                document_id=str(event.document_id) if event.document_id else None,
                error=str(e),
                exc_info=True,
            )


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None

