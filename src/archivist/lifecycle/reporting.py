"""Retention reporting across all documents."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from uuid_utils.compat import uuid7

from archivist.lifecycle.models import Document
from archivist.lifecycle.retention import RetentionPolicyResolver
from archivist.lifecycle.types import ArchivalStatus, Urgency


@dataclass(frozen=True)
class ExpiringDocument:
    """A document whose retention ends within the report horizon."""

    document_id: UUID
    title: str
    status: ArchivalStatus
    retention_end_date: datetime
    days_remaining: int
    urgency: Urgency
    auto_transition_to: ArchivalStatus | None = None


@dataclass
class RetentionReport:
    """Summary of retention status across documents."""

    report_id: UUID = field(default_factory=uuid7)
    """Unique identifier for this report."""

    generated_at: datetime | None = None
    """Clock time the report was computed for."""

    horizon_days: int = 90
    """Documents ending retention within this many days are listed."""

    counts_by_status: dict[str, int] = field(default_factory=dict)
    """Document counts per archival status."""

    counts_by_urgency: dict[str, int] = field(default_factory=dict)
    """Document counts per urgency bucket (finite retention only)."""

    permanent_count: int = 0
    """Documents without a retention end date."""

    expiring: list[ExpiringDocument] = field(default_factory=list)
    """Documents within the horizon, overdue first."""

    @property
    def total_count(self) -> int:
        return sum(self.counts_by_status.values())

    @property
    def overdue_count(self) -> int:
        return self.counts_by_urgency.get(Urgency.EXPIRED.value, 0)


def build_report(
    documents: Iterable[Document],
    resolver: RetentionPolicyResolver,
    now: datetime,
    horizon_days: int,
) -> RetentionReport:
    """Compute a RetentionReport for the given documents.

    Destroyed documents are counted by status but never listed as expiring.
    """
    report = RetentionReport(
        generated_at=now,
        horizon_days=horizon_days,
        counts_by_status={status.value: 0 for status in ArchivalStatus},
        counts_by_urgency={level.value: 0 for level in Urgency},
    )

    for document in documents:
        report.counts_by_status[document.status.value] += 1
        if document.status.is_terminal:
            continue

        if document.retention_end_date is None:
            report.permanent_count += 1
            continue

        days = resolver.days_remaining(document.retention_end_date, now)
        level = resolver.urgency(days)
        report.counts_by_urgency[level.value] += 1

        if days is not None and days <= horizon_days:
            rule = resolver.resolve_rule(document.classification, document.status)
            report.expiring.append(
                ExpiringDocument(
                    document_id=document.document_id,
                    title=document.title,
                    status=document.status,
                    retention_end_date=document.retention_end_date,
                    days_remaining=days,
                    urgency=level,
                    auto_transition_to=rule.auto_transition_to,
                )
            )

    report.expiring.sort(key=lambda e: (e.days_remaining, str(e.document_id)))
    return report
