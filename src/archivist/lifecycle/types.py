"""Archival lifecycle type definitions.

This module defines the closed vocabularies of the lifecycle engine:
- ArchivalStatus: Custody phases, totally ordered
- DocumentAction: Operations gated by the permission table
- ChangeType, MediaKind, FinalDisposition, Urgency, Role
"""

from enum import Enum
from typing import Literal


class ArchivalStatus(str, Enum):
    """Custody phase of a record in its legal lifecycle.

    The declaration order is the custody order; ``order`` exposes it as an
    integer because transition validity is defined in terms of it.
    """

    ACTIVE = "active"
    """In daily use by its owners."""

    SEMI_ACTIVE = "semi_active"
    """Consulted occasionally, kept close at hand."""

    INACTIVE = "inactive"
    """No longer consulted, awaiting final disposition."""

    ARCHIVED = "archived"
    """Under long-term custody; content frozen."""

    DESTRUCTION = "destruction"
    """Retention has lapsed and the record is destroyed (terminal)."""

    @property
    def order(self) -> int:
        """Position of this status in the custody progression (0-based)."""
        return _STATUS_ORDER[self]

    @property
    def is_terminal(self) -> bool:
        """Whether no further mutation is accepted in this status."""
        return self is ArchivalStatus.DESTRUCTION


_STATUS_ORDER: dict[ArchivalStatus, int] = {
    status: index for index, status in enumerate(ArchivalStatus)
}

# Entering these statuses freezes the current version.
LOCKING_STATUSES: frozenset[ArchivalStatus] = frozenset(
    {ArchivalStatus.ARCHIVED, ArchivalStatus.DESTRUCTION}
)

# Entering these statuses surfaces PDF/A conversion advice.
DURABLE_FORMAT_STATUSES: frozenset[ArchivalStatus] = frozenset(
    {ArchivalStatus.SEMI_ACTIVE, ArchivalStatus.ARCHIVED}
)


class DocumentAction(str, Enum):
    """Operations a caller may attempt on a document."""

    EDIT = "edit"
    DELETE = "delete"
    SHARE = "share"
    PRINT = "print"
    VIEW = "view"
    DOWNLOAD = "download"
    CERTIFIED_COPY = "certified-copy"
    VERIFY_INTEGRITY = "verify-integrity"
    TRANSFER = "transfer"
    DESTROY = "destroy"
    CHANGE_STATUS = "change-status"
    ADD_VERSION = "add-version"
    ANNOTATE = "annotate"


class ChangeType(str, Enum):
    """Magnitude of a change recorded by a new version."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


class MediaKind(str, Enum):
    """Kind of file carried by an attachment."""

    PDF = "pdf"
    PDF_A = "pdf-a"
    WORD_PROCESSOR = "word-processor"
    IMAGE = "image"
    SPREADSHEET = "spreadsheet"
    OTHER = "other"


# Kinds already acceptable for long-term custody.
DURABLE_MEDIA_KINDS: frozenset[MediaKind] = frozenset({MediaKind.PDF, MediaKind.PDF_A})


class FinalDisposition(str, Enum):
    """Fate of a record once its retention lapses."""

    RETAIN_PERMANENTLY = "retain-permanently"
    DESTROY = "destroy"
    SELECTIVE_REVIEW = "selective-review"


class Urgency(str, Enum):
    """How close a document is to the end of its retention period."""

    EXPIRED = "expired"  # <= 0 days
    CRITICAL = "critical"  # <= 30 days
    WARNING = "warning"  # <= 90 days
    NORMAL = "normal"


class Role(str, Enum):
    """Roles expected to approve gated transitions.

    The engine only reports the role; verifying that an actor holds it is
    the caller's job.
    """

    ORG_ADMIN = "org_admin"
    ORG_MANAGER = "org_manager"
    ARCHIVIST = "archivist"


class DocumentClassification(str, Enum):
    """Document types shipped with default retention rules."""

    CONTRAT = "contrat"
    FACTURE = "facture"
    DEVIS = "devis"
    RAPPORT = "rapport"
    PROJET = "projet"
    OTHER = "other"


PERMANENT: Literal["permanent"] = "permanent"
RetentionYears = int | Literal["permanent"]
