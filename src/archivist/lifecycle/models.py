"""Document, version and attachment models.

Documents and versions are mutable records owned by the engine; the
serialisation helpers (``to_dict``/``from_dict``) are what stores use to hand
out private copies, so a caller never holds a reference into committed state.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from uuid_utils.compat import uuid7

from archivist.core.exceptions import VersionLockedError
from archivist.lifecycle.types import (
    ArchivalStatus,
    ChangeType,
    FinalDisposition,
    MediaKind,
)


class Attachment(BaseModel):
    """A file attached to a document version.

    Attachments are frozen; a version snapshot holds them by value, so
    replacing the live attachment set never reaches into history.
    """

    model_config = ConfigDict(frozen=True)

    attachment_id: UUID = Field(default_factory=uuid7)
    name: str
    size_bytes: int = Field(default=0, ge=0)
    media_kind: MediaKind = MediaKind.OTHER
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def snapshot_dict(self) -> dict[str, Any]:
        """Canonical, JSON-safe form used for hashing and persistence."""
        return {
            "attachment_id": str(self.attachment_id),
            "name": self.name,
            "size_bytes": self.size_bytes,
            "media_kind": self.media_kind.value,
            "created_at": self.created_at.isoformat(),
        }


# Fields frozen once a version is locked. is_current is a ledger pointer,
# not content, and keeps moving as newer versions are appended.
_LOCKED_FIELDS = frozenset(
    {
        "version_id",
        "version_number",
        "label",
        "change_description",
        "change_type",
        "author",
        "created_at",
        "content_hash",
        "attachment_snapshot",
    }
)


@dataclass
class Version:
    """One entry of a document's version ledger."""

    version_number: int
    change_type: ChangeType
    change_description: str
    author: str
    content_hash: str
    attachment_snapshot: tuple[Attachment, ...] = ()
    label: str = ""
    version_id: UUID = field(default_factory=uuid7)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    is_current: bool = False
    is_locked: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "attachment_snapshot", tuple(self.attachment_snapshot))
        if not self.label:
            object.__setattr__(self, "label", f"v{self.version_number}")
        object.__setattr__(self, "_initialized", True)

    def __setattr__(self, name: str, value: Any) -> None:
        if self.__dict__.get("_initialized") and self.__dict__.get("is_locked"):
            if name in _LOCKED_FIELDS:
                raise VersionLockedError(self.version_number, field_name=name)
            if name == "is_locked" and not value:
                raise VersionLockedError(self.version_number, field_name=name)
        object.__setattr__(self, name, value)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for persistence."""
        return {
            "version_id": str(self.version_id),
            "version_number": self.version_number,
            "label": self.label,
            "change_type": self.change_type.value,
            "change_description": self.change_description,
            "author": self.author,
            "created_at": self.created_at.isoformat(),
            "is_current": self.is_current,
            "is_locked": self.is_locked,
            "content_hash": self.content_hash,
            "attachment_snapshot": [a.snapshot_dict() for a in self.attachment_snapshot],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Version":
        """Create a version from its persisted dictionary."""
        return cls(
            version_id=UUID(data["version_id"]),
            version_number=data["version_number"],
            label=data.get("label", ""),
            change_type=ChangeType(data["change_type"]),
            change_description=data.get("change_description", ""),
            author=data["author"],
            created_at=datetime.fromisoformat(data["created_at"]),
            is_current=data.get("is_current", False),
            is_locked=data.get("is_locked", False),
            content_hash=data["content_hash"],
            attachment_snapshot=tuple(
                Attachment.model_validate(a) for a in data.get("attachment_snapshot", [])
            ),
        )


@dataclass
class Document:
    """Root entity of the engine: a record moving through custody phases.

    Callers read documents; only the transition engine and the version
    ledger mutate them.
    """

    title: str
    classification: str
    document_id: UUID = field(default_factory=uuid7)
    status: ArchivalStatus = ArchivalStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    status_changed_at: datetime | None = None
    status_changed_by: str | None = None
    retention_end_date: datetime | None = None
    final_disposition: FinalDisposition | None = None
    versions: list[Version] = field(default_factory=list)
    revision: int = 0

    @property
    def current_version(self) -> Version | None:
        """The version flagged current, if the ledger has been started."""
        for version in self.versions:
            if version.is_current:
                return version
        return None

    @property
    def attachments(self) -> list[Attachment]:
        """Live attachment set: the current version's snapshot."""
        current = self.current_version
        return list(current.attachment_snapshot) if current else []

    @property
    def latest_version_number(self) -> int:
        """Highest version number in the ledger (0 when empty)."""
        return max((v.version_number for v in self.versions), default=0)

    def get_version(self, version_number: int) -> Version | None:
        """Get a version by number."""
        for version in self.versions:
            if version.version_number == version_number:
                return version
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for persistence."""
        return {
            "document_id": str(self.document_id),
            "title": self.title,
            "classification": self.classification,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "status_changed_at": (
                self.status_changed_at.isoformat() if self.status_changed_at else None
            ),
            "status_changed_by": self.status_changed_by,
            "retention_end_date": (
                self.retention_end_date.isoformat() if self.retention_end_date else None
            ),
            "final_disposition": (
                self.final_disposition.value if self.final_disposition else None
            ),
            "versions": [v.to_dict() for v in self.versions],
            "revision": self.revision,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        """Create a document from its persisted dictionary."""
        return cls(
            document_id=UUID(data["document_id"]),
            title=data["title"],
            classification=data["classification"],
            status=ArchivalStatus(data.get("status", "active")),
            created_at=datetime.fromisoformat(data["created_at"]),
            status_changed_at=(
                datetime.fromisoformat(data["status_changed_at"])
                if data.get("status_changed_at")
                else None
            ),
            status_changed_by=data.get("status_changed_by"),
            retention_end_date=(
                datetime.fromisoformat(data["retention_end_date"])
                if data.get("retention_end_date")
                else None
            ),
            final_disposition=(
                FinalDisposition(data["final_disposition"])
                if data.get("final_disposition")
                else None
            ),
            versions=[Version.from_dict(v) for v in data.get("versions", [])],
            revision=data.get("revision", 0),
        )

    def copy(self) -> "Document":
        """Return an independent copy of this document."""
        return Document.from_dict(self.to_dict())
