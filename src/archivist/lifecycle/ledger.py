"""Version ledger: append-only, hash-verified document history.

The ledger mutates the document it is given in place. The transition
engine always passes a private copy and commits it afterwards, which is
what makes each ledger operation atomic from an observer's point of view.
"""

import hashlib
import json
from collections.abc import Sequence

from archivist.core.exceptions import (
    PermissionDeniedError,
    TerminalStateError,
    VersionLockedError,
    VersionNotFoundError,
)
from archivist.lifecycle.clock import Clock, SystemClock
from archivist.lifecycle.models import Attachment, Document, Version
from archivist.lifecycle.permissions import is_action_allowed
from archivist.lifecycle.types import ChangeType, DocumentAction

INITIAL_VERSION_DESCRIPTION = "Initial version"


def compute_content_hash(
    version_number: int,
    change_description: str,
    change_type: ChangeType,
    attachment_snapshot: Sequence[Attachment],
) -> str:
    """SHA-256 over the canonical JSON form of a version's content."""
    payload = {
        "version_number": version_number,
        "change_description": change_description,
        "change_type": change_type.value,
        "attachment_snapshot": [a.snapshot_dict() for a in attachment_snapshot],
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class VersionLedger:
    """Maintains the version chain of documents.

    Invariants kept by every operation:
    - version numbers start at 1 and have no gaps
    - exactly one version is current, and it has the highest number
    - a locked version never changes
    """

    def __init__(self, clock: Clock | None = None):
        self.clock = clock or SystemClock()

    # =========================================================================
    # Appending
    # =========================================================================

    def create_initial_version(
        self,
        document: Document,
        author: str,
        attachments: Sequence[Attachment] | None = None,
        change_description: str = INITIAL_VERSION_DESCRIPTION,
    ) -> Version:
        """Start the ledger of a new document with version 1.

        Raises:
            ValueError: If the document already has versions
        """
        if document.versions:
            raise ValueError(f"Document {document.document_id} already has a version ledger")
        version = self._build_version(
            version_number=1,
            change_type=ChangeType.MAJOR,
            change_description=change_description,
            author=author,
            attachments=tuple(attachments or ()),
            label=None,
        )
        document.versions.append(version)
        return version

    def append_version(
        self,
        document: Document,
        change_type: ChangeType,
        change_description: str,
        author: str,
        attachments: Sequence[Attachment] | None = None,
        label: str | None = None,
    ) -> Version:
        """Append a new current version.

        The new version snapshots the live attachment set by value, or
        ``attachments`` when given, which then becomes the live set.

        Args:
            document: Document to append to
            change_type: Magnitude of the change
            change_description: What changed
            author: Who made the change
            attachments: Replacement attachment set, if any
            label: Display label (defaults to "v<number>")

        Returns:
            The new version

        Raises:
            TerminalStateError: If the document is destroyed
            PermissionDeniedError: If add-version is not allowed in the document's status
        """
        self._require(document, DocumentAction.ADD_VERSION)

        snapshot = tuple(attachments) if attachments is not None else tuple(document.attachments)
        version = self._build_version(
            version_number=document.latest_version_number + 1,
            change_type=change_type,
            change_description=change_description,
            author=author,
            attachments=snapshot,
            label=label,
        )

        for existing in document.versions:
            existing.is_current = False
        document.versions.append(version)
        return version

    # =========================================================================
    # Locking and verification
    # =========================================================================

    def lock_current_version(self, document: Document) -> Version | None:
        """Freeze the current version. Idempotent.

        Returns:
            The current version, or None if the ledger is empty
        """
        current = document.current_version
        if current is not None and not current.is_locked:
            current.is_locked = True
        return current

    def verify_integrity(self, document: Document, version_number: int | None = None) -> bool:
        """Recompute a version's hash and compare it with the stored one.

        Args:
            document: Document owning the version
            version_number: Version to check (defaults to the current version)

        Raises:
            PermissionDeniedError: If verify-integrity is not allowed in the document's status
            VersionNotFoundError: If the version does not exist
        """
        if not is_action_allowed(document.status, DocumentAction.VERIFY_INTEGRITY):
            raise PermissionDeniedError(
                document.status, DocumentAction.VERIFY_INTEGRITY, document.document_id
            )
        version = self._get_version(document, version_number)
        expected = compute_content_hash(
            version.version_number,
            version.change_description,
            version.change_type,
            version.attachment_snapshot,
        )
        return expected == version.content_hash

    def relabel_version(self, document: Document, version_number: int, label: str) -> Version:
        """Change the display label of an unlocked version.

        Raises:
            TerminalStateError: If the document is destroyed
            PermissionDeniedError: If edit is not allowed in the document's status
            VersionNotFoundError: If the version does not exist
            VersionLockedError: If the version is locked
        """
        self._require(document, DocumentAction.EDIT)
        version = self._get_version(document, version_number)
        if version.is_locked:
            raise VersionLockedError(version.version_number, "label", document.document_id)
        version.label = label
        return version

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require(self, document: Document, action: DocumentAction) -> None:
        if document.status.is_terminal:
            raise TerminalStateError(document.document_id)
        if not is_action_allowed(document.status, action):
            raise PermissionDeniedError(document.status, action, document.document_id)

    def _get_version(self, document: Document, version_number: int | None) -> Version:
        if version_number is None:
            version = document.current_version
            if version is None:
                raise VersionNotFoundError(0, document.document_id)
            return version
        version = document.get_version(version_number)
        if version is None:
            raise VersionNotFoundError(version_number, document.document_id)
        return version

    def _build_version(
        self,
        version_number: int,
        change_type: ChangeType,
        change_description: str,
        author: str,
        attachments: tuple[Attachment, ...],
        label: str | None,
    ) -> Version:
        return Version(
            version_number=version_number,
            change_type=change_type,
            change_description=change_description,
            author=author,
            content_hash=compute_content_hash(
                version_number, change_description, change_type, attachments
            ),
            attachment_snapshot=attachments,
            label=label or "",
            created_at=self.clock.now(),
            is_current=True,
        )
