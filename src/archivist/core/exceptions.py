"""Core exceptions for the archival lifecycle engine.

Every lifecycle error is raised before any state is committed, so a caller
that catches one can rely on the stored document being unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from archivist.utils.exceptions import ArchivistError

if TYPE_CHECKING:
    from archivist.lifecycle.types import ArchivalStatus, DocumentAction, Role


class LifecycleError(ArchivistError):
    """Base class for recoverable lifecycle failures.

    Attributes:
        document_id: The document the failed operation targeted, if known
    """

    def __init__(self, message: str, document_id: UUID | None = None):
        super().__init__(message)
        self.document_id = document_id


class TransitionNotAllowedError(LifecycleError):
    """Raised when the requested edge is absent from the transition graph.

    Attributes:
        from_status: The document's current status
        to_status: The requested target status
    """

    def __init__(
        self,
        from_status: ArchivalStatus,
        to_status: ArchivalStatus,
        document_id: UUID | None = None,
    ):
        super().__init__(
            f"Transition {from_status.value} -> {to_status.value} is not allowed",
            document_id,
        )
        self.from_status = from_status
        self.to_status = to_status

    def __str__(self) -> str:
        return f"TransitionNotAllowedError: {self.args[0]}"


class ApprovalRequiredError(LifecycleError):
    """Raised when an approval-gated transition is requested without justification.

    Attributes:
        from_status: The document's current status
        to_status: The requested target status
        approver_role: Role the caller is expected to have verified, if configured
    """

    def __init__(
        self,
        from_status: ArchivalStatus,
        to_status: ArchivalStatus,
        approver_role: Role | None = None,
        document_id: UUID | None = None,
    ):
        super().__init__(
            f"Transition {from_status.value} -> {to_status.value} requires a justification",
            document_id,
        )
        self.from_status = from_status
        self.to_status = to_status
        self.approver_role = approver_role

    def __str__(self) -> str:
        role = self.approver_role.value if self.approver_role else None
        return f"ApprovalRequiredError: {self.args[0]} (approver_role={role})"


class PermissionDeniedError(LifecycleError):
    """Raised when an action is not permitted in the document's current status.

    Attributes:
        status: The status the action was attempted in
        action: The denied action
    """

    def __init__(
        self,
        status: ArchivalStatus,
        action: DocumentAction,
        document_id: UUID | None = None,
    ):
        super().__init__(
            f"Action '{action.value}' is not permitted in status '{status.value}'",
            document_id,
        )
        self.status = status
        self.action = action

    def __str__(self) -> str:
        return f"PermissionDeniedError: {self.args[0]}"


class TerminalStateError(LifecycleError):
    """Raised when a mutation targets a document already in destruction."""

    def __init__(self, document_id: UUID | None = None):
        super().__init__(f"Document {document_id} is in its terminal state", document_id)

    def __str__(self) -> str:
        return f"TerminalStateError: {self.args[0]}"


class VersionLockedError(LifecycleError):
    """Raised when a locked version is mutated directly.

    Attributes:
        version_number: The locked version's number
        field_name: The field whose assignment was refused, if any
    """

    def __init__(
        self,
        version_number: int,
        field_name: str | None = None,
        document_id: UUID | None = None,
    ):
        target = f" (field '{field_name}')" if field_name else ""
        super().__init__(f"Version {version_number} is locked{target}", document_id)
        self.version_number = version_number
        self.field_name = field_name

    def __str__(self) -> str:
        return f"VersionLockedError: {self.args[0]}"


class UnknownClassificationError(LifecycleError):
    """Raised or logged when retention rules fall back to the default classification.

    Attributes:
        classification: The unknown classification
        fallback: The classification whose rules were used instead
    """

    def __init__(self, classification: str, fallback: str):
        super().__init__(
            f"Unknown classification '{classification}', falling back to '{fallback}'"
        )
        self.classification = classification
        self.fallback = fallback

    def __str__(self) -> str:
        return f"UnknownClassificationError: {self.args[0]}"


class DocumentNotFoundError(LifecycleError):
    """Raised when the document store has no document with the given ID."""

    def __init__(self, document_id: UUID):
        super().__init__(f"Document not found: {document_id}", document_id)

    def __str__(self) -> str:
        return f"DocumentNotFoundError: {self.args[0]}"


class ConcurrentModificationError(LifecycleError):
    """Raised when a save loses a compare-and-swap on the document revision.

    Attributes:
        expected_revision: Revision the writer loaded
        actual_revision: Revision found in the store, if it could be read
    """

    def __init__(
        self,
        document_id: UUID,
        expected_revision: int | None,
        actual_revision: int | None = None,
    ):
        super().__init__(f"Document {document_id} was modified concurrently", document_id)
        self.expected_revision = expected_revision
        self.actual_revision = actual_revision

    def __str__(self) -> str:
        return (
            f"ConcurrentModificationError: {self.args[0]} "
            f"(expected={self.expected_revision}, actual={self.actual_revision})"
        )


class VersionNotFoundError(LifecycleError):
    """Raised when a document has no version with the given number.

    Attributes:
        version_number: The requested version number
    """

    def __init__(self, version_number: int, document_id: UUID | None = None):
        super().__init__(f"Version {version_number} not found", document_id)
        self.version_number = version_number

    def __str__(self) -> str:
        return f"VersionNotFoundError: {self.args[0]} (document_id={self.document_id})"
