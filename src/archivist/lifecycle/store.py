"""Document persistence protocol and in-memory backend.

Stores hand out private copies: mutating a loaded document has no effect
until it is saved, and a save only succeeds when the caller still holds
the latest revision.
"""

from datetime import datetime
from uuid import UUID

from archivist.core.exceptions import ConcurrentModificationError
from archivist.lifecycle.models import Document
from archivist.lifecycle.types import ArchivalStatus


class DocumentStore:
    """Protocol for document persistence backends."""

    async def load(self, document_id: UUID) -> Document | None:
        """Load a private copy of a document."""
        ...

    async def save(self, document: Document, expected_revision: int | None) -> None:
        """Atomically commit a document.

        Args:
            document: Document to commit; its revision is bumped on success
            expected_revision: Revision the caller loaded, None to insert

        Raises:
            ConcurrentModificationError: If the stored revision differs
        """
        ...

    async def list_due(self, now: datetime, limit: int | None = None) -> list[Document]:
        """List non-terminal documents whose retention ended at or before now."""
        ...

    async def list_all(self) -> list[Document]:
        """List every document."""
        ...


class InMemoryDocumentStore(DocumentStore):
    """In-memory document store for testing and single-process use."""

    def __init__(self) -> None:
        self._documents: dict[UUID, Document] = {}

    async def load(self, document_id: UUID) -> Document | None:
        stored = self._documents.get(document_id)
        return stored.copy() if stored else None

    async def save(self, document: Document, expected_revision: int | None) -> None:
        stored = self._documents.get(document.document_id)
        actual = stored.revision if stored else None
        if actual != expected_revision:
            raise ConcurrentModificationError(document.document_id, expected_revision, actual)

        document.revision = (expected_revision or 0) + 1
        self._documents[document.document_id] = document.copy()

    async def list_due(self, now: datetime, limit: int | None = None) -> list[Document]:
        due = [
            d
            for d in self._documents.values()
            if d.retention_end_date is not None
            and d.retention_end_date <= now
            and d.status != ArchivalStatus.DESTRUCTION
        ]
        due.sort(key=lambda d: d.retention_end_date)
        if limit is not None:
            due = due[:limit]
        return [d.copy() for d in due]

    async def list_all(self) -> list[Document]:
        return [d.copy() for d in self._documents.values()]

    def __len__(self) -> int:
        return len(self._documents)
