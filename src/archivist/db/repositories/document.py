"""SQL-backed document store.

Each save runs in its own transaction. Updates are guarded by the stored
revision (``UPDATE ... WHERE revision = :expected``), so a writer holding a
stale copy is rejected even when it runs in another process.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from archivist.core.exceptions import ConcurrentModificationError
from archivist.core.logging import get_logger
from archivist.db.config import get_async_session
from archivist.db.models.document import DocumentRecord
from archivist.lifecycle.models import Document
from archivist.lifecycle.store import DocumentStore
from archivist.lifecycle.types import ArchivalStatus
from archivist.utils.exceptions import StorageError

logger = get_logger(__name__)


class SqlDocumentStore(DocumentStore):
    """Document store persisting to a SQLAlchemy async database.

    Usage:
        engine = create_engine_from_settings()
        store = SqlDocumentStore(create_session_factory(engine))
        document = await store.load(document_id)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """Initialize the store.

        Args:
            session_factory: Factory producing async sessions
        """
        self.session_factory = session_factory

    async def load(self, document_id: UUID) -> Document | None:
        try:
            async with get_async_session(self.session_factory) as session:
                record = await session.get(DocumentRecord, document_id)
                return self._to_document(record) if record else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load document {document_id}: {e}") from e

    async def save(self, document: Document, expected_revision: int | None) -> None:
        new_revision = (expected_revision or 0) + 1
        payload = document.to_dict()
        payload["revision"] = new_revision

        try:
            async with get_async_session(self.session_factory) as session:
                if expected_revision is None:
                    await self._insert(session, document, payload)
                else:
                    await self._update(session, document, payload, expected_revision)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save document {document.document_id}: {e}") from e

        document.revision = new_revision
        logger.debug(
            "document_saved",
            document_id=document.document_id,
            revision=new_revision,
            status=document.status.value,
        )

    async def list_due(self, now: datetime, limit: int | None = None) -> list[Document]:
        query = (
            select(DocumentRecord)
            .where(DocumentRecord.retention_end_date.is_not(None))
            .where(DocumentRecord.retention_end_date <= now)
            .where(DocumentRecord.status != ArchivalStatus.DESTRUCTION.value)
            .order_by(DocumentRecord.retention_end_date, DocumentRecord.document_id)
        )
        if limit is not None:
            query = query.limit(limit)

        try:
            async with get_async_session(self.session_factory) as session:
                result = await session.execute(query)
                records = result.scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list due documents: {e}") from e

        documents = [self._to_document(r) for r in records]
        return [
            d
            for d in documents
            if d.retention_end_date is not None and d.retention_end_date <= now
        ]

    async def list_all(self) -> list[Document]:
        query = select(DocumentRecord).order_by(DocumentRecord.created_at)
        try:
            async with get_async_session(self.session_factory) as session:
                result = await session.execute(query)
                return [self._to_document(r) for r in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list documents: {e}") from e

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _insert(
        self,
        session: AsyncSession,
        document: Document,
        payload: dict,
    ) -> None:
        session.add(
            DocumentRecord(
                document_id=document.document_id,
                title=document.title,
                classification=document.classification,
                status=document.status.value,
                retention_end_date=document.retention_end_date,
                revision=payload["revision"],
                payload=payload,
            )
        )
        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            actual = await self._current_revision(session, document.document_id)
            raise ConcurrentModificationError(document.document_id, None, actual) from e

    async def _update(
        self,
        session: AsyncSession,
        document: Document,
        payload: dict,
        expected_revision: int,
    ) -> None:
        result = await session.execute(
            update(DocumentRecord)
            .where(DocumentRecord.document_id == document.document_id)
            .where(DocumentRecord.revision == expected_revision)
            .values(
                title=document.title,
                classification=document.classification,
                status=document.status.value,
                retention_end_date=document.retention_end_date,
                revision=payload["revision"],
                payload=payload,
            )
        )
        if result.rowcount != 1:
            await session.rollback()
            actual = await self._current_revision(session, document.document_id)
            raise ConcurrentModificationError(document.document_id, expected_revision, actual)
        await session.commit()

    async def _current_revision(self, session: AsyncSession, document_id: UUID) -> int | None:
        result = await session.execute(
            select(DocumentRecord.revision).where(DocumentRecord.document_id == document_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _to_document(record: DocumentRecord) -> Document:
        document = Document.from_dict(record.payload)
        document.revision = record.revision
        return document
