"""
Document status updater.

Records document processing status:
PENDING -> PROCESSING -> PROCESSED (or FAILED with error message)

Every write opens its own session from the factory and commits
immediately, so pollers see transitions as they happen and a failure can
be recorded even when the pipeline's own session is unusable.

Dependencies: sqlalchemy, backend.boundary.db
System role: Document lifecycle persistence for the ingestion pipeline
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.boundary.db.CRUD import document_crud
from backend.boundary.db.models import DocumentModel

logger = logging.getLogger(__name__)


class DocumentStatusUpdater:
    """Update document status during processing."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize with a session factory.

        Args:
            session_factory: Factory used to open one session per write
        """
        self._session_factory = session_factory

    async def mark_processing(self, document_id: UUID) -> DocumentModel:
        """
        Mark document as PROCESSING.

        Args:
            document_id: Document UUID

        Raises:
            ValueError: Document not found
        """
        async with self._session_factory() as session:
            try:
                document = await document_crud.mark_processing(session, document_id)
                if document is None:
                    raise ValueError(f"Document {document_id} not found")
                await session.commit()
            except Exception as e:
                logger.error(f"{__name__}:mark_processing - {type(e).__name__}: {e}")
                await session.rollback()
                raise

        logger.info(
            f"{__name__}:mark_processing - Document marked as PROCESSING",
            extra={"document_id": str(document_id)},
        )
        return document

    async def mark_processed(self, document_id: UUID, chunk_count: int) -> None:
        """
        Mark document as PROCESSED.

        Args:
            document_id: Document UUID
            chunk_count: Persisted chunk count

        Raises:
            ValueError: Document not found
        """
        async with self._session_factory() as session:
            try:
                document = await document_crud.mark_processed(session, document_id, chunk_count)
                if document is None:
                    raise ValueError(f"Document {document_id} not found")
                await session.commit()
            except Exception as e:
                logger.error(f"{__name__}:mark_processed - {type(e).__name__}: {e}")
                await session.rollback()
                raise

        logger.info(
            f"{__name__}:mark_processed - Document marked as PROCESSED",
            extra={"document_id": str(document_id), "chunk_count": chunk_count},
        )

    async def mark_failed(self, document_id: UUID, error_message: str) -> None:
        """
        Mark document as FAILED with error details.

        Never raises: a failure to record the failure is logged.

        Args:
            document_id: Document UUID
            error_message: Human-readable error description
        """
        async with self._session_factory() as session:
            try:
                document = await document_crud.mark_failed(session, document_id, error_message)
                await session.commit()
            except Exception as e:
                logger.error(f"{__name__}:mark_failed - {type(e).__name__}: {e}")
                await session.rollback()
                return

        if document is None:
            logger.warning(
                f"{__name__}:mark_failed - Document not found",
                extra={"document_id": str(document_id)},
            )
            return
        logger.info(
            f"{__name__}:mark_failed - Document marked as FAILED",
            extra={"document_id": str(document_id), "error_message": document.error_message},
        )
