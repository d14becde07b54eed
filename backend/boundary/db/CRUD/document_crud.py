"""
Document CRUD operations.

Workspace listing and the status transitions of the ingestion lifecycle
(pending -> processing -> processed | failed).

Dependencies: sqlalchemy, backend.boundary.db.models
System role: Document persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.models.document_model import DocumentModel, DocumentStatus
from backend.boundary.db.CRUD.base_crud import BaseCRUD

# error_message column holds 2048; keep headroom for driver encoding
MAX_ERROR_MESSAGE_LENGTH = 2000


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """CRUD operations for DocumentModel."""

    def __init__(self) -> None:
        super().__init__(DocumentModel)

    async def get_by_workspace(
        self,
        session: AsyncSession,
        workspace: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[DocumentModel]:
        """
        Documents of a workspace, newest first.

        Args:
            session: Async database session
            workspace: Workspace name
            limit: Page size (None for all)
            offset: Rows to skip
        """
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.workspace == workspace)
            .order_by(DocumentModel.created_at.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_status(
        self,
        session: AsyncSession,
        status: DocumentStatus,
        limit: int | None = None,
    ) -> Sequence[DocumentModel]:
        """Documents currently in `status`, e.g. pending ones left by a restart."""
        stmt = select(DocumentModel).where(DocumentModel.status == status).order_by(DocumentModel.created_at)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def update_status(
        self,
        session: AsyncSession,
        id: UUID,
        status: DocumentStatus,
        error_message: str | None = None,
        chunk_count: int | None = None,
    ) -> DocumentModel | None:
        """
        Move a document to `status`.

        Only FAILED carries an error message; every other status clears it.
        Messages are truncated to fit the column.

        Returns:
            The updated document, or None if it does not exist
        """
        values: dict = {"status": status, "error_message": None}
        if status == DocumentStatus.FAILED:
            values["error_message"] = (error_message or "Unknown error")[:MAX_ERROR_MESSAGE_LENGTH]
        if chunk_count is not None:
            values["chunk_count"] = chunk_count
        return await self.update_by_id(session, id, **values)

    async def mark_processing(self, session: AsyncSession, id: UUID) -> DocumentModel | None:
        return await self.update_status(session, id, DocumentStatus.PROCESSING)

    async def mark_processed(self, session: AsyncSession, id: UUID, chunk_count: int) -> DocumentModel | None:
        return await self.update_status(session, id, DocumentStatus.PROCESSED, chunk_count=chunk_count)

    async def mark_failed(self, session: AsyncSession, id: UUID, error_message: str) -> DocumentModel | None:
        return await self.update_status(session, id, DocumentStatus.FAILED, error_message)


document_crud = DocumentCRUD()
