"""
Chunk CRUD operations.

Batched inserts, per-document listing and deletion for ChunkModel.

Dependencies: sqlalchemy, backend.boundary.db.models
System role: Chunk persistence operations
"""

from typing import Any, Iterable, Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.models.chunk_model import ChunkModel
from backend.boundary.db.CRUD.base_crud import BaseCRUD


class ChunkCRUD(BaseCRUD[ChunkModel]):
    """CRUD operations for ChunkModel."""

    def __init__(self) -> None:
        """Initialize ChunkCRUD with ChunkModel."""
        super().__init__(ChunkModel)

    async def bulk_create(
        self,
        session: AsyncSession,
        rows: Iterable[dict[str, Any]],
        batch_size: int = 100,
    ) -> list[ChunkModel]:
        """
        Insert chunk rows in batches of `batch_size`.

        Args:
            session: Async database session
            rows: Chunk field mappings
            batch_size: Rows per flush

        Returns:
            Created ChunkModels in input order
        """
        return await self.create_many(session, rows, batch_size=batch_size)

    async def get_by_document(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> Sequence[ChunkModel]:
        """Chunks of a document in order-index order."""
        stmt = (
            select(ChunkModel)
            .where(ChunkModel.document_id == document_id)
            .order_by(ChunkModel.chunk_order_index)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_existing_ids(self, session: AsyncSession, ids: Iterable[UUID]) -> set[UUID]:
        """Subset of `ids` that still exist."""
        wanted = list(ids)
        if not wanted:
            return set()
        result = await session.execute(select(ChunkModel.id).where(ChunkModel.id.in_(wanted)))
        return set(result.scalars().all())

    async def get_ids_by_document(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> list[UUID]:
        """Primary keys of a document's chunks."""
        stmt = select(ChunkModel.id).where(ChunkModel.document_id == document_id)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def delete_by_document(self, session: AsyncSession, document_id: UUID) -> int:
        """
        Delete every chunk of a document.

        Args:
            session: Async database session
            document_id: Owning document UUID

        Returns:
            Number of chunks deleted
        """
        stmt = delete(ChunkModel).where(ChunkModel.document_id == document_id)
        result = await session.execute(stmt)
        return result.rowcount


chunk_crud = ChunkCRUD()
