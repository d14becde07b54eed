"""
Chunk persistence task.

Writes chunks to the database in batches. Any chunks left behind by an
earlier failed attempt for the same document are deleted first, so
retrying a document never duplicates its chunks.

Dependencies: sqlalchemy, backend.boundary.db
System role: Fifth stage of document ingestion pipeline
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD import chunk_crud
from backend.boundary.db.models import ChunkModel

from ..models import Chunk

logger = logging.getLogger(__name__)


class SavingTask:
    """Persist chunks for a document."""

    def __init__(self, batch_size: int = 100) -> None:
        """
        Initialize saving task.

        Args:
            batch_size: Rows inserted per flush
        """
        self._batch_size = batch_size

    async def save(
        self,
        session: AsyncSession,
        document_id: UUID,
        workspace: str,
        chunks: list[Chunk],
    ) -> list[ChunkModel]:
        """
        Replace a document's chunks.

        Flushes but does not commit; the caller owns the transaction.

        Args:
            session: Async database session
            document_id: Owning document
            workspace: Workspace copied onto each chunk
            chunks: Chunks with optional embeddings

        Returns:
            list[ChunkModel]: Persisted rows in order-index order
        """
        removed = await chunk_crud.delete_by_document(session, document_id)
        if removed:
            logger.info(
                f"{__name__}:save - Removed chunks from a previous attempt",
                extra={"document_id": str(document_id), "removed": removed},
            )

        rows = [self._serialize_chunk(chunk, document_id, workspace) for chunk in chunks]
        models = await chunk_crud.bulk_create(session, rows, batch_size=self._batch_size)

        logger.info(
            f"{__name__}:save - Persisted chunks",
            extra={"document_id": str(document_id), "chunks": len(models)},
        )
        return models

    def _serialize_chunk(self, chunk: Chunk, document_id: UUID, workspace: str) -> dict:
        return {
            "document_id": document_id,
            "workspace": workspace,
            "chunk_order_index": chunk.chunk_order_index,
            "start_time": chunk.start_time,
            "end_time": chunk.end_time,
            "content": chunk.content,
            "tokens": chunk.tokens,
            "chunk_type": chunk.chunk_type,
            "embedding": chunk.embedding,
            "page_idx": chunk.page_idx,
            "metadata_": chunk.metadata,
        }
