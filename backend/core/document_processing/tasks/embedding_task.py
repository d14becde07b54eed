"""
Embedding generation task.

Attaches vectors to chunks in batches. Embedding is best-effort: a chunk
whose embedding fails keeps `embedding=None`, is still persisted and is
never returned by vector search.

Dependencies: backend.boundary.llm
System role: Fourth stage of document ingestion pipeline
"""

import logging

from backend.boundary.llm import EmbeddingService

from ..models import Chunk

logger = logging.getLogger(__name__)


class EmbeddingTask:
    """Generate chunk embeddings with the embedding service."""

    def __init__(self, embedding_service: EmbeddingService) -> None:
        self._embedding_service = embedding_service

    async def embed(self, chunks: list[Chunk]) -> list[Chunk]:
        """
        Embed chunk contents.

        Args:
            chunks: Chunks to embed (modified in place)

        Returns:
            list[Chunk]: The same chunks with embeddings attached
        """
        if not chunks:
            return []

        vectors = await self._embedding_service.embed_batch([chunk.content for chunk in chunks])
        for chunk, vector in zip(chunks, vectors):
            chunk.embedding = vector

        missing = sum(1 for chunk in chunks if chunk.embedding is None)
        if missing:
            logger.warning(
                f"{__name__}:embed - Some chunks have no embedding",
                extra={"missing": missing, "total": len(chunks)},
            )
        return chunks
