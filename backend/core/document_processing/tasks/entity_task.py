"""
Entity/relation extraction task.

Thin wrapper over the knowledge graph builder that turns any failure into
EntityExtractionError so the orchestrator can treat it as non-fatal.

Dependencies: backend.core.knowledge_graph
System role: Final, best-effort stage of document ingestion pipeline
"""

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.models import ChunkModel
from backend.core.exceptions import EntityExtractionError
from backend.core.knowledge_graph import KnowledgeGraphBuilder, KnowledgeGraphResult


class EntityExtractionTask:
    """Build the knowledge graph for persisted chunks."""

    def __init__(self, builder: KnowledgeGraphBuilder) -> None:
        self._builder = builder

    async def run(
        self,
        session: AsyncSession,
        workspace: str,
        chunks: Sequence[ChunkModel],
    ) -> KnowledgeGraphResult:
        """
        Extract and persist entities and relations, then commit.

        Raises:
            EntityExtractionError: Any failure during extraction or persistence
        """
        try:
            result = await self._builder.build(session, workspace, chunks)
            await session.commit()
            return result
        except Exception as e:
            await session.rollback()
            raise EntityExtractionError(
                f"Entity extraction failed: {e}",
                {"error_type": type(e).__name__, "chunks": len(chunks)},
            ) from e
