"""
Multi-mode retrieval engine.

Every mode is a composition of two primitives:

    vector_search(index, query_vector, threshold, limit)
    expand_via_entities(scored_entities) -> scored chunks

    naive   chunk search
    local   entity search, expanded to the entities' chunks
    global  relation search; endpoint entities inherit the best relation
            similarity and are expanded to their chunks
    hybrid  local + global, merged
    mix     naive + local + global, merged

The query is embedded once per call. Concurrent sub-searches each open
their own database session.

Dependencies: asyncio, sqlalchemy, backend.boundary.vdb, backend.boundary.llm
System role: Query-time evidence retrieval
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.boundary.db.CRUD import chunk_crud, entity_crud
from backend.boundary.db.models import ChunkModel, EntityModel, RelationModel
from backend.boundary.llm import EmbeddingService
from backend.boundary.vdb import search_by_vector
from backend.configs.retrieval import RetrievalSettings
from backend.core.exceptions import RetrievalError, ValidationError, VectorStoreError

from .evidence import (
    EvidenceSet,
    QueryMode,
    ScoredChunk,
    ScoredEntity,
    ScoredRelation,
    merge_by_id,
    merge_evidence,
)

logger = logging.getLogger(__name__)


class SearchIndex(str, Enum):
    """Embedded tables searchable by vector."""

    CHUNKS = "chunks"
    ENTITIES = "entities"
    RELATIONS = "relations"


_INDEX_MODELS = {
    SearchIndex.CHUNKS: ChunkModel,
    SearchIndex.ENTITIES: EntityModel,
    SearchIndex.RELATIONS: RelationModel,
}


def _value(field: Any) -> Any:
    return field.value if isinstance(field, Enum) else field


def _as_uuid(value: str) -> UUID | None:
    try:
        return UUID(str(value))
    except ValueError:
        return None


def scored_chunk(chunk: ChunkModel, similarity: float) -> ScoredChunk:
    return ScoredChunk(
        id=str(chunk.id),
        document_id=str(chunk.document_id),
        content=chunk.content,
        chunk_type=_value(chunk.chunk_type),
        chunk_order_index=chunk.chunk_order_index,
        page_idx=chunk.page_idx,
        start_time=chunk.start_time,
        end_time=chunk.end_time,
        similarity=similarity,
    )


def scored_entity(entity: EntityModel, similarity: float) -> ScoredEntity:
    return ScoredEntity(
        id=str(entity.id),
        entity_name=entity.entity_name,
        entity_type=_value(entity.entity_type),
        description=entity.description or "",
        source_chunk_ids=list(entity.source_chunk_ids or []),
        similarity=similarity,
    )


def parse_mode(mode: QueryMode | str | None, default: str = QueryMode.MIX.value) -> QueryMode:
    """
    Parse a mode name.

    Raises:
        ValidationError: Unknown mode
    """
    try:
        return QueryMode(mode or default)
    except ValueError as e:
        allowed = ", ".join(m.value for m in QueryMode)
        raise ValidationError(f"Invalid mode '{mode}'. Expected one of: {allowed}", field="mode") from e


class RetrievalEngine:
    """Retrieve evidence for a query in one of five modes."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        embedding_service: EmbeddingService,
        settings: RetrievalSettings | None = None,
    ) -> None:
        """
        Initialize retrieval engine.

        Args:
            session_factory: Opens one session per sub-search
            embedding_service: Embeds the query
            settings: Retrieval settings (defaults loaded from environment)
        """
        self._session_factory = session_factory
        self._embedding_service = embedding_service
        self._settings = settings or RetrievalSettings()

    @property
    def settings(self) -> RetrievalSettings:
        return self._settings

    async def retrieve(
        self,
        query: str,
        mode: QueryMode | str | None = None,
        top_k: int | None = None,
        workspace: str = "default",
    ) -> EvidenceSet:
        """
        Retrieve evidence for a query.

        Args:
            query: Natural-language query
            mode: naive, local, global, hybrid or mix (default from settings)
            top_k: Chunks returned by the chunk search (1..max_top_k)
            workspace: Scope of the search

        Returns:
            EvidenceSet: Chunks, entities and relations with similarities

        Raises:
            ValidationError: Empty query, unknown mode or top_k out of range
            RetrievalError: Query embedding or vector search failed
        """
        query_mode = parse_mode(mode, self._settings.default_mode)
        if not query or not query.strip():
            raise ValidationError("Query must not be empty", field="query")
        k = self._settings.top_k if top_k is None else top_k
        if not 1 <= k <= self._settings.max_top_k:
            raise ValidationError(f"top_k must be between 1 and {self._settings.max_top_k}", field="top_k")

        start = time.perf_counter()
        try:
            query_vector = await self._embedding_service.embed_query(query)
        except Exception as e:
            logger.error(f"{__name__}:retrieve - Query embedding failed - {type(e).__name__}: {e}")
            raise RetrievalError(f"Failed to embed query: {e}", mode=query_mode.value) from e

        try:
            if query_mode == QueryMode.NAIVE:
                evidence = await self._naive(query_vector, k, workspace)
            elif query_mode == QueryMode.LOCAL:
                evidence = await self._local(query_vector, workspace)
            elif query_mode == QueryMode.GLOBAL:
                evidence = await self._global(query_vector, workspace)
            elif query_mode == QueryMode.HYBRID:
                evidence = merge_evidence(
                    *await asyncio.gather(
                        self._local(query_vector, workspace),
                        self._global(query_vector, workspace),
                    )
                )
            else:
                evidence = merge_evidence(
                    *await asyncio.gather(
                        self._naive(query_vector, k, workspace),
                        self._local(query_vector, workspace),
                        self._global(query_vector, workspace),
                    )
                )
        except VectorStoreError as e:
            raise RetrievalError(f"Vector search failed: {e.message}", mode=query_mode.value) from e

        logger.info(
            f"{__name__}:retrieve - mode={query_mode.value}",
            extra={
                "workspace": workspace,
                "chunks": len(evidence.chunks),
                "entities": len(evidence.entities),
                "relations": len(evidence.relations),
                "elapsed_ms": round((time.perf_counter() - start) * 1000, 1),
            },
        )
        return evidence

    async def vector_search(
        self,
        index: SearchIndex | str,
        query_vector: Sequence[float],
        limit: int,
        threshold: float | None = None,
        workspace: str | None = None,
    ) -> list:
        """
        Search one embedded table.

        Args:
            index: chunks, entities or relations
            query_vector: Query embedding
            limit: Maximum hits
            threshold: Similarity floor (defaults to settings)
            workspace: Optional workspace filter

        Returns:
            ScoredChunk, ScoredEntity or ScoredRelation list, best first
        """
        search_index = SearchIndex(index)
        floor = self._settings.similarity_threshold if threshold is None else threshold

        async with self._session_factory() as session:
            hits = await search_by_vector(
                session,
                _INDEX_MODELS[search_index],
                query_vector,
                threshold=floor,
                limit=limit,
                workspace=workspace,
            )
            if search_index == SearchIndex.CHUNKS:
                return [scored_chunk(hit.row, hit.similarity) for hit in hits]
            if search_index == SearchIndex.ENTITIES:
                return [scored_entity(hit.row, hit.similarity) for hit in hits]

            endpoint_ids = {hit.row.source_entity_id for hit in hits} | {hit.row.target_entity_id for hit in hits}
            names = {e.id: e.entity_name for e in await entity_crud.get_by_ids(session, list(endpoint_ids))}
            return [
                ScoredRelation(
                    id=str(hit.row.id),
                    source_entity_id=str(hit.row.source_entity_id),
                    target_entity_id=str(hit.row.target_entity_id),
                    source_name=names.get(hit.row.source_entity_id),
                    target_name=names.get(hit.row.target_entity_id),
                    relation_type=hit.row.relation_type,
                    description=hit.row.description or "",
                    source_chunk_ids=list(hit.row.source_chunk_ids or []),
                    similarity=hit.similarity,
                )
                for hit in hits
            ]

    async def expand_via_entities(self, entities: Sequence[ScoredEntity]) -> list[ScoredChunk]:
        """
        Chunks contributing to the given entities.

        Each chunk is scored with the highest similarity among the entities
        that reference it. Chunks are ranked by score, first-seen order for
        ties. Chunk ids that no longer exist are skipped.
        """
        scores: dict[str, float] = {}
        for entity in entities:
            for chunk_id in entity.source_chunk_ids:
                if entity.similarity > scores.get(chunk_id, -1.0):
                    scores[chunk_id] = entity.similarity
        if not scores:
            return []

        ids = [uid for uid in (_as_uuid(cid) for cid in scores) if uid is not None]
        async with self._session_factory() as session:
            chunks = await chunk_crud.get_by_ids(session, ids)

        found = {str(chunk.id): chunk for chunk in chunks}
        expanded = [
            scored_chunk(found[chunk_id], score)
            for chunk_id, score in scores.items()
            if chunk_id in found
        ]
        return merge_by_id(expanded)

    async def _naive(self, query_vector: Sequence[float], top_k: int, workspace: str) -> EvidenceSet:
        chunks = await self.vector_search(SearchIndex.CHUNKS, query_vector, limit=top_k, workspace=workspace)
        return EvidenceSet(chunks=chunks)

    async def _local(self, query_vector: Sequence[float], workspace: str) -> EvidenceSet:
        entities = await self.vector_search(
            SearchIndex.ENTITIES, query_vector, limit=self._settings.entity_top_k, workspace=workspace
        )
        return EvidenceSet(chunks=await self.expand_via_entities(entities), entities=entities)

    async def _global(self, query_vector: Sequence[float], workspace: str) -> EvidenceSet:
        relations = await self.vector_search(
            SearchIndex.RELATIONS, query_vector, limit=self._settings.entity_top_k, workspace=workspace
        )
        if not relations:
            return EvidenceSet()

        inherited: dict[str, float] = {}
        for relation in relations:
            for entity_id in (relation.source_entity_id, relation.target_entity_id):
                inherited[entity_id] = max(inherited.get(entity_id, 0.0), relation.similarity)

        async with self._session_factory() as session:
            models = await entity_crud.get_by_ids(session, [UUID(entity_id) for entity_id in inherited])
        by_id = {str(model.id): model for model in models}
        entities = merge_by_id(
            [scored_entity(by_id[entity_id], score) for entity_id, score in inherited.items() if entity_id in by_id]
        )
        return EvidenceSet(
            chunks=await self.expand_via_entities(entities),
            entities=entities,
            relations=relations,
        )
