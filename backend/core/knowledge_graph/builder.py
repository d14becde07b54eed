"""
Knowledge graph construction for one ingestion call.

extract -> deduplicate -> embed -> upsert entities -> upsert relations.
Entities are written before relations so that relation endpoints always
resolve to persisted rows.

Dependencies: sqlalchemy, backend.boundary.db, backend.boundary.llm
System role: Entity/relation stage of the ingestion pipeline
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD import chunk_crud, entity_crud, relation_crud
from backend.boundary.db.models import ENTITY_BEARING_CHUNK_TYPES, ChunkModel
from backend.boundary.llm import EmbeddingService

from .deduplicator import deduplicate_entities, deduplicate_relations, relation_embedding_text
from .extractor import EntityExtractor
from .schemas import KnowledgeGraphResult, MergedEntity, MergedRelation

logger = logging.getLogger(__name__)


class KnowledgeGraphBuilder:
    """Build and persist entities and relations from a document's chunks."""

    def __init__(self, extractor: EntityExtractor, embedding_service: EmbeddingService) -> None:
        self._extractor = extractor
        self._embedding_service = embedding_service

    async def build(
        self,
        session: AsyncSession,
        workspace: str,
        chunks: Sequence[ChunkModel],
    ) -> KnowledgeGraphResult:
        """
        Extract, merge and persist the knowledge graph for a set of chunks.

        Only text, audio and video-segment chunks are considered. Flushes but
        does not commit.

        Args:
            session: Async database session
            workspace: Workspace the entities belong to
            chunks: Persisted chunks of one document

        Returns:
            KnowledgeGraphResult: Created and merged counts
        """
        eligible = [
            (str(chunk.id), chunk.content)
            for chunk in chunks
            if chunk.chunk_type in ENTITY_BEARING_CHUNK_TYPES
        ]
        result = KnowledgeGraphResult(chunks_processed=len(eligible))
        if not eligible:
            return result

        extractions = await self._extractor.extract_from_chunks(eligible)
        entities = deduplicate_entities(extractions)
        relations = deduplicate_relations(extractions, entities)
        if not entities:
            logger.info(f"{__name__}:build - No entities extracted", extra={"chunks": len(eligible)})
            return result

        entity_vectors = await self._embedding_service.embed_batch(
            [entity.embedding_text for entity in entities.values()]
        )
        for entity, vector in zip(entities.values(), entity_vectors):
            entity.embedding = vector

        relation_vectors = await self._embedding_service.embed_batch(
            [relation_embedding_text(relation, entities) for relation in relations]
        )
        for relation, vector in zip(relations, relation_vectors):
            relation.embedding = vector

        # The document may have been deleted while the model calls ran
        existing = await chunk_crud.get_existing_ids(session, [UUID(chunk_id) for chunk_id, _ in eligible])
        live = {str(chunk_id) for chunk_id in existing}
        if len(live) < len(eligible):
            entities = {key: entity for key, entity in entities.items() if _keep_live_chunks(entity, live)}
            relations = [
                relation for relation in relations
                if _keep_live_chunks(relation, live) and relation.source in entities and relation.target in entities
            ]
            logger.warning(
                f"{__name__}:build - Source chunks vanished during extraction",
                extra={"chunks": len(eligible), "remaining": len(live), "entities_kept": len(entities)},
            )
            if not entities:
                return result

        entity_ids = {}
        for key, entity in entities.items():
            model, created = await entity_crud.upsert(
                session,
                workspace=workspace,
                entity_name=entity.name,
                normalized_name=key,
                entity_type=entity.entity_type,
                description=entity.description,
                embedding=entity.embedding,
                chunk_ids=entity.chunk_ids,
            )
            entity_ids[key] = model.id
            if created:
                result.entities_created += 1
            else:
                result.entities_merged += 1

        for relation in relations:
            _, created = await relation_crud.upsert(
                session,
                workspace=workspace,
                source_entity_id=entity_ids[relation.source],
                relation_type=relation.relation_type,
                target_entity_id=entity_ids[relation.target],
                description=relation.description,
                embedding=relation.embedding,
                chunk_ids=relation.chunk_ids,
            )
            if created:
                result.relations_created += 1
            else:
                result.relations_merged += 1

        logger.info(
            f"{__name__}:build - Knowledge graph updated",
            extra={"workspace": workspace, **result.model_dump()},
        )
        return result


def _keep_live_chunks(record: MergedEntity | MergedRelation, live: set[str]) -> bool:
    """Drop chunk ids that no longer exist; False when none are left."""
    record.chunk_ids = [chunk_id for chunk_id in record.chunk_ids if chunk_id in live]
    return bool(record.chunk_ids)
