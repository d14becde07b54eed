"""
Knowledge graph read service.

Workspace-scoped listings of entities and relations, the whole graph of a
workspace, and the per-document breakdown (chunks, the entities built from
them and the relations touching those entities).

Dependencies: backend.boundary.db, backend.models
System role: Knowledge graph inspection
"""

import logging
from collections import Counter
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD import chunk_crud, document_crud, entity_crud, relation_crud
from backend.boundary.db.models import EntityModel, RelationModel
from backend.core.exceptions import DocumentNotFoundError
from backend.models.document import ChunkResponse, DocumentDetailsResponse, DocumentResponse, DocumentStats
from backend.models.knowledge_graph import (
    EntityListResponse,
    EntityResponse,
    KnowledgeGraphResponse,
    Pagination,
    RelationListResponse,
    RelationResponse,
)

logger = logging.getLogger(__name__)


class KnowledgeGraphService:
    """Read-only views over the stored knowledge graph."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_entities(
        self,
        workspace: str,
        entity_type: str | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> EntityListResponse:
        """Page through a workspace's entities, newest first."""
        entities, total = await entity_crud.list_page(
            self.db, workspace, entity_type=entity_type, search=search, limit=limit, offset=offset
        )
        return EntityListResponse(
            entities=[EntityResponse.model_validate(e) for e in entities],
            available_types=await entity_crud.get_types(self.db, workspace),
            pagination=Pagination(limit=limit, offset=offset, total=total),
        )

    async def list_relations(
        self,
        workspace: str,
        relation_type: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> RelationListResponse:
        """Page through a workspace's relations, newest first."""
        relations, total = await relation_crud.list_page(
            self.db, workspace, relation_type=relation_type, limit=limit, offset=offset
        )
        return RelationListResponse(
            relations=await self._with_names(relations),
            pagination=Pagination(limit=limit, offset=offset, total=total),
        )

    async def get_graph(self, workspace: str) -> KnowledgeGraphResponse:
        """Every entity and relation of a workspace."""
        entities = await entity_crud.get_by_workspace(self.db, workspace)
        relations = await relation_crud.get_by_workspace(self.db, workspace)
        names = {entity.id: entity.entity_name for entity in entities}
        return KnowledgeGraphResponse(
            workspace=workspace,
            entities=[EntityResponse.model_validate(e) for e in entities],
            relations=[_relation_response(r, names) for r in relations],
            entity_count=len(entities),
            relation_count=len(relations),
        )

    async def get_document_details(self, document_id: UUID) -> DocumentDetailsResponse:
        """
        A document with its chunks, entities and relations.

        Entities belong to the document when any of their source chunks
        does; relations are those touching such an entity.

        Raises:
            DocumentNotFoundError: No such document
        """
        document = await document_crud.get_by_id(self.db, document_id)
        if document is None:
            raise DocumentNotFoundError(str(document_id))

        chunks = await chunk_crud.get_by_document(self.db, document_id)
        chunk_ids = {str(chunk.id) for chunk in chunks}
        entities = await entity_crud.get_referencing_chunks(self.db, chunk_ids, document.workspace)
        relations = await relation_crud.get_touching_entities(self.db, [e.id for e in entities])

        relation_items = await self._with_names(relations)
        stats = DocumentStats(
            total_chunks=len(chunks),
            total_entities=len(entities),
            total_relations=len(relations),
            entity_types=dict(Counter(e.entity_type for e in entities)),
            relation_types=dict(Counter(r.relation_type for r in relations)),
            avg_chunk_length=round(sum(len(c.content) for c in chunks) / len(chunks)) if chunks else 0,
        )
        return DocumentDetailsResponse(
            document=DocumentResponse.model_validate(document),
            chunks=[ChunkResponse.model_validate(c) for c in chunks],
            entities=[EntityResponse.model_validate(e) for e in entities],
            relations=relation_items,
            stats=stats,
        )

    async def _with_names(self, relations: Sequence[RelationModel]) -> list[RelationResponse]:
        endpoint_ids = list({r.source_entity_id for r in relations} | {r.target_entity_id for r in relations})
        endpoints: list[EntityModel] = await entity_crud.get_by_ids(self.db, endpoint_ids)
        names = {entity.id: entity.entity_name for entity in endpoints}
        return [_relation_response(r, names) for r in relations]


def _relation_response(relation: RelationModel, names: dict[UUID, str]) -> RelationResponse:
    item = RelationResponse.model_validate(relation)
    item.source_entity_name = names.get(relation.source_entity_id, "Unknown")
    item.target_entity_name = names.get(relation.target_entity_id, "Unknown")
    return item
