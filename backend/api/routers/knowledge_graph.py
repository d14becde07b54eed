"""
Knowledge graph API endpoints.

Routes:
- GET /entities - Page through a workspace's entities (type and name filters)
- GET /relations - Page through a workspace's relations (type filter)
- GET /knowledge-graph - Every entity and relation of a workspace

Dependencies: backend.application.services, backend.models
System role: Knowledge graph inspection HTTP API
"""

from fastapi import APIRouter, Depends, Query

from backend.api.deps import get_knowledge_graph_service
from backend.application.services.knowledge_graph_service import KnowledgeGraphService
from backend.configs import get_settings
from backend.models.knowledge_graph import EntityListResponse, KnowledgeGraphResponse, RelationListResponse

router = APIRouter(tags=["knowledge-graph"])


@router.get("/entities", response_model=EntityListResponse)
async def list_entities(
    workspace: str | None = Query(default=None),
    type: str | None = Query(default=None, description="Entity type, e.g. PERSON"),
    search: str | None = Query(default=None, description="Substring of the entity name"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    service: KnowledgeGraphService = Depends(get_knowledge_graph_service),
) -> EntityListResponse:
    """List entities, newest first, with the types available for filtering."""
    return await service.list_entities(
        workspace or get_settings().default_workspace,
        entity_type=type,
        search=search,
        limit=limit,
        offset=offset,
    )


@router.get("/relations", response_model=RelationListResponse)
async def list_relations(
    workspace: str | None = Query(default=None),
    type: str | None = Query(default=None, description="Relation label, e.g. WORKS_FOR"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    service: KnowledgeGraphService = Depends(get_knowledge_graph_service),
) -> RelationListResponse:
    """List relations, newest first, with endpoint names resolved."""
    return await service.list_relations(
        workspace or get_settings().default_workspace,
        relation_type=type,
        limit=limit,
        offset=offset,
    )


@router.get("/knowledge-graph", response_model=KnowledgeGraphResponse)
async def get_knowledge_graph(
    workspace: str | None = Query(default=None),
    service: KnowledgeGraphService = Depends(get_knowledge_graph_service),
) -> KnowledgeGraphResponse:
    """Return the whole graph of a workspace."""
    return await service.get_graph(workspace or get_settings().default_workspace)
