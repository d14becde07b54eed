"""
Query API endpoints.

Routes: POST /query

Dependencies: backend.application.services, backend.models
System role: Retrieval HTTP API
"""

from fastapi import APIRouter, Depends

from backend.api.deps import get_query_service
from backend.application.services.query_service import QueryService
from backend.configs import get_settings
from backend.models.query import QueryRequest, QueryResponse

router = APIRouter(tags=["query"])


@router.post("/query", response_model=QueryResponse)
async def query_documents(
    request: QueryRequest,
    query_service: QueryService = Depends(get_query_service),
) -> QueryResponse:
    """
    Retrieve evidence for a question and optionally answer it.

    Args:
        request: Query, mode, top_k, workspace and include_answer
        query_service: Injected QueryService

    Returns:
        QueryResponse: Scored chunks, entities and relations, answer and sources
    """
    return await query_service.query(
        request.query,
        mode=request.mode,
        top_k=request.top_k,
        workspace=request.workspace or get_settings().default_workspace,
        include_answer=request.include_answer,
    )
