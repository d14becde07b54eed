"""
Document API endpoints.

Routes:
- POST /documents - Upload a file and queue it for ingestion
- GET /documents - List documents in a workspace
- GET /documents/{doc_id} - Get one document
- GET /documents/{doc_id}/status - Poll ingestion progress
- GET /documents/{doc_id}/details - Chunks, entities and relations of a document
- DELETE /documents/{doc_id} - Delete document, chunks, graph contributions and blob

Domain errors propagate to the application's exception handlers.

Dependencies: backend.application.services, backend.models
System role: Document HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile

from backend.api.deps import get_document_service, get_knowledge_graph_service
from backend.application.services.document_service import DocumentService
from backend.application.services.knowledge_graph_service import KnowledgeGraphService
from backend.configs import get_settings
from backend.models.document import (
    DocumentDetailsResponse,
    DocumentListResponse,
    DocumentResponse,
    DocumentStatusResponse,
    DocumentUploadResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=DocumentUploadResponse, status_code=202)
async def upload_document(
    file: UploadFile = File(...),
    workspace: str | None = Form(default=None),
    duration_seconds: float | None = Form(default=None, gt=0),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentUploadResponse:
    """
    Upload a document for background ingestion.

    Returns as soon as the bytes are stored; poll
    GET /documents/{doc_id}/status for progress.

    Args:
        file: Multipart file upload
        workspace: Target workspace (defaults to the configured workspace)
        duration_seconds: Known media duration, used to segment audio and video
        document_service: Injected DocumentService

    Returns:
        DocumentUploadResponse: Document ID, status and detected file type

    Raises:
        UnsupportedModalityError(400): Unknown file extension
        ValidationError(400): Empty or oversize file
    """
    data = await file.read()
    metadata = {"duration_seconds": duration_seconds} if duration_seconds else None
    document = await document_service.upload_document(
        filename=file.filename or "",
        data=data,
        workspace=workspace or get_settings().default_workspace,
        content_type=file.content_type,
        metadata=metadata,
    )
    return DocumentUploadResponse(
        document_id=document.id,
        name=document.name,
        status=document.status.value,
        file_type=document.file_type,
        modality=document.modality.value,
    )


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    workspace: str | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    """List documents in a workspace, newest first."""
    documents = await document_service.list_documents(
        workspace or get_settings().default_workspace,
        limit=limit,
        offset=offset,
    )
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(d) for d in documents],
        total=len(documents),
    )


@router.get("/{doc_id}", response_model=DocumentResponse)
async def get_document(
    doc_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """Get a document by ID."""
    document = await document_service.get_document(doc_id)
    return DocumentResponse.model_validate(document)


@router.get("/{doc_id}/status", response_model=DocumentStatusResponse)
async def get_document_status(
    doc_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentStatusResponse:
    """Poll ingestion status: 0 pending, 50 processing, 100 processed, 0 failed."""
    return DocumentStatusResponse(**await document_service.get_status(doc_id))


@router.get("/{doc_id}/details", response_model=DocumentDetailsResponse)
async def get_document_details(
    doc_id: UUID,
    graph_service: KnowledgeGraphService = Depends(get_knowledge_graph_service),
) -> DocumentDetailsResponse:
    """Chunks in order, the entities built from them and the relations touching those entities."""
    return await graph_service.get_document_details(doc_id)


@router.delete("/{doc_id}", status_code=204)
async def delete_document(
    doc_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> Response:
    """
    Delete a document.

    Removes the document's chunk ids from the knowledge graph, deletes
    orphaned entities and relations, the chunks, the record and the blob.
    """
    await document_service.delete_document(doc_id)
    logger.info("Document deleted", extra={"document_id": str(doc_id)})
    return Response(status_code=204)
