"""
Document domain models and schemas.

Request/response schemas for document upload, listing and status polling.

Dependencies: pydantic
System role: Document API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from backend.boundary.db.models import ChunkType, DocumentStatus, Modality
from backend.models.knowledge_graph import EntityResponse, RelationResponse


class DocumentUploadResponse(BaseModel):
    """Returned immediately after an upload is accepted."""

    document_id: uuid.UUID
    name: str
    status: str = Field(description="Always 'pending' on acceptance")
    file_type: str = Field(description="Lower-case extension without the dot")
    modality: str


class DocumentResponse(BaseModel):
    """Response schema for document operations."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    workspace: str
    name: str
    file_type: str
    modality: Modality
    byte_size: int
    status: DocumentStatus
    chunk_count: int
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class DocumentListResponse(BaseModel):
    """Document list for one workspace."""

    documents: list[DocumentResponse]
    total: int


class DocumentStatusResponse(BaseModel):
    """Ingestion progress of one document."""

    document_id: uuid.UUID
    status: str
    progress: int = Field(ge=0, le=100, description="0 pending, 50 processing, 100 processed, 0 failed")
    chunk_count: int = 0
    error: str | None = None


class ChunkResponse(BaseModel):
    """One stored chunk of a document."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    chunk_order_index: int
    content: str
    chunk_type: ChunkType
    tokens: int
    page_idx: int | None = None
    start_time: float | None = None
    end_time: float | None = None
    metadata: dict = Field(default_factory=dict, validation_alias="metadata_")
    created_at: datetime


class DocumentStats(BaseModel):
    total_chunks: int
    total_entities: int
    total_relations: int
    entity_types: dict[str, int] = Field(default_factory=dict)
    relation_types: dict[str, int] = Field(default_factory=dict)
    avg_chunk_length: int = 0


class DocumentDetailsResponse(BaseModel):
    """A document with its chunks and the graph built from them."""

    document: DocumentResponse
    chunks: list[ChunkResponse]
    entities: list[EntityResponse]
    relations: list[RelationResponse]
    stats: DocumentStats
