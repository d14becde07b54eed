"""
Knowledge graph response schemas.

Entity and relation listings for a workspace and the per-document
breakdown returned by the document details endpoint.

Dependencies: pydantic
System role: Knowledge graph API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class EntityResponse(BaseModel):
    """One stored entity."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    workspace: str
    entity_name: str
    entity_type: str
    description: str = ""
    source_chunk_ids: list[str] = Field(default_factory=list)
    created_at: datetime


class RelationResponse(BaseModel):
    """One stored relation with its endpoint names resolved."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    workspace: str
    source_entity_id: uuid.UUID
    target_entity_id: uuid.UUID
    source_entity_name: str = "Unknown"
    target_entity_name: str = "Unknown"
    relation_type: str
    description: str = ""
    source_chunk_ids: list[str] = Field(default_factory=list)
    created_at: datetime


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int


class EntityListResponse(BaseModel):
    """A page of entities plus the types available for filtering."""

    entities: list[EntityResponse]
    available_types: list[str] = Field(default_factory=list)
    pagination: Pagination


class RelationListResponse(BaseModel):
    relations: list[RelationResponse]
    pagination: Pagination


class KnowledgeGraphResponse(BaseModel):
    """Every entity and relation of a workspace."""

    workspace: str
    entities: list[EntityResponse]
    relations: list[RelationResponse]
    entity_count: int
    relation_count: int
