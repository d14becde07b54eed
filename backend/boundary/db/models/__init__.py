"""
Database models package.

Exports:
  - DocumentModel, DocumentStatus, Modality: Uploaded files and lifecycle
  - ChunkModel, ChunkType: Searchable content units
  - EntityModel, EntityType: Knowledge graph nodes
  - RelationModel: Knowledge graph edges

Dependencies: sqlalchemy, pgvector, backend.boundary.db.base
System role: Database model definitions for domain entities
"""

from backend.boundary.db.models.document_model import DocumentModel, DocumentStatus, Modality
from backend.boundary.db.models.chunk_model import (
    ENTITY_BEARING_CHUNK_TYPES,
    ChunkModel,
    ChunkType,
)
from backend.boundary.db.models.entity_model import EntityModel, EntityType
from backend.boundary.db.models.relation_model import RelationModel

__all__ = [
    "DocumentModel",
    "DocumentStatus",
    "Modality",
    "ChunkModel",
    "ChunkType",
    "ENTITY_BEARING_CHUNK_TYPES",
    "EntityModel",
    "EntityType",
    "RelationModel",
]
