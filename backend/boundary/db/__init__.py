"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - DocumentModel, ChunkModel, EntityModel, RelationModel: Domain tables
  - DocumentStatus, Modality, ChunkType, EntityType: Enum types
  - document_crud, chunk_crud, entity_crud, relation_crud: CRUD operation singletons

Dependencies: sqlalchemy, pgvector, backend.configs
System role: Database adapter providing persistent storage for documents,
chunks and the knowledge graph.
"""

from backend.boundary.db.base import Base, TimestampMixin, UUIDMixin, EMBEDDING_DIMENSION
from backend.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from backend.boundary.db.models import (
    ChunkModel,
    ChunkType,
    DocumentModel,
    DocumentStatus,
    EntityModel,
    EntityType,
    Modality,
    RelationModel,
)
from backend.boundary.db.CRUD import (
    BaseCRUD,
    ChunkCRUD,
    DocumentCRUD,
    EntityCRUD,
    RelationCRUD,
    chunk_crud,
    document_crud,
    entity_crud,
    relation_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "EMBEDDING_DIMENSION",
    # Connection
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "DocumentModel",
    "DocumentStatus",
    "Modality",
    "ChunkModel",
    "ChunkType",
    "EntityModel",
    "EntityType",
    "RelationModel",
    # CRUD classes
    "BaseCRUD",
    "DocumentCRUD",
    "ChunkCRUD",
    "EntityCRUD",
    "RelationCRUD",
    # CRUD singletons
    "document_crud",
    "chunk_crud",
    "entity_crud",
    "relation_crud",
]
