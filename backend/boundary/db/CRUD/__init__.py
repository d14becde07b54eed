"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from backend.boundary.db.CRUD import document_crud, chunk_crud

    document = await document_crud.get_by_id(db, document_id)
    chunks = await chunk_crud.get_by_document(db, document.id)
"""

from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from backend.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from backend.boundary.db.CRUD.entity_crud import EntityCRUD, entity_crud
from backend.boundary.db.CRUD.relation_crud import RelationCRUD, relation_crud

__all__ = [
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
    "ChunkCRUD",
    "chunk_crud",
    "EntityCRUD",
    "entity_crud",
    "RelationCRUD",
    "relation_crud",
]
