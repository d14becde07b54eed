"""
Vector search boundary.

Exports:
  - search_by_vector: cosine similarity search over chunks, entities or relations
  - VectorHit, VectorQuery: search result and parameter schemas
"""

from backend.boundary.vdb.pgvector_search import cosine_similarities, search_by_vector
from backend.boundary.vdb.vector_schemas import VectorHit, VectorQuery

__all__ = ["search_by_vector", "cosine_similarities", "VectorHit", "VectorQuery"]
