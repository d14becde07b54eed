"""Service orchestrators."""

from .document_service import DocumentService
from .knowledge_graph_service import KnowledgeGraphService
from .query_service import QueryService

__all__ = [
    "DocumentService",
    "KnowledgeGraphService",
    "QueryService",
]
