"""API routers."""

from .documents import router as documents_router
from .health import router as health_router
from .knowledge_graph import router as knowledge_graph_router
from .query import router as query_router

__all__ = [
    "documents_router",
    "health_router",
    "knowledge_graph_router",
    "query_router",
]
