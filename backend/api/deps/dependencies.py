"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived collaborators
(model clients, blob store, retrieval engine, ingestion queue) are built
once and cached; services are created per request around the request's
database session.

Dependencies: backend.configs, backend.application, backend.boundary, backend.core
System role: DI container for service injection
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.application.services import DocumentService, KnowledgeGraphService, QueryService
from backend.boundary.db import get_async_db, get_async_session_factory
from backend.configs import get_settings


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self):
        self._blob_store = None
        self._content_service = None
        self._embedding_service = None
        self._retrieval_engine = None
        self._answer_composer = None
        self._orchestrator = None
        self._ingestion_queue = None

    @property
    def blob_store(self):
        """Get cached blob store."""
        if self._blob_store is None:
            from backend.boundary.storage import get_blob_store
            self._blob_store = get_blob_store()
        return self._blob_store

    @property
    def content_service(self):
        """Get cached multimodal content service."""
        if self._content_service is None:
            from backend.boundary.llm import GeminiContentService
            self._content_service = GeminiContentService(get_settings().gemini)
        return self._content_service

    @property
    def embedding_service(self):
        """Get cached embedding service."""
        if self._embedding_service is None:
            from backend.boundary.llm import EmbeddingService
            self._embedding_service = EmbeddingService(settings=get_settings().gemini)
        return self._embedding_service

    @property
    def retrieval_engine(self):
        """Get cached retrieval engine."""
        if self._retrieval_engine is None:
            from backend.core.retrieval import RetrievalEngine
            self._retrieval_engine = RetrievalEngine(
                get_async_session_factory(),
                self.embedding_service,
                settings=get_settings().retrieval,
            )
        return self._retrieval_engine

    @property
    def answer_composer(self):
        """Get cached answer composer."""
        if self._answer_composer is None:
            from backend.core.answer_composer import AnswerComposer
            self._answer_composer = AnswerComposer(settings=get_settings().gemini)
        return self._answer_composer

    @property
    def orchestrator(self):
        """Get cached ingestion orchestrator."""
        if self._orchestrator is None:
            from backend.core.document_processing.entrypoint import IngestionOrchestrator
            self._orchestrator = IngestionOrchestrator(
                session_factory=get_async_session_factory(),
                blob_store=self.blob_store,
                content_service=self.content_service,
                embedding_service=self.embedding_service,
            )
        return self._orchestrator

    @property
    def ingestion_queue(self):
        """Get cached ingestion queue."""
        if self._ingestion_queue is None:
            from backend.core.document_processing import get_ingestion_settings
            from backend.core.document_processing.ingestion_queue import IngestionQueue

            ingestion = get_ingestion_settings()
            self._ingestion_queue = IngestionQueue(
                self.orchestrator,
                workers=ingestion.ingestion_workers,
                max_size=ingestion.queue_max_size,
            )
        return self._ingestion_queue

    def clear(self) -> None:
        """Clear all cached instances."""
        self._blob_store = None
        self._content_service = None
        self._embedding_service = None
        self._retrieval_engine = None
        self._answer_composer = None
        self._orchestrator = None
        self._ingestion_queue = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_document_service(db: AsyncSession = Depends(get_async_db)) -> DocumentService:
    """
    Get document service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        DocumentService: Service bound to the request session, shared blob store and queue
    """
    cache = get_service_cache()
    return DocumentService(
        db,
        blob_store=cache.blob_store,
        queue=cache.ingestion_queue,
        settings=get_settings().storage,
    )


def get_query_service() -> QueryService:
    """Get query service backed by the cached retrieval engine and composer."""
    cache = get_service_cache()
    return QueryService(cache.retrieval_engine, cache.answer_composer)


def get_knowledge_graph_service(db: AsyncSession = Depends(get_async_db)) -> KnowledgeGraphService:
    """Get knowledge graph read service bound to the request session."""
    return KnowledgeGraphService(db)
