"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.
The lifespan configures logging, creates tables and runs the ingestion
queue workers for the lifetime of the process.

Dependencies: fastapi, backend.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api.deps.dependencies import get_service_cache
from backend.api.error_handling import register_exception_handlers
from backend.boundary.db import get_async_session_factory
from backend.boundary.db.create_tables import create_all_tables
from backend.configs import get_settings
from backend.core.document_processing.ingestion_queue import requeue_pending
from backend.observability import configure_logging
from backend.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware
from .routers import documents_router, health_router, knowledge_graph_router, query_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    configure_logging()
    logger = logging.getLogger("uvicorn")

    # Startup
    await create_all_tables()
    cache = get_service_cache()
    await cache.ingestion_queue.start()
    requeued = await requeue_pending(get_async_session_factory(), cache.ingestion_queue)
    logger.info(f"Ingestion queue started, {requeued} pending documents requeued")

    yield

    # Shutdown
    await cache.ingestion_queue.stop()
    cache.clear()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="Multimodal RAG API",
        description="Multimodal ingestion and knowledge-graph retrieval",
        version="0.1.0",
        lifespan=lifespan,
    )

    settings = get_settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.observability.enable_request_logging:
        app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    register_exception_handlers(app)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(documents_router, prefix="/api/v1")
    app.include_router(query_router, prefix="/api/v1")
    app.include_router(knowledge_graph_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "backend.api.main:app",
        host=get_settings().api_host,
        port=get_settings().api_port,
    )
