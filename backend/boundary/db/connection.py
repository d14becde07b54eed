"""
Database connection management.

One async engine and session factory per process, both created lazily and
cached. Request handlers get a session through the get_async_db
dependency; the ingestion workers and the retrieval engine open their own
sessions from the factory so they never share a request's transaction.

Dependencies: sqlalchemy, asyncpg, backend.configs
System role: Database connection lifecycle management
"""

from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from backend.configs import get_settings


@lru_cache
def get_async_engine() -> AsyncEngine:
    """
    Process-wide async engine.

    pool_pre_ping discards connections the server has closed while idle.
    """
    db_config = get_settings().database
    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


@lru_cache
def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to the shared engine.

    Objects stay readable after commit (expire_on_commit=False) because
    pipeline stages hand persisted rows to the next stage.
    """
    return async_sessionmaker(
        bind=get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a request-scoped session.

    Usage:
        @router.get("/documents/{doc_id}")
        async def get_document(doc_id: UUID, db: AsyncSession = Depends(get_async_db)):
            return await document_crud.get_by_id(db, doc_id)
    """
    async with get_async_session_factory()() as session:
        yield session
