"""
Vector similarity search over the knowledge tables.

PostgreSQL uses pgvector's cosine distance operator so ranking happens in
the database. Other dialects (SQLite in tests, local development) fall
back to scanning the embedded rows with numpy. Both backends exclude rows
below the similarity threshold and keep index-scan order (creation order)
for equal similarities.

Dependencies: sqlalchemy, pgvector, numpy
System role: searchByVector primitive used by the retrieval engine
"""

import logging
from typing import Sequence

import numpy as np
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.vdb.vector_schemas import VectorHit, VectorQuery
from backend.core.exceptions import VectorStoreError

logger = logging.getLogger(__name__)


def cosine_similarities(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """
    Cosine similarity of each matrix row against the query.

    Zero-norm rows score 0.0.
    """
    row_norms = np.linalg.norm(matrix, axis=1)
    query_norm = float(np.linalg.norm(query))
    denominator = row_norms * query_norm
    dots = matrix @ query
    with np.errstate(divide="ignore", invalid="ignore"):
        sims = np.where(denominator > 0, dots / denominator, 0.0)
    return sims


def _clamp(similarity: float) -> float:
    return max(0.0, min(1.0, float(similarity)))


async def _search_pgvector(
    session: AsyncSession,
    model: type,
    query: VectorQuery,
) -> list[VectorHit]:
    distance = model.embedding.cosine_distance(query.embedding)
    stmt = (
        select(model, distance.label("distance"))
        .where(model.embedding.is_not(None))
        .where(distance <= 1 - query.similarity_threshold)
        .order_by(distance, model.created_at)
        .limit(query.limit)
    )
    if query.workspace is not None:
        stmt = stmt.where(model.workspace == query.workspace)

    result = await session.execute(stmt)
    return [VectorHit(row=row, similarity=_clamp(1 - dist)) for row, dist in result.all()]


async def _search_in_process(
    session: AsyncSession,
    model: type,
    query: VectorQuery,
) -> list[VectorHit]:
    stmt = select(model).where(model.embedding.is_not(None)).order_by(model.created_at)
    if query.workspace is not None:
        stmt = stmt.where(model.workspace == query.workspace)

    rows: Sequence = (await session.execute(stmt)).scalars().all()
    if not rows:
        return []

    matrix = np.vstack([np.asarray(row.embedding, dtype=np.float64) for row in rows])
    sims = cosine_similarities(matrix, np.asarray(query.embedding, dtype=np.float64))

    # Stable sort keeps creation order among equal similarities
    order = np.argsort(-sims, kind="stable")
    hits: list[VectorHit] = []
    for idx in order:
        similarity = float(sims[idx])
        if similarity < query.similarity_threshold:
            break
        hits.append(VectorHit(row=rows[idx], similarity=_clamp(similarity)))
        if len(hits) >= query.limit:
            break
    return hits


async def search_by_vector(
    session: AsyncSession,
    model: type,
    query_vector: Sequence[float],
    threshold: float,
    limit: int,
    workspace: str | None = None,
) -> list[VectorHit]:
    """
    Return rows of `model` most similar to `query_vector`.

    Args:
        session: Async database session
        model: ORM class with `embedding`, `workspace` and `created_at` columns
        query_vector: Query embedding
        threshold: Minimum cosine similarity (inclusive)
        limit: Maximum number of rows
        workspace: Optional workspace filter

    Returns:
        list[VectorHit]: Hits ordered by descending similarity

    Raises:
        VectorStoreError: When the query fails
    """
    query = VectorQuery(
        embedding=list(query_vector),
        limit=limit,
        similarity_threshold=threshold,
        workspace=workspace,
    )

    dialect = session.get_bind().dialect.name
    try:
        if dialect == "postgresql":
            hits = await _search_pgvector(session, model, query)
        else:
            hits = await _search_in_process(session, model, query)
    except Exception as e:
        logger.error(
            f"{__name__}:search_by_vector - {type(e).__name__}: {e}",
            extra={"table": model.__tablename__, "dialect": dialect},
        )
        raise VectorStoreError(
            f"Vector search on {model.__tablename__} failed: {e}",
            operation="search",
        ) from e

    logger.debug(
        f"{__name__}:search_by_vector - {model.__tablename__} hits={len(hits)}",
        extra={"threshold": threshold, "limit": limit, "dialect": dialect},
    )
    return hits
