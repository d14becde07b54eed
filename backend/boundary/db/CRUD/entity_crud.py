"""
Entity CRUD operations.

Upsert-merge keyed by (workspace, normalized_name) so the same concept
extracted from different documents converges on one row. Concurrent
inserts of the same key are resolved by the unique constraint: the loser
re-reads the winner's row and merges into it.

Dependencies: sqlalchemy, backend.boundary.db.models
System role: Knowledge graph node persistence operations
"""

import logging
from typing import Any, Iterable, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.models.entity_model import EntityModel
from backend.boundary.db.CRUD.base_crud import BaseCRUD

logger = logging.getLogger(__name__)


def merge_descriptions(existing: str, incoming: str) -> str:
    """Append `incoming` unless it is empty or already contained in `existing`."""
    incoming = (incoming or "").strip()
    if not incoming or incoming in existing:
        return existing
    if not existing:
        return incoming
    return f"{existing} {incoming}"


def union_ids(existing: Iterable[str], incoming: Iterable[str]) -> list[str]:
    """Order-preserving union of two id lists."""
    return list(dict.fromkeys([*existing, *incoming]))


def supports_savepoints(session: AsyncSession) -> bool:
    """SAVEPOINT is only relied on for PostgreSQL; the SQLite driver mishandles it."""
    return session.get_bind().dialect.name == "postgresql"


class EntityCRUD(BaseCRUD[EntityModel]):
    """CRUD operations for EntityModel."""

    def __init__(self) -> None:
        """Initialize EntityCRUD with EntityModel."""
        super().__init__(EntityModel)

    async def get_by_normalized_name(
        self,
        session: AsyncSession,
        workspace: str,
        normalized_name: str,
    ) -> EntityModel | None:
        """Entity with the given key, or None."""
        stmt = select(EntityModel).where(
            EntityModel.workspace == workspace,
            EntityModel.normalized_name == normalized_name,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_workspace(
        self,
        session: AsyncSession,
        workspace: str | None = None,
    ) -> Sequence[EntityModel]:
        """All entities, optionally restricted to one workspace, in creation order."""
        stmt = select(EntityModel).order_by(EntityModel.created_at)
        if workspace is not None:
            stmt = stmt.where(EntityModel.workspace == workspace)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_referencing_chunks(
        self,
        session: AsyncSession,
        chunk_ids: set[str],
        workspace: str | None = None,
    ) -> list[EntityModel]:
        """
        Entities whose source_chunk_ids intersect `chunk_ids`.

        Args:
            session: Async database session
            chunk_ids: Chunk ids as strings
            workspace: Optional workspace filter

        Returns:
            Matching entities in creation order
        """
        if not chunk_ids:
            return []
        entities = await self.get_by_workspace(session, workspace)
        return [e for e in entities if chunk_ids.intersection(e.source_chunk_ids or [])]

    async def upsert(
        self,
        session: AsyncSession,
        workspace: str,
        entity_name: str,
        normalized_name: str,
        entity_type: str,
        description: str,
        embedding: Any,
        chunk_ids: Sequence[str],
    ) -> tuple[EntityModel, bool]:
        """
        Insert an entity or merge into the existing row with the same key.

        Merge keeps the stored name and type, appends a new description,
        unions chunk ids and fills a missing embedding.

        Args:
            session: Async database session
            workspace: Workspace name
            entity_name: Canonical display name
            normalized_name: Dedup key
            entity_type: EntityType value
            description: Merged description from the current extraction
            embedding: Vector or None
            chunk_ids: Contributing chunk ids

        Returns:
            tuple[EntityModel, bool]: The row and whether it was created
        """
        existing = await self.get_by_normalized_name(session, workspace, normalized_name)
        if existing is None:
            entity = EntityModel(
                workspace=workspace,
                entity_name=entity_name,
                normalized_name=normalized_name,
                entity_type=entity_type,
                description=description,
                embedding=embedding,
                source_chunk_ids=list(dict.fromkeys(chunk_ids)),
            )
            if not supports_savepoints(session):
                session.add(entity)
                await session.flush()
                return entity, True
            try:
                async with session.begin_nested():
                    session.add(entity)
                    await session.flush()
                return entity, True
            except IntegrityError:
                logger.info(
                    f"{__name__}:upsert - Concurrent insert for '{normalized_name}', merging",
                    extra={"workspace": workspace},
                )
                existing = await self.get_by_normalized_name(session, workspace, normalized_name)
                if existing is None:
                    raise

        existing.description = merge_descriptions(existing.description or "", description)
        existing.source_chunk_ids = union_ids(existing.source_chunk_ids or [], chunk_ids)
        if existing.embedding is None and embedding is not None:
            existing.embedding = embedding
        await session.flush()
        return existing, False

    async def set_chunk_ids(
        self,
        session: AsyncSession,
        entity: EntityModel,
        chunk_ids: list[str],
    ) -> EntityModel:
        """Replace an entity's contributing chunk set."""
        entity.source_chunk_ids = list(chunk_ids)
        await session.flush()
        return entity

    async def list_page(
        self,
        session: AsyncSession,
        workspace: str,
        entity_type: str | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[EntityModel], int]:
        """
        One page of a workspace's entities, newest first.

        Args:
            session: Async database session
            workspace: Workspace name
            entity_type: Exact type filter
            search: Case-insensitive substring of the entity name
            limit: Page size
            offset: Rows to skip

        Returns:
            tuple: (entities on the page, total matching entities)
        """
        conditions = [EntityModel.workspace == workspace]
        if entity_type:
            conditions.append(EntityModel.entity_type == entity_type.upper())
        if search:
            conditions.append(EntityModel.normalized_name.contains(search.strip().lower()))

        total = await session.scalar(select(func.count()).select_from(EntityModel).where(*conditions))
        stmt = (
            select(EntityModel)
            .where(*conditions)
            .order_by(EntityModel.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all(), total or 0

    async def get_types(self, session: AsyncSession, workspace: str) -> list[str]:
        """Distinct entity types present in a workspace, sorted."""
        stmt = select(EntityModel.entity_type).where(EntityModel.workspace == workspace).distinct()
        result = await session.execute(stmt)
        return sorted(result.scalars().all())


entity_crud = EntityCRUD()
