"""
Relation CRUD operations.

Upsert keyed by the (source, type, target) triple and cascade helpers used
when entities disappear.

Dependencies: sqlalchemy, backend.boundary.db.models
System role: Knowledge graph edge persistence operations
"""

import logging
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.models.relation_model import RelationModel
from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.CRUD.entity_crud import supports_savepoints, union_ids

logger = logging.getLogger(__name__)


class RelationCRUD(BaseCRUD[RelationModel]):
    """CRUD operations for RelationModel."""

    def __init__(self) -> None:
        """Initialize RelationCRUD with RelationModel."""
        super().__init__(RelationModel)

    async def get_by_triple(
        self,
        session: AsyncSession,
        source_entity_id: UUID,
        relation_type: str,
        target_entity_id: UUID,
    ) -> RelationModel | None:
        """Relation with the given key, or None."""
        stmt = select(RelationModel).where(
            RelationModel.source_entity_id == source_entity_id,
            RelationModel.relation_type == relation_type,
            RelationModel.target_entity_id == target_entity_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_workspace(
        self,
        session: AsyncSession,
        workspace: str | None = None,
    ) -> Sequence[RelationModel]:
        """All relations, optionally restricted to one workspace, in creation order."""
        stmt = select(RelationModel).order_by(RelationModel.created_at)
        if workspace is not None:
            stmt = stmt.where(RelationModel.workspace == workspace)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_referencing_chunks(
        self,
        session: AsyncSession,
        chunk_ids: set[str],
        workspace: str | None = None,
    ) -> list[RelationModel]:
        """Relations whose source_chunk_ids intersect `chunk_ids`."""
        if not chunk_ids:
            return []
        relations = await self.get_by_workspace(session, workspace)
        return [r for r in relations if chunk_ids.intersection(r.source_chunk_ids or [])]

    async def upsert(
        self,
        session: AsyncSession,
        workspace: str,
        source_entity_id: UUID,
        relation_type: str,
        target_entity_id: UUID,
        description: str,
        embedding: Any,
        chunk_ids: Sequence[str],
    ) -> tuple[RelationModel, bool]:
        """
        Insert a relation or fold chunk ids into the existing triple.

        The stored description is kept on merge.

        Returns:
            tuple[RelationModel, bool]: The row and whether it was created
        """
        existing = await self.get_by_triple(
            session, source_entity_id, relation_type, target_entity_id
        )
        if existing is None:
            relation = RelationModel(
                workspace=workspace,
                source_entity_id=source_entity_id,
                relation_type=relation_type,
                target_entity_id=target_entity_id,
                description=description,
                embedding=embedding,
                source_chunk_ids=list(dict.fromkeys(chunk_ids)),
            )
            if not supports_savepoints(session):
                session.add(relation)
                await session.flush()
                return relation, True
            try:
                async with session.begin_nested():
                    session.add(relation)
                    await session.flush()
                return relation, True
            except IntegrityError:
                logger.info(f"{__name__}:upsert - Concurrent insert for relation, merging")
                existing = await self.get_by_triple(
                    session, source_entity_id, relation_type, target_entity_id
                )
                if existing is None:
                    raise

        existing.source_chunk_ids = union_ids(existing.source_chunk_ids or [], chunk_ids)
        if existing.embedding is None and embedding is not None:
            existing.embedding = embedding
        await session.flush()
        return existing, False

    async def delete_touching_entities(
        self,
        session: AsyncSession,
        entity_ids: Sequence[UUID],
    ) -> int:
        """
        Delete relations whose source or target is in `entity_ids`.

        Returns:
            Number of relations deleted
        """
        if not entity_ids:
            return 0
        ids = list(entity_ids)
        stmt = delete(RelationModel).where(
            or_(
                RelationModel.source_entity_id.in_(ids),
                RelationModel.target_entity_id.in_(ids),
            )
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def list_page(
        self,
        session: AsyncSession,
        workspace: str,
        relation_type: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[RelationModel], int]:
        """One page of a workspace's relations, newest first, with the total count."""
        conditions = [RelationModel.workspace == workspace]
        if relation_type:
            conditions.append(RelationModel.relation_type == relation_type.upper())

        total = await session.scalar(select(func.count()).select_from(RelationModel).where(*conditions))
        stmt = (
            select(RelationModel)
            .where(*conditions)
            .order_by(RelationModel.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all(), total or 0

    async def get_touching_entities(
        self,
        session: AsyncSession,
        entity_ids: Sequence[UUID],
    ) -> Sequence[RelationModel]:
        """Relations whose source or target is in `entity_ids`, in creation order."""
        if not entity_ids:
            return []
        ids = list(entity_ids)
        stmt = (
            select(RelationModel)
            .where(or_(RelationModel.source_entity_id.in_(ids), RelationModel.target_entity_id.in_(ids)))
            .order_by(RelationModel.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


relation_crud = RelationCRUD()
