"""
Knowledge graph cleanup when a document is deleted.

Removes the document's chunk ids from every entity and relation. Records
left without any contributing chunk are deleted; an entity deletion takes
every relation touching it along.

Dependencies: sqlalchemy, backend.boundary.db
System role: Keeps the graph consistent with the set of stored chunks
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD import chunk_crud, entity_crud, relation_crud

logger = logging.getLogger(__name__)


@dataclass
class CleanupResult:
    entities_deleted: int = 0
    entities_updated: int = 0
    relations_deleted: int = 0
    relations_updated: int = 0


async def remove_document_knowledge(
    session: AsyncSession,
    document_id: UUID,
    workspace: str | None = None,
) -> CleanupResult:
    """
    Detach a document's chunks from the knowledge graph.

    Must run before the chunks themselves are deleted. Flushes but does not
    commit.

    Args:
        session: Async database session
        document_id: Document being deleted
        workspace: Restrict the scan to one workspace

    Returns:
        CleanupResult: Counts of deleted and reduced records
    """
    result = CleanupResult()
    chunk_ids = {str(chunk_id) for chunk_id in await chunk_crud.get_ids_by_document(session, document_id)}
    if not chunk_ids:
        return result

    orphaned_entity_ids = []
    for entity in await entity_crud.get_referencing_chunks(session, chunk_ids, workspace):
        remaining = [cid for cid in entity.source_chunk_ids or [] if cid not in chunk_ids]
        if remaining:
            await entity_crud.set_chunk_ids(session, entity, remaining)
            result.entities_updated += 1
        else:
            orphaned_entity_ids.append(entity.id)

    # Relations of orphaned entities go first, then the entities
    result.relations_deleted += await relation_crud.delete_touching_entities(session, orphaned_entity_ids)
    result.entities_deleted = await entity_crud.delete_by_ids(session, orphaned_entity_ids)

    for relation in await relation_crud.get_referencing_chunks(session, chunk_ids, workspace):
        remaining = [cid for cid in relation.source_chunk_ids or [] if cid not in chunk_ids]
        if remaining:
            relation.source_chunk_ids = remaining
            result.relations_updated += 1
        else:
            await session.delete(relation)
            result.relations_deleted += 1
    await session.flush()

    logger.info(
        f"{__name__}:remove_document_knowledge - Graph cleaned",
        extra={"document_id": str(document_id), **result.__dict__},
    )
    return result
