"""
Integration tests for knowledge graph persistence.

Runs KnowledgeGraphBuilder against the in-memory database with a scripted
content service.

System role: Verification of persisted dedup, relation integrity and
chunk-reference cleanup
"""

import json

import pytest
from sqlalchemy import select

from backend.boundary.db.CRUD import chunk_crud
from backend.boundary.db.models import ChunkType, EntityModel, RelationModel
from backend.core.knowledge_graph import EntityExtractor, KnowledgeGraphBuilder

FIRST = "Acme Corp is a company that builds rocket engines in Springfield for export."
SECOND = "ACME CORP makes engines; Jane Doe founded it after a decade in the launch industry."

RESPONSES = {
    FIRST: {
        "entities": [{"name": "Acme Corp", "type": "ORGANIZATION", "description": "A company"}],
        "relations": [],
    },
    SECOND: {
        "entities": [
            {"name": "ACME CORP", "type": "ORGANIZATION", "description": "Makes engines"},
            {"name": "Jane Doe", "type": "PERSON", "description": "Founder"},
        ],
        "relations": [
            {"source": "Jane Doe", "target": "Acme Corp", "type": "founded", "description": "first"},
            {"source": "Jane Doe", "target": "Nobody Known", "type": "knows", "description": "dangling"},
        ],
    },
}


def _respond(prompt: str) -> str:
    for text, payload in RESPONSES.items():
        if text in prompt:
            return json.dumps(payload)
    return "{}"


@pytest.fixture
def store_chunks(session_factory):
    """Persist text chunks for a document; returns the chunk models."""

    async def _store(document, contents: list[str]):
        rows = [
            {
                "document_id": document.id,
                "workspace": document.workspace,
                "chunk_order_index": index,
                "content": content,
                "tokens": 20,
                "chunk_type": ChunkType.TEXT,
                "metadata_": {},
            }
            for index, content in enumerate(contents)
        ]
        async with session_factory() as session:
            models = await chunk_crud.bulk_create(session, rows)
            await session.commit()
        return models

    return _store


@pytest.fixture
def builder(fake_content, fake_embeddings) -> KnowledgeGraphBuilder:
    fake_content.text_handler = _respond
    return KnowledgeGraphBuilder(EntityExtractor(fake_content, concurrency=1), fake_embeddings)


async def _all(session_factory, model):
    async with session_factory() as session:
        return list((await session.execute(select(model))).scalars().all())


class TestKnowledgeGraphBuilder:
    @pytest.mark.asyncio
    async def test_case_variants_across_chunks_persist_as_one_entity(
        self, builder, session_factory, make_document, store_chunks
    ) -> None:
        document = await make_document("acme.txt")
        chunks = await store_chunks(document, [FIRST, SECOND])

        async with session_factory() as session:
            result = await builder.build(session, "default", chunks)
            await session.commit()

        entities = await _all(session_factory, EntityModel)
        acme = [e for e in entities if e.normalized_name == "acme corp"]
        assert len(acme) == 1
        assert acme[0].entity_name == "Acme Corp"
        assert acme[0].source_chunk_ids == [str(chunks[0].id), str(chunks[1].id)]
        assert result.entities_created == 2

    @pytest.mark.asyncio
    async def test_every_stored_relation_has_stored_endpoints(
        self, builder, session_factory, make_document, store_chunks
    ) -> None:
        document = await make_document("acme.txt")
        chunks = await store_chunks(document, [FIRST, SECOND])

        async with session_factory() as session:
            await builder.build(session, "default", chunks)
            await session.commit()

        entity_ids = {entity.id for entity in await _all(session_factory, EntityModel)}
        relations = await _all(session_factory, RelationModel)
        assert len(relations) == 1
        assert relations[0].relation_type == "FOUNDED"
        for relation in relations:
            assert relation.source_entity_id in entity_ids
            assert relation.target_entity_id in entity_ids

    @pytest.mark.asyncio
    async def test_chunks_deleted_during_extraction_leave_no_references(
        self, fake_content, fake_embeddings, session_factory, make_document, store_chunks
    ) -> None:
        document = await make_document("acme.txt")
        chunks = await store_chunks(document, [FIRST, SECOND])

        async def delete_then_respond(prompt: str) -> str:
            async with session_factory() as session:
                await chunk_crud.delete_by_document(session, document.id)
                await session.commit()
            return _respond(prompt)

        fake_content.generate_text = delete_then_respond
        builder = KnowledgeGraphBuilder(EntityExtractor(fake_content, concurrency=1), fake_embeddings)

        async with session_factory() as session:
            result = await builder.build(session, "default", chunks)
            await session.commit()

        assert await _all(session_factory, EntityModel) == []
        assert await _all(session_factory, RelationModel) == []
        assert result.entities_created == 0

    @pytest.mark.asyncio
    async def test_references_to_surviving_chunks_are_kept(
        self, fake_content, fake_embeddings, session_factory, make_document, store_chunks
    ) -> None:
        document = await make_document("acme.txt")
        chunks = await store_chunks(document, [FIRST, SECOND])
        calls = []

        async def delete_second_then_respond(prompt: str) -> str:
            calls.append(prompt)
            if len(calls) == 2:
                async with session_factory() as session:
                    await chunk_crud.delete_by_ids(session, [chunks[1].id])
                    await session.commit()
            return _respond(prompt)

        fake_content.generate_text = delete_second_then_respond
        builder = KnowledgeGraphBuilder(EntityExtractor(fake_content, concurrency=1), fake_embeddings)

        async with session_factory() as session:
            await builder.build(session, "default", chunks)
            await session.commit()

        entities = await _all(session_factory, EntityModel)
        assert [(e.normalized_name, e.source_chunk_ids) for e in entities] == [("acme corp", [str(chunks[0].id)])]
        assert await _all(session_factory, RelationModel) == []
