"""
Test suite for KnowledgeGraphService.

Runs against the in-memory database.

System role: Verification of entity/relation listings and document details
"""

import uuid

import pytest

from backend.application.services import KnowledgeGraphService
from backend.boundary.db.CRUD import chunk_crud, entity_crud, relation_crud
from backend.boundary.db.models import ChunkType
from backend.core.exceptions import DocumentNotFoundError


@pytest.fixture
def seed_graph(session_factory, make_document):
    """Two documents in 'default' and one in 'other', each with a small graph."""

    async def _seed():
        report = await make_document("report.txt")
        memo = await make_document("memo.txt")
        foreign = await make_document("foreign.txt", workspace="other")

        async with session_factory() as session:
            report_chunks = await chunk_crud.bulk_create(session, [
                {"document_id": report.id, "workspace": "default", "chunk_order_index": i,
                 "content": text, "tokens": 3, "chunk_type": ChunkType.TEXT, "metadata_": {}}
                for i, text in enumerate(["Acme builds engines.", "Jane runs Acme."])
            ])
            memo_chunks = await chunk_crud.bulk_create(session, [
                {"document_id": memo.id, "workspace": "default", "chunk_order_index": 0,
                 "content": "Globex sells parts.", "tokens": 3, "chunk_type": ChunkType.TEXT, "metadata_": {}}
            ])
            r0, r1 = (str(c.id) for c in report_chunks)
            m0 = str(memo_chunks[0].id)

            async def entity(name, kind, chunk_ids, workspace="default"):
                model, _ = await entity_crud.upsert(
                    session, workspace=workspace, entity_name=name, normalized_name=name.lower(),
                    entity_type=kind, description=f"About {name}", embedding=None, chunk_ids=chunk_ids,
                )
                return model

            acme = await entity("Acme", "ORGANIZATION", [r0, r1])
            jane = await entity("Jane Doe", "PERSON", [r1])
            globex = await entity("Globex", "ORGANIZATION", [m0])
            await entity("Initech", "ORGANIZATION", [], workspace="other")

            await relation_crud.upsert(
                session, workspace="default", source_entity_id=jane.id, relation_type="RUNS",
                target_entity_id=acme.id, description="Jane runs Acme", embedding=None, chunk_ids=[r1],
            )
            await relation_crud.upsert(
                session, workspace="default", source_entity_id=globex.id, relation_type="SUPPLIES",
                target_entity_id=acme.id, description="Globex supplies Acme", embedding=None, chunk_ids=[m0],
            )
            await session.commit()
        return {"report": report, "memo": memo, "foreign": foreign}

    return _seed


class TestListings:
    @pytest.mark.asyncio
    async def test_entities_are_scoped_to_workspace(self, test_async_db, seed_graph) -> None:
        await seed_graph()

        page = await KnowledgeGraphService(test_async_db).list_entities("default")

        assert {e.entity_name for e in page.entities} == {"Acme", "Jane Doe", "Globex"}
        assert page.available_types == ["ORGANIZATION", "PERSON"]
        assert page.pagination.total == 3

    @pytest.mark.asyncio
    async def test_entity_filters_and_paging(self, test_async_db, seed_graph) -> None:
        await seed_graph()
        service = KnowledgeGraphService(test_async_db)

        people = await service.list_entities("default", entity_type="person")
        searched = await service.list_entities("default", search="GLOB")
        first = await service.list_entities("default", limit=2)

        assert [e.entity_name for e in people.entities] == ["Jane Doe"]
        assert [e.entity_name for e in searched.entities] == ["Globex"]
        assert len(first.entities) == 2
        assert first.pagination.total == 3

    @pytest.mark.asyncio
    async def test_relations_carry_endpoint_names(self, test_async_db, seed_graph) -> None:
        await seed_graph()

        page = await KnowledgeGraphService(test_async_db).list_relations("default", relation_type="runs")

        assert len(page.relations) == 1
        relation = page.relations[0]
        assert (relation.source_entity_name, relation.relation_type, relation.target_entity_name) == (
            "Jane Doe", "RUNS", "Acme",
        )
        assert page.pagination.total == 1

    @pytest.mark.asyncio
    async def test_graph_of_workspace(self, test_async_db, seed_graph) -> None:
        await seed_graph()

        graph = await KnowledgeGraphService(test_async_db).get_graph("other")

        assert graph.entity_count == 1
        assert graph.relation_count == 0
        assert graph.entities[0].entity_name == "Initech"


class TestDocumentDetails:
    @pytest.mark.asyncio
    async def test_details_collect_chunks_entities_and_touching_relations(
        self, test_async_db, seed_graph
    ) -> None:
        docs = await seed_graph()

        details = await KnowledgeGraphService(test_async_db).get_document_details(docs["report"].id)

        assert [c.chunk_order_index for c in details.chunks] == [0, 1]
        assert {e.entity_name for e in details.entities} == {"Acme", "Jane Doe"}
        assert {r.relation_type for r in details.relations} == {"RUNS", "SUPPLIES"}
        assert details.stats.total_chunks == 2
        assert details.stats.entity_types == {"ORGANIZATION": 1, "PERSON": 1}
        assert details.stats.avg_chunk_length == round((20 + 15) / 2)

    @pytest.mark.asyncio
    async def test_document_without_chunks_has_empty_details(self, test_async_db, seed_graph) -> None:
        docs = await seed_graph()

        details = await KnowledgeGraphService(test_async_db).get_document_details(docs["foreign"].id)

        assert details.chunks == []
        assert details.entities == []
        assert details.stats.avg_chunk_length == 0

    @pytest.mark.asyncio
    async def test_missing_document_raises(self, test_async_db) -> None:
        with pytest.raises(DocumentNotFoundError):
            await KnowledgeGraphService(test_async_db).get_document_details(uuid.uuid4())
