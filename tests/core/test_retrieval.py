"""
Test suite for the five-mode retrieval engine.

Runs against the in-memory SQLite database, where vector search falls back
to the numpy scan, with the deterministic fake embedding service.

System role: Verification of retrieval modes, merging and validation
"""

from unittest.mock import AsyncMock

import pytest

from backend.boundary.db.CRUD import chunk_crud, entity_crud, relation_crud
from backend.boundary.db.models import ChunkType
from backend.configs.retrieval import RetrievalSettings
from backend.core.exceptions import RetrievalError, ValidationError
from backend.core.retrieval import QueryMode, RetrievalEngine, ScoredChunk, SearchIndex, merge_by_id

QUERY = "what does acme build?"


@pytest.fixture
def engine(session_factory, fake_embeddings) -> RetrievalEngine:
    fake_embeddings.register(QUERY, fake_embeddings.axis(0))
    settings = RetrievalSettings(top_k=10, entity_top_k=20, max_top_k=50, similarity_threshold=0.3)
    return RetrievalEngine(session_factory, fake_embeddings, settings=settings)


@pytest.fixture
def add_chunks(session_factory):
    """Insert chunks for a document; returns their ids as strings."""

    async def _add(document, embeddings: list):
        rows = [
            {
                "document_id": document.id,
                "workspace": document.workspace,
                "chunk_order_index": index,
                "content": f"chunk {index} of {document.name}",
                "tokens": 5,
                "chunk_type": ChunkType.TEXT,
                "embedding": embedding,
                "metadata_": {},
            }
            for index, embedding in enumerate(embeddings)
        ]
        async with session_factory() as session:
            models = await chunk_crud.bulk_create(session, rows)
            await session.commit()
        return [str(model.id) for model in models]

    return _add


@pytest.fixture
def add_entity(session_factory):
    async def _add(name: str, embedding, chunk_ids: list[str], workspace: str = "default"):
        async with session_factory() as session:
            entity, _ = await entity_crud.upsert(
                session,
                workspace=workspace,
                entity_name=name,
                normalized_name=name.lower(),
                entity_type="ORGANIZATION",
                description=f"About {name}",
                embedding=embedding,
                chunk_ids=chunk_ids,
            )
            await session.commit()
        return entity

    return _add


@pytest.fixture
def add_relation(session_factory):
    async def _add(source, target, embedding, chunk_ids: list[str]):
        async with session_factory() as session:
            relation, _ = await relation_crud.upsert(
                session,
                workspace="default",
                source_entity_id=source.id,
                relation_type="BUILDS",
                target_entity_id=target.id,
                description=f"{source.entity_name} builds {target.entity_name}",
                embedding=embedding,
                chunk_ids=chunk_ids,
            )
            await session.commit()
        return relation

    return _add


class TestNaiveMode:
    @pytest.mark.asyncio
    async def test_ranks_chunks_and_applies_floor(self, engine, make_document, add_chunks, fake_embeddings) -> None:
        document = await make_document("notes.txt")
        ids = await add_chunks(document, [
            fake_embeddings.at_similarity(0.5),
            fake_embeddings.at_similarity(0.9),
            fake_embeddings.at_similarity(0.2),
            None,
        ])

        evidence = await engine.retrieve(QUERY, mode="naive")

        assert [chunk.id for chunk in evidence.chunks] == [ids[1], ids[0]]
        assert evidence.chunks[0].similarity == pytest.approx(0.9, abs=1e-4)
        assert evidence.entities == []
        assert evidence.relations == []

    @pytest.mark.asyncio
    async def test_top_k_limits_chunks(self, engine, make_document, add_chunks, fake_embeddings) -> None:
        document = await make_document("notes.txt")
        await add_chunks(document, [fake_embeddings.at_similarity(s) for s in (0.6, 0.7, 0.8)])

        evidence = await engine.retrieve(QUERY, mode=QueryMode.NAIVE, top_k=2)

        assert len(evidence.chunks) == 2
        assert evidence.chunks[0].similarity >= evidence.chunks[1].similarity

    @pytest.mark.asyncio
    async def test_workspace_scopes_results(self, engine, make_document, add_chunks, fake_embeddings) -> None:
        mine = await make_document("mine.txt", workspace="alpha")
        theirs = await make_document("theirs.txt", workspace="beta")
        mine_ids = await add_chunks(mine, [fake_embeddings.at_similarity(0.8)])
        await add_chunks(theirs, [fake_embeddings.at_similarity(0.95)])

        evidence = await engine.retrieve(QUERY, mode="naive", workspace="alpha")

        assert [chunk.id for chunk in evidence.chunks] == mine_ids

    @pytest.mark.asyncio
    async def test_empty_store_returns_empty_evidence(self, engine) -> None:
        evidence = await engine.retrieve(QUERY, mode="mix")

        assert evidence.is_empty


class TestLocalMode:
    @pytest.mark.asyncio
    async def test_entity_expands_to_its_chunks(
        self, engine, make_document, add_chunks, add_entity, fake_embeddings
    ) -> None:
        """An entity at 0.82 referencing two chunks yields exactly those chunks at 0.82."""
        document = await make_document("report.txt")
        c1, c2, c3 = await add_chunks(document, [fake_embeddings.axis(5), None, fake_embeddings.axis(6)])
        await add_entity("Acme Corp", fake_embeddings.at_similarity(0.82), [c1, c2])
        await add_entity("Unrelated", fake_embeddings.axis(3), [c3])

        evidence = await engine.retrieve(QUERY, mode="local")

        assert [entity.entity_name for entity in evidence.entities] == ["Acme Corp"]
        assert {chunk.id for chunk in evidence.chunks} == {c1, c2}
        for chunk in evidence.chunks:
            assert chunk.similarity == pytest.approx(0.82, abs=1e-4)

    @pytest.mark.asyncio
    async def test_chunk_takes_best_entity_score(
        self, engine, make_document, add_chunks, add_entity, fake_embeddings
    ) -> None:
        document = await make_document("report.txt")
        c1, c2 = await add_chunks(document, [None, None])
        await add_entity("Acme Corp", fake_embeddings.at_similarity(0.6), [c1, c2])
        await add_entity("Rocket Engine", fake_embeddings.at_similarity(0.9), [c2])

        evidence = await engine.retrieve(QUERY, mode="local")

        assert [chunk.id for chunk in evidence.chunks] == [c2, c1]
        assert evidence.chunks[0].similarity == pytest.approx(0.9, abs=1e-4)
        assert evidence.chunks[1].similarity == pytest.approx(0.6, abs=1e-4)

    @pytest.mark.asyncio
    async def test_dangling_chunk_ids_are_skipped(
        self, engine, make_document, add_chunks, add_entity, fake_embeddings
    ) -> None:
        document = await make_document("report.txt")
        (c1,) = await add_chunks(document, [None])
        await add_entity(
            "Acme Corp",
            fake_embeddings.at_similarity(0.8),
            [c1, "00000000-0000-0000-0000-000000000000", "not-a-uuid"],
        )

        evidence = await engine.retrieve(QUERY, mode="local")

        assert [chunk.id for chunk in evidence.chunks] == [c1]


class TestGlobalMode:
    @pytest.mark.asyncio
    async def test_relation_endpoints_inherit_similarity(
        self, engine, make_document, add_chunks, add_entity, add_relation, fake_embeddings
    ) -> None:
        document = await make_document("report.txt")
        c1, c2 = await add_chunks(document, [None, None])
        acme = await add_entity("Acme Corp", fake_embeddings.axis(2), [c1])
        engine_entity = await add_entity("Rocket Engine", fake_embeddings.axis(3), [c2])
        await add_relation(acme, engine_entity, fake_embeddings.at_similarity(0.7), [c1])

        evidence = await engine.retrieve(QUERY, mode="global")

        assert len(evidence.relations) == 1
        relation = evidence.relations[0]
        assert (relation.source_name, relation.target_name) == ("Acme Corp", "Rocket Engine")
        assert {entity.entity_name for entity in evidence.entities} == {"Acme Corp", "Rocket Engine"}
        for entity in evidence.entities:
            assert entity.similarity == pytest.approx(0.7, abs=1e-4)
        assert {chunk.id for chunk in evidence.chunks} == {c1, c2}

    @pytest.mark.asyncio
    async def test_no_relations_means_no_evidence(
        self, engine, make_document, add_chunks, add_entity, fake_embeddings
    ) -> None:
        document = await make_document("report.txt")
        (c1,) = await add_chunks(document, [fake_embeddings.at_similarity(0.9)])
        await add_entity("Acme Corp", fake_embeddings.at_similarity(0.9), [c1])

        evidence = await engine.retrieve(QUERY, mode="global")

        assert evidence.is_empty


class TestCompositeModes:
    @pytest.mark.asyncio
    async def test_hybrid_merges_local_and_global(
        self, engine, make_document, add_chunks, add_entity, add_relation, fake_embeddings
    ) -> None:
        document = await make_document("report.txt")
        c1, c2, c3 = await add_chunks(document, [fake_embeddings.at_similarity(0.95), None, None])
        acme = await add_entity("Acme Corp", fake_embeddings.at_similarity(0.82), [c1])
        engine_entity = await add_entity("Rocket Engine", fake_embeddings.axis(3), [c2])
        await add_relation(acme, engine_entity, fake_embeddings.at_similarity(0.5), [c3])

        evidence = await engine.retrieve(QUERY, mode="hybrid")

        scores = {entity.entity_name: entity.similarity for entity in evidence.entities}
        assert scores["Acme Corp"] == pytest.approx(0.82, abs=1e-4)
        assert scores["Rocket Engine"] == pytest.approx(0.5, abs=1e-4)
        # Hybrid never runs the chunk search, so c1 scores through its entity
        chunk_scores = {chunk.id: chunk.similarity for chunk in evidence.chunks}
        assert chunk_scores[c1] == pytest.approx(0.82, abs=1e-4)
        assert c2 in chunk_scores
        assert len(evidence.relations) == 1

    @pytest.mark.asyncio
    async def test_mix_contains_naive_results(
        self, engine, make_document, add_chunks, add_entity, fake_embeddings
    ) -> None:
        document = await make_document("report.txt")
        c1, c2, c3 = await add_chunks(document, [
            fake_embeddings.at_similarity(0.9),
            fake_embeddings.at_similarity(0.4),
            None,
        ])
        await add_entity("Acme Corp", fake_embeddings.at_similarity(0.6), [c3])

        naive = await engine.retrieve(QUERY, mode="naive")
        mix = await engine.retrieve(QUERY, mode="mix")

        naive_ids = {chunk.id for chunk in naive.chunks}
        mix_ids = {chunk.id for chunk in mix.chunks}
        assert naive_ids == {c1, c2}
        assert naive_ids <= mix_ids
        assert c3 in mix_ids
        assert [chunk.id for chunk in mix.chunks] == [c1, c3, c2]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", ["naive", "local", "global", "hybrid", "mix"])
    async def test_every_returned_item_meets_the_floor(
        self, mode, engine, make_document, add_chunks, add_entity, add_relation, fake_embeddings
    ) -> None:
        document = await make_document("report.txt")
        c1, c2, c3, c4 = await add_chunks(document, [
            fake_embeddings.at_similarity(0.8),
            fake_embeddings.at_similarity(0.1),
            fake_embeddings.at_similarity(0.29),
            None,
        ])
        strong = await add_entity("Acme Corp", fake_embeddings.at_similarity(0.7), [c4])
        weak = await add_entity("Beta Labs", fake_embeddings.at_similarity(0.2), [c2])
        other = await add_entity("Gamma Inc", fake_embeddings.at_similarity(0.25), [c3])
        await add_relation(strong, other, fake_embeddings.at_similarity(0.6), [c4])
        await add_relation(weak, other, fake_embeddings.at_similarity(0.15), [c2])

        evidence = await engine.retrieve(QUERY, mode=mode)

        items = [*evidence.chunks, *evidence.entities, *evidence.relations]
        assert items
        assert all(item.similarity >= 0.3 for item in items)
        assert c2 not in {chunk.id for chunk in evidence.chunks}

    @pytest.mark.asyncio
    async def test_query_is_embedded_once(self, engine, fake_embeddings) -> None:
        await engine.retrieve(QUERY, mode="mix")

        assert fake_embeddings.query_calls == [QUERY]


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   "])
    async def test_blank_query_rejected(self, engine, query: str) -> None:
        with pytest.raises(ValidationError):
            await engine.retrieve(query, mode="naive")

    @pytest.mark.asyncio
    async def test_unknown_mode_rejected(self, engine) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await engine.retrieve(QUERY, mode="semantic")

        assert exc_info.value.details["field"] == "mode"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("top_k", [0, 51])
    async def test_top_k_out_of_range_rejected(self, engine, top_k: int) -> None:
        with pytest.raises(ValidationError):
            await engine.retrieve(QUERY, mode="naive", top_k=top_k)

    @pytest.mark.asyncio
    async def test_embedding_failure_raises_retrieval_error(self, engine, fake_embeddings) -> None:
        fake_embeddings.embed_query = AsyncMock(side_effect=RuntimeError("quota"))

        with pytest.raises(RetrievalError):
            await engine.retrieve(QUERY, mode="naive")

    @pytest.mark.asyncio
    async def test_default_mode_comes_from_settings(self, session_factory, fake_embeddings) -> None:
        fake_embeddings.register(QUERY, fake_embeddings.axis(0))
        engine = RetrievalEngine(
            session_factory, fake_embeddings, settings=RetrievalSettings(default_mode="naive")
        )

        evidence = await engine.retrieve(QUERY)

        assert evidence.is_empty


class TestPrimitives:
    @pytest.mark.asyncio
    async def test_vector_search_on_entities(self, engine, add_entity, fake_embeddings) -> None:
        await add_entity("Acme Corp", fake_embeddings.at_similarity(0.9), [])
        await add_entity("Far Away", fake_embeddings.at_similarity(0.35), [])

        hits = await engine.vector_search(SearchIndex.ENTITIES, fake_embeddings.axis(0), limit=5, threshold=0.5)

        assert [hit.entity_name for hit in hits] == ["Acme Corp"]

    def test_merge_by_id_keeps_best_and_first_seen_ties(self) -> None:
        def chunk(chunk_id: str, similarity: float) -> ScoredChunk:
            return ScoredChunk(
                id=chunk_id,
                document_id="d",
                content=chunk_id,
                chunk_type="text",
                chunk_order_index=0,
                similarity=similarity,
            )

        merged = merge_by_id([chunk("a", 0.5), chunk("b", 0.7)], [chunk("a", 0.9), chunk("c", 0.7)])

        assert [(item.id, item.similarity) for item in merged] == [("a", 0.9), ("b", 0.7), ("c", 0.7)]
