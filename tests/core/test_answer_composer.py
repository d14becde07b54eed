"""
Test suite for context rendering and answer composition.

System role: Verification of the optional answer step of the query path
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage

from backend.core.answer_composer import NO_EVIDENCE_ANSWER, AnswerComposer, source_references
from backend.core.exceptions import ExternalServiceError
from backend.core.retrieval import EvidenceSet, ScoredChunk, ScoredEntity, ScoredRelation, build_context


def _chunk(chunk_id: str, content: str, similarity: float) -> ScoredChunk:
    return ScoredChunk(
        id=chunk_id,
        document_id="doc-1",
        content=content,
        chunk_type="text",
        chunk_order_index=0,
        similarity=similarity,
    )


@pytest.fixture
def evidence() -> EvidenceSet:
    return EvidenceSet(
        chunks=[
            _chunk("c1", "Acme Corp builds rocket engines.", 0.91234),
            _chunk("c2", "Jane Doe founded Acme Corp.", 0.5),
        ],
        entities=[
            ScoredEntity(
                id="e1",
                entity_name="Acme Corp",
                entity_type="ORGANIZATION",
                description="Rocket engine maker",
                similarity=0.8,
            )
        ],
        relations=[
            ScoredRelation(
                id="r1",
                source_entity_id="e2",
                target_entity_id="e1",
                source_name="Jane Doe",
                target_name="Acme Corp",
                relation_type="FOUNDED",
                description="Jane founded Acme",
                similarity=0.7,
            )
        ],
    )


def _model(content: str = "Acme builds engines [Source 1].") -> MagicMock:
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content=content))
    return model


class TestBuildContext:
    def test_sections_in_order(self, evidence) -> None:
        context = build_context(evidence)

        entities_at = context.index("### Relevant Entities")
        relations_at = context.index("### Relationships")
        sources_at = context.index("### Source Documents")
        assert entities_at < relations_at < sources_at
        assert "- **Acme Corp** (ORGANIZATION): Rocket engine maker" in context
        assert "Jane Doe → FOUNDED → Acme Corp: Jane founded Acme" in context
        assert "[Source 1] (similarity: 0.912)" in context
        assert "[Source 2] (similarity: 0.500)" in context

    def test_empty_sections_are_omitted(self) -> None:
        context = build_context(EvidenceSet(chunks=[_chunk("c1", "Only text.", 0.4)]))

        assert "### Relevant Entities" not in context
        assert "### Relationships" not in context
        assert context.startswith("### Source Documents")

    def test_empty_evidence_renders_nothing(self) -> None:
        assert build_context(EvidenceSet()) == ""


class TestAnswerComposer:
    @pytest.mark.asyncio
    async def test_compose_returns_answer_and_sources(self, evidence) -> None:
        model = _model()

        answer = await AnswerComposer(model=model).compose("What does Acme build?", evidence)

        assert answer.answer == "Acme builds engines [Source 1]."
        assert [source.chunk_id for source in answer.sources] == ["c1", "c2"]
        assert [source.index for source in answer.sources] == [1, 2]
        messages = model.ainvoke.await_args.args[0]
        assert "What does Acme build?" in messages[-1].content
        assert "### Source Documents" in messages[-1].content

    @pytest.mark.asyncio
    async def test_empty_evidence_skips_model(self) -> None:
        model = _model()

        answer = await AnswerComposer(model=model).compose("Anything?", EvidenceSet())

        assert answer.answer == NO_EVIDENCE_ANSWER
        assert answer.sources == []
        model.ainvoke.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_model_failure_raises_external_service_error(self, evidence) -> None:
        model = MagicMock()
        model.ainvoke = AsyncMock(side_effect=RuntimeError("503 from upstream"))

        with pytest.raises(ExternalServiceError):
            await AnswerComposer(model=model).compose("What does Acme build?", evidence)

    @pytest.mark.asyncio
    async def test_custom_system_prompt(self, evidence) -> None:
        model = _model()

        await AnswerComposer(model=model).compose("Q?", evidence, system_prompt="Answer in French.")

        messages = model.ainvoke.await_args.args[0]
        assert messages[0].content == "Answer in French."


def test_source_excerpts_are_truncated() -> None:
    evidence = EvidenceSet(chunks=[_chunk("c1", "x" * 500, 0.9)])

    (source,) = source_references(evidence)

    assert len(source.excerpt) == 200
    assert source.similarity == 0.9
