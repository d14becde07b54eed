"""
Query service orchestrator.

Runs the retrieval engine and, when requested, composes a grounded answer
from the evidence.

Dependencies: backend.core.retrieval, backend.core.answer_composer
System role: Query orchestration
"""

import logging

from backend.core.answer_composer import AnswerComposer, source_references
from backend.core.retrieval import QueryMode, RetrievalEngine, parse_mode
from backend.models.query import QueryResponse

logger = logging.getLogger(__name__)


class QueryService:
    """Retrieval plus optional answer generation."""

    def __init__(
        self,
        engine: RetrievalEngine,
        composer: AnswerComposer | None = None,
    ) -> None:
        """
        Initialize query service.

        Args:
            engine: Retrieval engine
            composer: Answer composer (answers are skipped if None)
        """
        self.engine = engine
        self.composer = composer

    async def query(
        self,
        query: str,
        mode: QueryMode | str | None = None,
        top_k: int | None = None,
        workspace: str = "default",
        include_answer: bool = True,
    ) -> QueryResponse:
        """
        Retrieve evidence and optionally answer the question.

        Args:
            query: Natural-language question
            mode: Retrieval mode (engine default when None)
            top_k: Chunks returned by the chunk search
            workspace: Scope of the search
            include_answer: Generate an answer from the evidence

        Returns:
            QueryResponse: Evidence, answer and cited sources

        Raises:
            ValidationError: Invalid query, mode or top_k
            RetrievalError: Retrieval failed
            ExternalServiceError: Answer generation failed
        """
        evidence = await self.engine.retrieve(query, mode=mode, top_k=top_k, workspace=workspace)

        answer = None
        sources = source_references(evidence)
        if include_answer and self.composer is not None:
            composed = await self.composer.compose(query, evidence)
            answer = composed.answer
            sources = composed.sources or sources
        elif include_answer:
            logger.warning(f"{__name__}:query - No answer composer configured, returning evidence only")

        return QueryResponse(
            query=query,
            mode=parse_mode(mode, self.engine.settings.default_mode),
            workspace=workspace,
            chunks=evidence.chunks,
            entities=evidence.entities,
            relations=evidence.relations,
            answer=answer,
            sources=sources,
        )
