"""
Grounded answer composition.

Renders retrieval evidence as context and asks the chat model for an
answer that cites its sources as [Source N].

Dependencies: langchain_core.prompts, langchain_google_genai
System role: Optional final step of the query path
"""

import logging

from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel, Field

from backend.boundary.llm import message_text
from backend.configs.gemini import GeminiSettings
from backend.core.exceptions import ExternalServiceError
from backend.core.retrieval import EvidenceSet, build_context

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = """You are a helpful assistant that answers questions based on provided context.

## Guidelines
1. Only use information from the provided context
2. If the context doesn't contain enough information, say so clearly
3. Cite your sources using [Source X] format where X is the source number
4. Be concise but thorough
5. If multiple sources agree, synthesize the information
6. Maintain factual accuracy - don't add information not in context
7. Format your response with clear structure when appropriate"""

NO_EVIDENCE_ANSWER = (
    "I couldn't find any relevant information in the uploaded documents to answer this question."
)

ANSWER_PROMPT = ChatPromptTemplate.from_messages([
    ("system", "{system_prompt}"),
    ("human", """Context:
{context}

Question: {question}"""),
])

EXCERPT_LENGTH = 200


class SourceReference(BaseModel):
    """Chunk cited as [Source N] in the context."""

    index: int = Field(description="1-based source number used in citations")
    chunk_id: str
    document_id: str
    chunk_type: str
    similarity: float
    excerpt: str = Field(description="Leading characters of the chunk")


class QueryAnswer(BaseModel):
    """Generated answer with the sources shown to the model."""

    answer: str
    sources: list[SourceReference] = Field(default_factory=list)


def source_references(evidence: EvidenceSet) -> list[SourceReference]:
    return [
        SourceReference(
            index=index,
            chunk_id=chunk.id,
            document_id=chunk.document_id,
            chunk_type=chunk.chunk_type,
            similarity=chunk.similarity,
            excerpt=chunk.content[:EXCERPT_LENGTH],
        )
        for index, chunk in enumerate(evidence.chunks, start=1)
    ]


class AnswerComposer:
    """Compose answers from evidence with the chat model."""

    def __init__(
        self,
        model: BaseChatModel | None = None,
        settings: GeminiSettings | None = None,
    ) -> None:
        """
        Initialize answer composer.

        Args:
            model: Chat model (defaults to Gemini answer model)
            settings: Gemini settings used when creating the default model
        """
        if model is None:
            settings = settings or GeminiSettings()
            model = ChatGoogleGenerativeAI(
                model=settings.answer_model,
                temperature=settings.temperature,
                google_api_key=settings.api_key or None,
            )
        self._model = model

    async def compose(
        self,
        query: str,
        evidence: EvidenceSet,
        system_prompt: str | None = None,
    ) -> QueryAnswer:
        """
        Generate an answer grounded in the evidence.

        Empty evidence returns a fixed answer without calling the model.

        Raises:
            ExternalServiceError: Model call failed
        """
        if evidence.is_empty:
            return QueryAnswer(answer=NO_EVIDENCE_ANSWER)

        messages = ANSWER_PROMPT.invoke({
            "system_prompt": system_prompt or DEFAULT_SYSTEM_PROMPT,
            "context": build_context(evidence),
            "question": query,
        }).to_messages()

        try:
            response = await self._model.ainvoke(messages)
        except Exception as e:
            logger.error(f"{__name__}:compose - {type(e).__name__}: {e}")
            raise ExternalServiceError(f"Answer generation failed: {e}", service="gemini") from e

        answer = message_text(response.content).strip()
        logger.info(
            f"{__name__}:compose - Answer generated",
            extra={"answer_len": len(answer), "sources": len(evidence.chunks)},
        )
        return QueryAnswer(answer=answer, sources=source_references(evidence))
