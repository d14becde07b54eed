"""
Query request/response schemas.

Dependencies: pydantic, backend.core.retrieval
System role: Query API contracts
"""

from pydantic import BaseModel, Field, field_validator

from backend.core.answer_composer import SourceReference
from backend.core.retrieval import QueryMode, ScoredChunk, ScoredEntity, ScoredRelation


class QueryRequest(BaseModel):
    """Retrieval request, optionally asking for a generated answer."""

    query: str = Field(min_length=1, description="Natural-language question")
    mode: QueryMode | None = Field(
        default=None, description="naive, local, global, hybrid or mix; defaults to the configured mode"
    )
    top_k: int = Field(default=10, ge=1, le=50, description="Chunks returned by the chunk search")
    workspace: str | None = Field(default=None, description="Defaults to the configured workspace")
    include_answer: bool = Field(default=True, description="Generate an answer from the evidence")

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be blank")
        return value


class QueryResponse(BaseModel):
    """Evidence with an optional grounded answer."""

    query: str
    mode: QueryMode
    workspace: str
    chunks: list[ScoredChunk] = Field(default_factory=list)
    entities: list[ScoredEntity] = Field(default_factory=list)
    relations: list[ScoredRelation] = Field(default_factory=list)
    answer: str | None = None
    sources: list[SourceReference] = Field(default_factory=list)
