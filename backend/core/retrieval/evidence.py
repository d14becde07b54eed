"""
Retrieval evidence schemas.

Scored chunks, entities and relations returned by the retrieval engine,
plus the merge rule shared by the composite modes: union by id, highest
similarity wins, ranked by similarity with first-seen order for ties.

Dependencies: pydantic
System role: Result types of the retrieval engine
"""

from enum import Enum
from typing import Iterable, TypeVar

from pydantic import BaseModel, Field


class QueryMode(str, Enum):
    """Retrieval strategies."""

    NAIVE = "naive"
    LOCAL = "local"
    GLOBAL = "global"
    HYBRID = "hybrid"
    MIX = "mix"


class ScoredChunk(BaseModel):
    """Chunk with its retrieval similarity."""

    id: str
    document_id: str
    content: str
    chunk_type: str
    chunk_order_index: int
    page_idx: int | None = None
    start_time: float | None = None
    end_time: float | None = None
    similarity: float = Field(ge=0.0, le=1.0)


class ScoredEntity(BaseModel):
    """Entity with its retrieval similarity."""

    id: str
    entity_name: str
    entity_type: str
    description: str = ""
    source_chunk_ids: list[str] = Field(default_factory=list)
    similarity: float = Field(ge=0.0, le=1.0)


class ScoredRelation(BaseModel):
    """Relation with its retrieval similarity and resolved endpoint names."""

    id: str
    source_entity_id: str
    target_entity_id: str
    source_name: str | None = None
    target_name: str | None = None
    relation_type: str
    description: str = ""
    source_chunk_ids: list[str] = Field(default_factory=list)
    similarity: float = Field(ge=0.0, le=1.0)


class EvidenceSet(BaseModel):
    """Combined retrieval result."""

    chunks: list[ScoredChunk] = Field(default_factory=list)
    entities: list[ScoredEntity] = Field(default_factory=list)
    relations: list[ScoredRelation] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.chunks and not self.entities and not self.relations


ScoredT = TypeVar("ScoredT", ScoredChunk, ScoredEntity, ScoredRelation)


def merge_by_id(*groups: Iterable[ScoredT]) -> list[ScoredT]:
    """
    Union scored items by id keeping the highest similarity.

    The result is sorted by descending similarity; ties keep the order in
    which ids were first seen across the groups.
    """
    best: dict[str, ScoredT] = {}
    for group in groups:
        for item in group:
            current = best.get(item.id)
            if current is None or item.similarity > current.similarity:
                best[item.id] = item
    # sorted() is stable, so dict insertion order breaks ties
    return sorted(best.values(), key=lambda item: -item.similarity)


def merge_evidence(*sets: EvidenceSet) -> EvidenceSet:
    return EvidenceSet(
        chunks=merge_by_id(*(s.chunks for s in sets)),
        entities=merge_by_id(*(s.entities for s in sets)),
        relations=merge_by_id(*(s.relations for s in sets)),
    )
