"""
Knowledge graph extraction schemas.

Raw records come straight from one chunk's model response; merged records
are the result of deduplication across all chunks of one ingestion call.

Dependencies: pydantic
System role: Data structures for entity/relation extraction
"""

from pydantic import BaseModel, Field


class RawEntity(BaseModel):
    name: str
    type: str = "CONCEPT"
    description: str = ""


class RawRelation(BaseModel):
    source: str
    target: str
    type: str = "RELATED_TO"
    description: str = ""


class ExtractionResult(BaseModel):
    """Entities and relations extracted from one chunk."""

    entities: list[RawEntity] = Field(default_factory=list)
    relations: list[RawRelation] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.entities and not self.relations


class ChunkExtraction(BaseModel):
    """Extraction result tagged with the chunk it came from."""

    chunk_id: str
    result: ExtractionResult


class MergedEntity(BaseModel):
    """An entity after dedup within one ingestion call."""

    normalized_name: str = Field(description="Dedup key")
    name: str = Field(description="First-seen display casing")
    entity_type: str = Field(description="First-seen type, normalized")
    descriptions: list[str] = Field(default_factory=list, description="Distinct descriptions, first-seen order")
    chunk_ids: list[str] = Field(default_factory=list, description="Contributing chunks, first-seen order")
    embedding: list[float] | None = None

    @property
    def description(self) -> str:
        return " ".join(self.descriptions)

    @property
    def embedding_text(self) -> str:
        return f"{self.name}: {self.description}"


class MergedRelation(BaseModel):
    """A relation after endpoint resolution and dedup within one ingestion call."""

    source: str = Field(description="Normalized source entity name")
    target: str = Field(description="Normalized target entity name")
    relation_type: str
    description: str = Field(default="", description="Description of the first occurrence")
    chunk_ids: list[str] = Field(default_factory=list)
    embedding: list[float] | None = None


class KnowledgeGraphResult(BaseModel):
    """Counts reported back to the orchestrator."""

    entities_created: int = 0
    entities_merged: int = 0
    relations_created: int = 0
    relations_merged: int = 0
    chunks_processed: int = 0

    @property
    def entities_total(self) -> int:
        return self.entities_created + self.entities_merged

    @property
    def relations_total(self) -> int:
        return self.relations_created + self.relations_merged
