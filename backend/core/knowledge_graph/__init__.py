"""
Knowledge graph construction and maintenance.

Exports:
  - EntityExtractor: per-chunk extraction with bounded concurrency
  - KnowledgeGraphBuilder: dedup + persistence for one ingestion call
  - remove_document_knowledge: cleanup on document deletion
  - normalize_name: entity dedup key
"""

from .builder import KnowledgeGraphBuilder
from .cleanup import CleanupResult, remove_document_knowledge
from .deduplicator import deduplicate_entities, deduplicate_relations
from .extractor import EntityExtractor
from .normalization import normalize_entity_type, normalize_name, normalize_relation_type
from .schemas import ExtractionResult, KnowledgeGraphResult

__all__ = [
    "EntityExtractor",
    "KnowledgeGraphBuilder",
    "KnowledgeGraphResult",
    "ExtractionResult",
    "CleanupResult",
    "remove_document_knowledge",
    "deduplicate_entities",
    "deduplicate_relations",
    "normalize_name",
    "normalize_entity_type",
    "normalize_relation_type",
]
