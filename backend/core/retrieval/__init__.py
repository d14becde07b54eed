"""
Retrieval engine.

Exports:
  - RetrievalEngine, SearchIndex: five-mode retrieval over chunks, entities and relations
  - EvidenceSet, ScoredChunk, ScoredEntity, ScoredRelation, QueryMode: result types
  - build_context: markdown rendering of evidence
"""

from .context_builder import build_context
from .engine import RetrievalEngine, SearchIndex, parse_mode
from .evidence import (
    EvidenceSet,
    QueryMode,
    ScoredChunk,
    ScoredEntity,
    ScoredRelation,
    merge_by_id,
    merge_evidence,
)

__all__ = [
    "RetrievalEngine",
    "SearchIndex",
    "parse_mode",
    "EvidenceSet",
    "QueryMode",
    "ScoredChunk",
    "ScoredEntity",
    "ScoredRelation",
    "merge_by_id",
    "merge_evidence",
    "build_context",
]
