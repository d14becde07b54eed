"""
Name and label normalization for the knowledge graph.

Dependencies: re
System role: Dedup keys for entities and relations
"""

import re

from backend.boundary.db.models import EntityType

_WHITESPACE = re.compile(r"\s+")
_LABEL_SEPARATORS = re.compile(r"[\s\-]+")

_ENTITY_TYPES = {member.value for member in EntityType}

DEFAULT_RELATION_TYPE = "RELATED_TO"


def normalize_name(name: str) -> str:
    """Lowercase, trim and collapse internal whitespace. Idempotent."""
    return _WHITESPACE.sub(" ", (name or "").strip().lower())


def normalize_entity_type(value: str | None) -> str:
    """Map a model-supplied type onto EntityType; unknown types become CONCEPT."""
    candidate = (value or "").strip().upper()
    return candidate if candidate in _ENTITY_TYPES else EntityType.CONCEPT.value


def normalize_relation_type(value: str | None) -> str:
    """Upper-case label with underscores, e.g. "works for" -> "WORKS_FOR"."""
    label = _LABEL_SEPARATORS.sub("_", (value or "").strip()).upper().strip("_")
    return label[:128] or DEFAULT_RELATION_TYPE
