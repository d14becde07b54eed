"""
Entity and relation deduplication within one ingestion call.

The name map lives only for the duration of one call. Deduplication
across documents is handled by the database unique constraints and the
upsert-merge in the entity and relation CRUDs.

Dependencies: none
System role: Second stage of knowledge graph construction
"""

from .normalization import normalize_entity_type, normalize_name, normalize_relation_type
from .schemas import ChunkExtraction, MergedEntity, MergedRelation


def _append_unique(values: list[str], value: str) -> None:
    if value not in values:
        values.append(value)


def deduplicate_entities(extractions: list[ChunkExtraction]) -> dict[str, MergedEntity]:
    """
    Group raw entities by normalized name.

    First-seen casing and type win. Descriptions are de-duplicated by exact
    string, chunk ids are unioned, both in first-seen order.

    Returns:
        dict[str, MergedEntity]: Keyed by normalized name, insertion order kept
    """
    merged: dict[str, MergedEntity] = {}
    for extraction in extractions:
        for raw in extraction.result.entities:
            key = normalize_name(raw.name)
            if not key:
                continue
            entity = merged.get(key)
            if entity is None:
                entity = MergedEntity(
                    normalized_name=key,
                    name=raw.name.strip(),
                    entity_type=normalize_entity_type(raw.type),
                )
                merged[key] = entity
            description = raw.description.strip()
            if description:
                _append_unique(entity.descriptions, description)
            _append_unique(entity.chunk_ids, extraction.chunk_id)
    return merged


def deduplicate_relations(
    extractions: list[ChunkExtraction],
    entities: dict[str, MergedEntity],
) -> list[MergedRelation]:
    """
    Resolve relation endpoints and merge duplicates.

    Relations whose source or target is not a known entity are dropped, as
    are self-loops. The key is (source, type, target); the first occurrence
    keeps its description and later ones only add chunk ids.
    """
    merged: dict[tuple[str, str, str], MergedRelation] = {}
    for extraction in extractions:
        for raw in extraction.result.relations:
            source = normalize_name(raw.source)
            target = normalize_name(raw.target)
            if source not in entities or target not in entities or source == target:
                continue
            relation_type = normalize_relation_type(raw.type)
            key = (source, relation_type, target)
            relation = merged.get(key)
            if relation is None:
                relation = MergedRelation(
                    source=source,
                    target=target,
                    relation_type=relation_type,
                    description=raw.description.strip(),
                )
                merged[key] = relation
            _append_unique(relation.chunk_ids, extraction.chunk_id)
    return list(merged.values())


def relation_embedding_text(relation: MergedRelation, entities: dict[str, MergedEntity]) -> str:
    source = entities[relation.source].name
    target = entities[relation.target].name
    return f"{source} {relation.relation_type} {target}: {relation.description}"
