"""
Context rendering for answer generation.

Dependencies: none
System role: Turns an EvidenceSet into the markdown passed to the chat model
"""

from .evidence import EvidenceSet


def build_context(evidence: EvidenceSet) -> str:
    """
    Render evidence as markdown sections.

    Sections appear only when non-empty, in the order entities,
    relationships, source documents. Sources are numbered from 1 so the
    model can cite them as [Source N].
    """
    parts: list[str] = []

    if evidence.entities:
        parts.append("### Relevant Entities")
        for entity in evidence.entities:
            parts.append(
                f"- **{entity.entity_name}** ({entity.entity_type}): {entity.description or 'No description'}"
            )
        parts.append("")

    if evidence.relations:
        parts.append("### Relationships")
        for relation in evidence.relations:
            source = relation.source_name or relation.source_entity_id
            target = relation.target_name or relation.target_entity_id
            parts.append(f"- {source} → {relation.relation_type} → {target}: {relation.description or ''}")
        parts.append("")

    if evidence.chunks:
        parts.append("### Source Documents")
        for index, chunk in enumerate(evidence.chunks, start=1):
            parts.append(f"[Source {index}] (similarity: {chunk.similarity:.3f})")
            parts.append(chunk.content)
            parts.append("")

    return "\n".join(parts)
