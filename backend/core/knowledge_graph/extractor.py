"""
Per-chunk entity and relation extraction.

Runs the extraction prompt through the content service's chat model for
each chunk with bounded concurrency. Malformed or failed responses yield
an empty result for that chunk only.

Dependencies: asyncio, pydantic, backend.boundary.llm
System role: First stage of knowledge graph construction
"""

import asyncio
import logging

from pydantic import ValidationError as PydanticValidationError

from backend.boundary.llm import ContentService
from backend.core.document_processing.response_parsing import ParsedDegraded, parse_json_object
from backend.observability.log_utils import safe_log_value

from .prompts import ENTITY_EXTRACTION_PROMPT
from .schemas import ChunkExtraction, ExtractionResult, RawEntity, RawRelation

logger = logging.getLogger(__name__)


def _coerce_records(raw: object, schema: type) -> list:
    records = []
    if not isinstance(raw, list):
        return records
    for item in raw:
        if not isinstance(item, dict):
            continue
        cleaned = {key: value for key, value in item.items() if value is not None}
        try:
            record = schema.model_validate(cleaned)
        except PydanticValidationError:
            continue
        records.append(record)
    return records


def result_from_payload(payload: dict) -> ExtractionResult:
    """Build an ExtractionResult from a decoded response, dropping invalid records."""
    entities = [e for e in _coerce_records(payload.get("entities"), RawEntity) if e.name.strip()]
    relations = [
        r for r in _coerce_records(payload.get("relations"), RawRelation)
        if r.source.strip() and r.target.strip()
    ]
    return ExtractionResult(entities=entities, relations=relations)


class EntityExtractor:
    """Extract entities and relations from chunk text."""

    def __init__(
        self,
        content_service: ContentService,
        concurrency: int = 5,
        min_chunk_chars: int = 50,
    ) -> None:
        """
        Initialize extractor.

        Args:
            content_service: Service whose generate_text runs the prompt
            concurrency: Maximum in-flight extraction calls
            min_chunk_chars: Chunks shorter than this are skipped
        """
        self._content_service = content_service
        self._concurrency = max(1, concurrency)
        self._min_chunk_chars = min_chunk_chars

    async def extract_entities(self, text: str) -> ExtractionResult:
        """
        Extract entities and relations from one text.

        Args:
            text: Chunk content

        Returns:
            ExtractionResult: Possibly empty; never raises for model errors
        """
        if len(text.strip()) < self._min_chunk_chars:
            return ExtractionResult()

        try:
            response = await self._content_service.generate_text(ENTITY_EXTRACTION_PROMPT.format(content=text))
        except Exception as e:
            logger.warning(
                f"{__name__}:extract_entities - Extraction call failed",
                extra={"error": str(e), "text_len": len(text)},
            )
            return ExtractionResult()

        parsed = parse_json_object(response)
        if isinstance(parsed, ParsedDegraded):
            logger.warning(
                f"{__name__}:extract_entities - Unparseable extraction response",
                extra={"reason": parsed.reason, "response": safe_log_value(response)},
            )
            return ExtractionResult()

        return result_from_payload(parsed.items)

    async def extract_from_chunks(self, chunks: list[tuple[str, str]]) -> list[ChunkExtraction]:
        """
        Extract from many chunks concurrently.

        Args:
            chunks: (chunk_id, content) pairs

        Returns:
            list[ChunkExtraction]: One entry per input chunk, input order
        """
        semaphore = asyncio.Semaphore(self._concurrency)

        async def run(chunk_id: str, content: str) -> ChunkExtraction:
            async with semaphore:
                result = await self.extract_entities(content)
            return ChunkExtraction(chunk_id=chunk_id, result=result)

        extractions = await asyncio.gather(*(run(chunk_id, content) for chunk_id, content in chunks))

        logger.info(
            f"{__name__}:extract_from_chunks - Extraction complete",
            extra={
                "chunks": len(chunks),
                "entities": sum(len(e.result.entities) for e in extractions),
                "relations": sum(len(e.result.relations) for e in extractions),
            },
        )
        return list(extractions)
