"""
Structured document extraction (PDF, DOCX, PPTX, XLSX).

The file is uploaded to the content service, the model returns a JSON
array of text/table/image items, and tables get a generated description
so they are searchable by meaning as well as by cell values.

Dependencies: backend.boundary.llm, response_parsing
System role: Document modality extractor
"""

import logging

from backend.boundary.db.models import ChunkType
from backend.core.document_processing.models import ContentItem
from backend.core.document_processing.response_parsing import ParsedDegraded, parse_content_array

from .base import BaseExtractor
from .prompts import DOCUMENT_EXTRACTION_PROMPT, TABLE_DESCRIPTION_PROMPT

logger = logging.getLogger(__name__)

IMAGE_PLACEHOLDER = "[Image could not be processed]"


def table_fallback_description(table: str) -> str:
    suffix = "..." if len(table) > 200 else ""
    return f"Table with data: {table[:200]}{suffix}"


class DocumentExtractor(BaseExtractor):
    """Extract text, tables and figure descriptions from office/PDF files."""

    async def extract(self, data, filename, mime_type, metadata=None):
        """
        Extract content from a structured document.

        Items are grouped text first, then tables, then images.

        Raises:
            ExternalServiceError: Upload or extraction call failed
        """
        service = self.content_service
        handle = await service.upload_large_file(data, mime_type, filename)
        try:
            response = await service.describe_file(handle, DOCUMENT_EXTRACTION_PROMPT)
        finally:
            try:
                await service.delete_large_file(handle)
            except Exception as e:
                logger.warning(
                    f"{__name__}:extract - Failed to delete uploaded file",
                    extra={"file_name": handle.name, "error": str(e)},
                )

        parsed = parse_content_array(response)
        if isinstance(parsed, ParsedDegraded):
            logger.warning(
                f"{__name__}:extract - Could not parse extraction response, keeping raw text",
                extra={"file_name": filename, "reason": parsed.reason},
            )
            return [
                ContentItem(
                    type=ChunkType.TEXT,
                    content=parsed.raw,
                    position_hint=0,
                    metadata={"parse_degraded": True, "reason": parsed.reason},
                )
            ]

        texts = [item for item in parsed.items if item["type"] == "text"]
        tables = [item for item in parsed.items if item["type"] == "table"]
        images = [item for item in parsed.items if item["type"] == "image"]

        items = [
            ContentItem(type=ChunkType.TEXT, content=item["content"], position_hint=item["page_idx"])
            for item in texts
        ]
        for table in tables:
            items.append(await self._describe_table(table))
        for image in images:
            description = image["content"].strip() or IMAGE_PLACEHOLDER
            items.append(
                ContentItem(
                    type=ChunkType.IMAGE,
                    content=description,
                    position_hint=image["page_idx"],
                    metadata={"from_document": True},
                )
            )

        logger.info(
            f"{__name__}:extract - Extracted document content",
            extra={"file_name": filename, "texts": len(texts), "tables": len(tables), "images": len(images)},
        )
        return items

    async def _describe_table(self, table: dict) -> ContentItem:
        markdown = table["content"]
        try:
            description = await self.content_service.generate_text(
                TABLE_DESCRIPTION_PROMPT.format(table_markdown=markdown)
            )
            if not description.strip():
                raise ValueError("empty table description")
        except Exception as e:
            logger.warning(
                f"{__name__}:_describe_table - Table description failed, using fallback",
                extra={"error": str(e)},
            )
            description = table_fallback_description(markdown)

        return ContentItem(
            type=ChunkType.TABLE,
            content=f"Table Description: {description}\n\nTable Content:\n{markdown}",
            position_hint=table["page_idx"],
            metadata={"table_markdown": markdown},
        )
