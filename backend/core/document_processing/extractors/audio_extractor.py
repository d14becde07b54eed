"""
Audio extraction.

One transcription call returns the transcript, a summary and optionally a
topic timeline. A timeline with at least two entries drives per-topic
segment calls; otherwise the transcript is split into token-sized pieces.

Dependencies: backend.boundary.llm, re
System role: Audio modality extractor
"""

import logging
import re

from backend.boundary.db.models import ChunkType
from backend.boundary.llm import FileHandle
from backend.core.document_processing.models import ContentItem
from backend.core.document_processing.segmenter import chunk_text

from .base import BaseExtractor
from .prompts import AUDIO_SEGMENT_PROMPT, AUDIO_TRANSCRIPTION_PROMPT
from .timestamps import Timestamp, audio_duration, duration_hint, format_seconds, parse_timestamps, timeline_ranges

logger = logging.getLogger(__name__)

AUDIO_FALLBACK_TEXT = "Audio could not be processed."

_TRANSCRIPTION = re.compile(r"(?:Transcription|Transcript)[:\s*]*\n(.+?)(?:\n\n\*\*|$)", re.IGNORECASE | re.DOTALL)
_SUMMARY = re.compile(r"Summary[:\s*]*\n?(.+?)(?:\n\n\*\*|\n\n\d|$)", re.IGNORECASE | re.DOTALL)


def extract_transcription(analysis: str) -> str:
    """Transcript section of the response, or the whole response."""
    match = _TRANSCRIPTION.search(analysis)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return analysis.strip()


def extract_summary(analysis: str) -> str | None:
    match = _SUMMARY.search(analysis)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return None


class AudioExtractor(BaseExtractor):
    """Transcribe audio into summary and transcript items."""

    async def extract(self, data, filename, mime_type, metadata=None):
        service = self.content_service
        handle = None
        try:
            handle = await service.upload_large_file(data, mime_type, filename)
            analysis = await service.describe_file(handle, AUDIO_TRANSCRIPTION_PROMPT)
            return await self._items_from_analysis(handle, analysis, mime_type, metadata)
        except Exception as e:
            logger.warning(
                f"{__name__}:extract - Audio processing failed",
                extra={"file_name": filename, "error": str(e)},
            )
            return [
                ContentItem(
                    type=ChunkType.AUDIO,
                    content=AUDIO_FALLBACK_TEXT,
                    metadata={"mime_type": mime_type, "processing_error": str(e) or type(e).__name__},
                )
            ]
        finally:
            if handle is not None:
                try:
                    await service.delete_large_file(handle)
                except Exception as e:
                    logger.warning(
                        f"{__name__}:extract - Failed to delete uploaded file",
                        extra={"file_name": handle.name, "error": str(e)},
                    )

    async def _items_from_analysis(
        self,
        handle: FileHandle,
        analysis: str,
        mime_type: str,
        metadata: dict | None,
    ) -> list[ContentItem]:
        items = []
        summary = extract_summary(analysis)
        if summary:
            items.append(
                ContentItem(
                    type=ChunkType.AUDIO,
                    content=f"Audio Summary:\n\n{summary}",
                    position_hint=0,
                    start_time=0,
                    end_time=0,
                    metadata={"is_overview": True, "mime_type": mime_type},
                )
            )

        timestamps = parse_timestamps(analysis)
        if len(timestamps) >= 2:
            duration = duration_hint(metadata) or audio_duration(
                analysis, self._settings.default_media_duration_seconds
            )
            for stamp, end in timeline_ranges(timestamps, duration):
                items.append(await self._topic_segment(handle, stamp, end, len(items), mime_type))
            return items

        transcription = extract_transcription(analysis)
        pieces = chunk_text(transcription, max_tokens=self._settings.chunk_size_tokens, overlap_tokens=0)
        for piece in pieces:
            items.append(
                ContentItem(
                    type=ChunkType.AUDIO,
                    content=piece.content,
                    position_hint=len(items),
                    metadata={"mime_type": mime_type, "chunk_index": piece.index, "total_chunks": len(pieces)},
                )
            )
        if not items:
            items.append(ContentItem(type=ChunkType.AUDIO, content=AUDIO_FALLBACK_TEXT, metadata={"mime_type": mime_type}))
        return items

    async def _topic_segment(
        self,
        handle: FileHandle,
        stamp: Timestamp,
        end: float,
        position: int,
        mime_type: str,
    ) -> ContentItem:
        label = f"[{format_seconds(stamp.seconds)} - {format_seconds(end)}] {stamp.label}"
        metadata = {"mime_type": mime_type, "topic": stamp.label}
        try:
            segment = await self.content_service.describe_file(
                handle,
                AUDIO_SEGMENT_PROMPT.format(
                    start_time=format_seconds(stamp.seconds),
                    end_time=format_seconds(end),
                    topic=stamp.label,
                ),
            )
            content = f"{label}\n\n{segment}"
        except Exception as e:
            logger.warning(
                f"{__name__}:_topic_segment - Segment transcription failed, keeping label only",
                extra={"label": label, "error": str(e)},
            )
            content = label
            metadata["processing_error"] = str(e) or type(e).__name__

        return ContentItem(
            type=ChunkType.AUDIO,
            content=content,
            position_hint=position,
            start_time=stamp.seconds,
            end_time=end,
            metadata=metadata,
        )
