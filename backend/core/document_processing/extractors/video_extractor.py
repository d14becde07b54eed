"""
Video extraction.

Produces an overview item plus one item per segment. Segments follow the
timeline in the overview when it lists at least two timestamps, and fixed
windows of `video_segment_seconds` otherwise.

Dependencies: backend.boundary.llm, math
System role: Video modality extractor
"""

import logging
import math

from backend.boundary.db.models import ChunkType
from backend.boundary.llm import FileHandle
from backend.core.document_processing.models import ContentItem

from .base import BaseExtractor
from .prompts import VIDEO_OVERVIEW_PROMPT, VIDEO_SEGMENT_PROMPT, VIDEO_TOPIC_SEGMENT_PROMPT
from .timestamps import duration_hint, format_seconds, parse_timestamps, timeline_ranges, video_duration

logger = logging.getLogger(__name__)

OVERVIEW_PLACEHOLDER = "Video overview could not be generated."
VIDEO_FALLBACK_TEXT = "Video could not be processed."


class VideoExtractor(BaseExtractor):
    """Describe a video as an overview and time-ranged segments."""

    async def extract(self, data, filename, mime_type, metadata=None):
        service = self.content_service
        try:
            handle = await service.upload_large_file(data, mime_type, filename)
        except Exception as e:
            logger.warning(
                f"{__name__}:extract - Video upload failed",
                extra={"file_name": filename, "error": str(e)},
            )
            return [
                ContentItem(
                    type=ChunkType.VIDEO_SEGMENT,
                    content=VIDEO_FALLBACK_TEXT,
                    metadata={"mime_type": mime_type, "processing_error": str(e) or type(e).__name__},
                )
            ]

        try:
            return await self._extract_uploaded(handle, filename, mime_type, metadata)
        finally:
            try:
                await service.delete_large_file(handle)
            except Exception as e:
                logger.warning(
                    f"{__name__}:extract - Failed to delete uploaded file",
                    extra={"file_name": handle.name, "error": str(e)},
                )

    async def _extract_uploaded(
        self,
        handle: FileHandle,
        filename: str,
        mime_type: str,
        metadata: dict | None,
    ) -> list[ContentItem]:
        overview_failed = False
        try:
            overview = await self.content_service.describe_file(handle, VIDEO_OVERVIEW_PROMPT)
        except Exception as e:
            logger.warning(
                f"{__name__}:_extract_uploaded - Overview failed, falling back to fixed windows",
                extra={"file_name": filename, "error": str(e)},
            )
            overview = OVERVIEW_PLACEHOLDER
            overview_failed = True

        items = [
            ContentItem(
                type=ChunkType.VIDEO_SEGMENT,
                content=f"Video Overview:\n\n{overview}",
                position_hint=0,
                start_time=0,
                end_time=0,
                metadata={"is_overview": True, "mime_type": mime_type},
            )
        ]

        default = self._settings.default_media_duration_seconds
        duration = duration_hint(metadata) or (default if overview_failed else video_duration(overview, default))
        timestamps = [] if overview_failed else parse_timestamps(overview)

        if len(timestamps) >= 2:
            for i, (stamp, end) in enumerate(timeline_ranges(timestamps, duration)):
                label = f"[{format_seconds(stamp.seconds)} - {format_seconds(end)}] {stamp.label}"
                prompt = VIDEO_TOPIC_SEGMENT_PROMPT.format(
                    start_time=format_seconds(stamp.seconds),
                    end_time=format_seconds(end),
                    topic=stamp.label,
                )
                items.append(
                    await self._segment(handle, prompt, label, stamp.seconds, end, i + 1,
                                        {"mime_type": mime_type, "key_moment": stamp.label})
                )
        else:
            window = self._settings.video_segment_seconds
            for i in range(math.ceil(duration / window)):
                start = i * window
                end = min(start + window, duration)
                label = f"[{format_seconds(start)} - {format_seconds(end)}]"
                prompt = VIDEO_SEGMENT_PROMPT.format(
                    start_time=format_seconds(start),
                    end_time=format_seconds(end),
                )
                items.append(
                    await self._segment(handle, prompt, label, start, end, i + 1,
                                        {"mime_type": mime_type, "segment_index": i})
                )

        logger.info(
            f"{__name__}:_extract_uploaded - Video segmented",
            extra={"file_name": filename, "segments": len(items) - 1, "duration": duration},
        )
        return items

    async def _segment(
        self,
        handle: FileHandle,
        prompt: str,
        label: str,
        start: float,
        end: float,
        position: int,
        metadata: dict,
    ) -> ContentItem:
        try:
            analysis = await self.content_service.describe_file(handle, prompt)
            content = f"{label}\n\n{analysis}"
        except Exception as e:
            logger.warning(
                f"{__name__}:_segment - Segment analysis failed, keeping label only",
                extra={"label": label, "error": str(e)},
            )
            content = label
            metadata = {**metadata, "processing_error": str(e) or type(e).__name__}

        return ContentItem(
            type=ChunkType.VIDEO_SEGMENT,
            content=content,
            position_hint=position,
            start_time=start,
            end_time=end,
            metadata=metadata,
        )
