"""
Extractor output model.

Dependencies: pydantic
System role: Contract between the per-modality extractors and the chunking task
"""

from pydantic import BaseModel, Field

from backend.boundary.db.models import ChunkType


class ContentItem(BaseModel):
    """One unit of extracted content, prior to segmentation."""

    type: ChunkType = Field(description="text, table, image, audio or video_segment")
    content: str = Field(description="Extracted or generated text")
    position_hint: int = Field(default=0, description="Page index or order within the source")
    start_time: float | None = Field(default=None, description="Start in seconds for timed media")
    end_time: float | None = Field(default=None, description="End in seconds for timed media")
    metadata: dict = Field(default_factory=dict, description="Extractor-specific flags")

    @property
    def is_timed(self) -> bool:
        return self.type in (ChunkType.AUDIO, ChunkType.VIDEO_SEGMENT)
