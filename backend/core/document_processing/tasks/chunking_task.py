"""
Chunk building task.

Text items are segmented by the token-budgeted segmenter; tables, images
and timed media items become one chunk each. Order indices are assigned
sequentially across all items.

Dependencies: segmenter
System role: Third stage of document ingestion pipeline
"""

from backend.boundary.db.models import ChunkType

from ..models import Chunk, ContentItem
from ..segmenter import chunk_text, estimate_tokens


class ChunkingTask:
    """Turn extractor items into ordered chunks."""

    def __init__(
        self,
        chunk_size: int = 800,
        chunk_overlap: int = 100,
    ) -> None:
        """
        Initialize chunking task with segmenter configuration.

        Args:
            chunk_size: Maximum chunk size in estimated tokens
            chunk_overlap: Tokens carried between consecutive chunks
        """
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap

    def chunk(self, items: list[ContentItem]) -> list[Chunk]:
        """
        Build chunks from extracted items.

        Args:
            items: Extractor output

        Returns:
            list[Chunk]: Chunks with chunk_order_index 0..n-1 (empty when no item has content)
        """
        chunks: list[Chunk] = []
        for item in items:
            if not item.content or not item.content.strip():
                continue

            if item.type == ChunkType.TEXT:
                for piece in chunk_text(item.content, self._chunk_size, self._chunk_overlap):
                    chunks.append(
                        Chunk(
                            chunk_order_index=len(chunks),
                            content=piece.content,
                            tokens=piece.tokens,
                            chunk_type=ChunkType.TEXT,
                            page_idx=item.position_hint,
                            metadata={**item.metadata, "start_char": piece.start_char, "end_char": piece.end_char},
                        )
                    )
                continue

            content = item.content.strip()
            chunks.append(
                Chunk(
                    chunk_order_index=len(chunks),
                    content=content,
                    tokens=estimate_tokens(content),
                    chunk_type=item.type,
                    start_time=item.start_time if item.is_timed else None,
                    end_time=item.end_time if item.is_timed else None,
                    page_idx=None if item.is_timed else item.position_hint,
                    metadata=dict(item.metadata),
                )
            )
        return chunks
