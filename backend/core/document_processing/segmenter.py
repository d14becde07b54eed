"""
Token-budgeted text segmentation.

Splits text into chunks of at most `max_tokens` estimated tokens using
paragraph boundaries first. Oversized paragraphs are handed to
RecursiveCharacterTextSplitter, which splits them at sentence boundaries
and hard-splits sentences that still do not fit. Each new chunk is seeded
with the trailing `overlap_tokens` of the chunk before it, so the seed is
carried on top of the budget.

Dependencies: langchain_text_splitters
System role: Segmentation stage of the ingestion pipeline
"""

import math
import re
from dataclasses import dataclass

from langchain_text_splitters import RecursiveCharacterTextSplitter

CHARS_PER_TOKEN = 4

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
SENTENCE_SEPARATORS = [r"(?<=[.!?])\s+", ""]


@dataclass
class TextChunk:
    """One segment of a larger text."""

    content: str
    tokens: int
    index: int
    start_char: int
    end_char: int


@dataclass
class _Span:
    text: str
    start: int
    end: int


def estimate_tokens(text: str) -> int:
    """Estimate token count as ceil(chars / 4)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def normalize_text(text: str) -> str:
    return text.replace("\r\n", "\n").strip()


def sentence_splitter(max_chars: int) -> RecursiveCharacterTextSplitter:
    """Splitter for paragraphs over budget: sentences first, then characters."""
    return RecursiveCharacterTextSplitter(
        separators=SENTENCE_SEPARATORS,
        is_separator_regex=True,
        keep_separator="end",
        chunk_size=max_chars,
        chunk_overlap=0,
        add_start_index=True,
        length_function=len,
    )


def _paragraphs(text: str) -> list[_Span]:
    spans = []
    start = 0
    for match in [*_PARAGRAPH_BREAK.finditer(text), None]:
        end = match.start() if match else len(text)
        raw = text[start:end]
        stripped = raw.strip()
        if stripped:
            offset = start + len(raw) - len(raw.lstrip())
            spans.append(_Span(stripped, offset, offset + len(stripped)))
        if match:
            start = match.end()
    return spans


class _Accumulator:
    """Greedy chunk builder over source spans."""

    def __init__(self, max_chars: int, overlap_chars: int) -> None:
        self.max_chars = max_chars
        self.overlap_chars = overlap_chars
        self.closed: list[_Span] = []
        self.current = ""
        self.start = 0
        self.end = 0
        self.has_body = False

    def _joined(self, piece: _Span, separator: str) -> str:
        if not self.current:
            return piece.text
        # Pieces cut from one run of text are glued back without a gap
        glue = "" if piece.start == self.end else separator
        return f"{self.current}{glue}{piece.text}"

    def add(self, piece: _Span, separator: str) -> None:
        candidate = self._joined(piece, separator)
        if self.has_body and len(candidate) > self.max_chars:
            self.close()
            candidate = self._joined(piece, separator)
        if not self.current:
            self.start = piece.start
        self.current = candidate
        self.end = piece.end
        self.has_body = True

    def close(self) -> None:
        if not self.has_body:
            return
        finished = self.current.strip()
        self.closed.append(_Span(finished, self.start, self.end))
        seed = finished[-self.overlap_chars:].lstrip() if self.overlap_chars > 0 else ""
        self.current = seed
        self.start = max(self.start, self.end - len(seed))
        self.has_body = False

    def finish(self) -> list[_Span]:
        self.close()
        return self.closed


def _split_spans(text: str, max_chars: int, overlap_chars: int) -> list[_Span]:
    acc = _Accumulator(max_chars, overlap_chars)
    splitter = sentence_splitter(max_chars)

    for paragraph in _paragraphs(text):
        if len(paragraph.text) <= max_chars:
            acc.add(paragraph, "\n\n")
            continue

        separator = "\n\n"
        for doc in splitter.create_documents([paragraph.text]):
            start = paragraph.start + doc.metadata["start_index"]
            acc.add(_Span(doc.page_content, start, start + len(doc.page_content)), separator)
            separator = " "

    return acc.finish()


def chunk_text(text: str, max_tokens: int = 800, overlap_tokens: int = 100) -> list[TextChunk]:
    """
    Segment text into overlapping chunks.

    Args:
        text: Raw text (CRLF normalized and stripped before splitting)
        max_tokens: Token budget per chunk, excluding the carried overlap
        overlap_tokens: Tokens carried from the end of one chunk into the next

    Returns:
        list[TextChunk]: Ordered chunks (empty for blank input); character
            offsets refer to the normalized text

    Raises:
        ValueError: Non-positive budget or overlap not smaller than the budget
    """
    if max_tokens <= 0:
        raise ValueError("max_tokens must be positive")
    if overlap_tokens < 0 or overlap_tokens >= max_tokens:
        raise ValueError("overlap_tokens must be in [0, max_tokens)")

    normalized = normalize_text(text)
    if not normalized:
        return []

    max_chars = max_tokens * CHARS_PER_TOKEN
    if len(normalized) <= max_chars:
        spans = [_Span(normalized, 0, len(normalized))]
    else:
        spans = _split_spans(normalized, max_chars, overlap_tokens * CHARS_PER_TOKEN)

    return [
        TextChunk(
            content=span.text,
            tokens=estimate_tokens(span.text),
            index=index,
            start_char=span.start,
            end_char=span.end,
        )
        for index, span in enumerate(spans)
    ]
