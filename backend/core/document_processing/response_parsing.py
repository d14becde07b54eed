"""
Parsing of JSON embedded in model responses.

Models are asked for JSON but often wrap it in code fences or prose. All
of the "find the JSON in a text blob" heuristics live here and return a
tagged result instead of raising:

    ParsedOk(items)              usable content was found
    ParsedDegraded(raw, reason)  nothing usable; callers fall back to raw text

Dependencies: json, re, dataclasses
System role: Pure helpers shared by the document extractor and entity extractor
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any

_CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)

CONTENT_ITEM_TYPES = ("text", "table", "image")

_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class ParsedOk:
    """Successfully parsed payload."""

    items: Any


@dataclass(frozen=True)
class ParsedDegraded:
    """Response contained no usable JSON payload."""

    raw: str
    reason: str = field(default="")


ParseResult = ParsedOk | ParsedDegraded


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or the text unchanged."""
    match = _CODE_FENCE.search(text)
    if match:
        return match.group(1).strip()
    return text


def _first_json(text: str, opener: str, expected: type) -> Any | None:
    # Try every opener position until one decodes to the expected type.
    start = text.find(opener)
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, expected):
            return value
        start = text.find(opener, start + 1)
    return None


def _normalize_type(value: Any) -> str:
    type_name = str(value or "text").strip().lower()
    return type_name if type_name in CONTENT_ITEM_TYPES else "text"


def _normalize_content_item(raw: Any, index: int) -> dict | None:
    if isinstance(raw, str):
        raw = {"type": "text", "content": raw}
    if not isinstance(raw, dict):
        return None

    content = raw.get("content")
    content = "" if content is None else str(content)
    if not content.strip():
        return None

    page_idx = raw.get("page_idx")
    if isinstance(page_idx, bool) or not isinstance(page_idx, int):
        page_idx = index

    return {"type": _normalize_type(raw.get("type")), "content": content, "page_idx": page_idx}


def parse_content_array(text: str | None) -> ParseResult:
    """
    Parse a document-extraction response into content items.

    Items are normalized to {type: text|table|image, content, page_idx}.
    Unknown types become "text", a missing page index falls back to the
    item's position, and items with blank content are dropped.

    Args:
        text: Raw model response

    Returns:
        ParsedOk with a non-empty list of items, or ParsedDegraded
    """
    raw = text or ""
    if not raw.strip():
        return ParsedDegraded(raw=raw, reason="empty response")

    array = _first_json(strip_code_fences(raw), "[", list)
    if array is None:
        # Fenced block may have been something other than the payload
        array = _first_json(raw, "[", list)
    if array is None:
        return ParsedDegraded(raw=raw, reason="no JSON array found")

    items = []
    for index, item in enumerate(array):
        normalized = _normalize_content_item(item, index)
        if normalized is not None:
            items.append(normalized)

    if not items:
        return ParsedDegraded(raw=raw, reason="JSON array contained no usable items")
    return ParsedOk(items=items)


def parse_json_object(text: str | None) -> ParseResult:
    """
    Locate the first well-formed JSON object in a model response.

    Returns:
        ParsedOk with the decoded dict, or ParsedDegraded
    """
    raw = text or ""
    if not raw.strip():
        return ParsedDegraded(raw=raw, reason="empty response")

    obj = _first_json(strip_code_fences(raw), "{", dict)
    if obj is None:
        obj = _first_json(raw, "{", dict)
    if obj is None:
        return ParsedDegraded(raw=raw, reason="no JSON object found")
    return ParsedOk(items=obj)
