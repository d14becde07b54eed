"""
Test suite for JSON-in-prose parsing of model responses.

System role: Verification of tagged parse results and degradation
"""

from backend.core.document_processing.response_parsing import (
    ParsedDegraded,
    ParsedOk,
    parse_content_array,
    parse_json_object,
    strip_code_fences,
)


class TestStripCodeFences:
    def test_returns_fenced_body(self) -> None:
        assert strip_code_fences('Here:\n```json\n[1, 2]\n```\nDone') == "[1, 2]"

    def test_unfenced_text_is_unchanged(self) -> None:
        assert strip_code_fences("plain") == "plain"


class TestParseContentArray:
    def test_fenced_array_is_normalized(self) -> None:
        response = """```json
[
  {"type": "text", "content": "Intro", "page_idx": 0},
  {"type": "TABLE", "content": "| a | b |", "page_idx": 2},
  {"type": "chart", "content": "Revenue chart"}
]
```"""
        result = parse_content_array(response)

        assert isinstance(result, ParsedOk)
        assert result.items == [
            {"type": "text", "content": "Intro", "page_idx": 0},
            {"type": "table", "content": "| a | b |", "page_idx": 2},
            {"type": "text", "content": "Revenue chart", "page_idx": 2},
        ]

    def test_array_inside_prose_is_found(self) -> None:
        response = 'Sure! The content is [{"type": "image", "content": "A cat"}] as requested.'

        result = parse_content_array(response)

        assert isinstance(result, ParsedOk)
        assert result.items == [{"type": "image", "content": "A cat", "page_idx": 0}]

    def test_bracket_before_payload_is_skipped(self) -> None:
        response = 'See [note] below.\n[{"content": "Body"}]'

        result = parse_content_array(response)

        assert isinstance(result, ParsedOk)
        assert result.items[0]["content"] == "Body"

    def test_blank_items_and_bool_page_index_are_handled(self) -> None:
        response = '[{"content": "  "}, {"content": "Kept", "page_idx": true}, "bare string"]'

        result = parse_content_array(response)

        assert isinstance(result, ParsedOk)
        assert result.items == [
            {"type": "text", "content": "Kept", "page_idx": 1},
            {"type": "text", "content": "bare string", "page_idx": 2},
        ]

    def test_prose_without_json_degrades_with_raw_text(self) -> None:
        result = parse_content_array("The document discusses quarterly revenue.")

        assert isinstance(result, ParsedDegraded)
        assert result.raw == "The document discusses quarterly revenue."
        assert result.reason

    def test_empty_response_degrades(self) -> None:
        assert isinstance(parse_content_array(None), ParsedDegraded)
        assert isinstance(parse_content_array("   "), ParsedDegraded)

    def test_array_without_usable_items_degrades(self) -> None:
        assert isinstance(parse_content_array('[{"content": ""}, 42]'), ParsedDegraded)


class TestParseJsonObject:
    def test_object_after_prose(self) -> None:
        result = parse_json_object('Result: {"entities": [], "relations": []} hope this helps')

        assert isinstance(result, ParsedOk)
        assert result.items == {"entities": [], "relations": []}

    def test_malformed_object_degrades(self) -> None:
        result = parse_json_object('{"entities": [ {"name": "x"')

        assert isinstance(result, ParsedDegraded)
