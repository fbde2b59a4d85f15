"""Tests for tolerant JSON extraction and repair."""

from __future__ import annotations

import json

import pytest

from content_engine.llm.errors import ResponseParseError
from content_engine.llm.json_repair import (
    escape_invalid_backslashes,
    escape_prose_quotes,
    escape_string_newlines,
    extract_json_candidate,
    find_balanced_object,
    parse_json_response,
    remove_trailing_commas,
    repair_json,
    strip_control_chars,
)
from content_engine.models import ArticleDraft


@pytest.mark.unit
class TestExtractJsonCandidate:
    """Test candidate extraction."""

    def test_prefers_fenced_block(self) -> None:
        """Return the contents of a ```json fence."""
        text = 'Here you go:\n```json\n{"a": 1}\n```\nAnything else?'
        assert extract_json_candidate(text) == '{"a": 1}'

    def test_unlabelled_fence(self) -> None:
        """Accept a fence without a language tag."""
        assert extract_json_candidate('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_brace_span_without_fence(self) -> None:
        """Fall back to first { through last }."""
        assert extract_json_candidate('Sure! {"a": {"b": 2}} hope this helps') == '{"a": {"b": 2}}'

    def test_empty_response(self) -> None:
        """Return None for blank output."""
        assert extract_json_candidate("   \n") is None


@pytest.mark.unit
class TestStripControlChars:
    """Test control character removal."""

    def test_replaces_disallowed_controls(self) -> None:
        """Replace NUL and unit separator with spaces."""
        assert strip_control_chars("a\x00b\x1fc") == "a b c"

    def test_keeps_whitespace_controls(self) -> None:
        """Leave tab, newline and carriage return alone."""
        assert strip_control_chars("a\tb\nc\rd") == "a\tb\nc\rd"


@pytest.mark.unit
class TestEscapeStringNewlines:
    """Test newline escaping inside strings."""

    def test_escapes_inside_strings(self) -> None:
        """Literal newline and tab inside a value become escapes."""
        repaired = escape_string_newlines('{"body": "line1\nline2\tend"}')
        assert repaired == '{"body": "line1\\nline2\\tend"}'
        assert json.loads(repaired) == {"body": "line1\nline2\tend"}

    def test_leaves_structural_whitespace(self) -> None:
        """Newlines between tokens are untouched."""
        text = '{\n  "a": "x"\n}'
        assert escape_string_newlines(text) == text


@pytest.mark.unit
class TestRemoveTrailingCommas:
    """Test trailing comma removal."""

    def test_removes_before_brackets(self) -> None:
        """Drop commas before ] and }."""
        assert remove_trailing_commas('{"a": [1, 2,], "b": 3,\n}') == '{"a": [1, 2], "b": 3\n}'

    def test_ignores_commas_inside_strings(self) -> None:
        """A ",}" inside a string value is content, not syntax."""
        text = '{"b": "x,}"}'
        assert remove_trailing_commas(text) == text


@pytest.mark.unit
class TestEscapeInvalidBackslashes:
    """Test invalid escape repair."""

    def test_doubles_unknown_escape(self) -> None:
        """A Windows-style path becomes a valid string."""
        repaired = escape_invalid_backslashes(r'{"path": "C:\dir"}')
        assert json.loads(repaired) == {"path": "C:\\dir"}

    def test_keeps_valid_escapes(self) -> None:
        """Standard and unicode escapes survive unchanged."""
        text = r'{"a": "x\ny \u00e9 \"q\" \\ \/"}'
        assert escape_invalid_backslashes(text) == text

    def test_short_unicode_escape_is_doubled(self) -> None:
        """A \\u without four hex digits is treated as a literal backslash."""
        repaired = escape_invalid_backslashes(r'{"a": "\u12"}')
        assert json.loads(repaired) == {"a": "\\u12"}


@pytest.mark.unit
class TestEscapeProseQuotes:
    """Test the prose quote heuristic."""

    def test_escapes_quoted_phrase_mid_sentence(self) -> None:
        """Quotes around a phrase inside a value are escaped."""
        text = '{"body": "He said "hello" to me", "n": 1}'
        assert json.loads(escape_prose_quotes(text)) == {"body": 'He said "hello" to me', "n": 1}

    def test_quote_before_punctuation(self) -> None:
        """A quote followed by a period is prose, not a terminator."""
        text = '{"body": "Known as "the jab"."}'
        assert json.loads(escape_prose_quotes(text)) == {"body": 'Known as "the jab".'}

    def test_structural_quotes_untouched(self) -> None:
        """Keys, values and already-escaped quotes are left alone."""
        text = '{"a": "x \\"y\\"", "b": ["c", "d"], "e": ""}'
        assert escape_prose_quotes(text) == text


@pytest.mark.unit
class TestFindBalancedObject:
    """Test balanced span search."""

    def test_first_complete_object(self) -> None:
        """Stop at the brace that closes the first object."""
        assert find_balanced_object('x {"a": {"b": 1}} y {"c": 2}') == '{"a": {"b": 1}}'

    def test_unbalanced(self) -> None:
        """Return None when no object closes."""
        assert find_balanced_object('{"a": {"b": 1}') is None


@pytest.mark.unit
class TestRepairIdempotence:
    """Repair must be a no-op on valid JSON."""

    @pytest.mark.parametrize(
        "text",
        [
            '{"a": 1, "b": [true, false, null], "c": {"d": -2.5e3}}',
            '{"quote": "she said \\"hi\\", then left", "empty": ""}',
            '{"path": "C:\\\\dir\\\\file", "url": "https:\\/\\/example.com"}',
            '{"unicode": "caf\\u00e9", "nested": [{"x": "a, b"}, {"y": "c: d"}]}',
            '{\n  "pretty": [\n    1,\n    2\n  ],\n  "k": "v"\n}',
            '["a", "b", {"c": []}]',
        ],
    )
    def test_valid_json_unchanged(self, text: str) -> None:
        """Parsing the repaired text gives the same value as parsing the input."""
        assert json.loads(repair_json(text)) == json.loads(text)
        assert repair_json(text) == text.strip()


@pytest.mark.unit
class TestParseJsonResponse:
    """Test the layered parse pipeline."""

    def test_direct_parse(self) -> None:
        """Valid JSON parses on the first attempt."""
        assert parse_json_response('{"a": 1}') == {"a": 1}

    def test_repairs_fenced_output(self) -> None:
        """Fence, literal newline and trailing comma are all fixed."""
        text = '```json\n{"body": "one\ntwo", "tags": ["x",],}\n```'
        assert parse_json_response(text) == {"body": "one\ntwo", "tags": ["x"]}

    def test_falls_back_to_balanced_span(self) -> None:
        """Two objects in a row yield the first one."""
        assert parse_json_response('first {"a": 1} then {"b": 2}') == {"a": 1}

    def test_raises_with_preview_and_cause(self) -> None:
        """Unrecoverable output raises ResponseParseError with a bounded preview."""
        text = "no json here " * 100
        with pytest.raises(ResponseParseError) as exc_info:
            parse_json_response(text)

        error = exc_info.value
        assert len(error.preview) == 500
        assert isinstance(error.original_error, json.JSONDecodeError)

    def test_empty_raises(self) -> None:
        """Blank output is a parse error, not None."""
        with pytest.raises(ResponseParseError):
            parse_json_response("")


@pytest.mark.unit
class TestDraftRoundTrip:
    """Drafts with quotes and newlines survive the parse pipeline."""

    def test_serialized_draft_round_trips(self) -> None:
        """A properly serialized draft parses back to an equal value."""
        draft = ArticleDraft(
            angle="clinical",
            title='The "food noise" question',
            meta_description="What patients mean",
            slug="food-noise",
            body='Patients call it "food noise".\n\n## Next\nAsk "why?" first.',
            sources_cited=["FDA label"],
        )
        parsed = parse_json_response(draft.model_dump_json())
        assert ArticleDraft.model_validate(parsed) == draft

    def test_raw_model_output_recovers(self) -> None:
        """Unescaped prose quotes and literal newlines in a body are repaired."""
        raw = (
            '{"angle": "clinical", "title": "T", "meta_description": "M", "slug": "s", '
            '"body": "Patients call it "food noise".\nAsk your doctor.", "sources_cited": []}'
        )
        parsed = ArticleDraft.model_validate(parse_json_response(raw))
        assert parsed.body == 'Patients call it "food noise".\nAsk your doctor.'
        assert parsed.slug == "s"

    def test_code_fence_inside_body_survives(self) -> None:
        """A markdown code block inside a string value is not treated as a wrapper."""
        draft = ArticleDraft(
            angle="practical",
            title="Tracking your doses",
            meta_description="A simple log",
            slug="dose-log",
            body="Log your doses:\n```\nweek 1: 0.25 mg\nweek 5: 0.5 mg\n```\nBring it to visits.",
        )
        text = draft.model_dump_json()

        assert extract_json_candidate(text) == text
        assert ArticleDraft.model_validate(parse_json_response(text)) == draft

    def test_top_level_array_with_fence_in_string(self) -> None:
        """Valid JSON without an object still parses directly."""
        assert parse_json_response('["```\\ncode\\n```", 1]') == ["```\ncode\n```", 1]
