"""Tolerant JSON extraction and repair for model output

Models asked for JSON still return fenced blocks, literal newlines inside
strings, unescaped quotes in prose fields and trailing commas. Each helper
here is a pure str -> str transform; parse_json_response chains them:

    parse -> extract candidate -> parse -> repair -> parse -> balanced span -> parse

None of the transforms changes text that is already valid JSON.

Limits: quote repair is a heuristic. A quote inside a string is treated as
the closing quote when the next non-space character is "}", "]", end of
text, or a "," / ":" followed by something that can start a JSON value.
Prose such as `the "A", "B" options` is therefore under-escaped, and nested
quoted dialogue can end up either way.
"""

import json
import logging
import re
from typing import Any, List, Optional, Tuple

from .errors import ResponseParseError

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"```(?:json|JSON)?[ \t]*\r?\n?(.*?)\r?\n?[ \t]*```", re.DOTALL)
CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")
TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
WHITESPACE = " \t\r\n"
SIMPLE_ESCAPES = '"\\/bfnrt'
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def extract_json_candidate(text: str) -> Optional[str]:
    """
    Pull the JSON payload out of a model response.

    Uses the first fenced code block when it opens before the first "{",
    otherwise the span from the first "{" to the last "}". A fence that opens
    later sits inside a string value and is left alone.

    Args:
        text: Raw model output

    Returns:
        Candidate JSON text, or None if the response is empty
    """
    stripped = text.strip()
    if not stripped:
        return None

    start = stripped.find("{")
    match = FENCE_RE.search(stripped)
    if match and (start == -1 or match.start() < start):
        return match.group(1).strip()

    end = stripped.rfind("}")
    if start != -1 and end > start:
        return stripped[start:end + 1]
    return stripped


def _split_strings(text: str) -> List[Tuple[bool, str]]:
    """Split text into (is_string, chunk) pieces; string chunks keep their quotes."""
    segments = []
    start = 0
    in_string = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                segments.append((True, text[start:i + 1]))
                start = i + 1
                in_string = False
        elif ch == '"':
            if i > start:
                segments.append((False, text[start:i]))
            start = i
            in_string = True
        i += 1
    if start < n:
        segments.append((in_string, text[start:]))
    return segments


def strip_control_chars(text: str) -> str:
    """Replace control characters JSON never allows with spaces (tab/CR/LF are kept)."""
    return CONTROL_CHARS_RE.sub(" ", text)


def escape_string_newlines(text: str) -> str:
    """Escape literal newlines, carriage returns and tabs inside string literals."""
    parts = []
    for is_string, chunk in _split_strings(text):
        if is_string:
            chunk = chunk.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
        parts.append(chunk)
    return "".join(parts)


def remove_trailing_commas(text: str) -> str:
    """Drop commas that directly precede a closing bracket or brace."""
    parts = []
    for is_string, chunk in _split_strings(text):
        if not is_string:
            chunk = TRAILING_COMMA_RE.sub(r"\1", chunk)
        parts.append(chunk)
    return "".join(parts)


def _fix_escapes(chunk: str) -> str:
    out = []
    i = 0
    n = len(chunk)
    while i < n:
        ch = chunk[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        nxt = chunk[i + 1] if i + 1 < n else ""
        if nxt and nxt in SIMPLE_ESCAPES:
            out.append(chunk[i:i + 2])
            i += 2
        elif nxt == "u" and all(c in HEX_DIGITS for c in chunk[i + 2:i + 6]) and i + 6 <= n:
            out.append(chunk[i:i + 6])
            i += 6
        else:
            out.append("\\\\")
            i += 1
    return "".join(out)


def escape_invalid_backslashes(text: str) -> str:
    """Double backslashes that do not start a valid JSON escape sequence."""
    parts = []
    for is_string, chunk in _split_strings(text):
        parts.append(_fix_escapes(chunk) if is_string else chunk)
    return "".join(parts)


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in WHITESPACE:
        pos += 1
    return pos


def _starts_value(text: str, pos: int) -> bool:
    if pos >= len(text):
        return False
    ch = text[pos]
    if ch in '"{[-' or ch.isdigit():
        return True
    for literal in ("true", "false", "null"):
        if text.startswith(literal, pos):
            end = pos + len(literal)
            return end >= len(text) or not (text[end].isalnum() or text[end] == "_")
    return False


def _closes_string(text: str, pos: int) -> bool:
    pos = _skip_whitespace(text, pos)
    if pos >= len(text):
        return True
    ch = text[pos]
    if ch in "}]":
        return True
    if ch == ":":
        return _starts_value(text, _skip_whitespace(text, pos + 1))
    if ch == ",":
        after = _skip_whitespace(text, pos + 1)
        return after >= len(text) or text[after] in "}]" or _starts_value(text, after)
    return False


def escape_prose_quotes(text: str) -> str:
    """
    Escape double quotes that sit inside prose rather than delimiting a string.

    Existing escape sequences are left alone, so escaped quotes stay escaped.
    """
    out = []
    in_string = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if not in_string:
            out.append(ch)
            if ch == '"':
                in_string = True
            i += 1
        elif ch == "\\":
            out.append(text[i:i + 2])
            i += 2
        elif ch == '"':
            if _closes_string(text, i + 1):
                in_string = False
                out.append(ch)
            else:
                out.append('\\"')
            i += 1
        else:
            out.append(ch)
            i += 1
    return "".join(out)


# Order matters: quote repair fixes string boundaries the later steps rely on
REPAIR_STEPS = (
    strip_control_chars,
    escape_prose_quotes,
    escape_string_newlines,
    escape_invalid_backslashes,
    remove_trailing_commas,
)


def repair_json(text: str) -> str:
    """Apply every repair step in order."""
    repaired = text.strip()
    for step in REPAIR_STEPS:
        repaired = step(repaired)
    return repaired


def find_balanced_object(text: str) -> Optional[str]:
    """
    Return the first brace-balanced {...} span.

    Braces are counted without regard to strings, so a brace inside prose
    can shift the span.
    """
    depth = 0
    start = -1
    for i, ch in enumerate(text):
        if ch == "{":
            if start == -1:
                start = i
            depth += 1
        elif ch == "}" and start != -1:
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def parse_json_response(text: str) -> Any:
    """
    Parse model output into a JSON value, repairing it if needed.

    Args:
        text: Raw model output

    Returns:
        Parsed JSON value

    Raises:
        ResponseParseError: If every attempt fails
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    candidate = extract_json_candidate(text)
    if not candidate:
        raise ResponseParseError("No JSON found in response", text)

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        first_error = e
        logger.debug(f"Direct JSON parse failed ({e}), applying repairs")

    try:
        return json.loads(repair_json(candidate))
    except json.JSONDecodeError as e:
        logger.debug(f"Repaired JSON parse failed ({e}), trying balanced span")

    balanced = find_balanced_object(candidate)
    if balanced:
        try:
            return json.loads(repair_json(balanced))
        except json.JSONDecodeError as e:
            logger.debug(f"Balanced-span parse failed ({e})")

    raise ResponseParseError(
        "Failed to parse JSON from model response", candidate, first_error
    )
