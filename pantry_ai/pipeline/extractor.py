"""Recover a JSON payload from free-form model output.

Models wrap JSON in prose ("Sure! Here you go: ...") or Markdown fences, so
the extractor never calls ``json.loads`` on the whole reply. It finds the
earliest opening bracket for the requested shape, walks forward counting
brackets while skipping string literals, and parses only that balanced span.

Failures are returned as data (``ExtractionResult.error``), never raised.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

# Opening ```json / ``` fence at the start and closing ``` at the end of a reply
LEADING_FENCE_PATTERN = re.compile(r"\A```[a-zA-Z]*[ \t]*\n?")
TRAILING_FENCE_PATTERN = re.compile(r"\n?```\Z")

BRACKET_PAIRS = {"{": "}", "[": "]"}


class PayloadShape(str, Enum):
    """Top-level JSON shape an intent expects."""

    OBJECT = "object"
    ARRAY = "array"
    ANY = "any"


@dataclass
class ExtractionResult:
    """Outcome of one extraction attempt."""

    payload: Optional[Any] = None
    error: Optional[str] = None
    span: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.payload is None


def strip_code_fences(text: str) -> str:
    """Remove a fence wrapping the whole reply.

    Backticks elsewhere are left alone; fences before the JSON are skipped by
    the bracket scan anyway, and ones inside string values belong to the data.
    """
    text = LEADING_FENCE_PATTERN.sub("", text.strip())
    return TRAILING_FENCE_PATTERN.sub("", text).strip()


def _find_start(text: str, shape: PayloadShape) -> int:
    if shape == PayloadShape.OBJECT:
        return text.find("{")
    if shape == PayloadShape.ARRAY:
        return text.find("[")
    positions = [pos for pos in (text.find("{"), text.find("[")) if pos != -1]
    return min(positions) if positions else -1


def find_balanced_span(text: str, start: int) -> Optional[str]:
    """Return the bracket-balanced span opening at ``start``.

    Brackets inside string literals (including escaped quotes) are ignored.
    Mismatched closers or an unterminated span yield None.
    """
    stack = []
    in_string = False
    escaped = False

    for pos in range(start, len(text)):
        char = text[pos]

        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in BRACKET_PAIRS:
            stack.append(BRACKET_PAIRS[char])
        elif char in ("}", "]"):
            if not stack or stack.pop() != char:
                return None
            if not stack:
                return text[start : pos + 1]

    return None


def _matches_shape(payload: Any, shape: PayloadShape) -> bool:
    if shape == PayloadShape.OBJECT:
        return isinstance(payload, dict)
    if shape == PayloadShape.ARRAY:
        return isinstance(payload, list)
    return isinstance(payload, (dict, list))


def extract_payload(text: Optional[str], shape: PayloadShape = PayloadShape.OBJECT) -> ExtractionResult:
    """Extract the first JSON value of the requested shape from model output.

    Args:
        text: Raw model response text.
        shape: Expected top-level shape (object, array or either).

    Returns:
        ExtractionResult: ``payload`` set on success; otherwise ``error``
        describes why nothing usable was found. Only the first candidate
        span is considered.
    """
    if not text or not text.strip():
        return ExtractionResult(error="Empty response")

    cleaned = strip_code_fences(text)
    start = _find_start(cleaned, shape)
    if start == -1:
        return ExtractionResult(error=f"No JSON {shape.value} found in response")

    span = find_balanced_span(cleaned, start)
    if span is None:
        return ExtractionResult(error="Unbalanced JSON span in response")

    try:
        payload = json.loads(span)
    except json.JSONDecodeError as e:
        return ExtractionResult(error=f"Invalid JSON: {e.msg}", span=span)

    if not _matches_shape(payload, shape):
        return ExtractionResult(
            error=f"Expected JSON {shape.value}, got {type(payload).__name__}",
            span=span,
        )

    return ExtractionResult(payload=payload, span=span)
