"""Parsing of LLM scoring replies into AnalysisFields.

Never raises: a reply without a usable JSON object yields an error-marked
result whose score is 0.
"""

import json
import logging
import math
import re
from typing import Any

from src.core.schemas import AnalysisFields

logger = logging.getLogger(__name__)

# First '{' through the last '}' (greedy), across newlines.
_JSON_SPAN = re.compile(r"\{[\s\S]*\}")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

_TEXT_FIELDS = ("name", "role", "company", "duration", "education", "summary", "rationale")
_LIST_FIELDS = ("strengths", "concerns")


def find_json_span(raw_text: str) -> str | None:
    """Return the greedy '{...}' span of the text, or None."""
    match = _JSON_SPAN.search(raw_text)
    return match.group(0) if match else None


def parse_analysis(raw_text: str) -> AnalysisFields:
    """Parse a scoring reply, filling defaults for missing or mistyped fields."""
    span = find_json_span(raw_text or "")
    if span is None:
        return _parse_failure("No JSON found in response")

    try:
        data = json.loads(span)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError is a ValueError; oversized ints and deep nesting raise the others.
        return _parse_failure(f"Invalid JSON in response: {e}")

    if not isinstance(data, dict):
        return _parse_failure("Response JSON is not an object")

    # Absent, blank or non-string fields keep the AnalysisFields defaults.
    values: dict[str, Any] = {}
    for field in _TEXT_FIELDS:
        value = data.get(field)
        if isinstance(value, str) and value.strip():
            values[field] = value.strip()
    for field in _LIST_FIELDS:
        values[field] = _string_list(data.get(field))
    recommendation = data.get("recommendation")
    values["recommendation"] = recommendation.strip() if isinstance(recommendation, str) else ""
    values["score"] = coerce_score(data.get("score"))

    return AnalysisFields(**values)


def coerce_score(value: Any) -> int:
    """Coerce a raw score to an int clamped into [0, 100].

    Integers pass through, floats are truncated, strings contribute their
    leading integer; anything else (including booleans) is 0.
    """
    score = 0
    if isinstance(value, bool):
        score = 0
    elif isinstance(value, int):
        score = value
    elif isinstance(value, float):
        score = 0 if math.isnan(value) or math.isinf(value) else int(value)
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        score = _leading_int(match.group(1)) if match else 0
    return max(0, min(100, score))


def _leading_int(digits: str) -> int:
    sign = -1 if digits.startswith("-") else 1
    digits = digits.lstrip("+-").lstrip("0") or "0"
    # Anything past three digits is out of range once clamped.
    if len(digits) > 3:
        return sign * 101
    return sign * int(digits)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _parse_failure(reason: str) -> AnalysisFields:
    logger.warning("Failed to parse analysis response: %s", reason)
    return AnalysisFields(
        name="Parse Error",
        summary="Failed to parse analysis",
        rationale="Response parsing failed",
        parse_error=reason,
    )
