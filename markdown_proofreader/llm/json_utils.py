"""JSON extraction and repair for LLM response text.

Models wrap JSON in code fences, add commentary around it, or leave trailing
commas behind. ``json_repair`` handles the latter once the fragment has been
cut out of the surrounding text.
"""

from __future__ import annotations

import json
from typing import Any

from json_repair import repair_json


def _fragment_bounds(text: str) -> tuple[int, int]:
    start_obj = text.find("{")
    start_arr = text.find("[")
    if start_obj == -1 and start_arr == -1:
        raise ValueError("Response text does not contain JSON object or array delimiters.")

    if start_obj == -1 or (start_arr != -1 and start_arr < start_obj):
        start, end_char = start_arr, "]"
    else:
        start, end_char = start_obj, "}"

    end = text.rfind(end_char)
    if end == -1 or end <= start:
        raise ValueError("Response text does not contain matching JSON delimiters.")
    return start, end


def parse_json_response(text: str) -> Any:
    """Extract the outermost JSON object or array from ``text`` and parse it.

    Raises:
        ValueError: If no JSON fragment is present
        json.JSONDecodeError: If the repaired fragment still cannot be parsed

    Example:
        >>> parse_json_response('```json\\n{"sentences": ["a",]}\\n```')
        {'sentences': ['a']}
    """
    if not isinstance(text, str):
        raise ValueError(f"Expected string input, got {type(text)}")

    start, end = _fragment_bounds(text)
    repaired = repair_json(text[start : end + 1])
    return json.loads(repaired)


def parse_json_object(text: str) -> dict[str, Any]:
    """Like :func:`parse_json_response` but require a top-level object."""

    value = parse_json_response(text)
    if not isinstance(value, dict):
        raise ValueError(f"Expected a JSON object, got {type(value).__name__}")
    return value
