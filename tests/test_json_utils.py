from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from markdown_proofreader.llm.json_utils import parse_json_object, parse_json_response


def test_parse_json_object_in_text():
    text = 'Here is the result: {"sentences": ["一文目。"]}. Thanks'
    result = parse_json_response(text)
    assert result == {"sentences": ["一文目。"]}


def test_parse_fenced_json_with_trailing_comma():
    text = '```json\n{"error": ["誤字",], "correctedSentence": "文。"}\n```'
    result = parse_json_response(text)
    assert result == {"error": ["誤字"], "correctedSentence": "文。"}


def test_parse_array_when_it_comes_first():
    result = parse_json_response('[{"a": 1}] and {"b": 2}')
    assert isinstance(result, list)


def test_missing_delimiters_raise():
    with pytest.raises(ValueError):
        parse_json_response("no json here")


def test_non_string_input_raises():
    with pytest.raises(ValueError):
        parse_json_response(None)  # type: ignore[arg-type]


def test_parse_json_object_rejects_arrays():
    assert parse_json_object('{"sentences": []}') == {"sentences": []}
    with pytest.raises(ValueError):
        parse_json_object('["a", "b"]')
