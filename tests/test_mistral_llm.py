from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, cast

import pytest
from mistralai import Mistral

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from markdown_proofreader.llm import mistral_llm
from markdown_proofreader.llm.mistral_llm import MistralLLM
from markdown_proofreader.llm.provider import (
    LLMParseError,
    LLMProviderConfigurationError,
    LLMQuotaError,
)


class _DummyMessage:
    def __init__(self, content: Any) -> None:
        self.content = content


class _DummyChoice:
    def __init__(self, message: _DummyMessage) -> None:
        self.message = message


class _ChoicesResponse:
    def __init__(self, content: Any) -> None:
        self.choices = [_DummyChoice(_DummyMessage(content))]


class _OutputsResponse:
    def __init__(self, content: Any) -> None:
        self.outputs = [{"type": "message.output", "content": content}]


class _Conversations:
    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self.calls: list[dict[str, object]] = []
        self._response = response
        self._error = error

    def start(self, **kwargs: object) -> Any:
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return self._response


class _Beta:
    def __init__(self, conversations: _Conversations) -> None:
        self.conversations = conversations


class _DummyClient:
    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self.beta = _Beta(_Conversations(response=response, error=error))


class _QuotaExceededError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.status_code = 429


def test_generate_sends_instructions_and_json_format() -> None:
    client = _DummyClient(response=_ChoicesResponse("mock-response"))
    llm = MistralLLM(system_prompt="## System\nFollow the rules.", client=cast(Mistral, client))

    result = llm.generate(["Line one", "Line two"])

    assert isinstance(result, _ChoicesResponse)
    call = client.beta.conversations.calls[0]
    assert call["model"] == llm.MODEL
    assert call["instructions"] == "## System\nFollow the rules."
    first_input = cast(list, call["inputs"])[0]
    assert getattr(first_input, "role") == "user"
    assert getattr(first_input, "content") == "Line one\nLine two"
    completion_args = cast(dict, call["completion_args"])
    assert completion_args["temperature"] == 0.2
    assert completion_args["response_format"] == {"type": "json_object"}


def test_filter_reads_outputs_shape() -> None:
    client = _DummyClient(response=_OutputsResponse('{"error": [], "correctedSentence": "文。"}'))
    llm = MistralLLM(system_prompt="System", client=cast(Mistral, client), filter_json=True)

    assert llm.generate(["Prompt"]) == {"error": [], "correctedSentence": "文。"}


def test_filter_reads_choices_shape() -> None:
    client = _DummyClient(response=_ChoicesResponse('```json\n{"sentences": ["a"]}\n```'))
    llm = MistralLLM(system_prompt="System", client=cast(Mistral, client))

    assert llm.generate(["Prompt"], filter_json=True) == {"sentences": ["a"]}


def test_filter_raises_when_content_missing() -> None:
    client = _DummyClient(response=_ChoicesResponse(None))
    llm = MistralLLM(system_prompt="System", client=cast(Mistral, client), filter_json=True)

    with pytest.raises(LLMParseError) as exc_info:
        llm.generate(["Prompt"])

    assert exc_info.value.prompts == ["Prompt"]


def test_http_429_becomes_quota_error() -> None:
    client = _DummyClient(error=_QuotaExceededError("Rate limit exceeded"))
    llm = MistralLLM(system_prompt="System", client=cast(Mistral, client))

    with pytest.raises(LLMQuotaError):
        llm.generate(["Prompt"])


def test_other_errors_propagate() -> None:
    client = _DummyClient(error=RuntimeError("boom"))
    llm = MistralLLM(system_prompt="System", client=cast(Mistral, client))

    with pytest.raises(RuntimeError, match="boom"):
        llm.generate(["Prompt"])


def test_missing_api_key_raises_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISTRAL_API_KEY", raising=False)
    monkeypatch.setattr(mistral_llm, "load_dotenv", lambda *args, **kwargs: False)

    with pytest.raises(LLMProviderConfigurationError):
        MistralLLM(system_prompt="System")


def test_api_key_is_read_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MISTRAL_API_KEY", "env-test-key-123")
    captured: dict[str, object] = {}

    class _FakeMistral:
        def __init__(self, api_key: str | None = None, **kwargs: object) -> None:
            captured["api_key"] = api_key

    monkeypatch.setattr(mistral_llm, "Mistral", _FakeMistral)

    MistralLLM(system_prompt="System")

    assert captured["api_key"] == "env-test-key-123"
