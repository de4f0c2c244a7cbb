from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path
from typing import Any, cast

import pytest
from google import genai
from google.genai import types

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from markdown_proofreader.llm import gemini_llm
from markdown_proofreader.llm.gemini_llm import GeminiLLM
from markdown_proofreader.llm.provider import (
    LLMParseError,
    LLMProviderConfigurationError,
    LLMQuotaError,
)
from markdown_proofreader.llm.service import LLMService


class _DummyResponse:
    def __init__(self, text: Any) -> None:
        self.text = text


class _DummyModels:
    def __init__(self, response_text: Any = "mock-response", failures: list[Exception] | None = None) -> None:
        self.calls: list[dict[str, object]] = []
        self._response_text = response_text
        self._failures = list(failures or [])

    def generate_content(self, **kwargs: object) -> _DummyResponse:
        self.calls.append(kwargs)
        if self._failures:
            raise self._failures.pop(0)
        return _DummyResponse(text=self._response_text)


class _DummyClient:
    def __init__(self, response_text: Any = "mock-response", failures: list[Exception] | None = None) -> None:
        self.models = _DummyModels(response_text=response_text, failures=failures)


class _RateLimited(Exception):
    code = 429


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("GEMINI_MODEL", "GEMINI_MIN_REQUEST_INTERVAL", "GEMINI_MAX_RETRIES", "GEMINI_THINKING_BUDGET"):
        monkeypatch.delenv(name, raising=False)


def test_generate_joins_prompts_and_requests_json(tmp_path: Path) -> None:
    system_prompt_path = tmp_path / "system.md"
    system_prompt_path.write_text("JSONで結果を出力します。", encoding="utf-8")
    client = _DummyClient()
    llm = GeminiLLM(system_prompt=system_prompt_path, client=cast(genai.Client, client))

    result = llm.generate(["Line one", "Line two"])

    assert isinstance(result, _DummyResponse)
    call = client.models.calls[0]
    assert call["model"] == llm.MODEL
    assert call["contents"] == "Line one\nLine two"
    config = call["config"]
    assert isinstance(config, types.GenerateContentConfig)
    assert config.system_instruction == "JSONで結果を出力します。"
    assert config.response_mime_type == "application/json"
    assert config.thinking_config is not None
    assert config.thinking_config.thinking_budget == 0


def test_model_can_be_overridden_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-pro")
    client = _DummyClient()
    llm = GeminiLLM(system_prompt="System", client=cast(genai.Client, client))

    llm.generate(["Prompt"])

    assert client.models.calls[0]["model"] == "gemini-2.5-pro"


def test_generate_returns_repaired_json_when_filter_enabled() -> None:
    client = _DummyClient(response_text='Noise {"sentences": ["一文。",]} after')
    llm = GeminiLLM(system_prompt="System", client=cast(genai.Client, client), filter_json=True)

    assert llm.generate(["Prompt"]) == {"sentences": ["一文。"]}


def test_generate_raises_parse_error_for_non_object() -> None:
    client = _DummyClient(response_text="No JSON here")
    llm = GeminiLLM(system_prompt="System", client=cast(genai.Client, client), filter_json=True)

    with pytest.raises(LLMParseError) as exc_info:
        llm.generate(["Prompt"])

    assert exc_info.value.response_text == "No JSON here"
    assert exc_info.value.prompts == ["Prompt"]


def test_generate_rejects_empty_prompts() -> None:
    llm = GeminiLLM(system_prompt="System", client=cast(genai.Client, _DummyClient()))

    with pytest.raises(ValueError):
        llm.generate([])


def test_rate_limit_is_retried_with_backoff(monkeypatch: pytest.MonkeyPatch) -> None:
    sleeps: list[float] = []
    monkeypatch.setattr(gemini_llm.time, "sleep", sleeps.append)
    client = _DummyClient(response_text='{"ok": true}', failures=[_RateLimited("slow down")])
    llm = GeminiLLM(
        system_prompt="System",
        client=cast(genai.Client, client),
        filter_json=True,
        max_retries=2,
    )

    assert llm.generate(["Prompt"]) == {"ok": True}
    assert len(client.models.calls) == 2
    assert sleeps == [0.1]


def test_rate_limit_without_retries_becomes_quota_error() -> None:
    client = _DummyClient(failures=[_RateLimited("slow down")])
    llm = GeminiLLM(system_prompt="System", client=cast(genai.Client, client), max_retries=0)

    with pytest.raises(LLMQuotaError):
        llm.generate(["Prompt"])


def test_other_errors_propagate() -> None:
    client = _DummyClient(failures=[RuntimeError("boom")])
    llm = GeminiLLM(system_prompt="System", client=cast(genai.Client, client))

    with pytest.raises(RuntimeError, match="boom"):
        llm.generate(["Prompt"])


def test_missing_credentials_raise_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def _raising_client(*args: object, **kwargs: object) -> None:
        raise ValueError("Missing key inputs argument!")

    monkeypatch.setattr(gemini_llm.genai, "Client", _raising_client)

    with pytest.raises(LLMProviderConfigurationError):
        GeminiLLM(system_prompt="System")


def test_api_key_is_passed_to_sdk(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    class _FakeClient:
        def __init__(self, **kwargs: object) -> None:
            captured.update(kwargs)
            self.models = _DummyModels()

    monkeypatch.setattr(gemini_llm.genai, "Client", _FakeClient)

    GeminiLLM(system_prompt="System", api_key="secret")

    assert captured == {"api_key": "secret"}


class _TimedModels:
    def __init__(self) -> None:
        self.started: list[float] = []

    def generate_content(self, **kwargs: object) -> _DummyResponse:
        self.started.append(time.monotonic())
        return _DummyResponse(text='{"ok": true}')


class _TimedClient:
    def __init__(self) -> None:
        self.models = _TimedModels()


def test_min_request_interval_spaces_concurrent_calls() -> None:
    client = _TimedClient()
    llm = GeminiLLM(
        system_prompt="System",
        client=cast(genai.Client, client),
        filter_json=True,
        min_request_interval=0.2,
    )
    service = LLMService([llm])

    async def _run() -> list[Any]:
        return await asyncio.gather(*(service.agenerate([f"prompt {i}"]) for i in range(4)))

    results = asyncio.run(_run())

    assert results == [{"ok": True}] * 4
    started = sorted(client.models.started)
    gaps = [later - earlier for earlier, later in zip(started, started[1:])]
    assert len(gaps) == 3
    assert min(gaps) >= 0.15


def test_first_request_is_not_delayed(monkeypatch: pytest.MonkeyPatch) -> None:
    sleeps: list[float] = []
    monkeypatch.setattr(gemini_llm.time, "sleep", sleeps.append)
    llm = GeminiLLM(
        system_prompt="System",
        client=cast(genai.Client, _DummyClient()),
        min_request_interval=5.0,
    )

    llm.generate(["Prompt"])

    assert sleeps == []
