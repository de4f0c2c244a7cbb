from __future__ import annotations

import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Sequence

from dotenv import load_dotenv
from google import genai
from google.genai import types

try:
    from google.api_core import exceptions as google_exceptions
except Exception:  # pragma: no cover - only occurs without google-api-core installed
    google_exceptions = None

from .json_utils import parse_json_object
from .provider import LLMParseError, LLMProviderConfigurationError, LLMQuotaError, load_system_prompt

logger = logging.getLogger(__name__)


def _read_env_number(var_name: str, default: float, cast: type = float) -> Any:
    try:
        return cast(os.environ.get(var_name, str(default)))
    except ValueError:
        return cast(default)


class GeminiLLM:
    """Wrapper around the Gemini SDK with system instructions.

    The system prompt can be provided either as a string directly or as a Path to a file.
    Responses are requested as JSON (``application/json``).
    """

    name = "gemini"
    MODEL = "gemini-2.5-flash"

    def __init__(
        self,
        system_prompt: str | Path,
        *,
        api_key: str | None = None,
        client: genai.Client | None = None,
        dotenv_path: str | Path | None = None,
        filter_json: bool = False,
        model: str | None = None,
        min_request_interval: float | None = None,
        max_retries: int | None = None,
        thinking_budget: int | None = None,
    ) -> None:
        self._system_prompt = load_system_prompt(system_prompt)

        if dotenv_path is not None:
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        if client is None:
            try:
                client = genai.Client(api_key=api_key) if api_key else genai.Client()
            except ValueError as exc:
                # Raised by the SDK when no key is supplied or set in the environment
                raise LLMProviderConfigurationError(f"Gemini provider: {exc}") from exc
        self._client = client
        self._filter_json = filter_json
        self._model = model or os.environ.get("GEMINI_MODEL", self.MODEL)

        if min_request_interval is None:
            min_request_interval = _read_env_number("GEMINI_MIN_REQUEST_INTERVAL", 0.0)
        self._min_request_interval = max(0.0, min_request_interval)

        if max_retries is None:
            max_retries = _read_env_number("GEMINI_MAX_RETRIES", 0, int)
        self._max_retries = max(0, max_retries)

        # Sentence-level tasks do not benefit from long reasoning
        if thinking_budget is None:
            thinking_budget = _read_env_number("GEMINI_THINKING_BUDGET", 0, int)
        self._thinking_budget = thinking_budget

        # Start time of the latest reserved request slot; 0 so the first request is not delayed
        self._last_request_time = 0.0
        self._rate_lock = threading.Lock()

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    @property
    def model(self) -> str:
        return self._model

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool | None = None,
    ) -> Any:
        if not user_prompts:
            raise ValueError("user_prompts must not be empty.")

        apply_filter = self._filter_json if filter_json is None else filter_json
        contents = "\n".join(user_prompts)
        config = types.GenerateContentConfig(
            system_instruction=self._system_prompt,
            thinking_config=types.ThinkingConfig(thinking_budget=self._thinking_budget),
            response_mime_type="application/json",
            temperature=0.2,
        )

        for attempt in range(self._max_retries + 1):
            self._enforce_rate_limit()
            try:
                response = self._client.models.generate_content(
                    model=self._model,
                    contents=contents,
                    config=config,
                )
            except Exception as exc:
                is_rate_limit = google_exceptions is not None and isinstance(
                    exc, getattr(google_exceptions, "TooManyRequests", ())
                )
                is_quota_exhausted = google_exceptions is not None and isinstance(
                    exc, getattr(google_exceptions, "ResourceExhausted", ())
                )
                # The genai SDK raises its own APIError carrying the HTTP code
                if getattr(exc, "code", None) == 429:
                    is_rate_limit = True

                if is_quota_exhausted:
                    raise LLMQuotaError("Gemini provider: quota exhausted") from exc
                if is_rate_limit:
                    if attempt < self._max_retries:
                        backoff = (self._min_request_interval or 0.1) * 2**attempt
                        logger.info(
                            "Gemini rate limited; retrying in %.2fs (attempt %d/%d)",
                            backoff,
                            attempt + 1,
                            self._max_retries,
                        )
                        time.sleep(backoff)
                        continue
                    raise LLMQuotaError("Gemini provider: rate limited (exhausted retries)") from exc
                raise

            if not apply_filter:
                return response
            return self._parse_response_json(response, prompts=list(user_prompts))

        # Unreachable: the loop either returns or raises
        raise LLMQuotaError("Gemini provider: rate limited (exhausted retries)")

    def health_check(self) -> bool:
        return True

    def _parse_response_json(self, response: Any, prompts: list[str] | None = None) -> Any:
        text = getattr(response, "text", None)
        if not isinstance(text, str):
            raise LLMParseError(
                "Response object does not expose a text attribute for JSON parsing.",
                response_text=str(response),
                prompts=prompts,
            )
        try:
            return parse_json_object(text)
        except (ValueError, json.JSONDecodeError) as exc:
            raise LLMParseError(str(exc), response_text=text, prompts=prompts) from exc

    def _enforce_rate_limit(self) -> None:
        """Wait for this request's slot, spacing request starts by the minimum interval.

        Calls arrive from several worker threads, so each one reserves its slot
        under the lock and sleeps outside it.
        """
        if self._min_request_interval <= 0:
            return

        with self._rate_lock:
            now = time.time()
            slot = max(now, self._last_request_time + self._min_request_interval)
            self._last_request_time = slot

        delay = slot - time.time()
        if delay > 0:
            time.sleep(delay)
