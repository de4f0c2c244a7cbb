from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Sequence, cast

from dotenv import load_dotenv
from mistralai import Mistral, models

from .json_utils import parse_json_object
from .provider import (
    LLMParseError,
    LLMProvider,
    LLMProviderConfigurationError,
    LLMQuotaError,
    load_system_prompt,
)


class MistralLLM(LLMProvider):
    """Wrapper around the Mistral SDK with system instructions.

    Uses the ``beta.conversations.start`` API shape with a JSON response format.
    """

    name = "mistral"
    MODEL = "mistral-small-latest"

    def __init__(
        self,
        system_prompt: str | Path,
        *,
        api_key: str | None = None,
        client: Mistral | None = None,
        dotenv_path: str | Path | None = None,
        filter_json: bool = False,
        model: str | None = None,
    ) -> None:
        self._system_prompt = load_system_prompt(system_prompt)

        if dotenv_path is not None:
            # Existing environment values take precedence over the file
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        if client is None:
            # The Mistral SDK does not read MISTRAL_API_KEY by itself
            api_key = api_key or os.environ.get("MISTRAL_API_KEY")
            if not api_key:
                raise LLMProviderConfigurationError(
                    "MISTRAL_API_KEY is required but not set. "
                    "Pass an API key or set it in your .env file or environment."
                )
            client = Mistral(api_key=api_key)
        self._client = client
        self._filter_json = filter_json
        self._model = model or os.environ.get("MISTRAL_MODEL", self.MODEL)

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

        inputs = cast(
            models.ConversationInputs,
            [models.MessageInputEntry(role="user", content="\n".join(user_prompts))],
        )
        try:
            response = self._client.beta.conversations.start(
                inputs=inputs,
                instructions=self._system_prompt,
                model=self._model,
                completion_args={
                    "temperature": 0.2,
                    "response_format": {"type": "json_object"},
                },
                tools=[],
            )
        except Exception as exc:
            if getattr(exc, "status_code", None) == 429:
                raise LLMQuotaError("Mistral provider: quota exhausted or rate limited") from exc
            raise

        if not apply_filter:
            return response
        return self._parse_response_json(response, prompts=list(user_prompts))

    def health_check(self) -> bool:
        return True

    def _parse_response_json(self, response: Any, prompts: list[str] | None = None) -> Any:
        """Extract and repair JSON content from a Mistral response.

        Supports, in order of precedence:
        1. ``response.outputs`` entries with a string ``content``
           (``beta.conversations.start``)
        2. ``response.choices[0].message.content`` (chat completion shape)
        """
        text: str | None = None

        outputs = getattr(response, "outputs", None)
        if isinstance(outputs, list):
            for entry in outputs:
                content = entry.get("content") if isinstance(entry, dict) else getattr(entry, "content", None)
                if isinstance(content, str) and content.strip():
                    text = content
                    break

        if text is None and getattr(response, "choices", None):
            message = getattr(response.choices[0], "message", None)
            maybe = getattr(message, "content", None)
            if isinstance(maybe, str):
                text = maybe

        if not isinstance(text, str):
            raise LLMParseError(
                "Response message content is not a string; expected `outputs` or `choices` shapes.",
                response_text=str(response),
                prompts=prompts,
            )

        try:
            return parse_json_object(text)
        except (ValueError, json.JSONDecodeError) as exc:
            raise LLMParseError(str(exc), response_text=text, prompts=prompts) from exc
