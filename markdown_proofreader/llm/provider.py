from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Callable, Protocol, Sequence

ProviderReporter = Callable[[str, "ProviderStatus", Exception | None], None]


class ProviderStatus(str, Enum):
    """Status used when reporting the outcome of a provider call."""

    SUCCESS = "success"
    QUOTA = "quota"
    FAILURE = "failure"


class LLMProviderError(Exception):
    """Generic failure raised by an LLM provider."""


class LLMQuotaError(LLMProviderError):
    """Raised when a provider reports quota or rate-limit exhaustion."""


class LLMProviderConfigurationError(LLMProviderError):
    """Raised when a provider cannot be configured or authenticated."""


class LLMParseError(LLMProviderError):
    """Raised when an LLM response cannot be parsed as JSON.

    Keeps the raw response text and the prompts so a failed sentence can be
    inspected in the logs.
    """

    _MAX_SHOWN = 2000

    def __init__(
        self,
        message: str,
        *,
        response_text: str | None = None,
        prompts: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.response_text = response_text
        self.prompts = prompts

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.response_text is not None:
            parts.append(f"\n--- LLM Response ---\n{self._clip(self.response_text)}")
        if self.prompts:
            parts.append(f"\n--- Input Prompts ---\n{self._clip(chr(10).join(self.prompts))}")
        return "".join(parts)

    @classmethod
    def _clip(cls, text: str) -> str:
        if len(text) > cls._MAX_SHOWN:
            return text[: cls._MAX_SHOWN] + "... [truncated]"
        return text


class LLMProvider(Protocol):
    """Shared contract for LLM providers."""

    name: str

    @property
    def system_prompt(self) -> str: ...

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool = False,
    ) -> Any:
        """Produce a single response for the provided prompts."""
        ...

    def health_check(self) -> bool:
        """Optional quick check that returns True when the provider is ready."""
        ...


class ProviderFactory(Protocol):
    def __call__(
        self,
        *,
        system_prompt: str | Path,
        api_key: str | None,
        filter_json: bool,
        dotenv_path: str | Path | None,
    ) -> LLMProvider: ...


def load_system_prompt(system_prompt: str | Path) -> str:
    """Return prompt text, reading it from disk when given an existing file path."""

    if isinstance(system_prompt, Path):
        return system_prompt.read_text(encoding="utf-8")
    if not isinstance(system_prompt, str):
        raise TypeError(f"system_prompt must be str or Path, got {type(system_prompt)}")
    # Short single-line strings may be paths
    if "\n" not in system_prompt and len(system_prompt) < 500:
        try:
            prompt_path = Path(system_prompt)
            if prompt_path.is_file():
                return prompt_path.read_text(encoding="utf-8")
        except (OSError, ValueError):
            pass
    return system_prompt
