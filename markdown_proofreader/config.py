"""Runtime configuration for a proofreading run.

Values come from explicit arguments first, then environment variables
(optionally loaded from a ``.env`` file):

    PROOFREADER_CONCURRENCY   Max concurrent LLM requests per batch (default: 10)
    PROOFREADER_API_KEY       Credential for the primary provider
    LLM_PRIMARY               Primary LLM provider (default: gemini)
    LLM_FALLBACK              Fallback providers (comma-separated)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .pipeline.batching import DEFAULT_CONCURRENCY, validate_concurrency

API_KEY_ENV = "PROOFREADER_API_KEY"
CONCURRENCY_ENV = "PROOFREADER_CONCURRENCY"


@dataclass
class ProofreaderConfiguration:
    """Settings shared by the CLI and :func:`markdown_proofreader.proofread`."""

    concurrency: int = DEFAULT_CONCURRENCY
    primary_provider: str | None = None
    fallback_providers: list[str] = field(default_factory=list)
    dotenv_path: Path | None = None

    def __post_init__(self) -> None:
        validate_concurrency(self.concurrency)

    @classmethod
    def from_env(
        cls,
        *,
        dotenv_path: str | Path | None = None,
        concurrency: int | None = None,
        primary_provider: str | None = None,
    ) -> "ProofreaderConfiguration":
        if dotenv_path is not None:
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        if concurrency is None:
            raw = os.environ.get(CONCURRENCY_ENV, "").strip()
            try:
                concurrency = int(raw) if raw else DEFAULT_CONCURRENCY
            except ValueError as exc:
                raise ValueError(f"{CONCURRENCY_ENV} must be an integer, got {raw!r}") from exc

        fallbacks = [
            name.strip().lower()
            for name in os.environ.get("LLM_FALLBACK", "").split(",")
            if name.strip()
        ]
        return cls(
            concurrency=concurrency,
            primary_provider=primary_provider or os.environ.get("LLM_PRIMARY") or None,
            fallback_providers=fallbacks,
            dotenv_path=Path(dotenv_path) if dotenv_path is not None else None,
        )


def resolve_api_key(explicit: str | None = None) -> str | None:
    """Return the explicit key, else ``PROOFREADER_API_KEY``, else None."""
    if explicit and explicit.strip():
        return explicit.strip()
    value = os.environ.get(API_KEY_ENV, "").strip()
    return value or None
