from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from .gemini_llm import GeminiLLM
from .mistral_llm import MistralLLM
from .provider import LLMProvider, ProviderFactory


def _gemini_factory(
    *,
    system_prompt: str | Path,
    api_key: str | None,
    filter_json: bool,
    dotenv_path: str | Path | None,
) -> LLMProvider:
    return GeminiLLM(
        system_prompt=system_prompt,
        api_key=api_key,
        filter_json=filter_json,
        dotenv_path=dotenv_path,
    )


def _mistral_factory(
    *,
    system_prompt: str | Path,
    api_key: str | None,
    filter_json: bool,
    dotenv_path: str | Path | None,
) -> LLMProvider:
    return MistralLLM(
        system_prompt=system_prompt,
        api_key=api_key,
        filter_json=filter_json,
        dotenv_path=dotenv_path,
    )


_PROVIDER_FACTORIES: dict[str, ProviderFactory] = {
    "gemini": _gemini_factory,
    "mistral": _mistral_factory,
}


def available_providers() -> list[str]:
    return list(_PROVIDER_FACTORIES)


def _split_names(value: str | None) -> list[str]:
    if not value:
        return []
    return [chunk.strip().lower() for chunk in value.split(",") if chunk.strip()]


def resolve_provider_order(
    primary: str | None = None,
    fallbacks: Sequence[str] | None = None,
) -> list[str]:
    """Return de-duplicated provider names honouring arguments, then environment."""

    candidates: list[str] = []
    candidates.extend(_split_names(primary) if primary else _split_names(os.environ.get("LLM_PRIMARY")))
    if fallbacks:
        candidates.extend(name.strip().lower() for name in fallbacks if name.strip())
    else:
        candidates.extend(_split_names(os.environ.get("LLM_FALLBACK")))

    if not candidates:
        # Only the first provider receives the caller's key, so default to one
        candidates = [next(iter(_PROVIDER_FACTORIES))]

    order: list[str] = []
    for name in candidates:
        if name in order:
            continue
        if name not in _PROVIDER_FACTORIES:
            raise ValueError(f"Unknown LLM provider '{name}'")
        order.append(name)
    return order


def create_provider_chain(
    *,
    system_prompt: str | Path,
    api_key: str | None = None,
    filter_json: bool = True,
    dotenv_path: str | Path | None = None,
    primary: str | None = None,
    fallbacks: Sequence[str] | None = None,
) -> list[LLMProvider]:
    """Return configured providers honoring environment/priority hints.

    ``api_key`` is handed to the primary provider only; fallback providers
    read their own key from the environment.
    """

    # Load early so LLM_PRIMARY/LLM_FALLBACK from the file are visible
    if dotenv_path is not None:
        load_dotenv(dotenv_path=str(dotenv_path), override=True)

    order = resolve_provider_order(primary, fallbacks)
    return [
        _PROVIDER_FACTORIES[name](
            system_prompt=system_prompt,
            api_key=api_key if position == 0 else None,
            filter_json=filter_json,
            dotenv_path=dotenv_path,
        )
        for position, name in enumerate(order)
    ]
