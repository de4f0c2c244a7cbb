"""Compose paragraph splitting, segmentation and correction into one run."""

from __future__ import annotations

import logging
from typing import AsyncIterator

from markdown_proofreader.config import ProofreaderConfiguration
from markdown_proofreader.exceptions import PreconditionError
from markdown_proofreader.llm import LLMService, create_provider_chain
from markdown_proofreader.llm.provider import ProviderReporter
from markdown_proofreader.models import CorrectionRecord
from markdown_proofreader.prompt import system_prompt

from .batching import DEFAULT_CONCURRENCY
from .corrector import CorrectionStreamer
from .paragraphs import split_paragraphs
from .segmenter import AsyncGenerator, SentenceSegmenter

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs the full pipeline over one document against one service."""

    def __init__(self, service: AsyncGenerator, *, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        self.segmenter = SentenceSegmenter(service, concurrency=concurrency)
        self.streamer = CorrectionStreamer(service, concurrency=concurrency)

    async def run(self, text: str) -> AsyncIterator[CorrectionRecord]:
        """Yield one record per located sentence, in document order.

        The whole document is segmented before the first correction request,
        since context windows cross paragraph boundaries.
        """
        paragraphs = split_paragraphs(text)
        sentences = await self.segmenter.segment(text, paragraphs)
        logger.info("Segmented %d paragraph(s) into %d sentence(s)", len(paragraphs), len(sentences))

        async for record in self.streamer.correct(sentences):
            yield record


def create_service(
    api_key: str,
    config: ProofreaderConfiguration | None = None,
    *,
    reporter: ProviderReporter | None = None,
) -> LLMService:
    """Build the provider chain for a run; ``api_key`` goes to the primary provider."""
    config = config or ProofreaderConfiguration()
    providers = create_provider_chain(
        system_prompt=system_prompt(),
        api_key=api_key,
        filter_json=True,
        dotenv_path=config.dotenv_path,
        primary=config.primary_provider,
        fallbacks=config.fallback_providers or None,
    )
    return LLMService(providers, reporter=reporter)


def proofread(
    text: str,
    api_key: str | None,
    *,
    config: ProofreaderConfiguration | None = None,
    service: AsyncGenerator | None = None,
) -> AsyncIterator[CorrectionRecord]:
    """Entry point: return a lazy stream of corrections for ``text``.

    Preconditions are checked immediately, before anything is sent to a
    provider.

    Raises:
        PreconditionError: If no credential is supplied
    """
    if not api_key or not api_key.strip():
        raise PreconditionError("An API key is required to proofread.")

    config = config or ProofreaderConfiguration()
    if service is None:
        service = create_service(api_key, config)
    return Orchestrator(service, concurrency=config.concurrency).run(text)
