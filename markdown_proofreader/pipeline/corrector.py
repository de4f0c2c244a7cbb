"""Stream per-sentence corrections in document order."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Sequence

from markdown_proofreader.models import CorrectionRecord, CorrectionResponse, PositionedSentence
from markdown_proofreader.prompt import build_correction_prompt

from .batching import DEFAULT_CONCURRENCY, iter_batches, validate_concurrency
from .segmenter import AsyncGenerator

logger = logging.getLogger(__name__)

CONTEXT_RADIUS = 2


def build_context(sentences: Sequence[PositionedSentence], index: int, radius: int = CONTEXT_RADIUS) -> str:
    """Join up to ``radius`` sentences either side of ``index`` (target included)."""
    window = sentences[max(0, index - radius) : min(len(sentences), index + radius + 1)]
    return "\n".join(sentence.text for sentence in window)


def to_record(sentence: PositionedSentence, response: CorrectionResponse) -> CorrectionRecord:
    """Build the record for ``sentence`` from the service's answer.

    Errors are only reported when the service also changed the sentence; a
    flagged but unchanged sentence counts as no correction.
    """
    if response.error and response.corrected_sentence != sentence.text:
        return CorrectionRecord(
            range=sentence.range,
            original_sentence=sentence.text,
            corrected_sentence=response.corrected_sentence,
            errors=list(response.error),
        )
    return CorrectionRecord.unchanged(sentence)


class CorrectionStreamer:
    """Correct sentences concurrently in batches and yield records in input order.

    A batch is fully resolved before any of its records is yielded, and the
    next batch is not started until the consumer asks for more. Stopping
    iteration therefore leaves no request outstanding.
    """

    def __init__(self, service: AsyncGenerator, *, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        self._service = service
        self._concurrency = validate_concurrency(concurrency)

    async def request_correction(self, target: str, context: str) -> CorrectionResponse:
        """Call the correction service, degrading to an empty answer on any failure."""
        prompt = build_correction_prompt(target, context)
        try:
            payload = await self._service.agenerate([prompt], filter_json=True)
            return CorrectionResponse.model_validate(payload)
        except Exception:  # noqa: BLE001 - one bad sentence must not abort the batch
            logger.warning("Correction request failed for %r", target, exc_info=True)
            return CorrectionResponse.fallback()

    async def correct(self, sentences: Sequence[PositionedSentence]) -> AsyncIterator[CorrectionRecord]:
        for batch in iter_batches(sentences, self._concurrency):
            logger.debug("Correcting sentence batch %d (%d sentence(s))", batch.index, len(batch.items))
            records = await asyncio.gather(
                *(self._correct_one(sentences, index) for index, _ in batch.indexed())
            )
            for record in records:
                yield record

    async def _correct_one(self, sentences: Sequence[PositionedSentence], index: int) -> CorrectionRecord:
        sentence = sentences[index]
        response = await self.request_correction(sentence.text, build_context(sentences, index))
        return to_record(sentence, response)
