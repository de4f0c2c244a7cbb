"""Turn paragraphs into positioned sentences via the segmentation LLM."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol, Sequence

from pydantic import ValidationError

from markdown_proofreader.exceptions import SegmentationError
from markdown_proofreader.models import Paragraph, Position, PositionedSentence, SegmentationResponse
from markdown_proofreader.prompt import build_segmentation_prompt

from .batching import DEFAULT_CONCURRENCY, iter_batches, validate_concurrency
from .paragraphs import HEADING_MARKER
from .position_mapper import PositionMapper

logger = logging.getLogger(__name__)


class AsyncGenerator(Protocol):
    """The slice of :class:`~markdown_proofreader.llm.LLMService` the pipeline uses."""

    async def agenerate(self, user_prompts: Sequence[str], *, filter_json: bool = False) -> Any: ...


def search_start(paragraph: Paragraph) -> Position:
    """Cursor from which a paragraph's sentences are searched.

    A paragraph opened by a heading is searched from the line after it.
    """
    # Only skip a heading line; a heading-less first paragraph may start on line 0
    if paragraph.text.startswith(HEADING_MARKER):
        return Position(paragraph.start_line + 1, 0)
    return Position(paragraph.start_line, 0)


def position_sentences(
    sentences: Sequence[str],
    mapper: PositionMapper,
    start: Position,
) -> list[PositionedSentence]:
    """Locate each sentence in turn, advancing the cursor past every match.

    Sentences that cannot be found are logged and skipped; the cursor stays
    where it was so the next sentence is searched from the same point.
    """
    located: list[PositionedSentence] = []
    cursor = start
    for sentence in sentences:
        span = mapper.locate(sentence, cursor)
        if span is None:
            logger.warning("Failed to match sentence: %r", sentence)
            continue
        located.append(PositionedSentence(range=span, text=sentence))
        cursor = span.ends_at
    return located


class SentenceSegmenter:
    """Segment paragraphs concurrently, in batches of ``concurrency``."""

    def __init__(self, service: AsyncGenerator, *, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        self._service = service
        self._concurrency = validate_concurrency(concurrency)

    async def split_sentences(self, paragraph_text: str) -> list[str]:
        """Ask the segmentation service for the sentences of one paragraph."""
        if not paragraph_text.strip():
            return []
        prompt = build_segmentation_prompt(paragraph_text)
        payload = await self._service.agenerate([prompt], filter_json=True)
        return SegmentationResponse.model_validate(payload).sentences

    async def segment(
        self,
        document_text: str,
        paragraphs: Sequence[Paragraph],
    ) -> list[PositionedSentence]:
        """Return every paragraph's sentences, flattened in document order.

        Raises:
            SegmentationError: If the service fails for any paragraph
        """
        mapper = PositionMapper(document_text)
        results: list[tuple[int, list[PositionedSentence]]] = []

        for batch in iter_batches(paragraphs, self._concurrency):
            logger.debug(
                "Segmenting paragraph batch %d (%d paragraph(s))", batch.index, len(batch.items)
            )
            batch_results = await asyncio.gather(
                *(self._segment_one(index, paragraph, mapper) for index, paragraph in batch.indexed())
            )
            results.extend(batch_results)

        results.sort(key=lambda item: item[0])
        return [sentence for _, sentences in results for sentence in sentences]

    async def _segment_one(
        self,
        index: int,
        paragraph: Paragraph,
        mapper: PositionMapper,
    ) -> tuple[int, list[PositionedSentence]]:
        try:
            sentences = await self.split_sentences(paragraph.text)
        except ValidationError as exc:
            raise SegmentationError(
                f"Segmentation response has an unexpected shape: {exc}",
                paragraph_index=index,
                start_line=paragraph.start_line,
            ) from exc
        except Exception as exc:
            raise SegmentationError(
                f"Segmentation request failed: {exc}",
                paragraph_index=index,
                start_line=paragraph.start_line,
            ) from exc
        return index, position_sentences(sentences, mapper, search_start(paragraph))
