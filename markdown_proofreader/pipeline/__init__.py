"""Sentence segmentation, position mapping and streaming correction.

Stages, leaf first: :mod:`.paragraphs` -> :mod:`.position_mapper` ->
:mod:`.segmenter` -> :mod:`.corrector`, composed by :mod:`.orchestrator`.
"""

from __future__ import annotations

from .corrector import CorrectionStreamer, DEFAULT_CONCURRENCY, build_context
from .orchestrator import Orchestrator, proofread
from .paragraphs import HEADING_MARKER, split_paragraphs
from .position_mapper import PositionMapper, locate_sentence
from .segmenter import SentenceSegmenter

__all__ = [
    "CorrectionStreamer",
    "DEFAULT_CONCURRENCY",
    "HEADING_MARKER",
    "Orchestrator",
    "PositionMapper",
    "SentenceSegmenter",
    "build_context",
    "locate_sentence",
    "proofread",
    "split_paragraphs",
]
