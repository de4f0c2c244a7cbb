"""Markdown proofreader package.

Splits Markdown prose into sentences, locates each sentence in the source
document and streams LLM corrections back in document order.
"""

from __future__ import annotations

from .exceptions import PreconditionError, ProofreaderError, SegmentationError
from .models import CorrectionRecord, Position, PositionedSentence, Range
from .pipeline.orchestrator import proofread

__version__ = "0.1.0"

__all__ = [
    "CorrectionRecord",
    "Position",
    "PositionedSentence",
    "PreconditionError",
    "ProofreaderError",
    "Range",
    "SegmentationError",
    "proofread",
]
