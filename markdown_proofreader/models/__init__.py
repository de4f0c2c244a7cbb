"""Public model exports.

Import from here rather than the individual modules:
``from markdown_proofreader.models import Position, CorrectionRecord``.
"""

from __future__ import annotations

from .correction import CorrectionRecord
from .document import Paragraph, Position, PositionedSentence, Range
from .responses import CorrectionResponse, SegmentationResponse

__all__ = [
    "CorrectionRecord",
    "CorrectionResponse",
    "Paragraph",
    "Position",
    "PositionedSentence",
    "Range",
    "SegmentationResponse",
]
