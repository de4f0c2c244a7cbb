"""Document coordinate types shared by the pipeline stages.

All coordinates are zero-based and measured in raw characters of the
original document (whitespace included).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, order=True)
class Position:
    """A line/column location in the original document.

    Attributes:
        line_index: Zero-based line number
        column_index: Zero-based column within the line
    """

    line_index: int
    column_index: int

    def __post_init__(self) -> None:
        if self.line_index < 0 or self.column_index < 0:
            raise ValueError(
                f"Position must be non-negative, got ({self.line_index}, {self.column_index})"
            )

    def to_dict(self) -> dict[str, int]:
        return {"lineIndex": self.line_index, "columnIndex": self.column_index}


@dataclass(frozen=True)
class Range:
    """Half-open span: ``ends_at`` points one past the last matched character."""

    starts_at: Position
    ends_at: Position

    def to_dict(self) -> dict[str, Any]:
        return {"startsAt": self.starts_at.to_dict(), "endsAt": self.ends_at.to_dict()}


@dataclass(frozen=True)
class Paragraph:
    """A heading-delimited chunk of the document.

    Attributes:
        text: Paragraph text with surrounding whitespace trimmed
        start_line: Line index where the chunk begins (its heading line, if any)
    """

    text: str
    start_line: int


@dataclass(frozen=True)
class PositionedSentence:
    """A sentence returned by the segmentation service plus its located span."""

    range: Range
    text: str
