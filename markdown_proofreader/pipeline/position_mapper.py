"""Locate model-returned sentences in the original document.

The segmentation model is asked to copy sentences verbatim, but the
whitespace it returns (line breaks, indentation, double spaces) cannot be
trusted. Matching therefore ignores whitespace on both sides while reporting
positions in raw document columns.
"""

from __future__ import annotations

import re
from bisect import bisect_left

from markdown_proofreader.models import Position, Range

_WHITESPACE = re.compile(r"\s+")


def strip_whitespace(text: str) -> str:
    return _WHITESPACE.sub("", text)


class PositionMapper:
    """Whitespace-insensitive sentence locator over one document.

    The document's non-whitespace characters are indexed once, each with its
    raw line/column, so :meth:`locate` can be called repeatedly with an
    advancing cursor.
    """

    def __init__(self, document_text: str) -> None:
        chars: list[str] = []
        coords: list[tuple[int, int]] = []
        for line_index, line in enumerate(document_text.split("\n")):
            for column_index, char in enumerate(line):
                if not char.isspace():
                    chars.append(char)
                    coords.append((line_index, column_index))
        self._compact = "".join(chars)
        self._coords = coords

    def locate(self, sentence: str, start: Position) -> Range | None:
        """Return the span of ``sentence`` at or after ``start``, or None.

        Candidates are tried one character at a time: after a partial match
        fails, the search resumes at the character following the candidate's
        first character, never further. The earliest match in document order
        therefore wins, and repeated prefixes just before the real sentence
        do not hide it.
        """
        target = strip_whitespace(sentence)
        if not target:
            return None

        first = bisect_left(self._coords, (start.line_index, start.column_index))
        found = self._compact.find(target, first)
        if found == -1:
            return None

        start_line, start_column = self._coords[found]
        end_line, end_column = self._coords[found + len(target) - 1]
        return Range(
            starts_at=Position(start_line, start_column),
            ends_at=Position(end_line, end_column + 1),
        )


def locate_sentence(sentence: str, document_text: str, start: Position) -> Range | None:
    """One-shot form of :meth:`PositionMapper.locate`."""
    return PositionMapper(document_text).locate(sentence, start)
