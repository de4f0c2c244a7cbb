"""Errors raised by the proofreading pipeline itself.

Provider failures live in :mod:`markdown_proofreader.llm.provider`.
"""

from __future__ import annotations


class ProofreaderError(Exception):
    """Base class for proofreading pipeline failures."""


class PreconditionError(ProofreaderError):
    """Raised before the pipeline starts when its inputs are unusable.

    Covers a missing credential and an empty selection. No external call
    has been made when this is raised.
    """


class SegmentationError(ProofreaderError):
    """Raised when a paragraph could not be split into sentences.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, *, paragraph_index: int, start_line: int) -> None:
        super().__init__(message)
        self.paragraph_index = paragraph_index
        self.start_line = start_line

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base} (paragraph {self.paragraph_index}, line {self.start_line})"
