"""Consumer-side state for one proofreading run.

The pipeline reports positions relative to the text it was given. An editor
usually proofreads a selection, so :class:`Selection` maps those positions
back into the whole document, and :class:`ReviewSession` owns everything a
UI needs to display and apply the results: findings keyed by a stable id,
progress, and the diff shown for each finding.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .diff import format_diff_markdown
from .exceptions import PreconditionError
from .models import CorrectionRecord, Position, Range

logger = logging.getLogger(__name__)


def _line_offsets(text: str) -> list[int]:
    offsets = [0]
    for line in text.split("\n")[:-1]:
        offsets.append(offsets[-1] + len(line) + 1)
    return offsets


def position_to_offset(text: str, position: Position) -> int:
    """Convert a line/column position into a character offset, clamped to ``text``."""
    offsets = _line_offsets(text)
    if position.line_index >= len(offsets):
        return len(text)
    line_start = offsets[position.line_index]
    line_end = offsets[position.line_index + 1] - 1 if position.line_index + 1 < len(offsets) else len(text)
    return min(line_start + position.column_index, line_end)


@dataclass(frozen=True)
class Selection:
    """The part of a document being proofread, as a half-open range."""

    start: Position
    end: Position

    @classmethod
    def full(cls, text: str) -> "Selection":
        lines = text.split("\n")
        return cls(Position(0, 0), Position(len(lines) - 1, len(lines[-1])))

    @classmethod
    def from_lines(cls, text: str, first_line: int, last_line: int) -> "Selection":
        """Select whole lines ``first_line``..``last_line`` (zero-based, inclusive)."""
        lines = text.split("\n")
        if first_line < 0 or first_line > last_line:
            raise PreconditionError(f"Invalid line range {first_line}..{last_line}")
        if first_line >= len(lines):
            raise PreconditionError(
                f"Line range starts after the end of the document ({len(lines)} line(s))"
            )
        last_line = min(last_line, len(lines) - 1)
        return cls(Position(first_line, 0), Position(last_line, len(lines[last_line])))

    @property
    def is_empty(self) -> bool:
        return self.start >= self.end

    def extract(self, text: str) -> str:
        return text[position_to_offset(text, self.start) : position_to_offset(text, self.end)]

    def to_document_position(self, position: Position) -> Position:
        # Only the first selected line is shifted horizontally
        column = position.column_index
        if position.line_index == 0:
            column += self.start.column_index
        return Position(position.line_index + self.start.line_index, column)

    def to_document_range(self, span: Range) -> Range:
        return Range(
            starts_at=self.to_document_position(span.starts_at),
            ends_at=self.to_document_position(span.ends_at),
        )


@dataclass
class Finding:
    """A correction with errors, placed in document coordinates."""

    id: int
    range: Range
    errors: list[str]
    original_sentence: str
    corrected_sentence: str

    @property
    def message(self) -> str:
        return "\n".join(self.errors)


def apply_corrections(text: str, findings: Iterable[Finding]) -> str:
    """Replace each finding's span with its corrected sentence.

    Spans are rewritten from the end of the document backwards so earlier
    offsets stay valid. Overlapping spans are skipped after the first.
    """
    ordered = sorted(findings, key=lambda f: f.range.starts_at, reverse=True)
    result = text
    boundary = len(text) + 1
    for finding in ordered:
        start = position_to_offset(text, finding.range.starts_at)
        end = position_to_offset(text, finding.range.ends_at)
        if end > boundary:
            logger.warning("Skipping overlapping correction %d", finding.id)
            continue
        result = result[:start] + finding.corrected_sentence + result[end:]
        boundary = start
    return result


@dataclass
class ReviewSession:
    """Display state for one run over ``selection``.

    Feed it every streamed :class:`CorrectionRecord` through :meth:`record`.
    """

    selection: Selection
    findings: dict[int, Finding] = field(default_factory=dict)
    records_seen: int = 0
    last_processed_line: int | None = None

    @classmethod
    def for_text(cls, text: str, selection: Selection | None = None) -> "ReviewSession":
        """Start a session, refusing an empty selection."""
        selection = selection or Selection.full(text)
        if selection.is_empty or not selection.extract(text).strip():
            raise PreconditionError("No text selected.")
        return cls(selection=selection)

    def record(self, correction: CorrectionRecord) -> Finding | None:
        """Register one streamed record; return its finding if it has errors."""
        finding_id = self.records_seen
        self.records_seen += 1

        span = self.selection.to_document_range(correction.range)
        if self.last_processed_line is None or span.ends_at.line_index > self.last_processed_line:
            self.last_processed_line = span.ends_at.line_index

        if not correction.errors:
            return None
        finding = Finding(
            id=finding_id,
            range=span,
            errors=list(correction.errors),
            original_sentence=correction.original_sentence,
            corrected_sentence=correction.corrected_sentence,
        )
        self.findings[finding_id] = finding
        return finding

    def pending(self) -> list[Finding]:
        return sorted(self.findings.values(), key=lambda f: f.id)

    def hover(self, finding_id: int, text: str | None = None) -> str:
        """Markdown card for a finding, diffing the document text when given."""
        finding = self.findings[finding_id]
        original = finding.original_sentence
        if text is not None:
            original = text[
                position_to_offset(text, finding.range.starts_at) : position_to_offset(text, finding.range.ends_at)
            ]
        return "\n\n**提案内容:**\n" + format_diff_markdown(original, finding.corrected_sentence)

    def dismiss(self, finding_id: int) -> None:
        self.findings.pop(finding_id, None)

    def apply(self, text: str, finding_ids: Sequence[int] | None = None) -> str:
        """Apply the chosen findings (all pending by default) and retire them."""
        ids = list(self.findings) if finding_ids is None else list(finding_ids)
        chosen = [self.findings[i] for i in ids if i in self.findings]
        updated = apply_corrections(text, chosen)
        for finding in chosen:
            self.dismiss(finding.id)
        return updated
