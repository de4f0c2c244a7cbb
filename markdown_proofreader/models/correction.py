"""Correction record emitted once per positioned sentence."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .document import PositionedSentence, Range


@dataclass(frozen=True)
class CorrectionRecord:
    """Outcome of proofreading a single sentence.

    Contract:
    - ``errors`` is empty when the sentence needs no change, in which case
      ``corrected_sentence`` equals ``original_sentence``
    - ``range`` is copied from the sentence that was corrected
    """

    range: Range
    original_sentence: str
    corrected_sentence: str
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @classmethod
    def unchanged(cls, sentence: PositionedSentence) -> "CorrectionRecord":
        return cls(
            range=sentence.range,
            original_sentence=sentence.text,
            corrected_sentence=sentence.text,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the camelCase field names of the JSON interface."""
        return {
            "range": self.range.to_dict(),
            "errors": list(self.errors),
            "originalSentence": self.original_sentence,
            "correctedSentence": self.corrected_sentence,
        }
