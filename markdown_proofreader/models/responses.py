"""Pydantic models for the JSON returned by the two LLM tasks.

Validation is lenient about shape details LLMs commonly get wrong (a single
string instead of a list, missing keys) and strict about types that would
otherwise leak into document coordinates.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SegmentationResponse(BaseModel):
    """``{"sentences": [...]}`` as returned by the sentence splitter."""

    model_config = ConfigDict(extra="ignore")

    sentences: List[str] = Field(default_factory=list)

    @field_validator("sentences", mode="before")
    def _require_string_items(cls, value: object) -> List[str]:  # type: ignore[override]
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("sentences must be a list of strings")
        for item in value:
            if not isinstance(item, str):
                raise ValueError(f"sentence entries must be strings, got {type(item).__name__}")
        return value


class CorrectionResponse(BaseModel):
    """``{"error": [...], "correctedSentence": "..."}`` from the corrector."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    error: List[str] = Field(default_factory=list)
    corrected_sentence: str = Field(default="", alias="correctedSentence")

    @field_validator("error", mode="before")
    def _normalise_errors(cls, value: object) -> List[str]:  # type: ignore[override]
        if value is None:
            return []
        if isinstance(value, list):
            return [str(item).strip() for item in value if str(item).strip()]
        # allow a single message as a bare string
        text = str(value).strip()
        return [text] if text else []

    @field_validator("corrected_sentence", mode="before")
    def _coerce_sentence(cls, value: object) -> str:  # type: ignore[override]
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError("correctedSentence must be a string")
        return value

    @classmethod
    def fallback(cls) -> "CorrectionResponse":
        """Value used when the correction call fails or cannot be parsed."""
        return cls(error=[], corrected_sentence="")
