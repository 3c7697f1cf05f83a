"""Correlation candidates and the ranked suggestion list."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class CorrelationMethod(str, Enum):
    BASIC = "basic-correlation"
    MFCC = "mfcc"
    ONSET = "onset"


class CorrelationCandidate(BaseModel):
    """One offset estimate produced by a correlation method.

    Positive offset: the secondary track's content starts later than the
    primary's. Confidence ranges differ per method and are only comparable
    after weighting.
    """

    offset_seconds: float
    confidence: float
    method: str


class SyncSuggestions(BaseModel):
    """Ranked, deduplicated offsets offered to the user."""

    offsets: list[float] = Field(default_factory=list)
    selected: float | None = None
    best_offset: float | None = None
    best_method: str | None = None
    candidate_counts: dict[str, int] = Field(default_factory=dict)

    def __contains__(self, offset: float) -> bool:
        return any(abs(o - offset) < 1e-9 for o in self.offsets)
