"""Configuration and result values for event correlation."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Tuple

from .event import CalendarEvent

# Ordered (max_minutes, score) pairs; the first tier that fits wins
TimeTiers = Tuple[Tuple[float, float], ...]


class SelectionRule(enum.Enum):
    """How a qualifying candidate is picked among the scored ones."""

    FIRST = "first"  # first candidate (by start time) over the threshold
    BEST = "best"    # strictly highest score over the threshold, ties keep the first


@dataclass(frozen=True, slots=True)
class SimilarityWeights:
    """Weights, time tiers and decision rule for one calling context."""

    title: float
    location: float
    time: float
    time_tiers: TimeTiers
    threshold: float
    selection: SelectionRule
    strip_punctuation: bool = True

    def __post_init__(self) -> None:
        total = self.title + self.location + self.time
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Similarity weights must sum to 1.0, got {total}")
        if any(w < 0 for w in (self.title, self.location, self.time)):
            raise ValueError("Similarity weights must be non-negative")


@dataclass(frozen=True, slots=True)
class CorrelationPolicy:
    """Everything that distinguishes one correlation mode from another."""

    name: str
    weights: SimilarityWeights
    search_padding: timedelta
    # duplicate checks pad around [start, end]; cancellations only around start
    pad_around_end: bool
    require_end: bool


@dataclass(frozen=True, slots=True)
class CorrelationResult:
    """Outcome of a correlation attempt: no match, or the matched event and its score."""

    event: Optional[CalendarEvent] = None
    score: float = 0.0

    @property
    def matched(self) -> bool:
        return self.event is not None

    @classmethod
    def no_match(cls) -> "CorrelationResult":
        return cls()

__all__ = [
    "TimeTiers",
    "SelectionRule",
    "SimilarityWeights",
    "CorrelationPolicy",
    "CorrelationResult",
]
