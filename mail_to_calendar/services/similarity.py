"""Similarity scoring between an incoming descriptor and a calendar entry.

Three factors are combined: title wording, location wording and start-time
proximity. Each calling context supplies its own :class:`SimilarityWeights`.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from ..models.correlation import SelectionRule, SimilarityWeights, TimeTiers
from ..models.event import CalendarEvent, EventDescriptor
from ..utils.text_cleaning import normalize_text

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------
CREATION_TIME_TIERS: TimeTiers = ((30, 1.0), (60, 0.8), (120, 0.5))
CANCELLATION_TIME_TIERS: TimeTiers = ((15, 1.0), (60, 0.8), (180, 0.5))

DUPLICATE_WEIGHTS = SimilarityWeights(
    title=0.4,
    location=0.2,
    time=0.4,
    time_tiers=CREATION_TIME_TIERS,
    threshold=0.7,
    selection=SelectionRule.FIRST,
)

CANCELLATION_WEIGHTS = SimilarityWeights(
    title=0.5,
    location=0.2,
    time=0.3,
    time_tiers=CANCELLATION_TIME_TIERS,
    threshold=0.8,
    selection=SelectionRule.BEST,
)


def lexical_similarity(a: str, b: str) -> float:
    """Word-overlap similarity in ``[0, 1]``.

    A word of *a* is common when some word of *b* contains it or is
    contained in it. Short words therefore match longer ones ("de" matches
    "padel"); thresholds downstream are calibrated on that behaviour.
    """
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    words_a = a.lower().split()
    words_b = b.lower().split()
    longest = max(len(words_a), len(words_b))
    if longest == 0:
        return 0.0

    common = [w for w in words_a if any(w in other or other in w for other in words_b)]
    return len(common) / longest


def temporal_similarity(delta_minutes: float, tiers: TimeTiers) -> float:
    """Map an absolute time difference to the score of the first tier that fits."""
    delta = abs(delta_minutes)
    for max_minutes, score in tiers:
        if delta <= max_minutes:
            return score
    return 0.0


def minutes_between(descriptor: EventDescriptor, candidate: CalendarEvent) -> float | None:
    """Absolute minutes between the descriptor start and the candidate's effective start."""
    candidate_start = candidate.effective_start
    if descriptor.start is None or candidate_start is None:
        return None
    delta: timedelta = descriptor.start - candidate_start
    return abs(delta.total_seconds()) / 60


def score_event(
    descriptor: EventDescriptor,
    candidate: CalendarEvent,
    weights: SimilarityWeights,
) -> float:
    """Return the weighted similarity of *descriptor* and *candidate* in ``[0, 1]``.

    Only the weights actually applied are used to normalise the sum: when
    exactly one side has a location that factor is left out entirely, while
    two missing locations count as full agreement.
    """
    strip = weights.strip_punctuation
    total = 0.0
    counted = 0.0

    # Title
    title_score = lexical_similarity(
        normalize_text(descriptor.title, strip_punctuation=strip),
        normalize_text(candidate.title or "", strip_punctuation=strip),
    )
    total += title_score * weights.title
    counted += weights.title

    # Location
    own_location = normalize_text(descriptor.location, strip_punctuation=strip)
    other_location = normalize_text(candidate.location, strip_punctuation=strip)
    if descriptor.location and candidate.location:
        total += lexical_similarity(own_location, other_location) * weights.location
        counted += weights.location
    elif not descriptor.location and not candidate.location:
        total += weights.location
        counted += weights.location

    # Time
    delta = minutes_between(descriptor, candidate)
    time_score = temporal_similarity(delta, weights.time_tiers) if delta is not None else 0.0
    total += time_score * weights.time
    counted += weights.time

    score = total / counted if counted > 0 else 0.0
    logger.debug(
        "Scored '%s' against '%s': title=%.2f time=%.2f -> %.3f",
        descriptor.title,
        candidate.title,
        title_score,
        time_score,
        score,
    )
    return score

__all__ = [
    "CREATION_TIME_TIERS",
    "CANCELLATION_TIME_TIERS",
    "DUPLICATE_WEIGHTS",
    "CANCELLATION_WEIGHTS",
    "lexical_similarity",
    "temporal_similarity",
    "minutes_between",
    "score_event",
]
