"""Correlation of event descriptors against an existing calendar.

Two modes share one algorithm and differ only in their
:class:`CorrelationPolicy`:

* duplicate suppression, run before creating an event, returns the first
  candidate (by start time) scoring above 0.7;
* cancellation resolution, run before deleting an event, returns the best
  candidate scoring above 0.8.

The correlator never mutates the calendar. It queries one time window,
scores the candidates and recommends at most one of them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Protocol, Sequence, Tuple

from ..models.correlation import (
    CorrelationPolicy,
    CorrelationResult,
    SelectionRule,
    SimilarityWeights,
)
from ..models.event import CalendarEvent, EventDescriptor
from .similarity import CANCELLATION_WEIGHTS, DUPLICATE_WEIGHTS, score_event

logger = logging.getLogger(__name__)

Scorer = Callable[[EventDescriptor, CalendarEvent, SimilarityWeights], float]

# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------
DUPLICATE_POLICY = CorrelationPolicy(
    name="duplicate",
    weights=DUPLICATE_WEIGHTS,
    search_padding=timedelta(hours=2),
    pad_around_end=True,
    require_end=True,
)

CANCELLATION_POLICY = CorrelationPolicy(
    name="cancellation",
    weights=CANCELLATION_WEIGHTS,
    search_padding=timedelta(hours=12),
    pad_around_end=False,
    require_end=False,
)


class CalendarWindowSource(Protocol):
    """Anything able to list calendar entries overlapping a time window.

    Implementations raise :class:`~mail_to_calendar.exceptions.UnavailableError`
    on transport or authorisation failures.
    """

    def list_events(self, window_start: datetime, window_end: datetime) -> Sequence[CalendarEvent]:
        ...


def candidate_window(descriptor: EventDescriptor, policy: CorrelationPolicy) -> Tuple[datetime, datetime]:
    """Return the ``(start, end)`` search window for *descriptor* under *policy*."""
    anchors = [descriptor.start]
    if policy.pad_around_end and descriptor.end is not None:
        anchors.append(descriptor.end)
    return min(anchors) - policy.search_padding, max(anchors) + policy.search_padding


def query_candidate_window(
    source: CalendarWindowSource,
    window_start: datetime,
    window_end: datetime,
) -> List[CalendarEvent]:
    """Fetch the candidates overlapping the window, ordered by start time.

    Entries without a usable start are dropped. The sort is stable so the
    source's own ordering breaks ties.
    """
    events = source.list_events(window_start, window_end)
    timed = [event for event in events if event.effective_start is not None]
    return sorted(timed, key=lambda event: event.effective_start)


def select_candidate(
    scored: Iterable[Tuple[CalendarEvent, float]],
    weights: SimilarityWeights,
) -> CorrelationResult:
    """Apply the threshold and selection rule of *weights* to scored candidates."""
    best = CorrelationResult.no_match()
    for event, score in scored:
        if score <= weights.threshold:
            continue
        if weights.selection is SelectionRule.FIRST:
            return CorrelationResult(event=event, score=score)
        if not best.matched or score > best.score:
            best = CorrelationResult(event=event, score=score)
    return best


class EventCorrelator:
    """Match descriptors against calendar entries fetched from *source*."""

    def __init__(self, source: CalendarWindowSource, scorer: Scorer = score_event) -> None:
        self._source = source
        self._scorer = scorer

    def correlate(self, descriptor: EventDescriptor, policy: CorrelationPolicy) -> CorrelationResult:
        """Run one correlation attempt.

        Raises ``InvalidDescriptor`` before any query when the descriptor is
        unusable. Errors from the window source propagate unchanged.
        """
        descriptor.validate(require_end=policy.require_end)

        window_start, window_end = candidate_window(descriptor, policy)
        logger.info(
            "Searching %s candidates for '%s' between %s and %s",
            policy.name,
            descriptor.title,
            window_start.isoformat(),
            window_end.isoformat(),
        )
        candidates = query_candidate_window(self._source, window_start, window_end)

        weights = policy.weights
        # scored lazily so FIRST stops at the first qualifying candidate
        scored = ((event, self._scorer(descriptor, event, weights)) for event in candidates)
        result = select_candidate(scored, weights)

        if result.matched:
            logger.info(
                "Found %s match '%s' for '%s' – similarity %.1f%%",
                policy.name,
                result.event.title,
                descriptor.title,
                result.score * 100,
            )
        else:
            logger.info(
                "No %s match for '%s' among %d candidates",
                policy.name,
                descriptor.title,
                len(candidates),
            )
        return result

    def find_duplicate(self, descriptor: EventDescriptor) -> CorrelationResult:
        """Return the first existing entry similar enough to suppress creation."""
        return self.correlate(descriptor, DUPLICATE_POLICY)

    def find_cancellation_target(self, descriptor: EventDescriptor) -> CorrelationResult:
        """Return the existing entry that best matches a cancellation notice."""
        return self.correlate(descriptor, CANCELLATION_POLICY)

__all__ = [
    "DUPLICATE_POLICY",
    "CANCELLATION_POLICY",
    "CalendarWindowSource",
    "Scorer",
    "candidate_window",
    "query_candidate_window",
    "select_candidate",
    "EventCorrelator",
]
