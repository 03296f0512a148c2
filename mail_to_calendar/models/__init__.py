"""Domain models used across the project."""

from .event import CalendarEvent, EmailMessage, EventDescriptor, FALLBACK_TIME_ZONE  # noqa: F401
from .correlation import (  # noqa: F401
    CorrelationPolicy,
    CorrelationResult,
    SelectionRule,
    SimilarityWeights,
    TimeTiers,
)

__all__ = [
    "CalendarEvent",
    "EmailMessage",
    "EventDescriptor",
    "FALLBACK_TIME_ZONE",
    "CorrelationPolicy",
    "CorrelationResult",
    "SelectionRule",
    "SimilarityWeights",
    "TimeTiers",
]
