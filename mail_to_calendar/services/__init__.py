"""Service layer modules grouping business logic by concern.

This module provides convenience re-exports so that callers can simply do
for example `from mail_to_calendar.services import EventCorrelator` without
having to know which underlying module provides the symbol.
"""

from .similarity import (  # noqa: F401
    CANCELLATION_WEIGHTS,
    DUPLICATE_WEIGHTS,
    lexical_similarity,
    score_event,
    temporal_similarity,
)
from .correlation import (  # noqa: F401
    CANCELLATION_POLICY,
    DUPLICATE_POLICY,
    CalendarWindowSource,
    EventCorrelator,
    candidate_window,
    query_candidate_window,
)
from .calendar import GoogleCalendar, RefreshingWindowSource  # noqa: F401
from .extraction import extract_cancellation_details, extract_event_details  # noqa: F401
from .ledger import JsonFileLedger, MongoLedger, OutcomeAction, get_ledger  # noqa: F401
from .mailbox import Mailbox  # noqa: F401

__all__ = [
    "CANCELLATION_WEIGHTS",
    "DUPLICATE_WEIGHTS",
    "lexical_similarity",
    "score_event",
    "temporal_similarity",
    "CANCELLATION_POLICY",
    "DUPLICATE_POLICY",
    "CalendarWindowSource",
    "EventCorrelator",
    "candidate_window",
    "query_candidate_window",
    "GoogleCalendar",
    "RefreshingWindowSource",
    "extract_cancellation_details",
    "extract_event_details",
    "JsonFileLedger",
    "MongoLedger",
    "OutcomeAction",
    "get_ledger",
    "Mailbox",
]
