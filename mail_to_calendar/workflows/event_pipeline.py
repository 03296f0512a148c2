"""End-to-end pipeline: mail -> extracted descriptor -> correlation -> calendar change."""

from __future__ import annotations

import logging
import time
from collections import Counter
from typing import Any, Optional

from googleapiclient.errors import HttpError

from ..logging_config import logging as _  # noqa: F401  # ensure config applied early
from ..clients.google_client import get_calendar_service, get_gmail_service, reset_google_clients
from ..config import (
    CALENDAR_ID,
    CHECK_INTERVAL_MINUTES,
    DEFAULT_TIME_ZONE,
    GMAIL_CANCELLATION_QUERY,
    GMAIL_MAX_RESULTS,
    GMAIL_QUERY,
    LEDGER_BACKEND,
    LEDGER_DIR,
    OPENAI_EXTRACTION_MODEL,
)
from ..exceptions import InvalidDescriptor, UnavailableError
from ..models.event import EmailMessage
from ..services.calendar import GoogleCalendar, RefreshingWindowSource
from ..services.correlation import EventCorrelator
from ..services.extraction import extract_cancellation_details, extract_event_details
from ..services.ledger import STORAGE_ERRORS, OutcomeAction, OutcomeLedger, get_ledger
from ..services.mailbox import Mailbox

logger = logging.getLogger(__name__)


def process_confirmation(
    email: EmailMessage,
    *,
    correlator: EventCorrelator,
    calendar: GoogleCalendar,
    mailbox: Mailbox,
    ledger: OutcomeLedger,
    model: str = OPENAI_EXTRACTION_MODEL,
    default_time_zone: str = DEFAULT_TIME_ZONE,
) -> Optional[OutcomeAction]:
    """Create a calendar event for a confirmation email unless a duplicate exists.

    The message stays unread when extraction fails or the calendar is
    unavailable, so the next pass retries it.
    """
    logger.info("Processing confirmation: %s (from %s)", email.subject, email.sender)

    descriptor = extract_event_details(email, model=model, default_time_zone=default_time_zone)
    if descriptor is None:
        logger.warning("Could not extract event details from email %s", email.id)
        return None

    try:
        result = correlator.find_duplicate(descriptor)
        if result.matched:
            ledger.record(
                OutcomeAction.SKIPPED,
                reason="similar event already exists",
                score=result.score,
                calendar_event=result.event.to_record(),
                descriptor=descriptor.to_record(),
                source_email=email.to_record(),
            )
            mailbox.mark_as_read(email.id)
            return OutcomeAction.SKIPPED

        created = calendar.insert_event(descriptor)
    except (InvalidDescriptor, UnavailableError) as exc:
        logger.error("Could not create event '%s': %s", descriptor.title, exc)
        ledger.record(
            OutcomeAction.FAILED,
            error=str(exc),
            descriptor=descriptor.to_record(),
            source_email=email.to_record(),
        )
        return OutcomeAction.FAILED

    ledger.record(
        OutcomeAction.CREATED,
        calendar_event=created.to_record(),
        descriptor=descriptor.to_record(),
        source_email=email.to_record(),
    )
    mailbox.mark_as_read(email.id)
    return OutcomeAction.CREATED


def process_cancellation(
    email: EmailMessage,
    *,
    correlator: EventCorrelator,
    calendar: GoogleCalendar,
    mailbox: Mailbox,
    ledger: OutcomeLedger,
    model: str = OPENAI_EXTRACTION_MODEL,
    default_time_zone: str = DEFAULT_TIME_ZONE,
) -> OutcomeAction:
    """Delete the calendar event a cancellation email refers to.

    Every handled message is marked as read except when the calendar was
    unavailable, in which case it is left for the next pass.
    """
    logger.info("Processing cancellation: %s (from %s)", email.subject, email.sender)

    descriptor = extract_cancellation_details(email, model=model, default_time_zone=default_time_zone)
    if descriptor is None:
        ledger.record(
            OutcomeAction.CANCELLATION_ERROR,
            error="could not extract cancellation details",
            source_email=email.to_record(),
        )
        mailbox.mark_as_read(email.id)
        return OutcomeAction.CANCELLATION_ERROR

    try:
        result = correlator.find_cancellation_target(descriptor)
    except (InvalidDescriptor, UnavailableError) as exc:
        logger.error("Could not resolve cancellation '%s': %s", descriptor.title, exc)
        ledger.record(
            OutcomeAction.CANCELLATION_ERROR,
            error=str(exc),
            descriptor=descriptor.to_record(),
            source_email=email.to_record(),
        )
        if not isinstance(exc, UnavailableError):
            mailbox.mark_as_read(email.id)
        return OutcomeAction.CANCELLATION_ERROR

    if not result.matched:
        logger.warning("No calendar event matches cancellation '%s'", descriptor.title)
        ledger.record(
            OutcomeAction.CANCELLATION_NOT_FOUND,
            descriptor=descriptor.to_record(),
            source_email=email.to_record(),
        )
        mailbox.mark_as_read(email.id)
        return OutcomeAction.CANCELLATION_NOT_FOUND

    try:
        calendar.delete_event(result.event)
    except UnavailableError as exc:
        logger.error("Could not delete event '%s': %s", result.event.title, exc)
        ledger.record(
            OutcomeAction.DELETION_FAILED,
            error=str(exc),
            calendar_event=result.event.to_record(),
            descriptor=descriptor.to_record(),
            source_email=email.to_record(),
        )
        return OutcomeAction.DELETION_FAILED

    ledger.record(
        OutcomeAction.DELETED,
        score=result.score,
        calendar_event=result.event.to_record(),
        descriptor=descriptor.to_record(),
        source_email=email.to_record(),
    )
    mailbox.mark_as_read(email.id)
    return OutcomeAction.DELETED


def _calendar() -> GoogleCalendar:
    return GoogleCalendar(get_calendar_service(), CALENDAR_ID)


def run() -> Counter:
    """Execute one pass over confirmation and cancellation emails."""
    logger.info("Starting mail to calendar pass")

    mailbox = Mailbox(get_gmail_service())
    calendar = _calendar()
    correlator = EventCorrelator(RefreshingWindowSource(_calendar, reset_google_clients))
    ledger = get_ledger(LEDGER_BACKEND, LEDGER_DIR)
    deps: dict[str, Any] = {
        "correlator": correlator,
        "calendar": calendar,
        "mailbox": mailbox,
        "ledger": ledger,
        "model": OPENAI_EXTRACTION_MODEL,
        "default_time_zone": DEFAULT_TIME_ZONE,
    }

    outcomes: Counter = Counter()
    for query, handler, label in (
        (GMAIL_QUERY, process_confirmation, "confirmation"),
        (GMAIL_CANCELLATION_QUERY, process_cancellation, "cancellation"),
    ):
        if not query:
            logger.warning("No Gmail query configured for %s emails – skipping", label)
            continue

        emails = mailbox.fetch(query, GMAIL_MAX_RESULTS)
        if not emails:
            logger.info("No new %s emails", label)
            continue

        for email in emails:
            try:
                action = handler(email, **deps)
            except (HttpError, UnavailableError) as exc:
                logger.error("Error processing %s email %s: %s", label, email.id, exc)
                continue
            except STORAGE_ERRORS as exc:
                logger.error("Could not record outcome for %s email %s: %s", label, email.id, exc)
                continue
            if action is not None:
                outcomes[action] += 1

    _log_stats(outcomes)
    return outcomes


def run_forever(interval_minutes: int = CHECK_INTERVAL_MINUTES) -> None:
    """Run a pass every *interval_minutes* until interrupted."""
    logger.info("Checking emails every %d minute(s)", interval_minutes)
    while True:
        try:
            run()
        except (HttpError, UnavailableError) as exc:
            logger.error("Pass aborted: %s", exc)
        time.sleep(interval_minutes * 60)


def _log_stats(outcomes: Counter) -> None:
    logger.info("=== Mail to Calendar Statistics ===")
    logger.info("Events created: %d", outcomes[OutcomeAction.CREATED])
    logger.info("Duplicates skipped: %d", outcomes[OutcomeAction.SKIPPED])
    logger.info("Creations failed: %d", outcomes[OutcomeAction.FAILED])
    logger.info("Events deleted: %d", outcomes[OutcomeAction.DELETED])
    logger.info("Cancellations not found: %d", outcomes[OutcomeAction.CANCELLATION_NOT_FOUND])
    logger.info("Deletions failed: %d", outcomes[OutcomeAction.DELETION_FAILED])
    logger.info("Cancellation errors: %d", outcomes[OutcomeAction.CANCELLATION_ERROR])
    logger.info("===================================")

__all__ = ["process_confirmation", "process_cancellation", "run", "run_forever"]
