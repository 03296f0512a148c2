"""Event extraction from mail messages via the OpenAI chat API.

The model is treated as a black box returning JSON; everything it returns is
validated here before a descriptor is handed to the correlator.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import pytz
from openai import OpenAIError

from ..clients.openai_client import get_openai
from ..exceptions import InvalidDescriptor
from ..models.event import EmailMessage, EventDescriptor, FALLBACK_TIME_ZONE
from ..utils.datetime_utils import parse_instant
from ..utils.llm_parsing import extract_structured_json

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------
_TITLE_RULE = (
    "activity title in UPPER CASE without asterisks; if the message is a padel"
    " court booking the title must be exactly 'Pádel'"
)

_SCHEMA_HINT = (
    "{\n"
    f'  "title": "{_TITLE_RULE}",\n'
    '  "description": "detailed description of the event",\n'
    '  "startDateTime": "2024-01-15T14:00:00",\n'
    '  "endDateTime": "2024-01-15T15:00:00",\n'
    '  "location": "room and venue, if mentioned",\n'
    '  "timeZone": "Europe/Madrid"\n'
    "}"
)

CONFIRMATION_INSTRUCTIONS = (
    "Analyse the email below and extract the information needed to create a"
    " calendar event. Return ONLY a valid JSON object with this structure:\n"
    f"{_SCHEMA_HINT}\n"
    "Rules:\n"
    "1) If no explicit date/time is given, use a reasonable future date.\n"
    "2) If no duration is given, assume 1 hour.\n"
    "3) Dates must be ISO 8601.\n"
    "4) Omit location when none is mentioned.\n"
    "5) Put all relevant details in the description.\n"
    "6) Keep the title concise but descriptive."
)

CANCELLATION_INSTRUCTIONS = (
    "Analyse the CANCELLATION email below and extract the event being"
    " cancelled, not the email itself. Return ONLY a valid JSON object with"
    " this structure (description may be omitted):\n"
    f"{_SCHEMA_HINT}\n"
    "Rules:\n"
    "1) Dates must be ISO 8601.\n"
    "2) Omit location when none is mentioned.\n"
    "3) Keep the title concise but descriptive.\n"
    "4) If no explicit dates are given, infer them from context."
)


def _format_email(email: EmailMessage) -> str:
    return (
        f"Subject: {email.subject}\n"
        f"From: {email.sender}\n"
        f"Date: {email.date}\n"
        f"Body: {email.body}\n"
        f"Snippet: {email.snippet}"
    )


def descriptor_from_payload(
    payload: Dict[str, Any],
    *,
    default_time_zone: str = FALLBACK_TIME_ZONE,
    require_end: bool = True,
) -> EventDescriptor:
    """Build and validate a descriptor from the model's JSON payload.

    Naive timestamps are interpreted in the payload's ``timeZone`` (or
    *default_time_zone*). Raises :class:`InvalidDescriptor` on any missing
    or malformed field.
    """
    title = (payload.get("title") or "").strip()
    time_zone = payload.get("timeZone") or default_time_zone
    raw_start = payload.get("startDateTime")
    raw_end = payload.get("endDateTime")
    if not title or not raw_start:
        raise InvalidDescriptor("Model response is missing title or startDateTime")

    try:
        start = parse_instant(str(raw_start), time_zone)
        end = parse_instant(str(raw_end), time_zone) if raw_end else None
    except (ValueError, pytz.UnknownTimeZoneError) as exc:
        raise InvalidDescriptor(f"Invalid date or time zone in model response: {exc}") from exc

    descriptor = EventDescriptor(
        title=title,
        start=start,
        end=end,
        location=(payload.get("location") or "").strip() or None,
        time_zone=time_zone,
        description=payload.get("description") or None,
    )
    descriptor.validate(require_end=require_end)
    return descriptor


def _request_payload(instructions: str, email: EmailMessage, model: str) -> Dict[str, Any]:
    logger.info("Requesting event details from %s for email: %s", model, email.subject)
    resp = get_openai().chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": instructions},
            {"role": "user", "content": _format_email(email)},
        ],
        response_format={"type": "json_object"},
        temperature=0,
    )
    content: str = resp.choices[0].message.content or ""
    logger.debug("Raw %s response: %s", model, content)
    return extract_structured_json(content)


def _extract(
    instructions: str,
    email: EmailMessage,
    *,
    model: str,
    default_time_zone: str,
    require_end: bool,
) -> Optional[EventDescriptor]:
    try:
        payload = _request_payload(instructions, email, model)
        return descriptor_from_payload(
            payload, default_time_zone=default_time_zone, require_end=require_end
        )
    except OpenAIError as exc:
        logger.error("Extraction request failed for email %s: %s", email.id, exc)
    except InvalidDescriptor as exc:
        logger.error("Rejected extracted event for email %s: %s", email.id, exc)
    except ValueError as exc:
        logger.error("Unparsable model response for email %s: %s", email.id, exc)
    return None


def extract_event_details(
    email: EmailMessage,
    *,
    model: str,
    default_time_zone: str = FALLBACK_TIME_ZONE,
) -> Optional[EventDescriptor]:
    """Return a confirmation descriptor for *email*, or ``None`` if extraction fails."""
    descriptor = _extract(
        CONFIRMATION_INSTRUCTIONS,
        email,
        model=model,
        default_time_zone=default_time_zone,
        require_end=True,
    )
    if descriptor is not None and not descriptor.description:
        descriptor.description = f"Created automatically from email: {descriptor.title}"
    return descriptor


def extract_cancellation_details(
    email: EmailMessage,
    *,
    model: str,
    default_time_zone: str = FALLBACK_TIME_ZONE,
) -> Optional[EventDescriptor]:
    """Return the descriptor of the event *email* cancels, or ``None``."""
    return _extract(
        CANCELLATION_INSTRUCTIONS,
        email,
        model=model,
        default_time_zone=default_time_zone,
        require_end=False,
    )

__all__ = [
    "CONFIRMATION_INSTRUCTIONS",
    "CANCELLATION_INSTRUCTIONS",
    "descriptor_from_payload",
    "extract_event_details",
    "extract_cancellation_details",
]
