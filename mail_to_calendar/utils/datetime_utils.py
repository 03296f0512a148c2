"""Utility functions for working with dates and times."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import pytz

__all__ = [
    "get_current_timestamp",
    "parse_instant",
    "localize",
]


def get_current_timestamp() -> datetime:
    """Return the current UTC datetime with micro-second precision."""
    return datetime.now(tz=timezone.utc)


def localize(value: datetime, time_zone: str) -> datetime:
    """Attach *time_zone* to a naive datetime; aware datetimes pass through.

    Raises ``pytz.UnknownTimeZoneError`` for an unknown zone name.
    """
    if value.tzinfo is not None:
        return value
    return pytz.timezone(time_zone).localize(value)


def parse_instant(value: str, time_zone: Optional[str] = None) -> datetime:
    """Parse an ISO 8601 timestamp as produced by Google or an LLM.

    A trailing ``Z`` is accepted. Timestamps without an offset are
    localised to *time_zone* when one is given and returned naive
    otherwise.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None and time_zone:
        parsed = localize(parsed, time_zone)
    return parsed
