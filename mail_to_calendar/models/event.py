"""Event descriptors, calendar entries and source messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Union

from ..exceptions import InvalidDescriptor
from ..utils.datetime_utils import parse_instant

# Zone assumed when neither the message nor the configuration names one
FALLBACK_TIME_ZONE: str = "Europe/Madrid"


@dataclass(slots=True)
class EventDescriptor:
    """An activity derived from a message, independent of any calendar.

    ``start`` and ``end`` are timezone-aware. Cancellation descriptors may
    omit ``end``; confirmation descriptors may not.
    """

    title: str
    start: Optional[datetime]
    end: Optional[datetime] = None
    location: Optional[str] = None
    time_zone: str = FALLBACK_TIME_ZONE
    description: Optional[str] = None

    def validate(self, *, require_end: bool = False) -> None:
        """Raise :class:`InvalidDescriptor` unless the descriptor is usable."""
        if not self.title or not self.title.strip():
            raise InvalidDescriptor("Event descriptor has no title")
        if self.start is None:
            raise InvalidDescriptor(f"Event descriptor '{self.title}' has no start instant")
        if self.start.tzinfo is None:
            raise InvalidDescriptor(f"Start instant of '{self.title}' is not timezone-aware")
        if self.end is None:
            if require_end:
                raise InvalidDescriptor(f"Event descriptor '{self.title}' has no end instant")
            return
        if self.end.tzinfo is None:
            raise InvalidDescriptor(f"End instant of '{self.title}' is not timezone-aware")
        if self.end <= self.start:
            raise InvalidDescriptor(
                f"End instant {self.end.isoformat()} of '{self.title}' is not after "
                f"start {self.start.isoformat()}"
            )

    def to_record(self) -> Dict[str, Any]:
        """Return a JSON-friendly dict used by the outcome ledger."""
        return {
            "title": self.title,
            "startDateTime": self.start.isoformat() if self.start else None,
            "endDateTime": self.end.isoformat() if self.end else None,
            "location": self.location,
            "timeZone": self.time_zone,
            "description": self.description,
        }


@dataclass(slots=True)
class CalendarEvent:
    """An existing calendar entry, read-only from the engine's point of view.

    ``start`` is a timed instant or, for all-day entries, a plain date.
    ``id`` is the reference used to delete the entry.
    """

    id: str
    title: str = ""
    start: Union[datetime, date, None] = None
    location: Optional[str] = None
    html_link: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_google(cls, item: Dict[str, Any]) -> "CalendarEvent":
        """Build a :class:`CalendarEvent` from a Calendar API ``events`` item."""
        start_info = item.get("start") or {}
        start: Union[datetime, date, None] = None
        if start_info.get("dateTime"):
            start = parse_instant(start_info["dateTime"], start_info.get("timeZone"))
        elif start_info.get("date"):
            start = date.fromisoformat(start_info["date"])

        return cls(
            id=item.get("id", ""),
            title=item.get("summary") or "",
            start=start,
            location=item.get("location"),
            html_link=item.get("htmlLink"),
            raw=item,
        )

    @property
    def effective_start(self) -> Optional[datetime]:
        """Timed start, or midnight UTC of the all-day date."""
        if isinstance(self.start, datetime):
            if self.start.tzinfo is None:
                return self.start.replace(tzinfo=timezone.utc)
            return self.start
        if isinstance(self.start, date):
            return datetime(self.start.year, self.start.month, self.start.day, tzinfo=timezone.utc)
        return None

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "summary": self.title,
            "start": self.start.isoformat() if self.start else None,
            "location": self.location,
            "htmlLink": self.html_link,
        }


@dataclass(slots=True)
class EmailMessage:
    """A mail message as handed to the extraction step."""

    id: str
    subject: str = ""
    sender: str = ""
    date: str = ""
    body: str = ""
    snippet: str = ""

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.id, "subject": self.subject, "from": self.sender, "date": self.date}

__all__ = ["EventDescriptor", "CalendarEvent", "EmailMessage", "FALLBACK_TIME_ZONE"]
