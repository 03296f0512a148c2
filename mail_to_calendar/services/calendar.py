"""Google Calendar adapter: window queries, inserts and deletes."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Sequence

from google.auth.exceptions import RefreshError, TransportError
from googleapiclient.errors import HttpError

from ..exceptions import UnavailableError
from ..models.event import CalendarEvent, EventDescriptor
from .correlation import CalendarWindowSource

logger = logging.getLogger(__name__)

# HTTP statuses that a credential refresh may fix
AUTH_FAILURE_STATUSES = frozenset({401, 403})

DEFAULT_REMINDERS: Dict[str, Any] = {
    "useDefault": False,
    "overrides": [
        {"method": "email", "minutes": 24 * 60},
        {"method": "popup", "minutes": 30},
    ],
}


def _unavailable(action: str, exc: Exception) -> UnavailableError:
    if isinstance(exc, HttpError):
        status = getattr(exc.resp, "status", None)
        return UnavailableError(
            f"Calendar {action} failed with HTTP {status}: {exc}",
            auth_failure=status in AUTH_FAILURE_STATUSES,
        )
    return UnavailableError(
        f"Calendar {action} failed: {exc}",
        auth_failure=isinstance(exc, RefreshError),
    )


def build_event_body(descriptor: EventDescriptor) -> Dict[str, Any]:
    """Translate a confirmation descriptor into a Calendar API ``events`` body."""
    body: Dict[str, Any] = {
        "summary": descriptor.title,
        "description": descriptor.description,
        "start": {"dateTime": descriptor.start.isoformat(), "timeZone": descriptor.time_zone},
        "end": {"dateTime": descriptor.end.isoformat(), "timeZone": descriptor.time_zone},
        "reminders": DEFAULT_REMINDERS,
    }
    if descriptor.location:
        body["location"] = descriptor.location
    return body


class GoogleCalendar:
    """One Google calendar, addressed by *calendar_id*, behind a service resource."""

    def __init__(self, service: Any, calendar_id: str = "primary") -> None:
        self._service = service
        self.calendar_id = calendar_id

    def list_events(self, window_start: datetime, window_end: datetime) -> List[CalendarEvent]:
        """Return single (expanded) events overlapping the window, ordered by start."""
        items: List[Dict[str, Any]] = []
        page_token: str | None = None
        try:
            while True:
                response = self._service.events().list(
                    calendarId=self.calendar_id,
                    timeMin=window_start.isoformat(),
                    timeMax=window_end.isoformat(),
                    singleEvents=True,
                    orderBy="startTime",
                    pageToken=page_token,
                ).execute()
                items.extend(response.get("items", []))
                page_token = response.get("nextPageToken")
                if not page_token:
                    break
        except (HttpError, TransportError, RefreshError) as exc:
            raise _unavailable("query", exc) from exc

        logger.debug("Calendar returned %d events in window", len(items))
        return [CalendarEvent.from_google(item) for item in items]

    def insert_event(self, descriptor: EventDescriptor) -> CalendarEvent:
        """Create an entry for *descriptor* and return it as stored."""
        try:
            created = self._service.events().insert(
                calendarId=self.calendar_id,
                body=build_event_body(descriptor),
            ).execute()
        except (HttpError, TransportError, RefreshError) as exc:
            raise _unavailable("insert", exc) from exc

        logger.info("Created calendar event: %s", created.get("htmlLink"))
        return CalendarEvent.from_google(created)

    def delete_event(self, event: CalendarEvent) -> None:
        """Delete *event* by its identifier."""
        try:
            self._service.events().delete(calendarId=self.calendar_id, eventId=event.id).execute()
        except (HttpError, TransportError, RefreshError) as exc:
            raise _unavailable("delete", exc) from exc
        logger.info("Deleted calendar event '%s' (%s)", event.title, event.id)


class RefreshingWindowSource:
    """Retry a window query once with fresh credentials after an auth failure.

    *source_factory* must return a window source built on current
    credentials; *on_auth_failure* discards the stale ones.
    """

    def __init__(
        self,
        source_factory: Callable[[], CalendarWindowSource],
        on_auth_failure: Callable[[], None],
    ) -> None:
        self._source_factory = source_factory
        self._on_auth_failure = on_auth_failure

    def list_events(self, window_start: datetime, window_end: datetime) -> Sequence[CalendarEvent]:
        try:
            return self._source_factory().list_events(window_start, window_end)
        except UnavailableError as exc:
            if not exc.auth_failure:
                raise
            logger.warning("Calendar authorisation failed (%s); refreshing credentials", exc)
            self._on_auth_failure()
            return self._source_factory().list_events(window_start, window_end)

__all__ = [
    "AUTH_FAILURE_STATUSES",
    "DEFAULT_REMINDERS",
    "build_event_body",
    "GoogleCalendar",
    "RefreshingWindowSource",
]
