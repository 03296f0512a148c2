"""Exceptions surfaced by the correlation engine and its adapters."""

from __future__ import annotations


class MailToCalendarError(Exception):
    """Base class for all project-specific errors."""


class InvalidDescriptor(MailToCalendarError, ValueError):
    """An event descriptor is missing required fields or has ``end <= start``.

    Raised before any calendar query is issued.
    """


class UnavailableError(MailToCalendarError):
    """The calendar could not be reached (transport, authorisation or quota).

    ``auth_failure`` is set when refreshing credentials may fix the problem.
    """

    def __init__(self, message: str, *, auth_failure: bool = False) -> None:
        super().__init__(message)
        self.auth_failure = auth_failure

__all__ = ["MailToCalendarError", "InvalidDescriptor", "UnavailableError"]
