"""Gmail access: fetch messages matching a query and mark them as read."""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List

from googleapiclient.errors import HttpError

from ..models.event import EmailMessage

logger = logging.getLogger(__name__)

MAX_BODY_CHARS: int = 2000


def _decode(data: str) -> str:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def extract_body(payload: Dict[str, Any]) -> str:
    """Return the text body of a Gmail message payload.

    ``text/plain`` parts win over ``text/html``; multipart payloads are
    searched depth-first.
    """
    parts = payload.get("parts")
    if not parts:
        data = (payload.get("body") or {}).get("data")
        return _decode(data) if data else ""

    fallback = ""
    for part in parts:
        mime_type = part.get("mimeType", "")
        if mime_type == "text/plain":
            data = (part.get("body") or {}).get("data")
            if data:
                return _decode(data)
        elif mime_type == "text/html" and not fallback:
            data = (part.get("body") or {}).get("data")
            if data:
                fallback = _decode(data)
        elif part.get("parts"):
            nested = extract_body(part)
            if nested:
                return nested
    return fallback


def _header(headers: List[Dict[str, str]], name: str) -> str:
    for header in headers:
        if header.get("name", "").lower() == name.lower():
            return header.get("value", "")
    return ""


class Mailbox:
    """The authenticated user's Gmail mailbox."""

    def __init__(self, service: Any, user_id: str = "me") -> None:
        self._service = service
        self._user_id = user_id

    def fetch(self, query: str, max_results: int = 10) -> List[EmailMessage]:
        """Return up to *max_results* messages matching *query*.

        Messages whose details cannot be read are skipped and logged.
        """
        response = self._service.users().messages().list(
            userId=self._user_id, q=query, maxResults=max_results
        ).execute()
        refs = response.get("messages", [])[:max_results]

        emails: List[EmailMessage] = []
        for ref in refs:
            try:
                emails.append(self.get(ref["id"]))
            except HttpError as exc:
                logger.error("Could not read message %s: %s", ref["id"], exc)
        logger.info("Fetched %d message(s) for query: %s", len(emails), query)
        return emails

    def get(self, message_id: str) -> EmailMessage:
        message = self._service.users().messages().get(userId=self._user_id, id=message_id).execute()
        payload = message.get("payload", {})
        headers = payload.get("headers", [])
        return EmailMessage(
            id=message_id,
            subject=_header(headers, "Subject"),
            sender=_header(headers, "From"),
            date=_header(headers, "Date"),
            body=extract_body(payload)[:MAX_BODY_CHARS],
            snippet=message.get("snippet", ""),
        )

    def mark_as_read(self, message_id: str) -> None:
        self._service.users().messages().modify(
            userId=self._user_id,
            id=message_id,
            body={"removeLabelIds": ["UNREAD"]},
        ).execute()
        logger.info("Marked message %s as read", message_id)

__all__ = ["MAX_BODY_CHARS", "extract_body", "Mailbox"]
