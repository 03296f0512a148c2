"""Credentials and singleton service objects for the Google Calendar and Gmail APIs.

Tokens are cached in ``GOOGLE_TOKEN_PATH``. When no valid token exists the
installed-app OAuth flow runs a local callback server on a free port.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from ..config import GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_SCOPES, GOOGLE_TOKEN_PATH

logger = logging.getLogger(__name__)

_credentials: Credentials | None = None
_calendar_service: Any | None = None
_gmail_service: Any | None = None


def _client_config() -> dict:
    if not GOOGLE_CLIENT_ID or not GOOGLE_CLIENT_SECRET:
        raise EnvironmentError(
            "GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET must be set to authorise Google access"
        )
    return {
        "installed": {
            "client_id": GOOGLE_CLIENT_ID,
            "client_secret": GOOGLE_CLIENT_SECRET,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["http://localhost"],
        }
    }


def _save_token(creds: Credentials) -> None:
    with open(GOOGLE_TOKEN_PATH, "w", encoding="utf-8") as token_file:
        token_file.write(creds.to_json())
    logger.info("Saved Google token to %s", GOOGLE_TOKEN_PATH)


def get_credentials() -> Credentials:
    """Return valid user credentials, refreshing or re-authorising as needed."""
    global _credentials
    if _credentials is not None and _credentials.valid:
        return _credentials

    creds: Credentials | None = _credentials
    if creds is None and os.path.exists(GOOGLE_TOKEN_PATH):
        creds = Credentials.from_authorized_user_file(GOOGLE_TOKEN_PATH, GOOGLE_SCOPES)

    if creds is not None and not creds.valid and creds.refresh_token:
        logger.info("Refreshing Google token")
        creds.refresh(Request())
        _save_token(creds)
    elif creds is None or not creds.valid:
        logger.info("Requesting new Google authorisation via local callback")
        flow = InstalledAppFlow.from_client_config(_client_config(), GOOGLE_SCOPES)
        creds = flow.run_local_server(port=0)
        _save_token(creds)

    _credentials = creds
    return creds


def get_calendar_service() -> Any:
    """Return a singleton Calendar v3 service resource."""
    global _calendar_service
    if _calendar_service is None:
        _calendar_service = build("calendar", "v3", credentials=get_credentials(), cache_discovery=False)
    return _calendar_service


def get_gmail_service() -> Any:
    """Return a singleton Gmail v1 service resource."""
    global _gmail_service
    if _gmail_service is None:
        _gmail_service = build("gmail", "v1", credentials=get_credentials(), cache_discovery=False)
    return _gmail_service


def reset_google_clients() -> None:
    """Forget cached credentials and services so the next call re-authorises."""
    global _credentials, _calendar_service, _gmail_service
    if _credentials is not None:
        # Force a refresh on next use rather than trusting the cached token
        _credentials.token = None
    _calendar_service = None
    _gmail_service = None

__all__ = [
    "get_credentials",
    "get_calendar_service",
    "get_gmail_service",
    "reset_google_clients",
]
