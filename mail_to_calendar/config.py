"""Centralised configuration for mail_to_calendar.

Environment variables are loaded once and all related constants are
grouped by service for easier maintenance. Only the workflow layer reads
these values; the correlation engine receives them as arguments.
"""

from __future__ import annotations

import os
from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Load environment variables from `.env` (if present)
# ---------------------------------------------------------------------------
load_dotenv()

# ---------------------------------------------------------------------------
# Core credentials (from environment)
# ---------------------------------------------------------------------------
OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
GOOGLE_CLIENT_ID: str | None = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET: str | None = os.getenv("GOOGLE_CLIENT_SECRET")
MONGODB_URI: str | None = os.getenv("MONGODB_URI")

# ---------------------------------------------------------------------------
# Google APIs
# ---------------------------------------------------------------------------
GOOGLE_TOKEN_PATH: str = os.getenv("GOOGLE_TOKEN_PATH", "token.json")
GOOGLE_SCOPES: list[str] = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/calendar",
]
CALENDAR_ID: str = os.getenv("CALENDAR_ID", "primary")
DEFAULT_TIME_ZONE: str = os.getenv("DEFAULT_TIME_ZONE", "Europe/Madrid")

# Gmail search queries; an unset query disables that half of the pipeline
GMAIL_QUERY: str | None = os.getenv("GMAIL_QUERY")
GMAIL_CANCELLATION_QUERY: str | None = os.getenv("GMAIL_CANCELLATION_QUERY")
GMAIL_MAX_RESULTS: int = int(os.getenv("GMAIL_MAX_RESULTS", "10"))

# ---------------------------------------------------------------------------
# Extraction model
# ---------------------------------------------------------------------------
OPENAI_EXTRACTION_MODEL: str = os.getenv("OPENAI_EXTRACTION_MODEL", "gpt-4o-mini")

# ---------------------------------------------------------------------------
# Outcome ledger
# accepted values: "file", "mongodb"
# ---------------------------------------------------------------------------
LEDGER_BACKEND: str = os.getenv("LEDGER_BACKEND", "file")
LEDGER_DIR: str = os.getenv("LEDGER_DIR", "generatedEvents")
MONGODB_DATABASE: str = "mail_to_calendar"
MONGODB_COLLECTION: str = "outcomes"

# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------
CHECK_INTERVAL_MINUTES: int = int(os.getenv("CHECK_INTERVAL_MINUTES", "5"))

# ---------------------------------------------------------------------------
# Re-exported names
# ---------------------------------------------------------------------------
__all__ = [
    # credentials
    "OPENAI_API_KEY",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "MONGODB_URI",
    # google
    "GOOGLE_TOKEN_PATH",
    "GOOGLE_SCOPES",
    "CALENDAR_ID",
    "DEFAULT_TIME_ZONE",
    "GMAIL_QUERY",
    "GMAIL_CANCELLATION_QUERY",
    "GMAIL_MAX_RESULTS",
    # extraction
    "OPENAI_EXTRACTION_MODEL",
    # ledger
    "LEDGER_BACKEND",
    "LEDGER_DIR",
    "MONGODB_DATABASE",
    "MONGODB_COLLECTION",
    # scheduling
    "CHECK_INTERVAL_MINUTES",
]
