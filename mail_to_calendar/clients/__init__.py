"""Convenience re-exports for singleton SDK accessors."""

from .openai_client import get_openai  # noqa: F401
from .mongodb_client import get_mongo_client, get_outcome_collection  # noqa: F401
from .google_client import (  # noqa: F401
    get_calendar_service,
    get_credentials,
    get_gmail_service,
    reset_google_clients,
)

__all__ = [
    "get_openai",
    "get_mongo_client",
    "get_outcome_collection",
    "get_credentials",
    "get_calendar_service",
    "get_gmail_service",
    "reset_google_clients",
]
