"""Outcome ledger: a write-only record of what the pipeline did with each message.

Two storage backends are provided: one JSON file per outcome in a local
directory, or one document per outcome in MongoDB.
"""

from __future__ import annotations

import enum
import json
import logging
import os
import re
import uuid
from collections import Counter
from typing import Any, Dict, Optional, Protocol

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..utils.datetime_utils import get_current_timestamp
from ..utils.text_cleaning import slugify

logger = logging.getLogger(__name__)


class OutcomeAction(str, enum.Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"
    DELETED = "event_deleted"
    CANCELLATION_NOT_FOUND = "cancellation_not_found"
    DELETION_FAILED = "deletion_failed"
    CANCELLATION_ERROR = "cancellation_error"


# File-name prefix per action, also used to count records
FILE_PREFIXES: Dict[OutcomeAction, str] = {
    OutcomeAction.CREATED: "created",
    OutcomeAction.SKIPPED: "skipped",
    OutcomeAction.FAILED: "failed",
    OutcomeAction.DELETED: "deleted",
    OutcomeAction.CANCELLATION_NOT_FOUND: "cancel-not-found",
    OutcomeAction.DELETION_FAILED: "delete-failed",
    OutcomeAction.CANCELLATION_ERROR: "cancel-error",
}

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

# Errors a ledger backend may raise while storing a record
STORAGE_ERRORS = (OSError, PyMongoError)


class OutcomeLedger(Protocol):
    def record(self, action: OutcomeAction, **details: Any) -> Any:
        ...

    def stats(self) -> Dict[str, Any]:
        ...


def build_record(action: OutcomeAction, details: Dict[str, Any]) -> Dict[str, Any]:
    """Return the stored form of one outcome."""
    return {
        "timestamp": get_current_timestamp().isoformat(),
        "action": action.value,
        **details,
    }


def _subject_title(action: OutcomeAction, details: Dict[str, Any]) -> Optional[str]:
    """Title of the event an outcome is about, for file naming."""
    if action in (OutcomeAction.CREATED, OutcomeAction.DELETED, OutcomeAction.DELETION_FAILED):
        event = details.get("calendar_event") or {}
        return event.get("summary")
    descriptor = details.get("descriptor") or {}
    return descriptor.get("title")


def record_file_name(action: OutcomeAction, details: Dict[str, Any], date_str: str, unique: str) -> str:
    """File name for a record, e.g. ``created-2024-03-01-padel-abc123.json``.

    Every name ends in a per-record token (the calendar event id for created
    and deleted events, *unique* otherwise) so records never overwrite each
    other.
    """
    prefix = FILE_PREFIXES[action]
    if action is OutcomeAction.CANCELLATION_ERROR:
        return f"{prefix}-{date_str}-{unique}.json"

    slug = slugify(_subject_title(action, details))
    if action in (OutcomeAction.CREATED, OutcomeAction.DELETED):
        event_id = (details.get("calendar_event") or {}).get("id") or unique
        return f"{prefix}-{date_str}-{slug}-{event_id}.json"
    return f"{prefix}-{date_str}-{slug}-{unique}.json"


class JsonFileLedger:
    """Write each outcome as a pretty-printed JSON file under *directory*."""

    def __init__(self, directory: str) -> None:
        self.directory = directory

    def record(self, action: OutcomeAction, **details: Any) -> str:
        os.makedirs(self.directory, exist_ok=True)
        record = build_record(action, details)
        now = get_current_timestamp()
        unique = f"{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:6]}"
        file_name = record_file_name(action, details, now.strftime("%Y-%m-%d"), unique)
        path = os.path.join(self.directory, file_name)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(record, fh, indent=2, ensure_ascii=False, default=str)
        logger.info("Recorded %s outcome in %s", action.value, path)
        return file_name

    def stats(self) -> Dict[str, Any]:
        """Count stored records by action prefix and by date."""
        counts: Counter = Counter()
        by_date: Counter = Counter()
        if not os.path.isdir(self.directory):
            return {"total": 0, "by_action": {}, "by_date": {}}

        files = [name for name in os.listdir(self.directory) if name.endswith(".json")]
        for name in files:
            for action, prefix in FILE_PREFIXES.items():
                if name.startswith(f"{prefix}-"):
                    counts[action.value] += 1
                    break
            match = _DATE_RE.search(name)
            if match:
                by_date[match.group(0)] += 1

        return {"total": len(files), "by_action": dict(counts), "by_date": dict(sorted(by_date.items()))}


class MongoLedger:
    """Store each outcome as a document in a MongoDB *collection*."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    def record(self, action: OutcomeAction, **details: Any) -> Any:
        result = self._collection.insert_one(build_record(action, details))
        logger.info("Stored %s outcome to MongoDB with _id=%s", action.value, result.inserted_id)
        return result.inserted_id

    def stats(self) -> Dict[str, Any]:
        by_action = self._count_by("$action")
        by_date = self._count_by({"$substrBytes": ["$timestamp", 0, 10]})
        return {"total": sum(by_action.values()), "by_action": by_action, "by_date": dict(sorted(by_date.items()))}

    def _count_by(self, key: Any) -> Dict[str, int]:
        pipeline = [{"$group": {"_id": key, "count": {"$sum": 1}}}]
        return {row["_id"]: row["count"] for row in self._collection.aggregate(pipeline)}


def get_ledger(backend: str, directory: str) -> OutcomeLedger:
    """Return the ledger for *backend* (``"file"`` or ``"mongodb"``)."""
    if backend == "mongodb":
        from ..clients.mongodb_client import get_outcome_collection

        return MongoLedger(get_outcome_collection())
    if backend == "file":
        return JsonFileLedger(directory)
    raise ValueError(f"Unknown ledger backend: {backend!r}")

__all__ = [
    "OutcomeAction",
    "FILE_PREFIXES",
    "STORAGE_ERRORS",
    "OutcomeLedger",
    "build_record",
    "record_file_name",
    "JsonFileLedger",
    "MongoLedger",
    "get_ledger",
]
