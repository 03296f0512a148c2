"""Utility functions for the mail_to_calendar project.

Re-exports the text helpers and datetime utilities so that imports like
`from ..utils import normalize_text` or `from ..utils import parse_instant`
work as expected.
"""

from .text_cleaning import normalize_text, slugify, strip_think_blocks  # noqa: F401
from .datetime_utils import get_current_timestamp, localize, parse_instant  # noqa: F401
from .llm_parsing import extract_structured_json  # noqa: F401

__all__ = [
    "normalize_text",
    "slugify",
    "strip_think_blocks",
    "get_current_timestamp",
    "localize",
    "parse_instant",
    "extract_structured_json",
]
