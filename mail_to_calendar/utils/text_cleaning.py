"""Shared text helpers: comparison normalisation and LLM output cleanup."""

from __future__ import annotations

import re
from typing import Final, Optional

# Accented vowels folded to their bare form before comparison
_ACCENT_TABLE: Final = str.maketrans(
    "áàäâéèëêíìïîóòöôúùüû",
    "aaaaeeeeiiiioooouuuu",
)
_PUNCTUATION_RE: Final = re.compile(r"[^\w\s]|_")
_SLUG_INVALID_RE: Final = re.compile(r"[^a-z0-9\s-]")

# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------

def normalize_text(text: Optional[str], *, strip_punctuation: bool = True) -> str:
    """Canonicalise *text* for similarity comparison.

    Lower-cases and folds accented vowels. With ``strip_punctuation`` every
    character that is neither a letter, a digit nor whitespace is dropped.
    Never fails; ``None`` and ``""`` give ``""``.
    """
    if not text:
        return ""
    cleaned = text.lower().translate(_ACCENT_TABLE)
    if strip_punctuation:
        cleaned = _PUNCTUATION_RE.sub("", cleaned)
    return cleaned


def slugify(text: Optional[str], *, max_length: int = 30, fallback: str = "untitled-event") -> str:
    """Return a short ASCII slug suitable for file names."""
    if not text:
        return fallback
    slug = _SLUG_INVALID_RE.sub("", text.lower().translate(_ACCENT_TABLE))
    slug = re.sub(r"\s+", "-", slug)[:max_length]
    return slug or fallback


def strip_think_blocks(text: str) -> str:
    """Extract content after a closing </think> tag from an LLM response.

    Handles missing tags and safely removes JSON code fences if present.
    """
    if not text:
        return text.strip()

    marker: Final[str] = "</think>"
    idx: int = text.rfind(marker)

    after: str = text if idx == -1 else text[idx + len(marker) :]
    cleaned: str = after.strip()

    if cleaned.startswith("```json"):
        cleaned = cleaned[len("```json") :].strip()
    if cleaned.startswith("```"):
        cleaned = cleaned[3:].strip()
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3].strip()

    return cleaned

__all__ = ["normalize_text", "slugify", "strip_think_blocks"]
