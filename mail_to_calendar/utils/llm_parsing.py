"""Utilities for parsing structured outputs returned by LLM calls.

Extraction prompts ask for a single JSON object, but models occasionally
wrap it in prose, fences or a one-element array. The helpers here recover
the object in all of those cases.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict

from .text_cleaning import strip_think_blocks

__all__ = ["extract_structured_json"]


def _as_object(parsed: Any) -> Dict[str, Any]:
    if isinstance(parsed, dict):
        return parsed
    if isinstance(parsed, list) and parsed and isinstance(parsed[0], dict):
        return parsed[0]
    raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")


def extract_structured_json(response_text: str) -> Dict[str, Any]:
    """Robustly extract a JSON object from an LLM response.

    Parameters
    ----------
    response_text
        The raw message content returned by the model.

    Returns
    -------
    dict[str, Any]
        The parsed object. A top-level array yields its first object.

    Raises
    ------
    ValueError
        If no JSON object can be located in *response_text*.
    """

    cleaned: str = strip_think_blocks(response_text or "").strip()

    # 1. Whole string
    try:
        return _as_object(json.loads(cleaned))
    except json.JSONDecodeError:
        pass

    # 2. Fenced block anywhere in the text
    fenced = re.search(
        r"```(?:json)?\s*([\[{].*?[\]}])\s*```",
        cleaned,
        flags=re.DOTALL | re.IGNORECASE,
    )
    if fenced:
        cleaned = fenced.group(1).strip()
        try:
            return _as_object(json.loads(cleaned))
        except json.JSONDecodeError:
            pass

    # 3. Outermost braces
    first, last = cleaned.find("{"), cleaned.rfind("}")
    if first != -1 and last > first:
        try:
            return _as_object(json.loads(cleaned[first : last + 1]))
        except json.JSONDecodeError:
            pass

    raise ValueError("Could not locate a JSON object in model response")
