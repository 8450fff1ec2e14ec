"""Extraction of the JSON object from language-model text."""
import json
import re
from typing import Any, Dict, Optional

_FENCED = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Find the JSON object in a model response.

    Tries, in order: the whole text, each fenced code block, and the span from
    the first ``{`` to the last ``}``.

    Returns:
        The parsed object, or None when the text holds no JSON object
    """
    if not text or not text.strip():
        return None
    parsed = _loads_object(text.strip())
    if parsed is not None:
        return parsed
    for match in _FENCED.finditer(text):
        parsed = _loads_object(match.group(1))
        if parsed is not None:
            return parsed
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return _loads_object(text[start:end + 1])
    return None
