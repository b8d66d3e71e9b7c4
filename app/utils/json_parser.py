"""Lenient JSON parsing for LLM responses."""

import json
import re
from typing import Any, Optional

from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")
_ARRAY_SPAN = re.compile(r"\[[\s\S]*\]")


def parse_json_safely(text: Optional[str]) -> Optional[Any]:
    """Parse JSON out of a model response.

    Models sometimes wrap JSON in code fences or surround it with prose. The
    raw text is tried first, then the fenced body, then the widest ``{...}`` or
    ``[...]`` span.

    Args:
        text: Raw response text

    Returns:
        Parsed JSON value, or None if nothing parseable was found
    """
    if not text or not text.strip():
        return None

    candidate = text.strip()
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    unfenced = _CODE_FENCE.sub("", candidate).strip()
    if unfenced != candidate:
        try:
            return json.loads(unfenced)
        except json.JSONDecodeError:
            pass

    for pattern in (_OBJECT_SPAN, _ARRAY_SPAN):
        match = pattern.search(unfenced)
        if not match:
            continue
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            continue

    LOGGER.debug("No JSON found in response", extra={"response": candidate[:200]})
    return None
