"""
Parse the tag list the LLM returns for an itinerary.

The model is asked for a JSON array of strings but answers vary: a JSON
object with a ``tags`` key, an array wrapped in prose, or a bare comma list.
"""

import json
import logging
import re
from typing import Any, List

logger = logging.getLogger(__name__)

MAX_TAGS = 6

_ARRAY = re.compile(r"\[(.*)\]", re.DOTALL)
_STRIP_CHARS = re.compile(r"[\"\[\]{}]")


def _split_fallback(text: str) -> List[str]:
    return [tag.strip() for tag in _STRIP_CHARS.sub("", text).split(",")]


def _coerce(tags: Any) -> List[str]:
    if not isinstance(tags, list):
        return []
    return [tag if isinstance(tag, str) else str(tag) for tag in tags]


def parse_tag_reply(text: str, limit: int = MAX_TAGS) -> List[str]:
    """Best-effort tag list from an LLM reply, at most ``limit`` entries"""
    if not text or not text.strip():
        return []

    stripped = text.strip()
    try:
        if stripped.startswith("{"):
            tags = _coerce(json.loads(stripped).get("tags", []))
        else:
            match = _ARRAY.search(stripped)
            tags = _coerce(json.loads(f"[{match.group(1)}]")) if match else _split_fallback(stripped)
    except (ValueError, AttributeError) as e:
        logger.warning(f"Tag reply was not valid JSON, splitting on commas: {e}")
        tags = _split_fallback(stripped)

    tags = [tag.strip() for tag in tags if tag and tag.strip()]
    return tags[:limit]
