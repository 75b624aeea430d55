"""
Lexical classification of single lines of LLM itinerary text.

Section markers are runs of ``$`` at the start of a line: four for a top-level
section down to one for the deepest level. Bullets start with ``-`` or ``*``.
"""

import re
from enum import Enum
from typing import Optional


class LineKind(str, Enum):
    TOP_MARKER = "top_marker"
    SUB_MARKER = "sub_marker"
    SUB_SUB_MARKER = "sub_sub_marker"
    SUB_SUB_SUB_MARKER = "sub_sub_sub_marker"
    BULLET = "bullet"
    PLAIN_TEXT = "plain_text"


# Longest prefix first: "$$$$" also starts with "$$$", "$$" and "$"
MARKER_PREFIXES = (
    ("$$$$", LineKind.TOP_MARKER),
    ("$$$", LineKind.SUB_MARKER),
    ("$$", LineKind.SUB_SUB_MARKER),
    ("$", LineKind.SUB_SUB_SUB_MARKER),
)

_PREFIX_BY_KIND = {kind: prefix for prefix, kind in MARKER_PREFIXES}

_DEPTH_BY_KIND = {
    LineKind.TOP_MARKER: 1,
    LineKind.SUB_MARKER: 2,
    LineKind.SUB_SUB_MARKER: 3,
    LineKind.SUB_SUB_SUB_MARKER: 4,
}

BULLET_CHARS = ("-", "*")

_TRAILING_EMPHASIS = re.compile(r"\*{1,2}$")
_BULLET_PREFIX = re.compile(r"^[*-]\s*")


def classify_line(line: str) -> LineKind:
    """Classify one line; markers win over bullets, bullets over plain text"""
    stripped = line.strip()
    for prefix, kind in MARKER_PREFIXES:
        if stripped.startswith(prefix):
            return kind
    if stripped.startswith(BULLET_CHARS):
        return LineKind.BULLET
    return LineKind.PLAIN_TEXT


def marker_depth(kind: LineKind) -> Optional[int]:
    """1 for a top-level marker through 4 for the deepest, None otherwise"""
    return _DEPTH_BY_KIND.get(kind)


def marker_title(line: str, kind: Optional[LineKind] = None) -> str:
    """
    Title carried by a marker line.

    Removes the marker prefix for the line's level and one trailing ``**`` or
    ``*`` emphasis suffix, e.g. ``"$$$$ Travel Guide to Manali**"`` gives
    ``"Travel Guide to Manali"``.
    """
    stripped = line.strip()
    kind = kind or classify_line(stripped)
    prefix = _PREFIX_BY_KIND.get(kind)
    if prefix is None:
        return stripped
    title = stripped[len(prefix):].strip()
    return _TRAILING_EMPHASIS.sub("", title).strip()


def bullet_text(line: str) -> str:
    """Text of a bullet line without its leading ``-``/``*``"""
    return _BULLET_PREFIX.sub("", line.strip(), count=1).strip()
