"""
Marker-section parser for LLM itinerary replies.

The assistant is prompted to answer in ``---`` separated chunks whose lines
open nested sections with ``$$$$``/``$$$``/``$$``/``$`` markers. This module
turns that text into a four level section tree for rendering and export.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from travelpal.core.itinerary.lines import (
    LineKind,
    bullet_text,
    classify_line,
    marker_depth,
    marker_title,
)

logger = logging.getLogger(__name__)

CHUNK_DIVIDER = "---"
UNTITLED_SECTION = "Untitled Section"


class SectionIcon(str, Enum):
    LOCATION = "location"
    HOTEL = "hotel"
    TIPS = "tips"
    INFO = "info"
    CALENDAR = "calendar"
    TRANSPORT = "transport"
    ACTIVITY = "activity"
    FOOD = "food"
    ERROR = "error"


# Checked in order, first substring match wins
ICON_KEYWORDS = (
    ("travel guide", SectionIcon.LOCATION),
    ("itinerary", SectionIcon.HOTEL),
    ("highlights", SectionIcon.TIPS),
    ("time to visit", SectionIcon.CALENDAR),
    ("how to reach", SectionIcon.TRANSPORT),
    ("places to visit", SectionIcon.LOCATION),
    ("things to do", SectionIcon.ACTIVITY),
    ("where to stay", SectionIcon.HOTEL),
    ("where to eat", SectionIcon.FOOD),
    ("travel tips", SectionIcon.TIPS),
)


def icon_for_title(title: str) -> SectionIcon:
    lowered = title.lower()
    for keyword, icon in ICON_KEYWORDS:
        if keyword in lowered:
            return icon
    return SectionIcon.INFO


@dataclass
class SubSubSubSection:
    title: str
    content: List[str] = field(default_factory=list)
    bullet_points: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "content": list(self.content),
            "bulletPoints": list(self.bullet_points),
        }


@dataclass
class SubSubSection:
    title: str
    content: List[str] = field(default_factory=list)
    bullet_points: List[str] = field(default_factory=list)
    sub_sections: List[SubSubSubSection] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "content": list(self.content),
            "bulletPoints": list(self.bullet_points),
            "subSections": [s.to_dict() for s in self.sub_sections],
        }


@dataclass
class SubSection:
    title: str
    content: List[str] = field(default_factory=list)
    bullet_points: List[str] = field(default_factory=list)
    sub_sections: List[SubSubSection] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "content": list(self.content),
            "bulletPoints": list(self.bullet_points),
            "subSections": [s.to_dict() for s in self.sub_sections],
        }


@dataclass
class Section:
    title: str
    content: List[str] = field(default_factory=list)
    bullet_points: List[str] = field(default_factory=list)
    sub_sections: List[SubSection] = field(default_factory=list)
    icon: SectionIcon = SectionIcon.INFO

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "content": list(self.content),
            "bulletPoints": list(self.bullet_points),
            "subSections": [s.to_dict() for s in self.sub_sections],
            "icon": self.icon.value,
        }


class _ChunkCursor:
    """The four "currently open" slots while reading one chunk"""

    def __init__(self, parser: "_TreeBuilder"):
        self.parser = parser
        self.section: Optional[Section] = None
        self.sub: Optional[SubSection] = None
        self.sub_sub: Optional[SubSubSection] = None
        self.sub_sub_sub: Optional[SubSubSubSection] = None

    def deepest(self):
        return self.sub_sub_sub or self.sub_sub or self.sub or self.section

    def ensure_section(self) -> Section:
        # Lines before any marker land in an empty-titled default section
        if self.section is None:
            self.section = self.parser.orphan_section()
        return self.section

    def open_section(self, title: str) -> None:
        self.section = self.parser.new_section(title)
        self.sub = self.sub_sub = self.sub_sub_sub = None

    def open_sub(self, title: str) -> None:
        if self.section is None:
            self.section = self.parser.new_section(UNTITLED_SECTION)
        self.sub = SubSection(title=title)
        self.section.sub_sections.append(self.sub)
        self.sub_sub = self.sub_sub_sub = None

    def open_sub_sub(self, title: str, raw: str) -> None:
        if self.sub is None:
            self.ensure_section().content.append(raw)
            return
        self.sub_sub = SubSubSection(title=title)
        self.sub.sub_sections.append(self.sub_sub)
        self.sub_sub_sub = None

    def open_sub_sub_sub(self, title: str, raw: str) -> None:
        if self.sub_sub is None:
            target = self.sub or self.ensure_section()
            target.content.append(raw)
            return
        self.sub_sub_sub = SubSubSubSection(title=title)
        self.sub_sub.sub_sections.append(self.sub_sub_sub)

    def open_marker(self, depth: int, title: str, raw: str) -> None:
        if depth == 1:
            self.open_section(title)
        elif depth == 2:
            self.open_sub(title)
        elif depth == 3:
            self.open_sub_sub(title, raw)
        else:
            self.open_sub_sub_sub(title, raw)

    def add_bullet(self, text: str, raw: str) -> None:
        target = self.deepest() or self.ensure_section()
        if self.parser.is_orphan(target):
            # The default section is content-only
            target.content.append(raw)
        else:
            target.bullet_points.append(text)

    def add_content(self, line: str) -> None:
        (self.deepest() or self.ensure_section()).content.append(line)


class _TreeBuilder:
    def __init__(self):
        self.sections: List[Section] = []
        self._orphan: Optional[Section] = None

    def new_section(self, title: str) -> Section:
        section = Section(title=title)
        self.sections.append(section)
        self._orphan = None
        return section

    def orphan_section(self) -> Section:
        # Consecutive marker-less chunks share one default section
        if self._orphan is None:
            self._orphan = self.new_section("")
        return self._orphan

    def is_orphan(self, node) -> bool:
        return node is not None and node is self._orphan

    def feed_chunk(self, chunk: str) -> None:
        cursor = _ChunkCursor(self)
        first = len(self.sections)

        for raw_line in chunk.strip().split("\n"):
            line = raw_line.strip()
            if not line:
                continue

            kind = classify_line(line)
            depth = marker_depth(kind)
            if depth is not None:
                cursor.open_marker(depth, marker_title(line, kind), line)
            elif kind is LineKind.BULLET:
                cursor.add_bullet(bullet_text(line), line)
            else:
                cursor.add_content(line)

        for section in self.sections[first:]:
            section.icon = icon_for_title(section.title)


def split_chunks(text: str) -> List[str]:
    """Split on the ``---`` divider, dropping blank chunks"""
    return [chunk for chunk in text.split(CHUNK_DIVIDER) if chunk.strip()]


def parse_itinerary(text: Optional[str]) -> List[Section]:
    """
    Parse an itinerary reply into its section tree.

    Every non-empty line is kept: bullets and text attach to the deepest open
    section, and markers whose parent level is missing degrade to content of
    the nearest open ancestor. Never raises.
    """
    if not text:
        return []

    builder = _TreeBuilder()
    chunks = split_chunks(text)
    for chunk in chunks:
        builder.feed_chunk(chunk)

    logger.debug(
        "Parsed itinerary text into %d sections from %d chunks",
        len(builder.sections),
        len(chunks),
    )
    return builder.sections


def sections_to_dicts(sections: List[Section]) -> List[Dict[str, Any]]:
    return [section.to_dict() for section in sections]
