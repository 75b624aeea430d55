"""
Render parsed itinerary sections for the UI and for printable export.

Two shapes are produced from the same section tree:

- a tab view model (an ``overview`` tab with one card per section, then one
  tab per top-level section) for the interactive itinerary page
- a flat list of print blocks (headings, paragraphs, bullets, numbered items)
  that the PDF exporter lays out in order

Inline ``**bold**`` markup is split into alternating plain and bold spans so
renderers never have to re-parse it.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from travelpal.core.itinerary.sections import (
    Section,
    SectionIcon,
    SubSection,
    SubSubSection,
    SubSubSubSection,
)

AnySection = Union[Section, SubSection, SubSubSection, SubSubSubSection]

EMPHASIS = "**"
OVERVIEW_TAB_ID = "overview"
SUMMARY_LENGTH = 160

_NUMBERED_LINE = re.compile(r"^(\d+)\.\s*(.*)$")
_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


@dataclass
class Span:
    text: str
    bold: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "bold": self.bold}


class BlockKind(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    BULLET = "bullet"
    NUMBERED = "numbered"


@dataclass
class Block:
    kind: BlockKind
    text: str
    level: int
    spans: List[Span] = field(default_factory=list)
    number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "kind": self.kind.value,
            "text": self.text,
            "level": self.level,
            "spans": [s.to_dict() for s in self.spans],
        }
        if self.number is not None:
            data["number"] = self.number
        return data


@dataclass
class SectionCard:
    tab_id: str
    title: str
    icon: SectionIcon
    summary: str
    bullet_count: int
    sub_section_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tabId": self.tab_id,
            "title": self.title,
            "icon": self.icon.value,
            "summary": self.summary,
            "bulletCount": self.bullet_count,
            "subSectionCount": self.sub_section_count,
        }


@dataclass
class Tab:
    tab_id: str
    title: str
    icon: SectionIcon
    blocks: List[Block] = field(default_factory=list)
    cards: List[SectionCard] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.tab_id,
            "title": self.title,
            "icon": self.icon.value,
            "blocks": [b.to_dict() for b in self.blocks],
            "cards": [c.to_dict() for c in self.cards],
        }


@dataclass
class TabView:
    tabs: List[Tab]
    active_tab: str = OVERVIEW_TAB_ID

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activeTab": self.active_tab,
            "tabs": [t.to_dict() for t in self.tabs],
        }


def split_emphasis(text: str) -> List[Span]:
    """
    Split ``**bold**`` markup into spans.

    Pieces alternate plain/bold in source order. An unpaired trailing ``**``
    keeps its text plain instead of swallowing it.
    """
    parts = text.split(EMPHASIS)
    if len(parts) % 2 == 0:
        # Odd number of delimiters: rejoin the unpaired tail as plain text
        parts = parts[:-2] + [parts[-2] + EMPHASIS + parts[-1]]

    spans = []
    for index, part in enumerate(parts):
        bold = index % 2 == 1
        if not part and not bold:
            continue
        spans.append(Span(text=part, bold=bold))
    return spans


def plain_text(text: str) -> str:
    return "".join(span.text for span in split_emphasis(text))


def _children(node: AnySection) -> List[AnySection]:
    return list(getattr(node, "sub_sections", []))


def _content_block(line: str, level: int) -> Block:
    match = _NUMBERED_LINE.match(line)
    if match:
        body = match.group(2)
        return Block(
            kind=BlockKind.NUMBERED,
            text=plain_text(body),
            level=level,
            spans=split_emphasis(body),
            number=int(match.group(1)),
        )
    return Block(
        kind=BlockKind.PARAGRAPH,
        text=plain_text(line),
        level=level,
        spans=split_emphasis(line),
    )


def _node_blocks(node: AnySection, level: int) -> List[Block]:
    blocks = []
    if node.title:
        blocks.append(Block(
            kind=BlockKind.HEADING,
            text=plain_text(node.title),
            level=level,
            spans=split_emphasis(node.title),
        ))
    blocks.extend(_content_block(line, level) for line in node.content)
    blocks.extend(
        Block(kind=BlockKind.BULLET, text=plain_text(b), level=level, spans=split_emphasis(b))
        for b in node.bullet_points
    )
    for child in _children(node):
        blocks.extend(_node_blocks(child, level + 1))
    return blocks


def build_print_document(sections: List[Section], title: Optional[str] = None) -> List[Block]:
    """Flatten the tree depth-first into printable blocks, in source order"""
    blocks = []
    if title:
        blocks.append(Block(
            kind=BlockKind.HEADING,
            text=plain_text(title),
            level=0,
            spans=split_emphasis(title),
        ))
    for section in sections:
        blocks.extend(_node_blocks(section, 1))
    return blocks


def slugify(title: str) -> str:
    return _SLUG_CHARS.sub("-", plain_text(title).lower()).strip("-")


def _tab_ids(sections: List[Section]) -> List[str]:
    ids, used = [], {OVERVIEW_TAB_ID}
    for index, section in enumerate(sections, 1):
        base = slugify(section.title) or f"section-{index}"
        candidate, suffix = base, 1
        while candidate in used:
            suffix += 1
            candidate = f"{base}-{suffix}"
        used.add(candidate)
        ids.append(candidate)
    return ids


def _summary(section: Section) -> str:
    source = section.content or section.bullet_points
    if not source:
        source = [sub.title for sub in section.sub_sections]
    text = " ".join(plain_text(line) for line in source).strip()
    if len(text) > SUMMARY_LENGTH:
        text = text[:SUMMARY_LENGTH].rstrip() + "..."
    return text


def build_tab_view(sections: List[Section]) -> TabView:
    """Overview tab with a card per section, followed by one tab per section"""
    tab_ids = _tab_ids(sections)
    cards = [
        SectionCard(
            tab_id=tab_id,
            title=section.title,
            icon=section.icon,
            summary=_summary(section),
            bullet_count=len(section.bullet_points),
            sub_section_count=len(section.sub_sections),
        )
        for tab_id, section in zip(tab_ids, sections)
    ]
    tabs = [Tab(tab_id=OVERVIEW_TAB_ID, title="Overview", icon=SectionIcon.INFO, cards=cards)]
    for tab_id, section in zip(tab_ids, sections):
        tabs.append(Tab(
            tab_id=tab_id,
            title=section.title,
            icon=section.icon,
            blocks=_node_blocks(section, 1),
        ))
    return TabView(tabs=tabs)


def section_outline(sections: List[Section]) -> List[Dict[str, Any]]:
    """Titles in order with per-node content and bullet counts"""
    def outline(node: AnySection, depth: int) -> Dict[str, Any]:
        return {
            "title": node.title,
            "depth": depth,
            "content_count": len(node.content),
            "bullet_count": len(node.bullet_points),
            "children": [outline(child, depth + 1) for child in _children(node)],
        }

    return [outline(section, 1) for section in sections]


_DUMP_LABELS = ("SECTION", "SUB-SECTION", "SUB-SUB-SECTION", "SUB-SUB-SUB-SECTION")


def format_parsed_data(sections: List[Section]) -> str:
    """Indented plain-text dump of the tree, used for logs and debugging"""
    lines = []

    def dump(node: AnySection, depth: int) -> None:
        indent = "  " * depth
        lines.append(f"{indent}{_DUMP_LABELS[depth]}: {node.title}")
        lines.append(f"{indent}CONTENT: " + "\n".join(node.content))
        lines.append(f"{indent}BULLET POINTS: " + ", ".join(node.bullet_points))
        for child in _children(node):
            dump(child, depth + 1)

    for section in sections:
        dump(section, 0)
        lines.append("---")
    return "\n".join(lines) + "\n" if lines else ""
