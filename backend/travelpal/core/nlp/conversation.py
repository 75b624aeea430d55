"""
Heuristic extraction of trip preferences from a chat transcript.

Used when the assistant was not asked to answer in structured JSON. Every rule
is a keyword or regex guess tuned to how the travel assistant phrases its
questions, so fields stay at their defaults whenever nothing matches.
"""

import logging
import re
from datetime import date, timedelta
from typing import Any, Iterable, List, Optional, Union

import dateparser
from pydantic import ValidationError

from travelpal.core.nlp.models import (
    Activity,
    ActivityType,
    ChatMessage,
    ConversationPreferences,
    ItineraryDay,
    MessageRole,
)

logger = logging.getLogger(__name__)

MessageLike = Union[ChatMessage, dict, str]

DATE_SETTINGS = {
    "DATE_ORDER": "DMY",
    "PREFER_DAY_OF_MONTH": "first",
    "STRICT_PARSING": False,
}

_DESTINATION = re.compile(r"^[A-Za-z\s]+$")
_DATE_RANGE = re.compile(
    r"(\d{1,2}(?:st|nd|rd|th)?\s*[A-Za-z]+,?\s*\d{4})"
    r"\s*(?:to|-|–)\s*"
    r"(\d{1,2}(?:st|nd|rd|th)?\s*[A-Za-z]+,?\s*\d{4})",
    re.IGNORECASE,
)
_ORDINAL = re.compile(r"(\d{1,2})(?:st|nd|rd|th)\b", re.IGNORECASE)

# "### 🗓️ **Day 1: Arrival & Old Town – 15 June**"
_DAY_HEADER = re.compile(
    r"#{2,}\s*(?:\U0001F5D3\uFE0F?)?\s*\*\*Day\s*(\d+):\s*(.+?)\s+[–—-]\s+([^\n]+?)\*\*"
)
# "**Morning:** Walk the ramparts. Stop for coffee."
_ACTIVITY_LINE = re.compile(r"\*\*([^\n]+?):\*\*[ \t]*([^\n]+)")

CUISINE_TRIGGERS = ("cuisine", "food")
PLACE_TRIGGERS = ("interested in visiting", "places you like")
DATE_TRIGGER = "travel dates"

# Fired by the message that mentions them, no reply needed
REQUIREMENT_FLAGS = (
    ("how to reach", "Travel guidance"),
    ("clothes", "Packing tips"),
)

ACTIVITY_NAME_LENGTH = 50


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def _coerce_message(raw: Any) -> Optional[ChatMessage]:
    if isinstance(raw, ChatMessage):
        return raw
    try:
        return ChatMessage.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Skipping malformed chat message: {e.error_count()} errors")
        return None


def normalize_conversation(conversation: Iterable[Any]) -> List[ChatMessage]:
    """Validate raw message dicts into ChatMessage records, dropping bad ones"""
    messages = []
    for raw in conversation or []:
        message = _coerce_message(raw)
        if message is not None:
            messages.append(message)
    return messages


def _next_user_reply(messages: List[ChatMessage], index: int) -> Optional[ChatMessage]:
    for message in messages[index + 1:]:
        if message.role is MessageRole.USER:
            return message
    return None


def _guess_destination(messages: List[ChatMessage]) -> str:
    # Short letters-only answers early in the chat are usually place names
    for message in messages:
        text = message.content.strip()
        if message.role is MessageRole.USER and _DESTINATION.match(text):
            return capitalize(text)
    return ""


def parse_trip_date(text: str) -> Optional[date]:
    cleaned = _ORDINAL.sub(r"\1", text.strip())
    parsed = dateparser.parse(cleaned, settings=DATE_SETTINGS)
    return parsed.date() if parsed else None


def parse_date_range(text: str):
    """``"15th June 2024 to 20th June 2024"`` -> (start, end); (None, None) otherwise"""
    match = _DATE_RANGE.search(text)
    if not match:
        return None, None
    start, end = parse_trip_date(match.group(1)), parse_trip_date(match.group(2))
    if start is None or end is None:
        logger.warning(f"Could not parse travel dates from '{match.group(0)}'")
        return None, None
    return start, end


def extract_days(text: str, start_date: Optional[date] = None) -> List[ItineraryDay]:
    """
    Pull per-day activities out of an assistant itinerary message.

    Looks for day headers such as ``### **Day 2: Museums – 16 June**`` and, in
    the text up to the next header, lines shaped ``**label:** detail``. This
    only understands one heading style and returns an empty list otherwise.
    """
    if not text:
        return []

    headers = list(_DAY_HEADER.finditer(text))
    days = []
    for index, header in enumerate(headers):
        block_end = headers[index + 1].start() if index + 1 < len(headers) else len(text)
        block = text[header.end():block_end]

        activities = []
        for match in _ACTIVITY_LINE.finditer(block):
            label, detail = match.group(1).strip(), match.group(2).strip()
            activities.append(Activity(
                time=label or "Time not specified",
                name=detail.split(".")[0][:ACTIVITY_NAME_LENGTH],
                description=detail,
                type=ActivityType.OTHER,
            ))

        days.append(ItineraryDay(
            day_number=int(header.group(1)),
            title=header.group(2).strip(),
            date_label=header.group(3).strip(),
            date=start_date + timedelta(days=index) if start_date else None,
            activities=activities,
        ))
    return days


def extract_preferences(
    conversation: Iterable[Any],
    message: Optional[MessageLike],
) -> Optional[ConversationPreferences]:
    """
    Scan a transcript once and guess the trip preferences it contains.

    Rules, applied to every message in order:

    - destination: the first user message made only of letters and spaces
    - dates: the first message mentioning "travel dates" makes the next user reply a
      candidate for a ``<day> <month> <year> to <day> <month> <year>`` range
    - cuisines: a message mentioning cuisine/food appends the next user reply
    - place types: "interested in visiting"/"places you like" appends the
      next user reply split on commas
    - special requirements: "how to reach" and "clothes" add fixed labels

    Days come from the trailing ``message``. Returns None when the transcript
    is empty or the trailing message is missing.
    """
    messages = normalize_conversation(conversation)
    if not messages or message is None:
        return None

    if isinstance(message, str):
        final_text = message
    else:
        final = _coerce_message(message)
        final_text = final.content if final else ""

    destination = _guess_destination(messages)
    start_date = end_date = None
    cuisines, place_types, requirements = [], [], []

    for index, msg in enumerate(messages):
        content = msg.content.lower()

        if DATE_TRIGGER in content and start_date is None:
            reply = _next_user_reply(messages, index)
            if reply:
                start, end = parse_date_range(reply.content)
                if start and end:
                    start_date, end_date = start, end

        if any(trigger in content for trigger in CUISINE_TRIGGERS):
            reply = _next_user_reply(messages, index)
            if reply:
                cuisines.append(capitalize(reply.content.strip()))

        if any(trigger in content for trigger in PLACE_TRIGGERS):
            reply = _next_user_reply(messages, index)
            if reply:
                place_types.extend(capitalize(part.strip()) for part in reply.content.split(","))

        for trigger, label in REQUIREMENT_FLAGS:
            if trigger in content:
                requirements.append(label)

    days = extract_days(final_text, start_date)

    logger.info(
        f"Extracted preferences from {len(messages)} messages: "
        f"destination={'yes' if destination else 'no'}, days={len(days)}"
    )
    return ConversationPreferences(
        destination=destination,
        start_date=start_date,
        end_date=end_date,
        cuisines=cuisines,
        place_types=place_types,
        special_requirements=requirements,
        personal_interests=[],
        days=days,
    )
