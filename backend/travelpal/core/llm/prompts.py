"""Prompt text sent to the model for itineraries and tags"""

from datetime import date
from typing import Dict, List, Optional

# Shortened example of the marker format the section parser reads
SAMPLE_TEMPLATE = """
$$$$ Let's Go to Manali**
*****Your Detailed Manali Travel Itinerary*****
***(5 Days | Budget-Friendly & Adventure-Focused)*

---
$$$$ Travel Guide to Manali**

  $$$Time to visit:*
    $$April to June and September to November for pleasant weather*
    $$Avoid the June to August peak season on a tight budget*

  $$$How to reach:*
    $$The nearest airport is Bhuntar (KUL), about 50 km from Manali*
    $$Overnight buses run from Delhi and Chandigarh*

  $$$Where to eat:*
    $$Johnson's Cafe: Known for breakfast and trout*

---
$$$$ Day wise Itinerary**

  $$$Day 1: Arrival & Local Immersion*
    $$Morning*
      - **8:00 AM**: Check in and freshen up
      - **9:30 AM**: Breakfast on Mall Road
    $$Evening*
      - Walk to Hadimba Devi Temple

---
$$$$ Highlights**

  $$$Budget Breakdown*
    - Stay: 1,500 per night
  $$$Safety tips*
    - Carry warm layers even in summer
"""

ITINERARY_SECTIONS = (
    "Time to visit",
    "How to reach",
    "Places to visit",
    "Things to do",
    "Where to stay",
    "Where to eat",
    "Travel tips",
)

HIGHLIGHT_SECTIONS = (
    "Budget Breakdown",
    "Transportation tips",
    "Local etiquette",
    "Hidden gems",
    "Safety tips",
)

CHAT_GREETING = "You are TravelPal, a travel assistant. How can I help you today?"

TAG_EXTRACTION_PROMPT = """
You are a travel itinerary tag extractor. Your task is to analyze the travel itinerary text and extract 5-6 relevant tags that best describe the itinerary.

Examples of good tags include:
- Travel styles (Adventure, Luxury, Budget, Family-friendly, Solo travel, etc.)
- Main activities (Hiking, Beach, Sightseeing, Museums, Food tour, etc.)
- Geographical features (Mountain, Coastal, Urban, Rural, etc.)
- Cultural aspects (Historical, Religious, Art, Music, etc.)
- Season or climate (Summer, Winter, Tropical, etc.)

Extract ONLY 5-6 of the most relevant tags that appear in the text. Return ONLY an array of strings in JSON format.

Example output format:
["Adventure", "Hiking", "Mountain", "Budget-friendly", "Summer", "Cultural"]
"""


def build_itinerary_prompt(
    destination: str,
    start_date: Optional[date],
    end_date: Optional[date],
    details: str,
) -> str:
    """User prompt asking for an itinerary in the ``$``-marker format"""
    when = ""
    if start_date and end_date:
        when = f" from {start_date.isoformat()} to {end_date.isoformat()}"

    guide = "\n".join(f"  $$${name}:*\n    -Point1\n    -Point2" for name in ITINERARY_SECTIONS)
    highlights = "\n".join(f"  $$${name}*\n    -Point1\n    -Point2" for name in HIGHLIGHT_SECTIONS)

    return f"""Based on the following conversation, create a travel itinerary for {destination}{when}.
Include activities, places to visit, and any other relevant information. Here are the details: {details}

Format it cleanly for PDF output, without code blocks.
Separate the top-level parts with a line containing only ---.
Start every top-level section name with $$$$, every section name inside it with $$$,
and deeper headings with $$ and $. Put list items on lines starting with -.

$$$$ Travel Guide to {destination}**
{guide}

---
$$$$ Day wise Itinerary**
  $$$Day 1: [Theme]*
    $$Morning*
      - **8:00 AM**: [Activity] - [Short description]

---
$$$$ Highlights**
{highlights}

Example template: {SAMPLE_TEMPLATE}

Strictly follow the example template format and do not add any extra information or code blocks.
"""


def build_itinerary_messages(
    destination: str,
    start_date: Optional[date],
    end_date: Optional[date],
    details: str,
) -> List[Dict[str, str]]:
    return [{"role": "user", "content": build_itinerary_prompt(destination, start_date, end_date, details)}]


def build_tag_messages(itinerary_text: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": TAG_EXTRACTION_PROMPT},
        {"role": "user", "content": itinerary_text},
    ]


def build_chat_messages(conversation) -> List[Dict[str, str]]:
    """Role/content pairs for a chat transcript, oldest first"""
    return [{"role": m.role.value, "content": m.content} for m in conversation]
