"""
Tests for the conversation heuristic extractor
"""

from datetime import date, datetime, timezone

from travelpal.core.nlp.conversation import (
    extract_days,
    extract_preferences,
    normalize_conversation,
    parse_date_range,
)
from travelpal.core.nlp.models import ActivityType, ChatMessage, MessageRole

FINAL = {"role": "assistant", "content": "Here is your plan."}


def user(content):
    return {"role": "user", "content": content}


def assistant(content):
    return {"role": "assistant", "content": content}


class TestExtractPreferences:
    """Keyword rules over the transcript"""

    def test_travel_dates(self):
        conversation = [
            assistant("Where would you like to travel dates"),
            user("15th June 2024 to 20th June 2024"),
        ]
        prefs = extract_preferences(conversation, FINAL)

        assert prefs.start_date == date(2024, 6, 15)
        assert prefs.end_date == date(2024, 6, 20)

    def test_dates_with_dash_and_no_ordinals(self):
        conversation = [assistant("What are your travel dates?"), user("1 March 2025 - 4 March 2025")]
        prefs = extract_preferences(conversation, FINAL)
        assert (prefs.start_date, prefs.end_date) == (date(2025, 3, 1), date(2025, 3, 4))

    def test_destination_first_match_wins(self):
        conversation = [
            assistant("Where would you like to go?"),
            user("Paris"),
            assistant("Any food you love?"),
            user("I love food"),
        ]
        prefs = extract_preferences(conversation, FINAL)
        assert prefs.destination == "Paris"

    def test_destination_is_capitalised_and_ignores_digits(self):
        conversation = [user("3 days please"), user("  kyoto  ")]
        prefs = extract_preferences(conversation, FINAL)
        assert prefs.destination == "Kyoto"

    def test_cuisine_is_repeatable(self):
        conversation = [
            assistant("Which cuisine do you prefer?"),
            user("italian"),
            assistant("Any street food you want to try?"),
            user("Tacos"),
        ]
        prefs = extract_preferences(conversation, FINAL)
        assert prefs.cuisines == ["Italian", "Tacos"]

    def test_place_types_split_on_commas(self):
        conversation = [
            assistant("Which places you like to see?"),
            user("museums, beaches ,old forts"),
        ]
        prefs = extract_preferences(conversation, FINAL)
        assert prefs.place_types == ["Museums", "Beaches", "Old forts"]

    def test_requirement_flags_fire_on_trigger(self):
        conversation = [
            user("Can you tell me how to reach the city?"),
            assistant("Sure. Also pack warm clothes."),
        ]
        prefs = extract_preferences(conversation, FINAL)
        assert prefs.special_requirements == ["Travel guidance", "Packing tips"]

    def test_no_reply_leaves_defaults(self):
        prefs = extract_preferences([assistant("What are your travel dates?")], FINAL)

        assert prefs.start_date is None
        assert prefs.cuisines == []
        assert prefs.destination == ""
        assert prefs.days == []
        assert prefs.personal_interests == []

    def test_unparseable_dates_stay_empty(self):
        conversation = [assistant("travel dates?"), user("sometime next summer")]
        prefs = extract_preferences(conversation, FINAL)
        assert prefs.start_date is None and prefs.end_date is None

    def test_empty_transcript_or_missing_message(self):
        assert extract_preferences([], FINAL) is None
        assert extract_preferences([user("Paris")], None) is None

    def test_accepts_records_and_plain_text_message(self):
        conversation = [
            ChatMessage(role=MessageRole.USER, content="Lisbon", timestamp=datetime.now(timezone.utc)),
        ]
        prefs = extract_preferences(conversation, "no days here")
        assert prefs.destination == "Lisbon"

    def test_malformed_messages_are_skipped(self):
        conversation = [{"role": "robot", "content": "beep"}, {"content": "no role"}, user("Rome")]
        assert len(normalize_conversation(conversation)) == 1
        assert extract_preferences(conversation, FINAL).destination == "Rome"


ITINERARY_MESSAGE = """Here is your trip!

### 🗓️ **Day 1: Arrival & Old Town – 15 June**
**Morning:** Check in at the riad. Drop your bags and rest.
**Afternoon:** Walk the medina souks
Some filler text.

### **Day 2: Desert Trip - 16 June**
**Evening:** Camel ride at sunset. Dinner under the stars.
"""


class TestExtractDays:
    """Day header and activity line heuristics"""

    def test_days_and_activities(self):
        days = extract_days(ITINERARY_MESSAGE)

        assert [d.day_number for d in days] == [1, 2]
        assert days[0].title == "Arrival & Old Town"
        assert days[0].date_label == "15 June"
        assert days[1].date_label == "16 June"
        assert [a.time for a in days[0].activities] == ["Morning", "Afternoon"]
        first = days[0].activities[0]
        assert first.name == "Check in at the riad"
        assert first.description == "Check in at the riad. Drop your bags and rest."
        assert first.type is ActivityType.OTHER
        assert len(days[1].activities) == 1

    def test_name_is_truncated(self):
        detail = "A" * 80
        days = extract_days(f"## **Day 1: Long – Today**\n**Noon:** {detail}")
        assert days[0].activities[0].name == "A" * 50

    def test_dates_follow_start_date(self):
        days = extract_days(ITINERARY_MESSAGE, start_date=date(2024, 6, 15))
        assert [d.date for d in days] == [date(2024, 6, 15), date(2024, 6, 16)]

    def test_no_headers(self):
        assert extract_days("Day 1: arrive\nDay 2: leave") == []
        assert extract_days("") == []

    def test_days_via_preferences(self):
        conversation = [assistant("What are your travel dates?"), user("15th June 2024 to 16th June 2024")]
        prefs = extract_preferences(conversation, assistant(ITINERARY_MESSAGE))

        assert len(prefs.days) == 2
        assert prefs.days[1].date == date(2024, 6, 16)


class TestParseDateRange:

    def test_no_match(self):
        assert parse_date_range("whenever") == (None, None)

    def test_comma_after_month(self):
        assert parse_date_range("2nd May, 2026 to 5th May, 2026") == (date(2026, 5, 2), date(2026, 5, 5))
