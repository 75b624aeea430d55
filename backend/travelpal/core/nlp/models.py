import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ActivityType(str, Enum):
    ATTRACTION = "attraction"
    FOOD = "food"
    TRANSPORT = "transport"
    ACCOMMODATION = "accommodation"
    OTHER = "other"


class ChatMessage(BaseModel):
    role: MessageRole
    content: str
    timestamp: Optional[dt.datetime] = None

    @field_validator("content", mode="before")
    @classmethod
    def coerce_content(cls, v):
        """Missing content is treated as an empty message"""
        return "" if v is None else v


class Activity(BaseModel):
    time: str
    name: str
    description: str
    location: Optional[str] = None
    type: ActivityType = ActivityType.OTHER


class ItineraryDay(BaseModel):
    day_number: int
    title: str = ""
    date_label: str = ""
    date: Optional[dt.date] = None
    activities: List[Activity] = Field(default_factory=list)


class ConversationPreferences(BaseModel):
    """Best-effort trip preferences recovered from a chat transcript"""

    destination: str = ""
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    cuisines: List[str] = Field(default_factory=list)
    place_types: List[str] = Field(default_factory=list)
    special_requirements: List[str] = Field(default_factory=list)
    personal_interests: List[str] = Field(default_factory=list)
    days: List[ItineraryDay] = Field(default_factory=list)
