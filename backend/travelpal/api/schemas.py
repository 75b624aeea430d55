from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from travelpal.core.nlp.models import ChatMessage, ConversationPreferences
from travelpal.core.settings import get_settings

SUSPICIOUS_PATTERNS = ['<script>', 'javascript:', 'data:text/html']


def _check_text(v: str, what: str) -> str:
    if not v or not v.strip():
        raise ValueError(f"{what} cannot be empty")
    if len(v) > get_settings().MAX_TEXT_LENGTH:
        raise ValueError(f"{what} too long (max {get_settings().MAX_TEXT_LENGTH} characters)")
    # Check for potentially malicious content
    if any(pattern in v.lower() for pattern in SUSPICIOUS_PATTERNS):
        raise ValueError(f"{what} contains invalid content")
    return v

# ===== ITINERARY TEXT SCHEMAS =====

class ItineraryTextRequest(BaseModel):
    text: str = Field(..., description="Raw itinerary text as returned by the AI model")

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        return _check_text(v, "Itinerary text")

class PrintRequest(ItineraryTextRequest):
    title: Optional[str] = Field(None, max_length=200)

class SectionsResponse(BaseModel):
    sections: List[Dict[str, Any]]
    section_count: int

class TabViewResponse(BaseModel):
    activeTab: str
    tabs: List[Dict[str, Any]]

class PrintResponse(BaseModel):
    title: Optional[str] = None
    blocks: List[Dict[str, Any]]

class TagsResponse(BaseModel):
    tags: List[str]

# ===== GENERATION SCHEMAS =====

class ItineraryGenerateRequest(BaseModel):
    destination: str = Field(..., min_length=1, max_length=200)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    details: str = Field("", description="Conversation summary or free-form preferences")
    title: Optional[str] = Field(None, max_length=200)

    @field_validator('destination')
    @classmethod
    def validate_destination(cls, v):
        return _check_text(v, "Destination").strip()

    @field_validator('details')
    @classmethod
    def validate_details(cls, v):
        if v and any(pattern in v.lower() for pattern in SUSPICIOUS_PATTERNS):
            raise ValueError("Details contain invalid content")
        return v

    @model_validator(mode='after')
    def validate_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self

class ItineraryGenerateResponse(BaseModel):
    title: str
    destination: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    raw_response: str
    sections: List[Dict[str, Any]]
    tags: List[str]

# ===== CHAT SCHEMAS =====

class ExtractRequest(BaseModel):
    conversation: List[ChatMessage] = Field(default_factory=list)
    message: Optional[ChatMessage] = None

    @field_validator('conversation')
    @classmethod
    def validate_conversation(cls, v):
        limit = get_settings().MAX_CONVERSATION_MESSAGES
        if len(v) > limit:
            raise ValueError(f"Conversation too long (max {limit} messages)")
        return v

class ExtractResponse(BaseModel):
    preferences: Optional[ConversationPreferences] = None

class ChatSendRequest(BaseModel):
    conversation: List[ChatMessage] = Field(default_factory=list)
    message: str = Field(..., description="New user message")

    @field_validator('conversation')
    @classmethod
    def validate_conversation(cls, v):
        limit = get_settings().MAX_CONVERSATION_MESSAGES
        if len(v) > limit:
            raise ValueError(f"Conversation too long (max {limit} messages)")
        return v

    @field_validator('message')
    @classmethod
    def validate_message(cls, v):
        return _check_text(v, "Message")

class ChatSendResponse(BaseModel):
    message: ChatMessage
    conversation: List[ChatMessage]
