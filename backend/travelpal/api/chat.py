from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from travelpal.api.itinerary import limiter, settings
from travelpal.api.schemas import (
    ChatSendRequest,
    ChatSendResponse,
    ExtractRequest,
    ExtractResponse,
)
from travelpal.core.llm.client import LLMError, OpenRouterClient, get_llm_client
from travelpal.core.llm.prompts import CHAT_GREETING, build_chat_messages
from travelpal.core.nlp.conversation import extract_preferences
from travelpal.core.nlp.models import ChatMessage, MessageRole

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/message", response_model=ChatSendResponse,
    responses={502: {"description": "AI model unavailable or returned an unusable reply"}},
    summary="Send a chat message",
    description="Append the user message, relay the transcript to the AI model and return its reply"
)
@limiter.limit(settings.rate_limit(settings.RATE_LIMIT_GENERATE))
async def send_message(
    request: Request,
    payload: ChatSendRequest,
    client: OpenRouterClient = Depends(get_llm_client),
):
    # A new chat starts with the assistant greeting
    conversation = list(payload.conversation) or [
        ChatMessage(role=MessageRole.ASSISTANT, content=CHAT_GREETING, timestamp=datetime.now(timezone.utc))
    ]
    conversation.append(
        ChatMessage(role=MessageRole.USER, content=payload.message, timestamp=datetime.now(timezone.utc))
    )

    try:
        reply = await run_in_threadpool(client.complete, build_chat_messages(conversation))
    except LLMError as e:
        logger.error("chat_message_failed", error=str(e), message_count=len(conversation))
        raise HTTPException(status_code=502, detail="Failed to get response from AI model")

    assistant = ChatMessage(role=MessageRole.ASSISTANT, content=reply, timestamp=datetime.now(timezone.utc))
    conversation.append(assistant)
    logger.info("chat_message_answered", message_count=len(conversation), reply_length=len(reply))
    return ChatSendResponse(message=assistant, conversation=conversation)


@router.post("/extract", response_model=ExtractResponse,
    summary="Extract travel preferences",
    description="Guess destination, dates, preferences and per-day activities from a chat transcript"
)
async def extract_travel_preferences(request: Request, payload: ExtractRequest):
    preferences = extract_preferences(payload.conversation, payload.message)
    if preferences is None:
        logger.info("preferences_not_extracted", message_count=len(payload.conversation))
        return ExtractResponse(preferences=None)

    logger.info(
        "preferences_extracted",
        message_count=len(payload.conversation),
        has_destination=bool(preferences.destination),
        has_dates=preferences.start_date is not None,
        day_count=len(preferences.days),
    )
    return ExtractResponse(preferences=preferences)
