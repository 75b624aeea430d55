import time
from contextlib import asynccontextmanager
from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from slowapi import Limiter
from slowapi.util import get_remote_address

from travelpal.api.schemas import (
    ItineraryGenerateRequest,
    ItineraryGenerateResponse,
    ItineraryTextRequest,
    PrintRequest,
    PrintResponse,
    SectionsResponse,
    TabViewResponse,
    TagsResponse,
)
from travelpal.core.itinerary.formatter import build_print_document, build_tab_view
from travelpal.core.itinerary.sections import parse_itinerary, sections_to_dicts
from travelpal.core.llm.client import LLMError, OpenRouterClient, get_llm_client
from travelpal.core.llm.prompts import build_itinerary_messages, build_tag_messages
from travelpal.core.nlp.tags import parse_tag_reply
from travelpal.core.settings import get_settings

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/itineraries", tags=["itineraries"])

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)

settings = get_settings()


@asynccontextmanager
async def performance_timer(operation: str):
    """Context manager for timing operations"""
    start = time.time()
    try:
        yield
    finally:
        duration = time.time() - start
        logger.info("operation_completed", operation=operation, duration_seconds=round(duration, 2))


class ItineraryService:
    """Calls the model for itinerary text and tags"""

    def __init__(self, client: OpenRouterClient):
        self.client = client

    async def generate_text(self, payload: ItineraryGenerateRequest) -> str:
        messages = build_itinerary_messages(
            payload.destination, payload.start_date, payload.end_date, payload.details
        )
        return await run_in_threadpool(self.client.complete, messages)

    async def extract_tags(self, itinerary_text: str) -> List[str]:
        """Tags for an itinerary; an unreachable model yields no tags"""
        try:
            reply = await run_in_threadpool(self.client.complete, build_tag_messages(itinerary_text))
        except LLMError as e:
            logger.warning("tag_extraction_failed", error=str(e))
            return []
        tags = parse_tag_reply(reply, limit=settings.MAX_TAGS)
        logger.info("tags_extracted", tag_count=len(tags))
        return tags


@router.post("/parse", response_model=SectionsResponse,
    summary="Parse itinerary text",
    description="Convert marker-formatted itinerary text into a section tree"
)
@limiter.limit(settings.rate_limit(settings.RATE_LIMIT_PARSE))
async def parse_itinerary_text(request: Request, payload: ItineraryTextRequest):
    async with performance_timer("itinerary_parse"):
        sections = parse_itinerary(payload.text)
        logger.info("itinerary_parsed", text_length=len(payload.text), section_count=len(sections))
        return SectionsResponse(sections=sections_to_dicts(sections), section_count=len(sections))


@router.post("/view", response_model=TabViewResponse,
    summary="Tabbed view model",
    description="Overview tab plus one tab per top-level section"
)
@limiter.limit(settings.rate_limit(settings.RATE_LIMIT_PARSE))
async def itinerary_view(request: Request, payload: ItineraryTextRequest):
    view = build_tab_view(parse_itinerary(payload.text))
    return TabViewResponse(**view.to_dict())


@router.post("/print", response_model=PrintResponse,
    summary="Printable document",
    description="Ordered heading/paragraph/list blocks for PDF export"
)
@limiter.limit(settings.rate_limit(settings.RATE_LIMIT_PARSE))
async def itinerary_print(request: Request, payload: PrintRequest):
    blocks = build_print_document(parse_itinerary(payload.text), title=payload.title)
    logger.info("print_document_built", block_count=len(blocks))
    return PrintResponse(title=payload.title, blocks=[b.to_dict() for b in blocks])


@router.post("/generate",
    response_model=ItineraryGenerateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        422: {"description": "Invalid request format or parameters"},
        429: {"description": "Rate limit exceeded"},
        502: {"description": "AI model unavailable or returned an unusable reply"},
    },
    summary="Generate a travel itinerary",
    description="Ask the AI model for a marker-formatted itinerary, then parse and tag it"
)
@limiter.limit(settings.rate_limit(settings.RATE_LIMIT_GENERATE))
async def generate_itinerary(
    request: Request,
    payload: ItineraryGenerateRequest,
    client: OpenRouterClient = Depends(get_llm_client),
):
    async with performance_timer("itinerary_generation"):
        service = ItineraryService(client)
        try:
            raw = await service.generate_text(payload)
        except LLMError as e:
            logger.error("itinerary_generation_failed", error=str(e), destination=payload.destination)
            raise HTTPException(status_code=502, detail="Failed to process itinerary, please try again")

        sections = parse_itinerary(raw)
        tags = await service.extract_tags(raw)

        logger.info(
            "itinerary_generated",
            destination=payload.destination,
            raw_length=len(raw),
            section_count=len(sections),
            tags=tags,
        )
        return ItineraryGenerateResponse(
            title=payload.title or f"Trip to {payload.destination}",
            destination=payload.destination,
            start_date=payload.start_date,
            end_date=payload.end_date,
            raw_response=raw,
            sections=sections_to_dicts(sections),
            tags=tags,
        )


@router.post("/tags", response_model=TagsResponse,
    summary="Re-extract tags",
    description="Ask the AI model for tags describing stored itinerary text"
)
@limiter.limit(settings.rate_limit(settings.RATE_LIMIT_GENERATE))
async def refresh_tags(
    request: Request,
    payload: ItineraryTextRequest,
    client: OpenRouterClient = Depends(get_llm_client),
):
    try:
        reply = await run_in_threadpool(client.complete, build_tag_messages(payload.text))
    except LLMError as e:
        logger.error("tag_refresh_failed", error=str(e))
        raise HTTPException(status_code=502, detail="Failed to extract tags")
    return TagsResponse(tags=parse_tag_reply(reply, limit=settings.MAX_TAGS))
