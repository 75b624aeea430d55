import logging
import re
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from travelpal.api import chat, itinerary
from travelpal.api.itinerary import limiter
from travelpal.core.itinerary.sections import parse_itinerary
from travelpal.core.settings import get_settings
from travelpal.middleware.logging import RequestLoggingMiddleware

VERSION = "1.0.0"

settings = get_settings()

_KEY_PATTERNS = (
    # OpenRouter keys and bearer headers
    (re.compile(r'sk-or-[0-9A-Za-z_-]+'), 'REDACTED'),
    (re.compile(r'(Bearer\s+)[^\s"\']+'), r'\1REDACTED'),
    # generic api keys in query params
    (re.compile(r'([?&](?:key|api_key)=)[^&\s]+'), r'\1REDACTED'),
)


def redact_api_keys(logger, method_name, event_dict):
    """structlog processor scrubbing API keys from every string in the event"""

    def scrub(v):
        if isinstance(v, str):
            for pattern, replacement in _KEY_PATTERNS:
                v = pattern.sub(replacement, v)
            return v
        if isinstance(v, list):
            return [scrub(x) for x in v]
        if isinstance(v, dict):
            return {k: scrub(vv) for k, vv in v.items()}
        return v

    for k, v in list(event_dict.items()):
        event_dict[k] = scrub(v)
    return event_dict


def configure_logging() -> None:
    """Structured JSON logs to console and LOG_FILE"""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_api_keys,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(message)s',  # structlog handles formatting
        handlers=handlers
    )


configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...", model=settings.LLM_MODEL)
    if not settings.OPENROUTER_API_KEY:
        logger.warning("OPENROUTER_API_KEY is not set; itinerary generation will fail")
    yield
    logger.info("Shutting down application...")


app = FastAPI(
    title="TravelPal API",
    description="Chat-driven travel itinerary generation, parsing and export",
    version=VERSION,
    lifespan=lifespan
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize Prometheus metrics instrumentation
Instrumentator().instrument(app).expose(app, endpoint="/metrics")


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


@app.get("/")
def health_check():
    return {"status": "API active", "version": VERSION}


@app.get("/health")
async def health_check_detailed():
    """Detailed health check endpoint"""
    try:
        parser_status = "healthy" if parse_itinerary("$$$$ Health\n- ok") else "degraded"
    except Exception as e:
        logger.error(f"Parser health check failed: {e}")
        parser_status = "unhealthy"

    llm_status = "configured" if settings.OPENROUTER_API_KEY else "unconfigured"

    return {
        "status": "healthy" if parser_status == "healthy" else "degraded",
        "version": VERSION,
        "components": {
            "parser": parser_status,
            "llm": llm_status,
            "api": "healthy"
        },
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


prefix = "/api/v1"

app.include_router(itinerary.router, prefix=prefix, tags=["itineraries"])
app.include_router(chat.router, prefix=prefix, tags=["chat"])
