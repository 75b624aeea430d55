from functools import lru_cache
from pathlib import Path
from typing import Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # LLM provider
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    LLM_MODEL: str = "meta-llama/llama-4-maverick:free"
    LLM_TIMEOUT_SECONDS: float = 60.0
    LLM_MAX_RETRIES: int = 2
    LLM_RETRY_BACKOFF_SECONDS: float = 1.0
    SITE_URL: str = "http://localhost:3000"  # sent as HTTP-Referer
    APP_TITLE: str = "TravelPal"

    # Parsing limits
    MAX_TEXT_LENGTH: int = 50000
    MAX_CONVERSATION_MESSAGES: int = 200
    MAX_TAGS: int = 6

    # Rate Limiting
    ENABLE_RATE_LIMITING: bool = True
    RATE_LIMIT_GENERATE: str = "5/minute"
    RATE_LIMIT_PARSE: str = "60/minute"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "app.log"

    # CORS
    ALLOWED_ORIGINS: Union[list, str] = ["http://localhost:3000", "http://localhost:3001"]

    @field_validator('ALLOWED_ORIGINS', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse ALLOWED_ORIGINS from comma-separated string or list"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @field_validator('LLM_MAX_RETRIES')
    @classmethod
    def validate_retries(cls, v):
        if v < 0:
            raise ValueError("LLM_MAX_RETRIES cannot be negative")
        return v

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parents[2] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def rate_limit(self, limit: str) -> str:
        return limit if self.ENABLE_RATE_LIMITING else "1000/minute"


@lru_cache
def get_settings() -> Settings:
    return Settings()
