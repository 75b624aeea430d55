"""
Thin client for the OpenRouter chat-completions API.

The itinerary and tag prompts go through here; the reply text is handed to
the parsers unchanged.
"""

import logging
import time
from typing import Dict, List, Optional

import requests

from travelpal.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """The model could not be reached or returned an unusable reply"""


class OpenRouterClient:
    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.OPENROUTER_API_KEY}",
            "HTTP-Referer": self.settings.SITE_URL,
            "X-Title": self.settings.APP_TITLE,
            "Content-Type": "application/json",
        }

    def _post(self, payload: dict) -> requests.Response:
        attempts = self.settings.LLM_MAX_RETRIES + 1
        for attempt in range(1, attempts + 1):
            try:
                response = self.session.post(
                    self.settings.OPENROUTER_URL,
                    json=payload,
                    headers=self._headers(),
                    timeout=self.settings.LLM_TIMEOUT_SECONDS,
                )
                if response.status_code < 500 or attempt == attempts:
                    response.raise_for_status()
                    return response
                logger.warning(f"LLM returned {response.status_code}, retrying ({attempt}/{attempts})")
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt == attempts:
                    raise LLMError(f"Failed to reach AI model: {e}") from e
                logger.warning(f"LLM request failed: {e}, retrying ({attempt}/{attempts})")
            except requests.HTTPError as e:
                raise LLMError(f"AI model request rejected: {e}") from e
            except requests.RequestException as e:
                raise LLMError(f"AI model request failed: {e}") from e
            time.sleep(self.settings.LLM_RETRY_BACKOFF_SECONDS * attempt)
        raise LLMError("Failed to get response from AI model")

    def complete(self, messages: List[Dict[str, str]]) -> str:
        """Send chat messages and return the first choice's text"""
        payload = {"model": self.settings.LLM_MODEL, "messages": messages}
        start = time.time()
        response = self._post(payload)

        try:
            data = response.json()
        except ValueError as e:
            raise LLMError("AI model returned a non-JSON response") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not content:
            logger.error(f"Unexpected AI response shape: {str(data)[:500]}")
            raise LLMError("Invalid response from AI model")

        logger.info(f"LLM completion received in {time.time() - start:.2f}s ({len(content)} chars)")
        return content


def get_llm_client() -> OpenRouterClient:
    return OpenRouterClient()
