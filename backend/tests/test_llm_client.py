"""
Tests for the OpenRouter client, with the HTTP session mocked out
"""

from unittest.mock import Mock, patch

import pytest
import requests

from travelpal.core.llm.client import LLMError, OpenRouterClient
from travelpal.core.llm.prompts import build_itinerary_messages, build_tag_messages
from travelpal.core.settings import Settings


def make_response(status_code=200, payload=None, json_error=False):
    response = Mock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    else:
        response.raise_for_status.return_value = None
    return response


def ok(content):
    return make_response(payload={"choices": [{"message": {"content": content}}]})


@pytest.fixture
def settings():
    return Settings(
        OPENROUTER_API_KEY="sk-or-unit",
        LLM_MODEL="test/model",
        LLM_MAX_RETRIES=2,
        LLM_RETRY_BACKOFF_SECONDS=0,
    )


class TestOpenRouterClient:

    def test_complete_returns_content(self, settings):
        session = Mock()
        session.post.return_value = ok("$$$$ Trip")
        client = OpenRouterClient(settings, session=session)

        assert client.complete([{"role": "user", "content": "hi"}]) == "$$$$ Trip"

        _, kwargs = session.post.call_args
        assert kwargs["json"] == {"model": "test/model", "messages": [{"role": "user", "content": "hi"}]}
        assert kwargs["headers"]["Authorization"] == "Bearer sk-or-unit"
        assert kwargs["headers"]["X-Title"] == "TravelPal"
        assert kwargs["timeout"] == settings.LLM_TIMEOUT_SECONDS

    def test_retries_server_errors(self, settings):
        session = Mock()
        session.post.side_effect = [make_response(503), ok("done")]
        client = OpenRouterClient(settings, session=session)

        assert client.complete([]) == "done"
        assert session.post.call_count == 2

    def test_retries_connection_errors_then_gives_up(self, settings):
        session = Mock()
        session.post.side_effect = requests.ConnectionError("down")
        client = OpenRouterClient(settings, session=session)

        with pytest.raises(LLMError, match="Failed to reach AI model"):
            client.complete([])
        assert session.post.call_count == 3

    def test_client_error_is_not_retried(self, settings):
        session = Mock()
        session.post.return_value = make_response(401)
        client = OpenRouterClient(settings, session=session)

        with pytest.raises(LLMError, match="rejected"):
            client.complete([])
        assert session.post.call_count == 1

    @pytest.mark.parametrize("error", [
        requests.exceptions.ChunkedEncodingError("broken"),
        requests.exceptions.InvalidURL("bad url"),
        requests.exceptions.TooManyRedirects("loop"),
    ])
    def test_other_request_errors_become_llm_errors(self, settings, error):
        session = Mock()
        session.post.side_effect = error
        client = OpenRouterClient(settings, session=session)

        with pytest.raises(LLMError, match="request failed"):
            client.complete([])
        assert session.post.call_count == 1

    @pytest.mark.parametrize("payload", [{}, {"choices": []}, {"choices": [{"message": {"content": ""}}]}, None])
    def test_unusable_reply(self, settings, payload):
        session = Mock()
        session.post.return_value = make_response(payload=payload)
        with pytest.raises(LLMError, match="Invalid response"):
            OpenRouterClient(settings, session=session).complete([])

    def test_non_json_reply(self, settings):
        session = Mock()
        session.post.return_value = make_response(json_error=True)
        with pytest.raises(LLMError, match="non-JSON"):
            OpenRouterClient(settings, session=session).complete([])

    def test_backoff_sleeps_between_attempts(self, settings):
        session = Mock()
        session.post.side_effect = [requests.Timeout("slow"), ok("done")]
        with patch("travelpal.core.llm.client.time.sleep") as sleep:
            assert OpenRouterClient(settings, session=session).complete([]) == "done"
        sleep.assert_called_once()


class TestPrompts:

    def test_itinerary_prompt_mentions_markers_and_trip(self):
        from datetime import date

        [message] = build_itinerary_messages("Jaipur", date(2024, 6, 15), date(2024, 6, 18), "loves forts")
        content = message["content"]

        assert message["role"] == "user"
        assert "Jaipur from 2024-06-15 to 2024-06-18" in content
        assert "$$$$ Travel Guide to Jaipur**" in content
        assert "$$$Where to eat:*" in content
        assert "loves forts" in content

    def test_itinerary_prompt_without_dates(self):
        [message] = build_itinerary_messages("Goa", None, None, "")
        assert "itinerary for Goa." in message["content"]

    def test_tag_messages(self):
        system, user = build_tag_messages("$$$$ Trip")
        assert system["role"] == "system" and "tag extractor" in system["content"]
        assert user == {"role": "user", "content": "$$$$ Trip"}
