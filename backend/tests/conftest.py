import os

import pytest

# Keep test runs from writing a log file or picking up a real key
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("OPENROUTER_API_KEY", "sk-or-test-key")


class FakeLLMClient:
    """Stands in for OpenRouterClient; replies are consumed in order"""

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def complete(self, messages):
        self.calls.append(messages)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


SAMPLE_ITINERARY = """$$$$ Let's Go to Jaipur**
*****Your Detailed Jaipur Travel Itinerary*****

---
$$$$ Travel Guide to Jaipur**
  $$$Time to visit:*
    - October to March for pleasant weather
    - Avoid May and June
  $$$Where to eat:*
    - **LMB**: Famous for sweets
---
$$$$ Day wise Itinerary**
  $$$Day 1: Forts*
    $$Morning*
      - Amber Fort
      $Tip*
      - Hire a guide at the gate
---
$$$$ Highlights**
1. Budget around 3,000 per day
2. Carry cash for markets
"""


@pytest.fixture
def sample_itinerary():
    return SAMPLE_ITINERARY


@pytest.fixture
def fake_llm():
    def factory(*replies):
        return FakeLLMClient(replies)
    return factory


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from travelpal.api.itinerary import limiter
    from travelpal.main import app

    limiter.enabled = False
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    limiter.enabled = True
