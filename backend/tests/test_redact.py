from travelpal.main import redact_api_keys


def test_redact_openrouter_key():
    event = {"event": "calling model with sk-or-v1-abc123DEF"}
    out = redact_api_keys(None, None, event.copy())
    assert out["event"] == "calling model with REDACTED"


def test_redact_bearer_header_in_list():
    event = {"headers": ["Authorization: Bearer secret-token", "X-Title: TravelPal"]}
    out = redact_api_keys(None, None, event.copy())
    assert out["headers"] == ["Authorization: Bearer REDACTED", "X-Title: TravelPal"]


def test_redact_nested_query_key():
    event = {"a": {"b": ["foo", "https://example.com/x?q=1&key=SECRET"]}}
    out = redact_api_keys(None, None, event.copy())
    assert out["a"]["b"] == ["foo", "https://example.com/x?q=1&key=REDACTED"]


def test_non_strings_untouched():
    out = redact_api_keys(None, None, {"count": 3, "ok": True})
    assert out == {"count": 3, "ok": True}
