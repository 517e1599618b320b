"""Tests for the chat completion client."""

import json

import httpx
import pytest

from hfchat.client import ChatClient, ChatError
from hfchat.config import ChatConfig


def _client(handler, **overrides) -> ChatClient:
    config = ChatConfig(base_url="https://api.example/v1/", token="hf_test", **overrides)
    return ChatClient(config, transport=httpx.MockTransport(handler))


def test_complete_returns_content():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "hi there"}}]})

    client = _client(handler, model="llama3.2")
    reply = client.complete([{"role": "user", "content": "hello"}])

    assert reply == "hi there"
    assert seen["url"] == "https://api.example/v1/chat/completions"
    assert seen["auth"] == "Bearer hf_test"
    assert seen["body"]["model"] == "llama3.2"
    assert seen["body"]["max_tokens"] == 500
    assert seen["body"]["temperature"] == 0.7
    assert seen["body"]["messages"] == [{"role": "user", "content": "hello"}]


def test_optional_sampling_fields_omitted():
    def handler(request):
        body = json.loads(request.content)
        assert "max_tokens" not in body
        assert "temperature" not in body
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    assert _client(handler, max_tokens=None, temperature=None).complete([]) == "ok"


@pytest.mark.parametrize("status,fragment", [
    (404, "Error 404"),
    (401, "Error 401"),
    (429, "Error 429"),
    (500, "API Error"),
])
def test_http_errors(status, fragment):
    client = _client(lambda request: httpx.Response(status, json={}))
    with pytest.raises(ChatError, match=fragment):
        client.complete([])


def test_connection_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ChatError, match="Connection Error"):
        _client(handler).complete([])


def test_no_choices():
    client = _client(lambda request: httpx.Response(200, json={"choices": []}))
    with pytest.raises(ChatError, match="No response received"):
        client.complete([])


def test_no_content():
    client = _client(lambda request: httpx.Response(200, json={"choices": [{"message": {}}]}))
    with pytest.raises(ChatError, match="No content received"):
        client.complete([])


def test_invalid_json():
    client = _client(lambda request: httpx.Response(200, text="not json"))
    with pytest.raises(ChatError, match="invalid JSON"):
        client.complete([])
