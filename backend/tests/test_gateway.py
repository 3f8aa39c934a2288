"""
Tests for gateway.py - SDK error translation and tool-call extraction.
The Anthropic client is replaced with an AsyncMock; no network calls are made.
"""
import asyncio
import pytest
import sys
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock

import anthropic
import httpx

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import gateway
from gateway import (
    AuthFailure,
    MalformedRequest,
    ModelError,
    ModelGateway,
    NetworkUnavailable,
    QuotaExceeded,
    Timeout,
    translate_error,
)
from conftest import make_settings

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def status_error(cls, status_code):
    response = httpx.Response(status_code, request=REQUEST)
    return cls("error", response=response, body=None)


def reply(*blocks, stop_reason="tool_use"):
    return SimpleNamespace(content=list(blocks), stop_reason=stop_reason)


def tool_block(name, data):
    return SimpleNamespace(type="tool_use", name=name, input=data)


def gateway_with(create):
    client = SimpleNamespace(messages=SimpleNamespace(create=create))
    return ModelGateway(settings=make_settings(), client=client)


class TestTranslateError:
    """Each SDK failure maps to one gateway error and HTTP status."""

    @pytest.mark.parametrize("error, expected, status", [
        (anthropic.APITimeoutError(request=REQUEST), Timeout, 504),
        (anthropic.APIConnectionError(request=REQUEST), NetworkUnavailable, 503),
        (status_error(anthropic.AuthenticationError, 401), AuthFailure, 401),
        (status_error(anthropic.PermissionDeniedError, 403), AuthFailure, 401),
        (status_error(anthropic.RateLimitError, 429), QuotaExceeded, 429),
        (status_error(anthropic.BadRequestError, 400), MalformedRequest, 400),
        (status_error(anthropic.InternalServerError, 500), ModelError, 500),
    ])
    def test_mapping(self, error, expected, status):
        translated = translate_error(error)
        assert type(translated) is expected
        assert translated.status_code == status
        assert translated.user_message


class TestGenerate:
    """Tests for ModelGateway.generate."""

    def test_returns_tool_input(self):
        create = AsyncMock(return_value=reply(tool_block("create_todo", {"title": "회의"})))
        gateway = gateway_with(create)

        result = asyncio.run(gateway.generate("prompt", {"type": "object"}, "create_todo"))

        assert result == {"title": "회의"}

    def test_forces_the_tool(self):
        create = AsyncMock(return_value=reply(tool_block("create_todo", {})))
        gateway = gateway_with(create)

        asyncio.run(gateway.generate("prompt", {"type": "object"}, "create_todo"))

        kwargs = create.call_args.kwargs
        assert kwargs["tool_choice"] == {"type": "tool", "name": "create_todo"}
        assert kwargs["tools"][0]["input_schema"] == {"type": "object"}
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == 1024

    def test_max_tokens_override(self):
        create = AsyncMock(return_value=reply(tool_block("analyze_todos", {})))
        gateway = gateway_with(create)

        asyncio.run(gateway.generate("prompt", {}, "analyze_todos", max_tokens=2048))

        assert create.call_args.kwargs["max_tokens"] == 2048

    def test_skips_text_blocks(self):
        text = SimpleNamespace(type="text", text="설명")
        create = AsyncMock(return_value=reply(text, tool_block("create_todo", {"title": "운동"})))

        result = asyncio.run(gateway_with(create).generate("p", {}, "create_todo"))

        assert result == {"title": "운동"}

    def test_missing_tool_call_is_model_error(self):
        text = SimpleNamespace(type="text", text="no tool")
        create = AsyncMock(return_value=reply(text, stop_reason="end_turn"))

        with pytest.raises(ModelError):
            asyncio.run(gateway_with(create).generate("p", {}, "create_todo"))

    def test_sdk_error_is_translated(self):
        create = AsyncMock(side_effect=status_error(anthropic.RateLimitError, 429))

        with pytest.raises(QuotaExceeded):
            asyncio.run(gateway_with(create).generate("p", {}, "create_todo"))


class TestConfiguration:
    """Tests for API key detection."""

    @pytest.mark.parametrize("key, configured", [
        ("sk-real", True),
        (None, False),
        ("", False),
        ("your-api-key-here", False),
    ])
    def test_is_configured(self, key, configured):
        assert ModelGateway(settings=make_settings(key)).is_configured is configured


class TestClientCache:
    """Gateways with the same key and timeout share one SDK client."""

    @pytest.fixture(autouse=True)
    def empty_cache(self, monkeypatch):
        monkeypatch.setattr(gateway, "_clients", {})

    def test_same_settings_reuse_client(self):
        first = ModelGateway(settings=make_settings("sk-real")).client
        second = ModelGateway(settings=make_settings("sk-real")).client

        assert first is second
        assert isinstance(first, anthropic.AsyncAnthropic)
        assert first.max_retries == 0

    def test_different_key_gets_own_client(self):
        first = ModelGateway(settings=make_settings("sk-one")).client
        second = ModelGateway(settings=make_settings("sk-two")).client

        assert first is not second

    def test_close_clients_closes_and_forgets(self):
        client = SimpleNamespace(close=AsyncMock())
        gateway._clients[("sk-real", 5.0)] = client

        asyncio.run(gateway.close_clients())

        client.close.assert_awaited_once()
        assert gateway._clients == {}
        assert ModelGateway(settings=make_settings("sk-real")).client is not client
