"""Tests for completion clients, using httpx mock transports."""
from __future__ import annotations

import json

import httpx
import pytest

from interview_ai.config import Settings
from interview_ai.errors import CredentialMissing, UpstreamError, UpstreamTransportError
from interview_ai.models import SamplingConfig
from interview_ai.providers.base import create_client
from interview_ai.providers.llm_http import HTTPCompletionClient
from interview_ai.providers.llm_openai import OpenAIClient


def _completion(content: str | None = "hello") -> dict:
    choices = []
    if content is not None:
        choices.append({
            "index": 0,
            "message": {"role": "assistant", "content": content},
            "finish_reason": "stop",
        })
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4",
        "choices": choices,
    }


class Recorder:
    """MockTransport handler returning a fixed response and recording requests."""

    def __init__(self, status: int = 200, payload: dict | None = None, text: str | None = None):
        self.status = status
        self.payload = payload
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status, text=self.text)
        return httpx.Response(self.status, json=self.payload)


class TestHTTPCompletionClient:
    @pytest.mark.asyncio
    async def test_success(self):
        handler = Recorder(payload=_completion('{"questions": []}'))
        client = HTTPCompletionClient("sk-test", model="gpt-4", base_url="https://llm.test/v1/",
                                      transport=httpx.MockTransport(handler))
        text = await client.complete("sys", "user", SamplingConfig(temperature=0.0, max_tokens=800))
        assert text == '{"questions": []}'

        request = handler.requests[0]
        assert str(request.url) == "https://llm.test/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == "gpt-4"
        assert body["messages"][0] == {"role": "system", "content": "sys"}
        assert body["messages"][1] == {"role": "user", "content": "user"}
        assert body["temperature"] == 0.0
        assert body["max_tokens"] == 800
        assert "top_p" not in body

    @pytest.mark.asyncio
    async def test_non_success_status(self):
        handler = Recorder(status=503, text="service unavailable")
        client = HTTPCompletionClient("sk-test", transport=httpx.MockTransport(handler))
        with pytest.raises(UpstreamError) as exc_info:
            await client.complete("sys", "user")
        assert exc_info.value.status == 503
        assert exc_info.value.body == "service unavailable"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [httpx.ConnectError, httpx.ReadTimeout])
    async def test_transport_failure(self, error):
        def handler(request: httpx.Request) -> httpx.Response:
            raise error("unreachable", request=request)

        client = HTTPCompletionClient("sk-test", transport=httpx.MockTransport(handler))
        with pytest.raises(UpstreamTransportError) as exc_info:
            await client.complete("sys", "user")
        assert isinstance(exc_info.value, UpstreamError)
        assert exc_info.value.status == 0
        assert error.__name__ in exc_info.value.body

    @pytest.mark.asyncio
    async def test_no_choices(self):
        handler = Recorder(payload=_completion(None))
        client = HTTPCompletionClient("sk-test", transport=httpx.MockTransport(handler))
        assert await client.complete("sys", "user") is None

    @pytest.mark.asyncio
    async def test_missing_key(self):
        handler = Recorder(payload=_completion())
        client = HTTPCompletionClient(None, transport=httpx.MockTransport(handler))
        with pytest.raises(CredentialMissing):
            await client.complete("sys", "user")
        assert handler.requests == []

    def test_name(self):
        assert HTTPCompletionClient("k", model="gpt-4o").name() == "http/gpt-4o"


class TestOpenAIClient:
    def _client(self, handler, api_key="sk-test"):
        return OpenAIClient(
            api_key, model="gpt-4", base_url="https://llm.test/v1",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

    @pytest.mark.asyncio
    async def test_success(self):
        handler = Recorder(payload=_completion("graded"))
        client = self._client(handler)
        assert await client.complete("sys", "user", SamplingConfig(temperature=0.0)) == "graded"
        body = json.loads(handler.requests[0].content)
        assert body["temperature"] == 0.0
        assert body["model"] == "gpt-4"

    @pytest.mark.asyncio
    async def test_non_success_status_not_retried(self):
        handler = Recorder(status=503, text="overloaded")
        client = self._client(handler)
        with pytest.raises(UpstreamError) as exc_info:
            await client.complete("sys", "user")
        assert exc_info.value.status == 503
        assert exc_info.value.body == "overloaded"
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(UpstreamTransportError) as exc_info:
            await self._client(handler).complete("sys", "user")
        assert exc_info.value.status == 0
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_no_choices(self):
        handler = Recorder(payload=_completion(None))
        assert await self._client(handler).complete("sys", "user") is None

    @pytest.mark.asyncio
    async def test_missing_key(self):
        client = OpenAIClient(None)
        assert client.client is None
        with pytest.raises(CredentialMissing):
            await client.complete("sys", "user")

    def test_name(self):
        assert OpenAIClient(None, model="gpt-4").name() == "openai/gpt-4"


class TestCreateClient:
    def test_openai(self, monkeypatch):
        monkeypatch.setenv("BACKEND_OPENAI_KEY", "sk-test")
        assert isinstance(create_client(Settings()), OpenAIClient)

    def test_http(self):
        assert isinstance(create_client(Settings(llm_provider="http")), HTTPCompletionClient)

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_client(Settings(llm_provider="carrier-pigeon"))
