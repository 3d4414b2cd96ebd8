"""Tests for summarizer backends, using httpx.MockTransport for HTTP."""

from __future__ import annotations

import json

import httpx
import pytest

from steadfast_mcp.core.errors import (
    SummarizationError,
    SummarizerResponseError,
    SummarizerUnavailableError,
)
from steadfast_mcp.core.governance import (
    GovernanceBudget,
    HttpSummarizer,
    NullSummarizer,
    ResponseMode,
    Summarizer,
    govern,
)


def completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def recording_transport(status: int = 200, body: dict | None = None):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status, json=body if body is not None else completion("short summary"))

    return httpx.MockTransport(handler), seen


class TestHttpSummarizer:
    """Tests for the chat-completions summarizer."""

    @pytest.mark.asyncio
    async def test_azure_deployment_request_shape(self):
        transport, seen = recording_transport()
        summarizer = HttpSummarizer(
            "https://example.openai.azure.com/",
            "secret",
            deployment="gpt-4o-mini",
            transport=transport,
        )

        result = await summarizer.summarize("x" * 60_000, 800)

        assert result == "short summary"
        request = seen[0]
        assert request.url.path == "/openai/deployments/gpt-4o-mini/chat/completions"
        assert request.url.params["api-version"] == "2024-08-01-preview"
        assert request.headers["api-key"] == "secret"
        body = json.loads(request.content)
        assert body["max_tokens"] == 800
        assert body["temperature"] == 0.3
        assert body["messages"][0]["role"] == "system"
        # Input is capped before sending
        assert body["messages"][1]["content"].count("x") == 50_000

    @pytest.mark.asyncio
    async def test_openai_style_request(self):
        transport, seen = recording_transport()
        summarizer = HttpSummarizer("https://api.example.com/v1", "tok", model="small", transport=transport)

        await summarizer.summarize("text", 100)

        request = seen[0]
        assert request.url.path == "/v1/chat/completions"
        assert request.headers["authorization"] == "Bearer tok"
        assert json.loads(request.content)["model"] == "small"

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        transport, _ = recording_transport(status=429, body={"error": "slow down"})
        summarizer = HttpSummarizer("https://api.example.com", "tok", model="m", transport=transport)

        with pytest.raises(SummarizerResponseError) as exc_info:
            await summarizer.summarize("text", 100)
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_empty_content_raises(self):
        transport, _ = recording_transport(body=completion(""))
        summarizer = HttpSummarizer("https://api.example.com", "tok", model="m", transport=transport)

        with pytest.raises(SummarizationError):
            await summarizer.summarize("text", 100)

    @pytest.mark.asyncio
    async def test_malformed_body_raises(self):
        transport, _ = recording_transport(body={"unexpected": True})
        summarizer = HttpSummarizer("https://api.example.com", "tok", model="m", transport=transport)

        with pytest.raises(SummarizerResponseError):
            await summarizer.summarize("text", 100)

    @pytest.mark.asyncio
    async def test_incomplete_config_is_disabled(self):
        summarizer = HttpSummarizer("https://api.example.com", "tok")
        assert summarizer.enabled is False
        with pytest.raises(SummarizerUnavailableError):
            await summarizer.summarize("text", 100)

    def test_protocol_conformance(self):
        assert isinstance(NullSummarizer(), Summarizer)
        assert isinstance(HttpSummarizer("https://a", "k", model="m"), Summarizer)


class TestGovernWithHttpSummarizer:
    """End-to-end governance through the HTTP summarizer."""

    @pytest.mark.asyncio
    async def test_backend_failure_truncates(self):
        transport, _ = recording_transport(status=500, body={"error": "down"})
        summarizer = HttpSummarizer("https://api.example.com", "tok", model="m", transport=transport)
        budget = GovernanceBudget(threshold_bytes=100, max_chars=500)

        governed = await govern(["item"] * 200, budget, summarizer=summarizer)

        assert governed.mode is ResponseMode.TRUNCATED

    @pytest.mark.asyncio
    async def test_backend_success_summarizes(self):
        transport, _ = recording_transport()
        summarizer = HttpSummarizer("https://api.example.com", "tok", model="m", transport=transport)
        budget = GovernanceBudget(threshold_bytes=100, max_chars=500)

        governed = await govern(["item"] * 200, budget, summarizer=summarizer)

        assert governed.mode is ResponseMode.SUMMARIZED
        assert governed.payload == "short summary"
