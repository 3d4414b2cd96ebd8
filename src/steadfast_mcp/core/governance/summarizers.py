"""Summarizer backends for response governance.

The governor only needs ``enabled`` and ``summarize(text, target_length)``.
Summarization is best effort: any exception a backend raises is caught by the
governor, which then falls back to deterministic truncation.

Example:
    summarizer = HttpSummarizer(
        endpoint="https://example.openai.azure.com",
        api_key=os.environ["SUMMARIZER_API_KEY"],
        deployment="gpt-4o-mini",
    )
    governed = await govern(payload, summarizer=summarizer)
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, Protocol, runtime_checkable

import httpx

from steadfast_mcp.core.errors.summarization import (
    SummarizerResponseError,
    SummarizerUnavailableError,
)

logger = logging.getLogger(__name__)

SummarizeFunc = Callable[[str, int], Awaitable[str]]

SYSTEM_PROMPT = (
    "You are a helpful assistant that summarizes JSON responses from a search "
    "service control plane. Keep the summary concise and focused on the most "
    "important information: counts, names, statuses, errors and anything the "
    "caller must act on."
)

DEFAULT_MAX_INPUT_CHARS = 50_000
DEFAULT_TEMPERATURE = 0.3
DEFAULT_TOP_P = 0.95


@runtime_checkable
class Summarizer(Protocol):
    """Anything that can shrink serialized text to roughly ``target_length`` tokens."""

    @property
    def enabled(self) -> bool: ...

    async def summarize(self, text: str, target_length: int) -> str: ...


class NullSummarizer:
    """Summarizer used when none is configured; the governor skips it."""

    @property
    def enabled(self) -> bool:
        return False

    async def summarize(self, text: str, target_length: int) -> str:
        raise SummarizerUnavailableError("No summarizer configured")


class CallableSummarizer:
    """Adapt a plain ``async def fn(text, target_length) -> str`` into a Summarizer."""

    def __init__(self, func: SummarizeFunc):
        self._func = func

    @property
    def enabled(self) -> bool:
        return True

    async def summarize(self, text: str, target_length: int) -> str:
        return await self._func(text, target_length)


class HttpSummarizer:
    """Summarizer backed by an OpenAI-compatible chat-completions endpoint.

    With ``deployment`` set, requests go to the Azure OpenAI deployment route
    and authenticate with an ``api-key`` header; otherwise to
    ``{endpoint}/chat/completions`` with a bearer token.

    Attributes:
        endpoint: Base URL of the service
        model: Model name sent in the body (non-deployment routes)
        deployment: Azure OpenAI deployment name
        api_version: Azure OpenAI API version query parameter
        timeout: Per-request HTTP timeout in seconds
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        *,
        model: Optional[str] = None,
        deployment: Optional[str] = None,
        api_version: str = "2024-08-01-preview",
        timeout: float = 15.0,
        max_input_chars: int = DEFAULT_MAX_INPUT_CHARS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self._api_key = api_key
        self.model = model
        self.deployment = deployment
        self.api_version = api_version
        self.timeout = timeout
        self.max_input_chars = max_input_chars
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint and self._api_key and (self.model or self.deployment))

    def _url(self) -> str:
        if self.deployment:
            return f"{self.endpoint}/openai/deployments/{self.deployment}/chat/completions"
        return f"{self.endpoint}/chat/completions"

    def _headers(self) -> dict[str, str]:
        if self.deployment:
            return {"api-key": self._api_key, "Content-Type": "application/json"}
        return {"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"}

    def _payload(self, text: str, target_length: int) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": (
                        f"Summarize this response in at most {target_length} tokens:\n\n"
                        f"{text[: self.max_input_chars]}"
                    ),
                },
            ],
            "max_tokens": target_length,
            "temperature": DEFAULT_TEMPERATURE,
            "top_p": DEFAULT_TOP_P,
        }
        if not self.deployment and self.model:
            payload["model"] = self.model
        return payload

    async def summarize(self, text: str, target_length: int) -> str:
        """Request a summary.

        Raises:
            SummarizerUnavailableError: Backend is not configured
            SummarizerResponseError: Backend returned an error or an empty answer
        """
        if not self.enabled:
            raise SummarizerUnavailableError("Summarizer endpoint, key or model missing")

        params = {"api-version": self.api_version} if self.deployment else None
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                self._url(),
                params=params,
                headers=self._headers(),
                json=self._payload(text, target_length),
            )

            if response.status_code >= 400:
                raise SummarizerResponseError(
                    f"Summarizer API error {response.status_code}",
                    status_code=response.status_code,
                )

            data = response.json()

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise SummarizerResponseError("Summarizer response missing choices") from exc

        if not content or not str(content).strip():
            raise SummarizerResponseError("Summarizer returned empty content")

        logger.debug("Summarized %d chars into %d chars", len(text), len(content))
        return str(content)
