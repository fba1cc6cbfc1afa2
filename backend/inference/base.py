"""
Abstract base class for all inference backend adapters.

Every backend adapter (OpenAI-compatible, Ollama) implements this interface
so the gateway can treat providers interchangeably. Adapters never raise for
provider trouble: failures come back as ProviderFailure values, which keeps
the gateway's retry and fallback logic plain control flow.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Optional

import httpx

logger = logging.getLogger(__name__)


class FailureKind(Enum):
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    MALFORMED_RESPONSE = "malformed_response"
    AUTH_FAILURE = "auth_failure"
    UNAVAILABLE = "unavailable"  # connection refused, 5xx, other non-2xx


@dataclass(frozen=True)
class ProviderFailure:
    kind: FailureKind
    detail: str = ""
    status_code: Optional[int] = None


@dataclass(frozen=True)
class ProviderEvent:
    """One item of a provider stream: a text delta, or the terminal failure."""
    text: str = ""
    failure: Optional[ProviderFailure] = None


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of a non-streaming completion."""
    text: str = ""
    failure: Optional[ProviderFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def classify_status(status_code: int, body: str = "") -> ProviderFailure:
    """Map a non-2xx HTTP status to a failure kind."""
    detail = body[:200]
    if status_code in (401, 403):
        return ProviderFailure(FailureKind.AUTH_FAILURE, detail, status_code)
    if status_code == 429:
        return ProviderFailure(FailureKind.RATE_LIMITED, detail, status_code)
    if status_code in (408, 504):
        return ProviderFailure(FailureKind.TIMEOUT, detail, status_code)
    return ProviderFailure(FailureKind.UNAVAILABLE, detail, status_code)


def classify_exception(exc: Exception) -> ProviderFailure:
    """Map an httpx transport exception to a failure kind."""
    if isinstance(exc, httpx.TimeoutException):
        return ProviderFailure(FailureKind.TIMEOUT, str(exc) or "request timed out")
    if isinstance(exc, httpx.HTTPStatusError):
        return classify_status(exc.response.status_code, exc.response.text)
    if isinstance(exc, (httpx.DecodingError, ValueError)):
        return ProviderFailure(FailureKind.MALFORMED_RESPONSE, str(exc))
    return ProviderFailure(FailureKind.UNAVAILABLE, f"{type(exc).__name__}: {exc}")


class InferenceBackend(ABC):
    """Abstract inference backend interface.

    Concrete adapters implement the HTTP-specific details for their server type
    while exposing a uniform interface for chat completion and streaming.
    transport is passed through to httpx.AsyncClient (tests use MockTransport).
    """

    def __init__(self, base_url: str, api_key: str = "", default_timeout: float = 60,
                 headers: Optional[dict] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.default_timeout = default_timeout
        self.extra_headers = dict(headers or {})
        self._transport = transport

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout or self.default_timeout,
            headers=self._headers(),
            transport=self._transport,
        )

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json", **self.extra_headers}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    # ── Chat Completion ──

    @abstractmethod
    async def call_llm(
        self,
        model_id: str,
        messages: list[dict],
        max_tokens: int = 1024,
        temperature: float = 0.7,
        timeout: float = None,
    ) -> ProviderResult:
        """Non-streaming chat completion.

        Args:
            model_id: Model identifier as known by the backend.
            messages: OpenAI-format message list.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            timeout: Per-request timeout override.

        Returns:
            ProviderResult with the full reply text, or a failure.
        """
        ...

    @abstractmethod
    def stream_chat(
        self,
        model_id: str,
        messages: list[dict],
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> AsyncIterator[ProviderEvent]:
        """Streaming chat completion.

        Yields ProviderEvent text deltas in order. A stream that cannot be
        completed ends with exactly one event carrying a failure; nothing is
        yielded after it. Closing the iterator early closes the HTTP response.
        """
        ...
