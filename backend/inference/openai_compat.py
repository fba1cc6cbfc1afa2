"""
OpenAI-compatible inference backend adapter.

Covers any server that implements the OpenAI API contract:
  - OpenRouter (hosted, bearer auth, attribution headers)
  - vLLM, LM Studio, text-generation-webui
  - Any other /v1/chat/completions server
"""

import json
import logging
from typing import AsyncIterator, Optional

import httpx

from inference.base import (
    FailureKind, InferenceBackend, ProviderEvent, ProviderFailure, ProviderResult,
    classify_exception, classify_status,
)

logger = logging.getLogger(__name__)


def _delta_text(chunk) -> Optional[str]:
    """Content delta of one SSE chunk, "" for keep-alives, None if misshapen."""
    if not isinstance(chunk, dict):
        return None
    choices = chunk.get("choices")
    if not choices:
        return ""
    if not isinstance(choices, list) or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get("delta") or {}
    if not isinstance(delta, dict):
        return None
    content = delta.get("content") or ""
    return content if isinstance(content, str) else None


class OpenAICompatBackend(InferenceBackend):
    """Backend adapter for OpenAI-compatible inference servers."""

    def _payload(self, model_id: str, messages: list[dict], max_tokens: int,
                 temperature: float, stream: bool) -> dict:
        return {
            "model": model_id,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stream": stream,
        }

    # ── Chat Completion ──

    async def call_llm(
        self,
        model_id: str,
        messages: list[dict],
        max_tokens: int = 1024,
        temperature: float = 0.7,
        timeout: float = None,
    ) -> ProviderResult:
        """Non-streaming chat completion via /v1/chat/completions."""
        payload = self._payload(model_id, messages, max_tokens, temperature, stream=False)
        try:
            async with self._client(timeout) as client:
                resp = await client.post(
                    f"{self.base_url}/v1/chat/completions", json=payload,
                )
                if resp.status_code >= 400:
                    return ProviderResult(failure=classify_status(resp.status_code, resp.text))
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            return ProviderResult(failure=classify_exception(e))

        try:
            content = data["choices"][0]["message"].get("content") or ""
        except (KeyError, IndexError, TypeError, AttributeError):
            return ProviderResult(failure=ProviderFailure(
                FailureKind.MALFORMED_RESPONSE, "response has no choices[0].message",
            ))
        if not isinstance(content, str):
            return ProviderResult(failure=ProviderFailure(
                FailureKind.MALFORMED_RESPONSE, "message content is not text",
            ))
        if not content.strip():
            return ProviderResult(failure=ProviderFailure(
                FailureKind.MALFORMED_RESPONSE, "empty completion",
            ))
        return ProviderResult(text=content)

    async def stream_chat(
        self,
        model_id: str,
        messages: list[dict],
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> AsyncIterator[ProviderEvent]:
        """Streaming chat completion via /v1/chat/completions with SSE.

        Parses the server-sent events stream and yields each content delta.
        The stream must end with `data: [DONE]`; anything else is malformed.
        """
        payload = self._payload(model_id, messages, max_tokens, temperature, stream=True)
        produced = False
        try:
            async with self._client() as client:
                async with client.stream(
                    "POST", f"{self.base_url}/v1/chat/completions", json=payload,
                ) as resp:
                    if resp.status_code >= 400:
                        body = (await resp.aread()).decode(errors="replace")
                        yield ProviderEvent(failure=classify_status(resp.status_code, body))
                        return
                    async for line in resp.aiter_lines():
                        if not line.startswith("data:"):
                            continue
                        data = line[5:].strip()
                        if data == "[DONE]":
                            if not produced:
                                yield ProviderEvent(failure=ProviderFailure(
                                    FailureKind.MALFORMED_RESPONSE, "stream produced no content",
                                ))
                            return
                        try:
                            chunk = json.loads(data)
                        except json.JSONDecodeError:
                            yield ProviderEvent(failure=ProviderFailure(
                                FailureKind.MALFORMED_RESPONSE, f"undecodable chunk: {data[:80]}",
                            ))
                            return
                        if isinstance(chunk, dict) and chunk.get("error"):
                            yield ProviderEvent(failure=ProviderFailure(
                                FailureKind.MALFORMED_RESPONSE, str(chunk["error"])[:200],
                            ))
                            return
                        content = _delta_text(chunk)
                        if content is None:
                            yield ProviderEvent(failure=ProviderFailure(
                                FailureKind.MALFORMED_RESPONSE, f"misshapen chunk: {data[:80]}",
                            ))
                            return
                        if content:
                            produced = True
                            yield ProviderEvent(text=content)
        except httpx.HTTPError as e:
            yield ProviderEvent(failure=classify_exception(e))
            return
        yield ProviderEvent(failure=ProviderFailure(
            FailureKind.MALFORMED_RESPONSE, "stream ended without [DONE]",
        ))
