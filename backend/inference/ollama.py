"""
Ollama inference backend adapter.

Wraps Ollama's native /api/chat endpoint and normalizes requests and
responses so the gateway sees the same interface as the OpenAI-compatible
adapter. Used as the local, last-resort provider in the fallback chains.
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


def _openai_messages_to_ollama(messages: list[dict]) -> list[dict]:
    """Convert OpenAI-format messages to Ollama format.

    Ollama uses the same role/content structure but expects content as a
    plain string and does not accept the 'name' field.
    """
    converted = []
    for msg in messages:
        content = msg.get("content", "")
        if isinstance(content, list):
            content = "\n".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        converted.append({"role": msg["role"], "content": content or ""})
    return converted


def _message_text(data) -> Optional[str]:
    """Text of an /api/chat object's message, None if misshapen."""
    if not isinstance(data, dict):
        return None
    message = data.get("message") or {}
    if not isinstance(message, dict):
        return None
    content = message.get("content") or ""
    return content if isinstance(content, str) else None


class OllamaBackend(InferenceBackend):
    """Backend adapter for Ollama inference server."""

    def _payload(self, model_id: str, messages: list[dict], max_tokens: int,
                 temperature: float, stream: bool) -> dict:
        return {
            "model": model_id,
            "messages": _openai_messages_to_ollama(messages),
            "stream": stream,
            "options": {
                "num_predict": max_tokens,
                "temperature": temperature,
            },
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
        """Non-streaming chat completion via /api/chat."""
        payload = self._payload(model_id, messages, max_tokens, temperature, stream=False)
        try:
            async with self._client(timeout) as client:
                resp = await client.post(f"{self.base_url}/api/chat", json=payload)
                if resp.status_code >= 400:
                    return ProviderResult(failure=classify_status(resp.status_code, resp.text))
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            return ProviderResult(failure=classify_exception(e))

        content = _message_text(data)
        if not content or not content.strip():
            return ProviderResult(failure=ProviderFailure(
                FailureKind.MALFORMED_RESPONSE, "empty or missing message content",
            ))
        return ProviderResult(text=content)

    async def stream_chat(
        self,
        model_id: str,
        messages: list[dict],
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> AsyncIterator[ProviderEvent]:
        """Streaming chat completion via /api/chat with stream=true.

        Ollama streams newline-delimited JSON objects. Each object has a
        'message' field with partial content and a 'done' field; the final
        object has done=true.
        """
        payload = self._payload(model_id, messages, max_tokens, temperature, stream=True)
        produced = False
        try:
            async with self._client() as client:
                async with client.stream(
                    "POST", f"{self.base_url}/api/chat", json=payload,
                ) as resp:
                    if resp.status_code >= 400:
                        body = (await resp.aread()).decode(errors="replace")
                        yield ProviderEvent(failure=classify_status(resp.status_code, body))
                        return
                    async for line in resp.aiter_lines():
                        if not line.strip():
                            continue
                        try:
                            chunk = json.loads(line)
                        except json.JSONDecodeError:
                            yield ProviderEvent(failure=ProviderFailure(
                                FailureKind.MALFORMED_RESPONSE, f"undecodable line: {line[:80]}",
                            ))
                            return
                        if not isinstance(chunk, dict):
                            yield ProviderEvent(failure=ProviderFailure(
                                FailureKind.MALFORMED_RESPONSE, "stream line is not an object",
                            ))
                            return
                        if chunk.get("error"):
                            yield ProviderEvent(failure=ProviderFailure(
                                FailureKind.MALFORMED_RESPONSE, str(chunk["error"])[:200],
                            ))
                            return
                        content = _message_text(chunk)
                        if content is None:
                            yield ProviderEvent(failure=ProviderFailure(
                                FailureKind.MALFORMED_RESPONSE, f"misshapen line: {line[:80]}",
                            ))
                            return
                        if content:
                            produced = True
                            yield ProviderEvent(text=content)
                        if chunk.get("done", False):
                            if not produced:
                                yield ProviderEvent(failure=ProviderFailure(
                                    FailureKind.MALFORMED_RESPONSE, "stream produced no content",
                                ))
                            return
        except httpx.HTTPError as e:
            yield ProviderEvent(failure=classify_exception(e))
            return
        yield ProviderEvent(failure=ProviderFailure(
            FailureKind.MALFORMED_RESPONSE, "stream ended without done=true",
        ))
