"""
Model Gateway — one agent turn, from context to committed history.

invoke() returns a GatewayStream. Driving the stream:
  1. waits on the role's rate-limit gate,
  2. walks the role's route chain (each route gets 1 + retries_per_route
     attempts), streaming text chunks from the current attempt,
  3. falls back to the role's canned reply when every route has failed,
  4. commits the user turn and the assistant turn to memory together.

Provider trouble never escapes as an exception; it shows up as degraded=True
on the final message. A cancelled stream commits nothing.
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from config import CANNED_RESPONSES
from inference.base import FailureKind, ProviderFailure
from inference.router import InferenceRouter, ModelRoute, estimate_tokens
from memory import ConversationMemory
from orchestration.context import ProjectContext, build_contextual_message
from orchestration.messages import AgentMessage, AgentRole, StreamChunk
from orchestration.rate_limiter import RoleRateLimiter
from orchestration.streams import ResponseStream

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptRecord:
    attempt: int
    route: ModelRoute
    failure: Optional[ProviderFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_dict(self) -> dict:
        return {
            "attempt": self.attempt,
            "route": self.route.to_dict(),
            "failure": self.failure.kind.value if self.failure else None,
        }


@dataclass(frozen=True)
class GatewayResult:
    message: AgentMessage
    primary_route: ModelRoute
    route: Optional[ModelRoute]  # None when the canned reply was used
    attempts: tuple[AttemptRecord, ...]
    exhausted: bool

    @property
    def role(self) -> AgentRole:
        return self.message.agent_role

    @property
    def degraded(self) -> bool:
        return self.message.degraded

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "content": self.message.content,
            "degraded": self.degraded,
            "exhausted": self.exhausted,
            "route": self.route.to_dict() if self.route else None,
            "attempts": [a.to_dict() for a in self.attempts],
        }


class GatewayStream(ResponseStream[GatewayResult]):
    """Async iterator over one agent turn's StreamChunks."""

    def __init__(self, gateway: "ModelGateway", role: AgentRole, content: str,
                 stream: bool = True):
        super().__init__()
        self.role = role
        self.content = content
        self._gateway = gateway
        self._stream = stream

    async def _produce(self) -> AsyncIterator[StreamChunk]:
        gw = self._gateway
        role = self.role

        await gw.rate_limiter.acquire(role)

        history = gw.memory.get_recent(role)
        user_msg = AgentMessage.user(role, self.content)
        messages = [m.to_provider() for m in history] + [user_msg.to_provider()]
        estimated = estimate_tokens(" ".join(m["content"] for m in messages))
        primary = gw.router.select_route(role, estimated)
        chain = gw.router.fallback_chain(role, estimated)
        logger.debug("Route for %s (~%d tokens): %s/%s",
                     role.value, estimated, primary.provider, primary.model_id)

        attempts: list[AttemptRecord] = []
        reply: Optional[str] = None
        used: Optional[ModelRoute] = None
        attempt = 0

        for route in chain:
            backend = gw.router.backend_for(route)
            for _ in range(1 + gw.retries_per_route):
                attempt += 1
                parts: list[str] = []
                failure: Optional[ProviderFailure] = None

                try:
                    if self._stream:
                        events = backend.stream_chat(
                            route.model_id, messages,
                            max_tokens=route.max_tokens, temperature=route.temperature,
                        )
                        try:
                            async for event in events:
                                if event.failure is not None:
                                    failure = event.failure
                                    break
                                if not isinstance(event.text, str):
                                    failure = ProviderFailure(
                                        FailureKind.MALFORMED_RESPONSE, "non-text chunk")
                                    break
                                if event.text:
                                    parts.append(event.text)
                                    yield StreamChunk(role, event.text, attempt)
                        finally:
                            await events.aclose()
                    else:
                        result = await backend.call_llm(
                            route.model_id, messages,
                            max_tokens=route.max_tokens, temperature=route.temperature,
                        )
                        if not result.ok:
                            failure = result.failure
                        elif not isinstance(result.text, str):
                            failure = ProviderFailure(
                                FailureKind.MALFORMED_RESPONSE, "non-text reply")
                        else:
                            parts.append(result.text)
                            yield StreamChunk(role, result.text, attempt)
                except Exception as e:
                    logger.exception("%s attempt %d on %s/%s raised",
                                     role.value, attempt, route.provider, route.model_id)
                    failure = ProviderFailure(
                        FailureKind.MALFORMED_RESPONSE, f"{type(e).__name__}: {e}")

                text = "".join(parts)
                if failure is None and not text.strip():
                    failure = ProviderFailure(FailureKind.MALFORMED_RESPONSE, "empty reply")

                attempts.append(AttemptRecord(attempt, route, failure))
                if failure is None:
                    reply, used = text, route
                    break
                logger.warning("%s attempt %d on %s/%s failed: %s %s",
                               role.value, attempt, route.provider, route.model_id,
                               failure.kind.value, failure.detail)
            if reply is not None:
                break

        exhausted = reply is None
        if exhausted:
            logger.error("All routes exhausted for %s after %d attempts; using canned reply",
                         role.value, attempt)
            reply = CANNED_RESPONSES[role]
            attempt += 1
            yield StreamChunk(role, reply, attempt)

        if self._cancelled:
            logger.info("Stream for %s cancelled before commit", role.value)
            return

        assistant_msg = AgentMessage.assistant(role, reply, degraded=used != primary)
        gw.memory.append_exchange(role, user_msg, assistant_msg)
        self._finish(GatewayResult(
            message=assistant_msg,
            primary_route=primary,
            route=used,
            attempts=tuple(attempts),
            exhausted=exhausted,
        ))


class ModelGateway:
    """Uniform call interface over the configured providers."""

    def __init__(self, router: InferenceRouter, memory: ConversationMemory,
                 rate_limiter: RoleRateLimiter, retries_per_route: int = 1):
        if retries_per_route < 0:
            raise ValueError("retries_per_route must be non-negative")
        self.router = router
        self.memory = memory
        self.rate_limiter = rate_limiter
        self.retries_per_route = retries_per_route

    def invoke(self, role: AgentRole, message: str,
               context: Optional[ProjectContext] = None,
               stream: bool = True) -> GatewayStream:
        """Start one turn for role. Nothing runs until the stream is iterated."""
        content = build_contextual_message(message, context)
        return GatewayStream(self, role, content, stream=stream)

    async def complete(self, role: AgentRole, message: str,
                       context: Optional[ProjectContext] = None) -> GatewayResult:
        """Run a whole turn without streaming and return its result."""
        return await self.invoke(role, message, context, stream=False).collect()
