"""
Test fixtures for the Remodel Studio test suite.
"""

import os
import re
import sys
from pathlib import Path

import pytest

# Add backend to path
BACKEND_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BACKEND_DIR))

# Set up a minimal profile before importing anything that reads config
os.environ["REMODEL_PROFILE_PATH"] = str(BACKEND_DIR.parent / "profile.yaml.example")

from inference.base import (  # noqa: E402
    FailureKind, InferenceBackend, ProviderEvent, ProviderFailure, ProviderResult,
)


class FakeClock:
    """Manual clock; sleep() advances it instead of waiting."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds

    async def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedBackend(InferenceBackend):
    """Backend that replays a script of replies, one per call.

    A str reply streams word by word; a ProviderFailure fails the call; a list
    of ProviderEvent is replayed as-is. An exhausted script fails with
    UNAVAILABLE. Every call's model_id and messages are recorded.
    """

    def __init__(self, replies=None, gate=None):
        super().__init__("http://scripted.invalid")
        self.replies = list(replies or [])
        self.calls: list[str] = []
        self.messages: list[list[dict]] = []
        self.gate = gate

    def _next(self, model_id, messages):
        self.calls.append(model_id)
        self.messages.append(messages)
        if self.replies:
            return self.replies.pop(0)
        return ProviderFailure(FailureKind.UNAVAILABLE, "script exhausted")

    async def call_llm(self, model_id, messages, max_tokens=1024, temperature=0.7,
                       timeout=None):
        reply = self._next(model_id, messages)
        if isinstance(reply, ProviderFailure):
            return ProviderResult(failure=reply)
        if isinstance(reply, list):
            failure = next((e.failure for e in reply if e.failure), None)
            if failure:
                return ProviderResult(failure=failure)
            return ProviderResult(text="".join(e.text for e in reply))
        return ProviderResult(text=reply)

    async def stream_chat(self, model_id, messages, max_tokens=1024, temperature=0.7):
        reply = self._next(model_id, messages)
        if isinstance(reply, ProviderFailure):
            yield ProviderEvent(failure=reply)
            return
        events = reply if isinstance(reply, list) else [
            ProviderEvent(text=piece) for piece in re.findall(r"\S+\s*", reply)
        ]
        for i, event in enumerate(events):
            if i == 1 and self.gate is not None:
                await self.gate.wait()
            yield event


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def scripted_backend():
    """Factory for ScriptedBackend instances."""
    return ScriptedBackend


@pytest.fixture
def registry():
    from agents.registry import AgentRegistry
    return AgentRegistry.default()


@pytest.fixture
def memory(registry):
    from memory import ConversationMemory
    return ConversationMemory(registry.system_prompt, max_turns=10)


@pytest.fixture
def make_gateway(memory, fake_clock):
    """Build a ModelGateway over scripted hosted/local backends."""
    from inference.router import InferenceRouter
    from orchestration.gateway import ModelGateway
    from orchestration.rate_limiter import RoleRateLimiter

    def _make(hosted=None, local=None, retries_per_route=1, min_interval=2.0):
        backends = {}
        if hosted is not None:
            backends["openrouter"] = hosted
        if local is not None:
            backends["ollama"] = local
        limiter = RoleRateLimiter(min_interval, clock=fake_clock, sleep=fake_clock.sleep)
        return ModelGateway(InferenceRouter(backends), memory, limiter,
                            retries_per_route=retries_per_route)

    return _make


def make_image(height, width, background=200, rects=(), channels=3):
    """Raw pixel bytes: uniform background with filled (top, left, bottom, right, value) rectangles."""
    import numpy as np
    from vision.types import ImageBuffer

    pixels = np.full((height, width, channels), background, dtype=np.uint8)
    for top, left, bottom, right, value in rects:
        pixels[top:bottom, left:right, :] = value
    return ImageBuffer(pixels.tobytes(), width, height, channels)


@pytest.fixture
def image_factory():
    return make_image
