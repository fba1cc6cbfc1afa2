"""
Inference package — provider adapters and model routing.

Provides adapters for OpenAI-compatible servers (OpenRouter, vLLM, LM Studio)
and Ollama, plus the router that maps an agent turn to an ordered chain of
concrete routes.

Quick start:
    from inference import InferenceRouter
    router = InferenceRouter.from_profile(profile)
    chain = router.fallback_chain(AgentRole.STRUCTURAL, estimated_tokens)
"""

from inference.base import (
    FailureKind,
    InferenceBackend,
    ProviderEvent,
    ProviderFailure,
    ProviderResult,
)
from inference.ollama import OllamaBackend
from inference.openai_compat import OpenAICompatBackend
from inference.router import (
    InferenceRouter,
    ModelRoute,
    estimate_tokens,
    select_route,
    size_bucket,
)

__all__ = [
    "FailureKind",
    "InferenceBackend",
    "ProviderEvent",
    "ProviderFailure",
    "ProviderResult",
    "OpenAICompatBackend",
    "OllamaBackend",
    "InferenceRouter",
    "ModelRoute",
    "estimate_tokens",
    "select_route",
    "size_bucket",
]
