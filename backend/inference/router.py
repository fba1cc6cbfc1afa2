"""
InferenceRouter — maps an agent turn to concrete provider routes.

Reads the profile to instantiate one adapter per enabled backend, and the
static ROUTING_TABLE / FALLBACK_CHAINS in config to choose routes. Route
selection is a pure function of (role, estimated input size): the same
inputs always yield the same route. Routes are recomputed on every call,
never cached.

Usage:
    router = InferenceRouter.from_profile(profile)
    route = router.select_route(AgentRole.DESIGN, estimate_tokens(text))
    backend = router.backend_for(route)
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import httpx

from config import (
    DEFAULT_MAX_TOKENS, FALLBACK_CHAINS, LARGEST_BUCKET, ROUTING_TABLE,
    SIZE_BUCKETS, TEMPERATURE, TOKENS_PER_WORD,
)
from inference.base import InferenceBackend
from inference.ollama import OllamaBackend
from inference.openai_compat import OpenAICompatBackend
from orchestration.messages import AgentRole

logger = logging.getLogger(__name__)

# Map of backend type strings to adapter classes
_BACKEND_CLASSES: dict[str, type[InferenceBackend]] = {
    "openai": OpenAICompatBackend,
    "ollama": OllamaBackend,
}


@dataclass(frozen=True)
class ModelRoute:
    provider: str
    model_id: str
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = 0.7

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "model_id": self.model_id,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }


def estimate_tokens(text: str) -> int:
    """Coarse token estimate: words × 1.3, rounded up."""
    return math.ceil(len(text.split()) * TOKENS_PER_WORD)


def size_bucket(estimated_tokens: int) -> str:
    for name, upper in SIZE_BUCKETS:
        if estimated_tokens <= upper:
            return name
    return LARGEST_BUCKET


def select_route(role: AgentRole, estimated_tokens: int) -> ModelRoute:
    """Primary route from the static routing table."""
    provider, model_id = ROUTING_TABLE[(role, size_bucket(estimated_tokens))]
    return ModelRoute(
        provider=provider,
        model_id=model_id,
        max_tokens=DEFAULT_MAX_TOKENS,
        temperature=TEMPERATURE[role],
    )


def fallback_routes(role: AgentRole) -> list[ModelRoute]:
    """The role's fixed, ordered fallback routes (after the primary)."""
    return [
        ModelRoute(provider, model_id, DEFAULT_MAX_TOKENS, TEMPERATURE[role])
        for provider, model_id in FALLBACK_CHAINS[role]
    ]


class InferenceRouter:
    """Owns the backend adapters and turns (role, size) into an ordered route chain."""

    def __init__(self, backends: dict[str, InferenceBackend]):
        self._backends = dict(backends)

    @classmethod
    def from_profile(cls, profile,
                     transport: Optional[httpx.AsyncBaseTransport] = None) -> "InferenceRouter":
        """Build one adapter per enabled backend in the profile."""
        backends: dict[str, InferenceBackend] = {}
        for backend_cfg in profile.inference.backends:
            if not backend_cfg.enabled:
                logger.info("Skipping disabled backend: %s", backend_cfg.name)
                continue

            backend_type = backend_cfg.type.lower()
            adapter_cls = _BACKEND_CLASSES.get(backend_type)
            if adapter_cls is None:
                raise ValueError(
                    f"Unknown backend type '{backend_type}' for backend "
                    f"'{backend_cfg.name}'. Supported types: "
                    f"{', '.join(_BACKEND_CLASSES)}"
                )

            backends[backend_cfg.name] = adapter_cls(
                base_url=backend_cfg.endpoint,
                api_key=backend_cfg.api_key,
                default_timeout=backend_cfg.timeout,
                headers=backend_cfg.headers,
                transport=transport,
            )
            logger.info(
                "Registered backend '%s' (%s) at %s",
                backend_cfg.name, backend_type, backend_cfg.endpoint,
            )
        if not backends:
            logger.warning("No backends configured or enabled; every reply will be canned")
        return cls(backends)

    @property
    def backends(self) -> dict[str, InferenceBackend]:
        """All registered backend adapters."""
        return dict(self._backends)

    def has_backend(self, name: str) -> bool:
        return name in self._backends

    def backend_for(self, route: ModelRoute) -> InferenceBackend:
        try:
            return self._backends[route.provider]
        except KeyError:
            raise ValueError(f"No backend registered for provider '{route.provider}'") from None

    def select_route(self, role: AgentRole, estimated_tokens: int) -> ModelRoute:
        return select_route(role, estimated_tokens)

    def fallback_chain(self, role: AgentRole, estimated_tokens: int) -> list[ModelRoute]:
        """Primary route then the role's fallbacks, skipping unconfigured providers and duplicates."""
        chain: list[ModelRoute] = []
        for route in [select_route(role, estimated_tokens)] + fallback_routes(role):
            if route in chain:
                continue
            if not self.has_backend(route.provider):
                logger.debug("Route %s/%s skipped: provider not configured",
                             route.provider, route.model_id)
                continue
            chain.append(route)
        return chain
