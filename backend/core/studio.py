"""
RemodelStudio — service facade over the agent team and the vision pipeline.

Owns every long-lived object (memory, rate limiter, inference router,
gateway, orchestrator, vision pipeline, intent parser) and passes them to
each other explicitly. Lifecycle: RemodelStudio(profile) → start() → serve
requests → shutdown().
"""

import asyncio
import logging
import time
import weakref
from typing import Awaitable, Callable, Optional

import httpx

from agents.registry import AgentRegistry
from core.chat_pipeline import _ChatPipelineMixin
from inference.router import InferenceRouter
from intents.parser import Intent, IntentParser
from memory import ConversationMemory
from orchestration.collaboration import CollaborationOrchestrator
from orchestration.consensus import CollaborativeDecision
from orchestration.context import ProjectContext
from orchestration.gateway import ModelGateway
from orchestration.messages import AgentRole
from orchestration.rate_limiter import RoleRateLimiter
from profile_config import Profile
from vision.modifications import ModificationPlan, ModificationRequest, plan_modifications
from vision.pipeline import VisionPipeline
from vision.types import ImageBuffer, RoomAnalysis

logger = logging.getLogger(__name__)


class RemodelStudio(_ChatPipelineMixin):

    def __init__(self, profile: Profile,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.profile = profile
        self._transport = transport
        self.registry = AgentRegistry.default()
        self.memory = ConversationMemory(
            self.registry.system_prompt, max_turns=profile.memory.max_turns,
        )
        self.rate_limiter = RoleRateLimiter(
            profile.gateway.min_interval_seconds, clock=clock, sleep=sleep,
        )
        self.vision = VisionPipeline(profile.vision)
        self.intents = IntentParser()
        self.router: Optional[InferenceRouter] = None
        self.gateway: Optional[ModelGateway] = None
        self.orchestrator: Optional[CollaborationOrchestrator] = None
        self.latest_analysis: Optional[RoomAnalysis] = None
        self._streams: "weakref.WeakSet" = weakref.WeakSet()
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    # ── Lifecycle ──

    async def start(self):
        """Build provider adapters and wire the gateway and orchestrator."""
        self.router = InferenceRouter.from_profile(self.profile, transport=self._transport)
        self.gateway = ModelGateway(
            self.router, self.memory, self.rate_limiter,
            retries_per_route=self.profile.gateway.retries_per_route,
        )
        self.orchestrator = CollaborationOrchestrator(self.gateway, self.registry)
        self._ready = True
        logger.info("%s ready: backends=%s, roles=%s",
                    self.profile.system.name,
                    list(self.router.backends),
                    [r.value for r in self.registry.roles()])

    async def shutdown(self):
        """Cancel in-flight turns; nothing partial reaches memory."""
        self._ready = False
        in_flight = [s for s in list(self._streams) if not s.completed and not s.cancelled]
        for stream in in_flight:
            await stream.aclose()
        if in_flight:
            logger.info("Cancelled %d in-flight turn(s) at shutdown", len(in_flight))
        logger.info("%s shut down", self.profile.system.name)

    # ── Vision ──

    async def analyze_image(self, image: ImageBuffer) -> RoomAnalysis:
        """Run the CPU-bound pipeline in a worker thread so model calls keep flowing."""
        analysis = await asyncio.to_thread(self.vision.analyze, image)
        self.latest_analysis = analysis
        return analysis

    def plan_modifications(self, requests: list[ModificationRequest],
                           analysis: Optional[RoomAnalysis] = None) -> ModificationPlan:
        analysis = analysis or self.latest_analysis
        if analysis is None:
            raise ValueError("No room analysis available; analyze an image first")
        return plan_modifications(analysis, requests)

    # ── Intents ──

    def parse_intent(self, utterance: str) -> Optional[Intent]:
        return self.intents.parse(utterance)

    # ── Decisions ──

    async def deliberate(self, question: str, options: list[str], roles: list[AgentRole],
                         context: Optional[ProjectContext] = None) -> CollaborativeDecision:
        if not self.ready:
            raise RuntimeError("Studio not started. Call start() before deliberate().")
        decision = CollaborativeDecision(
            question=question, options=list(options), required_agents=frozenset(roles),
        )
        return await self.orchestrator.deliberate(decision, context)

    # ── Introspection ──

    def agents_overview(self) -> list[dict]:
        """Every role with its title and the route a short message would take."""
        overview = []
        for definition in self.registry.all():
            entry = definition.to_dict()
            if self.router is not None:
                entry["route"] = self.router.select_route(definition.role, 0).to_dict()
                entry["fallbacks"] = [
                    r.to_dict() for r in self.router.fallback_chain(definition.role, 0)[1:]
                ]
            entry["history_size"] = self.memory.size(definition.role)
            overview.append(entry)
        return overview
