"""
Collaboration Orchestrator — one user turn across several specialists.

The primary agent answers first and its chunks are forwarded as they arrive.
Its reply is then quoted to every collaborator, and the collaborators run
concurrently, each in its own task with its own gateway stream. Chunks from
different collaborators interleave; chunks from one collaborator stay in
order. A degraded collaborator contributes its canned reply and a notice but
never fails the turn.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from agents.prompts import build_collaboration_prompt, build_decision_prompt
from agents.registry import AgentRegistry
from agents.responses import AgentResponse
from config import DEGRADED_NOTICE
from orchestration.agent_router import AgentRouter, RoutePlan
from orchestration.consensus import CollaborativeDecision, Vote
from orchestration.context import ProjectContext
from orchestration.gateway import GatewayResult, GatewayStream, ModelGateway
from orchestration.messages import AgentRole, StreamChunk
from orchestration.streams import ResponseStream

logger = logging.getLogger(__name__)

_DONE = object()


@dataclass(frozen=True)
class CollaborationResult:
    plan: RoutePlan
    responses: dict[AgentRole, AgentResponse]
    gateway_results: dict[AgentRole, GatewayResult]
    merged_text: str

    @property
    def primary(self) -> AgentRole:
        return self.plan.primary

    @property
    def degraded_roles(self) -> list[AgentRole]:
        return [r for r in self.plan.roles if self.responses[r].degraded]

    def to_dict(self) -> dict:
        return {
            "primary": self.primary.value,
            "roles": [r.value for r in self.plan.roles],
            "responses": {r.value: self.responses[r].to_dict() for r in self.plan.roles},
            "degraded_roles": [r.value for r in self.degraded_roles],
            "merged_text": self.merged_text,
        }


def merge_responses(plan: RoutePlan, responses: dict[AgentRole, AgentResponse],
                    registry: AgentRegistry) -> str:
    sections = []
    for role in plan.roles:
        response = responses[role]
        section = f"**{registry.get(role).title}:**\n{response.content}"
        if response.canned:
            section += f"\n\n{DEGRADED_NOTICE}"
        sections.append(section)
    return "\n\n".join(sections)


def _response_for(result: GatewayResult) -> AgentResponse:
    return AgentResponse.from_reply(
        result.role, result.message.content,
        degraded=result.degraded, canned=result.exhausted,
    )


class CollaborationStream(ResponseStream[CollaborationResult]):
    """Merged StreamChunks of every agent in a RoutePlan."""

    def __init__(self, orchestrator: "CollaborationOrchestrator", message: str,
                 plan: RoutePlan, context: Optional[ProjectContext] = None):
        super().__init__()
        self.plan = plan
        self._orchestrator = orchestrator
        self._message = message
        self._context = context

    async def _produce(self) -> AsyncIterator[StreamChunk]:
        gateway = self._orchestrator.gateway
        primary = self.plan.primary

        primary_stream = gateway.invoke(primary, self._message, self._context)
        try:
            async for chunk in primary_stream:
                yield chunk
        finally:
            if not primary_stream.completed:
                await primary_stream.aclose()
        if primary_stream.result is None:
            return

        results = {primary: primary_stream.result}
        if self.plan.collaborators:
            prompt = build_collaboration_prompt(
                self._message, primary, primary_stream.result.message.content,
            )
            streams = {
                role: gateway.invoke(role, prompt, self._context)
                for role in self.plan.collaborators
            }
            queue: asyncio.Queue = asyncio.Queue()

            async def pump(stream: GatewayStream):
                try:
                    async for chunk in stream:
                        queue.put_nowait(chunk)
                finally:
                    queue.put_nowait(_DONE)

            tasks = [asyncio.create_task(pump(s)) for s in streams.values()]
            try:
                remaining = len(tasks)
                while remaining:
                    item = await queue.get()
                    if item is _DONE:
                        remaining -= 1
                        continue
                    yield item
                await asyncio.gather(*tasks)
            finally:
                pending = [t for t in tasks if not t.done()]
                for task in pending:
                    task.cancel()
                if pending:
                    await asyncio.gather(*pending, return_exceptions=True)

            for role, stream in streams.items():
                if stream.result is None:
                    return
                results[role] = stream.result

        if self._cancelled:
            return

        responses = {role: _response_for(results[role]) for role in self.plan.roles}
        for role in self.plan.roles:
            if responses[role].canned:
                logger.warning("Collaboration: %s answered with its canned reply", role.value)
        self._finish(CollaborationResult(
            plan=self.plan,
            responses=responses,
            gateway_results=results,
            merged_text=merge_responses(self.plan, responses, self._orchestrator.registry),
        ))


def pick_option(reply: str, options: list[str]) -> str:
    """First option (in option order) named in the reply, else the first option."""
    lowered = reply.lower()
    for option in options:
        if re.search(rf"(?<!\w){re.escape(option.lower())}(?!\w)", lowered):
            return option
    return options[0]


class CollaborationOrchestrator:

    def __init__(self, gateway: ModelGateway, registry: AgentRegistry,
                 router: Optional[AgentRouter] = None):
        self.gateway = gateway
        self.registry = registry
        self.router = router or AgentRouter()

    def collaborate(self, message: str, primary: AgentRole,
                    collaborators: list[AgentRole],
                    context: Optional[ProjectContext] = None) -> CollaborationStream:
        collaborators = tuple(r for r in dict.fromkeys(collaborators) if r != primary)
        plan = RoutePlan(primary=primary, collaborators=collaborators)
        return CollaborationStream(self, message, plan, context)

    def respond(self, message: str, context: Optional[ProjectContext] = None,
                requested: Optional[AgentRole] = None) -> CollaborationStream:
        """Route the message, then collaborate on it."""
        plan = self.router.route(message, context, requested)
        return CollaborationStream(self, message, plan, context)

    async def deliberate(self, decision: CollaborativeDecision,
                         context: Optional[ProjectContext] = None) -> CollaborativeDecision:
        """Ask every pending required role to vote, concurrently, and resolve."""
        prompt = build_decision_prompt(decision.question, decision.options)
        roles = decision.pending_agents()

        results = await asyncio.gather(
            *(self.gateway.complete(role, prompt, context) for role in roles)
        )
        for role, result in zip(roles, results):
            reply = result.message.content
            confidence = 0.0 if result.exhausted else _response_for(result).confidence
            decision.cast_vote(Vote(
                agent=role,
                choice=pick_option(reply, decision.options),
                confidence=confidence,
                reasoning=reply,
            ))
        logger.info("Decision %r resolved to %r", decision.question, decision.resolved)
        return decision
