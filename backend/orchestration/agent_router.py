"""
Agent Router — decides which specialists take part in a turn.

Selection is rule-based: each role has word-prefix triggers, and a visual
payload (image or existing RoomAnalysis) pulls in the vision role. The
coordinator joins every turn it does not lead. Fan-out is capped.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from config import MAX_COLLABORATION_ROLES, ROLE_PRIORITY, ROLE_TRIGGERS
from orchestration.context import ProjectContext
from orchestration.messages import AgentRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoutePlan:
    primary: AgentRole
    collaborators: tuple[AgentRole, ...]
    triggered: tuple[AgentRole, ...] = ()

    @property
    def roles(self) -> tuple[AgentRole, ...]:
        return (self.primary,) + self.collaborators

    def to_dict(self) -> dict:
        return {
            "primary": self.primary.value,
            "collaborators": [r.value for r in self.collaborators],
            "triggered": [r.value for r in self.triggered],
        }


class AgentRouter:

    def __init__(self, max_roles: int = MAX_COLLABORATION_ROLES):
        if max_roles < 1:
            raise ValueError("max_roles must be at least 1")
        self.max_roles = max_roles
        self._triggers = {
            role: [re.compile(rf"\b{re.escape(t)}") for t in terms]
            for role, terms in ROLE_TRIGGERS.items()
        }

    def triggered_roles(self, message: str,
                        context: Optional[ProjectContext] = None) -> list[AgentRole]:
        """Roles whose triggers fire, in fixed priority order."""
        lowered = message.lower()
        fired = {
            role for role, patterns in self._triggers.items()
            if any(p.search(lowered) for p in patterns)
        }
        if context is not None and context.has_visual:
            fired.add(AgentRole.VISION)
        return [role for role in ROLE_PRIORITY if role in fired]

    def route(self, message: str, context: Optional[ProjectContext] = None,
              requested: Optional[AgentRole] = None) -> RoutePlan:
        """Pick the primary role and its collaborators.

        The primary is the requested role if given, else the highest-priority
        triggered role, else the coordinator.
        """
        triggered = self.triggered_roles(message, context)
        if requested is not None:
            primary = requested
        elif triggered:
            primary = triggered[0]
        else:
            primary = AgentRole.COORDINATOR

        candidates = []
        if primary != AgentRole.COORDINATOR:
            candidates.append(AgentRole.COORDINATOR)
        candidates.extend(r for r in triggered if r != primary)

        plan = RoutePlan(
            primary=primary,
            collaborators=tuple(candidates[:self.max_roles - 1]),
            triggered=tuple(triggered),
        )
        if len(candidates) > len(plan.collaborators):
            logger.debug("Fan-out capped: dropped %s",
                         [r.value for r in candidates[len(plan.collaborators):]])
        logger.debug("Routed turn: %s", plan.to_dict())
        return plan
