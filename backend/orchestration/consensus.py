"""
Collaborative decisions and the consensus rule.

A decision collects one vote per required role. When the last vote arrives
the option with the highest summed confidence wins; ties go to the option
backed by the highest-priority role (structural first).
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from config import ROLE_PRIORITY, VOTE_REASONING_MAX_CHARS
from orchestration.messages import AgentRole

# Full tie-break order; the coordinator breaks ties last
TIE_BREAK_ORDER = ROLE_PRIORITY + (AgentRole.COORDINATOR,)


def priority_index(role: AgentRole) -> int:
    return TIE_BREAK_ORDER.index(role)


@dataclass(frozen=True)
class Vote:
    agent: AgentRole
    choice: str
    confidence: float
    reasoning: str = ""

    def to_dict(self) -> dict:
        return {
            "agent": self.agent.value,
            "choice": self.choice,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


def resolve_consensus(options: list[str], votes: list[Vote]) -> str:
    """Option with the highest confidence sum. Total and order-independent."""
    if not options:
        raise ValueError("A decision needs at least one option")

    totals = {opt: 0.0 for opt in options}
    for vote in votes:
        if vote.choice not in totals:
            raise ValueError(f"Vote for unknown option: {vote.choice!r}")
        totals[vote.choice] += vote.confidence

    best = max(totals.values())
    tied = [opt for opt in options if math.isclose(totals[opt], best, abs_tol=1e-9)]
    if len(tied) == 1:
        return tied[0]

    for vote in sorted(votes, key=lambda v: priority_index(v.agent)):
        if vote.choice in tied:
            return vote.choice
    return tied[0]


@dataclass
class CollaborativeDecision:
    question: str
    options: list[str]
    required_agents: frozenset[AgentRole]
    votes: list[Vote] = field(default_factory=list)
    resolved: Optional[str] = None

    def __post_init__(self):
        if not self.options:
            raise ValueError("A decision needs at least one option")
        if len(set(self.options)) != len(self.options):
            raise ValueError("Decision options must be distinct")
        if not self.required_agents:
            raise ValueError("A decision needs at least one required agent")
        self.required_agents = frozenset(self.required_agents)

    @property
    def is_resolved(self) -> bool:
        return self.resolved is not None

    def pending_agents(self) -> list[AgentRole]:
        voted = {v.agent for v in self.votes}
        return sorted(self.required_agents - voted, key=priority_index)

    def cast_vote(self, vote: Vote) -> Optional[str]:
        """Record a vote; returns the resolved option once every required role has voted."""
        if self.is_resolved:
            raise ValueError("Decision is already resolved")
        if vote.agent not in self.required_agents:
            raise ValueError(f"{vote.agent.value} is not required for this decision")
        if any(v.agent == vote.agent for v in self.votes):
            raise ValueError(f"{vote.agent.value} has already voted")
        if vote.choice not in self.options:
            raise ValueError(f"Unknown option: {vote.choice!r}")

        self.votes.append(Vote(
            agent=vote.agent,
            choice=vote.choice,
            confidence=max(0.0, min(1.0, vote.confidence)),
            reasoning=vote.reasoning[:VOTE_REASONING_MAX_CHARS],
        ))
        if len(self.votes) == len(self.required_agents):
            self.resolved = resolve_consensus(self.options, self.votes)
        return self.resolved

    def to_dict(self) -> dict:
        return {
            "question": self.question,
            "options": list(self.options),
            "required_agents": sorted(r.value for r in self.required_agents),
            "votes": [v.to_dict() for v in self.votes],
            "resolved": self.resolved,
        }
