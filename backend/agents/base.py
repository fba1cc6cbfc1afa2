"""
Agent definitions for the remodeling team.

An agent is a named specialist role: its own system prompt, sampling
temperature, and the expertise vocabulary used to score its replies.
Agents hold no conversation state; memory and the gateway do.
"""

from dataclasses import dataclass, field

from agents.prompts import build_system_prompt
from config import EXPERTISE_KEYWORDS, ROLE_TITLES, TEMPERATURE
from orchestration.messages import AgentRole


@dataclass(frozen=True)
class AgentDefinition:
    role: AgentRole
    title: str
    system_prompt: str
    temperature: float = 0.7
    expertise: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def for_role(cls, role: AgentRole) -> "AgentDefinition":
        return cls(
            role=role,
            title=ROLE_TITLES[role],
            system_prompt=build_system_prompt(role),
            temperature=TEMPERATURE[role],
            expertise=EXPERTISE_KEYWORDS[role],
        )

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "title": self.title,
            "temperature": self.temperature,
            "expertise": list(self.expertise),
        }
