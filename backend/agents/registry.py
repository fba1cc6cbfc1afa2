"""
AgentRegistry — lookup of the team's agent definitions by role.
"""

from typing import Optional

from agents.base import AgentDefinition
from orchestration.messages import AgentRole


class AgentRegistry:
    """Holds one AgentDefinition per AgentRole."""

    def __init__(self, definitions: Optional[list[AgentDefinition]] = None):
        self._agents: dict[AgentRole, AgentDefinition] = {}
        for definition in definitions or []:
            self.register(definition)

    @classmethod
    def default(cls) -> "AgentRegistry":
        """Registry with the standard definition for every role."""
        return cls([AgentDefinition.for_role(role) for role in AgentRole])

    def register(self, definition: AgentDefinition):
        """Register a definition, replacing any existing one for its role."""
        self._agents[definition.role] = definition

    def get(self, role: AgentRole) -> AgentDefinition:
        try:
            return self._agents[role]
        except KeyError:
            raise ValueError(f"No agent registered for role: {role}") from None

    def all(self) -> list[AgentDefinition]:
        return list(self._agents.values())

    def roles(self) -> list[AgentRole]:
        return list(self._agents.keys())

    def system_prompt(self, role: AgentRole) -> str:
        """Callable form used by ConversationMemory for partition system messages."""
        return self.get(role).system_prompt
