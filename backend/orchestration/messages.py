"""
Message types shared by the memory, gateway and collaboration layers.

AgentRole is the closed set of specialists. AgentMessage is immutable once
created; the gateway builds one per turn and commits it to memory.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class AgentRole(Enum):
    COORDINATOR = "coordinator"
    VISION = "vision"
    DESIGN = "design"
    STRUCTURAL = "structural"
    PROJECT_MANAGER = "project-manager"

    @classmethod
    def parse(cls, value: "str | AgentRole") -> "AgentRole":
        """Accept either the enum or its wire value ('project-manager', 'project_manager')."""
        if isinstance(value, AgentRole):
            return value
        normalized = str(value).strip().lower().replace("_", "-")
        return cls(normalized)


class MessageRole(Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class AgentMessage:
    role: MessageRole
    content: str
    agent_role: AgentRole
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    degraded: bool = False

    def to_provider(self) -> dict:
        """OpenAI-format message dict for a provider request."""
        return {"role": self.role.value, "content": self.content}

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "content": self.content,
            "agent_role": self.agent_role.value,
            "timestamp": self.timestamp.isoformat(),
            "degraded": self.degraded,
        }

    @classmethod
    def system(cls, agent_role: AgentRole, content: str) -> "AgentMessage":
        return cls(role=MessageRole.SYSTEM, content=content, agent_role=agent_role)

    @classmethod
    def user(cls, agent_role: AgentRole, content: str) -> "AgentMessage":
        return cls(role=MessageRole.USER, content=content, agent_role=agent_role)

    @classmethod
    def assistant(cls, agent_role: AgentRole, content: str,
                  degraded: bool = False) -> "AgentMessage":
        return cls(role=MessageRole.ASSISTANT, content=content,
                   agent_role=agent_role, degraded=degraded)


@dataclass(frozen=True)
class StreamChunk:
    """One incremental piece of an agent's reply.

    attempt increases when the gateway restarts on another route after a
    failed attempt; chunks within one attempt are append-only.
    """
    role: AgentRole
    text: str
    attempt: int = 1

    def to_dict(self) -> dict:
        return {"role": self.role.value, "text": self.text, "attempt": self.attempt}
