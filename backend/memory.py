"""
Conversation Memory — bounded per-role message history.

Each AgentRole owns one partition: a permanent system message followed by the
most recent max_turns messages (FIFO eviction). History never starts with
a reply whose user turn has been evicted. Partitions never share state;
each one is guarded by its own lock, so appends for different roles never
contend.
"""

import logging
import threading
from collections import deque
from typing import Callable, Iterable, Optional

from orchestration.messages import AgentMessage, AgentRole, MessageRole

logger = logging.getLogger(__name__)

DEFAULT_MAX_TURNS = 10


class _Partition:
    __slots__ = ("system", "turns", "lock")

    def __init__(self, system: AgentMessage, max_turns: int):
        self.system = system
        self.turns: deque[AgentMessage] = deque(maxlen=max_turns)
        self.lock = threading.Lock()


class ConversationMemory:
    """Per-role bounded history with a never-evicted leading system message."""

    def __init__(self, system_prompts: Callable[[AgentRole], str],
                 max_turns: int = DEFAULT_MAX_TURNS,
                 roles: Iterable[AgentRole] = tuple(AgentRole)):
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.max_turns = max_turns
        self._system_prompts = system_prompts
        self._partitions: dict[AgentRole, _Partition] = {
            role: _Partition(self._system_message(role), max_turns)
            for role in roles
        }

    def _system_message(self, role: AgentRole) -> AgentMessage:
        return AgentMessage.system(role, self._system_prompts(role))

    def _partition(self, role: AgentRole) -> _Partition:
        try:
            return self._partitions[role]
        except KeyError:
            raise ValueError(f"No conversation partition for role: {role}") from None

    # ── Writes ──

    def append(self, role: AgentRole, message: AgentMessage):
        """Append one turn. System messages are rejected; the partition keeps its own."""
        if message.role == MessageRole.SYSTEM:
            raise ValueError("System messages cannot be appended to a conversation")
        partition = self._partition(role)
        with partition.lock:
            partition.turns.append(message)

    def append_exchange(self, role: AgentRole, user: AgentMessage,
                        assistant: AgentMessage):
        """Append a user turn and its reply together, so readers never see half an exchange."""
        for message in (user, assistant):
            if message.role == MessageRole.SYSTEM:
                raise ValueError("System messages cannot be appended to a conversation")
        partition = self._partition(role)
        with partition.lock:
            partition.turns.append(user)
            partition.turns.append(assistant)
            # Eviction is per message; drop a reply whose question was evicted
            while partition.turns and partition.turns[0].role == MessageRole.ASSISTANT:
                partition.turns.popleft()

    def clear(self, role: AgentRole):
        """Reset the role's history to just its system prompt."""
        partition = self._partition(role)
        with partition.lock:
            partition.turns.clear()
            partition.system = self._system_message(role)
        logger.info("Cleared conversation history for %s", role.value)

    # ── Reads ──

    def get_recent(self, role: AgentRole, n: Optional[int] = None) -> list[AgentMessage]:
        """System message followed by up to n most recent turns, oldest first.

        n=None returns every retained turn.
        """
        partition = self._partition(role)
        with partition.lock:
            turns = list(partition.turns)
            system = partition.system
        if n is not None:
            turns = turns[-n:] if n > 0 else []
        return [system] + turns

    def size(self, role: AgentRole) -> int:
        partition = self._partition(role)
        with partition.lock:
            return 1 + len(partition.turns)

    def snapshot(self) -> dict[str, list[dict]]:
        """Copy of every partition, by value, for the presentation layer."""
        return {
            role.value: [m.to_dict() for m in self.get_recent(role)]
            for role in self._partitions
        }
