"""
Agent System — role definitions, prompts and reply metadata.

The five specialists (coordinator, vision, design, structural,
project-manager) are data, not classes: an AgentDefinition per role, looked
up through AgentRegistry. Calls go through orchestration.gateway.
"""

from agents.base import AgentDefinition
from agents.registry import AgentRegistry
from agents.responses import AgentResponse

__all__ = ["AgentDefinition", "AgentRegistry", "AgentResponse"]
