"""
Intents package — voice/text command parsing and stage guidance.
"""

from intents.guidance import GUIDANCE_STAGES, guidance_prompt
from intents.parser import Command, Intent, IntentParser

__all__ = ["Command", "GUIDANCE_STAGES", "Intent", "IntentParser", "guidance_prompt"]
