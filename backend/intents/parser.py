"""
Command/Intent Parser — free-text utterances to structured commands.

Patterns are tried in declared order and the first match wins. No match is
a normal outcome (None): the caller treats the utterance as free text for
the coordinator.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from config import (
    COMMAND_PATTERNS, CONSTRUCTION_VOCABULARY, INTENT_BASE_CONFIDENCE,
    INTENT_LENGTH_PENALTY, INTENT_MATCH_BONUS, INTENT_MAX_LENGTH,
    INTENT_MIN_LENGTH, INTENT_VOCAB_BONUS, INTENT_VOCAB_BONUS_CAP,
    STYLE_VOCABULARY,
)

logger = logging.getLogger(__name__)


class Command(Enum):
    CAPTURE_PHOTO = "capture_photo"
    ANALYZE_ROOM = "analyze_room"
    REMOVE_WALL = "remove_wall"
    ADD_WALL = "add_wall"
    CHANGE_STYLE = "change_style"
    SHOW_OPTIONS = "show_options"
    PREVIEW_CHANGES = "preview_changes"
    CALCULATE_COST = "calculate_cost"
    START_PROJECT = "start_project"
    GET_HELP = "get_help"
    SAVE_DESIGN = "save_design"
    GO_BACK = "go_back"
    CANCEL = "cancel"
    CONFIRM = "confirm"
    DENY = "deny"


@dataclass(frozen=True)
class Intent:
    command: Command
    parameters: dict = field(default_factory=dict)
    confidence: float = INTENT_BASE_CONFIDENCE

    def to_dict(self) -> dict:
        return {
            "command": self.command.value,
            "parameters": dict(self.parameters),
            "confidence": self.confidence,
        }


_MONEY_RE = re.compile(r"\$?\s?(\d+(?:,\d{3})*(?:\.\d+)?)")


def extract_parameters(command: Command, text: str) -> dict:
    """Command-specific parameters from the lowercased utterance."""
    params: dict = {}
    if command in (Command.REMOVE_WALL, Command.ADD_WALL):
        if "load bearing" in text or "load-bearing" in text:
            params["load_bearing"] = True
        if "exterior" in text:
            params["wall_type"] = "exterior"
        elif "interior" in text:
            params["wall_type"] = "interior"
    elif command == Command.CHANGE_STYLE:
        for style in STYLE_VOCABULARY:
            if re.search(rf"\b{style}\b", text):
                params["style"] = style
                break
    elif command == Command.CALCULATE_COST:
        match = _MONEY_RE.search(text)
        if match:
            params["budget"] = float(match.group(1).replace(",", ""))
    return params


def score_confidence(utterance: str) -> float:
    lowered = utterance.lower()
    confidence = INTENT_BASE_CONFIDENCE + INTENT_MATCH_BONUS
    vocab_hits = sum(1 for term in CONSTRUCTION_VOCABULARY if term in lowered)
    confidence += min(INTENT_VOCAB_BONUS_CAP, vocab_hits * INTENT_VOCAB_BONUS)
    if len(utterance) < INTENT_MIN_LENGTH or len(utterance) > INTENT_MAX_LENGTH:
        confidence -= INTENT_LENGTH_PENALTY
    return round(max(0.1, min(1.0, confidence)), 4)


class IntentParser:

    def __init__(self):
        self._patterns = [
            (re.compile(pattern, re.IGNORECASE), Command(command))
            for pattern, command in COMMAND_PATTERNS
        ]

    def parse(self, utterance: str) -> Optional[Intent]:
        text = utterance.strip()
        if not text:
            return None
        lowered = text.lower()
        for pattern, command in self._patterns:
            if pattern.search(lowered):
                intent = Intent(
                    command=command,
                    parameters=extract_parameters(command, lowered),
                    confidence=score_confidence(text),
                )
                logger.debug("Parsed %r as %s", text, intent.to_dict())
                return intent
        return None
