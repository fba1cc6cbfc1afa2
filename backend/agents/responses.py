"""
AgentResponse — an agent's final reply plus derived metadata.

Confidence, suggestions and requires_input are cheap text heuristics over the
reply; they are deterministic so the same reply always scores the same.
"""

import re
from dataclasses import dataclass, field

from config import (
    CANNED_CONFIDENCE, EXPERTISE_KEYWORDS, INPUT_REQUEST_PATTERNS,
    MAX_SUGGESTIONS, MAX_SUGGESTIONS_PER_PATTERN, SUGGESTION_PATTERNS,
    UNCERTAINTY_WORDS,
)
from orchestration.messages import AgentRole

_UNCERTAINTY_RE = [re.compile(rf"\b{w}\b", re.IGNORECASE) for w in UNCERTAINTY_WORDS]
_SUGGESTION_RE = [re.compile(rf"\b{p}", re.IGNORECASE) for p in SUGGESTION_PATTERNS]
_INPUT_RE = [re.compile(p, re.IGNORECASE) for p in INPUT_REQUEST_PATTERNS]


def assess_confidence(role: AgentRole, text: str) -> float:
    """0.7 + 0.05 per expertise keyword present − 0.1 per uncertainty word, in [0.1, 1.0]."""
    lowered = text.lower()
    confidence = 0.7
    for keyword in EXPERTISE_KEYWORDS[role]:
        if keyword in lowered:
            confidence += 0.05
    for pattern in _UNCERTAINTY_RE:
        if pattern.search(text):
            confidence -= 0.1
    return round(max(0.1, min(1.0, confidence)), 4)


def extract_suggestions(text: str) -> list[str]:
    suggestions: list[str] = []
    for pattern in _SUGGESTION_RE:
        for match in pattern.findall(text)[:MAX_SUGGESTIONS_PER_PATTERN]:
            suggestion = match.strip()
            if suggestion and suggestion not in suggestions:
                suggestions.append(suggestion)
    return suggestions[:MAX_SUGGESTIONS]


def requires_input(text: str) -> bool:
    return any(p.search(text) for p in _INPUT_RE)


@dataclass(frozen=True)
class AgentResponse:
    role: AgentRole
    content: str
    confidence: float
    suggestions: tuple[str, ...] = field(default_factory=tuple)
    requires_input: bool = False
    degraded: bool = False
    canned: bool = False

    @classmethod
    def from_reply(cls, role: AgentRole, content: str, degraded: bool = False,
                   canned: bool = False) -> "AgentResponse":
        return cls(
            role=role,
            content=content,
            confidence=CANNED_CONFIDENCE if canned else assess_confidence(role, content),
            suggestions=tuple(extract_suggestions(content)),
            requires_input=requires_input(content),
            degraded=degraded,
            canned=canned,
        )

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "content": self.content,
            "confidence": self.confidence,
            "suggestions": list(self.suggestions),
            "requires_input": self.requires_input,
            "degraded": self.degraded,
            "canned": self.canned,
        }
