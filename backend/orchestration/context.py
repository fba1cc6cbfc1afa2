"""
Project context injection.

The text an agent sees is the user's message plus whatever the studio knows
about the project: type, budget, room, stated preferences, and the latest
RoomAnalysis when one exists.
"""

from dataclasses import dataclass, field
from typing import Optional

from vision.types import ElementKind, RoomAnalysis


@dataclass
class ProjectContext:
    project_type: Optional[str] = None
    budget: Optional[float] = None
    room_type: Optional[str] = None
    preferences: list[str] = field(default_factory=list)
    analysis: Optional[RoomAnalysis] = None
    has_image: bool = False

    @property
    def has_visual(self) -> bool:
        return self.has_image or self.analysis is not None


def summarize_analysis(analysis: RoomAnalysis) -> str:
    """One paragraph describing a RoomAnalysis for an agent prompt."""
    counts = []
    for kind in (ElementKind.WALL, ElementKind.WINDOW, ElementKind.DOOR):
        n = analysis.count(kind)
        if n:
            counts.append(f"{n} {kind.value}{'s' if n != 1 else ''}")
    planes = [k.value for k in (ElementKind.CEILING, ElementKind.FLOOR) if analysis.count(k)]
    detected = ", ".join(counts) if counts else "no walls or openings"
    summary = (
        f"Room analysis: {analysis.room_type.value.replace('_', ' ')} "
        f"(about {analysis.dimensions.width:g} x {analysis.dimensions.height:g} ft); "
        f"detected {detected}"
    )
    if planes:
        summary += f", plus {' and '.join(planes)} planes"
    summary += (
        f". Lighting is {analysis.lighting.value}, condition {analysis.condition.value}, "
        f"overall confidence {analysis.overall_confidence:.2f}."
    )
    if analysis.is_fallback:
        summary += " The image could not be analyzed reliably."
    return summary


def build_contextual_message(message: str, context: Optional[ProjectContext]) -> str:
    if context is None:
        return message

    text = message
    if context.has_image:
        text += "\n\nImage provided for analysis."

    lines = []
    if context.project_type:
        lines.append(f"Project type: {context.project_type}")
    if context.budget is not None:
        lines.append(f"Budget: ${context.budget:,.0f}")
    if context.room_type:
        lines.append(f"Room: {context.room_type}")
    if context.preferences:
        lines.append(f"Preferences: {', '.join(context.preferences)}")
    if lines:
        text += "\n\n" + "\n".join(lines)

    if context.analysis is not None:
        text += "\n\n" + summarize_analysis(context.analysis)
    return text
