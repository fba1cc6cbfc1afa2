"""
Modification planning — checks requested changes against a RoomAnalysis.

Nothing is rendered. Each request is validated against what the analysis
actually found and produces warnings the agents and the UI can surface.
"""

from dataclasses import dataclass, field
from typing import Optional

from vision.types import ElementKind, RoomAnalysis

SUPPORTED_MODIFICATIONS = ("remove_wall", "add_wall", "resize_opening", "change_style", "add_feature")


@dataclass(frozen=True)
class ModificationRequest:
    type: str
    target_index: Optional[int] = None  # index into analysis.elements
    parameters: dict = field(default_factory=dict)
    preserve_structural: bool = False


@dataclass(frozen=True)
class ModificationPlan:
    changes: tuple[ModificationRequest, ...]
    warnings: tuple[str, ...]
    confidence: float

    def to_dict(self) -> dict:
        return {
            "changes": [
                {
                    "type": c.type,
                    "target_index": c.target_index,
                    "parameters": dict(c.parameters),
                    "preserve_structural": c.preserve_structural,
                }
                for c in self.changes
            ],
            "warnings": list(self.warnings),
            "confidence": self.confidence,
        }


def _check(request: ModificationRequest, analysis: RoomAnalysis) -> list[str]:
    warnings = []
    target = None
    if request.target_index is not None:
        if 0 <= request.target_index < len(analysis.elements):
            target = analysis.elements[request.target_index]
        else:
            warnings.append(f"{request.type}: target element {request.target_index} does not exist")

    if request.type == "remove_wall":
        if not analysis.elements_of(ElementKind.WALL):
            warnings.append("remove_wall: no walls were detected in this image")
        if target is not None and target.kind != ElementKind.WALL:
            warnings.append(f"remove_wall: target element is a {target.kind.value}, not a wall")
        if target is not None and target.load_bearing:
            warnings.append("remove_wall: target wall is flagged load-bearing - engineer sign-off required")
        if not request.preserve_structural:
            warnings.append("Removing wall without structural analysis - consult engineer")
    elif request.type == "resize_opening":
        if target is None:
            if not (analysis.count(ElementKind.WINDOW) or analysis.count(ElementKind.DOOR)):
                warnings.append("resize_opening: no windows or doors were detected")
        elif target.kind not in (ElementKind.WINDOW, ElementKind.DOOR):
            warnings.append(f"resize_opening: target element is a {target.kind.value}, not an opening")
    elif request.type == "change_style":
        if not request.parameters.get("style"):
            warnings.append("change_style: no style given")
    elif request.type not in SUPPORTED_MODIFICATIONS:
        warnings.append(f"Modification type not yet supported: {request.type}")
    return warnings


def plan_modifications(analysis: RoomAnalysis,
                       requests: list[ModificationRequest]) -> ModificationPlan:
    """Validate each request; confidence drops with every warning and with a weak analysis."""
    warnings: list[str] = []
    for request in requests:
        warnings.extend(_check(request, analysis))

    confidence = min(0.8, analysis.overall_confidence) - 0.1 * len(warnings)
    if analysis.is_fallback:
        warnings.append("Room analysis is a fallback; results are unreliable")
        confidence = min(confidence, 0.1)
    return ModificationPlan(
        changes=tuple(requests),
        warnings=tuple(warnings),
        confidence=round(max(0.1, confidence), 4),
    )
