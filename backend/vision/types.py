"""
Vision data types — the pixel buffer going in and the RoomAnalysis coming out.

Everything here is immutable. A RoomAnalysis is created once per image and is
superseded, never updated, by the next analysis.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ElementKind(Enum):
    WALL = "wall"
    WINDOW = "window"
    DOOR = "door"
    CEILING = "ceiling"
    FLOOR = "floor"
    FIXTURE = "fixture"


class RoomType(Enum):
    LIVING_ROOM = "living_room"
    BEDROOM = "bedroom"
    BATHROOM = "bathroom"
    HALLWAY = "hallway"
    UNKNOWN = "unknown"


class Lighting(Enum):
    NATURAL = "natural"
    ARTIFICIAL = "artificial"
    MIXED = "mixed"


class Condition(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


Point = tuple[int, int]


@dataclass(frozen=True)
class ImageBuffer:
    """Raw decoded pixels, row-major, interleaved channels (1, 3 or 4)."""
    data: bytes
    width: int
    height: int
    channels: int = 3

    @property
    def expected_size(self) -> int:
        return self.width * self.height * self.channels


@dataclass(frozen=True)
class Dimensions:
    width: float
    height: float

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class ArchitecturalElement:
    kind: ElementKind
    boundary: tuple[Point, ...]
    confidence: float
    load_bearing: Optional[bool] = None
    dimensions: Optional[Dimensions] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "boundary": [list(p) for p in self.boundary],
            "confidence": self.confidence,
            "load_bearing": self.load_bearing,
            "dimensions": self.dimensions.to_dict() if self.dimensions else None,
        }


@dataclass(frozen=True)
class RoomDimensions:
    width: float
    height: float
    area: float

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height, "area": self.area}


@dataclass(frozen=True)
class RoomAnalysis:
    elements: tuple[ArchitecturalElement, ...]
    room_type: RoomType
    dimensions: RoomDimensions
    lighting: Lighting
    condition: Condition
    overall_confidence: float
    is_fallback: bool = False
    # Not part of equality
    processing_duration_ms: float = field(default=0.0, compare=False)

    def count(self, kind: ElementKind) -> int:
        return sum(1 for e in self.elements if e.kind == kind)

    def elements_of(self, kind: ElementKind) -> list[ArchitecturalElement]:
        return [e for e in self.elements if e.kind == kind]

    def to_dict(self, include_timing: bool = True) -> dict:
        data = {
            "elements": [e.to_dict() for e in self.elements],
            "room_type": self.room_type.value,
            "dimensions": self.dimensions.to_dict(),
            "lighting": self.lighting.value,
            "condition": self.condition.value,
            "overall_confidence": self.overall_confidence,
            "is_fallback": self.is_fallback,
        }
        if include_timing:
            data["processing_duration_ms"] = self.processing_duration_ms
        return data
