"""
Stages 5–7 — room-level attributes derived from the detected elements.

All functions are pure; counts, means and fixed thresholds only.
"""

import numpy as np

from config import (
    BRIGHT_LUMINANCE, CONDITION_THRESHOLDS, DEFAULT_ROOM_HEIGHT_FT,
    DEFAULT_ROOM_WIDTH_FT, DIM_LUMINANCE, LOWEST_CONDITION,
    MAX_OVERALL_CONFIDENCE, VARIETY_BONUS, WARMTH_THRESHOLD,
)
from vision.types import (
    ArchitecturalElement, Condition, ElementKind, Lighting, RoomDimensions, RoomType,
)


def infer_room_type(elements: list[ArchitecturalElement]) -> RoomType:
    windows = sum(1 for e in elements if e.kind == ElementKind.WINDOW)
    doors = sum(1 for e in elements if e.kind == ElementKind.DOOR)

    if windows >= 2 and doors <= 1:
        return RoomType.LIVING_ROOM
    if windows == 1 and doors == 1:
        return RoomType.BEDROOM
    if windows == 0 and doors == 1:
        return RoomType.BATHROOM
    if doors >= 2:
        return RoomType.HALLWAY
    return RoomType.UNKNOWN


def estimate_dimensions(elements: list[ArchitecturalElement], frame_width: int,
                        frame_height: int) -> RoomDimensions:
    """Rough room size in feet. Without two walls there is nothing to scale from."""
    walls = sum(1 for e in elements if e.kind == ElementKind.WALL)
    if walls < 2:
        return RoomDimensions(
            width=DEFAULT_ROOM_WIDTH_FT,
            height=DEFAULT_ROOM_HEIGHT_FT,
            area=DEFAULT_ROOM_WIDTH_FT * DEFAULT_ROOM_HEIGHT_FT,
        )
    aspect = frame_width / frame_height
    width = DEFAULT_ROOM_WIDTH_FT
    height = width / aspect
    return RoomDimensions(width=round(width), height=round(height), area=round(width * height))


def assess_lighting(pixels: np.ndarray, lum: np.ndarray) -> Lighting:
    """Bright and cool reads as daylight; dim and warm reads as lamps."""
    mean_lum = float(lum.mean())
    warmth = pixels[:, :, 0] - pixels[:, :, 2]
    warm = int(np.count_nonzero(warmth > WARMTH_THRESHOLD))
    cool = int(np.count_nonzero(warmth < -WARMTH_THRESHOLD))

    if mean_lum > BRIGHT_LUMINANCE and cool > warm:
        return Lighting.NATURAL
    if mean_lum < DIM_LUMINANCE and warm > cool:
        return Lighting.ARTIFICIAL
    return Lighting.MIXED


def mean_confidence(elements: list[ArchitecturalElement]) -> float:
    if not elements:
        return 0.0
    return sum(e.confidence for e in elements) / len(elements)


def assess_condition(elements: list[ArchitecturalElement]) -> Condition:
    mean = mean_confidence(elements)
    for threshold, label in CONDITION_THRESHOLDS:
        if mean > threshold:
            return Condition(label)
    return Condition(LOWEST_CONDITION)


def overall_confidence(elements: list[ArchitecturalElement]) -> float:
    """Mean element confidence plus a bonus per distinct element kind, capped."""
    if not elements:
        return 0.1
    variety = len({e.kind for e in elements})
    return round(min(MAX_OVERALL_CONFIDENCE, mean_confidence(elements) + variety * VARIETY_BONUS), 4)
