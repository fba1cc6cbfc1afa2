"""
Stage 4 — segments and edge bands to architectural elements.

Openings come first: two horizontal segments with matching extents, closed by
two vertical segments, form a rectangle; tall ones are doors, the rest are
windows. Segments used as rectangle sides are not reused as walls. Remaining
long segments are walls. The top and bottom bands of the frame become ceiling
and floor when they are quiet enough to be a plane.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from config import (
    CEILING_BASE_CONFIDENCE, FLOOR_BASE_CONFIDENCE, OPENING_BASE_CONFIDENCE,
    OPENING_COVERAGE_WEIGHT, OPENING_MATCH_TOLERANCE, OPENING_MAX_FRAME_FRACTION,
    OPENING_MIN_SIDE, PLANE_BAND_FRACTION, PLANE_MAX_EDGE_DENSITY,
    WALL_BASE_CONFIDENCE, WALL_MAX_CONFIDENCE,
)
from vision.edges import edge_density
from vision.lines import Orientation, Segment
from vision.types import ArchitecturalElement, Dimensions, ElementKind


@dataclass(frozen=True)
class Rectangle:
    left: int
    top: int
    right: int
    bottom: int
    sides: tuple[Segment, ...]

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def coverage(self) -> float:
        """How much of the rectangle's perimeter its side segments actually cover."""
        spans = (self.width, self.width, self.height, self.height)
        ratios = [min(1.0, s.length / span) for s, span in zip(self.sides, spans)]
        return sum(ratios) / len(ratios)


def _matching_vertical(verticals: list[Segment], x: int, top: int, bottom: int,
                       used: set[Segment], tolerance: int) -> Optional[Segment]:
    candidates = [
        v for v in verticals
        if v not in used
        and abs(v.offset - x) <= tolerance
        and abs(v.start - top) <= tolerance
        and abs(v.end - bottom) <= tolerance
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda v: (abs(v.offset - x), v.offset))


def find_rectangles(segments: list[Segment], frame_width: int, frame_height: int,
                    tolerance: int = OPENING_MATCH_TOLERANCE,
                    min_side: int = OPENING_MIN_SIDE) -> tuple[list[Rectangle], set[Segment]]:
    """Greedy top-down pairing. Returns the rectangles and the segments they consumed."""
    horizontals = sorted(
        (s for s in segments if s.orientation == Orientation.HORIZONTAL),
        key=lambda s: (s.offset, s.start),
    )
    verticals = [s for s in segments if s.orientation == Orientation.VERTICAL]
    used: set[Segment] = set()
    rectangles: list[Rectangle] = []

    for i, top in enumerate(horizontals):
        if top in used:
            continue
        for bottom in horizontals[i + 1:]:
            if bottom in used or bottom.offset - top.offset < min_side:
                continue
            if abs(bottom.start - top.start) > tolerance or abs(bottom.end - top.end) > tolerance:
                continue
            left = min(top.start, bottom.start)
            right = max(top.end, bottom.end)
            if right - left < min_side:
                continue
            # The picture frame itself is not an opening
            if (right - left > OPENING_MAX_FRAME_FRACTION * frame_width
                    and bottom.offset - top.offset > OPENING_MAX_FRAME_FRACTION * frame_height):
                continue

            left_side = _matching_vertical(verticals, left, top.offset, bottom.offset,
                                           used, tolerance)
            right_side = _matching_vertical(verticals, right, top.offset, bottom.offset,
                                            used, tolerance)
            if left_side is None or right_side is None or left_side == right_side:
                continue

            rectangles.append(Rectangle(
                left=left, top=top.offset, right=right, bottom=bottom.offset,
                sides=(top, bottom, left_side, right_side),
            ))
            used.update((top, bottom, left_side, right_side))
            break

    return rectangles, used


def classify_openings(rectangles: list[Rectangle],
                      door_aspect_ratio: float) -> list[ArchitecturalElement]:
    elements = []
    for rect in rectangles:
        kind = ElementKind.DOOR if rect.height > door_aspect_ratio * rect.width else ElementKind.WINDOW
        elements.append(ArchitecturalElement(
            kind=kind,
            boundary=(
                (rect.left, rect.top), (rect.right, rect.top),
                (rect.right, rect.bottom), (rect.left, rect.bottom),
            ),
            confidence=round(OPENING_BASE_CONFIDENCE + OPENING_COVERAGE_WEIGHT * rect.coverage, 4),
            dimensions=Dimensions(width=rect.width, height=rect.height),
        ))
    return elements


def classify_walls(segments: list[Segment], frame_width: int, frame_height: int,
                   min_wall_length: int) -> list[ArchitecturalElement]:
    """Segments longer than min_wall_length; longer relative to the frame means more confident."""
    walls = []
    for seg in segments:
        if seg.length <= min_wall_length:
            continue
        span = frame_width if seg.orientation == Orientation.HORIZONTAL else frame_height
        confidence = min(WALL_MAX_CONFIDENCE, WALL_BASE_CONFIDENCE + 0.4 * seg.length / span)
        walls.append(ArchitecturalElement(
            kind=ElementKind.WALL,
            boundary=seg.endpoints,
            confidence=round(confidence, 4),
        ))
    return walls


def detect_planes(edges: np.ndarray) -> list[ArchitecturalElement]:
    """Ceiling from the top band, floor from the bottom band, if each is quiet enough."""
    height, width = edges.shape
    band = max(1, int(height * PLANE_BAND_FRACTION))
    planes = []

    ceiling_density = edge_density(edges[:band, :])
    if ceiling_density <= PLANE_MAX_EDGE_DENSITY:
        planes.append(ArchitecturalElement(
            kind=ElementKind.CEILING,
            boundary=((0, 0), (width, 0), (width, band), (0, band)),
            confidence=round(CEILING_BASE_CONFIDENCE * (1 - ceiling_density), 4),
        ))

    floor_density = edge_density(edges[height - band:, :])
    if floor_density <= PLANE_MAX_EDGE_DENSITY:
        planes.append(ArchitecturalElement(
            kind=ElementKind.FLOOR,
            boundary=((0, height - band), (width, height - band), (width, height), (0, height)),
            confidence=round(FLOOR_BASE_CONFIDENCE * (1 - floor_density), 4),
        ))
    return planes
