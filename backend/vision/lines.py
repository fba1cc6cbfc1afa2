"""
Stage 3 — axis-aligned line segments from fixed-stride scans of the edge map.

Rows 0, stride, 2*stride, ... are scanned for horizontal runs and columns
likewise for vertical runs. A run becomes a segment when end - start exceeds
min_run_length. Only horizontal and vertical segments exist; there is no
general line fitting.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np


class Orientation(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class Segment:
    orientation: Orientation
    offset: int  # row for horizontal, column for vertical
    start: int
    end: int  # inclusive

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def endpoints(self) -> tuple[tuple[int, int], tuple[int, int]]:
        if self.orientation == Orientation.HORIZONTAL:
            return (self.start, self.offset), (self.end, self.offset)
        return (self.offset, self.start), (self.offset, self.end)


def _runs(line: np.ndarray) -> list[tuple[int, int]]:
    """(start, end) inclusive index pairs of consecutive True values."""
    if not line.any():
        return []
    padded = np.concatenate(([False], line, [False])).astype(np.int8)
    diff = np.diff(padded)
    starts = np.flatnonzero(diff == 1)
    ends = np.flatnonzero(diff == -1) - 1
    return list(zip(starts.tolist(), ends.tolist()))


def extract_segments(edges: np.ndarray, stride: int, min_run_length: int) -> list[Segment]:
    """Horizontal segments (top to bottom, left to right), then vertical ones."""
    if stride < 1:
        raise ValueError("stride must be at least 1")
    height, width = edges.shape
    segments: list[Segment] = []

    for y in range(0, height, stride):
        for start, end in _runs(edges[y, :]):
            if end - start > min_run_length:
                segments.append(Segment(Orientation.HORIZONTAL, y, start, end))

    for x in range(0, width, stride):
        for start, end in _runs(edges[:, x]):
            if end - start > min_run_length:
                segments.append(Segment(Orientation.VERTICAL, x, start, end))

    return segments
