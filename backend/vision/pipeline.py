"""
VisionPipeline — raw pixels in, RoomAnalysis out.

    normalize → edges → segments → elements → room type → lighting/condition → confidence

analyze() is a pure function of the buffer and the VisionConfig: the same
input always produces an equal RoomAnalysis. It never raises for bad input;
an undecodable buffer, or one where nothing is detected, yields the fallback
analysis instead.
"""

import logging
import time
from typing import Callable, Optional

from config import FALLBACK_ELEMENT_CONFIDENCE
from profile_config import VisionConfig, invalid_vision_fields
from vision.assessment import (
    assess_condition, assess_lighting, estimate_dimensions, infer_room_type,
    overall_confidence,
)
from vision.edges import detect_edges
from vision.lines import extract_segments
from vision.preprocessing import ImageDecodeError, decode, luminance
from vision.shapes import classify_openings, classify_walls, detect_planes, find_rectangles
from vision.types import (
    ArchitecturalElement, Condition, ElementKind, ImageBuffer, Lighting,
    RoomAnalysis, RoomDimensions, RoomType,
)

logger = logging.getLogger(__name__)


def fallback_analysis(duration_ms: float = 0.0) -> RoomAnalysis:
    """Minimal valid analysis: one low-confidence placeholder wall."""
    return RoomAnalysis(
        elements=(
            ArchitecturalElement(
                kind=ElementKind.WALL,
                boundary=((0, 0), (100, 0)),
                confidence=FALLBACK_ELEMENT_CONFIDENCE,
            ),
        ),
        room_type=RoomType.UNKNOWN,
        dimensions=RoomDimensions(width=12, height=10, area=120),
        lighting=Lighting.MIXED,
        condition=Condition.POOR,
        overall_confidence=FALLBACK_ELEMENT_CONFIDENCE,
        is_fallback=True,
        processing_duration_ms=duration_ms,
    )


class VisionPipeline:

    def __init__(self, config: Optional[VisionConfig] = None,
                 clock: Callable[[], float] = time.perf_counter):
        self.config = config or VisionConfig()
        invalid = invalid_vision_fields(self.config)
        if invalid:
            raise ValueError(f"Invalid vision settings: {', '.join(invalid)}")
        self._clock = clock

    def _elapsed_ms(self, start: float) -> float:
        return round((self._clock() - start) * 1000, 3)

    def analyze(self, image: ImageBuffer) -> RoomAnalysis:
        start = self._clock()
        cfg = self.config

        try:
            pixels = decode(image, cfg.max_dimension)
        except ImageDecodeError as e:
            logger.warning("Vision: could not decode image (%s); returning fallback analysis", e)
            return fallback_analysis(self._elapsed_ms(start))

        height, width = pixels.shape[:2]
        lum = luminance(pixels)

        edges = detect_edges(lum, cfg.edge_threshold)
        segments = extract_segments(edges, cfg.scan_stride, cfg.min_run_length)
        rectangles, consumed = find_rectangles(segments, width, height)

        elements: list[ArchitecturalElement] = []
        elements += classify_walls(
            [s for s in segments if s not in consumed], width, height, cfg.min_wall_length,
        )
        elements += classify_openings(rectangles, cfg.door_aspect_ratio)
        elements += detect_planes(edges)

        if not elements:
            logger.warning("Vision: no elements detected in %dx%d image; returning fallback analysis",
                           width, height)
            return fallback_analysis(self._elapsed_ms(start))

        analysis = RoomAnalysis(
            elements=tuple(elements),
            room_type=infer_room_type(elements),
            dimensions=estimate_dimensions(elements, width, height),
            lighting=assess_lighting(pixels, lum),
            condition=assess_condition(elements),
            overall_confidence=overall_confidence(elements),
            processing_duration_ms=self._elapsed_ms(start),
        )
        logger.info("Vision: %s with %d elements (confidence %.2f) in %.1fms",
                    analysis.room_type.value, len(elements),
                    analysis.overall_confidence, analysis.processing_duration_ms)
        return analysis
