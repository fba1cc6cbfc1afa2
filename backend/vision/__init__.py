"""
Vision package — deterministic 2-D room analysis of raw pixel buffers.

    from vision import ImageBuffer, VisionPipeline
    analysis = VisionPipeline(profile.vision).analyze(ImageBuffer(data, w, h, 3))
"""

from vision.modifications import ModificationPlan, ModificationRequest, plan_modifications
from vision.pipeline import VisionPipeline, fallback_analysis
from vision.types import (
    ArchitecturalElement,
    Condition,
    Dimensions,
    ElementKind,
    ImageBuffer,
    Lighting,
    RoomAnalysis,
    RoomDimensions,
    RoomType,
)

__all__ = [
    "ArchitecturalElement",
    "Condition",
    "Dimensions",
    "ElementKind",
    "ImageBuffer",
    "Lighting",
    "ModificationPlan",
    "ModificationRequest",
    "RoomAnalysis",
    "RoomDimensions",
    "RoomType",
    "VisionPipeline",
    "fallback_analysis",
    "plan_modifications",
]
