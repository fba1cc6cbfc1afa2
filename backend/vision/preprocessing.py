"""
Stage 1 — decode the raw buffer and bound its size.
"""

from typing import Optional

import numpy as np

from config import LUMA_WEIGHTS
from vision.types import ImageBuffer


class ImageDecodeError(ValueError):
    """The buffer does not describe a usable image."""


def decode(image: ImageBuffer, max_dimension: Optional[int] = None) -> np.ndarray:
    """Raw bytes to an (H, W, 3) float64 RGB array. Alpha is dropped, gray is expanded.

    With max_dimension, the 8-bit pixels are downscaled before the float
    conversion, so the float array never exceeds the bounded size.
    """
    if image.width <= 0 or image.height <= 0:
        raise ImageDecodeError(f"Invalid dimensions {image.width}x{image.height}")
    if image.channels not in (1, 3, 4):
        raise ImageDecodeError(f"Unsupported channel count: {image.channels}")
    if len(image.data) != image.expected_size:
        raise ImageDecodeError(
            f"Buffer holds {len(image.data)} bytes, expected {image.expected_size}"
        )

    pixels = np.frombuffer(image.data, dtype=np.uint8).reshape(
        image.height, image.width, image.channels,
    )
    if max_dimension is not None:
        pixels = downscale(pixels, max_dimension)
    if image.channels == 1:
        pixels = np.repeat(pixels, 3, axis=2)
    elif image.channels == 4:
        pixels = pixels[:, :, :3]
    return pixels.astype(np.float64)


def downscale(pixels: np.ndarray, max_dimension: int) -> np.ndarray:
    """Nearest-neighbour downscale so the longer side is at most max_dimension."""
    height, width = pixels.shape[:2]
    longest = max(height, width)
    if longest <= max_dimension:
        return pixels
    scale = max_dimension / longest
    new_h = max(1, round(height * scale))
    new_w = max(1, round(width * scale))
    rows = (np.arange(new_h) * height) // new_h
    cols = (np.arange(new_w) * width) // new_w
    return pixels[rows][:, cols]


def luminance(pixels: np.ndarray) -> np.ndarray:
    return pixels @ np.array(LUMA_WEIGHTS)
