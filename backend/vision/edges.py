"""
Stage 2 — Sobel gradient magnitude, thresholded into a binary edge map.

Border pixels have no full 3x3 neighbourhood and are never edges.
"""

import numpy as np


def sobel_magnitude(lum: np.ndarray) -> np.ndarray:
    height, width = lum.shape
    magnitude = np.zeros_like(lum, dtype=np.float64)
    if height < 3 or width < 3:
        return magnitude

    p = lum
    gx = (
        (p[:-2, 2:] + 2 * p[1:-1, 2:] + p[2:, 2:])
        - (p[:-2, :-2] + 2 * p[1:-1, :-2] + p[2:, :-2])
    )
    gy = (
        (p[2:, :-2] + 2 * p[2:, 1:-1] + p[2:, 2:])
        - (p[:-2, :-2] + 2 * p[:-2, 1:-1] + p[:-2, 2:])
    )
    magnitude[1:-1, 1:-1] = np.hypot(gx, gy)
    return magnitude


def detect_edges(lum: np.ndarray, threshold: float) -> np.ndarray:
    """Boolean edge map: gradient magnitude strictly above threshold."""
    return sobel_magnitude(lum) > threshold


def edge_density(edges: np.ndarray) -> float:
    if edges.size == 0:
        return 0.0
    return float(edges.mean())
