"""Pixel filters used by the edge-width estimator.

All functions take and return ``(height, width, 4)`` uint8 RGBA arrays.
Intermediate math is float64; results are rounded half-to-even and clamped
to ``[0, 255]`` like an 8-bit clamped canvas buffer.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

# CIE luminance for RGB
_LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)

SOBEL_KERNEL: tuple[float, ...] = (1, 0, -1, 2, 0, -2, 1, 0, -1)


def _to_uint8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def luminance(pixels: np.ndarray) -> np.ndarray:
    """Replace RGB with CIE luminance, keeping the alpha channel."""
    rgb = pixels[..., :3].astype(np.float64)
    r_w, g_w, b_w = _LUMA_WEIGHTS
    value = _to_uint8(r_w * rgb[..., 0] + g_w * rgb[..., 1] + b_w * rgb[..., 2])

    out = np.empty_like(pixels, dtype=np.uint8)
    out[..., 0] = value
    out[..., 1] = value
    out[..., 2] = value
    out[..., 3] = pixels[..., 3]
    return out


def convolve(
    pixels: np.ndarray, weights: Sequence[float], opaque: bool = True
) -> np.ndarray:
    """Convolve every channel with a square kernel.

    Samples outside the buffer are clamped to the nearest edge pixel.  In
    opaque mode the output alpha is forced to 255.
    """
    side = int(round(math.sqrt(len(weights))))
    if side * side != len(weights):
        raise ValueError(f"kernel of length {len(weights)} is not square")
    half = side // 2

    height, width = pixels.shape[:2]
    src = pixels.astype(np.float64)
    padded = np.pad(src, ((half, half), (half, half), (0, 0)), mode="edge")

    acc = np.zeros_like(src)
    for cy in range(side):
        for cx in range(side):
            weight = weights[cy * side + cx]
            if weight == 0:
                continue
            acc += weight * padded[cy:cy + height, cx:cx + width]

    if opaque:
        acc[..., 3] = 255.0

    return _to_uint8(acc)


def red_rows(pixels: np.ndarray) -> np.ndarray:
    """Reduce an RGBA array to its red channel, one byte per column per row."""
    return np.ascontiguousarray(pixels[..., 0])
