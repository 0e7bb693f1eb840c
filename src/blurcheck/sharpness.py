"""Text sharpness estimation over rendered glyph regions.

A small window slides over the luminance of a high-resolution render.
Windows with enough contrast are treated as text-bearing; their local
variance and their strongest neighbour gradient are averaged into one
sharpness score.  Crisp glyphs give high variance and steep gradients.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from blurcheck.config import BlurCheckConfig
from blurcheck.models import PixelBuffer, RenderIntent, TextItem, TextSharpness
from blurcheck.protocols import PageSource

logger = logging.getLogger("blurcheck.sharpness")

# ITU-R BT.601 luma, distinct from the CIE weights used for edge widths.
_GRAY_WEIGHTS = (0.299, 0.587, 0.114)

_VARIANCE_SCALE = 1000.0
_GRADIENT_SCALE = 50.0


def _gray(buffer: PixelBuffer) -> np.ndarray:
    rgb = buffer.to_array()[..., :3].astype(np.float64)
    r_w, g_w, b_w = _GRAY_WEIGHTS
    return r_w * rgb[..., 0] + g_w * rgb[..., 1] + b_w * rgb[..., 2]


class TextSharpnessEstimator:
    """Score how sharp the text of a page renders."""

    def __init__(self, config: BlurCheckConfig) -> None:
        self._config = config

    def measure(self, buffer: PixelBuffer) -> TextSharpness:
        """Compute the sharpness of an already-rendered buffer."""
        size = self._config.text_window_size
        gray = _gray(buffer)
        height, width = gray.shape
        stride = max(1, min(width, height) // 100)

        if height <= size or width <= size:
            return self._score(np.empty(0), np.empty(0))

        windows = sliding_window_view(gray, (size, size))[
            : height - size : stride, : width - size : stride
        ]
        count = size * size
        mean = windows.sum(axis=(-2, -1)) / count
        variance = (windows * windows).sum(axis=(-2, -1)) / count - mean * mean

        # Gradient from right and down neighbours, defined on the window's
        # inner (size-1)x(size-1) block.
        base = gray[:-1, :-1]
        grad_x = gray[:-1, 1:] - base
        grad_y = gray[1:, :-1] - base
        magnitude = np.sqrt(grad_x * grad_x + grad_y * grad_y)
        max_gradient = sliding_window_view(magnitude, (size - 1, size - 1))[
            : height - size : stride, : width - size : stride
        ].max(axis=(-2, -1))

        text_like = variance > self._config.text_variance_threshold
        return self._score(variance[text_like], max_gradient[text_like])

    def estimate_page(self, page: PageSource, items: list[TextItem]) -> TextSharpness:
        """Render *page* for text and measure it.

        A page without text items has nothing to judge and is treated as
        blurry.
        """
        if not items:
            return TextSharpness(
                score=0.0,
                is_text_blurry=True,
                sample_count=0,
                avg_variance=0.0,
                avg_edge_intensity=0.0,
            )

        buffer = page.render(self._config.text_render_scale, RenderIntent.PRINT)
        return self.measure(buffer)

    def _score(self, variances: np.ndarray, gradients: np.ndarray) -> TextSharpness:
        sample_count = int(variances.size)
        avg_variance = float(variances.mean()) if sample_count else 0.0
        avg_gradient = float(gradients.mean()) if sample_count else 0.0

        score = avg_variance / _VARIANCE_SCALE + avg_gradient / _GRADIENT_SCALE
        is_blurry = score < self._config.text_sharpness_threshold

        if self._config.debug:
            logger.debug(
                "blurcheck | text_sharpness | samples=%d | avg_variance=%.2f | "
                "avg_gradient=%.2f | score=%.3f | blurry=%s",
                sample_count,
                avg_variance,
                avg_gradient,
                score,
                is_blurry,
            )

        return TextSharpness(
            score=max(score, 0.0),
            is_text_blurry=is_blurry,
            sample_count=sample_count,
            avg_variance=avg_variance,
            avg_edge_intensity=avg_gradient,
        )
