"""Edge-width blur estimation.

The buffer is converted to luminance, filtered with a horizontal Sobel
kernel, and reduced to one byte per pixel.  Each row is then scanned for
edge runs: a run opens on a pixel equal to ``edge_start_value`` and closes
on the first later pixel that is darker than its predecessor.  Wide runs
mean soft transitions, i.e. blur.
"""

from __future__ import annotations

import logging

import numpy as np

from blurcheck.config import BlurCheckConfig
from blurcheck.filters import SOBEL_KERNEL, convolve, luminance, red_rows
from blurcheck.models import BlurMetricSet, EdgeMetrics, PixelBuffer

logger = logging.getLogger("blurcheck.edge")


def scan_edges(
    rows: np.ndarray, start_value: int = 0, close_min_value: int = 20
) -> tuple[int, int]:
    """Count closed edges and sum their widths over a 2-D uint8 array.

    Returns ``(num_edges, total_width)``.

    The left-to-right state machine is evaluated for all rows at once: a
    drop at column ``x`` closes the run opened at the last start column
    before ``x``, unless another drop already happened since that start.
    """
    height, width = rows.shape
    if width < 2 or height == 0:
        return 0, 0

    values = rows.astype(np.int16)
    cols = np.arange(width)

    last_start = np.maximum.accumulate(
        np.where(values == start_value, cols, -1), axis=1
    )

    drop = np.zeros(values.shape, dtype=bool)
    drop[:, 1:] = values[:, 1:] < values[:, :-1]
    last_drop = np.maximum.accumulate(np.where(drop, cols, -1), axis=1)

    prev_start = last_start[:, :-1]
    prev_drop = last_drop[:, :-1]
    closing = drop[:, 1:] & (prev_start >= 0) & (prev_start >= prev_drop)
    counted = closing & (values[:, :-1] >= close_min_value)

    widths = cols[1:] - prev_start - 1
    return int(counted.sum()), int(widths[counted].sum())


class EdgeWidthEstimator:
    """Measure average edge width and turn it into a blur verdict."""

    method_tag = "edge"

    def __init__(self, config: BlurCheckConfig) -> None:
        self._config = config

    def measure(self, buffer: PixelBuffer) -> EdgeMetrics:
        """Compute :class:`EdgeMetrics` for *buffer*. Pure and idempotent."""
        edges = convolve(luminance(buffer.to_array()), SOBEL_KERNEL, opaque=True)
        rows = red_rows(edges)

        num_edges, total_width = scan_edges(
            rows,
            start_value=self._config.edge_start_value,
            close_min_value=self._config.edge_close_min_value,
        )

        if num_edges == 0:
            return EdgeMetrics(
                width=buffer.width,
                height=buffer.height,
                num_edges=0,
                avg_edge_width=0.0,
                avg_edge_width_perc=0.0,
            )

        avg_edge_width = total_width / num_edges
        return EdgeMetrics(
            width=buffer.width,
            height=buffer.height,
            num_edges=num_edges,
            avg_edge_width=avg_edge_width,
            avg_edge_width_perc=avg_edge_width / buffer.width * 100,
        )

    def estimate(self, buffer: PixelBuffer) -> BlurMetricSet:
        """Classify *buffer* as blurry or sharp from its edge metrics."""
        threshold = self._config.edge_width_threshold
        metrics = self.measure(buffer)

        blurry_by_width = metrics.avg_edge_width_perc > threshold
        # Heavily blurred or blank regions barely produce edges at all.
        min_edges = (metrics.width * metrics.height) / self._config.low_edge_count_divisor
        low_edge_count = metrics.num_edges < min_edges

        if self._config.debug:
            logger.debug(
                "blurcheck | edge | size=%dx%d | edges=%d | avg_width=%.3f | "
                "perc=%.4f | threshold=%.3f | by_width=%s | low_count=%s",
                metrics.width,
                metrics.height,
                metrics.num_edges,
                metrics.avg_edge_width,
                metrics.avg_edge_width_perc,
                threshold,
                blurry_by_width,
                low_edge_count,
            )

        return BlurMetricSet(
            is_blurry=blurry_by_width or low_edge_count,
            confidence=min(metrics.avg_edge_width_perc / threshold, 1.0),
            method=self.method_tag,
            edge_metrics=metrics,
        )
