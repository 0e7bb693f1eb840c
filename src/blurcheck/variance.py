"""Variance-of-Laplacian blur estimation.

The Laplacian computation itself is delegated to a
:class:`~blurcheck.protocols.VisionCapability` obtained through a
:class:`~blurcheck.capability.CapabilityLoader`.  Failures of the
capability never escape this module: they come back as the ``error`` of
an :class:`~blurcheck.models.EstimatorResult` so the combinator can pick
a fallback.
"""

from __future__ import annotations

import logging
from typing import Any

from blurcheck.capability import CapabilityLoader
from blurcheck.config import BlurCheckConfig
from blurcheck.errors import BlurCheckError, BlurCheckIssue, ErrorCode
from blurcheck.models import BlurMetricSet, EstimatorResult, PixelBuffer
from blurcheck.protocols import VisionCapability

logger = logging.getLogger("blurcheck.variance")


class OpenCVCapability:
    """``VisionCapability`` backed by OpenCV."""

    def __init__(self, cv2: Any) -> None:
        self._cv2 = cv2

    def compute_laplacian_variance(self, buffer: PixelBuffer) -> float:
        cv2 = self._cv2
        gray = cv2.cvtColor(buffer.to_array().copy(), cv2.COLOR_RGBA2GRAY)
        laplacian = cv2.Laplacian(gray, cv2.CV_64F)
        _, stddev = cv2.meanStdDev(laplacian)
        return float(stddev[0][0]) ** 2


def load_opencv_capability() -> OpenCVCapability:
    """Import OpenCV and wrap it. Raises ImportError when not installed."""
    import cv2  # type: ignore[import-untyped]

    return OpenCVCapability(cv2)


def create_vision_loader(
    config: BlurCheckConfig | None = None,
) -> CapabilityLoader[VisionCapability]:
    """Build the default OpenCV loader with the configured wait bounds."""
    config = config or BlurCheckConfig()
    return CapabilityLoader(
        "opencv",
        load_opencv_capability,
        poll_interval=config.capability_poll_interval_seconds,
        timeout=config.capability_load_timeout_seconds,
    )


class VarianceEstimator:
    """Classify a buffer as blurry when its Laplacian variance is low."""

    method_tag = "variance"

    def __init__(
        self,
        config: BlurCheckConfig,
        loader: CapabilityLoader[VisionCapability],
    ) -> None:
        self._config = config
        self._loader = loader

    def estimate(self, buffer: PixelBuffer) -> EstimatorResult:
        """Return metrics, or an error describing why the capability failed."""
        try:
            capability = self._loader.get()
        except BlurCheckError as exc:
            return EstimatorResult(error=exc.issue)

        try:
            variance = float(capability.compute_laplacian_variance(buffer))
        except Exception as exc:
            return EstimatorResult(
                error=BlurCheckIssue(
                    code=ErrorCode.E_CAPABILITY_FAILED,
                    message=f"{self._loader.name} failed computing variance: {exc}",
                    stage="variance",
                    recoverable=True,
                )
            )

        threshold = self._config.variance_threshold
        is_blurry = variance < threshold
        confidence = 1.0 if variance <= 0 else min(threshold / variance, 1.0)

        if self._config.debug:
            logger.debug(
                "blurcheck | variance | value=%.3f | threshold=%.3f | blurry=%s",
                variance,
                threshold,
                is_blurry,
            )

        return EstimatorResult(
            metrics=BlurMetricSet(
                is_blurry=is_blurry,
                confidence=confidence,
                method=self.method_tag,
                variance_value=variance,
            )
        )
