"""Merge single-image estimators into one :class:`BlurMetricSet`."""

from __future__ import annotations

import logging

from blurcheck.capability import CapabilityLoader
from blurcheck.config import BlurCheckConfig
from blurcheck.edge import EdgeWidthEstimator
from blurcheck.errors import BlurCheckIssue, ErrorCode
from blurcheck.models import BlurMethod, BlurMetricSet, EstimatorResult, PixelBuffer
from blurcheck.protocols import VisionCapability
from blurcheck.variance import VarianceEstimator

logger = logging.getLogger("blurcheck.combinator")

FALLBACK_METHOD_TAG = "edge_fallback"


class MethodCombinator:
    """Run the configured method(s) and select a fallback when needed.

    ``edge`` and ``variance`` return their estimator's verdict directly.
    ``both`` flags blur when either estimator does and keeps the higher
    confidence.  Whenever the variance estimator reports an error, the
    edge verdict is used alone and tagged ``edge_fallback``.
    """

    def __init__(
        self,
        config: BlurCheckConfig,
        vision_loader: CapabilityLoader[VisionCapability] | None = None,
    ) -> None:
        self._config = config
        self._edge = EdgeWidthEstimator(config)
        self._variance = (
            VarianceEstimator(config, vision_loader) if vision_loader is not None else None
        )

    @property
    def config(self) -> BlurCheckConfig:
        return self._config

    def analyze(self, buffer: PixelBuffer) -> BlurMetricSet:
        method = self._config.method

        if method == BlurMethod.EDGE:
            return self._edge.estimate(buffer)

        variance_result = self._run_variance(buffer)

        if not variance_result.ok:
            return self._fallback(buffer, variance_result)

        variance = variance_result.metrics
        assert variance is not None
        if method == BlurMethod.VARIANCE:
            return variance

        edge = self._edge.estimate(buffer)
        merged = BlurMetricSet(
            is_blurry=edge.is_blurry or variance.is_blurry,
            confidence=max(edge.confidence, variance.confidence),
            method=BlurMethod.BOTH.value,
            edge_metrics=edge.edge_metrics,
            variance_value=variance.variance_value,
        )
        if self._config.debug:
            logger.debug(
                "blurcheck | combine | edge_blurry=%s | variance_blurry=%s | "
                "blurry=%s | confidence=%.3f",
                edge.is_blurry,
                variance.is_blurry,
                merged.is_blurry,
                merged.confidence,
            )
        return merged

    def _run_variance(self, buffer: PixelBuffer) -> EstimatorResult:
        if self._variance is None:
            return EstimatorResult(
                error=BlurCheckIssue(
                    code=ErrorCode.E_CAPABILITY_UNAVAILABLE,
                    message="no vision capability configured",
                    stage="variance",
                    recoverable=True,
                )
            )
        return self._variance.estimate(buffer)

    def _fallback(
        self, buffer: PixelBuffer, variance_result: EstimatorResult
    ) -> BlurMetricSet:
        detail = variance_result.error.message if variance_result.error else "unknown"
        logger.warning(
            "blurcheck | combine | code=%s | method=%s | detail=%s",
            ErrorCode.W_VARIANCE_FALLBACK.value,
            self._config.method.value,
            detail,
        )
        edge = self._edge.estimate(buffer)
        return edge.model_copy(update={"method": FALLBACK_METHOD_TAG})
