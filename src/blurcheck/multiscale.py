"""Per-page blur verdict from multi-scale edge analysis plus text sharpness.

Steps for one page:

1. Render at every configured scale and run the edge method with a
   tightened threshold.  Any blurry scale makes the page blurry.
2. If the page has text, measure text sharpness and OR it into the verdict.
3. If the page looks like a decorative header/logo page, judge it on text
   sharpness alone with a lenient threshold.
"""

from __future__ import annotations

import logging

from blurcheck.combinator import MethodCombinator
from blurcheck.config import BlurCheckConfig
from blurcheck.content import PageContentClassifier
from blurcheck.errors import BlurCheckIssue, ErrorCode
from blurcheck.models import (
    BlurMethod,
    BlurMetricSet,
    PageAnalysis,
    RenderIntent,
    ScaleResult,
    TextItem,
)
from blurcheck.protocols import PageSource
from blurcheck.sharpness import TextSharpnessEstimator

logger = logging.getLogger("blurcheck.multiscale")


class MultiScalePageAnalyzer:
    """Analyze one page of a document."""

    def __init__(self, config: BlurCheckConfig) -> None:
        self._config = config
        scale_threshold = min(
            config.edge_width_threshold, config.page_edge_threshold_cap
        )
        self._scale_config = config.model_copy(
            update={"method": BlurMethod.EDGE, "edge_width_threshold": scale_threshold}
        )
        self._combinator = MethodCombinator(self._scale_config)
        self._sharpness = TextSharpnessEstimator(config)
        self._classifier = PageContentClassifier(config)

    def analyze_scales(
        self, page: PageSource, page_index: int
    ) -> tuple[BlurMetricSet, list[ScaleResult]]:
        """Run the edge method at every scale and merge the verdicts."""
        results: list[BlurMetricSet] = []
        scale_results: list[ScaleResult] = []

        for scale in self._config.page_scales:
            buffer = page.render(scale, RenderIntent.DISPLAY)
            result = self._combinator.analyze(buffer)
            results.append(result)
            scale_results.append(
                ScaleResult(
                    scale=scale,
                    is_blurry=result.is_blurry,
                    confidence=result.confidence,
                    edge_metrics=result.edge_metrics,
                )
            )
            if self._config.debug:
                logger.debug(
                    "blurcheck | page=%d | scale=%.1f | blurry=%s | confidence=%.3f",
                    page_index,
                    scale,
                    result.is_blurry,
                    result.confidence,
                )

        total = len(results)
        blurry_count = sum(1 for r in results if r.is_blurry)
        mean_confidence = sum(r.confidence for r in results) / total

        # The largest scale carries the most detailed metrics.
        detailed = results[-1]
        merged = detailed.model_copy(
            update={
                "is_blurry": blurry_count > 0,
                "confidence": min(max(mean_confidence, blurry_count / total), 1.0),
                "method": f"multi_scale({blurry_count}/{total})",
            }
        )
        return merged, scale_results

    def analyze(
        self,
        page: PageSource,
        page_index: int,
        items: list[TextItem] | None = None,
    ) -> tuple[PageAnalysis, list[BlurCheckIssue]]:
        """Produce the final verdict for *page*.

        Returns a tuple of (PageAnalysis, warnings).  A failing text
        sharpness pass is a warning; the edge verdict is kept.
        """
        warnings: list[BlurCheckIssue] = []
        if items is None:
            items = page.text_items()

        content = self._classifier.classify(items, page_index)
        edge_verdict, scale_results = self.analyze_scales(page, page_index)

        if not items:
            return (
                PageAnalysis(
                    page_index=page_index,
                    blur=edge_verdict,
                    content=content,
                    scale_results=scale_results,
                ),
                warnings,
            )

        try:
            sharpness = self._sharpness.estimate_page(page, items)
        except Exception as exc:
            logger.warning(
                "blurcheck | page=%d | code=%s | detail=%s",
                page_index,
                ErrorCode.W_TEXT_SHARPNESS_SKIPPED.value,
                exc,
            )
            warnings.append(
                BlurCheckIssue(
                    code=ErrorCode.W_TEXT_SHARPNESS_SKIPPED,
                    message=f"Text sharpness analysis failed: {exc}",
                    stage="text_sharpness",
                    recoverable=True,
                    page_number=page_index,
                )
            )
            return (
                PageAnalysis(
                    page_index=page_index,
                    blur=edge_verdict,
                    content=content,
                    scale_results=scale_results,
                ),
                warnings,
            )

        is_blurry = edge_verdict.is_blurry or sharpness.is_text_blurry
        method = f"{edge_verdict.method}+text"

        if content.is_likely_header_page:
            # Logos and cover art trip the edge method; trust the text.
            is_blurry = sharpness.score < self._config.header_sharpness_threshold
            method += "(header_adjusted)"
            if self._config.debug:
                logger.debug(
                    "blurcheck | page=%d | header page, lenient blur criteria applied",
                    page_index,
                )

        blur = edge_verdict.model_copy(
            update={
                "is_blurry": is_blurry,
                "confidence": min(max(edge_verdict.confidence, sharpness.score), 1.0),
                "method": method,
            }
        )
        return (
            PageAnalysis(
                page_index=page_index,
                blur=blur,
                text_sharpness=sharpness,
                content=content,
                scale_results=scale_results,
            ),
            warnings,
        )
