"""Document-level quality policy over per-page verdicts.

Body-page consensus outweighs a single blurry first page: covers and
letterheads often carry artwork that reads as blur, so a document whose
only blurry page is page 1 is still considered good.
"""

from __future__ import annotations

import logging
import math

from blurcheck.config import BlurCheckConfig
from blurcheck.errors import BlurCheckIssue
from blurcheck.models import DocumentAnalysis, PageAnalysis

logger = logging.getLogger("blurcheck.aggregator")


class DocumentQualityAggregator:
    """Combine page verdicts into a document verdict."""

    def __init__(self, config: BlurCheckConfig) -> None:
        self._config = config

    def is_quality_good(self, page_results: list[PageAnalysis]) -> bool:
        """Apply the first-page-leniency / majority policy.

        An empty result list counts as good quality: nothing was found wrong.
        """
        if not page_results:
            return True

        if len(page_results) == 1:
            return not page_results[0].is_blurry

        non_first = page_results[1:]
        blurry_non_first = sum(1 for p in non_first if p.is_blurry)
        first_blurry = page_results[0].is_blurry

        if first_blurry and blurry_non_first == 0:
            # Decorative first page, body is clear.
            good = True
        elif blurry_non_first >= math.ceil(len(non_first) / 2):
            good = False
        else:
            good = True

        if self._config.debug:
            logger.debug(
                "blurcheck | aggregate | first_blurry=%s | body_blurry=%d/%d | good=%s",
                first_blurry,
                blurry_non_first,
                len(non_first),
                good,
            )
        return good

    def is_scanned(self, any_page_without_text: bool, text_length: int) -> bool:
        """A document is scanned if any page lacks text or it has almost none."""
        is_text_based = text_length >= self._config.min_text_chars_for_text_based
        return any_page_without_text or not is_text_based

    def aggregate(
        self,
        page_results: list[PageAnalysis],
        *,
        pages_analyzed: int,
        text_length: int,
        any_page_without_text: bool,
        warnings: list[str] | None = None,
        error_details: list[BlurCheckIssue] | None = None,
        processing_time_seconds: float = 0.0,
    ) -> DocumentAnalysis:
        """Build the :class:`DocumentAnalysis` for a finished page loop."""
        return DocumentAnalysis(
            is_quality_good=self.is_quality_good(page_results),
            is_scanned=self.is_scanned(any_page_without_text, text_length),
            pages_analyzed=pages_analyzed,
            text_length=text_length,
            page_results=page_results,
            warnings=warnings or [],
            error_details=error_details or [],
            processing_time_seconds=processing_time_seconds,
        )
