"""BlurChecker -- public API for image and document blur analysis.

Single images go through :class:`~blurcheck.combinator.MethodCombinator`
with the configured method.  Documents are opened with the injected PDF
renderer and walked page by page:

1. Load the page and extract its text items.
2. Analyze it with :class:`~blurcheck.multiscale.MultiScalePageAnalyzer`.
   A failing page is logged, recorded as ``W_PAGE_SKIPPED`` and omitted.
3. Aggregate with :class:`~blurcheck.aggregator.DocumentQualityAggregator`.

Pages are processed sequentially; a document that cannot be opened or
paged through raises :class:`~blurcheck.errors.DocumentDecodeFailure`.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any

from blurcheck.adapter import to_pixel_buffer
from blurcheck.aggregator import DocumentQualityAggregator
from blurcheck.capability import CapabilityLoader
from blurcheck.combinator import MethodCombinator
from blurcheck.config import BlurCheckConfig
from blurcheck.content import join_text
from blurcheck.errors import (
    BlurCheckIssue,
    DocumentDecodeFailure,
    ErrorCode,
    PageAnalysisFailure,
    UnsupportedInputKind,
)
from blurcheck.models import (
    BlurMetricSet,
    DocumentAnalysis,
    PageAnalysis,
    TextItem,
)
from blurcheck.multiscale import MultiScalePageAnalyzer
from blurcheck.protocols import DocumentSource, PageSource, PdfRenderer, VisionCapability
from blurcheck.rendering import create_renderer_loader
from blurcheck.variance import create_vision_loader

logger = logging.getLogger("blurcheck")

_PDF_EXTENSIONS = frozenset({".pdf"})
_IMAGE_EXTENSIONS = frozenset(
    {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tif", ".tiff"}
)


class BlurChecker:
    """Top-level entry point for blur and scan-quality checks.

    Parameters
    ----------
    config:
        Analysis configuration. Uses defaults when *None*.
    vision_loader:
        Loader for the Laplacian-variance capability. Defaults to OpenCV.
    renderer_loader:
        Loader for the PDF renderer. Defaults to PyMuPDF.
    """

    def __init__(
        self,
        config: BlurCheckConfig | None = None,
        vision_loader: CapabilityLoader[VisionCapability] | None = None,
        renderer_loader: CapabilityLoader[PdfRenderer] | None = None,
    ) -> None:
        self._config = config or BlurCheckConfig()
        self._vision_loader = vision_loader or create_vision_loader(self._config)
        self._renderer_loader = renderer_loader or create_renderer_loader(self._config)

        self._combinator = MethodCombinator(self._config, self._vision_loader)
        self._page_analyzer = MultiScalePageAnalyzer(self._config)
        self._aggregator = DocumentQualityAggregator(self._config)

    @property
    def config(self) -> BlurCheckConfig:
        return self._config

    def with_config(self, **overrides: Any) -> BlurChecker:
        """Return a checker with *overrides* applied, sharing this one's loaders."""
        config = BlurCheckConfig(**{**self._config.model_dump(), **overrides})
        return BlurChecker(config, self._vision_loader, self._renderer_loader)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def analyze_image(self, source: Any) -> BlurMetricSet:
        """Analyze a single image for blur.

        *source* may be any input accepted by
        :func:`~blurcheck.adapter.to_pixel_buffer`.
        """
        buffer = to_pixel_buffer(source)
        if self._config.debug:
            logger.debug(
                "blurcheck | image | method=%s | size=%dx%d",
                self._config.method.value,
                buffer.width,
                buffer.height,
            )
        return self._combinator.analyze(buffer)

    def is_image_blurry(self, source: Any) -> bool:
        return self.analyze_image(source).is_blurry

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def analyze_pdf(self, source: bytes | str | os.PathLike) -> DocumentAnalysis:
        """Open a PDF (bytes or path) and analyze every page.

        Raises
        ------
        CapabilityUnavailable
            If the PDF renderer cannot be loaded.
        DocumentDecodeFailure
            If the document cannot be opened.
        """
        renderer = self._renderer_loader.get()
        try:
            document = renderer.open(source)
        except DocumentDecodeFailure as exc:
            logger.error(
                "blurcheck | document | code=%s | detail=%s",
                exc.issue.code.value,
                exc.issue.message,
            )
            raise

        try:
            return self.analyze_document(document)
        finally:
            document.close()

    def analyze_document(self, document: DocumentSource) -> DocumentAnalysis:
        """Analyze an already-open document. The caller owns closing it."""
        start = time.monotonic()
        page_count = document.page_count

        page_results: list[PageAnalysis] = []
        warnings: list[str] = []
        error_details: list[BlurCheckIssue] = []
        text_parts: list[str] = []
        any_page_without_text = False

        for page_index in range(1, page_count + 1):
            if self._config.debug:
                logger.debug(
                    "blurcheck | document | analyzing page %d/%d", page_index, page_count
                )

            page, items = self._load_page(document, page_index)
            if not items:
                any_page_without_text = True
            text_parts.append(join_text(items))

            try:
                analysis, page_warnings = self._analyze_page(page, page_index, items)
            except PageAnalysisFailure as exc:
                logger.warning(
                    "blurcheck | page=%d | code=%s | detail=%s",
                    page_index,
                    exc.issue.code.value,
                    exc.issue.message,
                )
                warnings.append(ErrorCode.W_PAGE_SKIPPED.value)
                error_details.append(exc.issue)
                continue

            page_results.append(analysis)
            for issue in page_warnings:
                warnings.append(issue.code.value)
                error_details.append(issue)

        text_length = sum(len(part) for part in text_parts)
        result = self._aggregator.aggregate(
            page_results,
            pages_analyzed=page_count,
            text_length=text_length,
            any_page_without_text=any_page_without_text,
            warnings=warnings,
            error_details=error_details,
            processing_time_seconds=time.monotonic() - start,
        )

        logger.info(
            "blurcheck | document | pages=%d | analyzed=%d | scanned=%s | "
            "text_length=%d | good=%s | time=%.1fs",
            page_count,
            len(page_results),
            result.is_scanned,
            text_length,
            result.is_quality_good,
            result.processing_time_seconds,
        )
        return result

    def is_pdf_good_quality(self, source: bytes | str | os.PathLike) -> bool:
        return self.analyze_pdf(source).is_quality_good

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def can_handle(self, file_path: str | os.PathLike) -> bool:
        """Return True if the file extension is a supported image or PDF."""
        suffix = Path(file_path).suffix.lower()
        return suffix in _PDF_EXTENSIONS or suffix in _IMAGE_EXTENSIONS

    def analyze_file(
        self, file_path: str | os.PathLike, **overrides: Any
    ) -> BlurMetricSet | DocumentAnalysis:
        """Analyze an image or PDF file, dispatching on its extension.

        Keyword *overrides* are applied on top of this checker's config for
        this call only.
        """
        checker = self.with_config(**overrides) if overrides else self
        path = Path(file_path)
        suffix = path.suffix.lower()

        if suffix in _PDF_EXTENSIONS:
            return checker.analyze_pdf(path)
        if suffix in _IMAGE_EXTENSIONS:
            return checker.analyze_image(path)
        raise UnsupportedInputKind(f"Unsupported file type: {suffix or path.name}")

    def is_file_good_quality(self, file_path: str | os.PathLike, **overrides: Any) -> bool:
        result = self.analyze_file(file_path, **overrides)
        if isinstance(result, DocumentAnalysis):
            return result.is_quality_good
        return not result.is_blurry

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _load_page(
        document: DocumentSource, page_index: int
    ) -> tuple[PageSource, list[TextItem]]:
        try:
            page = document.load_page(page_index)
            return page, page.text_items()
        except Exception as exc:
            raise DocumentDecodeFailure(
                f"Could not read page {page_index}: {exc}", page_number=page_index
            ) from exc

    def _analyze_page(
        self, page: PageSource, page_index: int, items: list[TextItem]
    ) -> tuple[PageAnalysis, list[BlurCheckIssue]]:
        try:
            return self._page_analyzer.analyze(page, page_index, items)
        except Exception as exc:
            raise PageAnalysisFailure(
                f"Failed to analyze page {page_index}: {exc}", page_number=page_index
            ) from exc


def create_default_checker(config: BlurCheckConfig | None = None) -> BlurChecker:
    """Build a :class:`BlurChecker` with OpenCV and PyMuPDF loaders."""
    config = config or BlurCheckConfig()
    return BlurChecker(
        config=config,
        vision_loader=create_vision_loader(config),
        renderer_loader=create_renderer_loader(config),
    )
