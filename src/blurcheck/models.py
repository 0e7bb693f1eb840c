"""Pydantic data models and enumerations for blurcheck.

Contains the pixel buffer, per-estimator metric sets, per-page and
document-level analysis results.  Every model is created fresh per
analysis call and never shared between calls.
"""

from __future__ import annotations

from enum import Enum

import numpy as np
from pydantic import BaseModel, Field, model_validator

from blurcheck.errors import BlurCheckIssue


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class BlurMethod(str, Enum):
    """Single-image blur estimation method."""

    EDGE = "edge"
    VARIANCE = "variance"
    BOTH = "both"


class RenderIntent(str, Enum):
    """How a page is rendered before analysis."""

    DISPLAY = "display"
    PRINT = "print"


# ---------------------------------------------------------------------------
# Pixel data
# ---------------------------------------------------------------------------


class PixelBuffer(BaseModel):
    """Row-major RGBA8 pixels with known dimensions."""

    width: int = Field(ge=1)
    height: int = Field(ge=1)
    pixels: bytes

    @model_validator(mode="after")
    def _check_length(self) -> PixelBuffer:
        expected = self.width * self.height * 4
        if len(self.pixels) != expected:
            raise ValueError(
                f"pixel data has {len(self.pixels)} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )
        return self

    @classmethod
    def from_array(cls, array: np.ndarray) -> PixelBuffer:
        """Build a buffer from an ``(height, width, 4)`` uint8 array."""
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValueError(f"expected an HxWx4 array, got shape {array.shape}")
        height, width = array.shape[:2]
        data = np.ascontiguousarray(array, dtype=np.uint8).tobytes()
        return cls(width=width, height=height, pixels=data)

    def to_array(self) -> np.ndarray:
        """Read-only ``(height, width, 4)`` uint8 view of the pixels."""
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(
            self.height, self.width, 4
        )


class TextItem(BaseModel):
    """One run of extracted page text."""

    text: str


# ---------------------------------------------------------------------------
# Single-image metrics
# ---------------------------------------------------------------------------


class EdgeMetrics(BaseModel):
    """Edge-width measurements over a gradient-filtered buffer."""

    width: int
    height: int
    num_edges: int
    avg_edge_width: float = Field(ge=0.0)
    avg_edge_width_perc: float = Field(ge=0.0)


class BlurMetricSet(BaseModel):
    """Blur verdict for one image with the metrics that produced it."""

    is_blurry: bool
    confidence: float = Field(ge=0.0, le=1.0)
    method: str
    edge_metrics: EdgeMetrics | None = None
    variance_value: float | None = None


class EstimatorResult(BaseModel):
    """Outcome of one estimator: either metrics or a recoverable error."""

    metrics: BlurMetricSet | None = None
    error: BlurCheckIssue | None = None

    @property
    def ok(self) -> bool:
        return self.metrics is not None and self.error is None


class ScaleResult(BaseModel):
    """Edge verdict of a page rendered at one scale."""

    scale: float
    is_blurry: bool
    confidence: float = Field(ge=0.0, le=1.0)
    edge_metrics: EdgeMetrics | None = None


# ---------------------------------------------------------------------------
# Page-level results
# ---------------------------------------------------------------------------


class TextSharpness(BaseModel):
    """Sharpness of rendered glyph regions."""

    score: float = Field(ge=0.0)
    is_text_blurry: bool
    sample_count: int
    avg_variance: float
    avg_edge_intensity: float


class ContentClass(BaseModel):
    """Text-based classification of a page as decorative or body content."""

    is_likely_header_page: bool
    text_density: float
    has_low_text_content: bool
    text_length: int = 0
    has_header_keywords: bool = False
    has_date_pattern: bool = False
    has_amount_pattern: bool = False


class PageAnalysis(BaseModel):
    """Final verdict for one page."""

    page_index: int = Field(ge=1)
    blur: BlurMetricSet
    text_sharpness: TextSharpness | None = None
    content: ContentClass | None = None
    scale_results: list[ScaleResult] = []

    @property
    def is_blurry(self) -> bool:
        return self.blur.is_blurry


# ---------------------------------------------------------------------------
# Document-level result
# ---------------------------------------------------------------------------


class DocumentAnalysis(BaseModel):
    """Quality verdict for a whole paginated document."""

    is_quality_good: bool
    is_scanned: bool
    pages_analyzed: int
    text_length: int
    page_results: list[PageAnalysis]
    warnings: list[str] = []
    error_details: list[BlurCheckIssue] = []
    processing_time_seconds: float = 0.0
