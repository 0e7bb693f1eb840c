"""blurcheck -- Blur and scan-quality detection for images and PDF documents."""

from blurcheck.adapter import InputKind, to_pixel_buffer
from blurcheck.aggregator import DocumentQualityAggregator
from blurcheck.capability import CapabilityLoader, CapabilityState
from blurcheck.checker import BlurChecker, create_default_checker
from blurcheck.combinator import FALLBACK_METHOD_TAG, MethodCombinator
from blurcheck.config import BlurCheckConfig
from blurcheck.content import PageContentClassifier
from blurcheck.edge import EdgeWidthEstimator
from blurcheck.errors import (
    BlurCheckError,
    BlurCheckIssue,
    CapabilityLoadTimeout,
    CapabilityUnavailable,
    DocumentDecodeFailure,
    DocumentPasswordProtected,
    ErrorCode,
    PageAnalysisFailure,
    SurfaceAcquisitionError,
    UnsupportedInputKind,
)
from blurcheck.models import (
    BlurMethod,
    BlurMetricSet,
    ContentClass,
    DocumentAnalysis,
    EdgeMetrics,
    EstimatorResult,
    PageAnalysis,
    PixelBuffer,
    RenderIntent,
    ScaleResult,
    TextItem,
    TextSharpness,
)
from blurcheck.multiscale import MultiScalePageAnalyzer
from blurcheck.protocols import DocumentSource, PageSource, PdfRenderer, VisionCapability
from blurcheck.rendering import PyMuPDFRenderer, create_renderer_loader
from blurcheck.sharpness import TextSharpnessEstimator
from blurcheck.variance import OpenCVCapability, VarianceEstimator, create_vision_loader

__all__ = [
    # Checker
    "BlurChecker",
    "create_default_checker",
    # Config
    "BlurCheckConfig",
    # Models -- enums
    "BlurMethod",
    "RenderIntent",
    "InputKind",
    "CapabilityState",
    # Models -- data
    "PixelBuffer",
    "TextItem",
    "EdgeMetrics",
    "BlurMetricSet",
    "EstimatorResult",
    "ScaleResult",
    "TextSharpness",
    "ContentClass",
    "PageAnalysis",
    "DocumentAnalysis",
    # Analysis components
    "to_pixel_buffer",
    "EdgeWidthEstimator",
    "VarianceEstimator",
    "MethodCombinator",
    "FALLBACK_METHOD_TAG",
    "TextSharpnessEstimator",
    "PageContentClassifier",
    "MultiScalePageAnalyzer",
    "DocumentQualityAggregator",
    # Capabilities
    "CapabilityLoader",
    "OpenCVCapability",
    "PyMuPDFRenderer",
    "create_vision_loader",
    "create_renderer_loader",
    # Protocols
    "VisionCapability",
    "PageSource",
    "DocumentSource",
    "PdfRenderer",
    # Errors
    "ErrorCode",
    "BlurCheckIssue",
    "BlurCheckError",
    "UnsupportedInputKind",
    "SurfaceAcquisitionError",
    "CapabilityLoadTimeout",
    "CapabilityUnavailable",
    "PageAnalysisFailure",
    "DocumentDecodeFailure",
    "DocumentPasswordProtected",
]
