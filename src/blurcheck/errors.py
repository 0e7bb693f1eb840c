"""Error codes, structured error model, and exceptions for blurcheck.

``ErrorCode`` holds every error/warning code the library emits.
``BlurCheckIssue`` is the Pydantic record attached to results (and to
exceptions) so callers get a stable code plus location context.  The
exception classes mirror the taxonomy callers can catch:

- ``UnsupportedInputKind`` / ``SurfaceAcquisitionError``: input normalization.
- ``CapabilityLoadTimeout`` / ``CapabilityUnavailable``: external library loading.
- ``PageAnalysisFailure``: recoverable, the page is skipped.
- ``DocumentDecodeFailure``: fatal, aborts a document analysis.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes for blur analysis.

    Each value equals its name so codes are stable strings suitable for
    metrics and alerting.  ``E_`` prefix indicates errors;
    ``W_`` prefix indicates non-fatal warnings.
    """

    # Input normalization
    E_INPUT_UNSUPPORTED = "E_INPUT_UNSUPPORTED"
    E_SURFACE_ACQUISITION = "E_SURFACE_ACQUISITION"

    # Capability loading
    E_CAPABILITY_LOAD_TIMEOUT = "E_CAPABILITY_LOAD_TIMEOUT"
    E_CAPABILITY_UNAVAILABLE = "E_CAPABILITY_UNAVAILABLE"
    E_CAPABILITY_FAILED = "E_CAPABILITY_FAILED"

    # Document / page analysis
    E_PAGE_ANALYSIS = "E_PAGE_ANALYSIS"
    E_DOCUMENT_DECODE = "E_DOCUMENT_DECODE"
    E_DOCUMENT_PASSWORD = "E_DOCUMENT_PASSWORD"

    # Warnings (non-fatal)
    W_VARIANCE_FALLBACK = "W_VARIANCE_FALLBACK"
    W_PAGE_SKIPPED = "W_PAGE_SKIPPED"
    W_TEXT_SHARPNESS_SKIPPED = "W_TEXT_SHARPNESS_SKIPPED"


class BlurCheckIssue(BaseModel):
    """Structured error with code, message, and context.

    ``page_number`` is 1-based and only set for page-level issues.
    """

    code: ErrorCode
    message: str
    stage: str | None = None
    recoverable: bool = False
    page_number: int | None = None


class BlurCheckError(Exception):
    """Base exception carrying a :class:`BlurCheckIssue`."""

    code: ErrorCode = ErrorCode.E_PAGE_ANALYSIS
    stage: str | None = None
    recoverable: bool = False

    def __init__(self, message: str, *, page_number: int | None = None) -> None:
        super().__init__(message)
        self.issue = BlurCheckIssue(
            code=self.code,
            message=message,
            stage=self.stage,
            recoverable=self.recoverable,
            page_number=page_number,
        )


class UnsupportedInputKind(BlurCheckError):
    """Raised when an input handle cannot be normalized to a pixel buffer."""

    code = ErrorCode.E_INPUT_UNSUPPORTED
    stage = "adapter"


class SurfaceAcquisitionError(BlurCheckError):
    """Raised when an input cannot be decoded or drawn onto an RGBA surface."""

    code = ErrorCode.E_SURFACE_ACQUISITION
    stage = "adapter"


class CapabilityLoadTimeout(BlurCheckError):
    """Raised when waiting on an in-progress capability load times out."""

    code = ErrorCode.E_CAPABILITY_LOAD_TIMEOUT
    stage = "capability"
    recoverable = True


class CapabilityUnavailable(BlurCheckError):
    """Raised when a capability failed to load or is not installed."""

    code = ErrorCode.E_CAPABILITY_UNAVAILABLE
    stage = "capability"
    recoverable = True


class PageAnalysisFailure(BlurCheckError):
    """Raised when a single page cannot be analyzed; the page is skipped."""

    code = ErrorCode.E_PAGE_ANALYSIS
    stage = "page"
    recoverable = True


class DocumentDecodeFailure(BlurCheckError):
    """Raised when a document cannot be opened; aborts the analysis."""

    code = ErrorCode.E_DOCUMENT_DECODE
    stage = "decode"


class DocumentPasswordProtected(DocumentDecodeFailure):
    """Raised when a PDF requires a password to open."""

    code = ErrorCode.E_DOCUMENT_PASSWORD
