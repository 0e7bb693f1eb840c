"""Collaborator protocols for blurcheck.

Structural-subtyping interfaces for the external capabilities the
analysis depends on: the vision library computing Laplacian variance and
the document renderer producing pages.  Any object with matching methods
satisfies them; tests use lightweight fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from blurcheck.models import PixelBuffer, RenderIntent, TextItem


@runtime_checkable
class VisionCapability(Protocol):
    """Computes the variance of a Laplacian-filtered buffer."""

    def compute_laplacian_variance(self, buffer: PixelBuffer) -> float: ...


@runtime_checkable
class PageSource(Protocol):
    """One page of a paginated document."""

    def text_items(self) -> list[TextItem]: ...

    def render(
        self, scale: float, intent: RenderIntent = RenderIntent.DISPLAY
    ) -> PixelBuffer: ...


@runtime_checkable
class DocumentSource(Protocol):
    """An opened paginated document."""

    @property
    def page_count(self) -> int: ...

    def load_page(self, page_index: int) -> PageSource:
        """Return the page at 1-based *page_index*."""
        ...

    def close(self) -> None: ...


@runtime_checkable
class PdfRenderer(Protocol):
    """Opens PDF bytes or paths as :class:`DocumentSource` objects."""

    def open(self, source: bytes | str) -> DocumentSource: ...


__all__ = [
    "VisionCapability",
    "PageSource",
    "DocumentSource",
    "PdfRenderer",
]
