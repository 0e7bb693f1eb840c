"""PyMuPDF-backed document rendering.

Wraps ``fitz.Document`` / ``fitz.Page`` in the
:class:`~blurcheck.protocols.DocumentSource` and
:class:`~blurcheck.protocols.PageSource` protocols.  Every render call
produces a fresh pixmap, so pages and scales never share a drawing
surface.

PyMuPDF is imported by :func:`load_pymupdf_renderer`, which is the
factory handed to a :class:`~blurcheck.capability.CapabilityLoader`.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

from blurcheck.adapter import to_pixel_buffer
from blurcheck.capability import CapabilityLoader
from blurcheck.config import BlurCheckConfig
from blurcheck.errors import DocumentDecodeFailure, DocumentPasswordProtected
from blurcheck.models import PixelBuffer, RenderIntent, TextItem
from blurcheck.protocols import PdfRenderer

if TYPE_CHECKING:
    import fitz  # type: ignore[import-untyped]

logger = logging.getLogger("blurcheck.rendering")

_LARGE_DIMENSION_THRESHOLD = 10000


class PdfPage:
    """A single PyMuPDF page."""

    def __init__(self, fitz_module: Any, page: fitz.Page) -> None:  # type: ignore[name-defined]
        self._fitz = fitz_module
        self._page = page

    def text_items(self) -> list[TextItem]:
        """Return every text span of the page in reading order."""
        items: list[TextItem] = []
        content = self._page.get_text("dict")
        for block in content.get("blocks", []):
            # Image blocks carry no "lines".
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    items.append(TextItem(text=span.get("text", "")))
        return items

    def render(
        self, scale: float, intent: RenderIntent = RenderIntent.DISPLAY
    ) -> PixelBuffer:
        """Render the page at *scale* times its natural size.

        ``PRINT`` intent leaves out annotations so only page content is
        rasterized.
        """
        matrix = self._fitz.Matrix(scale, scale)
        pix = self._page.get_pixmap(
            matrix=matrix,
            alpha=False,
            annots=intent == RenderIntent.DISPLAY,
        )

        if pix.width > _LARGE_DIMENSION_THRESHOLD or pix.height > _LARGE_DIMENSION_THRESHOLD:
            logger.warning(
                "blurcheck | render | large page dimensions %dx%d at scale %.1f",
                pix.width,
                pix.height,
                scale,
            )

        return to_pixel_buffer(pix)


class PdfDocument:
    """An open PyMuPDF document. Usable as a context manager."""

    def __init__(self, fitz_module: Any, doc: fitz.Document) -> None:  # type: ignore[name-defined]
        self._fitz = fitz_module
        self._doc = doc

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def load_page(self, page_index: int) -> PdfPage:
        """Return the page at 1-based *page_index*."""
        return PdfPage(self._fitz, self._doc.load_page(page_index - 1))

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> PdfDocument:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PyMuPDFRenderer:
    """:class:`~blurcheck.protocols.PdfRenderer` using PyMuPDF."""

    def __init__(self, fitz_module: Any) -> None:
        self._fitz = fitz_module

    def open(self, source: bytes | str | os.PathLike) -> PdfDocument:
        """Open PDF bytes or a path.

        Raises
        ------
        DocumentDecodeFailure
            If PyMuPDF cannot parse the document, even after a repair attempt.
        DocumentPasswordProtected
            If the document is encrypted with a user password.
        """
        try:
            doc = self._open(source, filetype=None)
        except Exception:
            # Attempt repair by forcing PDF interpretation
            try:
                doc = self._open(source, filetype="pdf")
            except Exception as exc:
                raise DocumentDecodeFailure(
                    f"PyMuPDF cannot open document: {exc}"
                ) from exc

        if doc.needs_pass:
            doc.close()
            raise DocumentPasswordProtected("Document requires a password to open")

        return PdfDocument(self._fitz, doc)

    def _open(self, source: bytes | str | os.PathLike, filetype: str | None) -> Any:
        if isinstance(source, (bytes, bytearray, memoryview)):
            return self._fitz.open(stream=bytes(source), filetype=filetype or "pdf")
        if filetype is None:
            return self._fitz.open(os.fspath(source))
        return self._fitz.open(os.fspath(source), filetype=filetype)


def load_pymupdf_renderer() -> PyMuPDFRenderer:
    """Import PyMuPDF and wrap it. Raises ImportError when not installed."""
    import fitz  # type: ignore[import-untyped]

    return PyMuPDFRenderer(fitz)


def create_renderer_loader(
    config: BlurCheckConfig | None = None,
) -> CapabilityLoader[PdfRenderer]:
    """Build the default PyMuPDF loader with the configured wait bounds."""
    config = config or BlurCheckConfig()
    return CapabilityLoader(
        "pymupdf",
        load_pymupdf_renderer,
        poll_interval=config.capability_poll_interval_seconds,
        timeout=config.capability_load_timeout_seconds,
    )
