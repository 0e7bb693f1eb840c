"""Shared fixtures for blurcheck tests.

Provides synthetic image builders, fake page/document/renderer/vision
collaborators, programmatic PDF fixtures, and common pytest fixtures used
across test modules.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any, Callable

import numpy as np
import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from blurcheck.capability import CapabilityLoader
from blurcheck.config import BlurCheckConfig
from blurcheck.models import PixelBuffer, RenderIntent, TextItem


# ---------------------------------------------------------------------------
# Synthetic Images
# ---------------------------------------------------------------------------


def _checkerboard_array(width: int, height: int, square: int = 16) -> np.ndarray:
    """Black/white checkerboard as an ``HxWx4`` opaque RGBA array."""
    ys, xs = np.indices((height, width))
    white = ((xs // square) + (ys // square)) % 2 == 1
    value = np.where(white, 255, 0).astype(np.uint8)
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., 0] = value
    rgba[..., 1] = value
    rgba[..., 2] = value
    rgba[..., 3] = 255
    return rgba


def _checkerboard(width: int = 512, height: int = 512, square: int = 16) -> PixelBuffer:
    return PixelBuffer.from_array(_checkerboard_array(width, height, square))


def _flat(width: int = 512, height: int = 512, value: int = 128) -> PixelBuffer:
    rgba = np.full((height, width, 4), value, dtype=np.uint8)
    rgba[..., 3] = 255
    return PixelBuffer.from_array(rgba)


def _soft_edges(width: int = 512, height: int = 512) -> PixelBuffer:
    """Repeating 40px linear falloffs from light to black, like defocused edges.

    Each 128px tile is a light plateau, a ramp down in steps of 6, then a
    black plateau; the next tile starts with a hard rise.
    """
    tile = [240] * 44 + [240 - 6 * k for k in range(1, 41)] + [0] * 44
    row = np.resize(np.array(tile, dtype=np.uint8), width)
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., :3] = row[None, :, None]
    rgba[..., 3] = 255
    return PixelBuffer.from_array(rgba)


def _strokes(width: int = 300, height: int = 120) -> PixelBuffer:
    """White background with crisp 2px black strokes, like rendered glyphs."""
    rgba = np.full((height, width, 4), 255, dtype=np.uint8)
    for x in range(10, width - 10, 6):
        rgba[10 : height - 10, x : x + 2, :3] = 0
    return PixelBuffer.from_array(rgba)


def _png_bytes(buffer: PixelBuffer) -> bytes:
    image = Image.frombytes("RGBA", (buffer.width, buffer.height), buffer.pixels)
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


# ---------------------------------------------------------------------------
# Fake Collaborators
# ---------------------------------------------------------------------------


class FakePage:
    """In-memory :class:`~blurcheck.protocols.PageSource`.

    ``display`` is returned for every display-intent render unless
    ``by_scale`` maps that scale to another buffer; ``text`` is returned
    for print-intent renders.
    """

    def __init__(
        self,
        display: PixelBuffer,
        *,
        text: PixelBuffer | None = None,
        items: list[str] | None = None,
        by_scale: dict[float, PixelBuffer] | None = None,
        fail_render: Exception | None = None,
        fail_text_render: Exception | None = None,
    ) -> None:
        self._display = display
        self._text = text or display
        self._items = [TextItem(text=t) for t in (items or [])]
        self._by_scale = by_scale or {}
        self._fail_render = fail_render
        self._fail_text_render = fail_text_render
        self.renders: list[tuple[float, RenderIntent]] = []

    def text_items(self) -> list[TextItem]:
        return list(self._items)

    def render(
        self, scale: float, intent: RenderIntent = RenderIntent.DISPLAY
    ) -> PixelBuffer:
        self.renders.append((scale, intent))
        if intent == RenderIntent.PRINT:
            if self._fail_text_render is not None:
                raise self._fail_text_render
            return self._text
        if self._fail_render is not None:
            raise self._fail_render
        return self._by_scale.get(scale, self._display)


class FakeDocument:
    """In-memory :class:`~blurcheck.protocols.DocumentSource`."""

    def __init__(self, pages: list[Any], fail_load_at: int | None = None) -> None:
        self._pages = pages
        self._fail_load_at = fail_load_at
        self.closed = False

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def load_page(self, page_index: int) -> Any:
        if page_index == self._fail_load_at:
            raise RuntimeError(f"page {page_index} stream is damaged")
        return self._pages[page_index - 1]

    def close(self) -> None:
        self.closed = True


class FakeRenderer:
    """:class:`~blurcheck.protocols.PdfRenderer` returning a fixed document."""

    def __init__(self, document: FakeDocument) -> None:
        self.document = document
        self.opened: list[Any] = []

    def open(self, source: Any) -> FakeDocument:
        self.opened.append(source)
        return self.document


class FakeVision:
    """:class:`~blurcheck.protocols.VisionCapability` with a fixed answer."""

    def __init__(self, variance: float = 500.0, error: Exception | None = None) -> None:
        self.variance = variance
        self.error = error
        self.calls = 0

    def compute_laplacian_variance(self, buffer: PixelBuffer) -> float:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.variance


def _loader(
    capability: Any = None,
    *,
    factory: Callable[[], Any] | None = None,
    name: str = "fake",
    timeout: float = 1.0,
) -> CapabilityLoader:
    """Build a loader for *capability*, or for an explicit *factory*."""
    return CapabilityLoader(
        name,
        factory or (lambda: capability),
        poll_interval=0.01,
        timeout=timeout,
    )


def _failing_loader(message: str = "library not installed") -> CapabilityLoader:
    def factory() -> Any:
        raise ImportError(message)

    return _loader(factory=factory)


# ---------------------------------------------------------------------------
# Pytest Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> BlurCheckConfig:
    return BlurCheckConfig()


@pytest.fixture()
def sharp_buffer() -> PixelBuffer:
    return _checkerboard()


@pytest.fixture()
def flat_buffer() -> PixelBuffer:
    return _flat()


@pytest.fixture()
def blurred_buffer() -> PixelBuffer:
    return _soft_edges()


@pytest.fixture()
def stroke_buffer() -> PixelBuffer:
    return _strokes()


# ---------------------------------------------------------------------------
# Pytest Fixtures -- Programmatic PDF Generation
# ---------------------------------------------------------------------------


_BODY_LINES = [
    "Account statement for the period ending March 31, 2024.",
    "All transactions listed below were posted to the primary account.",
    "Please review the details and report any discrepancy within thirty days.",
    "Interest was calculated on the average daily balance for the period.",
    "Thank you for banking with us; this notice requires no further action.",
]


@pytest.fixture()
def text_pdf(tmp_path: Path) -> Path:
    """Three-page digital PDF with extractable text on every page."""
    path = tmp_path / "text.pdf"
    c = canvas.Canvas(str(path), pagesize=letter)

    for page_num in range(1, 4):
        c.setFont("Helvetica-Bold", 18)
        c.drawString(72, 700, f"Section {page_num}")
        c.setFont("Helvetica", 11)
        y = 660
        for line in _BODY_LINES * 4:
            c.drawString(72, y, line)
            y -= 18
        c.setFont("Helvetica", 9)
        c.drawString(280, 40, f"Page {page_num} of 3")
        c.showPage()

    c.save()
    return path


@pytest.fixture()
def scanned_pdf(tmp_path: Path) -> Path:
    """Two-page PDF whose pages are raster images with no text layer."""
    path = tmp_path / "scanned.pdf"
    c = canvas.Canvas(str(path), pagesize=letter)
    page_width, page_height = letter

    for _ in range(2):
        image = Image.fromarray(_checkerboard_array(612, 792, 24)[..., :3])
        buf = io.BytesIO()
        image.save(buf, format="PNG")
        buf.seek(0)
        c.drawImage(ImageReader(buf), 0, 0, width=page_width, height=page_height)
        c.showPage()

    c.save()
    return path


@pytest.fixture()
def corrupt_pdf_bytes() -> bytes:
    return b"this is definitely not a pdf document"
