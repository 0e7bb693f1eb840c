"""Normalize input handles into :class:`~blurcheck.models.PixelBuffer`.

Supported input kinds:

- ``PixelBuffer``: returned unchanged.
- ``numpy.ndarray``: ``HxW`` gray, ``HxWx3`` RGB or ``HxWx4`` RGBA, uint8.
- rendered surfaces: ``PIL.Image.Image`` (any mode) or a PyMuPDF ``Pixmap``.
- encoded image bytes (``bytes``, ``bytearray``, ``memoryview``): decoded
  with Pillow.
- ``os.PathLike``: the file is read and decoded like encoded bytes.

The kind is resolved once by :func:`input_kind`; each kind has one adapter.
"""

from __future__ import annotations

import io
import logging
import os
from enum import Enum
from typing import Any, Callable

import numpy as np
from PIL import Image, UnidentifiedImageError

from blurcheck.errors import SurfaceAcquisitionError, UnsupportedInputKind
from blurcheck.models import PixelBuffer

logger = logging.getLogger("blurcheck.adapter")

_PIXMAP_MODES = {1: "L", 3: "RGB", 4: "RGBA"}


class InputKind(str, Enum):
    """Tag for each supported input shape."""

    PIXEL_BUFFER = "pixel_buffer"
    ARRAY = "array"
    SURFACE = "surface"
    PIXMAP = "pixmap"
    ENCODED = "encoded"
    PATH = "path"


def _is_pixmap(source: Any) -> bool:
    return all(hasattr(source, attr) for attr in ("samples", "width", "height", "n"))


def input_kind(source: Any) -> InputKind:
    """Resolve the kind of *source*, raising ``UnsupportedInputKind`` if none fits."""
    if isinstance(source, PixelBuffer):
        return InputKind.PIXEL_BUFFER
    if isinstance(source, np.ndarray):
        return InputKind.ARRAY
    if isinstance(source, Image.Image):
        return InputKind.SURFACE
    if isinstance(source, (bytes, bytearray, memoryview)):
        return InputKind.ENCODED
    if isinstance(source, os.PathLike):
        return InputKind.PATH
    if _is_pixmap(source):
        return InputKind.PIXMAP
    raise UnsupportedInputKind(
        f"Unsupported input type: {type(source).__name__}"
    )


# ---------------------------------------------------------------------------
# Per-kind adapters
# ---------------------------------------------------------------------------


def _from_pixel_buffer(source: PixelBuffer) -> PixelBuffer:
    return source


def _from_array(source: np.ndarray) -> PixelBuffer:
    if source.dtype != np.uint8:
        raise UnsupportedInputKind(f"Unsupported array dtype: {source.dtype}")
    if source.ndim == 3 and source.shape[2] == 4:
        return PixelBuffer.from_array(source)
    if source.ndim == 2 or (source.ndim == 3 and source.shape[2] == 3):
        return _from_surface(Image.fromarray(np.ascontiguousarray(source)))
    raise UnsupportedInputKind(f"Unsupported array shape: {source.shape}")


def _from_surface(source: Image.Image) -> PixelBuffer:
    try:
        rgba = source if source.mode == "RGBA" else source.convert("RGBA")
        data = rgba.tobytes()
    except (OSError, ValueError) as exc:
        raise SurfaceAcquisitionError(
            f"Could not draw {source.mode} image onto an RGBA surface: {exc}"
        ) from exc
    width, height = rgba.size
    if width == 0 or height == 0:
        raise SurfaceAcquisitionError("Image has zero width or height")
    return PixelBuffer(width=width, height=height, pixels=data)


def _from_pixmap(source: Any) -> PixelBuffer:
    mode = _PIXMAP_MODES.get(source.n)
    if mode is None:
        raise SurfaceAcquisitionError(
            f"Pixmap with {source.n} channels cannot be drawn as RGBA"
        )
    try:
        image = Image.frombytes(mode, (source.width, source.height), source.samples)
    except ValueError as exc:
        raise SurfaceAcquisitionError(f"Could not read pixmap samples: {exc}") from exc
    return _from_surface(image)


def _from_encoded(source: bytes | bytearray | memoryview) -> PixelBuffer:
    try:
        with Image.open(io.BytesIO(bytes(source))) as image:
            image.load()
            return _from_surface(image)
    except (UnidentifiedImageError, OSError) as exc:
        raise SurfaceAcquisitionError(f"Could not decode image bytes: {exc}") from exc


def _from_path(source: os.PathLike) -> PixelBuffer:
    with open(source, "rb") as fh:
        return _from_encoded(fh.read())


_ADAPTERS: dict[InputKind, Callable[[Any], PixelBuffer]] = {
    InputKind.PIXEL_BUFFER: _from_pixel_buffer,
    InputKind.ARRAY: _from_array,
    InputKind.SURFACE: _from_surface,
    InputKind.PIXMAP: _from_pixmap,
    InputKind.ENCODED: _from_encoded,
    InputKind.PATH: _from_path,
}


def to_pixel_buffer(source: Any) -> PixelBuffer:
    """Normalize *source* into an RGBA :class:`PixelBuffer`.

    Raises
    ------
    UnsupportedInputKind
        If *source* is not one of the supported kinds.
    SurfaceAcquisitionError
        If *source* cannot be decoded or drawn as RGBA.
    """
    kind = input_kind(source)
    buffer = _ADAPTERS[kind](source)
    logger.debug(
        "blurcheck | adapter | kind=%s | size=%dx%d",
        kind.value,
        buffer.width,
        buffer.height,
    )
    return buffer
