"""Tests for blurcheck.filters -- luminance, convolution, red channel reduction."""

from __future__ import annotations

import numpy as np
import pytest

from blurcheck.filters import SOBEL_KERNEL, convolve, luminance, red_rows


def _rgba(values: list[list[tuple[int, int, int, int]]]) -> np.ndarray:
    return np.array(values, dtype=np.uint8)


def _gray_row(values: list[int]) -> np.ndarray:
    return _rgba([[(v, v, v, 255) for v in values]])


_IDENTITY = (0, 0, 0, 0, 1, 0, 0, 0, 0)


class TestLuminance:
    def test_pure_red(self):
        out = luminance(_rgba([[(255, 0, 0, 77)]]))
        assert out[0, 0].tolist() == [54, 54, 54, 77]

    def test_white_stays_white(self):
        out = luminance(_rgba([[(255, 255, 255, 255)]]))
        assert out[0, 0].tolist() == [255, 255, 255, 255]

    def test_does_not_modify_input(self):
        src = _rgba([[(10, 200, 30, 255)]])
        before = src.copy()
        luminance(src)
        np.testing.assert_array_equal(src, before)


class TestConvolve:
    def test_identity_kernel(self):
        src = _rgba([[(1, 2, 3, 40), (50, 60, 70, 80)]])
        out = convolve(src, _IDENTITY, opaque=False)
        np.testing.assert_array_equal(out, src)

    def test_opaque_forces_alpha(self):
        src = _rgba([[(1, 2, 3, 40)]])
        out = convolve(src, _IDENTITY, opaque=True)
        assert out[0, 0, 3] == 255

    def test_non_square_kernel_rejected(self):
        with pytest.raises(ValueError, match="not square"):
            convolve(_gray_row([0, 0]), (1, 2, 3))

    def test_rounds_half_to_even(self):
        half = (0, 0, 0, 0, 0.5, 0, 0, 0, 0)
        out = convolve(_gray_row([1, 3, 5]), half)
        assert out[0, :, 0].tolist() == [0, 2, 2]

    def test_clamps_to_byte_range(self):
        double = (0, 0, 0, 0, 2, 0, 0, 0, 0)
        out = convolve(_gray_row([200]), double)
        assert out[0, 0, 0] == 255

    def test_sobel_responds_to_falling_step(self):
        out = convolve(_gray_row([255, 255, 0, 0]), SOBEL_KERNEL)
        assert out[0, :, 0].tolist() == [0, 255, 255, 0]

    def test_sobel_clamps_rising_step_to_zero(self):
        out = convolve(_gray_row([0, 0, 255, 255]), SOBEL_KERNEL)
        assert out[0, :, 0].tolist() == [0, 0, 0, 0]

    def test_flat_image_has_no_response(self):
        flat = np.full((5, 5, 4), 90, dtype=np.uint8)
        out = convolve(flat, SOBEL_KERNEL)
        assert not out[..., :3].any()


class TestRedRows:
    def test_extracts_red_channel(self):
        src = _rgba([[(1, 2, 3, 4), (5, 6, 7, 8)], [(9, 10, 11, 12), (13, 14, 15, 16)]])
        rows = red_rows(src)
        assert rows.shape == (2, 2)
        assert rows.tolist() == [[1, 5], [9, 13]]
