"""Tests for blurcheck.edge -- edge scan and EdgeWidthEstimator."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from blurcheck.config import BlurCheckConfig
from blurcheck.edge import EdgeWidthEstimator, scan_edges

from tests.conftest import _checkerboard, _flat


def _reference_scan(rows: np.ndarray, start_value: int = 0, close_min: int = 20):
    """Straightforward per-pixel loop used to check the vectorized scan."""
    num_edges = 0
    total = 0
    for row in rows.tolist():
        edge_start = -1
        for x, value in enumerate(row):
            if edge_start >= 0 and x > edge_start:
                old = row[x - 1]
                if value < old:
                    if old >= close_min:
                        num_edges += 1
                        total += x - edge_start - 1
                    edge_start = -1
            if value == start_value:
                edge_start = x
    return num_edges, total


@pytest.fixture
def estimator():
    return EdgeWidthEstimator(BlurCheckConfig())


# ---------------------------------------------------------------------------
# scan_edges Tests
# ---------------------------------------------------------------------------


class TestScanEdges:
    def test_single_edge(self):
        rows = np.array([[0, 10, 40, 80, 30]], dtype=np.uint8)
        # Opens at 0, peaks at 80, closes on the drop at x=4.
        assert scan_edges(rows) == (1, 3)

    def test_weak_edge_not_counted(self):
        rows = np.array([[0, 5, 15, 10]], dtype=np.uint8)
        assert scan_edges(rows) == (0, 0)

    def test_weak_edge_still_closes_run(self):
        rows = np.array([[0, 15, 10, 50, 20]], dtype=np.uint8)
        # The drop at x=2 closes the run, so the later drop has no open edge.
        assert scan_edges(rows) == (0, 0)

    def test_latest_start_wins(self):
        rows = np.array([[0, 0, 0, 90, 10]], dtype=np.uint8)
        assert scan_edges(rows) == (1, 1)

    def test_start_on_drop_column_reopens(self):
        rows = np.array([[0, 60, 0, 60, 10]], dtype=np.uint8)
        assert scan_edges(rows) == (2, 2)

    def test_no_start_value(self):
        rows = np.array([[5, 60, 10, 60, 10]], dtype=np.uint8)
        assert scan_edges(rows) == (0, 0)

    def test_rows_are_independent(self):
        rows = np.array([[0, 90, 10], [90, 10, 0]], dtype=np.uint8)
        assert scan_edges(rows) == (1, 1)

    def test_narrow_input(self):
        assert scan_edges(np.zeros((3, 1), dtype=np.uint8)) == (0, 0)

    def test_custom_thresholds(self):
        rows = np.array([[7, 30, 12]], dtype=np.uint8)
        assert scan_edges(rows, start_value=7, close_min_value=31) == (0, 0)
        assert scan_edges(rows, start_value=7, close_min_value=30) == (1, 1)

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_matches_reference_on_random_rows(self, seed):
        rng = np.random.default_rng(seed)
        # Sparse zeros and plenty of drops exercise every transition.
        rows = rng.integers(0, 60, size=(40, 90)).astype(np.uint8)
        rows[rng.random(rows.shape) < 0.2] = 0
        assert scan_edges(rows) == _reference_scan(rows)


# ---------------------------------------------------------------------------
# EdgeWidthEstimator Tests
# ---------------------------------------------------------------------------


class TestMeasure:
    def test_checkerboard_edge_width(self, estimator, sharp_buffer):
        m = estimator.measure(sharp_buffer)
        assert m.width == 512
        assert m.height == 512
        assert m.num_edges > 0
        assert m.avg_edge_width == pytest.approx(2.0)
        assert m.avg_edge_width_perc == pytest.approx(2.0 / 512 * 100)

    def test_flat_has_no_edges(self, estimator, flat_buffer):
        m = estimator.measure(flat_buffer)
        assert m.num_edges == 0
        assert m.avg_edge_width == 0.0
        assert m.avg_edge_width_perc == 0.0

    def test_idempotent(self, estimator, blurred_buffer):
        assert estimator.measure(blurred_buffer) == estimator.measure(blurred_buffer)

    def test_blur_widens_edges(self, estimator, sharp_buffer, blurred_buffer):
        sharp = estimator.measure(sharp_buffer)
        blurred = estimator.measure(blurred_buffer)
        assert blurred.avg_edge_width > sharp.avg_edge_width


class TestEstimate:
    def test_sharp_image_not_blurry(self, estimator, sharp_buffer):
        r = estimator.estimate(sharp_buffer)
        assert r.is_blurry is False
        assert r.method == "edge"
        assert r.confidence == pytest.approx((2.0 / 512 * 100) / 0.5)
        assert r.edge_metrics is not None

    def test_flat_image_blurry_by_low_edge_count(self, estimator, flat_buffer):
        r = estimator.estimate(flat_buffer)
        assert r.is_blurry is True
        assert r.confidence == 0.0

    def test_blurred_image_blurry(self, estimator, blurred_buffer):
        r = estimator.estimate(blurred_buffer)
        assert r.is_blurry is True
        assert r.confidence == 1.0

    def test_tighter_threshold_flags_sharp_image(self, sharp_buffer):
        strict = EdgeWidthEstimator(BlurCheckConfig(edge_width_threshold=0.2))
        r = strict.estimate(sharp_buffer)
        assert r.is_blurry is True
        assert r.confidence == 1.0

    def test_wide_image_passes_tight_threshold(self):
        strict = EdgeWidthEstimator(BlurCheckConfig(edge_width_threshold=0.25))
        r = strict.estimate(_checkerboard(width=1000, height=64))
        assert r.is_blurry is False

    def test_tiny_flat_image_still_blurry(self):
        r = EdgeWidthEstimator(BlurCheckConfig()).estimate(_flat(width=4, height=4))
        assert r.is_blurry is True
        assert r.edge_metrics.num_edges == 0

    def test_soft_edge_metrics(self, estimator, blurred_buffer):
        m = estimator.measure(blurred_buffer)
        # Four ramps per row, each read as one 40px edge.
        assert m.num_edges == 4 * 512
        assert m.avg_edge_width == pytest.approx(40.0)

    def test_debug_logging(self, sharp_buffer, caplog):
        est = EdgeWidthEstimator(BlurCheckConfig(debug=True))
        with caplog.at_level(logging.DEBUG, logger="blurcheck.edge"):
            est.estimate(sharp_buffer)
        assert any("blurcheck | edge" in rec.message for rec in caplog.records)

    def test_no_debug_logging_by_default(self, estimator, sharp_buffer, caplog):
        with caplog.at_level(logging.DEBUG, logger="blurcheck.edge"):
            estimator.estimate(sharp_buffer)
        assert not caplog.records
