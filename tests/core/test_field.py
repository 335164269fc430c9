"""Tests for the Chladni field function."""

import math

import numpy as np
import pytest

from chladniscope.core.field import chladni, field_grid, field_magnitude, remap


class TestRemap:
    def test_endpoints(self):
        assert remap(0, 0, 10, 100, 800) == 100
        assert remap(10, 0, 10, 100, 800) == 800

    def test_midpoint(self):
        assert remap(5, 0, 10, -1, 1) == pytest.approx(0.0)

    def test_unclamped(self):
        assert remap(20, 0, 10, 0, 1) == pytest.approx(2.0)


class TestChladni:
    @pytest.mark.parametrize("m,n", [(1, 2), (3, 5), (7, 4), (15, 1)])
    def test_antisymmetric_under_mode_swap(self, m, n):
        rng = np.random.default_rng(0)
        scale = 360.0
        for x, y in rng.uniform(-scale, scale, (25, 2)):
            assert chladni(x, y, m, n, scale) == pytest.approx(-chladni(x, y, n, m, scale))

    def test_pure(self):
        a = chladni(12.5, -40.0, 3, 5, 360.0)
        b = chladni(12.5, -40.0, 3, 5, 360.0)
        assert a == b

    def test_equal_modes_vanish(self):
        for x, y in [(0, 0), (10, 200), (-300, 55)]:
            assert chladni(x, y, 4, 4, 360.0) == 0.0

    def test_known_value(self):
        # m=1, n=2 at x=L/2, y=0: cos(pi)*cos(0) - cos(pi/2)*cos(0) = -1
        scale = 360.0
        assert chladni(scale / 2, 0.0, 1, 2, scale) == pytest.approx(-1.0)


class TestFieldMagnitude:
    def test_non_negative(self):
        rng = np.random.default_rng(1)
        for px, py in rng.uniform(0, 1000, (20, 2)):
            assert field_magnitude(px, py, 3, 7, 1080, 1350) >= 0.0

    def test_canvas_centre_is_nodal(self):
        # Centre maps to field origin where both terms are equal
        assert field_magnitude(540, 675, 2, 9, 1080, 1350) == pytest.approx(0.0)

    def test_uses_width_third_as_scale(self):
        width, height = 1080, 1350
        scale = width / 3
        px, py = 700.0, 300.0
        x = -scale + 2 * scale * px / width
        y = -scale + 2 * scale * py / height
        expected = abs(chladni(x, y, 2, 5, scale))
        assert field_magnitude(px, py, 2, 5, width, height) == pytest.approx(expected)

    def test_grid_matches_pointwise(self):
        grid = field_grid(3, 5, 90, 120)
        assert grid.shape == (120, 90)
        for row, col in [(0, 0), (60, 45), (119, 89), (17, 70)]:
            assert grid[row, col] == pytest.approx(field_magnitude(col, row, 3, 5, 90, 120))

    def test_grid_bounded(self):
        grid = field_grid(6, 2, 64, 64)
        assert grid.min() >= 0.0
        assert grid.max() <= 2.0 + 1e-9
        assert math.isfinite(float(grid.sum()))
