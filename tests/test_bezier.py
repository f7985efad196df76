"""Test module for CubicBezier in avspline.bezier

The tests are run using pytest.
"""

import math

import numpy as np
import pytest

from avspline.bezier import CubicBezier
from avspline.geom import Vector2

COORDS = [0.0, 0.0, 0.3, 1.2, 1.4, -0.5, 2.0, 0.5]


def assert_vec_close(a: Vector2, b: Vector2, tol: float = 1e-12):
    """Assert that two vectors are equal within tol."""
    assert a.x == pytest.approx(b.x, abs=tol)
    assert a.y == pytest.approx(b.y, abs=tol)


###############################################################################
# Evaluation Tests
###############################################################################


class TestCubicBezierEval:
    """Test class for evaluation and derivatives."""

    @pytest.mark.parametrize(
        "coords",
        [COORDS, [1.0, -2.0, 5.0, 5.0, -3.0, 4.0, 0.5, 0.5], [0.0] * 8],
    )
    def test_endpoint_interpolation(self, coords):
        """eval(0) is P0 and eval(1) is P3."""
        cb = CubicBezier(coords)
        p0, _, _, p3 = cb.points()
        assert_vec_close(cb.eval(0.0), p0)
        assert_vec_close(cb.eval(1.0), p3)

    def test_deriv_matches_finite_difference(self):
        """First and second derivative agree with central differences."""
        cb = CubicBezier(COORDS)
        h = 1e-5
        for t in [0.1, 0.5, 0.8]:
            fd = (cb.eval(t + h) - cb.eval(t - h)) * (1 / (2 * h))
            assert_vec_close(cb.deriv(t), fd, 1e-6)
            fd2 = (cb.deriv(t + h) - cb.deriv(t - h)) * (1 / (2 * h))
            assert_vec_close(cb.deriv2(t), fd2, 1e-6)

    def test_end_derivatives(self):
        """End derivatives are 3 * (P1 - P0) and 3 * (P3 - P2)."""
        cb = CubicBezier(COORDS)
        p0, p1, p2, p3 = cb.points()
        assert_vec_close(cb.deriv(0.0), (p1 - p0) * 3)
        assert_vec_close(cb.deriv(1.0), (p3 - p2) * 3)

    def test_wrong_size(self):
        """Anything but 8 coordinates is rejected."""
        with pytest.raises(ValueError):
            CubicBezier([0.0, 0.0, 1.0, 1.0, 2.0, 2.0])

    def test_from_points(self):
        """from_points and points are inverse to each other."""
        pts = [Vector2(0.0, 0.0), Vector2(1.0, 2.0), Vector2(3.0, 2.0), Vector2(4.0, 0.0)]
        assert CubicBezier.from_points(*pts).points() == pts


###############################################################################
# Curvature Tests
###############################################################################


class TestCubicBezierCurvature:
    """Test class for curvature and curvature-angle."""

    def test_straight_line(self):
        """A straight cubic has zero curvature."""
        cb = CubicBezier([0.0, 0.0, 1.0, 1.0, 2.0, 2.0, 3.0, 3.0])
        for t in [0.0, 0.5, 1.0]:
            assert cb.curvature(t) == pytest.approx(0.0, abs=1e-12)
            assert cb.curvature_angle(t) == pytest.approx(0.0, abs=1e-12)

    def test_curvature_angle_is_atan_of_curvature(self):
        """Where the derivative does not vanish, curvature_angle = atan(curvature)."""
        cb = CubicBezier(COORDS)
        for t in [0.0, 0.3, 0.7, 1.0]:
            assert math.tan(cb.curvature_angle(t)) == pytest.approx(cb.curvature(t), rel=1e-9)

    def test_sign(self):
        """A counter-clockwise bend has positive curvature."""
        ccw = CubicBezier([0.0, 0.0, 1.0, 0.0, 1.0, 0.0, 1.0, 1.0])
        cw = CubicBezier([0.0, 0.0, 1.0, 0.0, 1.0, 0.0, 1.0, -1.0])
        assert ccw.curvature(0.5) > 0.0
        assert cw.curvature(0.5) < 0.0

    def test_degenerate_curvature_angle(self):
        """A cubic collapsed to a point has curvature-angle 0 instead of failing."""
        cb = CubicBezier([1.0, 1.0] * 4)
        assert cb.curvature_angle(0.5) == 0.0


###############################################################################
# Subdivision Tests
###############################################################################


class TestCubicBezierSubdivision:
    """Test class for de Casteljau bisection and polygonization."""

    def test_bisection_consistency(self):
        """Both halves meet at the curve midpoint."""
        cb = CubicBezier(COORDS)
        mid = cb.eval(0.5)
        assert_vec_close(cb.left_half().eval(1.0), mid)
        assert_vec_close(cb.right_half().eval(0.0), mid)

    def test_halves_trace_the_curve(self):
        """The halves are exact reparametrizations of the original curve."""
        cb = CubicBezier(COORDS)
        left = cb.left_half()
        right = cb.right_half()
        for u in [0.0, 0.25, 0.5, 0.75, 1.0]:
            assert_vec_close(left.eval(u), cb.eval(0.5 * u))
            assert_vec_close(right.eval(u), cb.eval(0.5 + 0.5 * u))

    def test_halves_keep_end_points(self):
        """The outer end points are copied unchanged."""
        cb = CubicBezier(COORDS)
        assert cb.left_half().c[0] == cb.c[0]
        assert cb.left_half().c[1] == cb.c[1]
        assert cb.right_half().c[6] == cb.c[6]
        assert cb.right_half().c[7] == cb.c[7]

    def test_polygonize(self):
        """polygonize samples the curve at uniform parameters."""
        cb = CubicBezier(COORDS)
        points = cb.polygonize(10)
        assert points.shape == (11, 2)
        assert np.allclose(points[0], [0.0, 0.0])
        assert np.allclose(points[-1], [2.0, 0.5])
        mid = cb.eval(0.5)
        assert np.allclose(points[5], [mid.x, mid.y])
