"""Two-parameter curve families defining a segment by its entry and exit tangent angles.

All angles are relative to the chord of a segment in the unit-chord frame,
where the segment starts at (0, 0) and ends at (1, 0). th0 is the entry
angle measured counter-clockwise from the chord, th1 the exit angle measured
clockwise, so th0 == th1 describes a mirror-symmetric arc.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import List, NamedTuple, Optional

from avspline.bezier import CubicBezier
from avspline.geom import Vector2, quintic_hermite

###############################################################################
# Records
###############################################################################


class CurvatureAngles(NamedTuple):
    """Curvature-angles at the start (ak0) and the end (ak1) of a segment."""

    ak0: float
    ak1: float


class SegmentFrame(NamedTuple):
    """Tangent angles of a segment relative to its chord, plus the chord length."""

    th0: float
    th1: float
    chord: float


class CurvatureDerivs(NamedTuple):
    """Partial derivatives of both curvature-angles with respect to both tangent angles."""

    dak0dth0: float
    dak1dth0: float
    dak0dth1: float
    dak1dth1: float


###############################################################################
# CurveFamily
###############################################################################


class CurveFamily(ABC):
    """Capability of a two-parameter curve family as used by the spline solvers."""

    @abstractmethod
    def render(self, th0: float, th1: float) -> List[Vector2]:
        """Inner control points of the segment in the unit-chord frame."""

    @abstractmethod
    def render4(self, th0: float, th1: float, k0: Optional[float], k1: Optional[float]) -> List[Vector2]:
        """Control points of the segment with imposed end curvatures k0, k1 (None = free).

        Returns the points between (0, 0) and (1, 0) exclusive of both, 2 points for
        a single cubic or 3 * pieces - 1 points for a piecewise cubic.
        """

    @abstractmethod
    def compute_curvature(self, th0: float, th1: float) -> CurvatureAngles:
        """Curvature-angles at both ends of the segment."""

    @abstractmethod
    def endpoint_tangent(self, th: float) -> float:
        """Natural tangent angle at a free end, given the angle at the other end."""

    def compute_curvature_derivs(self, th0: float, th1: float) -> CurvatureDerivs:
        """Central difference estimate of the curvature-angle derivatives."""
        epsilon = 1e-6
        scale = 1.0 / (2.0 * epsilon)
        k0plus = self.compute_curvature(th0 + epsilon, th1)
        k0minus = self.compute_curvature(th0 - epsilon, th1)
        k1plus = self.compute_curvature(th0, th1 + epsilon)
        k1minus = self.compute_curvature(th0, th1 - epsilon)
        return CurvatureDerivs(
            dak0dth0=scale * (k0plus.ak0 - k0minus.ak0),
            dak1dth0=scale * (k0plus.ak1 - k0minus.ak1),
            dak0dth1=scale * (k1plus.ak0 - k1minus.ak0),
            dak1dth1=scale * (k1plus.ak1 - k1minus.ak1),
        )


###############################################################################
# NaturalCubicFamily
###############################################################################

# Curvature values below this magnitude are floored when computing the derivative rescale
_MIN_NATURAL_CURVATURE: float = 1e-6
# Position offsets of the quintic correction are spread over 4 sub-cubics of parameter length 1/4
_QUINTIC_HANDLE_SCALE: float = 1.0 / 12.0


def _handle_length(th0: float, th1: float) -> float:
    offset = 0.3 * math.sin(th1 * 2 - 0.4 * math.sin(th1 * 2))
    scale = 1.0 / (3 * 0.8)
    return scale * (math.cos(th0 - offset) - 0.2 * math.cos(3 * (th0 - offset)))


def _projected_curvature(cb: CubicBezier, t: float, th: float):
    """Return (cross(tangent, d2), d1 . tangent) for the tangent direction th."""
    c = math.cos(th)
    s = math.sin(th)
    d2 = cb.deriv2(t)
    d = cb.deriv(t)
    return d2.y * c - d2.x * s, d.x * c + d.y * s


class NaturalCubicFamily(CurveFamily):
    """Cubic curves whose handle lengths follow a closed-form fit of a smooth curvature family.

    The handle length is a heuristic in th0/th1 chosen so that the curvature-angles
    behave well under the Newton relaxation, no arc-length integration is done.
    """

    def natural_cubic(self, th0: float, th1: float) -> CubicBezier:
        """The natural unit-chord cubic for entry angle th0 and exit angle th1."""
        len0 = _handle_length(th0, th1)
        len1 = _handle_length(th1, th0)
        return CubicBezier(
            [
                0.0,
                0.0,
                math.cos(th0) * len0,
                math.sin(th0) * len0,
                1 - math.cos(th1) * len1,
                math.sin(th1) * len1,
                1.0,
                0.0,
            ]
        )

    def render(self, th0: float, th1: float) -> List[Vector2]:
        cb = self.natural_cubic(th0, th1)
        return [Vector2(float(cb.c[2]), float(cb.c[3])), Vector2(float(cb.c[4]), float(cb.c[5]))]

    def render4(self, th0: float, th1: float, k0: Optional[float], k1: Optional[float]) -> List[Vector2]:
        if k0 is None and k1 is None:
            return self.render(th0, th1)
        return self.render4_quintic(th0, th1, k0, k1)

    def render4_cubic(self, th0: float, th1: float, k0: Optional[float], k1: Optional[float]) -> List[Vector2]:
        """Inner points of the natural cubic with its end derivatives rescaled toward k0/k1.

        A cubic's end curvature is proportional to 1/|d1|^2 at fixed inner handle
        offset, so shortening or lengthening the handle moves it toward the target.
        """
        cb = self.natural_cubic(th0, th1)

        def deriv_scale(t: float, th: float, k: Optional[float]) -> float:
            if k is None:
                return 1 / 3
            d2cross, ddot = _projected_curvature(cb, t, th)
            old_k = d2cross / (ddot * ddot) if ddot != 0.0 else 0.0
            if abs(old_k) < _MIN_NATURAL_CURVATURE:
                old_k = _MIN_NATURAL_CURVATURE
            denom = 2 + k / old_k
            if abs(denom) < _MIN_NATURAL_CURVATURE:
                return 1 / 3
            return 1 / denom

        scale0 = deriv_scale(0, th0, k0)
        d0 = cb.deriv(0)
        scale1 = deriv_scale(1, -th1, k1)
        d1 = cb.deriv(1)
        return [Vector2(d0.x * scale0, d0.y * scale0), Vector2(1 - d1.x * scale1, -d1.y * scale1)]

    def render4_quintic(self, th0: float, th1: float, k0: Optional[float], k1: Optional[float]) -> List[Vector2]:
        """Four sub-cubics of the rescaled cubic plus a quintic correction of the remaining curvature error.

        The correction has zero value and slope at both ends, so end points and end
        tangents are unchanged, and its value and derivative are added consistently
        at the three inner junctions.
        """
        p1, p2 = self.render4_cubic(th0, th1, k0, k1)
        cb = CubicBezier.from_points(Vector2(0.0, 0.0), p1, p2, Vector2(1.0, 0.0))

        def curv_adjust(t: float, th: float, k: Optional[float]) -> Vector2:
            if k is None:
                return Vector2(0.0, 0.0)
            d2cross, ddot = _projected_curvature(cb, t, th)
            ddot2 = ddot * ddot
            old_k = d2cross / ddot2 if ddot2 != 0.0 else 0.0
            a_adjust = (k - old_k) * ddot2
            return Vector2(-math.sin(th) * a_adjust, math.cos(th) * a_adjust)

        a0 = curv_adjust(0, th0, k0)
        a1 = curv_adjust(1, -th1, k1)
        hx = quintic_hermite(0, 0, 0, 0, a0.x, a1.x)
        hy = quintic_hermite(0, 0, 0, 0, a0.y, a1.y)
        hxd = hx.deriv()
        hyd = hy.deriv()

        left = cb.left_half()
        right = cb.right_half()
        pieces = [left.left_half(), left.right_half(), right.left_half(), right.right_half()]

        result: List[Vector2] = []
        for i, piece in enumerate(pieces):
            t0 = 0.25 * i
            t1 = t0 + 0.25
            c = piece.c
            x0 = hx.eval(t0)
            y0 = hy.eval(t0)
            x1 = x0 + _QUINTIC_HANDLE_SCALE * hxd.eval(t0)
            y1 = y0 + _QUINTIC_HANDLE_SCALE * hyd.eval(t0)
            x3 = hx.eval(t1)
            y3 = hy.eval(t1)
            x2 = x3 - _QUINTIC_HANDLE_SCALE * hxd.eval(t1)
            y2 = y3 - _QUINTIC_HANDLE_SCALE * hyd.eval(t1)
            if i != 0:
                result.append(Vector2(float(c[0]) + x0, float(c[1]) + y0))
            result.append(Vector2(float(c[2]) + x1, float(c[3]) + y1))
            result.append(Vector2(float(c[4]) + x2, float(c[5]) + y2))
        return result

    def compute_curvature(self, th0: float, th1: float) -> CurvatureAngles:
        cb = self.natural_cubic(th0, th1)

        def curv(t: float, th: float) -> float:
            d2cross, ddot = _projected_curvature(cb, t, th)
            return math.atan2(d2cross, ddot * abs(ddot))

        return CurvatureAngles(ak0=curv(0, th0), ak1=curv(1, -th1))

    def endpoint_tangent(self, th: float) -> float:
        return 0.5 * math.sin(2 * th)
