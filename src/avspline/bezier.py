"""Cubic Bezier curve in flattened coefficient form for curvature evaluation and subdivision."""

from __future__ import annotations

import math
from typing import List, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from avspline.geom import Vector2


class CubicBezier:
    """Cubic Bezier curve stored as 8 coefficients [x0, y0, x1, y1, x2, y2, x3, y3].

    Derivatives, curvature and the de Casteljau halves are computed with the
    closed-form Bernstein weights, no iteration is involved.
    """

    def __init__(self, coords: Union[Sequence[float], NDArray[np.float64]]):
        """Initialize from 8 flattened control point coordinates.

        Raises:
            ValueError: If coords does not hold exactly 8 values
        """
        c = np.asarray(coords, dtype=np.float64).reshape(-1)
        if c.shape[0] != 8:
            raise ValueError(f"CubicBezier needs 8 coordinates, got {c.shape[0]}")
        self.c: NDArray[np.float64] = c

    @classmethod
    def from_points(cls, p0: Vector2, p1: Vector2, p2: Vector2, p3: Vector2) -> CubicBezier:
        """Create a cubic from its four control points."""
        return cls([p0.x, p0.y, p1.x, p1.y, p2.x, p2.y, p3.x, p3.y])

    def points(self) -> List[Vector2]:
        """The four control points."""
        return [Vector2(float(self.c[i]), float(self.c[i + 1])) for i in range(0, 8, 2)]

    def weightsum(self, c0: float, c1: float, c2: float, c3: float) -> Vector2:
        """Weighted sum of the control points."""
        c = self.c
        x = c0 * c[0] + c1 * c[2] + c2 * c[4] + c3 * c[6]
        y = c0 * c[1] + c1 * c[3] + c2 * c[5] + c3 * c[7]
        return Vector2(float(x), float(y))

    def eval(self, t: float) -> Vector2:
        """Point on the curve at parameter t."""
        mt = 1 - t
        c0 = mt * mt * mt
        c1 = 3 * mt * mt * t
        c2 = 3 * mt * t * t
        c3 = t * t * t
        return self.weightsum(c0, c1, c2, c3)

    def deriv(self, t: float) -> Vector2:
        """First derivative at parameter t."""
        mt = 1 - t
        c0 = -3 * mt * mt
        c3 = 3 * t * t
        c1 = -6 * t * mt - c0
        c2 = 6 * t * mt - c3
        return self.weightsum(c0, c1, c2, c3)

    def deriv2(self, t: float) -> Vector2:
        """Second derivative at parameter t."""
        mt = 1 - t
        c0 = 6 * mt
        c3 = 6 * t
        c1 = 6 - 18 * mt
        c2 = 6 - 18 * t
        return self.weightsum(c0, c1, c2, c3)

    def curvature(self, t: float) -> float:
        """Signed curvature cross(d1, d2) / |d1|^3 at parameter t.

        Not defined where the first derivative vanishes, use curvature_angle() there.
        """
        d = self.deriv(t)
        d2 = self.deriv2(t)
        return d.cross(d2) / math.pow(d.norm(), 3)

    def curvature_angle(self, t: float) -> float:
        """Arctangent-compressed curvature atan2(cross(d1, d2), |d1|^3), finite for |d1| -> 0."""
        d = self.deriv(t)
        d2 = self.deriv2(t)
        return math.atan2(d.cross(d2), math.pow(d.norm(), 3))

    def left_half(self) -> CubicBezier:
        """Exact first half (t in [0, 0.5]) by de Casteljau bisection."""
        c = self.c
        h = np.empty(8, dtype=np.float64)
        h[0] = c[0]
        h[1] = c[1]
        h[2] = 0.5 * (c[0] + c[2])
        h[3] = 0.5 * (c[1] + c[3])
        h[4] = 0.25 * (c[0] + 2 * c[2] + c[4])
        h[5] = 0.25 * (c[1] + 2 * c[3] + c[5])
        h[6] = 0.125 * (c[0] + 3 * (c[2] + c[4]) + c[6])
        h[7] = 0.125 * (c[1] + 3 * (c[3] + c[5]) + c[7])
        return CubicBezier(h)

    def right_half(self) -> CubicBezier:
        """Exact second half (t in [0.5, 1]) by de Casteljau bisection."""
        c = self.c
        h = np.empty(8, dtype=np.float64)
        h[0] = 0.125 * (c[0] + 3 * (c[2] + c[4]) + c[6])
        h[1] = 0.125 * (c[1] + 3 * (c[3] + c[5]) + c[7])
        h[2] = 0.25 * (c[2] + 2 * c[4] + c[6])
        h[3] = 0.25 * (c[3] + 2 * c[5] + c[7])
        h[4] = 0.5 * (c[4] + c[6])
        h[5] = 0.5 * (c[5] + c[7])
        h[6] = c[6]
        h[7] = c[7]
        return CubicBezier(h)

    def polygonize(self, steps: int) -> NDArray[np.float64]:
        """
        Polygonize the curve into line segments.
        Uses direct evaluation with vectorized NumPy operations.

        Args:
            steps: Number of segments to divide the curve into

        Returns:
            NDArray[np.float64] of shape (steps+1, 2) containing the polygonized points (x, y)
        """
        pts = self.c.reshape(4, 2)
        t = np.linspace(0, 1, steps + 1, dtype=np.float64)

        # Cubic Bezier basis functions
        omt = 1 - t
        omt2 = omt**2
        omt3 = omt2 * omt
        t2 = t**2
        t3 = t2 * t

        basis = np.column_stack([omt3, 3 * omt2 * t, 3 * omt * t2, t3])
        return basis @ pts

    def __repr__(self) -> str:
        return f"CubicBezier({self.c.tolist()})"
