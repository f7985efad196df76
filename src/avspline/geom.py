"""Handling 2D vectors, polynomials and chord-frame transformations"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray


###############################################################################
# Vector2
###############################################################################
@dataclass(frozen=True)
class Vector2:
    """Immutable 2D point or vector."""

    x: float
    y: float

    def norm(self) -> float:
        """Euclidean length."""
        return math.hypot(self.x, self.y)

    def dot(self, other: Vector2) -> float:
        """Scalar product."""
        return self.x * other.x + self.y * other.y

    def cross(self, other: Vector2) -> float:
        """z-component of the 3D cross product, positive if other is counter-clockwise of self."""
        return self.x * other.y - self.y * other.x

    def angle(self) -> float:
        """Direction in radians, atan2(0, 0) gives 0 for the zero vector."""
        return math.atan2(self.y, self.x)

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> Vector2:
        return Vector2(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def to_tuple(self) -> Tuple[float, float]:
        """The vector as Tuple (x, y)."""
        return (self.x, self.y)

    @classmethod
    def from_sequence(cls, point: Sequence[Union[int, float]]) -> Vector2:
        """Create a Vector2 from any (x, y) sequence, e.g. a tuple or a numpy row."""
        return cls(float(point[0]), float(point[1]))


###############################################################################
# Polynomial
###############################################################################
class Polynomial:
    """Scalar polynomial given by its coefficients in ascending powers."""

    def __init__(self, coeffs: Union[Sequence[float], NDArray[np.float64]]):
        self.c: NDArray[np.float64] = np.asarray(coeffs, dtype=np.float64)

    def eval(self, x: float) -> float:
        """Evaluate the polynomial at x."""
        xi = 1.0
        s = 0.0
        for a in self.c:
            s += a * xi
            xi *= x
        return float(s)

    def deriv(self) -> Polynomial:
        """Return the derivative polynomial, c'[i] = (i + 1) * c[i + 1]."""
        n = max(len(self.c) - 1, 0)
        return Polynomial(np.arange(1, n + 1, dtype=np.float64) * self.c[1:])

    def __len__(self) -> int:
        return len(self.c)


def quintic_hermite(x0: float, x1: float, v0: float, v1: float, a0: float, a1: float) -> Polynomial:
    """Build the quintic on [0, 1] matching value, slope and second derivative at both ends.

    Args:
        x0 (float): value at t=0
        x1 (float): value at t=1
        v0 (float): first derivative at t=0
        v1 (float): first derivative at t=1
        a0 (float): second derivative at t=0
        a1 (float): second derivative at t=1

    Returns:
        Polynomial: degree-5 polynomial with 6 coefficients
    """
    return Polynomial(
        [
            x0,
            v0,
            0.5 * a0,
            -10 * x0 + 10 * x1 - 6 * v0 - 4 * v1 - 1.5 * a0 + 0.5 * a1,
            15 * x0 - 15 * x1 + 8 * v0 + 7 * v1 + 1.5 * a0 - a1,
            -6 * x0 + 6 * x1 - 3 * v0 - 3 * v1 - 0.5 * a0 + 0.5 * a1,
        ]
    )


###############################################################################
# GeomMath
###############################################################################
class GeomMath:
    """Class to provide various static methods related to geometry handling."""

    @staticmethod
    def transform_point(
        affine_trafo: Sequence[Union[int, float]], point: Union[Vector2, Sequence[Union[int, float]]]
    ) -> Tuple[float, float]:
        """
        Perform an affine transformation on the given 2D point.

        The transformation is defined as:
            | x' | = | a00 a01 b0 |   | x |
            | y' | = | a10 a11 b1 | * | y |
            | 1  | = |  0   0  1  |   | 1 |
        with
            affine_trafo = [a00, a01, a10, a11, b0, b1]

        Args:
            affine_trafo (Tuple/List[float]): Affine transformation - [a00, a01, a10, a11, b0, b1]
            point (Vector2 or Tuple/List[float]): 2D point - (x, y)

        Returns:
            Tuple[float, float]: the transformed point
        """
        if isinstance(point, Vector2):
            point = (point.x, point.y)
        x_new = float(affine_trafo[0] * point[0] + affine_trafo[1] * point[1] + affine_trafo[4])
        y_new = float(affine_trafo[2] * point[0] + affine_trafo[3] * point[1] + affine_trafo[5])
        return (x_new, y_new)

    @staticmethod
    def chord_trafo(p0: Vector2, p1: Vector2) -> List[float]:
        """
        Affine transformation from the unit-chord frame of segment p0->p1 to absolute coordinates.

        In the unit-chord frame p0 is (0, 0) and p1 is (1, 0). The transformation is a rotation
        plus uniform scale by the chord vector, followed by a translation to p0.

        Args:
            p0 (Vector2): start of the chord
            p1 (Vector2): end of the chord

        Returns:
            List[float]: [a00, a01, a10, a11, b0, b1]
        """
        dx = p1.x - p0.x
        dy = p1.y - p0.y
        return [dx, -dy, dy, dx, p0.x, p0.y]
