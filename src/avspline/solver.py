"""Tangent-angle relaxation for runs of spline anchors.

A run is a maximal sequence of anchors whose interior joints are smooth. The
solvers adjust one tangent angle per joint by a damped, per-joint (diagonal)
Newton step so that the curvature on both sides of each joint matches. The
number of passes is fixed, there is no convergence guarantee.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from avspline.bezpath import PathSink
from avspline.common import mod2pi
from avspline.config import DEFAULT_CONFIG, SplineConfig
from avspline.curve import CurvatureAngles, CurveFamily, SegmentFrame
from avspline.geom import GeomMath, Vector2

logger = logging.getLogger(__name__)


###############################################################################
# Shared Newton step
###############################################################################


def curvature_error(
    frame0: SegmentFrame, ak0: CurvatureAngles, frame1: SegmentFrame, ak1: CurvatureAngles
) -> float:
    """Curvature mismatch at the joint between segment frame0 (left) and frame1 (right).

    Curvature-angles live in each segment's unit-chord frame, so they are
    rescaled by the square root of the chord lengths before being compared.
    """
    ch0 = math.sqrt(frame0.chord)
    ch1 = math.sqrt(frame1.chord)
    a0 = math.atan2(math.sin(ak0.ak1) * ch1, math.cos(ak0.ak1) * ch0)
    a1 = math.atan2(math.sin(ak1.ak0) * ch0, math.cos(ak1.ak0) * ch1)
    return a0 - a1


def newton_step(
    curve: CurveFamily, frame0: SegmentFrame, frame1: SegmentFrame, config: SplineConfig
) -> Tuple[float, float]:
    """Residual and undamped Newton step for the angle shared by frame0 (end) and frame1 (start).

    Returns:
        Tuple[float, float]: (err, step), step is 0 when the derivative estimate is degenerate
    """
    ak0 = curve.compute_curvature(frame0.th0, frame0.th1)
    ak1 = curve.compute_curvature(frame1.th0, frame1.th1)
    err = curvature_error(frame0, ak0, frame1, ak1)

    epsilon = config.newton_epsilon
    ak0p = curve.compute_curvature(frame0.th0, frame0.th1 + epsilon)
    ak1p = curve.compute_curvature(frame1.th0 - epsilon, frame1.th1)
    errp = curvature_error(frame0, ak0p, frame1, ak1p)
    derr = (errp - err) / epsilon

    if abs(derr) < config.derivative_floor:
        logger.debug("Newton step zeroed, derivative %g below floor %g", derr, config.derivative_floor)
        return err, 0.0
    step = err / derr
    if not math.isfinite(step):
        logger.debug("Newton step zeroed, non-finite step for err=%g derr=%g", err, derr)
        return err, 0.0
    return err, step


def _seed_angle(prev: Vector2, cur: Vector2, nxt: Vector2) -> float:
    """Tangent seed at cur, distributing the bend between both chords by their lengths."""
    d0 = cur - prev
    d1 = nxt - cur
    l0 = d0.norm()
    l1 = d1.norm()
    th0 = d0.angle()
    th1 = d1.angle()
    if l0 + l1 == 0.0:
        return th0
    bend = mod2pi(th1 - th0)
    return mod2pi(th0 + bend * l0 / (l0 + l1))


###############################################################################
# OpenRunSolver
###############################################################################


class OpenRunSolver:
    """Relaxation of an open run with optional fixed (Dirichlet) tangents at its two ends.

    A free end follows the curve family's natural end tangent, which removes it
    from the unknowns of the Newton iteration.
    """

    def __init__(
        self,
        curve: CurveFamily,
        positions: Sequence[Vector2],
        start_th: Optional[float] = None,
        end_th: Optional[float] = None,
        config: Optional[SplineConfig] = None,
    ):
        self.curve = curve
        self.positions: List[Vector2] = list(positions)
        self.start_th = start_th
        self.end_th = end_th
        self.config = config if config is not None else DEFAULT_CONFIG
        self.ths: NDArray[np.float64] = np.zeros(len(self.positions), dtype=np.float64)

    def __len__(self) -> int:
        return len(self.positions)

    def initial_ths(self) -> NDArray[np.float64]:
        """Seed the working angles from the chord directions and apply the boundary angles."""
        pts = self.positions
        n = len(pts)
        ths = np.zeros(n, dtype=np.float64)
        if n >= 2:
            ths[0] = (pts[1] - pts[0]).angle()
            ths[n - 1] = (pts[n - 1] - pts[n - 2]).angle()
        for i in range(1, n - 1):
            ths[i] = _seed_angle(pts[i - 1], pts[i], pts[i + 1])
        if self.start_th is not None and n > 0:
            ths[0] = self.start_th
        if self.end_th is not None and n > 0:
            ths[n - 1] = self.end_th
        self.ths = ths
        return ths

    def segment_frame(self, i: int) -> SegmentFrame:
        """Tangent angles of segment i relative to its chord, and the chord length."""
        d = self.positions[i + 1] - self.positions[i]
        th = d.angle()
        return SegmentFrame(
            th0=mod2pi(self.ths[i] - th),
            th1=mod2pi(th - self.ths[i + 1]),
            chord=d.norm(),
        )

    def curvature_angles(self, i: int) -> CurvatureAngles:
        """Curvature-angles at both ends of segment i for the current working angles."""
        frame = self.segment_frame(i)
        return self.curve.compute_curvature(frame.th0, frame.th1)

    def relax(self, iteration: int) -> float:
        """Perform one damped Newton pass and return the summed absolute joint residual."""
        n = len(self.positions)
        if n < 2:
            return 0.0
        if self.start_th is None:
            frame = self.segment_frame(0)
            self.ths[0] += self.curve.endpoint_tangent(frame.th1) - frame.th0
        if self.end_th is None:
            frame = self.segment_frame(n - 2)
            self.ths[n - 1] -= self.curve.endpoint_tangent(frame.th0) - frame.th1
        if n < 3:
            return 0.0

        abs_err = 0.0
        x = np.zeros(n - 2, dtype=np.float64)
        frame0 = self.segment_frame(0)
        for i in range(n - 2):
            frame1 = self.segment_frame(i + 1)
            err, x[i] = newton_step(self.curve, frame0, frame1, self.config)
            abs_err += abs(err)
            frame0 = frame1

        scale = math.tanh(self.config.damping_rate * (iteration + 1))
        self.ths[1 : n - 1] += scale * x
        return abs_err

    def solve(self) -> List[float]:
        """Seed and relax the run, returning the residual of each pass."""
        self.initial_ths()
        history: List[float] = []
        tolerance = self.config.residual_tolerance
        for k in range(self.config.n_iter):
            history.append(self.relax(k))
            if tolerance is not None and history[-1] < tolerance:
                break
        logger.debug("open run of %d points relaxed, residuals %s", len(self.positions), history)
        return history

    def render(self, sink: PathSink) -> PathSink:
        """Render the run with natural (uncorrected) cubics into the given sink."""
        pts = self.positions
        if not pts:
            return sink
        sink.moveto(pts[0].x, pts[0].y)
        for i in range(len(pts) - 1):
            sink.mark(i)
            frame = self.segment_frame(i)
            trafo = GeomMath.chord_trafo(pts[i], pts[i + 1])
            p1, p2 = (GeomMath.transform_point(trafo, pt) for pt in self.curve.render(frame.th0, frame.th1))
            sink.curveto(p1[0], p1[1], p2[0], p2[1], pts[i + 1].x, pts[i + 1].y)
        return sink


###############################################################################
# ClosedRunSolver
###############################################################################


class ClosedRunSolver:
    """Cyclic relaxation of a closed run where every joint is smooth.

    There is no boundary to anchor the solution, so all n angles are unknowns
    and indices wrap around.
    """

    def __init__(
        self,
        curve: CurveFamily,
        positions: Sequence[Vector2],
        config: Optional[SplineConfig] = None,
    ):
        self.curve = curve
        self.positions: List[Vector2] = list(positions)
        self.config = config if config is not None else DEFAULT_CONFIG
        self.ths: NDArray[np.float64] = np.zeros(len(self.positions), dtype=np.float64)

    def __len__(self) -> int:
        return len(self.positions)

    def initial_ths(self) -> NDArray[np.float64]:
        """Seed every angle from its two adjacent chords."""
        pts = self.positions
        n = len(pts)
        ths = np.zeros(n, dtype=np.float64)
        for i in range(n):
            ths[i] = _seed_angle(pts[(i - 1) % n], pts[i], pts[(i + 1) % n])
        self.ths = ths
        return ths

    def segment_frame(self, i: int) -> SegmentFrame:
        """Tangent angles of segment i -> i+1 (wrapping) relative to its chord."""
        n = len(self.positions)
        nxt = (i + 1) % n
        d = self.positions[nxt] - self.positions[i]
        th = d.angle()
        return SegmentFrame(
            th0=mod2pi(self.ths[i] - th),
            th1=mod2pi(th - self.ths[nxt]),
            chord=d.norm(),
        )

    def curvature_angles(self, i: int) -> CurvatureAngles:
        """Curvature-angles at both ends of segment i for the current working angles."""
        frame = self.segment_frame(i)
        return self.curve.compute_curvature(frame.th0, frame.th1)

    def relax(self, iteration: int) -> float:
        """Perform one damped Newton pass over all joints and return the summed absolute residual."""
        n = len(self.positions)
        if n < 3:
            return 0.0
        abs_err = 0.0
        x = np.zeros(n, dtype=np.float64)
        for i in range(n):
            nxt = (i + 1) % n
            err, x[nxt] = newton_step(self.curve, self.segment_frame(i), self.segment_frame(nxt), self.config)
            abs_err += abs(err)

        scale = math.tanh(self.config.damping_rate * (iteration + 1))
        self.ths += scale * x
        return abs_err

    def solve(self) -> List[float]:
        """Seed and relax the closed run; fewer than 3 points is a no-op."""
        if len(self.positions) < 3:
            return []
        self.initial_ths()
        history: List[float] = []
        tolerance = self.config.residual_tolerance
        for k in range(self.config.n_iter):
            history.append(self.relax(k))
            if tolerance is not None and history[-1] < tolerance:
                break
        logger.debug("closed run of %d points relaxed, residuals %s", len(self.positions), history)
        return history
