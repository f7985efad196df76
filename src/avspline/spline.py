"""Spline of corner and smooth anchors with curvature-continuous piecewise cubic rendering.

Solving happens in three passes that write into the anchors:
    1. solve()                       -- tangent angles and curvature-angles per anchor side
    2. compute_curvature_blending()  -- target curvature at smooth anchors
    3. render()                      -- emit cubic pieces into a path sink
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from avspline.bezpath import BezPath, PathSink
from avspline.common import AnchorKind, mod2pi
from avspline.config import DEFAULT_CONFIG, SplineConfig
from avspline.curve import CurveFamily, NaturalCubicFamily
from avspline.geom import GeomMath, Vector2
from avspline.solver import ClosedRunSolver, OpenRunSolver

logger = logging.getLogger(__name__)


###############################################################################
# Anchor
###############################################################################


@dataclass
class Anchor:
    """
    A control point of a spline.

    Attributes:
        position (Vector2): Location of the anchor.
        kind (AnchorKind): CORNER breaks curvature (and generally tangent) continuity, SMOOTH joins it.
        fixed_left_angle (Optional[float]): User-imposed absolute tangent direction of the incoming side.
        fixed_right_angle (Optional[float]): User-imposed absolute tangent direction of the outgoing side.
        left_angle (Optional[float]): Solved tangent direction of the incoming side.
        right_angle (Optional[float]): Solved tangent direction of the outgoing side.
        left_curvature_angle (Optional[float]): Curvature-angle at the end of the incoming segment.
        right_curvature_angle (Optional[float]): Curvature-angle at the start of the outgoing segment.
        blended_curvature (Optional[float]): Curvature imposed at this anchor when rendering.
    """

    position: Vector2
    kind: AnchorKind = AnchorKind.SMOOTH
    fixed_left_angle: Optional[float] = None
    fixed_right_angle: Optional[float] = None
    left_angle: Optional[float] = None
    right_angle: Optional[float] = None
    left_curvature_angle: Optional[float] = None
    right_curvature_angle: Optional[float] = None
    blended_curvature: Optional[float] = None

    def __post_init__(self):
        if not isinstance(self.position, Vector2):
            self.position = Vector2.from_sequence(self.position)
        if isinstance(self.kind, str):
            self.kind = AnchorKind.from_name(self.kind)

    @property
    def is_boundary(self) -> bool:
        """True if a run of smooth joints has to end at this anchor (corner or any fixed angle)."""
        return (
            self.kind is AnchorKind.CORNER or self.fixed_left_angle is not None or self.fixed_right_angle is not None
        )

    def reset(self) -> None:
        """Clear all solver and blend results."""
        self.left_angle = None
        self.right_angle = None
        self.left_curvature_angle = None
        self.right_curvature_angle = None
        self.blended_curvature = None


def _fold_tan(th: float) -> float:
    """tan() reflected at +-pi/2 so that curvature-angles beyond a quarter turn stay bounded."""
    if th > math.pi / 2:
        return math.tan(math.pi - th)
    if th < -math.pi / 2:
        return math.tan(-math.pi - th)
    return math.tan(th)


###############################################################################
# Spline
###############################################################################


class Spline:
    """Ordered anchors forming an open or closed spline.

    An open spline of n anchors has n-1 segments, a closed one n segments where
    segment n-1 joins the last anchor back to the first.
    """

    def __init__(
        self,
        anchors: Sequence[Anchor],
        closed: bool = False,
        curve: Optional[CurveFamily] = None,
        config: Optional[SplineConfig] = None,
    ):
        self.anchors: List[Anchor] = list(anchors)
        self.closed = closed
        self.curve: CurveFamily = curve if curve is not None else NaturalCubicFamily()
        self.config = config if config is not None else DEFAULT_CONFIG

    @classmethod
    def from_points(
        cls,
        points: Union[Sequence[Tuple[float, float]], NDArray[np.float64]],
        kinds: Optional[Sequence[Union[AnchorKind, str]]] = None,
        closed: bool = False,
        curve: Optional[CurveFamily] = None,
        config: Optional[SplineConfig] = None,
    ) -> Spline:
        """
        Create a spline from an array of positions.

        Args:
            points: positions of shape (n, 2)
            kinds: kind per anchor, AnchorKind or "corner"/"smooth". Defaults to all smooth.
            closed: True for a closed spline
            curve: curve family, defaults to NaturalCubicFamily
            config: solver configuration, defaults to DEFAULT_CONFIG

        Raises:
            ValueError: If points is not of shape (n, 2) or kinds has a different length
        """
        arr = np.asarray(points, dtype=np.float64)
        if arr.size == 0:
            arr = arr.reshape(0, 2)
        if arr.ndim != 2:
            raise ValueError(f"points must have 2 dimensions, got {arr.ndim}")
        if arr.shape[1] != 2:
            raise ValueError(f"points must have shape (n, 2), got {arr.shape}")
        if kinds is None:
            kinds = [AnchorKind.SMOOTH] * arr.shape[0]
        elif len(kinds) != arr.shape[0]:
            raise ValueError(f"got {len(kinds)} kinds for {arr.shape[0]} points")
        anchors = [Anchor(Vector2.from_sequence(row), kind) for row, kind in zip(arr, kinds)]
        return cls(anchors, closed=closed, curve=curve, config=config)

    def __len__(self) -> int:
        return len(self.anchors)

    def pt(self, i: int, start: int = 0) -> Anchor:
        """Anchor at index i counted from start, wrapping around."""
        length = len(self.anchors)
        return self.anchors[(i + start + length) % length]

    def start_index(self) -> int:
        """Index where partitioning starts: 0 for open splines, else the first boundary anchor."""
        if not self.closed:
            return 0
        for i, anchor in enumerate(self.anchors):
            if anchor.is_boundary:
                return i
        return 0

    def chord_len(self, i: int) -> float:
        """Length of the chord of segment i (wrapping)."""
        return (self.pt(i + 1).position - self.pt(i).position).norm()

    ###########################################################################
    # Solving
    ###########################################################################

    def solve(self) -> None:
        """Compute tangent angles and curvature-angles of all anchors."""
        for anchor in self.anchors:
            anchor.reset()

        if self.closed and not any(anchor.is_boundary for anchor in self.anchors):
            self.solve_closed_smooth()
            return

        start = self.start_index()
        length = len(self.anchors) - (0 if self.closed else 1)
        i = 0
        while i < length:
            pt_i = self.pt(i, start)
            pt_i1 = self.pt(i + 1, start)
            if (
                (i + 1 == length or pt_i1.kind is AnchorKind.CORNER)
                and pt_i.fixed_right_angle is None
                and pt_i1.fixed_left_angle is None
            ):
                self._solve_straight(pt_i, pt_i1)
                i += 1
            else:
                run = [pt_i]
                j = i + 1
                while j < length + 1:
                    pt_j = self.pt(j, start)
                    run.append(pt_j)
                    j += 1
                    if pt_j.is_boundary:
                        break
                self._solve_run(run)
                i = j - 1

    def _solve_straight(self, pt0: Anchor, pt1: Anchor) -> None:
        chord = pt1.position - pt0.position
        if chord.norm() == 0.0:
            logger.debug("zero-length chord at %s, tangent falls back to 0", pt0.position)
        th = mod2pi(chord.angle())
        pt0.right_angle = th
        pt1.left_angle = th
        pt0.right_curvature_angle = 0.0
        pt1.left_curvature_angle = 0.0

    def _solve_run(self, run: List[Anchor]) -> None:
        solver = OpenRunSolver(
            self.curve,
            [anchor.position for anchor in run],
            start_th=self._run_start_angle(run),
            end_th=self._run_end_angle(run),
            config=self.config,
        )
        solver.solve()
        for k in range(len(run) - 1):
            run[k].right_angle = float(mod2pi(solver.ths[k]))
            run[k + 1].left_angle = float(mod2pi(solver.ths[k + 1]))
            aks = solver.curvature_angles(k)
            run[k].right_curvature_angle = aks.ak0
            run[k + 1].left_curvature_angle = aks.ak1

    def _run_start_angle(self, run: List[Anchor]) -> Optional[float]:
        first = run[0]
        if first.fixed_right_angle is not None:
            return first.fixed_right_angle
        if first.kind is AnchorKind.CORNER and self.config.corner_tangents == "chord":
            return (run[1].position - first.position).angle()
        return None

    def _run_end_angle(self, run: List[Anchor]) -> Optional[float]:
        last = run[-1]
        if last.fixed_left_angle is not None:
            return last.fixed_left_angle
        if last.kind is AnchorKind.CORNER and self.config.corner_tangents == "chord":
            return (last.position - run[-2].position).angle()
        return None

    def solve_closed_smooth(self) -> None:
        """Cyclic solve of a closed spline without any corner or fixed angle.

        Each anchor gets the same left and right tangent angle. Fewer than 3
        anchors leave the anchors untouched.
        """
        n = len(self.anchors)
        if n < 3:
            logger.debug("closed smooth spline with %d anchors is not solved", n)
            return
        solver = ClosedRunSolver(self.curve, [anchor.position for anchor in self.anchors], config=self.config)
        solver.solve()
        for i, anchor in enumerate(self.anchors):
            th = float(mod2pi(solver.ths[i]))
            anchor.left_angle = th
            anchor.right_angle = th
        for i, anchor in enumerate(self.anchors):
            aks = solver.curvature_angles(i)
            anchor.right_curvature_angle = aks.ak0
            self.anchors[(i + 1) % n].left_curvature_angle = aks.ak1

    ###########################################################################
    # Blending
    ###########################################################################

    def compute_curvature_blending(self) -> None:
        """Set the curvature imposed at each smooth anchor from its two curvature-angles.

        Opposite signs mark an inflection and give 0, otherwise the harmonic mean
        of both sides is used.
        """
        for anchor in self.anchors:
            anchor.blended_curvature = None
        n = len(self.anchors)
        for i, anchor in enumerate(self.anchors):
            if anchor.kind is not AnchorKind.SMOOTH:
                continue
            if anchor.left_curvature_angle is None or anchor.right_curvature_angle is None:
                continue
            if not self.closed and (i == 0 or i == n - 1):
                continue
            r_ak = anchor.right_curvature_angle
            l_ak = anchor.left_curvature_angle
            if np.sign(r_ak) != np.sign(l_ak):
                anchor.blended_curvature = 0.0
                continue
            left_chord = self.chord_len(i - 1)
            right_chord = self.chord_len(i)
            if left_chord == 0.0 or right_chord == 0.0:
                continue
            r_k = _fold_tan(r_ak) / left_chord
            l_k = _fold_tan(l_ak) / right_chord
            if r_k == 0.0 or l_k == 0.0:
                anchor.blended_curvature = 0.0
                continue
            anchor.blended_curvature = 2 / (1 / r_k + 1 / l_k)

    ###########################################################################
    # Rendering
    ###########################################################################

    def render(self, sink: Optional[PathSink] = None) -> PathSink:
        """
        Emit the spline as cubic Bezier pieces.

        Segments touching a blended anchor are rendered as 4 curvature-corrected
        pieces, others as a single natural cubic. mark(i) is called before the
        pieces of segment i. Tangent angles that were never solved fall back to
        the chord direction.

        Args:
            sink (Optional[PathSink], optional): receiver of the path commands. Defaults to a new BezPath.

        Returns:
            PathSink: the sink
        """
        if sink is None:
            sink = BezPath()
        if not self.anchors:
            return sink
        first = self.anchors[0].position
        sink.moveto(first.x, first.y)
        length = len(self.anchors) - (0 if self.closed else 1)
        for i in range(length):
            sink.mark(i)
            pt_i = self.pt(i)
            pt_i1 = self.pt(i + 1)
            d = pt_i1.position - pt_i.position
            chth = d.angle()
            chord = d.norm()
            right = pt_i.right_angle if pt_i.right_angle is not None else chth
            left = pt_i1.left_angle if pt_i1.left_angle is not None else chth
            th0 = mod2pi(right - chth)
            th1 = mod2pi(chth - left)
            k0 = pt_i.blended_curvature * chord if pt_i.blended_curvature is not None else None
            k1 = pt_i1.blended_curvature * chord if pt_i1.blended_curvature is not None else None

            trafo = GeomMath.chord_trafo(pt_i.position, pt_i1.position)
            coords = [GeomMath.transform_point(trafo, pt) for pt in self.curve.render4(th0, th1, k0, k1)]
            coords.append(pt_i1.position.to_tuple())
            for j in range(0, len(coords), 3):
                (x1, y1), (x2, y2), (x3, y3) = coords[j : j + 3]
                sink.curveto(x1, y1, x2, y2, x3, y3)
        if self.closed:
            sink.closepath()
        return sink

    def update(self, sink: Optional[PathSink] = None) -> PathSink:
        """Solve, blend and render in one call."""
        self.solve()
        self.compute_curvature_blending()
        return self.render(sink)

    def render_svg(self) -> str:
        """SVG path data of the rendered spline."""
        path = BezPath()
        self.render(path)
        return path.svg_path_string()
