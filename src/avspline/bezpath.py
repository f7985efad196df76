"""Path sinks receiving the cubic segments emitted by a rendered spline."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Protocol, Tuple

import numpy as np
from numpy.typing import NDArray

from avspline.bezier import CubicBezier
from avspline.common import SplineCmds

# point types of the (x, y, type) point array
ON_CURVE_POINT: float = 0.0
CUBIC_CONTROL_POINT: float = 3.0


###############################################################################
# PathSink
###############################################################################


class PathSink(Protocol):
    """Path-builder capability used by the spline renderer."""

    def moveto(self, x: float, y: float) -> None:
        """Start a new subpath at (x, y)."""

    def curveto(self, x1: float, y1: float, x2: float, y2: float, x3: float, y3: float) -> None:
        """Append a cubic Bezier with control points (x1, y1), (x2, y2) ending at (x3, y3)."""

    def closepath(self) -> None:
        """Close the current subpath."""

    def mark(self, segment_index: int) -> None:
        """Announce that the following pieces belong to anchor segment segment_index."""


###############################################################################
# BezPath
###############################################################################


class BezPath:
    """Recording path sink.

    Points are stored as (x, y, type) rows where type is 0.0 for on-curve points
    and 3.0 for cubic control points, commands as a list of "M", "C", "Z".
    """

    def __init__(self):
        self._commands: List[SplineCmds] = []
        self._points: List[Tuple[float, float, float]] = []
        self._marks: Dict[int, int] = {}

    def moveto(self, x: float, y: float) -> None:
        self._commands.append("M")
        self._points.append((float(x), float(y), ON_CURVE_POINT))

    def curveto(self, x1: float, y1: float, x2: float, y2: float, x3: float, y3: float) -> None:
        if not self._commands:
            raise ValueError("Cubic Bezier command has no starting point")
        self._commands.append("C")
        self._points.append((float(x1), float(y1), CUBIC_CONTROL_POINT))
        self._points.append((float(x2), float(y2), CUBIC_CONTROL_POINT))
        self._points.append((float(x3), float(y3), ON_CURVE_POINT))

    def closepath(self) -> None:
        if not self._commands:
            raise ValueError("ClosePath command has no starting point")
        self._commands.append("Z")

    def mark(self, segment_index: int) -> None:
        self._marks[segment_index] = len(self._commands)

    @property
    def commands(self) -> List[SplineCmds]:
        """Recorded commands (copy)."""
        return list(self._commands)

    @property
    def points(self) -> NDArray[np.float64]:
        """Recorded points as array of shape (n, 3) holding (x, y, type)."""
        if not self._points:
            return np.empty((0, 3), dtype=np.float64)
        return np.array(self._points, dtype=np.float64)

    @property
    def marks(self) -> Dict[int, int]:
        """Mapping segment index -> index of the first command emitted for that segment."""
        return dict(self._marks)

    def is_empty(self) -> bool:
        """True if nothing has been recorded."""
        return not self._commands

    def cubic_curves(self) -> List[CubicBezier]:
        """All emitted cubic pieces in absolute coordinates, in emission order."""
        curves: List[CubicBezier] = []
        point_idx = 0
        start = None
        current = None
        for cmd in self._commands:
            if cmd == "M":
                current = self._points[point_idx][:2]
                start = current
                point_idx += 1
            elif cmd == "C":
                p1, p2, p3 = (pt[:2] for pt in self._points[point_idx : point_idx + 3])
                curves.append(CubicBezier([*current, *p1, *p2, *p3]))
                current = p3
                point_idx += 3
            elif cmd == "Z":
                current = start
        return curves

    def segment_curves(self, segment_index: int) -> List[CubicBezier]:
        """The cubic pieces emitted for one anchor segment, empty if the segment was never marked."""
        if segment_index not in self._marks:
            return []
        first_cmd = self._marks[segment_index]
        later = [cmd_idx for cmd_idx in self._marks.values() if cmd_idx > first_cmd]
        end_cmd = min(later) if later else len(self._commands)
        # curve index of a command = number of "C" commands before it
        first_curve = self._commands[:first_cmd].count("C")
        n_curves = self._commands[first_cmd:end_cmd].count("C")
        return self.cubic_curves()[first_curve : first_curve + n_curves]

    def bounding_box(self) -> Optional[Tuple[float, float, float, float]]:
        """Bounding box (xmin, ymin, xmax, ymax) of all points including control points, None if empty."""
        if not self._points:
            return None
        pts = self.points
        return (
            float(pts[:, 0].min()),
            float(pts[:, 1].min()),
            float(pts[:, 0].max()),
            float(pts[:, 1].max()),
        )

    def svg_path_string(self, round_func: Optional[Callable[[float], float]] = None) -> str:
        """
        SVG path data of the recorded commands.

        Args:
            round_func (Optional[Callable], optional):
                a function that takes a float and returns a float. Defaults to None (no rounding).

        Returns:
            str: path data like "M0 0 C1 1 2 1 3 0 Z"
        """
        fmt = round_func if round_func is not None else float

        def num(value: float) -> str:
            return repr(float(fmt(value)))

        parts: List[str] = []
        point_idx = 0
        for cmd in self._commands:
            if cmd == "M":
                x, y, _ = self._points[point_idx]
                parts.append(f"M{num(x)} {num(y)}")
                point_idx += 1
            elif cmd == "C":
                coords = " ".join(f"{num(x)} {num(y)}" for x, y, _ in self._points[point_idx : point_idx + 3])
                parts.append(f"C{coords}")
                point_idx += 3
            elif cmd == "Z":
                parts.append("Z")
        return " ".join(parts)

    def __len__(self) -> int:
        return len(self._commands)
