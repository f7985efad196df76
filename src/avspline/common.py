"""Central module containing types, enums and angle helpers for spline solving."""

from __future__ import annotations

import math
from enum import Enum, auto
from typing import Literal

###############################################################################
# Types
###############################################################################


SplineCmds = Literal[  # Type-Definition for path commands emitted by a rendered spline
    # MoveTo (2) - start a new subpath and move the current point to (x,y)
    "M",
    # Cubic Bezier To (6) - draw a cubic Bezier curve with two control points and an endpoint (x,y)
    "C",
    # ClosePath (0) - close subpath by drawing a line from the current point to start point
    "Z",
]


###############################################################################
# Enums and Consts
###############################################################################

TWO_PI: float = 2.0 * math.pi


class AnchorKind(Enum):
    """Enum to define the joint type of an anchor."""

    CORNER = auto()
    SMOOTH = auto()

    @classmethod
    def from_name(cls, name: str) -> AnchorKind:
        """Look up a kind by its lowercase name as used by the host editor ("corner", "smooth").

        Raises:
            ValueError: if the name is unknown
        """
        try:
            return cls[name.upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown anchor kind '{name}'") from exc


###############################################################################
# Functions
###############################################################################


def mod2pi(th: float) -> float:
    """Wrap an angle into the half-open interval (-pi, pi].

    Args:
        th (float): angle in radians

    Returns:
        float: the equivalent angle in (-pi, pi]
    """
    return th - TWO_PI * math.ceil((th - math.pi) / TWO_PI)
