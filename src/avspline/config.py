"""Solver configuration for spline relaxation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

CornerTangents = Literal["chord", "natural"]

###############################################################################
# SplineConfig
###############################################################################


@dataclass(frozen=True)
class SplineConfig:
    """Tuning parameters of the tangent-angle relaxation.

    Attributes:
        n_iter: Number of relaxation passes per run (and per closed solve).
        newton_epsilon: Step of the forward difference used to estimate d(err)/d(theta).
        derivative_floor: Newton steps whose derivative estimate is below this magnitude are zeroed.
        damping_rate: Rate of the tanh ramp-up, the pass k is scaled by tanh(damping_rate * (k + 1)).
        residual_tolerance: If set, relaxation stops early once the summed residual drops below it.
            None keeps the fixed iteration count.
        corner_tangents: "chord" pins the tangent of a run ending at a corner to the adjacent chord,
            "natural" leaves it free like an open path end.
    """

    n_iter: int = 10
    newton_epsilon: float = 1e-3
    derivative_floor: float = 1e-9
    damping_rate: float = 0.25
    residual_tolerance: Optional[float] = None
    corner_tangents: CornerTangents = "chord"

    def __post_init__(self):
        if self.n_iter < 1:
            raise ValueError(f"n_iter must be at least 1, got {self.n_iter}")
        if self.newton_epsilon <= 0.0:
            raise ValueError(f"newton_epsilon must be positive, got {self.newton_epsilon}")
        if self.derivative_floor < 0.0:
            raise ValueError(f"derivative_floor must not be negative, got {self.derivative_floor}")
        if self.damping_rate <= 0.0:
            raise ValueError(f"damping_rate must be positive, got {self.damping_rate}")
        if self.residual_tolerance is not None and self.residual_tolerance < 0.0:
            raise ValueError(f"residual_tolerance must not be negative, got {self.residual_tolerance}")
        if self.corner_tangents not in ("chord", "natural"):
            raise ValueError(f"corner_tangents must be 'chord' or 'natural', got '{self.corner_tangents}'")

    def to_dict(self) -> dict:
        """Convert the configuration to a dictionary for serialization."""
        return {
            "n_iter": self.n_iter,
            "newton_epsilon": self.newton_epsilon,
            "derivative_floor": self.derivative_floor,
            "damping_rate": self.damping_rate,
            "residual_tolerance": self.residual_tolerance,
            "corner_tangents": self.corner_tangents,
        }

    @classmethod
    def from_dict(cls, data: dict) -> SplineConfig:
        """Create a SplineConfig from a dictionary, missing keys take their defaults."""
        return cls(
            n_iter=data.get("n_iter", 10),
            newton_epsilon=data.get("newton_epsilon", 1e-3),
            derivative_floor=data.get("derivative_floor", 1e-9),
            damping_rate=data.get("damping_rate", 0.25),
            residual_tolerance=data.get("residual_tolerance"),
            corner_tangents=data.get("corner_tangents", "chord"),
        )


DEFAULT_CONFIG = SplineConfig()
