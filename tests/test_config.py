"""Test module for avspline.config

The tests are run using pytest.
"""

import dataclasses

import pytest

from avspline.config import DEFAULT_CONFIG, SplineConfig


class TestSplineConfig:
    """Test class for SplineConfig."""

    def test_defaults(self):
        """The defaults reproduce the fixed 10 pass relaxation."""
        assert DEFAULT_CONFIG.n_iter == 10
        assert DEFAULT_CONFIG.newton_epsilon == 1e-3
        assert DEFAULT_CONFIG.derivative_floor == 1e-9
        assert DEFAULT_CONFIG.damping_rate == 0.25
        assert DEFAULT_CONFIG.residual_tolerance is None
        assert DEFAULT_CONFIG.corner_tangents == "chord"

    def test_dict_roundtrip(self):
        """to_dict/from_dict keep all values."""
        config = SplineConfig(n_iter=5, residual_tolerance=1e-6, corner_tangents="natural")
        assert SplineConfig.from_dict(config.to_dict()) == config

    def test_from_dict_missing_keys(self):
        """Missing keys take their defaults."""
        assert SplineConfig.from_dict({}) == DEFAULT_CONFIG
        assert SplineConfig.from_dict({"n_iter": 3}).n_iter == 3

    def test_frozen(self):
        """Configurations are immutable."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.n_iter = 20  # type: ignore[misc]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"n_iter": 0},
            {"newton_epsilon": 0.0},
            {"derivative_floor": -1.0},
            {"damping_rate": 0.0},
            {"residual_tolerance": -1e-3},
            {"corner_tangents": "tangent"},
        ],
    )
    def test_invalid_values(self, kwargs):
        """Invalid values raise ValueError."""
        with pytest.raises(ValueError):
            SplineConfig(**kwargs)
