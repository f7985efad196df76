"""Test module for the recording path sink in avspline.bezpath

The tests are run using pytest.
"""

import numpy as np
import pytest

from avspline.bezier import CubicBezier
from avspline.bezpath import CUBIC_CONTROL_POINT, ON_CURVE_POINT, BezPath


@pytest.fixture(name="path")
def fixture_path():
    """Two marked cubic segments forming a closed path."""
    bez = BezPath()
    bez.moveto(0, 0)
    bez.mark(0)
    bez.curveto(1, 1, 2, 1, 3, 0)
    bez.mark(1)
    bez.curveto(3, -1, 1, -2, 0.5, -1)
    bez.curveto(0.2, -0.5, 0, -0.2, 0, 0)
    bez.closepath()
    return bez


class TestBezPath:
    """Test class for BezPath."""

    def test_empty(self):
        """A new path is empty."""
        bez = BezPath()
        assert bez.is_empty()
        assert len(bez) == 0
        assert bez.points.shape == (0, 3)
        assert bez.bounding_box() is None
        assert bez.cubic_curves() == []
        assert bez.svg_path_string() == ""

    def test_curveto_without_moveto(self):
        """curveto needs a starting point."""
        with pytest.raises(ValueError):
            BezPath().curveto(1, 1, 2, 1, 3, 0)

    def test_closepath_without_moveto(self):
        """closepath needs a starting point."""
        with pytest.raises(ValueError):
            BezPath().closepath()

    def test_commands(self, path):
        """Commands are recorded in order."""
        assert path.commands == ["M", "C", "C", "C", "Z"]
        assert len(path) == 5

    def test_commands_are_copied(self, path):
        """Changing the returned commands does not change the path."""
        path.commands.append("Z")
        assert len(path) == 5

    def test_points(self, path):
        """Points carry their type in the third column."""
        pts = path.points
        assert pts.shape == (10, 3)
        assert pts[0].tolist() == [0.0, 0.0, ON_CURVE_POINT]
        assert pts[1].tolist() == [1.0, 1.0, CUBIC_CONTROL_POINT]
        assert pts[3].tolist() == [3.0, 0.0, ON_CURVE_POINT]

    def test_marks(self, path):
        """Marks point to the first command of each segment."""
        assert path.marks == {0: 1, 1: 2}

    def test_cubic_curves(self, path):
        """Cubic pieces start at the end of their predecessor."""
        curves = path.cubic_curves()
        assert len(curves) == 3
        assert isinstance(curves[0], CubicBezier)
        assert np.allclose(curves[0].c, [0, 0, 1, 1, 2, 1, 3, 0])
        assert np.allclose(curves[1].c[:2], [3, 0])
        assert np.allclose(curves[2].c[:2], [0.5, -1])

    def test_segment_curves(self, path):
        """segment_curves returns the pieces between two marks."""
        assert len(path.segment_curves(0)) == 1
        second = path.segment_curves(1)
        assert len(second) == 2
        assert np.allclose(second[1].c[6:], [0, 0])
        assert path.segment_curves(5) == []

    def test_bounding_box(self, path):
        """The bounding box includes control points."""
        assert path.bounding_box() == (0.0, -2.0, 3.0, 1.0)

    def test_svg_path_string(self):
        """Path data uses absolute commands."""
        bez = BezPath()
        bez.moveto(0, 0)
        bez.curveto(1, 1, 2, 1, 3, 0)
        bez.closepath()
        assert bez.svg_path_string() == "M0.0 0.0 C1.0 1.0 2.0 1.0 3.0 0.0 Z"

    def test_svg_path_string_rounding(self):
        """A rounding function is applied to each number."""
        bez = BezPath()
        bez.moveto(0.123456, 1.0 / 3.0)
        assert bez.svg_path_string(lambda v: round(v, 2)) == "M0.12 0.33"
