"""Test module checking rendered splines with the svgpathtools parser

The tests are run using pytest.
"""

import pytest
from svgpathtools import CubicBezier as SvgCubicBezier
from svgpathtools import parse_path

from avspline.spline import Spline

SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
WAVE = [(0.0, 0.0), (1.0, 0.3), (2.0, 0.1), (3.0, 0.4), (4.0, 0.0)]


class TestSvgInterop:
    """Test class for path data read back by svgpathtools."""

    def test_closed_square(self):
        """The closed square parses to 16 cubics without a closing line."""
        spline = Spline.from_points(SQUARE, closed=True)
        spline.update()
        svg_path = parse_path(spline.render_svg())
        assert len(svg_path) == 16
        assert all(isinstance(seg, SvgCubicBezier) for seg in svg_path)
        assert svg_path.iscontinuous()
        assert svg_path.isclosed()

    def test_square_joint_curvature(self):
        """svgpathtools measures the same curvature on both sides of each anchor."""
        spline = Spline.from_points(SQUARE, closed=True)
        spline.update()
        svg_path = parse_path(spline.render_svg())
        for i in range(4):
            incoming = svg_path[(4 * i - 1) % 16]
            outgoing = svg_path[4 * i]
            assert incoming.curvature(1.0) == pytest.approx(outgoing.curvature(0.0), rel=1e-6)

    def test_open_wave(self):
        """An open wave parses to a continuous path through all anchors."""
        spline = Spline.from_points(WAVE)
        spline.update()
        svg_path = parse_path(spline.render_svg())
        assert svg_path.iscontinuous()
        assert not svg_path.isclosed()
        assert svg_path.start == complex(*WAVE[0])
        assert svg_path.end == complex(*WAVE[-1])
