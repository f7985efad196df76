"""SVG output of solved splines together with their anchors and tangents."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import svgwrite
import svgwrite.container
from svgwrite.extensions import Inkscape

from avspline.bezpath import BezPath
from avspline.common import AnchorKind
from avspline.spline import Spline


@dataclass(frozen=True)
class SplineEntry:
    """A spline rendered onto the page together with its stroke style."""

    spline: Spline
    path: BezPath
    stroke: str
    stroke_width: float
    show_anchors: bool


class SplineSvgPage:
    """Page collecting solved splines and writing them as SVG.

    Spline coordinates run left-to-right and bottom-to-top, the viewbox is
    fitted to all splines on the page. The SVG contains groups/layers:
        - root       -- (group) y-flip of the spline coordinates
            - debug  -- anchors and tangent handles, hidden->display="none", only on request
            - main   -- rendered splines
    """

    def __init__(self, width_mm: float = 210, height_mm: float = 297, margin: float = 0.05):
        """
        Args:
            width_mm (float, optional): Page width in millimeters. Defaults to 210 (DIN A4).
            height_mm (float, optional): Page height in millimeters. Defaults to 297 (DIN A4).
            margin (float, optional): Margin around the splines relative to their larger extent.
                Defaults to 0.05.
        """
        if width_mm <= 0 or height_mm <= 0:
            raise ValueError(f"page size must be positive, got {width_mm} x {height_mm}")
        if margin < 0:
            raise ValueError(f"margin must not be negative, got {margin}")
        self.width_mm = width_mm
        self.height_mm = height_mm
        self.margin = margin
        self.entries: List[SplineEntry] = []

    def add_spline(
        self,
        spline: Spline,
        stroke: str = "black",
        stroke_width: float = 0.01,
        show_anchors: bool = True,
    ) -> BezPath:
        """
        Render a solved spline and add it to the page.

        Args:
            spline (Spline): spline to draw, solve()/compute_curvature_blending() should have run
            stroke (str, optional): stroke color. Defaults to "black".
            stroke_width (float, optional): stroke width in spline units. Defaults to 0.01.
            show_anchors (bool, optional): draw anchors and tangents into the debug layer. Defaults to True.

        Returns:
            BezPath: the rendered path
        """
        path = BezPath()
        spline.render(path)
        self.entries.append(SplineEntry(spline, path, stroke, stroke_width, show_anchors))
        return path

    def bounding_box(self) -> Optional[Tuple[float, float, float, float]]:
        """Bounding box (xmin, ymin, xmax, ymax) of all paths and anchors, None if the page is empty."""
        xs: List[float] = []
        ys: List[float] = []
        for entry in self.entries:
            box = entry.path.bounding_box()
            if box is not None:
                xs.extend((box[0], box[2]))
                ys.extend((box[1], box[3]))
            for anchor in entry.spline.anchors:
                xs.append(anchor.position.x)
                ys.append(anchor.position.y)
        if not xs:
            return None
        return (min(xs), min(ys), max(xs), max(ys))

    def viewbox(self) -> Tuple[float, float, float, float]:
        """Viewbox (x, y, width, height) in flipped SVG coordinates around all splines."""
        box = self.bounding_box()
        if box is None:
            return (0.0, -1.0, 1.0, 1.0)
        xmin, ymin, xmax, ymax = box
        extent = max(xmax - xmin, ymax - ymin)
        pad = self.margin * extent if extent > 0 else 1.0
        # root group flips y, so the visible y-range is [-ymax, -ymin]
        return (xmin - pad, -ymax - pad, xmax - xmin + 2 * pad, ymax - ymin + 2 * pad)

    def drawing(self, include_debug_layer: bool = False) -> svgwrite.Drawing:
        """Build the SVG drawing of all splines on the page.

        Args:
            include_debug_layer (bool, optional): True to add the hidden anchor layer. Defaults to False.

        Returns:
            svgwrite.Drawing: the drawing
        """
        vb_x, vb_y, vb_width, vb_height = self.viewbox()
        # profile="full" to support numbers with more than 4 decimal digits
        dwg = svgwrite.Drawing(
            size=(f"{self.width_mm}mm", f"{self.height_mm}mm"),
            viewBox=f"{vb_x} {vb_y} {vb_width} {vb_height}",
            profile="full",
        )
        inkscape = Inkscape(dwg)
        root_group = dwg.g(id="root", transform="scale(1,-1)")
        if include_debug_layer:
            debug_layer = inkscape.layer(label="debug", locked=False, display="none")
            for entry in self.entries:
                if entry.show_anchors:
                    self._draw_anchors(dwg, debug_layer, entry)
            root_group.add(debug_layer)

        main_layer = inkscape.layer(label="main", locked=False)
        for entry in self.entries:
            if entry.path.is_empty():
                continue
            main_layer.add(
                dwg.path(
                    d=entry.path.svg_path_string(),
                    stroke=entry.stroke,
                    stroke_width=entry.stroke_width,
                    fill="none",
                )
            )
        root_group.add(main_layer)
        dwg.add(root_group)
        return dwg

    @staticmethod
    def _draw_anchors(dwg: svgwrite.Drawing, layer: svgwrite.container.Group, entry: SplineEntry) -> None:
        size = 4 * entry.stroke_width
        handle = 6 * size
        for anchor in entry.spline.anchors:
            x, y = anchor.position.to_tuple()
            if anchor.kind is AnchorKind.CORNER:
                layer.add(dwg.rect(insert=(x - size, y - size), size=(2 * size, 2 * size), fill="red"))
            else:
                layer.add(dwg.circle(center=(x, y), r=size, fill="blue"))
            # incoming handle points backwards, outgoing forwards
            for angle, sign in ((anchor.left_angle, -1.0), (anchor.right_angle, 1.0)):
                if angle is None:
                    continue
                end = (x + sign * handle * math.cos(angle), y + sign * handle * math.sin(angle))
                layer.add(dwg.line(start=(x, y), end=end, stroke="gray", stroke_width=entry.stroke_width / 2))

    def save_as(self, filename: str, include_debug_layer: bool = False, pretty: bool = False):
        """Save as SVG file

        Args:
            filename (str): path and filename
            include_debug_layer (bool, optional): True if file should contain debug_layer. Defaults to False.
            pretty (bool, optional): True for easy readable output. Defaults to False.
        """
        self.drawing(include_debug_layer).saveas(filename, pretty=pretty)
