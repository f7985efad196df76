"""Creates a SVG file of a DIN A4 page (portrait format) showing three solved splines:
an open smooth wave, a closed smooth blob and a closed shape mixing corners and smooth anchors.
The debug layer contains the anchors and their solved tangent directions.
"""

import os

from avspline.common import AnchorKind
from avspline.geom import Vector2
from avspline.page import SplineSvgPage
from avspline.spline import Anchor, Spline

OUTPUT_FILE = "data/output/example/svg/avspline/example_splines.svg"

PAGE_WIDTH_MM = 210  # DIN A4 page width in mm
PAGE_HEIGHT_MM = 297  # DIN A4 page height in mm
STROKE_WIDTH = 0.002  # in spline coordinates


def create_splines():
    """Create the splines shown on the page, x-coordinates between 0 and 1."""
    wave = Spline.from_points(
        [(0.05, 0.55), (0.2, 0.65), (0.35, 0.5), (0.5, 0.62), (0.65, 0.5), (0.8, 0.6), (0.95, 0.5)],
    )
    blob = Spline.from_points(
        [(0.15, 0.1), (0.35, 0.08), (0.42, 0.25), (0.3, 0.38), (0.1, 0.3)],
        closed=True,
    )
    mixed = Spline(
        [
            Anchor(Vector2(0.55, 0.1), AnchorKind.CORNER),
            Anchor(Vector2(0.75, 0.05)),
            Anchor(Vector2(0.9, 0.2), AnchorKind.CORNER),
            Anchor(Vector2(0.85, 0.38), fixed_left_angle=2.5, fixed_right_angle=2.5),
            Anchor(Vector2(0.6, 0.35)),
        ],
        closed=True,
    )
    return [wave, blob, mixed]


def main(output_filename: str = OUTPUT_FILE):
    """Solves the splines, draws them onto the page and saves the SVG file."""
    svg_page = SplineSvgPage(PAGE_WIDTH_MM, PAGE_HEIGHT_MM)

    for spline, color in zip(create_splines(), ["black", "blue", "green"]):
        spline.solve()
        spline.compute_curvature_blending()
        svg_page.add_spline(spline, stroke=color, stroke_width=STROKE_WIDTH)

    output_dir = os.path.dirname(output_filename)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    print(f"save file {output_filename} ...")
    svg_page.save_as(output_filename, include_debug_layer=True, pretty=True)
    print("save done.")


if __name__ == "__main__":
    main()
