"""Shape drop: SVG outlines as rigid bodies pulled toward the largest ones."""

from playground.physics.attraction import (
    apply_attraction,
    attraction_forces,
    largest_bodies,
    simulate,
)
from playground.physics.loader import LoadReport, drop_svg, load_shapes, next_frame
from playground.physics.svg_paths import (
    BoundingBox,
    bounding_box,
    fit_scale,
    load_svg_paths,
    parse_path,
    simplify,
)
from playground.physics.world import BORDER_LABEL, SHAPE_LABEL, PhysicsWorld, ShapeBody

__all__ = [
    "apply_attraction",
    "attraction_forces",
    "largest_bodies",
    "simulate",
    "LoadReport",
    "drop_svg",
    "load_shapes",
    "next_frame",
    "BoundingBox",
    "bounding_box",
    "fit_scale",
    "load_svg_paths",
    "parse_path",
    "simplify",
    "BORDER_LABEL",
    "SHAPE_LABEL",
    "PhysicsWorld",
    "ShapeBody",
]
