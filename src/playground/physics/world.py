"""PhysicsWorld - explicit owner of the shape-drop simulation.

Wraps a zero-gravity ``pymunk.Space`` enclosed by four static walls just
outside the canvas.  Every SVG outline becomes one dynamic rigid body;
concave outlines are decomposed into triangles that all attach to the
same body, placed at the outline's vertex centroid.

Lifecycle:
    world = PhysicsWorld(1280, 800)
    world.add_shape(vertices)
    world.step()
    world.reset()   # clears bodies, re-adds the walls
    world.close()
"""

from __future__ import annotations

from dataclasses import dataclass, field

import pymunk
from shapely.geometry import Polygon as ShapelyPolygon

from playground.errors import GeometryError, InsufficientDataError
from playground.render.triangulate import triangulate_rings

Vertex = tuple[float, float]

BORDER_LABEL = "border"
SHAPE_LABEL = "shape"

# Triangles thinner than this (in canvas units squared) are dropped.
_MIN_TRIANGLE_AREA = 1e-9


@dataclass
class ShapeBody:
    """A rigid body together with the outline it was built from.

    ``outline`` is in body-local coordinates; ``area`` is the outline's
    polygon area in canvas units.
    """

    body: pymunk.Body
    shapes: list[pymunk.Shape]
    outline: list[Vertex]
    area: float
    label: str = SHAPE_LABEL
    fill: str = "black"

    @property
    def position(self) -> Vertex:
        return (self.body.position.x, self.body.position.y)

    @property
    def mass(self) -> float:
        return self.body.mass

    def world_vertices(self) -> list[Vertex]:
        return [tuple(self.body.local_to_world(v)) for v in self.outline]

    def snapshot(self) -> dict:
        return {
            "label": self.label,
            "position": list(self.position),
            "angle": self.body.angle,
            "area": self.area,
            "vertices": [list(v) for v in self.world_vertices()],
        }


def _centroid(vertices: list[Vertex]) -> Vertex:
    n = len(vertices)
    return (sum(v[0] for v in vertices) / n, sum(v[1] for v in vertices) / n)


@dataclass
class PhysicsWorld:
    """Zero-gravity space, static borders and the bodies dropped into it."""

    width: float
    height: float
    border_thickness: float = 50.0
    density: float = 0.001
    iterations: int = 6
    space: pymunk.Space = field(init=False)
    _bodies: list[ShapeBody] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Drop every body and start over with fresh walls."""
        self.space = pymunk.Space()
        self.space.gravity = (0.0, 0.0)
        self.space.iterations = self.iterations
        self._bodies = []
        self._add_borders()

    def _add_borders(self) -> None:
        t = self.border_thickness
        w, h = self.width, self.height
        for cx, cy, bw, bh in (
            (w / 2, -t / 2, w, t),       # top
            (w / 2, h + t / 2, w, t),    # bottom
            (-t / 2, h / 2, t, h),       # left
            (w + t / 2, h / 2, t, h),    # right
        ):
            body = pymunk.Body(body_type=pymunk.Body.STATIC)
            body.position = (cx, cy)
            shape = pymunk.Poly.create_box(body, (bw, bh))
            self.space.add(body, shape)
            outline = [(-bw / 2, -bh / 2), (bw / 2, -bh / 2), (bw / 2, bh / 2), (-bw / 2, bh / 2)]
            self._bodies.append(ShapeBody(
                body=body, shapes=[shape], outline=outline,
                area=bw * bh, label=BORDER_LABEL,
            ))

    def add_shape(self, vertices: list[Vertex]) -> ShapeBody:
        """Create one dynamic body from a polygon outline.

        Raises:
            InsufficientDataError: Fewer than three vertices.
            GeometryError: The outline encloses no area.
        """
        if len(vertices) < 3:
            raise InsufficientDataError(
                f"Need at least 3 vertices, got {len(vertices)}", vertex_count=len(vertices),
            )
        area = ShapelyPolygon(vertices).area
        if area <= 0:
            raise GeometryError("Outline encloses no area")

        cx, cy = _centroid(vertices)
        local = [(x - cx, y - cy) for x, y in vertices]
        flat, indices = triangulate_rings([local])
        triangles = []
        for i in range(0, len(indices) - 2, 3):
            tri = [(flat[2 * j], flat[2 * j + 1]) for j in indices[i:i + 3]]
            if ShapelyPolygon(tri).area > _MIN_TRIANGLE_AREA:
                triangles.append(tri)
        if not triangles:
            raise GeometryError("Outline could not be decomposed into triangles")

        mass = self.density * area
        moment = sum(
            pymunk.moment_for_poly(self.density * ShapelyPolygon(tri).area, tri)
            for tri in triangles
        )
        body = pymunk.Body(mass, moment)
        body.position = (cx, cy)
        shapes = [pymunk.Poly(body, tri) for tri in triangles]
        self.space.add(body, *shapes)

        shape_body = ShapeBody(body=body, shapes=shapes, outline=local, area=area)
        self._bodies.append(shape_body)
        return shape_body

    @property
    def bodies(self) -> list[ShapeBody]:
        """Every body in creation order, borders first."""
        return list(self._bodies)

    @property
    def shape_bodies(self) -> list[ShapeBody]:
        """Dynamic bodies only (borders excluded), in creation order."""
        return [b for b in self._bodies if b.label != BORDER_LABEL]

    def step(self, dt: float = 1.0 / 60.0, iterations: int | None = None) -> None:
        """Advance one step; ``iterations`` overrides the solver passes for this step only."""
        if iterations is None:
            self.space.step(dt)
            return
        self.space.iterations = iterations
        try:
            self.space.step(dt)
        finally:
            self.space.iterations = self.iterations

    def snapshot(self) -> list[dict]:
        return [b.snapshot() for b in self._bodies]

    def close(self) -> None:
        if self._bodies:
            self.space.remove(*(obj for b in self._bodies for obj in (b.body, *b.shapes)))
        self._bodies = []
