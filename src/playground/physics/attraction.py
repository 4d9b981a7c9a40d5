"""Mutual attraction toward the largest bodies.

Each tick the ``attractor_count`` largest bodies (by outline area) pull
every other body toward themselves with an inverse-square law scaled by
the attractor's mass:

    F = (dx, dy) * strength * m_attractor / d²

The owner of the simulation loop calls ``apply_attraction`` before each
``PhysicsWorld.step``; nothing is registered globally.
"""

from __future__ import annotations

from typing import Sequence

from playground.physics.world import BORDER_LABEL, PhysicsWorld, ShapeBody

Force = tuple[float, float]


def largest_bodies(bodies: Sequence[ShapeBody], count: int) -> list[ShapeBody]:
    """The ``count`` bodies with the largest area, largest first."""
    return sorted(bodies, key=lambda b: b.area, reverse=True)[:count]


def attraction_forces(
    bodies: Sequence[ShapeBody],
    strength: float = 1.0,
    attractor_count: int = 5,
) -> list[tuple[ShapeBody, Force]]:
    """Compute (body, force) pairs for one tick without applying them.

    Border bodies neither attract nor are attracted.  Pairs at zero
    distance are skipped.  A body pulled by several attractors appears
    once per attractor.
    """
    movable = [b for b in bodies if b.label != BORDER_LABEL]
    forces: list[tuple[ShapeBody, Force]] = []
    for a in largest_bodies(movable, attractor_count):
        ax, ay = a.position
        for b in movable:
            if b is a:
                continue
            bx, by = b.position
            dx, dy = ax - bx, ay - by
            dist_sq = dx * dx + dy * dy
            if dist_sq == 0:
                continue
            magnitude = strength * a.mass / dist_sq
            forces.append((b, (dx * magnitude, dy * magnitude)))
    return forces


def apply_attraction(
    bodies: Sequence[ShapeBody],
    strength: float = 1.0,
    attractor_count: int = 5,
) -> int:
    """Apply one tick of attraction at each body's center.

    Returns:
        Number of forces applied.
    """
    forces = attraction_forces(bodies, strength, attractor_count)
    for body, force in forces:
        body.body.apply_force_at_world_point(force, body.body.position)
    return len(forces)


def simulate(
    world: PhysicsWorld,
    ticks: int = 1,
    dt: float = 1.0 / 60.0,
    strength: float = 1.0,
    attractor_count: int = 5,
) -> None:
    """Advance ``world`` by ``ticks`` steps, attracting before each step."""
    for _ in range(ticks):
        apply_attraction(world.shape_bodies, strength, attractor_count)
        world.step(dt)
