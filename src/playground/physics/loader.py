"""Batched, cooperative loading of SVG outlines into a PhysicsWorld.

Paths are processed in fixed-size batches.  After every batch the loader
awaits ``frame()`` so the host (an event loop serving requests, a render
loop) gets control back before the next batch; with N paths and batch
size B that is exactly ceil(N / B) suspensions.  Bodies are created
strictly in input order.

A path that fails to parse or to form a body is logged and skipped; the
rest of the batch continues.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Sequence

from loguru import logger

from playground.errors import GeometryError, InsufficientDataError, ParseError
from playground.physics.svg_paths import bounding_box, fit_scale, load_svg_paths, parse_path
from playground.physics.world import PhysicsWorld, ShapeBody

Frame = Callable[[], Awaitable[object]]

DEFAULT_BATCH_SIZE = 50

# Solver passes for the settling step after a load.
WARM_UP_ITERATIONS = 4


async def next_frame() -> None:
    """Yield once to the event loop."""
    await asyncio.sleep(0)


@dataclass
class LoadReport:
    """Outcome of one load: created bodies and per-path failures."""

    created: int = 0
    rejected: int = 0
    failed: int = 0
    batches: int = 0
    bodies: list[ShapeBody] = field(default_factory=list)


async def load_shapes(
    world: PhysicsWorld,
    paths: Sequence[str],
    batch_size: int = DEFAULT_BATCH_SIZE,
    tolerance: float = 0.3,
    frame: Frame = next_frame,
) -> LoadReport:
    """Turn every qualifying path into a body, one batch per frame.

    Paths are scaled uniformly so their joint bounding box fits the
    world's canvas.  A path qualifies when more than two vertices survive
    simplification.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    report = LoadReport()
    if not paths:
        return report

    try:
        bbox = bounding_box(paths, skip_invalid=True)
        scale = fit_scale(bbox, world.width, world.height)
        offset_x, offset_y = bbox.min_x, bbox.min_y
    except InsufficientDataError as e:
        # Every path still gets its own outcome below.
        logger.warning(f"No usable vertices in {len(paths)} paths: {e}")
        scale, offset_x, offset_y = 1.0, 0.0, 0.0

    for start in range(0, len(paths), batch_size):
        for path_data in paths[start:start + batch_size]:
            try:
                vertices = parse_path(path_data, scale, offset_x, offset_y, tolerance)
                if len(vertices) > 2:
                    report.bodies.append(world.add_shape(vertices))
                    report.created += 1
                else:
                    logger.warning(f"Insufficient vertices to form a body: {vertices}")
                    report.rejected += 1
            except (ParseError, GeometryError, InsufficientDataError) as e:
                logger.error(f"Error processing path {path_data[:60]!r}: {e}")
                report.failed += 1
        report.batches += 1
        await frame()
    return report


async def drop_svg(
    world: PhysicsWorld,
    svg_text: str,
    group_id: str = "PatchCollection_1",
    batch_size: int = DEFAULT_BATCH_SIZE,
    tolerance: float = 0.3,
    frame: Frame = next_frame,
) -> LoadReport:
    """Reset ``world``, load every path of an SVG document and settle once.

    Raises:
        ParseError: If the document itself is malformed.
    """
    world.reset()
    paths = load_svg_paths(svg_text, group_id)
    logger.info(f"Loaded SVG paths: {len(paths)}")

    t0 = time.perf_counter()
    report = await load_shapes(world, paths, batch_size, tolerance, frame)
    world.step(1.0 / 60.0, iterations=WARM_UP_ITERATIONS)
    logger.info(
        f"bodies: {report.created} created, {report.rejected} rejected, "
        f"{report.failed} failed in {report.batches} batches "
        f"({time.perf_counter() - t0:.3f}s)"
    )
    return report
