#!/usr/bin/env python3
"""Drop the outlines of an SVG document into the physics world.

Loads every path of the container group, runs the simulation for a
number of ticks and prints the final body poses as JSON.

Run:
    PYTHONPATH=src python3 scripts/drop_shapes.py data/Alsergrund.svg --ticks 120
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from loguru import logger

from app.config import settings
from app.main import configure_logging, create_physics_world
from playground.errors import ParseError
from playground.physics.attraction import simulate
from playground.physics.loader import drop_svg


async def _run(args: argparse.Namespace) -> int:
    world = create_physics_world(settings)
    try:
        report = await drop_svg(
            world,
            args.svg.read_text(encoding="utf-8"),
            group_id=args.group or settings.svg_group_id,
            batch_size=settings.physics_batch_size,
            tolerance=settings.physics_simplify_tolerance,
        )
    except ParseError as e:
        logger.error(f"Cannot load {args.svg}: {e}")
        return 1
    simulate(
        world,
        ticks=args.ticks,
        strength=settings.physics_attraction_strength,
        attractor_count=settings.physics_attractor_count,
    )
    json.dump({
        "created": report.created,
        "rejected": report.rejected,
        "failed": report.failed,
        "bodies": world.snapshot(),
    }, sys.stdout)
    world.close()
    return 0


def main() -> int:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("svg", type=Path, nargs="?", default=Path(settings.svg_path))
    ap.add_argument("--group", help="Id of the group holding the paths")
    ap.add_argument("--ticks", type=int, default=60)
    args = ap.parse_args()
    configure_logging(settings)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
