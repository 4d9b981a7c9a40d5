#!/usr/bin/env python3
"""Run the tile-union pipeline once and write its outputs.

Fetches every tile in the configured viewport, merges building fragments
and writes the SVG document, the triangle raster and/or the merged
GeoJSON.  Settings come from the environment / .env (see app.config).

Run:
    PYTHONPATH=src python3 scripts/render_map.py --svg out/map.svg --png out/map.png
    PYTHONPATH=src python3 scripts/render_map.py --svg out/raw.svg --no-rewind
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
from app.main import configure_logging, create_map_session
from playground.errors import PlaygroundError


async def _run(args: argparse.Namespace) -> int:
    cfg = settings.model_copy(update={
        k: v for k, v in {
            "tile_fetch_policy": args.policy,
            "rewind_after_union": False if args.no_rewind else None,
        }.items() if v is not None
    })
    session = create_map_session(cfg)
    try:
        result = await session.run()
        if args.svg:
            args.svg.parent.mkdir(parents=True, exist_ok=True)
            args.svg.write_text(session.render_svg(result), encoding="utf-8")
            logger.info(f"Wrote {args.svg}")
        if args.png:
            args.png.parent.mkdir(parents=True, exist_ok=True)
            args.png.write_bytes(session.render_png(result))
            logger.info(f"Wrote {args.png}")
        if args.geojson:
            args.geojson.parent.mkdir(parents=True, exist_ok=True)
            args.geojson.write_text(json.dumps(result.to_geojson()), encoding="utf-8")
            logger.info(f"Wrote {args.geojson}")
    except PlaygroundError as e:
        logger.error(f"Pipeline failed: {e}")
        return 1
    finally:
        await session.aclose()

    print(f"{len(result.tiles)} tiles, {result.fragment_count} fragments, "
          f"{len(result.features)} buildings")
    return 0


def main() -> int:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("--svg", type=Path, help="Write the SVG document here")
    ap.add_argument("--png", type=Path, help="Write the triangle raster here")
    ap.add_argument("--geojson", type=Path, help="Write merged features here")
    ap.add_argument("--policy", choices=["all_or_nothing", "retry", "skip"],
                    help="Tile fetch failure policy (default: from settings)")
    ap.add_argument("--no-rewind", action="store_true",
                    help="Skip winding correction after unions (renders inside-out)")
    args = ap.parse_args()
    if not (args.svg or args.png or args.geojson):
        ap.error("nothing to write: pass --svg, --png and/or --geojson")

    configure_logging(settings)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
