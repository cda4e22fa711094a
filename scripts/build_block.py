#!/usr/bin/env python3
"""Build a relief block from a DEM without a browser.

Loads a GeoTIFF DEM, generates the four walls for an extent (given directly
or through a share token) and prints a summary plus the share token.

Usage:
    python scripts/build_block.py dem.tif --extent 8.00 46.00 8.01 46.01
    python scripts/build_block.py dem.tif --token <share token> --fidelity 20

Requirements:
    pip install -e .
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from domain.relief.services import BlockGenerator, frame_camera
from domain.sharing.services import decode_share_token, encode_share_token
from domain.sharing.value_objects import SharePayload
from domain.terrain.services import normalize_extent
from domain.terrain.value_objects import GeoExtent
from infrastructure.scene import InMemoryScene
from infrastructure.terrain import GeoTiffTerrainAdapter, GridTerrainSampler
from shared.config import settings

logger = logging.getLogger("build_block")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("dem", help="GeoTIFF digital elevation model")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--extent",
        nargs=4,
        type=float,
        metavar=("WEST", "SOUTH", "EAST", "NORTH"),
        help="extent in degrees",
    )
    source.add_argument("--token", help="share token to rebuild")
    parser.add_argument("--fidelity", type=int, default=settings.fidelity)
    parser.add_argument("--hide-map", action="store_true", help="share in challenge mode")
    parser.add_argument("--max-bytes", type=int, default=None, help="DEM memory budget")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def resolve_extent(args: argparse.Namespace) -> tuple[GeoExtent, bool] | None:
    if args.token:
        payload = decode_share_token(args.token)
        if payload is None:
            return None
        extent = normalize_extent(payload.extent)
        return (extent, payload.hide_map) if extent is not None else None

    west, south, east, north = args.extent
    extent = normalize_extent({"west": west, "south": south, "east": east, "north": north})
    return (extent, args.hide_map) if extent is not None else None


async def build(args: argparse.Namespace) -> int:
    resolved = resolve_extent(args)
    if resolved is None:
        print("ERROR: invalid extent or share token")
        return 2
    extent, hide_map = resolved

    sampler = GridTerrainSampler.from_file(GeoTiffTerrainAdapter(args.max_bytes), args.dem)
    scene = InMemoryScene()

    block = await BlockGenerator(sampler, args.fidelity).generate(extent)
    scene.clip_to_extent(block.extent)
    for wall in block.walls:
        scene.add_wall(wall)
    plan = await frame_camera(block.extent, sampler, scene)

    summary = {
        "extent": block.extent.model_dump(),
        "base_altitude": round(block.base_altitude, 2),
        "walls": {
            wall.name: {
                "vertices": len(wall.vertices),
                "top_min": round(min(v.height for v in wall.vertices), 2),
                "top_max": round(max(v.height for v in wall.vertices), 2),
            }
            for wall in block.walls
        },
        "camera": None
        if plan is None
        else {"range_m": round(plan.range_m, 1), "max_zoom": round(plan.max_zoom_distance, 1)},
        "share_token": encode_share_token(
            SharePayload(extent=block.extent, hide_map=hide_map)
        ),
    }
    print(json.dumps(summary, indent=2))
    return 0 if len(block.walls) == 4 else 1


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(build(args))


if __name__ == "__main__":
    raise SystemExit(main())
