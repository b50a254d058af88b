"""planetmesh command-line interface."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from .diagnostics import mesh_report
from .generators import (
    generate_cube_sphere,
    generate_octahedron_sphere,
    generate_rocky_planet,
    generate_rounded_box,
)
from .io import export_mesh_json, load_terrain_config, save_terrain_config
from .models import MeshData
from .terrain import ARCHIPELAGO, BARREN_MOON, EARTHLIKE, FLAT

PRESETS = {
    "earthlike": EARTHLIKE,
    "archipelago": ARCHIPELAGO,
    "barren_moon": BARREN_MOON,
    "flat": FLAT,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="planetmesh CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline stages")
    sub = parser.add_subparsers(dest="command", required=True)

    octa = sub.add_parser("octahedron", help="Build an octahedron sphere")
    octa.add_argument("--subdivisions", type=int, default=3)
    octa.add_argument("--radius", type=float, default=1.0)
    _add_output_args(octa)

    cube = sub.add_parser("cube-sphere", help="Build a cube sphere")
    cube.add_argument("--grid-size", type=int, default=8)
    cube.add_argument("--radius", type=float, default=1.0)
    _add_output_args(cube)

    box = sub.add_parser("rounded-box", help="Build a rounded box")
    box.add_argument("--size", type=int, nargs=3, default=[8, 6, 4], metavar=("X", "Y", "Z"))
    box.add_argument("--roundness", type=int, default=2)
    _add_output_args(box)

    planet = sub.add_parser("planet", help="Build a rocky planet")
    planet.add_argument("--subdivisions", type=int, default=5)
    planet.add_argument("--radius", type=float, default=1.0)
    group = planet.add_mutually_exclusive_group()
    group.add_argument("--preset", choices=list(PRESETS.keys()), default="earthlike")
    group.add_argument("--config", dest="config_path", help="Terrain config JSON")
    planet.add_argument("--workers", type=int, default=1)
    _add_output_args(planet)

    config = sub.add_parser("write-config", help="Write a terrain preset as JSON")
    config.add_argument("--preset", choices=list(PRESETS.keys()), default="earthlike")
    config.add_argument("--out", dest="output_path", required=True)

    return parser


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--out", dest="output_path", help="Mesh JSON output path")
    parser.add_argument("--render-out", dest="render_path", help="PNG preview path")
    parser.add_argument("--diagnose", action="store_true")
    parser.add_argument("--diagnose-json", dest="diagnose_json")


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "write-config":
        out = save_terrain_config(PRESETS[args.preset], args.output_path)
        print(f"Saved {out}")
        return

    if args.command == "octahedron":
        mesh = generate_octahedron_sphere(args.subdivisions, args.radius)
    elif args.command == "cube-sphere":
        mesh = generate_cube_sphere(args.grid_size, args.radius)
    elif args.command == "rounded-box":
        mesh = generate_rounded_box(*args.size, args.roundness)
    else:
        terrain = (
            load_terrain_config(args.config_path) if args.config_path else PRESETS[args.preset]
        )
        mesh = generate_rocky_planet(
            args.subdivisions, args.radius, terrain=terrain, workers=args.workers
        )

    _write_outputs(mesh, args)


def _write_outputs(mesh: MeshData, args: argparse.Namespace) -> None:
    if args.output_path:
        print(f"Saved {export_mesh_json(mesh, args.output_path)}")

    if args.render_path:
        from .visualize import render_mesh

        print(f"Saved {render_mesh(mesh, args.render_path)}")

    report = mesh_report(mesh) if args.diagnose or args.diagnose_json else None
    if args.diagnose:
        for key, value in report.items():
            print(f"  {key}: {value}")
    if args.diagnose_json:
        Path(args.diagnose_json).write_text(json.dumps(report, indent=2), encoding="utf-8")


if __name__ == "__main__":
    main()
