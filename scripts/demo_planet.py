#!/usr/bin/env python3
"""Demo: generate a rocky planet, render it and export its mesh.

Usage
-----
    python scripts/demo_planet.py --subdivisions 5 --preset earthlike --out exports/planet.png
    python scripts/demo_planet.py --subdivisions 4 --preset barren_moon --seed 7 --json exports/moon.json

Available presets: earthlike, archipelago, barren_moon, flat
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from planetmesh import generate_rocky_planet, mesh_report
from planetmesh.io import export_mesh_json
from planetmesh.terrain import ARCHIPELAGO, BARREN_MOON, EARTHLIKE, FLAT
from planetmesh.visualize import render_mesh

PRESETS = {
    "earthlike": EARTHLIKE,
    "archipelago": ARCHIPELAGO,
    "barren_moon": BARREN_MOON,
    "flat": FLAT,
}


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate rocky planet demo")
    parser.add_argument("--subdivisions", type=int, default=5, help="Octahedron subdivisions (0-6)")
    parser.add_argument("--radius", type=float, default=1.0)
    parser.add_argument("--preset", choices=list(PRESETS.keys()), default="earthlike")
    parser.add_argument("--seed", type=int, default=None, help="Offset added to every preset seed")
    parser.add_argument("--workers", type=int, default=4)
    parser.add_argument("--out", default="exports/planet.png", help="Output PNG path")
    parser.add_argument("--json", dest="json_path", help="Optional mesh JSON export")
    parser.add_argument("--dpi", type=int, default=150)
    args = parser.parse_args()

    terrain = PRESETS[args.preset]
    if args.seed is not None:
        terrain = replace(
            terrain,
            continents=replace(terrain.continents, seed=terrain.continents.seed + args.seed),
            mountains=replace(terrain.mountains, seed=terrain.mountains.seed + args.seed),
            mask=replace(terrain.mask, seed=terrain.mask.seed + args.seed),
        )

    print(f"Generating planet (subdivisions={args.subdivisions}, preset={args.preset})…")
    mesh = generate_rocky_planet(
        args.subdivisions, args.radius, terrain=terrain, workers=args.workers
    )

    report = mesh_report(mesh)
    print(f"  {report['vertex_count']} vertices, {report['triangle_count']} triangles")
    print(f"  radius range {report['min_radius']:.4f} – {report['max_radius']:.4f}")

    print("Rendering…")
    render_mesh(mesh, args.out, dpi=args.dpi)
    print(f"Saved {args.out}")

    if args.json_path:
        export_mesh_json(mesh, args.json_path)
        print(f"Saved {args.json_path}")


if __name__ == "__main__":
    main()
