#!/usr/bin/env python3
"""Demo: hash the lattice cells of a sample shape and render the result.

Usage
-----
    python scripts/demo_hash.py --shape sphere --resolution 64 --out exports/hash_sphere.png
    python scripts/demo_hash.py --shape torus --scale 8 --rotate 0 30 0 --out exports/hash_torus.png
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from planetmesh.hashing import hash_points
from planetmesh.shapes import SHAPES, SpaceTRS, sample_shape
from planetmesh.visualize import render_hash_points


def main() -> None:
    parser = argparse.ArgumentParser(description="Hash visualisation demo")
    parser.add_argument("--shape", choices=list(SHAPES.keys()), default="sphere")
    parser.add_argument("--resolution", type=int, default=32, help="Samples per grid side")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--scale", type=float, default=8.0, help="Hash domain scale")
    parser.add_argument("--rotate", type=float, nargs=3, default=[0.0, 0.0, 0.0],
                        metavar=("X", "Y", "Z"), help="Hash domain rotation in degrees")
    parser.add_argument("--out", default="exports/hash.png")
    args = parser.parse_args()

    positions, _ = sample_shape(SHAPES[args.shape], args.resolution)
    domain = SpaceTRS(rotation=tuple(args.rotate), scale=(args.scale,) * 3)
    hashes = hash_points(positions, args.seed, domain=domain.matrix)

    render_hash_points(positions, hashes, args.out)
    print(f"Saved {args.out} ({len(positions)} samples)")


if __name__ == "__main__":
    main()
