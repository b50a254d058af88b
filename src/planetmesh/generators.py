"""Public mesh generators.

Each function validates its arguments, runs the generation and hands
back a finished :class:`~planetmesh.models.MeshData`.  Sphere
generators go through :meth:`MeshPipeline.default`; the rounded box
has no per-vertex stages worth scheduling and is assembled directly.

Functions
---------
- :func:`generate_octahedron_sphere` — octahedral sphere, one index set
- :func:`generate_cube_sphere` — squared cube sphere, three index sets
- :func:`generate_rounded_box` — rounded cuboid plus collider descriptors
- :func:`generate_rocky_planet` — octahedral sphere displaced by terrain
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .cube_sphere import (
    check_sizes,
    cube_grid_coordinates,
    cube_triangles,
    grid_colors,
    rounded_box_colliders,
    rounded_box_points,
)
from .exceptions import DegenerateGeometryError
from .models import MeshData
from .noise import FractalNoiseSettings, RidgeNoiseSettings
from .octahedron import spherical_uv
from .pipeline import GenerationConfig, MeshPipeline
from .terrain import TerrainConfig


def generate_octahedron_sphere(
    subdivisions: int, radius: float = 1.0, *, workers: int = 1
) -> MeshData:
    """Octahedral sphere of *radius* at subdivision level *subdivisions*.

    Levels outside ``[0, 6]`` are clamped with a logged warning.
    """
    config = GenerationConfig(
        topology="octahedron", subdivisions=subdivisions, radius=radius, workers=workers
    )
    return MeshPipeline.default().build(config)


def generate_cube_sphere(grid_size: int, radius: float = 1.0, *, workers: int = 1) -> MeshData:
    """Cube sphere with *grid_size* quads per cube edge.

    The three index sets hold the z, x and y facing quads; vertex
    colours carry the integer grid coordinates.
    """
    config = GenerationConfig(topology="cube", grid_size=grid_size, radius=radius, workers=workers)
    return MeshPipeline.default().build(config)


def generate_rounded_box(x_size: int, y_size: int, z_size: int, roundness: int) -> MeshData:
    """Rounded cuboid spanning ``[0, size]`` on each axis.

    Parameters
    ----------
    x_size, y_size, z_size : int
        Grid quads per axis (also the box extent in units).
    roundness : int
        Radius of the rounded edges and corners.

    Returns
    -------
    MeshData
        Three index sets (z, x, y faces), grid-coordinate colours, and
        the colliders: three boxes followed by twelve capsules.

    Raises
    ------
    DegenerateGeometryError
        If a size is below 1, *roundness* is below 1, or two roundings
        do not fit in the smallest size.
    """
    sizes = check_sizes(x_size, y_size, z_size)
    roundness = int(roundness)
    if roundness < 1 or roundness * 2 > min(sizes):
        raise DegenerateGeometryError(
            f"roundness must be in [1, {min(sizes) // 2}] for sizes {sizes}, got {roundness}"
        )

    coords = cube_grid_coordinates(*sizes)
    positions, normals = rounded_box_points(coords, sizes, roundness)
    boxes, capsules = rounded_box_colliders(*sizes, roundness)
    return MeshData(
        name="Procedural Cube",
        positions=positions,
        normals=normals,
        uvs=spherical_uv(normals, fix_seam=False),
        submeshes=cube_triangles(*sizes),
        colors=grid_colors(coords),
        colliders=boxes + capsules,
    )


def generate_rocky_planet(
    subdivisions: int,
    radius: float = 1.0,
    continents: Optional[FractalNoiseSettings] = None,
    mountains: Optional[RidgeNoiseSettings] = None,
    mask: Optional[FractalNoiseSettings] = None,
    *,
    terrain: Optional[TerrainConfig] = None,
    workers: int = 1,
    batch_size: int = 4096,
) -> MeshData:
    """Octahedral sphere displaced by the rocky planet height field.

    Every vertex ends at ``unit_position * (radius + height)``.  The
    three noise families override the matching fields of *terrain*
    (default :class:`TerrainConfig`), so ocean and blend settings can
    be supplied through *terrain* while the families are passed
    directly.
    """
    base = terrain if terrain is not None else TerrainConfig()
    overrides = {
        key: value
        for key, value in (("continents", continents), ("mountains", mountains), ("mask", mask))
        if value is not None
    }
    config = GenerationConfig(
        topology="octahedron",
        subdivisions=subdivisions,
        radius=radius,
        terrain=replace(base, **overrides),
        workers=workers,
        batch_size=batch_size,
    )
    return MeshPipeline.default().build(config)

