"""Parametric point shapes for hash and noise previews.

A shape maps a point index on a ``resolution × resolution`` grid to a
position and normal.  Points are produced four at a time: group ``i``
covers the flat indices ``4i … 4i + 3``, and :func:`index_to_4uv`
turns them into grid-cell-centre UVs.

Shapes
------
- :class:`Plane` — unit square in the XZ plane, normal +Y
- :class:`Sphere` — octahedron-unwrapped sphere of radius 0.5
- :class:`Torus` — ring radius 0.375, tube radius 0.125

:func:`sample_shape` evaluates a shape over a whole grid, optionally
through a :class:`SpaceTRS` transform (normals go through the inverse
transpose).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple, runtime_checkable

import numpy as np

Vec3 = Tuple[float, float, float]

_TAU = 2.0 * math.pi


def index_to_4uv(i, resolution: int, inv_resolution: float) -> Tuple[np.ndarray, np.ndarray]:
    """UVs of the four points in group(s) *i*.

    Returns ``(u, v)`` arrays of shape ``(..., 4)``; the grid row is
    ``floor(index / resolution)`` (with a small bias against rounding
    down at exact multiples) and both coordinates sit at cell centres.
    """
    i4 = 4.0 * np.asarray(i, dtype=np.float64)[..., None] + np.arange(4.0)
    row = np.floor(inv_resolution * i4 + 0.00001)
    u = inv_resolution * (i4 - resolution * row + 0.5)
    v = inv_resolution * (row + 0.5)
    return u, v


@dataclass(frozen=True, eq=False)
class Point4:
    """Positions and normals, each shaped ``(..., 4, 3)``."""

    positions: np.ndarray
    normals: np.ndarray


@runtime_checkable
class Shape(Protocol):
    def get_point4(self, i, resolution: int, inv_resolution: float) -> Point4:
        ...


# ═══════════════════════════════════════════════════════════════════
# Shapes
# ═══════════════════════════════════════════════════════════════════


class Plane:
    def get_point4(self, i, resolution: int, inv_resolution: float) -> Point4:
        u, v = index_to_4uv(i, resolution, inv_resolution)
        positions = np.stack([u - 0.5, np.zeros_like(u), v - 0.5], axis=-1)
        normals = np.broadcast_to(np.array([0.0, 1.0, 0.0]), positions.shape).copy()
        return Point4(positions, normals)


class Sphere:
    """Octahedron folding of the UV square, pushed out to radius 0.5."""

    def get_point4(self, i, resolution: int, inv_resolution: float) -> Point4:
        u, v = index_to_4uv(i, resolution, inv_resolution)
        x = u - 0.5
        y = v - 0.5
        z = 0.5 - np.abs(x) - np.abs(y)
        offset = np.maximum(-z, 0.0)
        x = x + np.where(x < 0.0, offset, -offset)
        y = y + np.where(y < 0.0, offset, -offset)

        scale = 0.5 / np.sqrt(x * x + y * y + z * z)
        positions = np.stack([x * scale, y * scale, z * scale], axis=-1)
        return Point4(positions, positions.copy())


@dataclass(frozen=True)
class Torus:
    ring_radius: float = 0.375
    tube_radius: float = 0.125

    def get_point4(self, i, resolution: int, inv_resolution: float) -> Point4:
        u, v = index_to_4uv(i, resolution, inv_resolution)
        r1, r2 = self.ring_radius, self.tube_radius
        s = r1 + r2 * np.cos(_TAU * v)
        sin_u, cos_u = np.sin(_TAU * u), np.cos(_TAU * u)

        positions = np.stack([s * sin_u, r2 * np.sin(_TAU * v), s * cos_u], axis=-1)
        normals = positions.copy()
        normals[..., 0] -= r1 * sin_u
        normals[..., 2] -= r1 * cos_u
        return Point4(positions, normals)


SHAPES = {
    "plane": Plane(),
    "sphere": Sphere(),
    "torus": Torus(),
}


# ═══════════════════════════════════════════════════════════════════
# Transforms and sampling
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SpaceTRS:
    """Translation, rotation (degrees) and scale of a sample space.

    Rotation is applied about Z first, then X, then Y.
    """

    translation: Vec3 = (0.0, 0.0, 0.0)
    rotation: Vec3 = (0.0, 0.0, 0.0)
    scale: Vec3 = (1.0, 1.0, 1.0)

    @property
    def matrix(self) -> np.ndarray:
        """The 4×4 affine matrix ``T · Ry · Rx · Rz · S``."""
        ax, ay, az = (math.radians(a) for a in self.rotation)
        cx, sx = math.cos(ax), math.sin(ax)
        cy, sy = math.cos(ay), math.sin(ay)
        cz, sz = math.cos(az), math.sin(az)
        rx = np.array([[1.0, 0.0, 0.0], [0.0, cx, -sx], [0.0, sx, cx]])
        ry = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
        rz = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])

        m = np.eye(4)
        m[:3, :3] = ry @ rx @ rz @ np.diag(self.scale)
        m[:3, 3] = self.translation
        return m


def sample_shape(
    shape: Shape, resolution: int, trs: Optional[SpaceTRS] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """Positions and unit normals of *shape* over a square grid.

    The grid is evaluated in ``ceil(resolution² / 4)`` groups of four;
    the padding points of the last group are dropped, so both arrays
    have shape ``(resolution², 3)``.

    Raises
    ------
    ValueError
        If *resolution* is below 1.
    """
    if resolution < 1:
        raise ValueError(f"resolution must be >= 1, got {resolution}")
    groups = -(-resolution * resolution // 4)
    point = shape.get_point4(np.arange(groups), resolution, 1.0 / resolution)
    count = resolution * resolution
    positions = point.positions.reshape(-1, 3)[:count]
    normals = point.normals.reshape(-1, 3)[:count]

    if trs is not None:
        m = trs.matrix
        positions = positions @ m[:3, :3].T + m[:3, 3]
        normals = normals @ np.linalg.inv(m[:3, :3])

    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    return positions, normals / np.where(lengths > 0.0, lengths, 1.0)
