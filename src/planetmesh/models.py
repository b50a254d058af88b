"""Core records shared by every generator.

- :class:`MeshData` — the engine-agnostic mesh handed to a renderer
- :class:`TopologyParams` — clamped subdivision level and radius with
  the closed-form buffer sizes derived from them
- :class:`SphereCollider`, :class:`BoxCollider`, :class:`CapsuleCollider`
  — primitive descriptors for an external collision subsystem
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

import numpy as np

from .exceptions import BufferSizeError, DegenerateGeometryError

logger = logging.getLogger(__name__)

MIN_SUBDIVISIONS = 0
MAX_SUBDIVISIONS = 6

Vec3 = Tuple[float, float, float]


# ═══════════════════════════════════════════════════════════════════
# Collider descriptors
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SphereCollider:
    center: Vec3
    radius: float


@dataclass(frozen=True)
class BoxCollider:
    center: Vec3
    size: Vec3


@dataclass(frozen=True)
class CapsuleCollider:
    """Capsule aligned with one axis.

    *direction* is the axis index (0 = x, 1 = y, 2 = z) and *height* the
    full end-to-end length along it, caps included.
    """

    center: Vec3
    direction: int
    radius: float
    height: float


Collider = Union[SphereCollider, BoxCollider, CapsuleCollider]


# ═══════════════════════════════════════════════════════════════════
# Parameters
# ═══════════════════════════════════════════════════════════════════


def check_radius(radius: float) -> float:
    """Return *radius* as a float, rejecting non-positive or non-finite values."""
    radius = float(radius)
    if not math.isfinite(radius) or radius <= 0.0:
        raise DegenerateGeometryError(f"radius must be a positive finite number, got {radius!r}")
    return radius


def clamp_subdivisions(subdivisions: int, *, label: str = "Octahedron sphere") -> int:
    """Clamp *subdivisions* into ``[0, 6]``, logging a warning when it moves."""
    subdivisions = int(subdivisions)
    if subdivisions < MIN_SUBDIVISIONS:
        logger.warning(
            "%s subdivisions increased to minimum, which is %d.", label, MIN_SUBDIVISIONS
        )
        return MIN_SUBDIVISIONS
    if subdivisions > MAX_SUBDIVISIONS:
        logger.warning(
            "%s subdivisions decreased to maximum, which is %d.", label, MAX_SUBDIVISIONS
        )
        return MAX_SUBDIVISIONS
    return subdivisions


@dataclass(frozen=True)
class TopologyParams:
    """Subdivision level and radius of an octahedron sphere.

    Build through :meth:`create` so that *subdivisions* is clamped and
    *radius* validated; the derived sizes are closed-form in
    :attr:`resolution`.
    """

    subdivisions: int
    radius: float = 1.0

    @classmethod
    def create(
        cls, subdivisions: int, radius: float = 1.0, *, label: str = "Octahedron sphere"
    ) -> "TopologyParams":
        return cls(clamp_subdivisions(subdivisions, label=label), check_radius(radius))

    @property
    def resolution(self) -> int:
        return 1 << self.subdivisions

    @property
    def vertex_count(self) -> int:
        r = self.resolution
        return (r + 1) * (r + 1) * 4 - (r * 2 - 1) * 3

    @property
    def index_count(self) -> int:
        return (1 << (self.subdivisions * 2 + 3)) * 3


# ═══════════════════════════════════════════════════════════════════
# Mesh record
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True, eq=False)
class MeshData:
    """Vertex buffers plus one or more triangle index sets.

    Attributes
    ----------
    name : str
        Human-readable mesh name.
    positions, normals : ndarray, shape (N, 3)
    uvs : ndarray, shape (N, 2)
    submeshes : tuple of ndarray
        Index sets, each a flat array of triangle triples.
    tangents : ndarray, shape (N, 4), optional
    colors : ndarray, shape (N, 4), uint8, optional
        Grid coordinates of cube topologies, stored as RGBA.
    colliders : tuple
        Primitive collider descriptors derived from the same size
        parameters as the topology.

    Construction validates the invariants: parallel buffers of equal
    length, index sets of whole triangles, every index in range.
    Violations raise :class:`BufferSizeError`.
    """

    name: str
    positions: np.ndarray
    normals: np.ndarray
    uvs: np.ndarray
    submeshes: Tuple[np.ndarray, ...]
    tangents: Optional[np.ndarray] = None
    colors: Optional[np.ndarray] = None
    colliders: Tuple[Collider, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        n = len(self.positions)
        buffers = {
            "positions": (self.positions, 3),
            "normals": (self.normals, 3),
            "uvs": (self.uvs, 2),
            "tangents": (self.tangents, 4),
            "colors": (self.colors, 4),
        }
        for label, (buf, width) in buffers.items():
            if buf is None:
                continue
            if buf.shape != (n, width):
                raise BufferSizeError(
                    f"{label} has shape {buf.shape}, expected ({n}, {width})"
                )
        for i, indices in enumerate(self.submeshes):
            if indices.ndim != 1 or len(indices) % 3 != 0:
                raise BufferSizeError(
                    f"Submesh {i} has {len(indices)} indices, not a whole number of triangles"
                )
            if len(indices) and (indices.min() < 0 or indices.max() >= n):
                raise BufferSizeError(
                    f"Submesh {i} references vertices outside [0, {n})"
                )

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def indices(self) -> np.ndarray:
        """All index sets concatenated in submesh order."""
        if not self.submeshes:
            return np.zeros(0, dtype=np.int64)
        return np.concatenate(self.submeshes)

    @property
    def triangles(self) -> np.ndarray:
        """All triangles as an ``(M, 3)`` array."""
        return self.indices.reshape(-1, 3)

    @property
    def triangle_count(self) -> int:
        return sum(len(s) for s in self.submeshes) // 3

    def as_float32(self) -> "MeshData":
        """Return a copy with single-precision vertex buffers and 32-bit indices."""

        def f32(buf: Optional[np.ndarray]) -> Optional[np.ndarray]:
            return None if buf is None else buf.astype(np.float32)

        return MeshData(
            name=self.name,
            positions=f32(self.positions),
            normals=f32(self.normals),
            uvs=f32(self.uvs),
            submeshes=tuple(s.astype(np.uint32) for s in self.submeshes),
            tangents=f32(self.tangents),
            colors=self.colors,
            colliders=self.colliders,
        )
