"""Cube grid topology — cube spheres and rounded boxes.

Vertices are numbered ring by ring: for every layer ``y = 0 … y_size``
one ring walks the four side faces (+x along z = 0, +z along x = x_size,
-x along z = z_size, -z along x = 0).  Interior vertices of the top cap
follow, then interior vertices of the bottom cap, each row-major in
``(z, x)``.  No vertex is duplicated::

    vertices = 8 + (x + y + z - 3) * 4
             + ((x-1)(y-1) + (x-1)(z-1) + (y-1)(z-1)) * 2

Triangles go into three index sets by face axis — z faces, x faces,
y faces — every quad emitted by :func:`set_quad`.

Because cap vertices are not a simple ring, :func:`create_top_face` and
:func:`create_bottom_face` walk them with explicit ``v_min`` / ``v_mid``
/ ``v_max`` cursors: ``v_min`` runs down the -x side of the ring,
``v_max`` up the +x side and ``v_mid`` through the interior rows.

Functions
---------
- :func:`cube_vertex_count`, :func:`cube_index_counts`
- :func:`cube_grid_coordinates` — integer grid coordinate of every vertex
- :func:`set_quad`, :func:`create_side_faces`,
  :func:`create_top_face`, :func:`create_bottom_face`,
  :func:`cube_triangles`
- :func:`squared_sphere_points` — cube to sphere with even density
- :func:`rounded_box_points` — clamp to an inner box, round the overflow
- :func:`rounded_box_colliders`
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from .exceptions import BufferSizeError, DegenerateGeometryError
from .models import BoxCollider, CapsuleCollider


# ═══════════════════════════════════════════════════════════════════
# Sizes
# ═══════════════════════════════════════════════════════════════════

def check_sizes(x_size: int, y_size: int, z_size: int) -> Tuple[int, int, int]:
    sizes = (int(x_size), int(y_size), int(z_size))
    if min(sizes) < 1:
        raise DegenerateGeometryError(f"Grid sizes must be >= 1, got {sizes}")
    return sizes


def ring_size(x_size: int, z_size: int) -> int:
    return (x_size + z_size) * 2


def cube_vertex_count(x_size: int, y_size: int, z_size: int) -> int:
    corner_vertices = 8
    edge_vertices = (x_size + y_size + z_size - 3) * 4
    face_vertices = (
        (x_size - 1) * (y_size - 1)
        + (x_size - 1) * (z_size - 1)
        + (y_size - 1) * (z_size - 1)
    ) * 2
    return corner_vertices + edge_vertices + face_vertices


def cube_index_counts(x_size: int, y_size: int, z_size: int) -> Tuple[int, int, int]:
    """Index counts of the z, x and y face sets."""
    return x_size * y_size * 12, y_size * z_size * 12, x_size * z_size * 12


# ═══════════════════════════════════════════════════════════════════
# Vertices
# ═══════════════════════════════════════════════════════════════════

def cube_grid_coordinates(x_size: int, y_size: int, z_size: int) -> np.ndarray:
    """Integer ``(x, y, z)`` grid coordinate of every vertex, in index order."""
    coords: List[Tuple[int, int, int]] = []
    for y in range(y_size + 1):
        coords.extend((x, y, 0) for x in range(x_size + 1))
        coords.extend((x_size, y, z) for z in range(1, z_size + 1))
        coords.extend((x, y, z_size) for x in range(x_size - 1, -1, -1))
        coords.extend((0, y, z) for z in range(z_size - 1, 0, -1))
    for z in range(1, z_size):
        coords.extend((x, y_size, z) for x in range(1, x_size))
    for z in range(1, z_size):
        coords.extend((x, 0, z) for x in range(1, x_size))

    expected = cube_vertex_count(x_size, y_size, z_size)
    if len(coords) != expected:
        raise BufferSizeError(f"Cube grid produced {len(coords)} vertices, expected {expected}")
    return np.array(coords, dtype=np.int64)


def squared_sphere_points(coords: np.ndarray, grid_size: int) -> np.ndarray:
    """Map cube grid coordinates onto the unit sphere.

    The cube ``[-1, 1]^3`` point ``v`` becomes, per axis,
    ``s.x = v.x * sqrt(1 - y²/2 - z²/2 + y²z²/3)`` (and cyclically),
    which spreads vertices more evenly than normalizing.
    """
    v = coords.astype(np.float64) * 2.0 / grid_size - 1.0
    x2, y2, z2 = (v[:, i] * v[:, i] for i in range(3))
    return np.column_stack([
        v[:, 0] * np.sqrt(1.0 - y2 / 2.0 - z2 / 2.0 + y2 * z2 / 3.0),
        v[:, 1] * np.sqrt(1.0 - x2 / 2.0 - z2 / 2.0 + x2 * z2 / 3.0),
        v[:, 2] * np.sqrt(1.0 - x2 / 2.0 - y2 / 2.0 + x2 * y2 / 3.0),
    ])


def rounded_box_points(
    coords: np.ndarray, sizes: Sequence[int], roundness: int
) -> Tuple[np.ndarray, np.ndarray]:
    """Positions and normals of a rounded box.

    Each coordinate is clamped into the inner box
    ``[roundness, size - roundness]``; the vertex then sits *roundness*
    away from its clamped point, along the direction it overflowed.
    """
    points = coords.astype(np.float64)
    lo = np.full(3, float(roundness))
    hi = np.asarray(sizes, dtype=np.float64) - roundness
    inner = np.where(points < lo, lo, np.where(points > hi, hi, points))
    offset = points - inner
    normals = offset / np.linalg.norm(offset, axis=1, keepdims=True)
    return inner + normals * roundness, normals


def grid_colors(coords: np.ndarray) -> np.ndarray:
    """Grid coordinates packed as RGBA bytes ``(x, y, z, 0)``."""
    colors = np.zeros((len(coords), 4), dtype=np.uint8)
    colors[:, :3] = coords & 0xFF
    return colors


# ═══════════════════════════════════════════════════════════════════
# Triangles
# ═══════════════════════════════════════════════════════════════════

def set_quad(triangles: np.ndarray, i: int, v00: int, v10: int, v01: int, v11: int) -> int:
    """Write the quad as ``(v00, v01, v10), (v10, v01, v11)``; return ``i + 6``."""
    triangles[i:i + 6] = (v00, v01, v10, v10, v01, v11)
    return i + 6


def create_side_faces(
    triangles_z: np.ndarray,
    triangles_x: np.ndarray,
    x_size: int,
    y_size: int,
    z_size: int,
) -> Tuple[int, int]:
    """Stitch every ring to the ring above it; return the two cursors."""
    ring = ring_size(x_size, z_size)
    t_z = t_x = v = 0
    for _ in range(y_size):
        for _ in range(x_size):
            t_z = set_quad(triangles_z, t_z, v, v + 1, v + ring, v + ring + 1)
            v += 1
        for _ in range(z_size):
            t_x = set_quad(triangles_x, t_x, v, v + 1, v + ring, v + ring + 1)
            v += 1
        for _ in range(x_size):
            t_z = set_quad(triangles_z, t_z, v, v + 1, v + ring, v + ring + 1)
            v += 1
        for _ in range(z_size - 1):
            t_x = set_quad(triangles_x, t_x, v, v + 1, v + ring, v + ring + 1)
            v += 1
        t_x = set_quad(triangles_x, t_x, v, v - ring + 1, v + ring, v + 1)
        v += 1
    return t_z, t_x


def _ring_index(x: int, z: int, x_size: int, z_size: int) -> int:
    """Position of the boundary point ``(x, z)`` within its ring."""
    if z == 0:
        return x
    if x == x_size:
        return x_size + z
    if z == z_size:
        return x_size + z_size + (x_size - x)
    return 2 * x_size + z_size + (z_size - z)


def _cap_lookup(x_size: int, z_size: int, ring_start: int, interior_start: int) -> np.ndarray:
    table = np.zeros((x_size + 1, z_size + 1), dtype=np.int64)
    for x in range(x_size + 1):
        for z in range(z_size + 1):
            if 0 < x < x_size and 0 < z < z_size:
                table[x, z] = interior_start + (z - 1) * (x_size - 1) + (x - 1)
            else:
                table[x, z] = ring_start + _ring_index(x, z, x_size, z_size)
    return table


def _create_thin_cap(
    triangles: np.ndarray, t: int, x_size: int, z_size: int, ring_start: int, top: bool
) -> int:
    # A cap one quad wide has no interior row for the cursors to walk.
    table = _cap_lookup(x_size, z_size, ring_start, 0)
    for z in range(z_size):
        for x in range(x_size):
            if top:
                t = set_quad(
                    triangles, t,
                    table[x, z], table[x + 1, z], table[x, z + 1], table[x + 1, z + 1],
                )
            else:
                t = set_quad(
                    triangles, t,
                    table[x, z + 1], table[x + 1, z + 1], table[x, z], table[x + 1, z],
                )
    return t


def create_top_face(
    triangles: np.ndarray, t: int, x_size: int, y_size: int, z_size: int
) -> int:
    """Stitch the top cap into *triangles* starting at cursor *t*."""
    ring = ring_size(x_size, z_size)
    if x_size == 1 or z_size == 1:
        return _create_thin_cap(triangles, t, x_size, z_size, ring * y_size, top=True)

    v = ring * y_size
    for _ in range(x_size - 1):
        t = set_quad(triangles, t, v, v + 1, v + ring - 1, v + ring)
        v += 1
    t = set_quad(triangles, t, v, v + 1, v + ring - 1, v + 2)

    v_min = ring * (y_size + 1) - 1
    v_mid = v_min + 1
    v_max = v + 2
    for _ in range(1, z_size - 1):
        t = set_quad(triangles, t, v_min, v_mid, v_min - 1, v_mid + x_size - 1)
        for _ in range(1, x_size - 1):
            t = set_quad(triangles, t, v_mid, v_mid + 1, v_mid + x_size - 1, v_mid + x_size)
            v_mid += 1
        t = set_quad(triangles, t, v_mid, v_max, v_mid + x_size - 1, v_max + 1)
        v_min -= 1
        v_mid += 1
        v_max += 1

    v_top = v_min - 2
    t = set_quad(triangles, t, v_min, v_mid, v_top + 1, v_top)
    for _ in range(1, x_size - 1):
        t = set_quad(triangles, t, v_mid, v_mid + 1, v_top, v_top - 1)
        v_top -= 1
        v_mid += 1
    return set_quad(triangles, t, v_mid, v_top - 2, v_top, v_top - 1)


def create_bottom_face(
    triangles: np.ndarray, t: int, x_size: int, z_size: int, vertex_count: int
) -> int:
    """Stitch the bottom cap into *triangles* starting at cursor *t*."""
    ring = ring_size(x_size, z_size)
    if x_size == 1 or z_size == 1:
        return _create_thin_cap(triangles, t, x_size, z_size, 0, top=False)

    v = 1
    v_mid = vertex_count - (x_size - 1) * (z_size - 1)
    t = set_quad(triangles, t, ring - 1, v_mid, 0, 1)
    for _ in range(1, x_size - 1):
        t = set_quad(triangles, t, v_mid, v_mid + 1, v, v + 1)
        v += 1
        v_mid += 1
    t = set_quad(triangles, t, v_mid, v + 2, v, v + 1)

    v_min = ring - 2
    v_mid -= x_size - 2
    v_max = v + 2
    for _ in range(1, z_size - 1):
        t = set_quad(triangles, t, v_min, v_mid + x_size - 1, v_min + 1, v_mid)
        for _ in range(1, x_size - 1):
            t = set_quad(triangles, t, v_mid + x_size - 1, v_mid + x_size, v_mid, v_mid + 1)
            v_mid += 1
        t = set_quad(triangles, t, v_mid + x_size - 1, v_max + 1, v_mid, v_max)
        v_min -= 1
        v_mid += 1
        v_max += 1

    v_top = v_min - 1
    t = set_quad(triangles, t, v_top + 1, v_top, v_top + 2, v_mid)
    for _ in range(1, x_size - 1):
        t = set_quad(triangles, t, v_top, v_top - 1, v_mid, v_mid + 1)
        v_top -= 1
        v_mid += 1
    return set_quad(triangles, t, v_top, v_top - 1, v_mid, v_top - 2)


def cube_triangles(
    x_size: int, y_size: int, z_size: int
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Build the z, x and y index sets of a cube grid.

    Raises
    ------
    BufferSizeError
        If any cursor does not finish exactly at its set's size.
    """
    z_count, x_count, y_count = cube_index_counts(x_size, y_size, z_size)
    triangles_z = np.zeros(z_count, dtype=np.int64)
    triangles_x = np.zeros(x_count, dtype=np.int64)
    triangles_y = np.zeros(y_count, dtype=np.int64)
    vertex_count = cube_vertex_count(x_size, y_size, z_size)

    try:
        t_z, t_x = create_side_faces(triangles_z, triangles_x, x_size, y_size, z_size)
        t_y = create_top_face(triangles_y, 0, x_size, y_size, z_size)
        t_y = create_bottom_face(triangles_y, t_y, x_size, z_size, vertex_count)
    except ValueError as exc:
        raise BufferSizeError(
            f"Cube triangulation overran its buffers for sizes {(x_size, y_size, z_size)}"
        ) from exc

    if (t_z, t_x, t_y) != (z_count, x_count, y_count):
        raise BufferSizeError(
            f"Cube triangulation wrote {(t_z, t_x, t_y)} indices, "
            f"expected {(z_count, x_count, y_count)}"
        )
    return triangles_z, triangles_x, triangles_y


# ═══════════════════════════════════════════════════════════════════
# Colliders
# ═══════════════════════════════════════════════════════════════════

def rounded_box_colliders(
    x_size: int, y_size: int, z_size: int, roundness: int
) -> Tuple[Tuple[BoxCollider, ...], Tuple[CapsuleCollider, ...]]:
    """Three overlapping boxes and twelve edge capsules of a rounded box."""
    r = float(roundness)
    size = tuple(float(s) for s in (x_size, y_size, z_size))
    half = tuple(s * 0.5 for s in size)
    boxes = (
        BoxCollider(half, (size[0], size[1] - r * 2, size[2] - r * 2)),
        BoxCollider(half, (size[0] - r * 2, size[1], size[2] - r * 2)),
        BoxCollider(half, (size[0] - r * 2, size[1] - r * 2, size[2])),
    )

    lo = (r, r, r)
    hi = tuple(s - r for s in size)
    capsules: List[CapsuleCollider] = []
    for direction in range(3):
        a, b = (axis for axis in range(3) if axis != direction)
        for ca in (lo[a], hi[a]):
            for cb in (lo[b], hi[b]):
                center = [0.0, 0.0, 0.0]
                center[direction] = half[direction]
                center[a] = ca
                center[b] = cb
                capsules.append(
                    CapsuleCollider(tuple(center), direction, r, half[direction] * 2.0)
                )
    return boxes, tuple(capsules)
