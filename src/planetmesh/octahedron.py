"""Octahedron sphere topology.

The lower hemisphere is laid out as ``resolution`` rings growing away
from the bottom pole, each ring split into four fans (towards -X, -Z,
+X, +Z); the upper hemisphere mirrors it back to the top pole.  Ring
vertices come from linear interpolation between fan edges and triangle
strips stitch each ring to the previous one.  Vertex and index write
cursors only move forward.

Both poles are emitted four times (once per bordering fan) and the
+Z meridian is emitted twice per ring, so that UVs can differ across
the seam.  The resulting counts are::

    vertices = (r + 1)**2 * 4 - (2r - 1) * 3
    indices  = 2**(2s + 3) * 3        # r = 2**s

Functions
---------
- :func:`generate_octahedron` — raw vertices and indices
- :func:`normalize_vertices` — project onto the unit sphere
- :func:`spherical_uv` — UVs with seam and pole fix-ups
- :func:`octahedron_tangents` — tangents with fixed pole values
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from .exceptions import BufferSizeError
from .models import TopologyParams

DOWN = np.array([0.0, -1.0, 0.0])
UP = np.array([0.0, 1.0, 0.0])
FORWARD = np.array([0.0, 0.0, 1.0])

# Fan directions in ring order: left, back, right, forward.
DIRECTIONS = (
    np.array([-1.0, 0.0, 0.0]),
    np.array([0.0, 0.0, -1.0]),
    np.array([1.0, 0.0, 0.0]),
    FORWARD,
)

# U coordinate of the four copies of each pole.
POLE_U = (0.125, 0.375, 0.625, 0.875)

_POLE_TANGENTS = np.array([
    [-1.0, 0.0, -1.0],
    [1.0, 0.0, -1.0],
    [1.0, 0.0, 1.0],
    [-1.0, 0.0, 1.0],
]) / math.sqrt(2.0)

_SEAM_EPSILON = 1e-12


def _lerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    return a + (b - a) * t


# ═══════════════════════════════════════════════════════════════════
# Cursor helpers
# ═══════════════════════════════════════════════════════════════════

def _vertex_line(
    vertices: np.ndarray, v: int, start: np.ndarray, end: np.ndarray, steps: int
) -> int:
    """Write *steps* points from *start* (exclusive) to *end* (inclusive)."""
    for i in range(1, steps + 1):
        vertices[v] = _lerp(start, end, i / steps)
        v += 1
    return v


def _lower_strip(triangles: np.ndarray, t: int, steps: int, v_top: int, v_bottom: int) -> int:
    """Stitch a ring segment to the smaller ring below it."""
    for _ in range(1, steps):
        triangles[t:t + 3] = (v_bottom, v_top - 1, v_top)
        triangles[t + 3:t + 6] = (v_bottom, v_top, v_bottom + 1)
        t += 6
        v_bottom += 1
        v_top += 1
    triangles[t:t + 3] = (v_bottom, v_top - 1, v_top)
    return t + 3


def _upper_strip(triangles: np.ndarray, t: int, steps: int, v_top: int, v_bottom: int) -> int:
    """Stitch a ring segment to the larger ring below it."""
    triangles[t:t + 3] = (v_bottom, v_top - 1, v_bottom + 1)
    t += 3
    v_bottom += 1
    for _ in range(1, steps + 1):
        triangles[t:t + 3] = (v_top - 1, v_top, v_bottom)
        triangles[t + 3:t + 6] = (v_bottom, v_top, v_bottom + 1)
        t += 6
        v_bottom += 1
        v_top += 1
    return t


# ═══════════════════════════════════════════════════════════════════
# Topology
# ═══════════════════════════════════════════════════════════════════

def generate_octahedron(params: TopologyParams) -> Tuple[np.ndarray, np.ndarray]:
    """Generate the raw (un-normalized) octahedron.

    Returns
    -------
    vertices : ndarray, shape (params.vertex_count, 3)
    triangles : ndarray of int64, shape (params.index_count,)

    Raises
    ------
    BufferSizeError
        If the cursors do not finish exactly at the closed-form sizes.
    """
    resolution = params.resolution
    vertices = np.zeros((params.vertex_count, 3), dtype=np.float64)
    triangles = np.zeros(params.index_count, dtype=np.int64)
    v = v_bottom = t = 0

    try:
        for _ in range(4):
            vertices[v] = DOWN
            v += 1

        for i in range(1, resolution + 1):
            progress = i / resolution
            to = _lerp(DOWN, FORWARD, progress)
            vertices[v] = to
            v += 1
            for d in DIRECTIONS:
                start, to = to, _lerp(DOWN, d, progress)
                t = _lower_strip(triangles, t, i, v, v_bottom)
                v = _vertex_line(vertices, v, start, to, i)
                v_bottom += i - 1 if i > 1 else 1
            v_bottom = v - 1 - i * 4

        for i in range(resolution - 1, 0, -1):
            progress = i / resolution
            to = _lerp(UP, FORWARD, progress)
            vertices[v] = to
            v += 1
            for d in DIRECTIONS:
                start, to = to, _lerp(UP, d, progress)
                t = _upper_strip(triangles, t, i, v, v_bottom)
                v = _vertex_line(vertices, v, start, to, i)
                v_bottom += i + 1
            v_bottom = v - 1 - i * 4

        for _ in range(4):
            triangles[t:t + 3] = (v_bottom, v, v_bottom + 1)
            t += 3
            v_bottom += 1
            vertices[v] = UP
            v += 1
    except (IndexError, ValueError) as exc:
        raise BufferSizeError(
            f"Octahedron generation overran its buffers at resolution {resolution}"
        ) from exc

    if v != len(vertices) or t != len(triangles):
        raise BufferSizeError(
            f"Octahedron wrote {v}/{len(vertices)} vertices and "
            f"{t}/{len(triangles)} indices at resolution {resolution}"
        )
    return vertices, triangles


# ═══════════════════════════════════════════════════════════════════
# Per-vertex passes
# ═══════════════════════════════════════════════════════════════════

def normalize_vertices(vertices: np.ndarray) -> np.ndarray:
    """Project every vertex onto the unit sphere (returns a new array)."""
    lengths = np.linalg.norm(vertices, axis=1, keepdims=True)
    return vertices / lengths


def spherical_uv(vertices: np.ndarray, *, fix_seam: bool = True) -> np.ndarray:
    """Longitude/latitude UVs of unit-sphere *vertices*.

    ``u = atan2(x, z) / -2π`` wrapped into ``[0, 1)`` and
    ``v = asin(y) / π + 0.5``.  With *fix_seam* the octahedron fix-ups
    run after the main pass:

    - wherever a vertex repeats the previous vertex's ``x`` (the end of
      a ring meeting the start of the next, on the +Z meridian), the
      previous vertex's ``u`` becomes ``1.0``;
    - the four copies of each pole get ``u`` = 0.125, 0.375, 0.625, 0.875.
    """
    x = vertices[:, 0]
    u = np.arctan2(x, vertices[:, 2]) / (-2.0 * math.pi)
    u = np.where(u < 0.0, u + 1.0, u)
    v = np.arcsin(np.clip(vertices[:, 1], -1.0, 1.0)) / math.pi + 0.5
    uv = np.column_stack([u, v])

    if fix_seam and len(vertices) >= 8:
        previous = np.concatenate([[1.0], x[:-1]])
        repeats = np.flatnonzero(np.abs(x - previous) < _SEAM_EPSILON)
        repeats = repeats[repeats > 0]
        uv[repeats - 1, 0] = 1.0

        n = len(vertices)
        for i, pole_u in enumerate(POLE_U):
            uv[i, 0] = pole_u
            uv[n - 4 + i, 0] = pole_u
    return uv


def octahedron_tangents(vertices: np.ndarray) -> np.ndarray:
    """Tangents pointing east along lines of latitude.

    Each vertex is flattened onto the XZ plane and re-normalized to
    ``(x, z)``; the tangent is ``(-z, 0, x, -1)``.  The pole copies,
    whose flattened direction is degenerate, get fixed diagonals.
    """
    flat_x = vertices[:, 0]
    flat_z = vertices[:, 2]
    length = np.hypot(flat_x, flat_z)
    safe = np.where(length > 0.0, length, 1.0)
    tangents = np.column_stack([
        np.where(length > 0.0, -flat_z / safe, 0.0),
        np.zeros(len(vertices)),
        np.where(length > 0.0, flat_x / safe, 0.0),
        np.full(len(vertices), -1.0),
    ])

    n = len(vertices)
    tangents[0:4, :3] = _POLE_TANGENTS
    tangents[n - 4:n, :3] = _POLE_TANGENTS
    return tangents
