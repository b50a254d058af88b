"""Mesh diagnostics — closure, manifoldness and radius checks.

Octahedron spheres duplicate their pole and seam vertices on purpose,
so topology checks first *weld* vertices that share a position and
then count how often every undirected edge is used.  A closed 2-manifold
uses every edge exactly twice.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .models import MeshData

Edge = Tuple[int, int]


def weld_indices(positions: np.ndarray, decimals: int = 9) -> np.ndarray:
    """Map every vertex to a representative of its (rounded) position.

    Returns an ``int64`` array ``remap`` with ``remap[i] == remap[j]``
    exactly when vertices *i* and *j* coincide to *decimals* places.
    """
    if len(positions) == 0:
        return np.zeros(0, dtype=np.int64)
    # adding 0.0 folds -0.0 into 0.0
    rounded = np.round(np.asarray(positions, dtype=np.float64), decimals) + 0.0
    _, inverse = np.unique(rounded, axis=0, return_inverse=True)
    return inverse.reshape(-1).astype(np.int64)


def edge_use_counts(triangles: np.ndarray, remap: Optional[np.ndarray] = None) -> Dict[Edge, int]:
    """Count the triangles touching every undirected edge.

    Parameters
    ----------
    triangles : ndarray, shape (M, 3)
    remap : ndarray, optional
        Vertex remapping (see :func:`weld_indices`) applied first.
    """
    tri = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if remap is not None:
        tri = remap[tri]
    edges = np.concatenate([tri[:, [0, 1]], tri[:, [1, 2]], tri[:, [2, 0]]])
    edges.sort(axis=1)
    return Counter(map(tuple, edges.tolist()))


def degenerate_triangle_count(triangles: np.ndarray, remap: Optional[np.ndarray] = None) -> int:
    """Triangles with a repeated vertex (after optional remapping)."""
    tri = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if remap is not None:
        tri = remap[tri]
    repeated = (tri[:, 0] == tri[:, 1]) | (tri[:, 1] == tri[:, 2]) | (tri[:, 0] == tri[:, 2])
    return int(repeated.sum())


def is_closed_manifold(mesh: MeshData, weld: bool = True) -> bool:
    """True if every edge of *mesh* is shared by exactly two triangles."""
    remap = weld_indices(mesh.positions) if weld else None
    triangles = mesh.triangles
    if len(triangles) == 0 or degenerate_triangle_count(triangles, remap):
        return False
    return all(count == 2 for count in edge_use_counts(triangles, remap).values())


def has_consistent_winding(mesh: MeshData, weld: bool = True) -> bool:
    """True if no directed edge appears twice, i.e. neighbours agree on orientation."""
    remap = weld_indices(mesh.positions) if weld else None
    tri = mesh.triangles if remap is None else remap[mesh.triangles]
    directed = np.concatenate([tri[:, [0, 1]], tri[:, [1, 2]], tri[:, [2, 0]]])
    return len(np.unique(directed, axis=0)) == len(directed)


def max_radius_error(mesh: MeshData, radius: float) -> float:
    """Largest ``| |p| - radius |`` over all vertex positions."""
    lengths = np.linalg.norm(mesh.positions, axis=1)
    return float(np.max(np.abs(lengths - radius))) if len(lengths) else 0.0


def signed_volume(mesh: MeshData) -> float:
    """Volume enclosed by the triangles, signed by their winding."""
    p = mesh.positions
    tri = mesh.triangles
    a, b, c = p[tri[:, 0]], p[tri[:, 1]], p[tri[:, 2]]
    return float(np.einsum("ij,ij->i", a, np.cross(b, c)).sum() / 6.0)


def mesh_report(mesh: MeshData) -> Dict[str, Any]:
    """Summary dict of the topology and extent of *mesh*."""
    remap = weld_indices(mesh.positions)
    counts = edge_use_counts(mesh.triangles, remap)
    welded = int(remap.max()) + 1 if len(remap) else 0
    lengths = np.linalg.norm(mesh.positions, axis=1)

    return {
        "name": mesh.name,
        "vertex_count": mesh.vertex_count,
        "welded_vertex_count": welded,
        "triangle_count": mesh.triangle_count,
        "submesh_index_counts": [len(s) for s in mesh.submeshes],
        "edge_count": len(counts),
        "euler_characteristic": welded - len(counts) + mesh.triangle_count,
        "closed_manifold": is_closed_manifold(mesh),
        "consistent_winding": has_consistent_winding(mesh),
        "min_radius": float(lengths.min()) if len(lengths) else 0.0,
        "max_radius": float(lengths.max()) if len(lengths) else 0.0,
        "signed_volume": signed_volume(mesh),
        "collider_count": len(mesh.colliders),
    }
