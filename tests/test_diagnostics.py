"""Tests for diagnostics.py — welding, edge counts and mesh reports."""

from __future__ import annotations

import numpy as np
import pytest

from planetmesh.diagnostics import (
    degenerate_triangle_count,
    edge_use_counts,
    has_consistent_winding,
    is_closed_manifold,
    max_radius_error,
    mesh_report,
    signed_volume,
    weld_indices,
)
from planetmesh.generators import (
    generate_cube_sphere,
    generate_octahedron_sphere,
    generate_rounded_box,
)
from planetmesh.models import MeshData


def _tetrahedron(flip: bool = False) -> MeshData:
    positions = np.array(
        [[1.0, 1.0, 1.0], [1.0, -1.0, -1.0], [-1.0, 1.0, -1.0], [-1.0, -1.0, 1.0]]
    )
    tri = np.array([0, 1, 2, 0, 3, 1, 0, 2, 3, 1, 3, 2])
    if flip:
        tri = tri.reshape(-1, 3)[:, ::-1].reshape(-1).copy()
    return MeshData(
        name="tet",
        positions=positions,
        normals=positions / np.sqrt(3.0),
        uvs=np.zeros((4, 2)),
        submeshes=(tri,),
    )


# ═══════════════════════════════════════════════════════════════════
# Welding and edges
# ═══════════════════════════════════════════════════════════════════


class TestWeld:
    def test_merges_duplicates(self):
        pts = np.array([[0.0, 0.0, 1.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0 + 1e-12]])
        remap = weld_indices(pts)
        assert remap[0] == remap[2]
        assert remap[0] != remap[1]

    def test_negative_zero(self):
        remap = weld_indices(np.array([[0.0, -0.0, 1.0], [0.0, 0.0, 1.0]]))
        assert remap[0] == remap[1]

    def test_empty(self):
        assert len(weld_indices(np.zeros((0, 3)))) == 0

    def test_octahedron_welds_to_six(self):
        mesh = generate_octahedron_sphere(0)
        assert len(set(weld_indices(mesh.positions).tolist())) == 6


def test_edge_use_counts():
    counts = edge_use_counts(np.array([[0, 1, 2], [2, 1, 3]]))
    assert counts[(1, 2)] == 2
    assert counts[(0, 1)] == 1
    assert len(counts) == 5


def test_degenerate_count():
    tri = np.array([[0, 1, 2], [3, 4, 5]])
    assert degenerate_triangle_count(tri) == 0
    assert degenerate_triangle_count(tri, remap=np.array([0, 1, 2, 0, 0, 1])) == 1


# ═══════════════════════════════════════════════════════════════════
# Closure and orientation
# ═══════════════════════════════════════════════════════════════════


class TestClosure:
    def test_tetrahedron(self):
        tet = _tetrahedron()
        assert is_closed_manifold(tet)
        assert has_consistent_winding(tet)
        assert signed_volume(tet) == pytest.approx(8.0 / 3.0)

    def test_flipped_tetrahedron(self):
        tet = _tetrahedron(flip=True)
        assert is_closed_manifold(tet)
        assert signed_volume(tet) == pytest.approx(-8.0 / 3.0)

    def test_open_mesh(self):
        tet = _tetrahedron()
        open_mesh = MeshData(
            name="open",
            positions=tet.positions,
            normals=tet.normals,
            uvs=tet.uvs,
            submeshes=(tet.indices[:9],),
        )
        assert not is_closed_manifold(open_mesh)

    def test_inconsistent_winding(self):
        tet = _tetrahedron()
        tri = tet.indices.copy()
        tri[0:3] = tri[0:3][::-1]
        mixed = MeshData(
            name="mixed",
            positions=tet.positions,
            normals=tet.normals,
            uvs=tet.uvs,
            submeshes=(tri,),
        )
        assert not has_consistent_winding(mixed)

    def test_octahedron_needs_weld(self):
        mesh = generate_octahedron_sphere(2)
        assert is_closed_manifold(mesh)
        assert not is_closed_manifold(mesh, weld=False)

    def test_radius_error(self):
        mesh = generate_octahedron_sphere(1, 2.0)
        assert max_radius_error(mesh, 2.0) < 1e-12
        assert max_radius_error(mesh, 1.0) == pytest.approx(1.0)


# ═══════════════════════════════════════════════════════════════════
# Reports
# ═══════════════════════════════════════════════════════════════════


class TestMeshReport:
    @pytest.mark.parametrize(
        "mesh",
        [
            generate_octahedron_sphere(3),
            generate_cube_sphere(3),
            generate_rounded_box(4, 4, 4, 1),
        ],
        ids=["octahedron", "cube-sphere", "rounded-box"],
    )
    def test_sphere_topology(self, mesh):
        report = mesh_report(mesh)
        assert report["closed_manifold"]
        assert report["consistent_winding"]
        assert report["euler_characteristic"] == 2
        assert report["signed_volume"] > 0.0

    def test_keys_and_counts(self):
        mesh = generate_cube_sphere(2, 1.5)
        report = mesh_report(mesh)
        assert report["name"] == "Procedural Sphere"
        assert report["vertex_count"] == 26
        assert report["welded_vertex_count"] == 26
        assert report["triangle_count"] == 48
        assert report["submesh_index_counts"] == [48, 48, 48]
        assert report["collider_count"] == 1
        assert report["min_radius"] == pytest.approx(1.5)
        assert report["max_radius"] == pytest.approx(1.5)

    def test_octahedron_welded_count(self):
        report = mesh_report(generate_octahedron_sphere(1))
        assert report["vertex_count"] == 27
        assert report["welded_vertex_count"] == 18
