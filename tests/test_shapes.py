"""Tests for shapes.py — grid UVs, point shapes and sample transforms."""

from __future__ import annotations

import numpy as np
import pytest

from planetmesh.shapes import (
    SHAPES,
    Plane,
    Shape,
    SpaceTRS,
    Sphere,
    Torus,
    index_to_4uv,
    sample_shape,
)


# ═══════════════════════════════════════════════════════════════════
# Grid UVs
# ═══════════════════════════════════════════════════════════════════


class TestIndexTo4UV:
    def test_first_group_of_two_by_two(self):
        u, v = index_to_4uv(0, 2, 0.5)
        assert np.allclose(u, [0.25, 0.75, 0.25, 0.75])
        assert np.allclose(v, [0.25, 0.25, 0.75, 0.75])

    def test_row_wraps(self):
        u, v = index_to_4uv(1, 3, 1.0 / 3.0)
        # flat indices 4..7 on a 3×3 grid
        assert np.allclose(u * 3, [1.5, 2.5, 0.5, 1.5])
        assert np.allclose(v * 3, [1.5, 1.5, 2.5, 2.5])

    def test_vectorised(self):
        u, v = index_to_4uv(np.arange(5), 4, 0.25)
        assert u.shape == v.shape == (5, 4)
        assert np.all((u > 0) & (u < 1) & (v > 0) & (v < 1))


# ═══════════════════════════════════════════════════════════════════
# Shapes
# ═══════════════════════════════════════════════════════════════════


@pytest.mark.parametrize("name", ["plane", "sphere", "torus"])
def test_registry(name):
    assert isinstance(SHAPES[name], Shape)


@pytest.mark.parametrize("name", sorted(SHAPES))
def test_point4_shapes(name):
    point = SHAPES[name].get_point4(np.arange(3), 4, 0.25)
    assert point.positions.shape == (3, 4, 3)
    assert point.normals.shape == (3, 4, 3)


class TestPlane:
    def test_flat_square(self):
        pos, normals = sample_shape(Plane(), 8)
        assert np.all(pos[:, 1] == 0.0)
        assert np.all(np.abs(pos[:, [0, 2]]) < 0.5)
        assert np.allclose(normals, [0.0, 1.0, 0.0])


class TestSphere:
    def test_radius(self):
        pos, normals = sample_shape(Sphere(), 10)
        assert np.allclose(np.linalg.norm(pos, axis=1), 0.5)
        assert np.allclose(normals, pos * 2.0)

    def test_covers_both_hemispheres(self):
        pos, _ = sample_shape(Sphere(), 10)
        assert pos[:, 2].min() < -0.4 and pos[:, 2].max() > 0.4


class TestTorus:
    def test_on_tube(self):
        torus = Torus()
        pos, normals = sample_shape(torus, 12)
        ring = np.hypot(pos[:, 0], pos[:, 2])
        tube = np.hypot(ring - torus.ring_radius, pos[:, 1])
        assert np.allclose(tube, torus.tube_radius)
        assert np.allclose(np.linalg.norm(normals, axis=1), 1.0)

    def test_normals_point_away_from_ring(self):
        torus = Torus(ring_radius=1.0, tube_radius=0.25)
        pos, normals = sample_shape(torus, 6)
        ring_dir = pos.copy()
        ring_dir[:, 1] = 0.0
        ring_dir /= np.linalg.norm(ring_dir, axis=1, keepdims=True)
        centre = ring_dir * torus.ring_radius
        assert np.allclose((pos - centre) / torus.tube_radius, normals)


# ═══════════════════════════════════════════════════════════════════
# Sampling and transforms
# ═══════════════════════════════════════════════════════════════════


class TestSampleShape:
    @pytest.mark.parametrize("resolution", [1, 2, 3, 7])
    def test_point_count(self, resolution):
        pos, normals = sample_shape(Plane(), resolution)
        assert pos.shape == normals.shape == (resolution * resolution, 3)

    def test_rejects_zero_resolution(self):
        with pytest.raises(ValueError):
            sample_shape(Plane(), 0)

    def test_translation(self):
        base, _ = sample_shape(Sphere(), 4)
        moved, _ = sample_shape(Sphere(), 4, SpaceTRS(translation=(1.0, 2.0, 3.0)))
        assert np.allclose(moved - base, [1.0, 2.0, 3.0])

    def test_rotation_keeps_sphere_normals_radial(self):
        trs = SpaceTRS(rotation=(30.0, 45.0, 60.0))
        pos, normals = sample_shape(Sphere(), 6, trs)
        assert np.allclose(normals, pos * 2.0)

    def test_nonuniform_scale_keeps_plane_normal(self):
        _, normals = sample_shape(Plane(), 4, SpaceTRS(scale=(2.0, 3.0, 4.0)))
        assert np.allclose(normals, [0.0, 1.0, 0.0])


class TestSpaceTRS:
    def test_identity(self):
        assert np.allclose(SpaceTRS().matrix, np.eye(4))

    def test_rotation_about_y(self):
        m = SpaceTRS(rotation=(0.0, 90.0, 0.0)).matrix
        assert np.allclose(m[:3, :3] @ [1.0, 0.0, 0.0], [0.0, 0.0, -1.0])

    def test_rotation_order(self):
        """Z is applied before X: Rz(90) then Rx(90) sends +X to +Z."""
        m = SpaceTRS(rotation=(90.0, 0.0, 90.0)).matrix
        assert np.allclose(m[:3, :3] @ [1.0, 0.0, 0.0], [0.0, 0.0, 1.0])

    def test_scale_then_translate(self):
        m = SpaceTRS(translation=(1.0, 0.0, 0.0), scale=(2.0, 2.0, 2.0)).matrix
        assert np.allclose(m @ [1.0, 1.0, 1.0, 1.0], [3.0, 2.0, 2.0, 1.0])
