"""Tests for terrain.py — rocky planet height composition."""

from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from planetmesh.noise import FractalNoiseSettings, RidgeNoiseSettings
from planetmesh.terrain import (
    ARCHIPELAGO,
    BARREN_MOON,
    EARTHLIKE,
    FLAT,
    TerrainConfig,
    continent_shape,
    displace,
    mountain_mask,
    rocky_planet_height,
)

POINTS = [(0.0, 0.0, 1.0), (0.0, 1.0, 0.0), (0.6, 0.0, -0.8), (-0.48, 0.6, 0.64)]


# ═══════════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════════


class TestTerrainConfig:
    def test_defaults(self):
        cfg = TerrainConfig()
        assert cfg.ocean_floor_depth == 1.5
        assert cfg.ocean_depth_multiplier == 5.0
        assert cfg.ocean_floor_smoothing == 0.5
        assert cfg.mountain_blend == 1.2

    def test_frozen(self):
        with pytest.raises(Exception):
            EARTHLIKE.mountain_blend = 3.0

    @pytest.mark.parametrize("preset", [EARTHLIKE, ARCHIPELAGO, BARREN_MOON, FLAT])
    def test_presets_are_configs(self, preset):
        assert isinstance(preset, TerrainConfig)

    def test_flat_has_no_layers(self):
        assert FLAT.continents.num_layers == 0
        assert FLAT.mountains.num_layers == 0
        assert FLAT.mask.num_layers == 0


# ═══════════════════════════════════════════════════════════════════
# Height composition
# ═══════════════════════════════════════════════════════════════════


class TestHeights:
    def test_flat_height_is_one(self):
        assert all(rocky_planet_height(p, FLAT) == 1.0 for p in POINTS)

    def test_ocean_is_deepened(self):
        cfg = TerrainConfig(
            continents=FractalNoiseSettings(num_layers=0, vertical_shift=-0.2),
            ocean_floor_smoothing=0.0,
        )
        assert continent_shape(POINTS[0], cfg) == pytest.approx(-0.2 * 6.0)

    def test_ocean_floor_clamps(self):
        cfg = TerrainConfig(
            continents=FractalNoiseSettings(num_layers=0, vertical_shift=-10.0),
            ocean_floor_smoothing=0.0,
            ocean_depth_multiplier=0.0,
        )
        assert continent_shape(POINTS[0], cfg) == -1.5

    def test_land_not_deepened(self):
        cfg = TerrainConfig(continents=FractalNoiseSettings(num_layers=0, vertical_shift=2.0))
        assert continent_shape(POINTS[0], cfg) == pytest.approx(2.0)

    def test_mask_step_when_blend_zero(self):
        on = TerrainConfig(mask=FractalNoiseSettings(num_layers=0, vertical_shift=0.1), mountain_blend=0.0)
        off = TerrainConfig(mask=FractalNoiseSettings(num_layers=0, vertical_shift=-0.1), mountain_blend=0.0)
        assert mountain_mask(POINTS[0], on) == 1.0
        assert mountain_mask(POINTS[0], off) == 0.0

    def test_mask_ramp_starts_at_zero(self):
        below = TerrainConfig(mask=FractalNoiseSettings(num_layers=0, vertical_shift=-0.3), mountain_blend=1.2)
        middle = TerrainConfig(mask=FractalNoiseSettings(num_layers=0, vertical_shift=0.6), mountain_blend=1.2)
        above = TerrainConfig(mask=FractalNoiseSettings(num_layers=0, vertical_shift=1.5), mountain_blend=1.2)
        assert mountain_mask(POINTS[0], below) == 0.0
        assert mountain_mask(POINTS[0], middle) == pytest.approx(0.5)
        assert mountain_mask(POINTS[0], above) == 1.0

    def test_mountains_only_where_masked(self):
        no_mask = replace(
            FLAT,
            mountains=RidgeNoiseSettings(num_layers=3, seed=4),
            mask=FractalNoiseSettings(num_layers=0, vertical_shift=-1.0),
        )
        assert all(rocky_planet_height(p, no_mask) == 1.0 for p in POINTS)

    def test_full_mask_adds_ridges(self):
        cfg = replace(
            FLAT,
            mountains=RidgeNoiseSettings(num_layers=0, vertical_shift=0.5),
            mask=FractalNoiseSettings(num_layers=0, vertical_shift=5.0),
        )
        assert rocky_planet_height(POINTS[1], cfg) == pytest.approx(1.0 + 0.5 * 0.01)

    def test_earthlike_varies(self):
        heights = {round(rocky_planet_height(p, EARTHLIKE), 9) for p in POINTS}
        assert len(heights) > 1

    def test_deterministic(self):
        assert rocky_planet_height(POINTS[3], EARTHLIKE) == rocky_planet_height(POINTS[3], EARTHLIKE)


def test_displace():
    unit = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, -1.0]])
    out = displace(unit, np.array([1.0, 1.5]), radius=2.0)
    assert np.allclose(out, [[3.0, 0.0, 0.0], [0.0, 0.0, -3.5]])
    assert np.array_equal(unit, [[1.0, 0.0, 0.0], [0.0, 0.0, -1.0]])
