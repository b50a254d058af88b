"""Rocky planet heights — continents, ocean floors and masked mountains.

Assembles noise primitives (:mod:`noise`) into the height function the
planet pipeline uses to displace a unit sphere.

Usage
-----
>>> from planetmesh.terrain import EARTHLIKE, rocky_planet_height
>>> h = rocky_planet_height((0.0, 0.0, 1.0), EARTHLIKE)

The composition per point ``p`` on the unit sphere::

    continent = smooth_max(fractal(continents), -ocean_floor_depth, ocean_floor_smoothing)
    continent *= 1 + ocean_depth_multiplier        # only when continent < 0
    ridge     = smoothed_ridged(mountains)
    mask      = smoothstep(0, mountain_blend, fractal(mask))
    height    = 1 + continent * 0.01 + ridge * 0.01 * mask
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from .noise import (
    FractalNoiseSettings,
    RidgeNoiseSettings,
    fractal_noise,
    smooth_max,
    smoothed_ridged_noise,
    smoothstep,
)

# Scale from noise units to fractions of the planet radius.
_CONTINENT_SCALE = 0.01
_MOUNTAIN_SCALE = 0.01


# ═══════════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class TerrainConfig:
    """All tuneable parameters of a rocky planet surface.

    Attributes
    ----------
    continents : FractalNoiseSettings
        Large-scale land/ocean shape.
    mountains : RidgeNoiseSettings
        Ridge field added on top of the continents.
    mask : FractalNoiseSettings
        Field deciding where mountains appear.
    ocean_floor_depth : float
        Continent values are smoothly floored at ``-ocean_floor_depth``.
    ocean_depth_multiplier : float
        Extra depth applied to negative (oceanic) continent values.
    ocean_floor_smoothing : float
        Smoothing factor of the ocean floor :func:`~noise.smooth_max`.
    mountain_blend : float
        Width of the mask ramp; 0 turns the mask into a hard step.
    """

    continents: FractalNoiseSettings = field(default_factory=FractalNoiseSettings)
    mountains: RidgeNoiseSettings = field(default_factory=RidgeNoiseSettings)
    mask: FractalNoiseSettings = field(default_factory=FractalNoiseSettings)
    ocean_floor_depth: float = 1.5
    ocean_depth_multiplier: float = 5.0
    ocean_floor_smoothing: float = 0.5
    mountain_blend: float = 1.2


# ═══════════════════════════════════════════════════════════════════
# Preset configs
# ═══════════════════════════════════════════════════════════════════

EARTHLIKE = TerrainConfig(
    continents=FractalNoiseSettings(
        num_layers=5, lacunarity=2.0, persistence=0.5, scale=1.2,
        amplitude_multiplier=1.0, vertical_shift=0.1, seed=1,
    ),
    mountains=RidgeNoiseSettings(
        num_layers=5, lacunarity=2.2, persistence=0.5, scale=1.6,
        amplitude_multiplier=1.5, power=2.5, gain=0.8, peak_smoothing=1.0, seed=2,
    ),
    mask=FractalNoiseSettings(
        num_layers=3, lacunarity=2.0, persistence=0.5, scale=0.8,
        amplitude_multiplier=1.0, vertical_shift=-0.2, seed=3,
    ),
)

ARCHIPELAGO = TerrainConfig(
    continents=FractalNoiseSettings(
        num_layers=6, lacunarity=2.3, persistence=0.55, scale=2.5,
        amplitude_multiplier=1.0, vertical_shift=-0.35, seed=11,
    ),
    mountains=RidgeNoiseSettings(
        num_layers=4, lacunarity=2.0, persistence=0.5, scale=3.0,
        amplitude_multiplier=0.8, power=2.0, gain=1.0, peak_smoothing=0.5, seed=12,
    ),
    mask=FractalNoiseSettings(
        num_layers=2, scale=1.5, vertical_shift=0.0, seed=13,
    ),
    ocean_depth_multiplier=2.0,
)

BARREN_MOON = TerrainConfig(
    continents=FractalNoiseSettings(
        num_layers=4, lacunarity=2.0, persistence=0.45, scale=1.0,
        amplitude_multiplier=0.4, vertical_shift=0.5, seed=21,
    ),
    mountains=RidgeNoiseSettings(
        num_layers=6, lacunarity=2.5, persistence=0.45, scale=2.0,
        amplitude_multiplier=2.0, power=3.0, gain=1.2, peak_smoothing=2.0, seed=22,
    ),
    mask=FractalNoiseSettings(num_layers=2, scale=0.6, vertical_shift=0.4, seed=23),
    ocean_depth_multiplier=0.0,
    mountain_blend=0.6,
)

FLAT = TerrainConfig(
    continents=FractalNoiseSettings(num_layers=0),
    mountains=RidgeNoiseSettings(num_layers=0),
    mask=FractalNoiseSettings(num_layers=0),
)


# ═══════════════════════════════════════════════════════════════════
# Height composition
# ═══════════════════════════════════════════════════════════════════

def continent_shape(pos: Sequence[float], config: TerrainConfig) -> float:
    """Continent height at *pos*, floored smoothly and deepened below 0."""
    shape = fractal_noise(pos, config.continents)
    shape = smooth_max(shape, -config.ocean_floor_depth, config.ocean_floor_smoothing)
    if shape < 0.0:
        shape *= 1.0 + config.ocean_depth_multiplier
    return shape


def mountain_mask(pos: Sequence[float], config: TerrainConfig) -> float:
    """Weight in ``[0, 1]`` of the mountain ridges at *pos*."""
    return smoothstep(0.0, config.mountain_blend, fractal_noise(pos, config.mask))


def rocky_planet_height(pos: Sequence[float], config: TerrainConfig) -> float:
    """Final height multiplier-offset at unit-sphere point *pos*.

    The displaced vertex is ``pos * (radius + height)``.  With every
    layer count at zero (and no vertical shifts) this is exactly ``1.0``.
    """
    continent = continent_shape(pos, config)
    ridge = smoothed_ridged_noise(pos, config.mountains)
    mask = mountain_mask(pos, config)
    return 1.0 + continent * _CONTINENT_SCALE + ridge * _MOUNTAIN_SCALE * mask


def displace(positions: np.ndarray, heights: np.ndarray, radius: float) -> np.ndarray:
    """Move unit-sphere *positions* out to ``radius + heights``."""
    return positions * (radius + heights)[:, None]
