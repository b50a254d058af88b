"""Layered noise primitives for planet terrain.

Every function in this module takes a 3-D point and an immutable
settings bundle and returns a ``float``.  There is **no** dependency on
meshes or pipelines — these are pure-math building blocks that
:mod:`terrain` composes into planet heights.

Functions
---------
- :func:`fractal_noise` — multi-octave simplex noise
- :func:`ridged_noise` — folded noise with gain feedback, forms sharp crests
- :func:`smoothed_ridged_noise` — ridged noise averaged over 5 nearby samples
- :func:`smooth_max` — differentiable maximum
- :func:`smoothstep` — Hermite ramp between two edges
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Sequence, Tuple

import numpy as np
from opensimplex import OpenSimplex

from .hashing import hash_finalize, hash_seed

Vec3 = Tuple[float, float, float]

_UP = np.array([0.0, 1.0, 0.0])


# ═══════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FractalNoiseSettings:
    """Parameters of one fractal noise family.

    Attributes
    ----------
    num_layers : int
        Number of octaves summed.
    lacunarity : float
        Frequency multiplier between octaves.
    persistence : float
        Amplitude multiplier between octaves.
    scale : float
        Frequency of the first octave.
    amplitude_multiplier : float
        Multiplier applied to the octave sum.
    vertical_shift : float
        Constant added after the multiplier.
    offset : tuple of float
        Added to the sample point of every octave.
    seed : int
        Seed of the simplex source (mixed through :mod:`hashing`).
    time : float, optional
        When set, octaves sample 4-D noise with *time* as the fourth
        coordinate.
    """

    num_layers: int = 4
    lacunarity: float = 2.0
    persistence: float = 0.5
    scale: float = 1.0
    amplitude_multiplier: float = 1.0
    vertical_shift: float = 0.0
    offset: Vec3 = (0.0, 0.0, 0.0)
    seed: int = 0
    time: Optional[float] = None


@dataclass(frozen=True)
class RidgeNoiseSettings:
    """Parameters of a ridged noise family.

    Same octave progression as :class:`FractalNoiseSettings`, plus
    *power* (crest sharpness), *gain* (octave feedback) and
    *peak_smoothing* (sample spread of :func:`smoothed_ridged_noise`,
    in hundredths of a unit).
    """

    num_layers: int = 5
    lacunarity: float = 2.0
    persistence: float = 0.5
    scale: float = 1.0
    amplitude_multiplier: float = 1.0
    vertical_shift: float = 0.0
    offset: Vec3 = (0.0, 0.0, 0.0)
    seed: int = 0
    time: Optional[float] = None
    power: float = 2.0
    gain: float = 1.0
    peak_smoothing: float = 0.0


# ═══════════════════════════════════════════════════════════════════
# Base noise source
# ═══════════════════════════════════════════════════════════════════

@lru_cache(maxsize=32)
def _noise_source(seed: int) -> OpenSimplex:
    """Simplex generator for *seed*; instances are read-only once built."""
    return OpenSimplex(seed=hash_finalize(hash_seed(seed)))


def _sample(source: OpenSimplex, x: float, y: float, z: float, time: Optional[float]) -> float:
    if time is None:
        return source.noise3(x, y, z)
    return source.noise4(x, y, z, time)


# ═══════════════════════════════════════════════════════════════════
# Fractal noise
# ═══════════════════════════════════════════════════════════════════

def fractal_noise(pos: Sequence[float], settings: FractalNoiseSettings) -> float:
    """Sum ``num_layers`` octaves of simplex noise at *pos*.

    Each octave is sampled at ``pos * frequency + offset``; frequency
    starts at ``scale`` and grows by ``lacunarity``, amplitude starts at
    1 and shrinks by ``persistence``.

    Returns
    -------
    float
        ``sum * amplitude_multiplier + vertical_shift``.  With zero
        layers this is exactly ``vertical_shift``.
    """
    source = _noise_source(settings.seed)
    ox, oy, oz = settings.offset
    x, y, z = (float(c) for c in pos)
    noise_sum = 0.0
    amplitude = 1.0
    frequency = settings.scale

    for _ in range(settings.num_layers):
        value = _sample(
            source, x * frequency + ox, y * frequency + oy, z * frequency + oz, settings.time
        )
        noise_sum += value * amplitude
        amplitude *= settings.persistence
        frequency *= settings.lacunarity

    return noise_sum * settings.amplitude_multiplier + settings.vertical_shift


# ═══════════════════════════════════════════════════════════════════
# Ridged noise
# ═══════════════════════════════════════════════════════════════════

def ridged_noise(pos: Sequence[float], settings: RidgeNoiseSettings) -> float:
    """Ridged multifractal noise — sharp crests at zero-crossings.

    Each octave contributes ``(1 - |noise|) ** power`` weighted by a
    running ridge weight; the weight for the next octave is the current
    contribution times ``gain``, clamped to ``[0, 1]``, so detail
    concentrates on the crests.
    """
    source = _noise_source(settings.seed)
    ox, oy, oz = settings.offset
    x, y, z = (float(c) for c in pos)
    noise_sum = 0.0
    amplitude = 1.0
    frequency = settings.scale
    ridge_weight = 1.0

    for _ in range(settings.num_layers):
        value = _sample(
            source, x * frequency + ox, y * frequency + oy, z * frequency + oz, settings.time
        )
        value = abs(1.0 - abs(value)) ** settings.power
        value *= ridge_weight
        ridge_weight = max(0.0, min(1.0, value * settings.gain))

        noise_sum += value * amplitude
        amplitude *= settings.persistence
        frequency *= settings.lacunarity

    return noise_sum * settings.amplitude_multiplier + settings.vertical_shift


def smoothed_ridged_noise(pos: Sequence[float], settings: RidgeNoiseSettings) -> float:
    """Average :func:`ridged_noise` at *pos* and four nearby points.

    The extra points lie ``peak_smoothing * 0.01`` away along two axes
    tangent to the sphere through *pos* (built from cross products with
    the world up vector).  With ``peak_smoothing == 0`` a single sample
    is returned.
    """
    if settings.peak_smoothing == 0:
        return ridged_noise(pos, settings)

    p = np.asarray(pos, dtype=np.float64)
    length = np.linalg.norm(p)
    normal = p / length if length > 0.0 else p
    axis_a = np.cross(normal, _UP)
    axis_b = np.cross(normal, axis_a)
    dst = settings.peak_smoothing * 0.01

    samples = (
        ridged_noise(p, settings),
        ridged_noise(p - axis_a * dst, settings),
        ridged_noise(p + axis_a * dst, settings),
        ridged_noise(p - axis_b * dst, settings),
        ridged_noise(p + axis_b * dst, settings),
    )
    return sum(samples) / 5.0


# ═══════════════════════════════════════════════════════════════════
# Blending helpers
# ═══════════════════════════════════════════════════════════════════

def smooth_max(a: float, b: float, k: float) -> float:
    """Smooth maximum of *a* and *b* with smoothing factor *k*.

    ``k <= 0`` is exactly ``max(a, b)``.
    """
    k = min(0.0, -k)
    if k == 0.0:
        return max(a, b)
    h = max(0.0, min(1.0, (b - a + k) / (2.0 * k)))
    return a * h + b * (1.0 - h) - k * h * (1.0 - h)


def smoothstep(edge0: float, edge1: float, x: float) -> float:
    """Hermite interpolation of *x* between *edge0* and *edge1*.

    Coincident edges act as a step at *edge0*.
    """
    if edge1 == edge0:
        return 0.0 if x < edge0 else 1.0
    t = max(0.0, min(1.0, (x - edge0) / (edge1 - edge0)))
    return t * t * (3.0 - 2.0 * t)
