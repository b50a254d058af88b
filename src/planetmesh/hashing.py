"""Small xxHash-style 32-bit hash — deterministic seeding for noise fields.

The hash state is a single unsigned 32-bit accumulator.  Every
operation is a pure function: eating a value returns a *new* state and
finalising applies the xxHash32 avalanche to produce the output.

Functions
---------
- :func:`hash_seed` — start a hash from a signed 32-bit seed
- :func:`hash_eat` — mix an int (or the bytes of a ``bytes`` value)
- :func:`hash_finalize` — avalanche a state into a ``u32``
- :func:`hash_points` — lane-wise hash of floored 3-D sample points

:class:`SmallXXHash4` performs the same arithmetic on ``numpy`` lanes;
each lane's result equals the scalar result for the same inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

import numpy as np

_MASK = 0xFFFFFFFF

PRIME_A = 0x9E3779B1
PRIME_B = 0x85EBCA77
PRIME_C = 0xC2B2AE3D
PRIME_D = 0x27D4EB2F
PRIME_E = 0x165667B1


# ═══════════════════════════════════════════════════════════════════
# Scalar hash
# ═══════════════════════════════════════════════════════════════════

def _rotate_left(data: int, steps: int) -> int:
    return ((data << steps) | (data >> (32 - steps))) & _MASK


def _avalanche(accumulator: int) -> int:
    avalanche = accumulator
    avalanche ^= avalanche >> 15
    avalanche = (avalanche * PRIME_B) & _MASK
    avalanche ^= avalanche >> 13
    avalanche = (avalanche * PRIME_C) & _MASK
    avalanche ^= avalanche >> 16
    return avalanche


@dataclass(frozen=True)
class SmallXXHash:
    """Value-typed hash state.

    >>> h = SmallXXHash.seed(7).eat(1).eat(2)
    >>> int(h) == int(SmallXXHash.seed(7).eat(1).eat(2))
    True
    """

    accumulator: int = 0

    @classmethod
    def seed(cls, seed: int) -> "SmallXXHash":
        return cls((seed + PRIME_E) & _MASK)

    def eat(self, data: int) -> "SmallXXHash":
        """Mix a 32-bit integer (negative values wrap as two's complement)."""
        mixed = (self.accumulator + (data & _MASK) * PRIME_C) & _MASK
        return SmallXXHash((_rotate_left(mixed, 17) * PRIME_D) & _MASK)

    def eat_byte(self, data: int) -> "SmallXXHash":
        """Mix a single byte."""
        mixed = (self.accumulator + (data & 0xFF) * PRIME_E) & _MASK
        return SmallXXHash((_rotate_left(mixed, 11) * PRIME_A) & _MASK)

    def finalize(self) -> int:
        return _avalanche(self.accumulator)

    def __int__(self) -> int:
        return self.finalize()


def hash_seed(seed: int) -> SmallXXHash:
    """Start a hash state from *seed*."""
    return SmallXXHash.seed(seed)


def hash_eat(state: SmallXXHash, value: Union[int, bytes, bytearray]) -> SmallXXHash:
    """Return *state* with *value* mixed in.

    An ``int`` is eaten as a 32-bit word; ``bytes``/``bytearray`` values
    are eaten one byte at a time with the byte variant.
    """
    if isinstance(value, (bytes, bytearray)):
        for b in value:
            state = state.eat_byte(b)
        return state
    return state.eat(int(value))


def hash_finalize(state: SmallXXHash) -> int:
    """Avalanche *state* into an unsigned 32-bit result."""
    return state.finalize()


# ═══════════════════════════════════════════════════════════════════
# Lane-wise hash
# ═══════════════════════════════════════════════════════════════════

_U32_A = np.uint32(PRIME_A)
_U32_B = np.uint32(PRIME_B)
_U32_C = np.uint32(PRIME_C)
_U32_D = np.uint32(PRIME_D)
_U32_E = np.uint32(PRIME_E)


def _as_lanes(data) -> np.ndarray:
    """Wrap integers to unsigned 32-bit lanes."""
    return (np.asarray(data, dtype=np.int64) & _MASK).astype(np.uint32)


def _rotate_left4(data: np.ndarray, steps: int) -> np.ndarray:
    return (data << np.uint32(steps)) | (data >> np.uint32(32 - steps))


class SmallXXHash4:
    """Four-wide (or any width) variant of :class:`SmallXXHash`.

    The accumulator is a ``uint32`` array; ``numpy`` wraps products
    modulo 2**32 so the lane arithmetic matches the scalar masks.
    """

    __slots__ = ("_accumulator",)

    def __init__(self, accumulator) -> None:
        self._accumulator = np.array(accumulator, dtype=np.uint32)

    @classmethod
    def seed(cls, seed, lanes: int = 4) -> "SmallXXHash4":
        seeds = np.broadcast_to(np.asarray(seed, dtype=np.int64), (lanes,))
        return cls(_as_lanes(seeds) + _U32_E)

    @property
    def accumulator(self) -> np.ndarray:
        return self._accumulator.copy()

    def eat(self, data) -> "SmallXXHash4":
        mixed = self._accumulator + _as_lanes(data) * _U32_C
        return SmallXXHash4(_rotate_left4(mixed, 17) * _U32_D)

    def eat_byte(self, data) -> "SmallXXHash4":
        lanes = (np.asarray(data, dtype=np.int64) & 0xFF).astype(np.uint32)
        mixed = self._accumulator + lanes * _U32_E
        return SmallXXHash4(_rotate_left4(mixed, 11) * _U32_A)

    def finalize(self) -> np.ndarray:
        avalanche = self._accumulator.copy()
        avalanche ^= avalanche >> np.uint32(15)
        avalanche *= _U32_B
        avalanche ^= avalanche >> np.uint32(13)
        avalanche *= _U32_C
        avalanche ^= avalanche >> np.uint32(16)
        return avalanche

    def __len__(self) -> int:
        return len(self._accumulator)

    def __repr__(self) -> str:
        return f"SmallXXHash4({self._accumulator.tolist()})"


def hash_points(
    positions: Iterable,
    seed: int,
    domain: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Hash the integer lattice cell of every point.

    Parameters
    ----------
    positions : array-like, shape (N, 3)
        Sample points (for instance from :func:`shapes.sample_shape`).
    seed : int
        Hash seed shared by all lanes.
    domain : ndarray, shape (4, 4), optional
        Affine transform applied to the points before flooring (see
        :class:`shapes.SpaceTRS`).

    Returns
    -------
    ndarray of uint32, shape (N,)
    """
    pts = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    if domain is not None:
        m = np.asarray(domain, dtype=np.float64)
        pts = pts @ m[:3, :3].T + m[:3, 3]
    cells = np.floor(pts).astype(np.int64)
    h = SmallXXHash4.seed(seed, lanes=len(cells))
    return h.eat(cells[:, 0]).eat(cells[:, 1]).eat(cells[:, 2]).finalize()
