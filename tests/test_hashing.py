"""Tests for hashing.py — SmallXXHash scalar and lane-wise variants."""

from __future__ import annotations

import numpy as np
import pytest

from planetmesh.hashing import (
    PRIME_E,
    SmallXXHash,
    SmallXXHash4,
    hash_eat,
    hash_finalize,
    hash_points,
    hash_seed,
)


# ═══════════════════════════════════════════════════════════════════
# Scalar hash
# ═══════════════════════════════════════════════════════════════════


class TestSmallXXHash:
    def test_seed_adds_prime_e(self):
        assert hash_seed(0).accumulator == PRIME_E
        assert hash_seed(5).accumulator == PRIME_E + 5

    def test_negative_seed_wraps(self):
        assert hash_seed(-1).accumulator == (PRIME_E - 1) & 0xFFFFFFFF

    def test_zero_state_avalanches_to_zero(self):
        assert SmallXXHash(0).finalize() == 0

    def test_finalize_is_u32(self):
        for seed in (-7, 0, 1, 2**31 - 1):
            value = hash_finalize(hash_eat(hash_seed(seed), 12345))
            assert 0 <= value <= 0xFFFFFFFF

    def test_deterministic(self):
        a = hash_finalize(hash_eat(hash_eat(hash_seed(42), 1), 2))
        b = hash_finalize(hash_eat(hash_eat(hash_seed(42), 1), 2))
        assert a == b

    def test_seed_changes_result(self):
        assert hash_finalize(hash_seed(1)) != hash_finalize(hash_seed(2))

    def test_eat_order_matters(self):
        ab = hash_finalize(hash_eat(hash_eat(hash_seed(3), 10), 20))
        ba = hash_finalize(hash_eat(hash_eat(hash_seed(3), 20), 10))
        assert ab != ba

    def test_equal_values_commute_trivially(self):
        a = hash_eat(hash_eat(hash_seed(3), 7), 7)
        b = hash_eat(hash_eat(hash_seed(3), 7), 7)
        assert a == b

    def test_states_are_immutable_values(self):
        base = hash_seed(9)
        base.eat(1)
        assert base == hash_seed(9)

    def test_int_conversion_finalizes(self):
        h = hash_seed(4).eat(8)
        assert int(h) == h.finalize()

    def test_byte_variant_differs_from_word(self):
        assert hash_seed(0).eat(5) != hash_seed(0).eat_byte(5)

    def test_hash_eat_bytes_uses_byte_variant(self):
        expected = hash_seed(1).eat_byte(0x01).eat_byte(0xFF)
        assert hash_eat(hash_seed(1), b"\x01\xff") == expected

    def test_eat_byte_masks_to_low_byte(self):
        assert hash_seed(1).eat_byte(0x1FF) == hash_seed(1).eat_byte(0xFF)


# ═══════════════════════════════════════════════════════════════════
# Lane-wise hash
# ═══════════════════════════════════════════════════════════════════


class TestSmallXXHash4:
    def test_lanes_match_scalar(self):
        seeds = [0, 1, -5, 123456]
        data = [7, -1, 2**31 - 1, 0]
        lanes = SmallXXHash4.seed(seeds).eat(data).eat(3).finalize()
        for i in range(4):
            scalar = hash_seed(seeds[i]).eat(data[i]).eat(3).finalize()
            assert int(lanes[i]) == scalar

    def test_byte_lanes_match_scalar(self):
        lanes = SmallXXHash4.seed(11).eat_byte([1, 2, 3, 255]).finalize()
        for i, b in enumerate([1, 2, 3, 255]):
            assert int(lanes[i]) == hash_seed(11).eat_byte(b).finalize()

    def test_seed_broadcasts(self):
        h = SmallXXHash4.seed(2, lanes=6)
        assert len(h) == 6
        assert np.all(h.accumulator == PRIME_E + 2)

    def test_accumulator_is_copy(self):
        h = SmallXXHash4.seed(0)
        acc = h.accumulator
        acc[:] = 0
        assert np.all(h.accumulator == PRIME_E)

    def test_dtype_uint32(self):
        assert SmallXXHash4.seed(0).eat(1).finalize().dtype == np.uint32

    def test_repr(self):
        assert "SmallXXHash4" in repr(SmallXXHash4.seed(0))


# ═══════════════════════════════════════════════════════════════════
# Point hashing
# ═══════════════════════════════════════════════════════════════════


class TestHashPoints:
    def test_matches_scalar_cells(self):
        pts = np.array([[0.5, 1.5, -0.5], [2.2, -3.7, 9.9]])
        out = hash_points(pts, seed=4)
        for p, value in zip(pts, out):
            u, v, w = (int(np.floor(c)) for c in p)
            assert int(value) == hash_seed(4).eat(u).eat(v).eat(w).finalize()

    def test_same_cell_same_hash(self):
        out = hash_points([[0.1, 0.1, 0.1], [0.9, 0.2, 0.7]], seed=1)
        assert out[0] == out[1]

    def test_domain_scales_points(self):
        pts = np.array([[0.25, 0.25, 0.25]])
        domain = np.diag([8.0, 8.0, 8.0, 1.0])
        scaled = hash_points(pts, seed=0, domain=domain)
        assert scaled[0] == hash_points([[2.0, 2.0, 2.0]], seed=0)[0]

    def test_empty_input(self):
        assert hash_points(np.zeros((0, 3)), seed=0).shape == (0,)

    @pytest.mark.parametrize("seed", [0, 1, 99])
    def test_deterministic(self, seed):
        pts = np.random.default_rng(0).uniform(-5, 5, size=(20, 3))
        assert np.array_equal(hash_points(pts, seed), hash_points(pts, seed))
