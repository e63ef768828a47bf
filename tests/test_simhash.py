"""
Tests for the SimHash primitives: hyperplanes, signatures and bucket keys.
"""

import numpy as np
import pytest

from cosinelsh import DimensionMismatchError, SignatureError
from cosinelsh.vector.simhash import (
    MAX_KEY_BITS,
    derive_keys,
    generate_hyperplanes,
    signature,
)


class TestGenerateHyperplanes:
    """Test hyperplane generation."""

    def test_shape(self):
        """Test that count hyperplanes of width dim are produced."""
        hyperplanes = generate_hyperplanes(2, 10)
        assert hyperplanes.shape == (2, 10)

    def test_seeded_generator_is_reproducible(self):
        """Test that identically seeded generators give identical hyperplanes."""
        a = generate_hyperplanes(20, 16, np.random.default_rng(3))
        b = generate_hyperplanes(20, 16, np.random.default_rng(3))
        np.testing.assert_array_equal(a, b)

    def test_components_are_standard_normal(self):
        """Test that components look like draws from N(0, 1)."""
        hyperplanes = generate_hyperplanes(200, 500, np.random.default_rng(0))
        assert abs(hyperplanes.mean()) < 0.02
        assert abs(hyperplanes.std() - 1.0) < 0.02


class TestSignature:
    """Test sign signatures."""

    def test_bits_follow_projection_sign(self):
        """Test that bit i is the sign of the dot product with hyperplane i."""
        hyperplanes = np.array([[1.0, 0.0], [0.0, 1.0], [-1.0, -1.0]])
        sig = signature(hyperplanes, np.array([2.0, -3.0]))
        assert sig.tolist() == [1, 0, 1]
        assert sig.dtype == np.uint8

    def test_zero_projection_is_one(self):
        """Test that a dot product of exactly zero maps to bit 1."""
        hyperplanes = generate_hyperplanes(16, 8, np.random.default_rng(1))
        sig = signature(hyperplanes, np.zeros(8))
        assert sig.tolist() == [1] * 16

    def test_length_matches_hyperplane_count(self):
        """Test that the signature has one bit per hyperplane."""
        hyperplanes = generate_hyperplanes(30, 12, np.random.default_rng(2))
        sig = signature(hyperplanes, np.ones(12))
        assert sig.shape == (30,)

    def test_dimension_mismatch(self):
        """Test that a vector of the wrong length is rejected."""
        hyperplanes = generate_hyperplanes(4, 8)
        with pytest.raises(DimensionMismatchError) as exc_info:
            signature(hyperplanes, np.ones(7))
        assert exc_info.value.expected == 8
        assert exc_info.value.actual == 7

    def test_non_1d_vector(self):
        """Test that a 2D vector is rejected."""
        hyperplanes = generate_hyperplanes(4, 8)
        with pytest.raises(DimensionMismatchError):
            signature(hyperplanes, np.ones((2, 4)))


class TestDeriveKeys:
    """Test slicing signatures into bucket keys."""

    def test_big_endian_packing(self):
        """Test that each group is packed most significant bit first."""
        keys = derive_keys([1, 0, 1, 1, 0, 0, 0, 1], n_tables=2, hash_size=4)
        assert keys == [0b1011, 0b0001]

    def test_single_bit_tables(self):
        """Test one bit per table."""
        assert derive_keys([0, 1, 1], n_tables=3, hash_size=1) == [0, 1, 1]

    def test_full_width_key(self):
        """Test that a 64-bit group packs into the full unsigned range."""
        keys = derive_keys(np.ones(MAX_KEY_BITS, dtype=np.uint8), 1, MAX_KEY_BITS)
        assert keys == [2**64 - 1]

        sig = np.zeros(MAX_KEY_BITS, dtype=np.uint8)
        sig[0] = 1
        assert derive_keys(sig, 1, MAX_KEY_BITS) == [2**63]

    def test_keys_are_python_ints(self):
        """Test that keys are plain ints, usable as dict keys."""
        keys = derive_keys(np.array([1, 1, 0, 0], dtype=np.uint8), 2, 2)
        assert all(type(key) is int for key in keys)

    def test_extra_bits_are_ignored(self):
        """Test that only the first n_tables * hash_size bits are used."""
        assert derive_keys([1, 0, 1, 1, 1], n_tables=2, hash_size=2) == [2, 3]

    def test_invalid_bit(self):
        """Test that a bit outside {0, 1} is an invariant violation."""
        with pytest.raises(SignatureError):
            derive_keys([1, 0, 2, 1], n_tables=2, hash_size=2)

    def test_short_signature(self):
        """Test that a signature shorter than n_tables * hash_size is rejected."""
        with pytest.raises(SignatureError):
            derive_keys([1, 0, 1], n_tables=2, hash_size=2)

    def test_identical_vectors_share_keys(self):
        """Test that hashing is stable for the same vector."""
        rng = np.random.default_rng(5)
        hyperplanes = generate_hyperplanes(40, 32, rng)
        vector = rng.standard_normal(32)
        first = derive_keys(signature(hyperplanes, vector), 4, 10)
        second = derive_keys(signature(hyperplanes, vector.copy()), 4, 10)
        assert first == second
        assert all(0 <= key < 2**10 for key in first)
