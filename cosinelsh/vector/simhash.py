"""
SimHash primitives: random hyperplanes, sign signatures and bucket keys.

A vector is hashed by projecting it onto H random hyperplanes and keeping the
sign of each projection. The resulting H-bit signature is cut into L groups of
M bits, and each group is packed into an integer key for one hash table.
"""

from typing import Optional, Sequence, Union

import numpy as np

from cosinelsh.errors import DimensionMismatchError, SignatureError

# Keys must fit an unsigned 64-bit integer
MAX_KEY_BITS = 64


def generate_hyperplanes(
    count: int,
    dim: int,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Generate random hyperplanes for SimHash.

    Each component is drawn independently from a standard normal distribution,
    so the normals are uniformly distributed in direction.

    Args:
        count: Number of hyperplanes (H).
        dim: Dimensionality of each hyperplane.
        rng: Random generator to draw from. A fresh one is used if None.

    Returns:
        Array of shape (count, dim).
    """
    if rng is None:
        rng = np.random.default_rng()
    return rng.standard_normal(size=(count, dim))


def signature(hyperplanes: np.ndarray, vector: np.ndarray) -> np.ndarray:
    """
    Compute the sign signature of a vector.

    Bit i is 1 if the dot product with hyperplane i is >= 0, else 0.
    A dot product of exactly zero maps to 1.

    Args:
        hyperplanes: Array of shape (H, dim).
        vector: 1D array of shape (dim,).

    Returns:
        uint8 array of shape (H,).

    Raises:
        DimensionMismatchError: If the vector is not 1D or its length is not dim.
    """
    vector = np.asarray(vector, dtype=np.float64)
    dim = hyperplanes.shape[1]
    if vector.ndim != 1:
        raise DimensionMismatchError(dim, vector.shape)
    if vector.shape[0] != dim:
        raise DimensionMismatchError(dim, vector.shape[0])

    projection = hyperplanes @ vector
    return (projection >= 0).astype(np.uint8)


def derive_keys(
    sig: Union[np.ndarray, Sequence[int]],
    n_tables: int,
    hash_size: int,
) -> list[int]:
    """
    Slice a signature into per-table bucket keys.

    Key t packs bits [t * hash_size, (t + 1) * hash_size) most significant
    bit first.

    Args:
        sig: Signature bits, each 0 or 1, at least n_tables * hash_size long.
        n_tables: Number of hash tables (L).
        hash_size: Bits per table (M), at most MAX_KEY_BITS.

    Returns:
        List of n_tables unsigned integer keys.

    Raises:
        SignatureError: If the signature is too short or holds a bit other
            than 0 or 1.
    """
    bits = np.asarray(sig)
    n_bits = n_tables * hash_size
    if bits.ndim != 1 or bits.shape[0] < n_bits:
        raise SignatureError(
            f"Signature of shape {bits.shape} is too short for "
            f"{n_tables} tables of {hash_size} bits"
        )

    bits = bits[:n_bits]
    if not np.isin(bits, (0, 1)).all():
        raise SignatureError("Signature bit is not 0 or 1")

    groups = bits.astype(np.uint64).reshape(n_tables, hash_size)
    weights = np.left_shift(
        np.uint64(1), np.arange(hash_size - 1, -1, -1, dtype=np.uint64)
    )
    keys = (groups * weights).sum(axis=1, dtype=np.uint64)
    return [int(key) for key in keys]
