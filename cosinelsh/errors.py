"""
Exceptions raised by cosinelsh.
"""


class LSHError(Exception):
    """Base class for all cosinelsh errors."""


class DimensionMismatchError(LSHError, ValueError):
    """A vector does not have the dimensionality the index was built for."""

    def __init__(self, expected: int, actual: object, what: str = "Vector"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{what} dimension {actual} does not match index dimension {expected}"
        )


class KeyWidthExceededError(LSHError, ValueError):
    """The number of bits per table does not fit an unsigned 64-bit key."""

    def __init__(self, hash_size: int, max_bits: int):
        self.hash_size = hash_size
        self.max_bits = max_bits
        super().__init__(
            f"hash_size {hash_size} exceeds the maximum key width of {max_bits} bits"
        )


class SignatureError(LSHError):
    """
    A signature broke an internal invariant.

    This can only come from a bug in signature computation, never from
    caller input, so it should be treated as fatal.
    """


class IndexClosedError(LSHError, RuntimeError):
    """The index was closed and can no longer accept inserts."""
