"""
cosinelsh - An in-memory approximate nearest neighbor index for cosine similarity.

cosinelsh hashes vectors with random hyperplane projections (SimHash) into
several independent hash tables, and reranks the retrieved candidates by
exact distance.
"""

from cosinelsh.__version__ import __version__
from cosinelsh.errors import (
    DimensionMismatchError,
    IndexClosedError,
    KeyWidthExceededError,
    LSHError,
    SignatureError,
)
from cosinelsh.vector import CosineLSHIndex, Point

__all__ = [
    "CosineLSHIndex",
    "Point",
    "LSHError",
    "DimensionMismatchError",
    "KeyWidthExceededError",
    "SignatureError",
    "IndexClosedError",
    "__version__",
]
