"""
Vector search module using SimHash LSH (Locality-Sensitive Hashing).

This module provides in-memory vector search with LSH-based approximate
nearest neighbor search, followed by exact distance reranking.
"""

from cosinelsh.vector.lsh import CosineLSHIndex, Point

__all__ = ["CosineLSHIndex", "Point"]
