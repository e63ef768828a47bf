"""
Distance functions used to rerank LSH candidates.

Each function takes two 1D vectors of equal length and returns a float,
smaller meaning closer.
"""

from typing import Callable, Union

import numpy as np

DistanceFunc = Callable[[np.ndarray, np.ndarray], float]


def euclidean_sq(a: np.ndarray, b: np.ndarray) -> float:
    diff = b - a
    return float(np.dot(diff, diff))


def euclidean(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.sqrt(euclidean_sq(a, b)))


def cosine(a: np.ndarray, b: np.ndarray) -> float:
    """1 - cosine similarity. Zero vectors are treated as unrelated (1.0)."""
    norm = np.linalg.norm(a) * np.linalg.norm(b)
    if norm == 0:
        return 1.0
    return float(1.0 - np.dot(a, b) / norm)


# Distance mapping for reranking, keyed by the name accepted by the index
DISTANCES = {
    'euclidean_sq': euclidean_sq,
    'euclidean': euclidean,
    'cosine': cosine,
}


def get_distance(distance: Union[str, DistanceFunc]) -> DistanceFunc:
    """
    Resolve a distance name or callable to a distance function.

    Args:
        distance: A key of DISTANCES, or a callable (a, b) -> float.

    Returns:
        The distance function.

    Raises:
        ValueError: If the name is not a known distance.
    """
    if callable(distance):
        return distance
    try:
        return DISTANCES[distance]
    except KeyError:
        raise ValueError(
            f"Unknown distance {distance!r}, expected one of {sorted(DISTANCES)}"
        ) from None
