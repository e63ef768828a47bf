"""
CosineLSHIndex - In-memory approximate nearest neighbor search with SimHash.

This module provides approximate nearest neighbor search using Locality-Sensitive
Hashing (LSH) with random hyperplane projections, followed by exact distance
reranking of the retrieved candidates.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

import numpy as np

from cosinelsh.distance import DistanceFunc, get_distance
from cosinelsh.errors import (
    DimensionMismatchError,
    IndexClosedError,
    KeyWidthExceededError,
)
from cosinelsh.vector.simhash import (
    MAX_KEY_BITS,
    derive_keys,
    generate_hyperplanes,
    signature,
)
from cosinelsh.vector.tables import HashTableBank

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Point:
    """A stored vector and the caller-chosen id it was inserted with."""

    vector: np.ndarray
    id: str


def _check_positive(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


class CosineLSHIndex:
    """
    An in-memory vector index using SimHash LSH with exact reranking.

    Every vector is hashed into n_tables hash tables, each keyed by hash_size
    signature bits. A query collects the points sharing a bucket with it in
    any table, then ranks them by exact distance. More tables raise recall and
    query cost; more bits per table raise precision and lower recall.

    API:
    - __init__(dim, n_tables=10, hash_size=10, seed=None, rng=None, hyperplanes=None,
      distance="euclidean_sq", max_workers=None)
    - insert(vector, id) - Add a single vector
    - insert_many(vectors, ids) - Add vectors in order
    - query(vector, num_results=None) - Ranked candidate points
    - query_with_distances(vector, num_results=None) - Ranked (point, distance) pairs
    - candidates(vector) - Candidate ids before ranking

    Example:
        >>> import numpy as np
        >>> index = CosineLSHIndex(dim=300, n_tables=10, hash_size=10, seed=1)
        >>> vectors = np.random.rand(1000, 300)
        >>> index.insert_many(vectors, [str(i) for i in range(1000)])
        >>> results = index.query(vectors[0])
        >>> results[0].id
        '0'
    """

    def __init__(
        self,
        dim: int,
        n_tables: int = 10,
        hash_size: int = 10,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        hyperplanes: Optional[np.ndarray] = None,
        distance: Union[str, DistanceFunc] = "euclidean_sq",
        max_workers: Optional[int] = None,
    ):
        """
        Initialize the CosineLSHIndex.

        Args:
            dim: Dimensionality of every vector stored or queried.
            n_tables: Number of LSH hash tables (more = better recall, slower).
            hash_size: Number of bits per table key (more = better precision).
            seed: Seed for the hyperplane generator.
            rng: Random generator for the hyperplanes. Exclusive with seed.
            hyperplanes: Pre-generated hyperplanes of shape (>= n_tables * hash_size, dim).
                Only the first n_tables * hash_size rows are used.
            distance: Name from cosinelsh.distance.DISTANCES or a callable.
            max_workers: Threads used to write the tables on insert.
                Defaults to n_tables.

        Raises:
            ValueError: If a size is not a positive integer, or seed and rng
                are both given.
            KeyWidthExceededError: If hash_size is larger than 64.
            DimensionMismatchError: If hyperplanes has the wrong shape.
        """
        _check_positive("dim", dim)
        _check_positive("n_tables", n_tables)
        _check_positive("hash_size", hash_size)
        if hash_size > MAX_KEY_BITS:
            raise KeyWidthExceededError(hash_size, MAX_KEY_BITS)
        if seed is not None and rng is not None:
            raise ValueError("Pass either seed or rng, not both")

        self.dim = int(dim)
        self.n_tables = int(n_tables)
        self.hash_size = int(hash_size)
        self._distance = get_distance(distance)

        n_hyperplanes = self.n_tables * self.hash_size
        if hyperplanes is None:
            if rng is None:
                rng = np.random.default_rng(seed)
            hyperplanes = generate_hyperplanes(n_hyperplanes, self.dim, rng)
        else:
            hyperplanes = self._check_hyperplanes(hyperplanes, n_hyperplanes)
        self._hyperplanes = np.array(hyperplanes[:n_hyperplanes], dtype=np.float64)
        self._hyperplanes.setflags(write=False)

        self._tables = HashTableBank(self.n_tables)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or self.n_tables,
            thread_name_prefix="cosinelsh-insert",
        )
        self._lock = threading.Lock()
        self._closed = False
        self._count = 0

        logger.debug(
            "Created CosineLSHIndex dim=%d n_tables=%d hash_size=%d hyperplanes=%d",
            self.dim, self.n_tables, self.hash_size, n_hyperplanes,
        )

    def _check_hyperplanes(self, hyperplanes: Any, n_hyperplanes: int) -> np.ndarray:
        hyperplanes = np.asarray(hyperplanes, dtype=np.float64)
        if hyperplanes.ndim != 2 or hyperplanes.shape[1] != self.dim:
            raise DimensionMismatchError(
                self.dim, hyperplanes.shape, what="Hyperplane"
            )
        if hyperplanes.shape[0] < n_hyperplanes:
            raise DimensionMismatchError(
                n_hyperplanes, hyperplanes.shape[0], what="Hyperplane count"
            )
        return hyperplanes

    @property
    def hyperplanes(self) -> np.ndarray:
        """Read-only hyperplanes of shape (n_hyperplanes, dim)."""
        return self._hyperplanes

    @property
    def n_hyperplanes(self) -> int:
        return self._hyperplanes.shape[0]

    def _as_vector(self, vector: Any) -> np.ndarray:
        """Copy a vector to a float64 array and check its dimension."""
        vector = np.array(vector, dtype=np.float64)
        if vector.ndim != 1:
            raise DimensionMismatchError(self.dim, vector.shape)
        if vector.shape[0] != self.dim:
            raise DimensionMismatchError(self.dim, vector.shape[0])
        return vector

    def hash_keys(self, vector: Any) -> list[int]:
        """
        Compute the bucket key of a vector for every table.

        Args:
            vector: 1D array of shape (dim,).

        Returns:
            List of n_tables integer keys.
        """
        vector = self._as_vector(vector)
        return derive_keys(
            signature(self._hyperplanes, vector), self.n_tables, self.hash_size
        )

    def insert(self, vector: Any, id: str) -> None:
        """
        Add a vector to the index.

        The point is appended to one bucket in every table, one worker thread
        per table. Returns once all tables have been written.

        Args:
            vector: 1D array of shape (dim,).
            id: Identifier returned with the point. Not required to be unique.

        Raises:
            DimensionMismatchError: If the vector does not have dim components.
            IndexClosedError: If the index has been closed.
        """
        vector = self._as_vector(vector)
        vector.setflags(write=False)
        keys = derive_keys(
            signature(self._hyperplanes, vector), self.n_tables, self.hash_size
        )
        point = Point(vector=vector, id=id)

        with self._lock:
            if self._closed:
                raise IndexClosedError("Cannot insert into a closed index")
            futures = [
                self._executor.submit(table.append, key, point)
                for table, key in zip(self._tables, keys)
            ]

        # Wait for every table before surfacing a worker error
        wait(futures)
        for future in futures:
            future.result()

        with self._lock:
            self._count += 1

    def insert_many(self, vectors: Any, ids: Sequence[str]) -> "CosineLSHIndex":
        """
        Add several vectors to the index, in order.

        Args:
            vectors: 2D array of shape (n, dim).
            ids: n identifiers, one per vector.

        Returns:
            self for method chaining.

        Raises:
            ValueError: If the number of vectors and ids differ.
            DimensionMismatchError: If vectors is not of shape (n, dim).
        """
        vectors = np.asarray(vectors, dtype=np.float64)
        if vectors.ndim != 2:
            raise DimensionMismatchError(self.dim, vectors.shape)
        if len(vectors) != len(ids):
            raise ValueError(
                f"Number of vectors ({len(vectors)}) must match "
                f"number of ids ({len(ids)})"
            )

        for vector, id in zip(vectors, ids):
            self.insert(vector, id)
        return self

    def _collect(self, vector: np.ndarray) -> dict[str, Point]:
        """Union the query's buckets across tables, first occurrence of an id wins."""
        keys = derive_keys(
            signature(self._hyperplanes, vector), self.n_tables, self.hash_size
        )
        seen: dict[str, Point] = {}
        for bucket in self._tables.lookup(keys):
            for point in bucket:
                if point.id not in seen:
                    seen[point.id] = point
        return seen

    def candidates(self, vector: Any) -> set[str]:
        """
        Find the ids sharing a bucket with the vector in at least one table.

        Args:
            vector: 1D array of shape (dim,).

        Returns:
            Set of candidate ids, unranked.
        """
        return set(self._collect(self._as_vector(vector)))

    def query_with_distances(
        self,
        vector: Any,
        num_results: Optional[int] = None,
    ) -> list[tuple[Point, float]]:
        """
        Find approximate nearest neighbors together with their distances.

        Args:
            vector: 1D array of shape (dim,).
            num_results: Maximum number of results. All candidates if None.

        Returns:
            List of (point, distance) sorted by ascending distance. Ties keep
            the order in which candidates were first found (table 0 first,
            then bucket insertion order).

        Raises:
            DimensionMismatchError: If the vector does not have dim components.
        """
        vector = self._as_vector(vector)
        seen = self._collect(vector)
        logger.debug("Query matched %d candidates", len(seen))

        scored = [(point, self._distance(vector, point.vector)) for point in seen.values()]
        scored.sort(key=lambda x: x[1])

        if num_results is not None:
            scored = scored[:num_results]
        return scored

    def query(self, vector: Any, num_results: Optional[int] = None) -> list[Point]:
        """
        Find approximate nearest neighbors of a vector.

        Args:
            vector: 1D array of shape (dim,).
            num_results: Maximum number of results. All candidates if None.

        Returns:
            Candidate points sorted by ascending distance to the vector. Empty if
            no bucket matched.
        """
        return [point for point, _ in self.query_with_distances(vector, num_results)]

    def __len__(self) -> int:
        """Number of completed inserts."""
        with self._lock:
            return self._count

    def close(self) -> None:
        """Shut down the insert workers. Queries remain available."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=True)
        logger.debug("Closed CosineLSHIndex with %d points", self._count)

    def __enter__(self) -> "CosineLSHIndex":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
