"""
Hash tables mapping bucket keys to the points stored under them.
"""

import threading
from typing import Any


class HashTable:
    """
    One LSH hash table: bucket key -> insertion-ordered list of points.

    Buckets are created on first append and never evicted. All access goes
    through a per-table lock, so concurrent inserts from several threads are
    safe.
    """

    def __init__(self):
        self._buckets: dict[int, list[Any]] = {}
        self._lock = threading.Lock()

    def append(self, key: int, point: Any) -> None:
        """Append a point to the bucket at key, creating the bucket if absent."""
        with self._lock:
            self._buckets.setdefault(key, []).append(point)

    def get(self, key: int) -> tuple:
        """Return a snapshot of the bucket at key, or an empty tuple."""
        with self._lock:
            bucket = self._buckets.get(key)
            return tuple(bucket) if bucket is not None else ()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def __contains__(self, key: int) -> bool:
        with self._lock:
            return key in self._buckets


class HashTableBank:
    """L independent hash tables, indexed 0..L-1."""

    def __init__(self, n_tables: int):
        self._tables = [HashTable() for _ in range(n_tables)]

    def __getitem__(self, table_id: int) -> HashTable:
        return self._tables[table_id]

    def __len__(self) -> int:
        return len(self._tables)

    def __iter__(self):
        return iter(self._tables)

    def lookup(self, keys: list[int]) -> list[tuple]:
        """Fetch the bucket for keys[t] from table t, for every table."""
        return [table.get(key) for table, key in zip(self._tables, keys)]
