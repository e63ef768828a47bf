"""
Query benchmark for cosinelsh

This script indexes random embeddings with several (n_tables, hash_size)
settings and reports candidate set sizes, recall of the true nearest
neighbor and query latency.
"""

import logging
import time

import numpy as np

from cosinelsh import CosineLSHIndex


def random_embeddings(n, dim, max_value=1.0, seed=1):
    rng = np.random.default_rng(seed)
    return rng.random(size=(n, dim)) * max_value


def main():
    logging.basicConfig(level=logging.INFO)

    n_points = 10000
    dim = 300
    n_queries = 200
    settings = [(20, 5), (5, 20), (10, 10), (25, 4), (4, 25)]

    print(f"Generating {n_points} embeddings of dimension {dim}...")
    embeddings = random_embeddings(n_points, dim)
    ids = [str(i) for i in range(n_points)]
    queries = random_embeddings(n_queries, dim, seed=2)

    # Exact nearest neighbor of each query, by brute force
    distances = (
        (queries ** 2).sum(axis=1)[:, None]
        + (embeddings ** 2).sum(axis=1)[None, :]
        - 2 * queries @ embeddings.T
    )
    true_nearest = [ids[i] for i in distances.argmin(axis=1)]

    print("\n" + "=" * 60)
    print(f"{'L':>4} {'M':>4} {'insert s':>10} {'query ms':>10} {'avg cand':>10} {'recall@1':>10}")
    print("=" * 60)

    for n_tables, hash_size in settings:
        with CosineLSHIndex(dim=dim, n_tables=n_tables, hash_size=hash_size, seed=42) as index:
            start = time.perf_counter()
            index.insert_many(embeddings, ids)
            insert_seconds = time.perf_counter() - start

            total_candidates = 0
            hits = 0
            start = time.perf_counter()
            for query, expected in zip(queries, true_nearest):
                results = index.query(query)
                total_candidates += len(results)
                if results and results[0].id == expected:
                    hits += 1
            query_ms = (time.perf_counter() - start) * 1000 / n_queries

        print(
            f"{n_tables:>4} {hash_size:>4} {insert_seconds:>10.2f} {query_ms:>10.2f} "
            f"{total_candidates / n_queries:>10.1f} {hits / n_queries:>10.2%}"
        )


if __name__ == "__main__":
    main()
