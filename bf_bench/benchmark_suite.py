"""Bloom filter benchmark suite.

Performs a deterministic 80/20 split of unique synthetic items, builds the
filter from the 80% training set sized with ``new_with_rate`` and runs five
checks:

1. Membership on the training set (should be all present)
2. False positive rate on the held-out set (never inserted)
3. Collision analysis using simple modifications of held-out items
4. Filter properties and memory usage
5. Insert/query throughput, for both hash backends

Run with ``python -m bf_bench.benchmark_suite``.
"""
from __future__ import annotations

import time
import uuid
from typing import Dict, List, Optional, Tuple

from bf_xx.bloom_filter import BloomFilter
from bf_xx.hashing import HASHERS


NUM_ITEMS = 100_000
FALSE_POSITIVE_RATE = 0.01
QUERY_OPS = 1_000_000


def generate_synthetic_data(n: int = NUM_ITEMS) -> list[str]:
    """Generate n unique random strings."""
    print(f"Generating {n} synthetic items...")
    # UUIDs are virtually guaranteed to be unique
    return [str(uuid.uuid4()) for _ in range(n)]


def build_split(
    items: list[str],
    fp_rate: float = FALSE_POSITIVE_RATE,
    hasher: str = "xxh64",
    seed: Optional[int] = None,
) -> Tuple[BloomFilter, list[str], list[str]]:
    """Create a deterministic 80/20 split and build the filter from the 80%.

    Returns (bloom_filter, training_items, test_items).
    """
    items = sorted(items)
    split = int(len(items) * 0.8)
    train = items[:split]
    test = items[split:]

    bloom = BloomFilter.new_with_rate(max(1, len(train)), fp_rate, seed=seed, hasher=hasher)
    bloom.update(train)

    return bloom, train, test


def run_membership(bloom: BloomFilter, train: list[str]) -> int:
    """Verify all training items are present; return the number missing."""
    print("TEST A: Membership on training set")
    missing = [w for w in train if not bloom.check(w)]
    print(f"  Training items: {len(train)}")
    print(f"  Missing after insertion: {len(missing)} (expected 0)")
    if missing:
        print(f"  Example missing: {missing[:5]}")
    print()
    return len(missing)


def run_false_positive_on_heldout(
    bloom: BloomFilter, train: list[str], test: list[str]
) -> Optional[float]:
    """Measure the empirical false positive rate on the held-out set."""
    print("TEST B: False positive rate on held-out items")
    train_set = set(train)
    test_filtered = [w for w in test if w not in train_set]

    if not test_filtered:
        print("  No held-out items available for testing.")
        print()
        return None

    false_positives = sum(1 for w in test_filtered if bloom.check(w))
    fpr = false_positives / len(test_filtered)
    expected = bloom.false_positive_rate(len(train))

    print(f"  Held-out items: {len(test_filtered)}")
    print(f"  False positives: {false_positives}")
    print(f"  Empirical FPR: {fpr:.6f} ({fpr*100:.4f}%)")
    print(f"  Expected FPR:  {expected:.6f} ({expected*100:.4f}%)")
    print()
    return fpr


def run_collision_analysis(
    bloom: BloomFilter, train: list[str], test: list[str]
) -> Optional[float]:
    """Analyze the collision rate using simple modifications of held-out items."""
    print("TEST C: Collision analysis with simple modifications of held-out items")
    sample = test[:500]
    modifications = []

    for word in sample:
        modifications.append(word + "x")
        if len(word) > 1:
            modifications.append(word[:-1] + "z")
        modifications.append("x" + word)

    # Remove any accidental real items
    known = set(train) | set(test)
    modifications = [m for m in modifications if m not in known]

    if not modifications:
        print("  No modifications available for testing.")
        print()
        return None

    false_positives = sum(1 for m in modifications if bloom.check(m))
    rate = false_positives / len(modifications)

    print(f"  Variants tested: {len(modifications)}")
    print(f"  False positives from variants: {false_positives}")
    print(f"  Collision rate: {rate:.6f} ({rate*100:.4f}%)")
    print()
    return rate


def show_properties(bloom: BloomFilter, train: list[str]) -> None:
    """Display filter memory and configuration properties."""
    print("TEST D: Filter properties")
    bytes_len = len(bloom.bitmap())
    mb = bytes_len / (1024 * 1024)

    print(f"  Filter size (bits): {bloom.size}")
    print(f"  Filter size (bytes): {bytes_len}")
    print(f"  Filter size (MB): {mb:.2f}")
    print(f"  Number of hash functions: {bloom.num_hashes}")
    print(f"  Bits set: {bloom.bits_set()}")
    print(f"  Items inserted: {len(train)}")
    if train:
        print(f"  Bytes per item: {bytes_len / len(train):.4f}")
    print()


def run_performance(
    bloom: BloomFilter, train: list[str], test: list[str], query_ops: int = QUERY_OPS
) -> Dict[str, float]:
    """Measure insertion and query throughput (ops/sec)."""
    print("TEST E: Performance Benchmarking")

    print("  Benchmarking Insertions...")
    # Fresh filter with the same geometry and hasher
    bench_filter = BloomFilter(bloom.size, bloom.num_hashes, hasher=bloom.hasher)

    start_time = time.perf_counter()
    for word in train:
        bench_filter.add(word)
    end_time = time.perf_counter()

    insert_time = end_time - start_time
    ops_per_sec = len(train) / insert_time if insert_time > 0 else float("inf")
    print(f"    - Inserted {len(train)} items in {insert_time:.4f} sec")
    print(f"    - Insertion Throughput: {ops_per_sec:,.0f} ops/sec")

    print("  Benchmarking Queries...")
    queries: List[str] = []
    if test:
        repeats = (query_ops // len(test)) + 1
        queries = (test * repeats)[:query_ops]

    start_time = time.perf_counter()
    for word in queries:
        bench_filter.check(word)
    end_time = time.perf_counter()

    query_time = end_time - start_time
    query_ops_per_sec = len(queries) / query_time if query_time > 0 else float("inf")
    print(f"    - Performed {len(queries)} queries in {query_time:.4f} sec")
    print(f"    - Query Throughput: {query_ops_per_sec:,.0f} ops/sec")
    print()

    return {
        "insert_count": len(train),
        "insert_time": max(insert_time, 0),
        "insert_ops_per_sec": ops_per_sec,
        "query_count": len(queries),
        "query_time": max(query_time, 0),
        "query_ops_per_sec": query_ops_per_sec,
    }


def compare_performance(metrics: Dict[str, Dict[str, float]]) -> None:
    """Print a side-by-side comparison of per-hasher performance metrics."""
    def fmt(val):
        if val is None:
            return "N/A"
        if isinstance(val, float):
            if val == float("inf"):
                return "inf"
            if abs(val) >= 1000:
                return f"{val:,.0f}"
            return f"{val:,.2f}"
        return str(val)

    names = list(metrics)
    print(f"{'Metric':<36}" + "".join(f"{name:>18}" for name in names))
    print("-" * (36 + 18 * len(names)))

    rows = [
        ("Insertion Throughput (ops/sec)", "insert_ops_per_sec"),
        ("Insertion Time (s)", "insert_time"),
        ("Query Throughput (ops/sec)", "query_ops_per_sec"),
        ("Query Time (s)", "query_time"),
        ("Insert Count", "insert_count"),
        ("Query Count", "query_count"),
    ]

    for label, key in rows:
        print(f"{label:<36}" + "".join(f"{fmt(metrics[name].get(key)):>18}" for name in names))
    print()


def run_all(
    n_items: int = NUM_ITEMS,
    fp_rate: float = FALSE_POSITIVE_RATE,
    query_ops: int = QUERY_OPS,
) -> None:
    """Run the whole suite once per hash backend."""
    full_items = generate_synthetic_data(n_items)
    print(f"Unique items: {len(full_items)}")

    metrics = {}
    for hasher in HASHERS:
        print("=" * 60)
        print(f"Running Bloom Filter Suite with {hasher} (80/20 split, p={fp_rate})")
        print("=" * 60)
        print()

        bloom, train, test = build_split(full_items, fp_rate, hasher=hasher)

        run_membership(bloom, train)
        run_false_positive_on_heldout(bloom, train, test)
        run_collision_analysis(bloom, train, test)
        show_properties(bloom, train)
        metrics[hasher] = run_performance(bloom, train, test, query_ops)

    print("=" * 60)
    print("COMPARISON: Performance Summary")
    print("=" * 60)
    compare_performance(metrics)

    print("=" * 60)
    print("Benchmark suite completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    run_all()
