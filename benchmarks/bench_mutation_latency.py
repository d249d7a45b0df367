"""Benchmark: Tree mutation latency - per-call p50/p99.

Measures the per-call latency of TreeMutator.grant() followed by
TreeMutator.revoke() on a tree with a few hundred entries, so every
iteration exercises splitting, compaction and upward deletion.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from accesstree.tree.levels import AccessLevel
from accesstree.tree.mutator import TreeMutator
from accesstree.tree.nodes import AccessTree

_WARMUP: int = 100
_ITERATIONS: int = 5_000
_AREAS: int = 20
_ROOMS: int = 15


def _make_tree() -> AccessTree:
    """Build a tree of domain areas with per-room entries."""
    domains: dict[str, object] = {}
    for area in range(_AREAS):
        rooms: dict[str, object] = {"*": int(AccessLevel.READ)}
        for room in range(_ROOMS):
            rooms[f"room{room}.c"] = int(AccessLevel.WRITE)
        domains[f"Area{area}"] = rooms
    return AccessTree.from_raw({"*": int(AccessLevel.REVOKED), "d": domains})


def bench_grant_revoke_latency() -> dict[str, object]:
    """Benchmark one grant plus one revoke per iteration.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    mutator = TreeMutator()
    tree = _make_tree()
    targets = [
        ["d", f"Area{i % _AREAS}", "wing", f"hall{i % 7}.c"] for i in range(_ITERATIONS)
    ]

    for segments in targets[:_WARMUP]:
        mutator.grant(tree, segments, AccessLevel.GRANT_READ)
        mutator.revoke(tree, segments)

    latencies_ms: list[float] = []
    for segments in targets:
        t0 = time.perf_counter()
        mutator.grant(tree, segments, AccessLevel.GRANT_READ)
        mutator.revoke(tree, segments)
        latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": "grant_revoke_latency",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_mutation_latency] {result['operation']}: "
        f"p99={result['p99_latency_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_grant_revoke_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
