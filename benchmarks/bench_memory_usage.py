"""Benchmark: Memory usage of a populated access database.

Uses tracemalloc to measure memory allocated while building a database of
many player trees and flattening each player's effective tree.
"""
from __future__ import annotations

import json
import sys
import tracemalloc
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from accesstree.principals.database import AuthorizationDatabase
from accesstree.tree.merger import TreeMerger
from accesstree.tree.nodes import AccessTree

_PLAYERS: int = 500


def _player_tree(index: int) -> AccessTree:
    return AccessTree.from_raw(
        {
            "d": {f"Area{index % 25}": 3, "Shared": {"*": 1, "notes": 3}},
            "players": {f"p{index}": {"*": 3, "private": -1}},
            "?": ["Arch_docs"] if index % 10 == 0 else [],
        }
    )


def bench_database_memory_usage() -> dict[str, object]:
    """Benchmark memory usage of a seeded database with many player trees.

    Returns
    -------
    dict with keys: operation, iterations, peak_memory_kb, current_memory_kb,
    ops_per_second, avg_latency_ms, memory_peak_mb.
    """
    tracemalloc.start()
    snapshot_before = tracemalloc.take_snapshot()

    database = AuthorizationDatabase.seeded()
    for index in range(_PLAYERS):
        database.set_tree(f"p{index}", _player_tree(index))

    merger = TreeMerger()
    default_tree = database.default_tree
    flattened = [
        merger.flatten([database.get(f"p{index}") or AccessTree(), default_tree])
        for index in range(_PLAYERS)
    ]

    snapshot_after = tracemalloc.take_snapshot()
    tracemalloc.stop()

    stats = snapshot_after.compare_to(snapshot_before, "lineno")
    total_bytes = sum(stat.size_diff for stat in stats if stat.size_diff > 0)
    peak_kb = round(total_bytes / 1024, 2)

    result: dict[str, object] = {
        "operation": "database_memory_usage",
        "iterations": len(flattened),
        "peak_memory_kb": peak_kb,
        "current_memory_kb": peak_kb,
        "ops_per_second": 0.0,
        "avg_latency_ms": 0.0,
        "memory_peak_mb": round(peak_kb / 1024, 4),
    }
    print(
        f"[bench_memory_usage] {result['operation']}: "
        f"{peak_kb:.2f} KB for {_PLAYERS} player trees"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_database_memory_usage()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "memory_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
