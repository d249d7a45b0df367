"""Benchmark: Access check throughput - checks per second.

Measures how many AuthorizationService.check() calls complete per second
for a player with an own tree and two groups layered over the seeded
default tree, across a mix of allowed and denied paths.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from accesstree.engine.service import AuthorizationService
from accesstree.principals.sources import StaticDirectory
from accesstree.tree.levels import AccessLevel

_ITERATIONS: int = 10_000

_PATHS: list[tuple[str, AccessLevel]] = [
    ("/d/Elandar/castle.c", AccessLevel.WRITE),
    ("/d/Elandar/rooms/hall.c", AccessLevel.READ),
    ("/help/index", AccessLevel.WRITE),
    ("/data/secret", AccessLevel.READ),
    ("/players/frogo/workroom.c", AccessLevel.WRITE),
    ("/players/dios/open/notes", AccessLevel.READ),
    ("/tmp/scratch", AccessLevel.WRITE),
    ("/log/Driver", AccessLevel.READ),
]


def _make_service() -> AuthorizationService:
    """Build a service with one layered principal for benchmarking."""
    directory = StaticDirectory()
    directory.add_player("aedil", level=45)
    directory.add_player("frogo", level=1)
    directory.add_player("dios", level=1)
    service = AuthorizationService(identity=directory, affiliations=directory)
    service.grant("aedil", "frogo", "/d/Elandar", AccessLevel.WRITE)
    service.grant("aedil", "frogo", "/d/Elandar/rooms", AccessLevel.REVOKED)
    service.grant("aedil", "Coders", "/src", AccessLevel.WRITE)
    service.set_group_membership("aedil", "frogo", "Coders")
    service.set_group_membership("aedil", "frogo", "Arch_docs")
    return service


def bench_check_throughput() -> dict[str, object]:
    """Benchmark AuthorizationService.check() throughput.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    service = _make_service()
    latencies_ms: list[float] = []

    for i in range(_ITERATIONS):
        path, required = _PATHS[i % len(_PATHS)]
        t0 = time.perf_counter()
        service.check(path, "frogo", required)
        latencies_ms.append((time.perf_counter() - t0) * 1000)

    total = sum(latencies_ms) / 1000
    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)

    result: dict[str, object] = {
        "operation": "check_throughput",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_evaluation_throughput] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} ops/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_check_throughput()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "throughput_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
