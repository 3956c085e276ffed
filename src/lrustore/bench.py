from __future__ import annotations

import time
from collections.abc import Hashable, Iterable
from dataclasses import dataclass

from lrustore.store import Cache

_MISSING = object()


@dataclass(frozen=True, slots=True)
class BenchResult:
    key: Hashable
    iterations: int
    total_s: float
    hit: bool

    @property
    def per_call_ns(self) -> float:
        return (self.total_s / self.iterations) * 1e9


def run_get_benchmark(
    cache: Cache, keys: Iterable[Hashable], *, iterations: int = 100_000
) -> list[BenchResult]:
    """Time `iterations` consecutive ``get`` calls for each key in turn."""

    if iterations < 1:
        raise ValueError("iterations must be >= 1")

    results: list[BenchResult] = []
    for key in keys:
        hit = cache.get(key, _MISSING) is not _MISSING
        get = cache.get
        start = time.perf_counter()
        for _ in range(iterations):
            get(key)
        elapsed = time.perf_counter() - start
        results.append(BenchResult(key=key, iterations=iterations, total_s=elapsed, hit=hit))
    return results


def format_results(results: Iterable[BenchResult]) -> str:
    lines = []
    for r in results:
        status = "hit" if r.hit else "miss"
        lines.append(
            f"get({r.key!r}) [{status}]: {r.per_call_ns:.1f} ns/call ({r.iterations} calls)"
        )
    return "\n".join(lines)
