"""
Performance Benchmark
=====================

Measures round and tick throughput of the physics backends.

Usage:
    python -m tools.benchmark_speed [--rounds N] [--backends reference pymunk]
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import List

from plinko.core.config_loader import load_config, BACKENDS, LAYOUT_KINDS
from plinko.core.session import GameSession


def benchmark_backend(
    backend: str,
    layout_kind: str,
    num_rounds: int = 200,
    seed: int = 42
) -> dict:
    """
    Benchmark full rounds on one backend and layout.

    Args:
        backend: Physics backend name.
        layout_kind: Board layout kind.
        num_rounds: Number of rounds to play.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    config = load_config().with_layout(layout_kind).with_backend(backend)
    session = GameSession(config=config, seed=seed)
    session.set_stake(1)

    # Warmup
    for _ in range(5):
        session.play_round()
    session.reset(seed=seed)
    session.set_stake(1)

    total_ticks = 0

    def count_tick(_result) -> None:
        nonlocal total_ticks
        total_ticks += 1

    start = time.perf_counter()

    rounds = 0
    for _ in range(num_rounds):
        if not session.start_round().is_ok:
            session.reset()
            session.set_stake(1)
            continue
        session.run_until_settled(tick_callback=count_tick)
        rounds += 1

    elapsed = time.perf_counter() - start

    return {
        "backend": backend,
        "layout": layout_kind,
        "rounds": rounds,
        "ticks": total_ticks,
        "elapsed_seconds": elapsed,
        "rounds_per_second": rounds / elapsed if elapsed > 0 else 0.0,
        "ticks_per_second": total_ticks / elapsed if elapsed > 0 else 0.0,
    }


def run_all_benchmarks(
    backends: List[str],
    layouts: List[str],
    rounds: int = 200
) -> list:
    """Run every backend/layout combination."""
    results = []

    print("=" * 60)
    print("PLINKO BACKEND PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    for backend in backends:
        for layout_kind in layouts:
            print(f"Benchmarking {backend} on {layout_kind}...")
            result = benchmark_backend(backend, layout_kind, num_rounds=rounds)
            results.append(result)
            print(f"  Rounds/sec: {result['rounds_per_second']:.1f}")
            print(f"  Ticks/sec:  {result['ticks_per_second']:.1f}")
            print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Backend':<12} {'Layout':<10} {'Rounds/s':>10} {'Ticks/s':>12}")
    print("-" * 48)

    for r in results:
        print(f"{r['backend']:<12} {r['layout']:<10} "
              f"{r['rounds_per_second']:>10.1f} {r['ticks_per_second']:>12.1f}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Plinko backends")
    parser.add_argument("--rounds", type=int, default=200, help="Rounds per benchmark")
    parser.add_argument("--backends", nargs="+", choices=BACKENDS, default=list(BACKENDS),
                        help="Backends to test")
    parser.add_argument("--layouts", nargs="+", choices=LAYOUT_KINDS, default=list(LAYOUT_KINDS),
                        help="Layouts to test")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer rounds)")

    args = parser.parse_args()

    rounds = 20 if args.quick else args.rounds

    run_all_benchmarks(args.backends, args.layouts, rounds=rounds)

    return 0


if __name__ == "__main__":
    sys.exit(main())
