"""
Evaluation Harness
==================

Plays many seeded sessions and reports the return to player (paid / staked)
and how often each slot is hit.

Usage:
    python -m plinko.evaluation.run_eval --seeds 20 --rounds 200 --bias
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import dataclass
from typing import List, Optional
import numpy as np

from plinko.core.config_loader import GameConfig, load_config, LAYOUT_KINDS, BACKENDS
from plinko.core.session import GameSession


@dataclass
class EvalResult:
    """Result for a single seed."""
    seed: int
    rounds_played: int
    final_balance: int
    total_staked: int
    total_paid: int
    slot_counts: List[int]
    unsettled_rounds: int
    elapsed_time: float

    @property
    def return_to_player(self) -> float:
        if self.total_staked == 0:
            return 0.0
        return self.total_paid / self.total_staked


@dataclass
class EvalSummary:
    """Summary of evaluation across all seeds."""
    mean_rtp: float
    std_rtp: float
    min_rtp: float
    max_rtp: float
    median_rtp: float
    slot_frequencies: List[float]
    total_time: float
    results: List[EvalResult]


def evaluate_single_seed(
    config: GameConfig,
    seed: int,
    rounds: int,
    bias: bool = False,
    verbose: bool = False
) -> EvalResult:
    """
    Play up to `rounds` rounds on one seeded session.

    Stops early when the balance can no longer cover the stake.

    Args:
        config: Game configuration.
        seed: Random seed.
        rounds: Maximum rounds to play.
        bias: If True, enable bias mode before the first round.
        verbose: If True, print the per-seed result.

    Returns:
        EvalResult for this seed.
    """
    session = GameSession(config=config, seed=seed)
    if bias != session.bias_enabled:
        session.toggle_bias()

    slot_counts = [0] * config.num_slots
    unsettled = 0
    start_time = time.time()

    for _ in range(rounds):
        result = session.play_round()
        if result is None:
            break
        if result.is_settled:
            slot_counts[result.slot_index] += 1
        else:
            unsettled += 1

    elapsed = time.time() - start_time

    result = EvalResult(
        seed=seed,
        rounds_played=session.rounds_played,
        final_balance=session.balance,
        total_staked=session.total_staked,
        total_paid=session.total_paid,
        slot_counts=slot_counts,
        unsettled_rounds=unsettled,
        elapsed_time=elapsed
    )

    if verbose:
        print(f"  Seed {seed}: rounds={result.rounds_played}, "
              f"balance={result.final_balance}, rtp={result.return_to_player:.3f}, "
              f"time={elapsed:.2f}s")

    return result


def evaluate_seeds(
    config: GameConfig,
    seeds: List[int],
    rounds: int,
    bias: bool = False,
    verbose: bool = True
) -> EvalSummary:
    """
    Evaluate every seed and aggregate.

    Args:
        config: Game configuration.
        seeds: Seeds to play.
        rounds: Maximum rounds per seed.
        bias: If True, play with bias mode on.
        verbose: If True, print progress and a summary.

    Returns:
        EvalSummary with aggregate statistics.
    """
    if not seeds:
        raise ValueError("At least one seed is required")

    if verbose:
        print(f"Evaluating {len(seeds)} seeds x {rounds} rounds "
              f"(layout={config.board.layout_kind}, backend={config.physics.backend}, "
              f"bias={'on' if bias else 'off'})...")

    results: List[EvalResult] = []
    total_start = time.time()

    for i, seed in enumerate(seeds):
        if verbose:
            print(f"[{i+1}/{len(seeds)}] Running seed {seed}...")
        results.append(evaluate_single_seed(config, seed, rounds, bias=bias, verbose=verbose))

    total_time = time.time() - total_start

    rtps = np.array([r.return_to_player for r in results])
    counts = np.sum([r.slot_counts for r in results], axis=0)
    total_landed = counts.sum()
    if total_landed > 0:
        frequencies = (counts / total_landed).tolist()
    else:
        frequencies = [0.0] * config.num_slots

    summary = EvalSummary(
        mean_rtp=float(np.mean(rtps)),
        std_rtp=float(np.std(rtps)),
        min_rtp=float(np.min(rtps)),
        max_rtp=float(np.max(rtps)),
        median_rtp=float(np.median(rtps)),
        slot_frequencies=[float(f) for f in frequencies],
        total_time=total_time,
        results=results
    )

    if verbose:
        print()
        print("=" * 50)
        print("EVALUATION SUMMARY")
        print("=" * 50)
        print(f"Seeds evaluated: {len(seeds)}")
        print(f"Mean RTP:        {summary.mean_rtp:.3f}")
        print(f"Std deviation:   {summary.std_rtp:.3f}")
        print(f"Min RTP:         {summary.min_rtp:.3f}")
        print(f"Max RTP:         {summary.max_rtp:.3f}")
        print(f"Median RTP:      {summary.median_rtp:.3f}")
        print("Slot frequencies:")
        for value, freq in zip(config.slots.values, summary.slot_frequencies):
            print(f"  {value:>4}: {freq:.3f}")
        print(f"Total time:      {total_time:.2f}s")
        print("=" * 50)

    return summary


def save_results(summary: EvalSummary, output_path: str) -> None:
    """Save evaluation results to JSON."""
    data = {
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "mean_rtp": summary.mean_rtp,
        "std_rtp": summary.std_rtp,
        "min_rtp": summary.min_rtp,
        "max_rtp": summary.max_rtp,
        "median_rtp": summary.median_rtp,
        "slot_frequencies": summary.slot_frequencies,
        "total_time": summary.total_time,
        "results": [
            {
                "seed": r.seed,
                "rounds_played": r.rounds_played,
                "final_balance": r.final_balance,
                "total_staked": r.total_staked,
                "total_paid": r.total_paid,
                "slot_counts": r.slot_counts,
                "unsettled_rounds": r.unsettled_rounds,
                "elapsed_time": r.elapsed_time
            }
            for r in summary.results
        ]
    }

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Evaluate Plinko payouts")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to game_config.yaml (uses default if not specified)")
    parser.add_argument("--seeds", type=int, default=20, help="Number of seeds")
    parser.add_argument("--base-seed", type=int, default=0, help="First seed")
    parser.add_argument("--rounds", type=int, default=100, help="Max rounds per seed")
    parser.add_argument("--bias", action="store_true", help="Enable bias mode")
    parser.add_argument("--layout", choices=LAYOUT_KINDS, default=None,
                        help="Override the configured layout kind")
    parser.add_argument("--backend", choices=BACKENDS, default=None,
                        help="Override the configured physics backend")
    parser.add_argument("--output", type=str, default=None, help="Path to save results JSON")
    parser.add_argument("--quiet", action="store_true", help="Reduce output verbosity")

    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.layout:
        config = config.with_layout(args.layout)
    if args.backend:
        config = config.with_backend(args.backend)

    seeds = list(range(args.base_seed, args.base_seed + args.seeds))

    summary = evaluate_seeds(
        config,
        seeds,
        rounds=args.rounds,
        bias=args.bias,
        verbose=not args.quiet
    )

    if args.output:
        save_results(summary, args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
