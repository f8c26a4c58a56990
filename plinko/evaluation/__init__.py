"""
Evaluation Package
==================

Monte Carlo harness measuring payouts over many seeded sessions.
"""

from plinko.evaluation.run_eval import evaluate_seeds, evaluate_single_seed

__all__ = ["evaluate_seeds", "evaluate_single_seed"]
