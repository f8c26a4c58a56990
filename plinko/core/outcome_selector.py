"""
Outcome Selector
================

Value-weighted random draw of a target slot. Low-value slots are drawn
more often than high-value ones, so a biased round usually pays little.

Two weightings are supported:

- bonus:   w(v) = 1 / (v + 1) * (favor_bonus if v < threshold else disfavor_bonus)
- inverse: w(v) = 1 / (v + 1)
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence

from plinko.core.config_loader import (
    GameConfig,
    ConfigurationError,
    WEIGHTING_BONUS,
    get_config,
)


def inverse_value_weight(value: int) -> float:
    """Base weight 1 / (value + 1)."""
    return 1.0 / (value + 1)


class OutcomeSelector:
    """
    Picks a slot index using weighted discrete sampling by inverse value.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize outcome selector.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        outcome = config.outcome
        self._use_bonus = outcome.weighting == WEIGHTING_BONUS
        self._threshold = outcome.low_value_threshold
        self._favor = outcome.favor_bonus
        self._disfavor = outcome.disfavor_bonus

    @property
    def uses_bonus(self) -> bool:
        """True if the favor/disfavor bonus is applied."""
        return self._use_bonus

    def weight(self, value: int) -> float:
        """Weight of a single slot value."""
        w = inverse_value_weight(value)
        if self._use_bonus:
            w *= self._favor if value < self._threshold else self._disfavor
        return w

    def weights(self, values: Sequence[int]) -> List[float]:
        """Weights for every value, in order."""
        return [self.weight(v) for v in values]

    def probabilities(self, values: Sequence[int]) -> List[float]:
        """Normalized selection probability for each slot index."""
        weights = self.weights(values)
        total = sum(weights)
        return [w / total for w in weights]

    def expected_value(self, values: Sequence[int]) -> float:
        """Mean payout of a round steered by this selector."""
        probs = self.probabilities(values)
        return sum(p * v for p, v in zip(probs, values))

    def select(self, values: Sequence[int], rng: random.Random) -> int:
        """
        Draw a slot index.

        Args:
            values: Slot values, left to right.
            rng: Random source; only rng.random() is used.

        Returns:
            Index in [0, len(values)).

        Raises:
            ConfigurationError: If values is empty.
        """
        if not values:
            raise ConfigurationError("Cannot select an outcome from no slots")

        weights = self.weights(values)
        total = sum(weights)
        r = rng.random() * total
        cumulative = 0.0
        for index, weight in enumerate(weights):
            cumulative += weight
            if cumulative >= r:
                return index
        # Float rounding left r just above the final running sum
        return len(values) - 1
