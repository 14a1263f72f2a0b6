"""Reference objective over the optimizer's running aggregates."""

from dataclasses import dataclass, asdict
from typing import Tuple
import json

import numpy as np


@dataclass
class ObjectiveWeights:
    """Weights of the reference objective terms."""

    # Collisions
    collisions: float = 1.0
    collision_frequency: float = 10.0

    # Equivalence (typing effort)
    equivalence_mean: float = 0.0
    equivalence_variance: float = 1.0

    # Load balance across keys
    key_balance: float = 1.0

    def validate(self) -> list[str]:
        """
        Validate weight ranges and return a list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        for name, value in self.to_dict().items():
            if not np.isfinite(value):
                errors.append(f"{name} must be finite, got {value}")
            elif value < 0:
                errors.append(f"{name} must be >= 0, got {value}")
        return errors

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, d: dict) -> "ObjectiveWeights":
        return cls(**d)

    @classmethod
    def from_json(cls, json_str: str) -> "ObjectiveWeights":
        return cls.from_dict(json.loads(json_str))


def equivalence_stats(state, total_frequency: int) -> Tuple[float, float]:
    """
    Frequency-weighted mean and variance of the per-item equivalence.

    Args:
        state: OptimizerState holding the weighted sums
        total_frequency: Sum of all item frequencies

    Returns:
        Tuple of (mean, variance); both 0.0 when total_frequency is 0
    """
    if total_frequency <= 0:
        return 0.0, 0.0
    mean = state.total_equiv_weighted / total_frequency
    variance = state.total_equiv_sq_weighted / total_frequency - mean * mean
    # Cancellation can leave a tiny negative residue.
    return mean, max(variance, 0.0)


def key_balance(state, balance_keys: np.ndarray) -> float:
    """
    Squared deviation of per-key usage shares from a uniform split.

    Args:
        state: OptimizerState holding key_weighted_usage
        balance_keys: Keys taking part in the balance term

    Returns:
        Sum over balance keys of (share - 1/len(balance_keys))**2
    """
    if len(balance_keys) == 0:
        return 0.0
    usage = state.key_weighted_usage[balance_keys]
    total = usage.sum()
    if total <= 0:
        return 0.0
    shares = usage / total
    return float(np.sum((shares - 1.0 / len(balance_keys)) ** 2))


def compute_score(
    state,
    weights: ObjectiveWeights,
    total_frequency: int,
    balance_keys: np.ndarray,
) -> float:
    """
    Scalar cost minimized by the swap evaluator.

    cost = w_c * collisions
         + w_cf * collision_frequency / total_frequency
         + w_m * equivalence mean + w_v * equivalence variance
         + w_b * key balance
    """
    mean, variance = equivalence_stats(state, total_frequency)
    collision_share = (
        state.collision_frequency / total_frequency if total_frequency > 0 else 0.0
    )
    return float(
        weights.collisions * state.total_collisions
        + weights.collision_frequency * collision_share
        + weights.equivalence_mean * mean
        + weights.equivalence_variance * variance
        + weights.key_balance * key_balance(state, balance_keys)
    )
