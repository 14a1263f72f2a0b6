"""Reference objective for key-assignment search."""

from keymap_annealing.objective.score import (
    ObjectiveWeights,
    compute_score,
    equivalence_stats,
    key_balance,
)

__all__ = [
    "ObjectiveWeights",
    "compute_score",
    "equivalence_stats",
    "key_balance",
]
