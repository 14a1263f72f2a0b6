"""Keymap Annealing: incremental swap moves for key-to-role assignment search."""

__version__ = "0.1.0"

from keymap_annealing.core.context import ProblemContext
from keymap_annealing.core.state import OptimizerState, ConsistencyError
from keymap_annealing.algorithms.swap_move import try_swap
from keymap_annealing.objective.score import ObjectiveWeights
from keymap_annealing.data.synthetic_generators import (
    generate_synthetic_problem,
    random_valid_assignment,
)

__all__ = [
    "ProblemContext",
    "OptimizerState",
    "ConsistencyError",
    "try_swap",
    "ObjectiveWeights",
    "generate_synthetic_problem",
    "random_valid_assignment",
]
