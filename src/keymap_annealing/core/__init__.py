"""Problem context and optimizer state."""

from keymap_annealing.core.context import ProblemContext
from keymap_annealing.core.state import (
    ConsistencyError,
    OptimizerState,
    check_consistency,
    collision_totals,
    states_identical,
)

__all__ = [
    "ProblemContext",
    "OptimizerState",
    "ConsistencyError",
    "check_consistency",
    "collision_totals",
    "states_identical",
]
