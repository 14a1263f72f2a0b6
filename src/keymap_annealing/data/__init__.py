"""Synthetic problem generation."""

from keymap_annealing.data.synthetic_generators import (
    SyntheticProblemConfig,
    generate_synthetic_problem,
    random_valid_assignment,
    role_groups,
)

__all__ = [
    "SyntheticProblemConfig",
    "generate_synthetic_problem",
    "random_valid_assignment",
    "role_groups",
]
