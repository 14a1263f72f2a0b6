"""Synthetic key-assignment problems for testing and experimentation."""

import numpy as np
from typing import Optional
from dataclasses import dataclass

from keymap_annealing.core.context import ProblemContext
from keymap_annealing.objective.score import ObjectiveWeights


@dataclass
class SyntheticProblemConfig:
    """Configuration for a synthetic key-assignment problem."""

    n_roles: int = 40
    n_keys: int = 10
    n_items: int = 300
    max_parts: int = 3
    n_groups: int = 4
    zipf_exponent: float = 1.1
    seed: Optional[int] = 42

    def validate(self) -> list[str]:
        """
        Validate parameter ranges and return a list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        if self.n_roles <= 0:
            errors.append("n_roles must be > 0")
        if self.n_keys < 2:
            errors.append("n_keys must be >= 2")
        if self.n_items <= 0:
            errors.append("n_items must be > 0")
        if self.max_parts <= 0:
            errors.append("max_parts must be > 0")
        if self.n_groups <= 0:
            errors.append("n_groups must be > 0")
        if self.n_groups > self.n_roles:
            errors.append(
                f"n_groups ({self.n_groups}) must be <= n_roles ({self.n_roles})"
            )
        if self.zipf_exponent <= 0:
            errors.append("zipf_exponent must be > 0")
        return errors


def generate_synthetic_problem(
    n_roles: int,
    n_keys: int,
    n_items: int,
    max_parts: int = 3,
    n_groups: int = 4,
    zipf_exponent: float = 1.1,
    seed: Optional[int] = None,
    objective: Optional[ObjectiveWeights] = None,
) -> ProblemContext:
    """
    Generate a random problem where roles in the same group share keys.

    Roles are dealt round-robin into ``n_groups`` groups; each group gets
    a random subset of at least two keys, so any two roles of one group
    can always swap. Each item picks 1..max_parts roles, and frequencies
    follow a Zipf-like law over a random item ranking.

    Args:
        n_roles: Number of roles
        n_keys: Number of keys
        n_items: Number of items
        max_parts: Maximum roles per item (default: 3)
        n_groups: Number of role groups (default: 4)
        zipf_exponent: Exponent of the frequency law (default: 1.1)
        seed: Random seed for reproducibility (default: None)
        objective: Objective weights for the context (default: None)

    Returns:
        ProblemContext for the generated problem

    Examples:
        >>> ctx = generate_synthetic_problem(12, 6, 50, seed=0)
        >>> ctx.n_roles, ctx.n_items
        (12, 50)
    """
    config = SyntheticProblemConfig(
        n_roles=n_roles,
        n_keys=n_keys,
        n_items=n_items,
        max_parts=max_parts,
        n_groups=n_groups,
        zipf_exponent=zipf_exponent,
        seed=seed,
    )
    errors = config.validate()
    if errors:
        raise ValueError(f"Invalid synthetic problem: {'; '.join(errors)}")

    rng = np.random.default_rng(seed)

    group_keys = []
    for _ in range(n_groups):
        size = int(rng.integers(2, n_keys + 1))
        group_keys.append(sorted(rng.choice(n_keys, size=size, replace=False).tolist()))
    allowed_keys = [group_keys[role % n_groups] for role in range(n_roles)]

    item_roles = []
    for _ in range(n_items):
        n_parts = int(rng.integers(1, max_parts + 1))
        item_roles.append(rng.integers(0, n_roles, size=n_parts).tolist())

    ranks = rng.permutation(n_items) + 1
    frequencies = np.maximum(
        1, np.round(10_000.0 / ranks.astype(np.float64) ** zipf_exponent)
    ).astype(np.int64)

    effort = rng.uniform(1.0, 3.0, size=(n_keys, n_keys))
    effort = (effort + effort.T) / 2

    return ProblemContext(
        item_roles=item_roles,
        frequencies=frequencies,
        allowed_keys=allowed_keys,
        n_keys=n_keys,
        equivalence=effort,
        max_parts=max_parts,
        objective=objective,
    )


def random_valid_assignment(
    context: ProblemContext,
    seed: Optional[int] = None,
) -> np.ndarray:
    """
    Draw a key for every role uniformly from its permitted set.

    Args:
        context: Problem to assign
        seed: Random seed for reproducibility (default: None)

    Returns:
        Assignment array of shape (n_roles,), int64
    """
    rng = np.random.default_rng(seed)
    assignment = np.zeros(context.n_roles, dtype=np.int64)
    for role in range(context.n_roles):
        keys = sorted(context.allowed_keys(role))
        assignment[role] = keys[int(rng.integers(0, len(keys)))]
    return assignment


def role_groups(context: ProblemContext) -> list[list[int]]:
    """Group roles that share an identical permitted key set."""
    groups = {}
    for role in range(context.n_roles):
        groups.setdefault(context.allowed_keys(role), []).append(role)
    return list(groups.values())
