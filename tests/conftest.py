"""Shared fixtures: a hand-built two-role swap scenario."""

import numpy as np
import pytest

from keymap_annealing.core.context import ProblemContext
from keymap_annealing.objective.score import ObjectiveWeights


class FixedDraw:
    """Uniform source that always returns the same value."""

    def __init__(self, value):
        self.value = value
        self.calls = 0

    def random(self):
        self.calls += 1
        return self.value


class NoDraw:
    """Uniform source that must not be consulted."""

    def random(self):
        raise AssertionError("random draw not expected")


COLLISION_ONLY = ObjectiveWeights(
    collisions=1.0,
    collision_frequency=10.0,
    equivalence_mean=0.0,
    equivalence_variance=0.0,
    key_balance=0.0,
)


def build_scenario_context(objective=COLLISION_ONLY):
    """
    Two swappable roles (0 and 1) over keys {0, 1}, plus two pinned roles.

    item 0 = roles (0, 3), frequency 10
    item 1 = roles (2, 1), frequency 5

    Role 2 is pinned to key 1 and role 3 to key 0. With roles 0/1 holding
    keys 0/1 the items read (0, 0) and (1, 1); after swapping both read
    (1, 0) and collide.
    """
    return ProblemContext(
        item_roles=[(0, 3), (2, 1)],
        frequencies=[10, 5],
        allowed_keys=[{0, 1}, {0, 1}, {1}, {0}],
        n_keys=2,
        equivalence=np.array([[1.0, 2.0], [3.0, 4.0]]),
        max_parts=2,
        objective=objective,
    )


@pytest.fixture
def scenario_context():
    return build_scenario_context()


@pytest.fixture
def scenario_assignment():
    """Roles 0..3 hold keys 0, 1, 1, 0: no collision yet."""
    return np.array([0, 1, 1, 0], dtype=np.int64)


@pytest.fixture
def colliding_assignment():
    """Roles 0..3 hold keys 1, 0, 1, 0: both items read (1, 0)."""
    return np.array([1, 0, 1, 0], dtype=np.int64)
