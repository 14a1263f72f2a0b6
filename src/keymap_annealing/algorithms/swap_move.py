"""
Swap move for simulated annealing over key assignments.

A move exchanges the keys held by two roles, updates only the items those
roles affect, and applies the Metropolis criterion. A rejected move is
undone from a sparse snapshot, leaving the state exactly as it was.
"""

import math
from typing import List

import numpy as np

from keymap_annealing.algorithms.diff_update import apply_diff
from keymap_annealing.algorithms.snapshot import capture, restore
from keymap_annealing.core.state import OptimizerState, check_consistency


def affected_union(context, role_a: int, role_b: int) -> List[int]:
    """Items affected by ``role_a`` followed by those only ``role_b`` affects."""
    items_a = context.affected_items(role_a)
    seen = set(items_a)
    union = list(items_a)
    for item in context.affected_items(role_b):
        if item not in seen:
            union.append(item)
    return union


def metropolis_accept(delta: float, temperature: float, rng) -> bool:
    """
    Metropolis acceptance test.

    Improving or neutral moves are always accepted without drawing from
    ``rng``; worsening moves are accepted with probability
    exp(-delta / temperature).
    """
    if delta <= 0.0:
        return True
    return rng.random() < math.exp(-delta / temperature)


def try_swap(
    context,
    state: OptimizerState,
    assignment: np.ndarray,
    role_a: int,
    role_b: int,
    temperature: float,
    rng,
    debug: bool = False,
) -> bool:
    """
    Propose exchanging the keys of ``role_a`` and ``role_b``.

    Args:
        context: ProblemContext (read only)
        state: OptimizerState of this chain (mutated on acceptance)
        assignment: Key per role (mutated on acceptance)
        role_a: First role
        role_b: Second role
        temperature: Annealing temperature, must be > 0
        rng: Uniform [0, 1) source exposing ``random()``
        debug: If True, cross-check the state against a full rebuild
            after the move

    Returns:
        True if the swap was accepted and kept, False otherwise. On False
        the assignment and state are exactly as before the call.
    """
    if role_a == role_b:
        return False
    key_a = int(assignment[role_a])
    key_b = int(assignment[role_b])
    if key_a == key_b:
        return False
    if not context.is_allowed(role_a, key_b) or not context.is_allowed(role_b, key_a):
        return False

    old_score = context.score(state)
    affected = affected_union(context, role_a, role_b)
    snapshot = capture(state, affected)

    assignment[role_a] = key_b
    assignment[role_b] = key_a
    apply_diff(context, state, assignment, affected, snapshot=snapshot)

    delta = context.score(state) - old_score

    if metropolis_accept(delta, temperature, rng):
        accepted = True
    else:
        assignment[role_a] = key_a
        assignment[role_b] = key_b
        restore(state, snapshot)
        accepted = False

    if debug:
        check_consistency(state, context, assignment)
    return accepted
