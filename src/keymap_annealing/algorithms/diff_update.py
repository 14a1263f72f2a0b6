"""Incremental update of the optimizer state after an assignment change."""

import numpy as np
from typing import Iterable, Optional

from keymap_annealing.algorithms.bucket_delta import bucket_delta
from keymap_annealing.algorithms.snapshot import SwapSnapshot
from keymap_annealing.core.state import OptimizerState


def apply_diff(
    context,
    state: OptimizerState,
    assignment: np.ndarray,
    affected_items: Iterable[int],
    snapshot: Optional[SwapSnapshot] = None,
) -> None:
    """
    Re-derive the affected items and fold their changes into ``state``.

    Aggregate deltas are accumulated locally and written back once at the
    end. Items whose code did not change are skipped entirely. Items are
    processed in order, so an item entering a bucket sees the occupancy
    left by earlier items of the same batch.

    Args:
        context: ProblemContext
        state: State to update in place
        assignment: Current (already modified) assignment
        affected_items: Items whose code may have changed
        snapshot: If given, buckets entered for the first time are
            journaled into it before being modified
    """
    collisions = state.total_collisions
    collision_freq = state.collision_frequency
    equiv_weighted = state.total_equiv_weighted
    equiv_sq_weighted = state.total_equiv_sq_weighted
    usage = state.key_weighted_usage.copy()

    for item in affected_items:
        old_code = int(state.codes[item])
        old_keys = state.keys[item]
        new_code, new_keys = context.derive(item, assignment)

        if new_code == old_code:
            continue

        freq = context.frequency(item)

        if snapshot is not None:
            snapshot.guard_bucket(state, new_code)
        collision_delta, freq_delta = bucket_delta(
            state.bucket_counts, state.bucket_freqs, old_code, new_code, freq
        )
        collisions += collision_delta
        collision_freq += freq_delta

        avg = context.avg_equivalence(new_keys)
        new_contrib = avg * freq
        new_sq_contrib = avg * avg * freq
        equiv_weighted += new_contrib - state.equiv_contrib[item]
        equiv_sq_weighted += new_sq_contrib - state.equiv_sq_contrib[item]
        state.equiv_contrib[item] = new_contrib
        state.equiv_sq_contrib[item] = new_sq_contrib

        for key in old_keys:
            usage[key] -= freq
        for key in new_keys:
            usage[key] += freq

        state.codes[item] = new_code
        state.keys[item] = new_keys

    state.total_collisions = collisions
    state.collision_frequency = collision_freq
    state.total_equiv_weighted = float(equiv_weighted)
    state.total_equiv_sq_weighted = float(equiv_sq_weighted)
    state.key_weighted_usage = usage
