"""Sparse capture and restore of the state touched by one swap."""

from dataclasses import dataclass, field
from typing import Iterable, List, Set, Tuple

import numpy as np

from keymap_annealing.core.state import OptimizerState


@dataclass
class SwapSnapshot:
    """
    Prior values of everything one trial swap may mutate.

    Item and bucket entries are (index, old value) pairs. Two affected
    items sharing a bucket record it twice with the same value; restore
    writes entries in order, so the duplicate is harmless.
    """

    codes: List[Tuple[int, int]] = field(default_factory=list)
    keys: List[Tuple[int, Tuple[int, ...]]] = field(default_factory=list)
    equiv_contribs: List[Tuple[int, float]] = field(default_factory=list)
    equiv_sq_contribs: List[Tuple[int, float]] = field(default_factory=list)
    buckets: List[Tuple[int, int]] = field(default_factory=list)
    bucket_freqs: List[Tuple[int, int]] = field(default_factory=list)
    collision_count: int = 0
    collision_frequency: int = 0
    total_equiv_weighted: float = 0.0
    total_equiv_sq_weighted: float = 0.0
    key_weighted_usage: np.ndarray = field(default_factory=lambda: np.zeros(0))
    seen_codes: Set[int] = field(default_factory=set)

    def record_bucket(self, state: OptimizerState, code: int) -> None:
        self.buckets.append((code, int(state.bucket_counts[code])))
        self.bucket_freqs.append((code, int(state.bucket_freqs[code])))
        self.seen_codes.add(code)

    def guard_bucket(self, state: OptimizerState, code: int) -> None:
        """Record ``code``'s bucket unless it was captured already."""
        if code not in self.seen_codes:
            self.record_bucket(state, code)


def capture(state: OptimizerState, affected_items: Iterable[int]) -> SwapSnapshot:
    """
    Snapshot the affected items, the buckets they occupy and the aggregates.

    Args:
        state: State about to be mutated
        affected_items: Items the swap may touch

    Returns:
        SwapSnapshot to hand to ``restore`` on rejection
    """
    snapshot = SwapSnapshot(
        collision_count=state.total_collisions,
        collision_frequency=state.collision_frequency,
        total_equiv_weighted=state.total_equiv_weighted,
        total_equiv_sq_weighted=state.total_equiv_sq_weighted,
        key_weighted_usage=state.key_weighted_usage.copy(),
    )
    for item in affected_items:
        code = int(state.codes[item])
        snapshot.codes.append((item, code))
        snapshot.keys.append((item, state.keys[item]))
        snapshot.equiv_contribs.append((item, float(state.equiv_contrib[item])))
        snapshot.equiv_sq_contribs.append((item, float(state.equiv_sq_contrib[item])))
        snapshot.record_bucket(state, code)
    return snapshot


def restore(state: OptimizerState, snapshot: SwapSnapshot) -> None:
    """Write every recorded value back into ``state``."""
    state.total_collisions = snapshot.collision_count
    state.collision_frequency = snapshot.collision_frequency
    state.total_equiv_weighted = snapshot.total_equiv_weighted
    state.total_equiv_sq_weighted = snapshot.total_equiv_sq_weighted
    state.key_weighted_usage[:] = snapshot.key_weighted_usage

    for item, code in snapshot.codes:
        state.codes[item] = code
    for item, item_keys in snapshot.keys:
        state.keys[item] = item_keys
    for item, contrib in snapshot.equiv_contribs:
        state.equiv_contrib[item] = contrib
    for item, sq_contrib in snapshot.equiv_sq_contribs:
        state.equiv_sq_contrib[item] = sq_contrib

    for code, count in snapshot.buckets:
        state.bucket_counts[code] = count
    for code, freq in snapshot.bucket_freqs:
        state.bucket_freqs[code] = freq
