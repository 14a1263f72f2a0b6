"""Mutable optimizer state: per-item caches, buckets and running aggregates."""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np


class ConsistencyError(RuntimeError):
    """Incrementally maintained state no longer matches a full recomputation."""


@dataclass(eq=False)
class OptimizerState:
    """
    Running state of one annealing chain.

    Per item it caches the current code, key sequence and equivalence
    contributions; per code it tracks bucket occupancy and frequency sum;
    globally it keeps the collision totals, the equivalence sums and the
    frequency-weighted usage of every key. Exclusively owned by one chain.

    Attributes:
        codes: Current code per item, shape (n_items,)
        keys: Current key tuple per item
        equiv_contrib: avg_equivalence * frequency per item
        equiv_sq_contrib: avg_equivalence**2 * frequency per item
        bucket_counts: Occupancy per code, shape (n_codes,)
        bucket_freqs: Frequency sum per code, shape (n_codes,)
        total_collisions: Sum over buckets of max(count - 1, 0)
        collision_frequency: Frequency of all items in colliding buckets
        total_equiv_weighted: Sum of equiv_contrib
        total_equiv_sq_weighted: Sum of equiv_sq_contrib
        key_weighted_usage: Frequency-weighted occurrences per key
    """

    codes: np.ndarray
    keys: List[Tuple[int, ...]]
    equiv_contrib: np.ndarray
    equiv_sq_contrib: np.ndarray
    bucket_counts: np.ndarray
    bucket_freqs: np.ndarray
    total_collisions: int = 0
    collision_frequency: int = 0
    total_equiv_weighted: float = 0.0
    total_equiv_sq_weighted: float = 0.0
    key_weighted_usage: np.ndarray = field(default_factory=lambda: np.zeros(0))

    @classmethod
    def from_assignment(cls, context, assignment: np.ndarray) -> "OptimizerState":
        """
        Build the full state for a starting assignment.

        Args:
            context: ProblemContext describing the problem
            assignment: Key per role, shape (n_roles,)

        Returns:
            Freshly initialized OptimizerState
        """
        assignment = np.asarray(assignment)
        if assignment.shape != (context.n_roles,):
            raise ValueError(
                f"assignment must have shape ({context.n_roles},), got {assignment.shape}"
            )
        for role in range(context.n_roles):
            if not context.is_allowed(role, int(assignment[role])):
                raise ValueError(
                    f"Role {role} may not hold key {int(assignment[role])}"
                )

        n_items = context.n_items
        codes = np.zeros(n_items, dtype=np.int64)
        keys = []
        equiv_contrib = np.zeros(n_items, dtype=np.float64)
        equiv_sq_contrib = np.zeros(n_items, dtype=np.float64)
        bucket_counts = np.zeros(context.n_codes, dtype=np.int64)
        bucket_freqs = np.zeros(context.n_codes, dtype=np.int64)
        usage = np.zeros(context.n_keys, dtype=np.float64)

        for item in range(n_items):
            code, item_keys = context.derive(item, assignment)
            freq = context.frequency(item)
            avg = context.avg_equivalence(item_keys)

            codes[item] = code
            keys.append(item_keys)
            equiv_contrib[item] = avg * freq
            equiv_sq_contrib[item] = avg * avg * freq
            bucket_counts[code] += 1
            bucket_freqs[code] += freq
            for key in item_keys:
                usage[key] += freq

        total_collisions, collision_frequency = collision_totals(
            bucket_counts, bucket_freqs
        )
        return cls(
            codes=codes,
            keys=keys,
            equiv_contrib=equiv_contrib,
            equiv_sq_contrib=equiv_sq_contrib,
            bucket_counts=bucket_counts,
            bucket_freqs=bucket_freqs,
            total_collisions=total_collisions,
            collision_frequency=collision_frequency,
            total_equiv_weighted=float(equiv_contrib.sum()),
            total_equiv_sq_weighted=float(equiv_sq_contrib.sum()),
            key_weighted_usage=usage,
        )

    def copy(self) -> "OptimizerState":
        """Private copy for an independent chain."""
        return OptimizerState(
            codes=self.codes.copy(),
            keys=list(self.keys),
            equiv_contrib=self.equiv_contrib.copy(),
            equiv_sq_contrib=self.equiv_sq_contrib.copy(),
            bucket_counts=self.bucket_counts.copy(),
            bucket_freqs=self.bucket_freqs.copy(),
            total_collisions=self.total_collisions,
            collision_frequency=self.collision_frequency,
            total_equiv_weighted=self.total_equiv_weighted,
            total_equiv_sq_weighted=self.total_equiv_sq_weighted,
            key_weighted_usage=self.key_weighted_usage.copy(),
        )

    def recompute_aggregates(self, context) -> Dict[str, object]:
        """
        Recompute every global aggregate from the per-item caches and buckets.

        Returns:
            Dictionary keyed by aggregate attribute name
        """
        total_collisions, collision_frequency = collision_totals(
            self.bucket_counts, self.bucket_freqs
        )
        usage = np.zeros(context.n_keys, dtype=np.float64)
        for item, item_keys in enumerate(self.keys):
            freq = context.frequency(item)
            for key in item_keys:
                usage[key] += freq
        return {
            "total_collisions": total_collisions,
            "collision_frequency": collision_frequency,
            "total_equiv_weighted": float(self.equiv_contrib.sum()),
            "total_equiv_sq_weighted": float(self.equiv_sq_contrib.sum()),
            "key_weighted_usage": usage,
        }


def collision_totals(bucket_counts: np.ndarray, bucket_freqs: np.ndarray) -> Tuple[int, int]:
    """
    Collision count and collision frequency over all buckets.

    Returns:
        Tuple of (sum of count - 1 over colliding buckets,
        sum of frequency over colliding buckets)
    """
    colliding = bucket_counts > 1
    return (
        int(np.sum(bucket_counts[colliding] - 1)),
        int(np.sum(bucket_freqs[colliding])),
    )


def check_consistency(
    state: OptimizerState,
    context,
    assignment: np.ndarray,
    rtol: float = 1e-9,
    atol: float = 1e-6,
) -> None:
    """
    Compare ``state`` with a from-scratch rebuild for ``assignment``.

    Integer fields must match exactly; float sums are compared with
    tolerance since summation order differs.

    Raises:
        ConsistencyError: Listing every field that drifted
    """
    expected = OptimizerState.from_assignment(context, assignment)
    errors = []

    if np.any(state.bucket_counts < 0):
        errors.append("bucket_counts has negative occupancy")
    if np.any(state.bucket_freqs < 0):
        errors.append("bucket_freqs has negative frequency sum")
    if not np.array_equal(state.codes, expected.codes):
        errors.append("codes differ from derived codes")
    if state.keys != expected.keys:
        errors.append("keys differ from derived key sequences")
    if not np.array_equal(state.bucket_counts, expected.bucket_counts):
        errors.append("bucket_counts differ from recount")
    if not np.array_equal(state.bucket_freqs, expected.bucket_freqs):
        errors.append("bucket_freqs differ from recount")
    for name in ("total_collisions", "collision_frequency"):
        got, want = getattr(state, name), getattr(expected, name)
        if got != want:
            errors.append(f"{name}: maintained {got}, recomputed {want}")
    for name in ("total_equiv_weighted", "total_equiv_sq_weighted"):
        got, want = getattr(state, name), getattr(expected, name)
        if not np.isclose(got, want, rtol=rtol, atol=atol):
            errors.append(f"{name}: maintained {got}, recomputed {want}")
    for name in ("equiv_contrib", "equiv_sq_contrib", "key_weighted_usage"):
        if not np.allclose(getattr(state, name), getattr(expected, name), rtol=rtol, atol=atol):
            errors.append(f"{name} differs from recomputation")

    if errors:
        raise ConsistencyError("; ".join(errors))


def states_identical(a: OptimizerState, b: OptimizerState) -> bool:
    """Field-by-field exact comparison of two states."""
    return (
        np.array_equal(a.codes, b.codes)
        and a.keys == b.keys
        and np.array_equal(a.equiv_contrib, b.equiv_contrib)
        and np.array_equal(a.equiv_sq_contrib, b.equiv_sq_contrib)
        and np.array_equal(a.bucket_counts, b.bucket_counts)
        and np.array_equal(a.bucket_freqs, b.bucket_freqs)
        and a.total_collisions == b.total_collisions
        and a.collision_frequency == b.collision_frequency
        and a.total_equiv_weighted == b.total_equiv_weighted
        and a.total_equiv_sq_weighted == b.total_equiv_sq_weighted
        and np.array_equal(a.key_weighted_usage, b.key_weighted_usage)
    )
