"""Tests for sparse snapshot capture and restore."""

import numpy as np

from keymap_annealing.algorithms.diff_update import apply_diff
from keymap_annealing.algorithms.snapshot import capture, restore
from keymap_annealing.core.state import OptimizerState, states_identical


def test_capture_records_items_buckets_and_aggregates(scenario_context, scenario_assignment):
    """Every affected item and its current bucket are captured."""
    state = OptimizerState.from_assignment(scenario_context, scenario_assignment)
    snapshot = capture(state, [0, 1])

    assert snapshot.codes == [(0, 4), (1, 8)]
    assert snapshot.keys == [(0, (0, 0)), (1, (1, 1))]
    assert snapshot.equiv_contribs == [(0, 10.0), (1, 20.0)]
    assert snapshot.equiv_sq_contribs == [(0, 10.0), (1, 80.0)]
    assert snapshot.buckets == [(4, 1), (8, 1)]
    assert snapshot.bucket_freqs == [(4, 10), (8, 5)]
    assert snapshot.collision_count == 0
    assert snapshot.collision_frequency == 0
    assert snapshot.total_equiv_weighted == 30.0
    assert snapshot.total_equiv_sq_weighted == 90.0
    assert snapshot.key_weighted_usage.tolist() == [20.0, 10.0]

    # The usage vector is a copy, not a view
    state.key_weighted_usage[0] = 0.0
    assert snapshot.key_weighted_usage[0] == 20.0


def test_shared_bucket_recorded_twice(scenario_context, colliding_assignment):
    """Two items in one bucket capture it twice with identical values."""
    state = OptimizerState.from_assignment(scenario_context, colliding_assignment)
    snapshot = capture(state, [0, 1])
    assert snapshot.buckets == [(5, 2), (5, 2)]
    assert snapshot.bucket_freqs == [(5, 15), (5, 15)]


def test_entered_bucket_journaled_once(scenario_context, scenario_assignment):
    """Both items enter bucket 5; it is journaled once with its prior value."""
    state = OptimizerState.from_assignment(scenario_context, scenario_assignment)
    snapshot = capture(state, [0, 1])

    assignment = scenario_assignment.copy()
    assignment[0], assignment[1] = 1, 0
    apply_diff(scenario_context, state, assignment, [0, 1], snapshot=snapshot)

    entered = [entry for entry in snapshot.buckets if entry[0] == 5]
    assert entered == [(5, 0)]
    assert (5, 0) in snapshot.bucket_freqs


def test_restore_undoes_diff(scenario_context, scenario_assignment):
    """Restore returns the state to its exact pre-diff values."""
    state = OptimizerState.from_assignment(scenario_context, scenario_assignment)
    before = state.copy()
    snapshot = capture(state, [0, 1])

    assignment = scenario_assignment.copy()
    assignment[0], assignment[1] = 1, 0
    apply_diff(scenario_context, state, assignment, [0, 1], snapshot=snapshot)
    assert not states_identical(state, before)

    restore(state, snapshot)
    assert states_identical(state, before)
    assert state.bucket_counts[5] == 0
    assert state.bucket_freqs[5] == 0


def test_restore_after_breaking_shared_bucket(scenario_context, colliding_assignment):
    """Duplicated bucket entries restore the shared bucket correctly."""
    state = OptimizerState.from_assignment(scenario_context, colliding_assignment)
    before = state.copy()
    snapshot = capture(state, [0, 1])

    assignment = colliding_assignment.copy()
    assignment[0], assignment[1] = 0, 1
    apply_diff(scenario_context, state, assignment, [0, 1], snapshot=snapshot)
    assert state.bucket_counts[5] == 0

    restore(state, snapshot)
    assert states_identical(state, before)
    assert np.count_nonzero(state.bucket_counts) == 1
