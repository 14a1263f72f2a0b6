"""Tests for the read-only problem context."""

import numpy as np
import pytest

from keymap_annealing.core.context import ProblemContext
from keymap_annealing.objective.score import ObjectiveWeights


def _context(**overrides):
    kwargs = dict(
        item_roles=[(0,), (0, 1), (1, 1, 2)],
        frequencies=[3, 2, 1],
        allowed_keys=[{0, 1}, {1, 2}, {0, 2}],
        n_keys=3,
        equivalence=np.arange(9, dtype=np.float64).reshape(3, 3),
        max_parts=3,
    )
    kwargs.update(overrides)
    return ProblemContext(**kwargs)


def test_basic_properties():
    """Test sizes and derived totals."""
    ctx = _context()
    assert ctx.n_items == 3
    assert ctx.n_roles == 3
    assert ctx.n_codes == 4 ** 3
    assert ctx.total_frequency == 6
    assert ctx.balance_keys.tolist() == [0, 1, 2]
    assert ctx.allowed_keys(1) == frozenset({1, 2})
    assert ctx.is_allowed(2, 0)
    assert not ctx.is_allowed(2, 1)
    assert ctx.frequency(0) == 3


def test_affected_items_index():
    """Each role lists its items once, in item order."""
    ctx = _context()
    assert ctx.affected_items(0) == (0, 1)
    # Item 2 uses role 1 twice but is indexed once
    assert ctx.affected_items(1) == (1, 2)
    assert ctx.affected_items(2) == (2,)


def test_derive_codes_and_keys():
    """Codes are mixed-radix over key + 1, keys follow role order."""
    ctx = _context()
    assignment = np.array([1, 2, 0])

    code, keys = ctx.derive(0, assignment)
    assert keys == (1,)
    assert code == 2

    code, keys = ctx.derive(1, assignment)
    assert keys == (1, 2)
    assert code == 2 + 3 * 4

    code, keys = ctx.derive(2, assignment)
    assert keys == (2, 2, 0)
    assert code == 3 + 3 * 4 + 1 * 16


def test_different_lengths_never_share_code():
    """A one-key item and a two-key item ending in key 0 stay distinct."""
    ctx = ProblemContext(
        item_roles=[(0,), (0, 1)],
        frequencies=[1, 1],
        allowed_keys=[{0}, {0}],
        n_keys=1,
        equivalence=np.zeros((1, 1)),
        max_parts=2,
    )
    assignment = np.array([0, 0])
    assert ctx.derive(0, assignment)[0] != ctx.derive(1, assignment)[0]


def test_avg_equivalence():
    """Mean over consecutive key pairs; zero for a single key."""
    ctx = _context()
    eq = ctx.equivalence
    assert ctx.avg_equivalence((2,)) == 0.0
    assert ctx.avg_equivalence((0, 2)) == eq[0, 2]
    assert ctx.avg_equivalence((2, 2, 0)) == pytest.approx((eq[2, 2] + eq[2, 0]) / 2)


def test_invalid_inputs():
    """Bad construction inputs raise ValueError."""
    with pytest.raises(ValueError):
        _context(frequencies=[1, 2])
    with pytest.raises(ValueError):
        _context(frequencies=[1, -2, 3])
    with pytest.raises(ValueError):
        _context(item_roles=[(0,), (0, 5), (1,)])
    with pytest.raises(ValueError):
        _context(item_roles=[(0,), (), (1,)])
    with pytest.raises(ValueError):
        _context(max_parts=2)
    with pytest.raises(ValueError):
        _context(allowed_keys=[{0}, set(), {1}])
    with pytest.raises(ValueError):
        _context(allowed_keys=[{0}, {3}, {1}])
    with pytest.raises(ValueError):
        _context(equivalence=np.zeros((2, 2)))
    with pytest.raises(ValueError):
        _context(n_keys=0)
    with pytest.raises(ValueError):
        _context(objective=ObjectiveWeights(collisions=-1.0))
