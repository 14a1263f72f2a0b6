"""Read-only problem context shared by every annealing chain."""

import numpy as np
from typing import Iterable, Optional, Sequence, Tuple

from keymap_annealing.objective.score import ObjectiveWeights, compute_score


class ProblemContext:
    """
    Precomputed, immutable description of a key-assignment problem.

    Items are encoded by the keys assigned to an ordered list of roles.
    Two items whose key sequences are identical share a code and therefore
    collide. The context owns the role -> affected items index, the item
    frequencies, the per-role permitted key sets and the key-pair effort
    table used for the equivalence cost.

    Attributes:
        item_roles: Tuple of role tuples, one per item
        frequencies: Item weights of shape (n_items,), int64
        n_keys: Number of distinct keys (keys are 0..n_keys-1)
        equivalence: Effort matrix of shape (n_keys, n_keys)
        max_parts: Maximum number of roles per item
        objective: Weights for the reference objective
    """

    def __init__(
        self,
        item_roles: Sequence[Sequence[int]],
        frequencies: Sequence[int],
        allowed_keys: Sequence[Iterable[int]],
        n_keys: int,
        equivalence: np.ndarray,
        max_parts: int = 4,
        objective: Optional[ObjectiveWeights] = None,
    ):
        """
        Build the context and its role -> items index.

        Args:
            item_roles: For each item, the ordered roles making up its code
            frequencies: Non-negative weight for each item
            allowed_keys: For each role, the keys it may hold
            n_keys: Alphabet size
            equivalence: Key-pair effort matrix of shape (n_keys, n_keys)
            max_parts: Maximum number of roles per item (default: 4)
            objective: Objective weights (default: ObjectiveWeights())
        """
        if n_keys <= 0:
            raise ValueError(f"n_keys must be positive, got {n_keys}")
        if max_parts <= 0:
            raise ValueError(f"max_parts must be positive, got {max_parts}")
        if len(item_roles) != len(frequencies):
            raise ValueError(
                f"Mismatch: {len(item_roles)} items vs {len(frequencies)} frequencies"
            )

        equivalence = np.asarray(equivalence, dtype=np.float64)
        if equivalence.shape != (n_keys, n_keys):
            raise ValueError(
                f"equivalence must have shape ({n_keys}, {n_keys}), got {equivalence.shape}"
            )

        frequencies = np.asarray(frequencies, dtype=np.int64)
        if frequencies.ndim != 1:
            raise ValueError(f"frequencies must be 1D, got {frequencies.ndim}D")
        if np.any(frequencies < 0):
            raise ValueError("frequencies must be non-negative")

        allowed = []
        for role, keys in enumerate(allowed_keys):
            key_set = frozenset(int(k) for k in keys)
            if not key_set:
                raise ValueError(f"Role {role} has no permitted keys")
            if min(key_set) < 0 or max(key_set) >= n_keys:
                raise ValueError(f"Role {role} permits keys outside [0, {n_keys})")
            allowed.append(key_set)
        n_roles = len(allowed)

        roles_per_item = []
        affected = [[] for _ in range(n_roles)]
        for item, roles in enumerate(item_roles):
            roles = tuple(int(r) for r in roles)
            if not roles:
                raise ValueError(f"Item {item} references no roles")
            if len(roles) > max_parts:
                raise ValueError(
                    f"Item {item} has {len(roles)} roles, max_parts is {max_parts}"
                )
            for role in roles:
                if role < 0 or role >= n_roles:
                    raise ValueError(f"Item {item} references unknown role {role}")
                # An item may use the same role twice; index it once.
                if not affected[role] or affected[role][-1] != item:
                    affected[role].append(item)
            roles_per_item.append(roles)

        if objective is None:
            objective = ObjectiveWeights()
        errors = objective.validate()
        if errors:
            raise ValueError(f"Invalid objective weights: {'; '.join(errors)}")

        self.item_roles = tuple(roles_per_item)
        self.frequencies = frequencies
        self.n_keys = n_keys
        self.equivalence = equivalence
        self.max_parts = max_parts
        self.objective = objective

        self._allowed = tuple(allowed)
        self._affected = tuple(tuple(items) for items in affected)
        self._radix = n_keys + 1
        self._total_frequency = int(frequencies.sum())
        self._balance_keys = np.array(
            sorted(frozenset().union(*allowed)), dtype=np.int64
        )

    @property
    def n_items(self) -> int:
        return len(self.item_roles)

    @property
    def n_roles(self) -> int:
        return len(self._allowed)

    @property
    def n_codes(self) -> int:
        """Size of the code space, one bucket per possible key sequence."""
        return self._radix ** self.max_parts

    @property
    def total_frequency(self) -> int:
        return self._total_frequency

    @property
    def balance_keys(self) -> np.ndarray:
        """Keys permitted to at least one role."""
        return self._balance_keys

    def allowed_keys(self, role: int) -> frozenset:
        return self._allowed[role]

    def is_allowed(self, role: int, key: int) -> bool:
        return key in self._allowed[role]

    def affected_items(self, role: int) -> Tuple[int, ...]:
        """Items whose code depends on the key held by ``role``."""
        return self._affected[role]

    def frequency(self, item: int) -> int:
        return int(self.frequencies[item])

    def derive(self, item: int, assignment: np.ndarray) -> Tuple[int, Tuple[int, ...]]:
        """
        Derive an item's code and key sequence under ``assignment``.

        The code is a mixed-radix number with digit ``key + 1`` per part,
        so a shorter key sequence never shares a code with a longer one.

        Returns:
            Tuple of (code, keys)
        """
        keys = tuple(int(assignment[role]) for role in self.item_roles[item])
        code = 0
        place = 1
        for key in keys:
            code += (key + 1) * place
            place *= self._radix
        return code, keys

    def avg_equivalence(self, keys: Sequence[int]) -> float:
        """Mean key-pair effort over consecutive keys (0.0 for a single key)."""
        if len(keys) < 2:
            return 0.0
        total = 0.0
        for a, b in zip(keys[:-1], keys[1:]):
            total += self.equivalence[a, b]
        return float(total / (len(keys) - 1))

    def score(self, state) -> float:
        """Objective value of ``state`` under this context's weights."""
        return compute_score(
            state, self.objective, self._total_frequency, self._balance_keys
        )
