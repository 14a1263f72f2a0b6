"""Incremental swap-move machinery."""

from keymap_annealing.algorithms.bucket_delta import bucket_delta
from keymap_annealing.algorithms.diff_update import apply_diff
from keymap_annealing.algorithms.snapshot import SwapSnapshot, capture, restore
from keymap_annealing.algorithms.swap_move import (
    affected_union,
    metropolis_accept,
    try_swap,
)

__all__ = [
    "bucket_delta",
    "apply_diff",
    "SwapSnapshot",
    "capture",
    "restore",
    "affected_union",
    "metropolis_accept",
    "try_swap",
]
