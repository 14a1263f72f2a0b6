"""Collision deltas for moving one item between code buckets."""

import numpy as np
from typing import Tuple

from keymap_annealing.core.state import ConsistencyError


def bucket_delta(
    bucket_counts: np.ndarray,
    bucket_freqs: np.ndarray,
    old_code: int,
    new_code: int,
    frequency: int,
) -> Tuple[int, int]:
    """
    Move one item from ``old_code`` to ``new_code`` and report collision deltas.

    The bucket arrays are updated in place. Leaving a bucket that held two
    items breaks the pair, so the remaining occupant's frequency leaves the
    collision total as well; entering a bucket that held one item forms a
    pair, so the existing occupant's frequency joins it.

    Args:
        bucket_counts: Occupancy per code (mutated)
        bucket_freqs: Frequency sum per code (mutated)
        old_code: Code the item leaves
        new_code: Code the item enters
        frequency: The item's frequency

    Returns:
        Tuple of (collision_count_delta, collision_frequency_delta)

    Raises:
        ConsistencyError: If the old bucket is empty or its frequency sum
            is smaller than ``frequency``
    """
    collision_delta = 0
    freq_delta = 0

    old_count = int(bucket_counts[old_code])
    old_freq = int(bucket_freqs[old_code])
    if old_count < 1:
        raise ConsistencyError(f"Bucket {old_code} is empty but an item leaves it")
    if old_freq < frequency:
        raise ConsistencyError(
            f"Bucket {old_code} frequency {old_freq} is below leaving item's {frequency}"
        )
    if old_count > 1:
        collision_delta -= 1
        freq_delta -= frequency
        if old_count == 2:
            freq_delta -= old_freq - frequency
    bucket_counts[old_code] = old_count - 1
    bucket_freqs[old_code] = old_freq - frequency

    new_count = int(bucket_counts[new_code])
    new_freq = int(bucket_freqs[new_code])
    if new_count >= 1:
        collision_delta += 1
        freq_delta += frequency
        if new_count == 1:
            freq_delta += new_freq
    bucket_counts[new_code] = new_count + 1
    bucket_freqs[new_code] = new_freq + frequency

    return collision_delta, freq_delta
