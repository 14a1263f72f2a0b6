#!/usr/bin/env python3
"""Demo CLI: anneal a synthetic key assignment with incremental swap moves."""

import argparse
import sys
import time
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import numpy as np
from tqdm import tqdm

from keymap_annealing import (
    OptimizerState,
    generate_synthetic_problem,
    random_valid_assignment,
    try_swap,
)
from keymap_annealing.core.state import check_consistency
from keymap_annealing.data.synthetic_generators import role_groups
from keymap_annealing.objective.score import equivalence_stats, key_balance


def summarize(context, state, label):
    mean, variance = equivalence_stats(state, context.total_frequency)
    print(f"{label}:")
    print(f"  score: {context.score(state):.4f}")
    print(f"  collisions: {state.total_collisions}")
    print(f"  collision frequency: {state.collision_frequency}")
    print(f"  equivalence mean/variance: {mean:.4f} / {variance:.4f}")
    print(f"  key balance: {key_balance(state, context.balance_keys):.6f}")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Demo CLI for incremental swap annealing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--n-roles", type=int, default=60, help="Number of roles (default: 60)")
    parser.add_argument("--n-keys", type=int, default=12, help="Number of keys (default: 12)")
    parser.add_argument("--n-items", type=int, default=1000, help="Number of items (default: 1000)")
    parser.add_argument("--max-parts", type=int, default=3, help="Roles per item (default: 3)")
    parser.add_argument("--n-groups", type=int, default=4, help="Role groups (default: 4)")
    parser.add_argument("--steps", type=int, default=20000, help="Swap proposals (default: 20000)")
    parser.add_argument(
        "--initial-temperature", type=float, default=1.0,
        help="Starting temperature (default: 1.0)",
    )
    parser.add_argument(
        "--cooling-rate", type=float, default=0.9995,
        help="Geometric cooling per step (default: 0.9995)",
    )
    parser.add_argument(
        "--min-temperature", type=float, default=1e-4,
        help="Temperature floor (default: 1e-4)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: None)")
    parser.add_argument(
        "--verify-every", type=int, default=0,
        help="Cross-check state against a full rebuild every N steps (default: off)",
    )
    parser.add_argument(
        "--enable-logging", action="store_true",
        help="Print a progress line every 1000 steps",
    )

    args = parser.parse_args()
    if args.initial_temperature <= 0 or args.min_temperature <= 0:
        parser.error("temperatures must be positive")

    print("Keymap Annealing Demo CLI")
    print("-" * 40)
    print("Parameters:")
    print(f"  Roles: {args.n_roles}  Keys: {args.n_keys}  Items: {args.n_items}")
    print(f"  Steps: {args.steps}  T0: {args.initial_temperature}  rate: {args.cooling_rate}")
    if args.seed is not None:
        print(f"  Seed: {args.seed}")
    print()

    context = generate_synthetic_problem(
        n_roles=args.n_roles,
        n_keys=args.n_keys,
        n_items=args.n_items,
        max_parts=args.max_parts,
        n_groups=args.n_groups,
        seed=args.seed,
    )
    assignment = random_valid_assignment(context, seed=args.seed)
    state = OptimizerState.from_assignment(context, assignment)
    summarize(context, state, "Initial")

    groups = [g for g in role_groups(context) if len(g) > 1]
    if not groups:
        print("No two roles share a key set; nothing to swap.")
        return

    rng = np.random.default_rng(args.seed)
    temperature = args.initial_temperature
    n_accepted = 0
    history = []
    best_score = context.score(state)
    best_assignment = assignment.copy()
    start_time = time.time()

    for step in tqdm(range(args.steps), desc="Annealing", leave=False):
        group = groups[int(rng.integers(0, len(groups)))]
        role_a, role_b = rng.choice(group, size=2, replace=False)
        accepted = try_swap(
            context, state, assignment, int(role_a), int(role_b), temperature, rng
        )
        if accepted:
            n_accepted += 1
            score = context.score(state)
            if score < best_score:
                best_score = score
                best_assignment = assignment.copy()

        if args.verify_every and (step + 1) % args.verify_every == 0:
            check_consistency(state, context, assignment)

        if args.enable_logging and (step + 1) % 1000 == 0:
            history.append({
                "step": step + 1,
                "score": context.score(state),
                "best_score": best_score,
                "temperature": temperature,
                "acceptance_rate": n_accepted / (step + 1),
            })
            entry = history[-1]
            print(f"  [step {entry['step']:6d}] score={entry['score']:.4f} "
                  f"best={entry['best_score']:.4f} T={temperature:.5f} "
                  f"accept_rate={entry['acceptance_rate']:.3f}")

        temperature = max(args.min_temperature, temperature * args.cooling_rate)

    elapsed = time.time() - start_time
    print(f"\nFinished {args.steps} proposals in {elapsed:.1f}s "
          f"({n_accepted} accepted)")
    summarize(context, state, "Final")

    best_state = OptimizerState.from_assignment(context, best_assignment)
    summarize(context, best_state, "Best")


if __name__ == "__main__":
    main()
