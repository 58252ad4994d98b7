# src/govprop/engine/seeding.py
"""Seed derivation for reproducible generation.

A run has one base seed. Each iteration draws its own 32-bit seed from a
Random seeded with the base, so any single draw can be replayed from its
recorded seed alone. Parallel workers get a per-test base derived from the
framework seed, the test id and the worker index.
"""

from __future__ import annotations

import hashlib
import random
import secrets

SEED_BITS = 32


def fresh_seed() -> int:
    """A new random base seed for runs that did not configure one."""
    return secrets.randbits(SEED_BITS)


def derive_seed(base: int, test_id: str, worker_index: int = 0) -> int:
    """Stable 32-bit seed for (base, test_id, worker_index).

    Uses SHA-256 rather than hash() so the result is identical across
    processes regardless of PYTHONHASHSEED.
    """
    digest = hashlib.sha256(f"{base}:{test_id}:{worker_index}".encode()).digest()
    return int.from_bytes(digest[:4], "big")


class SeedSequence:
    """Per-iteration seed source for one run.

    When per-iteration seeding is disabled, every draw shares the run's
    single Random and iteration seeds are reported as None.
    """

    def __init__(self, base_seed: int, *, per_iteration: bool = True) -> None:
        self.base_seed = base_seed
        self._per_iteration = per_iteration
        self._run_rng = random.Random(base_seed)

    def next(self) -> tuple[random.Random, int | None]:
        """Random source and recorded seed for the next draw."""
        if not self._per_iteration:
            return self._run_rng, None
        seed = self._run_rng.getrandbits(SEED_BITS)
        return random.Random(seed), seed
