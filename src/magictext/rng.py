# src/magictext/rng.py
"""
Fallback random source for callers that do not supply a picker.

Each thread gets its own ``random.Random``, created lazily and seeded from a
process-wide counter. Only the counter is shared, behind a lock, so threads
never contend on (or corrupt) a common generator. Pass an explicit picker or a
seeded ``random.Random`` to ``Pen.render``/``Pen.render_random`` whenever the
output must be reproducible.
"""
from __future__ import annotations

import random
import threading
import time
from typing import Callable

from .errors import NullArgumentError

Picker = Callable[[int], int]

_SEED_MASK = 0x7FFFFFFF

_lock = threading.Lock()
_local = threading.local()
_next_seed = max((1073741827 * time.time_ns() + 1073741789) & _SEED_MASK, 1)


def _take_seed() -> int:
    global _next_seed
    with _lock:
        seed = _next_seed
        _next_seed = max((_next_seed + 1) & _SEED_MASK, 1)
    return seed


def reseed(seed: int) -> None:
    """Set the seed handed to the next thread that creates its generator."""
    global _next_seed
    with _lock:
        _next_seed = max(int(seed) & _SEED_MASK, 1)


def thread_random() -> random.Random:
    """This thread's generator (created on first use)."""
    rng = getattr(_local, "random", None)
    if rng is None:
        rng = random.Random(_take_seed())
        _local.random = rng
    return rng


def random_picker(rng: random.Random) -> Picker:
    """Picker drawing uniformly from ``[0, max(n, 1))`` with ``rng``."""
    if rng is None:
        raise NullArgumentError("random", "(pseudo-)random number generator may not be None")

    def pick(n: int) -> int:
        return rng.randrange(n) if n > 0 else 0
    return pick


def default_pick(n: int) -> int:
    # look the generator up per call: a cursor may be pulled from another thread
    return thread_random().randrange(n) if n > 0 else 0


def constant_picker(value: int = 0) -> Picker:
    """Always returns ``value``; handy for deterministic runs and tests."""
    return lambda n: value
