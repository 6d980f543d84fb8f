"""A randomly seeded pseudo-random engine."""

from __future__ import annotations

import os
import random

_SEED_BYTES = 1024 * 4


def get_random_engine() -> random.Random:
    """Return a pseudo-random generator seeded from the operating system's entropy."""
    return random.Random(int.from_bytes(os.urandom(_SEED_BYTES), "big"))