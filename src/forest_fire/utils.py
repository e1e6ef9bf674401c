# src/forest_fire/utils.py
from __future__ import annotations

from typing import List, Optional

import numpy as np


def seed_sequence(seed: Optional[int] = None) -> np.random.SeedSequence:
    """
    Root of every random stream in a run.

    With ``seed=None`` fresh OS entropy is drawn; ``.entropy`` on the returned
    sequence reproduces the run.
    """
    return np.random.SeedSequence(seed)


def make_rng(seed: Optional[int | np.random.SeedSequence] = None) -> np.random.Generator:
    """Explicit random stream (never the global numpy RNG)."""
    return np.random.default_rng(seed)


def spawn_streams(rng: np.random.Generator, count: int) -> List[np.random.Generator]:
    """Independent child streams, e.g. one per block of trials."""
    return rng.spawn(count)
