from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import SpreadStrategy, check_probability, check_side
from .lattice import Lattice
from .spread import burn


@dataclass(frozen=True)
class TrialResult:
    """Burn time of one generate-and-spread cycle."""

    p: float
    steps: int


def run_trial(
    side: int,
    p: float,
    rng: np.random.Generator,
    strategy: Optional[SpreadStrategy] = None,
    lattice: Optional[Lattice] = None,
) -> TrialResult:
    """
    Generate one lattice, burn it to quiescence and return the step count.

    ``lattice`` may be a scratch lattice of the same side owned by the caller;
    every cell is overwritten before use.
    """
    if lattice is None:
        lattice = Lattice(side)
    elif lattice.side != side:
        raise ValueError(f"Scratch lattice has side {lattice.side}, expected {side}")
    lattice.populate(p, rng)
    return TrialResult(p=float(p), steps=burn(lattice, strategy))


def run_trials(
    side: int,
    p: float,
    count: int,
    rng: np.random.Generator,
    strategy: Optional[SpreadStrategy] = None,
) -> np.ndarray:
    """
    Run ``count`` independent trials on one scratch lattice.

    Module-level so it can be shipped to a ProcessPoolExecutor worker.
    """
    side = check_side(side)
    p = check_probability(p)
    strategy = strategy or SpreadStrategy()
    scratch = Lattice(side)
    steps = np.empty(count, dtype=np.int64)
    for i in range(count):
        steps[i] = run_trial(side, p, rng, strategy, scratch).steps
    return steps
