"""
Forest-fire burn-time simulation.

A site lattice is occupied with probability p, its first column is set alight
and the fire spreads synchronously to neighbouring occupied sites until it
dies out. The number of steps this takes (the burn time) is averaged over many
trials and swept over p:

- Lattice: generation of one trial's occupation
- spread: ignition and the burning process
- run_trial / aggregate: single trials and their mean / variance
- iter_sweep / run_sweep: the probability sweep and its text output
"""

from .config import ConfigurationError, SpreadStrategy, SweepConfig, probability_grid
from .lattice import BURNING, BURNT, EMPTY, OCCUPIED, Lattice, generate_lattice
from .spread import burn, ignite, spread
from .trial import TrialResult, run_trial, run_trials
from .aggregate import AggregateSample, BurnTimeStats, aggregate
from .sweep import format_row, iter_sweep, run_sweep
from . import utils

__all__ = [
    # Configuration
    "ConfigurationError",
    "SpreadStrategy",
    "SweepConfig",
    "probability_grid",
    # Lattice
    "Lattice",
    "generate_lattice",
    "EMPTY",
    "OCCUPIED",
    "BURNING",
    "BURNT",
    # Spreading
    "ignite",
    "spread",
    "burn",
    # Trials and statistics
    "TrialResult",
    "run_trial",
    "run_trials",
    "AggregateSample",
    "BurnTimeStats",
    "aggregate",
    # Sweep
    "format_row",
    "iter_sweep",
    "run_sweep",
    # Utilities
    "utils",
]
