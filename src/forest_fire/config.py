from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

CONNECTIVITIES = (4, 8)
IGNITION_RULES = ("edge", "center")
BOUNDARIES = ("open", "periodic")
METHODS = ("worklist", "dilation")

DEFAULT_SAMPLE_COUNT = 10_000
DEFAULT_RESOLUTION = 100
MIN_RESOLUTION = 3


class ConfigurationError(ValueError):
    """Invalid simulation input, raised before any simulation work starts."""


def check_side(side) -> int:
    if isinstance(side, (bool, np.bool_)) or not isinstance(side, (int, np.integer)):
        raise ConfigurationError(f"lattice side must be an integer, got {side!r}")
    if side <= 0:
        raise ConfigurationError(f"lattice side must be positive, got {side}")
    return int(side)


def check_probability(p) -> float:
    try:
        p = float(p)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"occupation probability must be a number, got {p!r}") from e
    if not 0.0 <= p <= 1.0:
        raise ConfigurationError(f"occupation probability must lie in [0, 1], got {p}")
    return p


def check_sample_count(sample_count) -> int:
    if isinstance(sample_count, (bool, np.bool_)) or not isinstance(
        sample_count, (int, np.integer)
    ):
        raise ConfigurationError(f"sample count must be an integer, got {sample_count!r}")
    if sample_count <= 0:
        raise ConfigurationError(f"sample count must be positive, got {sample_count}")
    return int(sample_count)


def probability_grid(
    resolution: int = DEFAULT_RESOLUTION, p_min: float = 0.0, p_max: float = 1.0
) -> Tuple[float, ...]:
    """
    Equidistant occupation probabilities from p_min to p_max inclusive.

    ``resolution`` is the number of intervals, so the grid has
    ``resolution + 1`` points.
    """
    if resolution < MIN_RESOLUTION:
        raise ConfigurationError(
            f"resolution must be higher than {MIN_RESOLUTION - 1}, got {resolution}"
        )
    p_min = check_probability(p_min)
    p_max = check_probability(p_max)
    if p_min >= p_max:
        raise ConfigurationError(
            f"probability range is empty: p_min={p_min} must be below p_max={p_max}"
        )
    grid = np.linspace(p_min, p_max, resolution + 1)
    return tuple(float(p) for p in grid)


@dataclass(frozen=True)
class SpreadStrategy:
    """Geometry and algorithm choices for the burning process."""

    connectivity: int = 4
    ignition: str = "edge"
    boundary: str = "open"
    method: str = "worklist"

    def __post_init__(self) -> None:
        if self.connectivity not in CONNECTIVITIES:
            raise ConfigurationError(
                f"connectivity must be one of {CONNECTIVITIES}, got {self.connectivity!r}"
            )
        if self.ignition not in IGNITION_RULES:
            raise ConfigurationError(
                f"ignition must be one of {IGNITION_RULES}, got {self.ignition!r}"
            )
        if self.boundary not in BOUNDARIES:
            raise ConfigurationError(
                f"boundary must be one of {BOUNDARIES}, got {self.boundary!r}"
            )
        if self.method not in METHODS:
            raise ConfigurationError(f"method must be one of {METHODS}, got {self.method!r}")

    @property
    def periodic(self) -> bool:
        return self.boundary == "periodic"


@dataclass(frozen=True)
class SweepConfig:
    """Everything a sweep needs. Read once at start, never mutated."""

    side: int
    probabilities: Tuple[float, ...] = field(default_factory=probability_grid)
    sample_count: int = DEFAULT_SAMPLE_COUNT
    seed: Optional[int] = None
    strategy: SpreadStrategy = field(default_factory=SpreadStrategy)
    jobs: int = 1
    with_stats: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "probabilities", tuple(self.probabilities))
        self.validate()

    def validate(self) -> None:
        check_side(self.side)
        check_sample_count(self.sample_count)
        if not self.probabilities:
            raise ConfigurationError("probability sweep is empty")
        previous = -1.0
        for p in self.probabilities:
            p = check_probability(p)
            if p <= previous:
                raise ConfigurationError(
                    "probabilities must be strictly ascending, "
                    f"got {p} after {previous}"
                )
            previous = p
        if self.seed is not None and self.seed < 0:
            raise ConfigurationError(f"seed must be non-negative, got {self.seed}")
        if self.jobs < 1:
            raise ConfigurationError(f"jobs must be at least 1, got {self.jobs}")
