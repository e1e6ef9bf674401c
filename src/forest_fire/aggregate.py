from __future__ import annotations

import math
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np

from .config import SpreadStrategy, check_probability, check_sample_count, check_side
from .trial import run_trials
from . import utils

# Block size is fixed so that a seeded result does not depend on the number
# of worker processes.
TRIALS_PER_BLOCK = 250


@dataclass(frozen=True)
class AggregateSample:
    """Summary of all trials at one occupation probability."""

    p: float
    mean_steps: float
    sample_count: int
    variance: float = 0.0

    @property
    def stderr(self) -> float:
        return math.sqrt(self.variance / self.sample_count)


class BurnTimeStats:
    """
    Running count / mean / sum of squared deviations (Welford).

    Partial accumulators from different workers combine with ``merge``
    (Chan et al. pairwise update), so the reduction order does not matter.
    """

    def __init__(self) -> None:
        self.count = 0
        self.mean = 0.0
        self.m2 = 0.0

    def add(self, steps: int) -> None:
        self.count += 1
        delta = steps - self.mean
        self.mean += delta / self.count
        self.m2 += delta * (steps - self.mean)

    def add_block(self, steps: Iterable[int]) -> None:
        block = np.asarray(steps, dtype=np.float64)
        if block.size == 0:
            return
        other = BurnTimeStats()
        other.count = int(block.size)
        other.mean = float(block.mean())
        other.m2 = float(((block - other.mean) ** 2).sum())
        self.merge(other)

    def merge(self, other: "BurnTimeStats") -> None:
        if other.count == 0:
            return
        if self.count == 0:
            self.count, self.mean, self.m2 = other.count, other.mean, other.m2
            return
        total = self.count + other.count
        delta = other.mean - self.mean
        self.mean += delta * other.count / total
        self.m2 += other.m2 + delta * delta * self.count * other.count / total
        self.count = total

    @property
    def variance(self) -> float:
        """Unbiased sample variance; 0.0 for fewer than two samples."""
        if self.count < 2:
            return 0.0
        return self.m2 / (self.count - 1)

    @property
    def stderr(self) -> float:
        if self.count == 0:
            return 0.0
        return math.sqrt(self.variance / self.count)

    def to_sample(self, p: float) -> AggregateSample:
        if self.count == 0:
            raise ValueError("No trials accumulated")
        return AggregateSample(
            p=float(p),
            mean_steps=self.mean,
            sample_count=self.count,
            variance=self.variance,
        )


def block_sizes(sample_count: int, block: int = TRIALS_PER_BLOCK) -> list[int]:
    full, rest = divmod(sample_count, block)
    return [block] * full + ([rest] if rest else [])


def submit_blocks(
    side: int,
    p: float,
    sample_count: int,
    rng: np.random.Generator,
    strategy: Optional[SpreadStrategy],
    executor: Executor,
) -> List[Future]:
    """
    Queue the trial blocks for one probability on ``executor``.

    The block layout and streams are the same as in ``aggregate``, so a
    seeded result does not depend on how the blocks are scheduled.
    """
    side = check_side(side)
    p = check_probability(p)
    sample_count = check_sample_count(sample_count)
    strategy = strategy or SpreadStrategy()
    sizes = block_sizes(sample_count)
    streams = utils.spawn_streams(rng, len(sizes))
    return [
        executor.submit(run_trials, side, p, size, stream, strategy)
        for size, stream in zip(sizes, streams)
    ]


def reduce_blocks(p: float, futures: Iterable[Future]) -> AggregateSample:
    """Wait for every block of one probability and summarise them."""
    stats = BurnTimeStats()
    # Reduce in submission order so the float sums are reproducible.
    for future in futures:
        stats.add_block(future.result())
    return stats.to_sample(p)


def aggregate(
    side: int,
    p: float,
    sample_count: int,
    rng: np.random.Generator,
    strategy: Optional[SpreadStrategy] = None,
    executor: Optional[Executor] = None,
) -> AggregateSample:
    """
    Mean and variance of the burn time over ``sample_count`` trials at ``p``.

    Trials are split into blocks, each driven by its own child stream of
    ``rng``. With an ``executor`` the blocks run concurrently; the summary is
    only formed once every block has returned.
    """
    if executor is not None:
        return reduce_blocks(
            p, submit_blocks(side, p, sample_count, rng, strategy, executor)
        )

    side = check_side(side)
    p = check_probability(p)
    sample_count = check_sample_count(sample_count)
    strategy = strategy or SpreadStrategy()

    sizes = block_sizes(sample_count)
    streams = utils.spawn_streams(rng, len(sizes))

    stats = BurnTimeStats()
    for size, stream in zip(sizes, streams):
        stats.add_block(run_trials(side, p, size, stream, strategy))
    return stats.to_sample(p)
