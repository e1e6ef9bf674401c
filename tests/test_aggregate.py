"""
Tests for trial aggregation: configuration errors, exact values at the
trivial probabilities, the running statistics, statistical behaviour in p and
reproducibility under parallel execution.
"""

import math
import sys
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from forest_fire import utils
from forest_fire.aggregate import (
    TRIALS_PER_BLOCK,
    AggregateSample,
    BurnTimeStats,
    aggregate,
    block_sizes,
)
from forest_fire.config import ConfigurationError


@pytest.mark.parametrize("sample_count", [0, -5])
def test_non_positive_sample_count_is_configuration_error(sample_count):
    with pytest.raises(ConfigurationError):
        aggregate(4, 0.5, sample_count, utils.make_rng(0))


def test_zero_probability_is_always_zero():
    for sample_count in (1, 7, 300):
        sample = aggregate(4, 0.0, sample_count, utils.make_rng(sample_count))
        assert sample == AggregateSample(
            p=0.0, mean_steps=0.0, sample_count=sample_count, variance=0.0
        )


def test_full_probability_is_always_side():
    sample = aggregate(4, 1.0, 50, utils.make_rng(1))
    assert sample.mean_steps == 4.0
    assert sample.variance == 0.0
    assert sample.stderr == 0.0
    assert sample.sample_count == 50


def test_stats_match_numpy():
    values = utils.make_rng(2).integers(0, 100, size=1000)

    one_by_one = BurnTimeStats()
    for v in values:
        one_by_one.add(int(v))

    blocks = BurnTimeStats()
    for chunk in np.array_split(values, 7):
        blocks.add_block(chunk)

    for stats in (one_by_one, blocks):
        assert stats.count == 1000
        assert stats.mean == pytest.approx(values.mean())
        assert stats.variance == pytest.approx(values.var(ddof=1))
        assert stats.stderr == pytest.approx(math.sqrt(values.var(ddof=1) / 1000))


def test_stats_merge_with_empty():
    a = BurnTimeStats()
    b = BurnTimeStats()
    b.add_block([3, 5])
    a.merge(b)
    a.merge(BurnTimeStats())
    assert (a.count, a.mean, a.variance) == (2, 4.0, 2.0)


def test_single_sample_has_zero_variance():
    stats = BurnTimeStats()
    stats.add(9)
    assert stats.variance == 0.0
    with pytest.raises(ValueError):
        BurnTimeStats().to_sample(0.5)


def test_block_sizes():
    assert block_sizes(1) == [1]
    assert block_sizes(TRIALS_PER_BLOCK) == [TRIALS_PER_BLOCK]
    assert block_sizes(600) == [250, 250, 100]
    assert sum(block_sizes(10_000)) == 10_000


def test_mean_increases_below_threshold():
    """Burn time grows with p up to the percolation threshold (~0.593)."""
    side = 16
    means = [
        aggregate(side, p, 400, utils.make_rng(3)).mean_steps
        for p in (0.1, 0.3, 0.5)
    ]
    assert means[0] + 0.2 < means[1]
    assert means[1] + 0.5 < means[2]


def test_mean_plateaus_near_side_for_dense_lattices():
    side = 16
    dense = aggregate(side, 0.95, 200, utils.make_rng(4))
    assert abs(dense.mean_steps - side) < 4
    assert aggregate(side, 1.0, 10, utils.make_rng(4)).mean_steps == side


def test_different_seeds_agree_within_noise():
    a = aggregate(16, 0.55, 2000, utils.make_rng(5))
    b = aggregate(16, 0.55, 2000, utils.make_rng(6))
    assert a.mean_steps != b.mean_steps
    tolerance = 5 * math.hypot(a.stderr, b.stderr)
    assert abs(a.mean_steps - b.mean_steps) < tolerance


def test_same_seed_same_aggregate():
    a = aggregate(16, 0.6, 300, utils.make_rng(7))
    b = aggregate(16, 0.6, 300, utils.make_rng(7))
    assert a == b


def test_process_pool_matches_sequential():
    sequential = aggregate(12, 0.6, 600, utils.make_rng(8))
    with ProcessPoolExecutor(max_workers=2) as executor:
        parallel = aggregate(12, 0.6, 600, utils.make_rng(8), executor=executor)
    assert parallel == sequential
