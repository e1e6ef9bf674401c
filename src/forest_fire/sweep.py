from __future__ import annotations

import logging
import time
from concurrent.futures import Executor
from typing import IO, Iterator, List, Optional

from .aggregate import AggregateSample, aggregate, reduce_blocks, submit_blocks
from .config import SweepConfig
from . import utils

logger = logging.getLogger(__name__)


def format_row(sample: AggregateSample, with_stats: bool = False) -> str:
    """One output line (without newline): ``p<TAB>mean`` plus optional stats."""
    row = f"{sample.p:.4f}\t{sample.mean_steps:.5f}"
    if with_stats:
        row += f"\t{sample.variance:.5f}\t{sample.stderr:.5f}\t{sample.sample_count}"
    return row


def iter_sweep(
    config: SweepConfig, executor: Optional[Executor] = None
) -> Iterator[AggregateSample]:
    """
    Yield one aggregate per probability, in ascending p.

    Every probability point draws from its own child of the root seed
    sequence, so a point can be reproduced without re-running the others.
    With an ``executor`` the blocks of every point are queued up front, so
    workers stay busy past the first point while rows are still yielded in
    order.
    """
    root = utils.seed_sequence(config.seed)
    logger.info(
        "Sweep: side=%d, points=%d, samples=%d, seed entropy=%d",
        config.side,
        len(config.probabilities),
        config.sample_count,
        root.entropy,
    )
    children = root.spawn(len(config.probabilities))
    if executor is not None:
        pending = [
            submit_blocks(
                config.side,
                p,
                config.sample_count,
                utils.make_rng(child),
                config.strategy,
                executor,
            )
            for p, child in zip(config.probabilities, children)
        ]
        for p, futures in zip(config.probabilities, pending):
            sample = reduce_blocks(p, futures)
            logger.debug("p=%.4f mean=%.5f stderr=%.5f", p, sample.mean_steps, sample.stderr)
            yield sample
        return

    for p, child in zip(config.probabilities, children):
        start = time.perf_counter()
        sample = aggregate(
            config.side,
            p,
            config.sample_count,
            utils.make_rng(child),
            strategy=config.strategy,
        )
        logger.debug(
            "p=%.4f mean=%.5f stderr=%.5f (%.2fs)",
            p,
            sample.mean_steps,
            sample.stderr,
            time.perf_counter() - start,
        )
        yield sample


def run_sweep(
    config: SweepConfig, stream: IO[str], executor: Optional[Executor] = None
) -> List[AggregateSample]:
    """Write each row as soon as its point completes, flushing after every row."""
    results = []
    for sample in iter_sweep(config, executor):
        stream.write(format_row(sample, config.with_stats) + "\n")
        stream.flush()
        results.append(sample)
    return results
