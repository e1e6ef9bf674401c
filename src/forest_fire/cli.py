#!/usr/bin/env python3
"""
Forest-fire burn-time sweep.

Prints one ``p<TAB>mean_burn_time`` row per occupation probability to stdout,
in ascending p, flushing after every row. Diagnostics go to stderr.

Example:
    sim-5 512 -s 1000 >> results/n512.dat
"""

import argparse
import logging
import sys
from concurrent.futures import ProcessPoolExecutor

from .config import (
    BOUNDARIES,
    CONNECTIVITIES,
    DEFAULT_RESOLUTION,
    DEFAULT_SAMPLE_COUNT,
    IGNITION_RULES,
    METHODS,
    ConfigurationError,
    SpreadStrategy,
    SweepConfig,
    probability_grid,
)
from .log_config import setup_logging
from .sweep import run_sweep

logger = logging.getLogger("forest_fire")

EXIT_CONFIG_ERROR = 2
EXIT_OUT_OF_MEMORY = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sim-5",
        description="Mean burn time of a forest fire on an N x N lattice, "
        "swept over the occupation probability",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("side", metavar="SIDE", type=int, help="Lattice side length")
    parser.add_argument(
        "-s",
        "--sample",
        type=int,
        default=DEFAULT_SAMPLE_COUNT,
        help=f"Statistical sample size per probability (default: {DEFAULT_SAMPLE_COUNT})",
    )
    parser.add_argument(
        "-r",
        "--resolution",
        type=int,
        default=DEFAULT_RESOLUTION,
        help="How many equidistant intervals to split the probability range into "
        f"(default: {DEFAULT_RESOLUTION})",
    )
    parser.add_argument("--p-min", type=float, default=0.0, help="Lowest p (default: 0)")
    parser.add_argument("--p-max", type=float, default=1.0, help="Highest p (default: 1)")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Base seed for reproducible runs (default: fresh entropy, logged)",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Number of parallel processes; trial blocks of all probabilities "
        "are queued at once (default: 1)",
    )
    parser.add_argument(
        "--connectivity",
        type=int,
        choices=CONNECTIVITIES,
        default=4,
        help="Neighbourhood the fire spreads through (default: 4)",
    )
    parser.add_argument(
        "--ignition",
        choices=IGNITION_RULES,
        default="edge",
        help="Ignite the first column or the centre cell (default: edge)",
    )
    parser.add_argument(
        "--boundary",
        choices=BOUNDARIES,
        default="open",
        help="Lattice boundary condition (default: open)",
    )
    parser.add_argument(
        "--method",
        choices=METHODS,
        default="worklist",
        help="Spreading implementation (default: worklist)",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Append variance, standard error and sample count columns",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Warnings only")
    return parser


def config_from_args(args: argparse.Namespace) -> SweepConfig:
    return SweepConfig(
        side=args.side,
        probabilities=probability_grid(args.resolution, args.p_min, args.p_max),
        sample_count=args.sample,
        seed=args.seed,
        strategy=SpreadStrategy(
            connectivity=args.connectivity,
            ignition=args.ignition,
            boundary=args.boundary,
            method=args.method,
        ),
        jobs=args.jobs,
        with_stats=args.stats,
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        setup_logging(logging.DEBUG)
    elif args.quiet:
        setup_logging(logging.WARNING)
    else:
        setup_logging(logging.INFO)

    # Validate everything before the first trial runs.
    try:
        config = config_from_args(args)
    except ConfigurationError as e:
        parser.error(str(e))

    try:
        if config.jobs > 1:
            with ProcessPoolExecutor(max_workers=config.jobs) as executor:
                run_sweep(config, sys.stdout, executor)
        else:
            run_sweep(config, sys.stdout)
    except MemoryError:
        logger.critical(
            "Out of memory for a %dx%d lattice; no further rows written",
            config.side,
            config.side,
        )
        return EXIT_OUT_OF_MEMORY

    return 0


if __name__ == "__main__":
    sys.exit(main())
