#!/usr/bin/env python3
"""
Per-axis mean and sample standard deviation of a position set.
"""

from typing import NamedTuple, Sequence
import logging
import statistics

from .exceptions import StatisticsError
from .geometry import Axis, Position

logger = logging.getLogger(__name__)


class Statistics(NamedTuple):
    """Mean and standard deviation of a position set, one value per axis."""

    mean: Position
    stddev: Position


def compute_stats(positions: Sequence[Position]) -> Statistics:
    """
    Compute the mean and Bessel-corrected standard deviation of each axis.

    Axes are treated independently (no covariance). Sums are evaluated exactly,
    so a set of identical positions yields that position as the mean and a
    standard deviation of exactly zero.

    A single position has no sample spread; its standard deviation is
    defined as zero on every axis.

    Args:
        positions: Non-empty sequence of positions

    Returns:
        Statistics of the set

    Raises:
        StatisticsError: If positions is empty
    """
    n = len(positions)
    if n == 0:
        raise StatisticsError("Cannot compute statistics of an empty position set")

    columns = [[axis.value_of(pos) for pos in positions] for axis in Axis]
    mean = Position(*(statistics.mean(column) for column in columns))

    if n == 1:
        logger.warning(
            "Only one position available; standard deviation is reported as zero"
        )
        return Statistics(mean=mean, stddev=Position(0.0, 0.0, 0.0))

    stddev = Position(*(statistics.stdev(column) for column in columns))
    logger.debug(f"Statistics over {n} positions: mean={mean}, stddev={stddev}")
    return Statistics(mean=mean, stddev=stddev)
