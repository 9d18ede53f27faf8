#!/usr/bin/env python3
"""
Sigma-clipping outlier filter.
"""

from typing import List, Sequence
import logging

from .geometry import Axis, Position
from .stats import Statistics

logger = logging.getLogger(__name__)

DEFAULT_SIGMA = 3.0


def outlier_axes(
    position: Position, stats: Statistics, k: float = DEFAULT_SIGMA
) -> List[Axis]:
    """
    List the axes on which a position lies outside mean ± k·stddev.

    Bounds are exclusive: a value exactly on a bound is an outlier. On an axis
    whose standard deviation is zero both bounds equal the mean, so every value
    is an outlier there.

    Args:
        position: Position to check
        stats: Reference statistics (from the unfiltered set)
        k: Half-width of the acceptance band, in standard deviations

    Returns:
        Axes violated by the position, in latitude/longitude/altitude order
    """
    violated = []
    for axis in Axis:
        sigma = axis.value_of(stats.stddev)
        mean = axis.value_of(stats.mean)
        value = axis.value_of(position)
        if not (mean - k * sigma < value < mean + k * sigma):
            violated.append(axis)
    return violated


def filter_outliers(
    positions: Sequence[Position], stats: Statistics, k: float = DEFAULT_SIGMA
) -> List[Position]:
    """
    Keep the positions that lie within mean ± k·stddev on all three axes.

    The reference statistics are used as given; the filter is a single pass and
    is not re-applied to its own output.

    Args:
        positions: Positions to filter
        stats: Statistics of the unfiltered set
        k: Half-width of the acceptance band, in standard deviations

    Returns:
        Retained positions, in input order

    Raises:
        ValueError: If k is not positive
    """
    if k <= 0:
        raise ValueError(f"Outlier cutoff must be positive, got {k}")

    retained = [pos for pos in positions if not outlier_axes(pos, stats, k)]

    logger.debug(
        f"Outlier filter ({k} sigma) kept {len(retained)} of {len(positions)} positions"
    )
    return retained
