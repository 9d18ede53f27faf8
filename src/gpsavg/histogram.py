#!/usr/bin/env python3
"""
Fixed-width histograms of one position axis around a reference mean.

Boundaries are laid out every 1/divisions standard deviations, from
mean - cutoff·stddev up to (but not including) mean + cutoff·stddev. Each value
is tagged with the index of the last boundary at or below it:

- values below the first boundary are underflow and are discarded;
- values at or above the last boundary land in the final bin.

So the lowest tail is dropped while the highest tail is kept. The bins of the
three axes share indices, which lets a report show them side by side.
"""

from bisect import bisect_right
from typing import Callable, Dict, List, NamedTuple, Sequence
import logging

from .geometry import Axis, Position
from .stats import Statistics

logger = logging.getLogger(__name__)

DEFAULT_CUTOFF = 3
DEFAULT_DIVISIONS = 6
UNDERFLOW = -1

AxisSelector = Callable[[Position], float]


class HistogramBin(NamedTuple):
    """
    One bin of a histogram, covering [low, high).

    The last bin is the exception: its count also includes every value at or
    above its high edge, so for it high is only the last boundary.
    """

    index: int
    low: float
    high: float
    count: int


class Histogram(NamedTuple):
    """Ordered bins of one axis, plus the number of discarded underflow values."""

    axis: str
    bins: List[HistogramBin]
    underflow: int

    @property
    def boundaries(self) -> List[float]:
        """Lower boundary of each bin followed by the upper boundary of the last."""
        if not self.bins:
            return []
        return [b.low for b in self.bins] + [self.bins[-1].high]

    def total(self) -> int:
        """Number of values counted in the retained bins."""
        return sum(b.count for b in self.bins)


def _validate(cutoff: int, divisions: int) -> None:
    if cutoff < 1 or divisions < 1:
        raise ValueError(
            f"Histogram cutoff and divisions must be positive, got {cutoff} and {divisions}"
        )


def histogram_boundaries(
    mean: float,
    stddev: float,
    cutoff: int = DEFAULT_CUTOFF,
    divisions: int = DEFAULT_DIVISIONS,
) -> List[float]:
    """
    Compute the 2·cutoff·divisions bin boundaries for one axis.

    Args:
        mean: Center of the histogram
        stddev: Scale of the histogram
        cutoff: Extent on each side of the mean, in standard deviations
        divisions: Number of bins per standard deviation

    Returns:
        Ascending list of boundaries (all equal if stddev is zero)
    """
    _validate(cutoff, divisions)
    span = cutoff * divisions
    return [i / divisions * stddev + mean for i in range(-span, span)]


def tag_value(value: float, boundaries: Sequence[float]) -> int:
    """
    Return the bin index for value, or UNDERFLOW if it lies below every boundary.

    Bin i covers [boundaries[i], boundaries[i+1]); the last bin also takes
    everything at or above its lower boundary.
    """
    index = bisect_right(boundaries, value) - 1
    if index < 0:
        return UNDERFLOW
    return min(index, len(boundaries) - 2)


def build_histogram(
    positions: Sequence[Position],
    reference_stats: Statistics,
    axis_selector: AxisSelector,
    cutoff: int = DEFAULT_CUTOFF,
    divisions: int = DEFAULT_DIVISIONS,
    axis_name: str = "",
) -> Histogram:
    """
    Count the positions falling into each fixed-width bin of one axis.

    Args:
        positions: Positions to bin
        reference_stats: Statistics that define the bin layout
        axis_selector: Projection of a Position onto the binned scalar; it is
            applied to the positions and to the reference mean/stddev alike
        cutoff: Extent on each side of the mean, in standard deviations
        divisions: Number of bins per standard deviation
        axis_name: Label stored on the returned histogram

    Returns:
        Histogram with 2·cutoff·divisions - 1 bins

    Raises:
        ValueError: If cutoff or divisions is not positive
    """
    boundaries = histogram_boundaries(
        axis_selector(reference_stats.mean),
        axis_selector(reference_stats.stddev),
        cutoff,
        divisions,
    )

    counts = [0] * (len(boundaries) - 1)
    underflow = 0
    for pos in positions:
        index = tag_value(axis_selector(pos), boundaries)
        if index == UNDERFLOW:
            underflow += 1
        else:
            counts[index] += 1

    bins = [
        HistogramBin(index=i, low=boundaries[i], high=boundaries[i + 1], count=count)
        for i, count in enumerate(counts)
    ]

    logger.debug(
        f"Histogram {axis_name or 'axis'}: {len(bins)} bins from {boundaries[0]:.6f} "
        f"to {boundaries[-1]:.6f}, {underflow} underflow values discarded"
    )
    return Histogram(axis=axis_name, bins=bins, underflow=underflow)


def build_histograms(
    positions: Sequence[Position],
    reference_stats: Statistics,
    cutoff: int = DEFAULT_CUTOFF,
    divisions: int = DEFAULT_DIVISIONS,
) -> Dict[Axis, Histogram]:
    """Build one histogram per axis, in latitude/longitude/altitude order."""
    return {
        axis: build_histogram(
            positions, reference_stats, axis.value_of, cutoff, divisions, str(axis)
        )
        for axis in Axis
    }
