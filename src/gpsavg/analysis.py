#!/usr/bin/env python3
"""
End-to-end analysis of a parsed position set.
"""

from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple
import logging

from .config import GpsavgConfig
from .exceptions import StatisticsError
from .geometry import Axis, Position, enu_offset
from .histogram import Histogram, build_histograms
from .outliers import filter_outliers
from .stats import Statistics, compute_stats

logger = logging.getLogger(__name__)

HISTOGRAM_REFERENCES = ("raw", "filtered")


class AnalysisSummary(NamedTuple):
    """Everything a report needs about one log."""

    positions: List[Position]
    retained: List[Position]
    raw_stats: Statistics
    stats: Statistics
    stddev_enu: Tuple[float, float, float]
    histograms: Dict[Axis, Histogram]

    @property
    def discarded_count(self) -> int:
        return len(self.positions) - len(self.retained)


def stddev_in_meters(
    stats: Statistics, ellipsoid: str = "WGS84"
) -> Tuple[float, float, float]:
    """
    Approximate the standard deviation as a local (east, north, up) offset in meters.

    The point mean + stddev is expressed in the tangent plane at the mean.
    """
    mean, stddev = stats
    shifted = Position(
        latitude=mean.latitude + stddev.latitude,
        longitude=mean.longitude + stddev.longitude,
        altitude=mean.altitude + stddev.altitude,
    )
    return enu_offset(shifted, mean, ellipsoid)


def analyze(
    positions: Sequence[Position], config: Optional[GpsavgConfig] = None
) -> AnalysisSummary:
    """
    Compute the filtered statistics, histograms and metric spread of a position set.

    Args:
        positions: Parsed positions, in input order
        config: Outlier cutoff, histogram layout and ellipsoid settings
            (defaults if None)

    Returns:
        AnalysisSummary of the set

    Raises:
        StatisticsError: If there are no positions, or none survive filtering
        ValueError: If a configuration value is out of range
    """
    if config is None:
        config = GpsavgConfig()
    if config.histogram_reference not in HISTOGRAM_REFERENCES:
        raise ValueError(
            f"Unknown histogram reference '{config.histogram_reference}'; "
            f"expecting one of {', '.join(HISTOGRAM_REFERENCES)}"
        )

    positions = list(positions)
    if not positions:
        raise StatisticsError("No positions found in the input")

    raw_stats = compute_stats(positions)
    if len(positions) == 1:
        # Zero spread: the strict band around a lone fix would reject it
        logger.info("Single position; skipping the outlier filter")
        retained = positions
    else:
        retained = filter_outliers(positions, raw_stats, config.outlier_sigma)
    if not retained:
        logger.warning("Outlier filter discarded every position")
        raise StatisticsError(
            f"No positions left after discarding outliers beyond {config.outlier_sigma} sigma"
        )

    stats = compute_stats(retained)
    logger.info(
        f"Kept {len(retained)} of {len(positions)} positions "
        f"({len(positions) - len(retained)} discarded)"
    )

    reference = raw_stats if config.histogram_reference == "raw" else stats
    histograms = build_histograms(
        positions, reference, config.histogram_cutoff, config.histogram_divisions
    )

    return AnalysisSummary(
        positions=positions,
        retained=retained,
        raw_stats=raw_stats,
        stats=stats,
        stddev_enu=stddev_in_meters(stats, config.ellipsoid),
        histograms=histograms,
    )
