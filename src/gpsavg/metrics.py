"""
Module for collecting and logging metrics about an analysed GPS log.
"""

import collections
import logging
from typing import Dict, NamedTuple

from .analysis import AnalysisSummary
from .outliers import outlier_axes

logger = logging.getLogger(__name__)


class FixMetrics(NamedTuple):
    """Container for fix metrics data."""

    total: int
    retained: int
    discarded: int
    discarded_by_axis: Dict[str, int]
    underflow_by_axis: Dict[str, int]


def collect_metrics(summary: AnalysisSummary, sigma: float = 3.0) -> FixMetrics:
    """
    Collect metrics from an analysis summary.

    Args:
        summary: Result of analyze()
        sigma: Outlier cutoff used for the analysis

    Returns:
        FixMetrics containing all collected metrics
    """
    discarded_by_axis: Dict[str, int] = collections.defaultdict(int)
    # A lone fix is retained unfiltered
    positions = summary.positions if summary.discarded_count else []
    for pos in positions:
        for axis in outlier_axes(pos, summary.raw_stats, sigma):
            discarded_by_axis[str(axis)] += 1

    underflow_by_axis = {
        str(axis): histogram.underflow
        for axis, histogram in summary.histograms.items()
    }

    return FixMetrics(
        total=len(summary.positions),
        retained=len(summary.retained),
        discarded=summary.discarded_count,
        discarded_by_axis=dict(discarded_by_axis),
        underflow_by_axis=underflow_by_axis,
    )


def log_metrics(metrics: FixMetrics, enabled: bool) -> None:
    """
    Log detailed metrics after the report is produced.

    Args:
        metrics: FixMetrics containing collected metrics
        enabled: Whether metrics output was requested
    """
    if not enabled:
        return

    logger.debug("=== GPSAVG_METRICS ===")
    logger.debug(f"total_positions={metrics.total}")
    logger.debug(f"retained_positions={metrics.retained}")
    logger.debug(f"discarded_positions={metrics.discarded}")

    # A position can violate more than one axis
    for axis, count in metrics.discarded_by_axis.items():
        if count > 0:
            logger.debug(f"discarded_reason[{axis}]={count}")

    for axis, count in metrics.underflow_by_axis.items():
        logger.debug(f"histogram_underflow[{axis}]={count}")
    logger.debug("=== END_GPSAVG_METRICS ===")
