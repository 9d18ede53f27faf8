#!/usr/bin/env python3
"""
Text reports for an analysed GPS log.
"""

from typing import List
import logging

from .analysis import AnalysisSummary
from .geometry import Axis

logger = logging.getLogger(__name__)

HISTOGRAM_HEADER = "  Latitude (º)            Longitude (º)           Altitude(m)"


def format_short(summary: AnalysisSummary) -> str:
    """The filtered mean as 'lat, lon, alt' at full precision, nothing else."""
    mean = summary.stats.mean
    return f"{mean.latitude}, {mean.longitude}, {mean.altitude}"


def format_histogram_table(summary: AnalysisSummary) -> str:
    """
    Lay out the three axis histograms side by side, one row per bin index.

    Each axis contributes a count followed by the lower boundary of its bin.
    """
    columns = [summary.histograms[axis].bins for axis in Axis]
    lines = [HISTOGRAM_HEADER]
    for row in zip(*columns):
        lines.append("\t".join(f"{b.count}\t{b.low:.6f}" for b in row))
    return "\n".join(lines)


def format_report(summary: AnalysisSummary, show_histogram: bool = True) -> str:
    """
    Format the full human-readable report.

    Args:
        summary: Result of analyze()
        show_histogram: Append the per-axis histogram table

    Returns:
        Multi-line report text
    """
    mean = summary.stats.mean
    stddev = summary.stats.stddev
    east, north, _ = summary.stddev_enu

    lines: List[str] = [
        f"Average: ({mean.latitude:.4f}º, {mean.longitude:.4f}º, {mean.altitude:.1f}m) "
        f"({mean.latitude}, {mean.longitude}, {mean.altitude})",
        "",
        f"Number of entries: {len(summary.positions)} "
        f"({summary.discarded_count} discarded)",
        f"Standard deviation: ({stddev.latitude:.6f}º, {stddev.longitude:.6f}º, "
        f"{stddev.altitude:.3f}m) Horizontally: ~({north:.2f}m, {east:.2f}m)",
    ]

    if show_histogram:
        lines.append("Histogram values:")
        lines.append(format_histogram_table(summary))

    return "\n".join(lines)
