#!/usr/bin/env python3
"""
gpsavg - A GPS fix averaging tool for NMEA logs.

This package parses GGA sentences from a GPS log, discards outlying fixes
by sigma clipping, and reports the averaged position together with its
spread and per-axis histograms.
"""
import importlib.metadata

__version__ = importlib.metadata.version("gpsavg")

# Import main classes for public API
from .geometry import Axis, Position
from .stats import Statistics, compute_stats
from .outliers import filter_outliers
from .histogram import Histogram, HistogramBin, build_histogram
from .nmea import parse_line, parse_lines, read_positions
from .analysis import AnalysisSummary, analyze
from .exceptions import (
    FileOpenError,
    GpsavgError,
    LineReadError,
    SentenceParseError,
    StatisticsError,
)

__all__ = [
    "Axis",
    "Position",
    "Statistics",
    "compute_stats",
    "filter_outliers",
    "Histogram",
    "HistogramBin",
    "build_histogram",
    "parse_line",
    "parse_lines",
    "read_positions",
    "AnalysisSummary",
    "analyze",
    "FileOpenError",
    "GpsavgError",
    "LineReadError",
    "SentenceParseError",
    "StatisticsError",
]
