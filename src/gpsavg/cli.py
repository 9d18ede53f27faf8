#!/usr/bin/env python3
"""
GPS fix averaging tool.

This script reads an NMEA log, averages the GGA fixes after discarding
outliers, and reports the mean position, its standard deviation and per-axis
histograms. Optionally it writes an interactive HTML map of the fixes.

Requirements:
    pip install pyproj folium

"""

from typing import List, Optional, Tuple
import webbrowser
import argparse
import logging
import re
import sys
import os
import pyproj

from . import __version__
from .analysis import HISTOGRAM_REFERENCES, AnalysisSummary, analyze
from .config import GpsavgConfig
from .exceptions import GpsavgError
from .file_utils import generate_output_filename
from .metrics import collect_metrics, log_metrics
from .nmea import read_positions
from .report import format_report, format_short
from . import visualization

# Configure logging
logger = logging.getLogger("gpsavg")

_TALKER = re.compile(r"[A-Z]{2}")


def positive_float(value: str) -> float:
    """argparse type for a strictly positive float."""
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def positive_int(value: str) -> int:
    """argparse type for a strictly positive integer."""
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def talker_list(value: str) -> Tuple[str, ...]:
    """argparse type for a comma-separated list of NMEA talker IDs."""
    talkers = tuple(t.strip().upper() for t in value.split(",") if t.strip())
    if not talkers or any(_TALKER.fullmatch(t) is None for t in talkers):
        raise argparse.ArgumentTypeError(
            f"expecting two-letter talker IDs such as GP,GN, got '{value}'"
        )
    return talkers


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    defaults = GpsavgConfig()
    parser = argparse.ArgumentParser(
        description="Average the GPS fixes of an NMEA log, discarding outliers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "filename",
        type=str,
        nargs="?",
        help="NMEA log file to process",
    )
    parser.add_argument(
        "-s",
        "--short",
        action="store_true",
        help="Print only the average as 'lat, lon, alt', with no other text",
    )
    parser.add_argument(
        "--sigma",
        type=positive_float,
        default=defaults.outlier_sigma,
        help=f"Discard fixes beyond this many standard deviations (default: {defaults.outlier_sigma})",
    )
    parser.add_argument(
        "--cutoff",
        type=positive_int,
        default=defaults.histogram_cutoff,
        help=f"Histogram extent on each side of the mean, in standard deviations (default: {defaults.histogram_cutoff})",
    )
    parser.add_argument(
        "--divisions",
        type=positive_int,
        default=defaults.histogram_divisions,
        help=f"Histogram bins per standard deviation (default: {defaults.histogram_divisions})",
    )
    parser.add_argument(
        "--histogram-reference",
        type=str,
        default=defaults.histogram_reference,
        choices=HISTOGRAM_REFERENCES,
        help="Statistics used to lay out the histogram bins: before or after outlier filtering (default: raw)",
    )
    parser.add_argument(
        "--no-histogram",
        action="store_true",
        help="Don't print the histogram table",
    )
    parser.add_argument(
        "--talkers",
        type=talker_list,
        default=defaults.talkers,
        help="Comma-separated NMEA talker IDs whose GGA sentences are used (default: GP,GN)",
    )
    parser.add_argument(
        "--verify-checksum",
        action="store_true",
        help="Reject GGA sentences with a missing or wrong checksum",
    )
    parser.add_argument(
        "--ellipsoid",
        type=str,
        default=defaults.ellipsoid,
        choices=sorted(pyproj.get_ellps_map()),
        metavar="NAME",
        help=f"Ellipsoid for the metric standard deviation (default: {defaults.ellipsoid})",
    )
    parser.add_argument(
        "--map",
        action="store_true",
        help="Write an interactive HTML map of the fixes",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output HTML map file (default: auto-generated based on input filename)",
    )
    parser.add_argument(
        "--no-open",
        action="store_true",
        help="Don't automatically open the HTML map in browser",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Output structured metrics after processing",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=defaults.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=f"Set logging level (default: {defaults.log_level})",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"gpsavg {__version__}",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> GpsavgConfig:
    """Build the run configuration from parsed command-line arguments."""
    return GpsavgConfig(
        outlier_sigma=args.sigma,
        histogram_cutoff=args.cutoff,
        histogram_divisions=args.divisions,
        histogram_reference=args.histogram_reference,
        show_histogram=not args.no_histogram,
        talkers=args.talkers,
        verify_checksum=args.verify_checksum,
        ellipsoid=args.ellipsoid,
        log_level=args.log_level,
        metrics=args.metrics,
        short=args.short,
        create_map=args.map,
        output=args.output,
        open_map=not args.no_open,
    )


def determine_output_filename(input_filename: str, output_arg: Optional[str]) -> str:
    """
    Determine the output map filename to use.

    Args:
        input_filename: Path to the input log
        output_arg: Value from --output argument (None if not specified)

    Returns:
        Output filename to use

    Raises:
        RuntimeError: If auto-generation fails
        ValueError: If constructed filename would be illegal
    """
    if output_arg is not None:
        return output_arg

    try:
        return generate_output_filename(input_filename)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Failed to generate output filename: {e}")
        raise


def open_file_in_browser(filename: str) -> None:
    """
    Open the specified file in the default browser.

    Args:
        filename: Path to the file to open
    """
    abs_path = os.path.abspath(filename)
    try:
        webbrowser.open(f"file://{abs_path}")
        logger.debug(f"Opening {abs_path} in your default browser...")
    except Exception as e:
        logger.warning(f"Could not automatically open browser: {e}")
        logger.warning(f"Please manually open {abs_path}")


def setup_logging(args: argparse.Namespace) -> None:
    """Setup logging configuration."""
    if hasattr(sys.stdout, "reconfigure") and sys.stdout.encoding != "utf-8":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
            if hasattr(sys.stderr, "reconfigure") and sys.stderr.encoding != "utf-8":
                sys.stderr.reconfigure(encoding="utf-8")
            logger.debug("Reconfigured stdout and stderr to UTF-8 encoding.")
        except Exception as e:
            logger.debug(f"Could not reconfigure stdout/stderr to UTF-8: {e}")
    level = getattr(logging, args.log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    # Log to stderr so short-mode stdout stays machine readable
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure the root logger so all modules inherit the configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Suppress overly verbose third-party logging
    logging.getLogger("pyproj").setLevel(logging.WARNING)


def write_map(summary: AnalysisSummary, input_filename: str, config: GpsavgConfig) -> None:
    """Write the HTML fix map and optionally open it."""
    output_filename = determine_output_filename(input_filename, config.output)
    logger.debug(f"Output filename: {output_filename}")

    visualization.create_fix_map(summary, output_filename, config)

    if config.open_map:
        open_file_in_browser(output_filename)


def main(argv: Optional[List[str]] = None) -> None:
    """
    Parses command-line arguments, reads the log, averages the fixes
    and prints the report.
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.filename:
        parser.print_help()
        sys.exit(1)

    setup_logging(args)
    config = config_from_args(args)

    try:
        positions = read_positions(
            args.filename, config.talkers, config.verify_checksum
        )
        summary = analyze(positions, config)
    except GpsavgError as e:
        logger.error(str(e))
        sys.exit(1)

    if config.short:
        print(format_short(summary))
    else:
        print(format_report(summary, config.show_histogram))

    log_metrics(collect_metrics(summary, config.outlier_sigma), config.metrics)

    if config.create_map:
        try:
            write_map(summary, args.filename, config)
        except Exception as e:
            logger.error(f"Failed to create map: {e}")
            sys.exit(1)


if __name__ == "__main__":
    main()
