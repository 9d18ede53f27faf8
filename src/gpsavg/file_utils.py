#!/usr/bin/env python3
"""
Naming of the HTML fix map written next to a GPS log.

A log `survey.nmea` gets `survey map.html`; if that exists, `survey map (1).html`,
`survey map (2).html` and so on. The chosen name is reserved by creating it
empty, so two runs over the same log never write the same map.
"""

from typing import Iterator
import os
import logging

logger = logging.getLogger(__name__)

LOG_EXTENSIONS = (".nmea", ".log", ".txt")
MAX_ATTEMPTS = 100


def map_basename(input_filename: str) -> str:
    """Path of the map for a log, without the '.html' suffix or a counter."""
    stem, extension = os.path.splitext(input_filename)
    if extension.lower() not in LOG_EXTENSIONS:
        stem = input_filename
    return stem + " map"


def _candidates(base: str) -> Iterator[str]:
    yield base + ".html"
    for i in range(1, MAX_ATTEMPTS + 1):
        yield f"{base} ({i}).html"


def _reserve(path: str) -> bool:
    """Create path empty; False if it already exists."""
    try:
        with open(path, "x"):
            pass
    except FileExistsError:
        return False
    except OSError as e:
        logger.error(f"Cannot create map file {path}: {e}")
        raise ValueError(f"Cannot create map file: {e}") from e
    return True


def generate_output_filename(input_filename: str) -> str:
    """
    Pick and reserve a free map filename next to the input log.

    Args:
        input_filename: Path to the GPS log

    Returns:
        Filename of the reserved (empty) map file

    Raises:
        RuntimeError: If the plain name and all MAX_ATTEMPTS numbered names are taken
        ValueError: If the file cannot be created (missing directory, permissions)
    """
    base = map_basename(input_filename)
    for candidate in _candidates(base):
        if _reserve(candidate):
            logger.debug(f"Reserved map file {candidate}")
            return candidate

    logger.error(
        f"All {MAX_ATTEMPTS + 1} map names for {input_filename} are taken; "
        f"remove old maps or pass --output"
    )
    raise RuntimeError(f"No free map filename after {MAX_ATTEMPTS} numbered attempts")
