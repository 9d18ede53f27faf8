#!/usr/bin/env python3
"""
NMEA GGA sentence parsing and log reading.

Only GGA (Global Positioning System Fix Data) sentences are turned into
positions. Every other line is ignored without error; a GGA sentence that is
malformed aborts the read with a SentenceParseError naming the line, the field
and the offending value.

Reference: NMEA Reference Manual, SiRF Technology, Rev 2.1 (Dec 2007).
"""

from typing import BinaryIO, Iterable, Iterator, List, Optional, Sequence
import logging
import re

from .exceptions import FileOpenError, LineReadError, SentenceParseError
from .geometry import Position

logger = logging.getLogger(__name__)

DEFAULT_TALKERS = ("GP", "GN")
GGA_FIELD_COUNT = 14
PROPRIETARY_PREFIX = "$P"

# ddmm.mmmm and dddmm.mmmm: fixed-width integer degrees, then decimal minutes
_LATITUDE = re.compile(r"(\d{2})(\d+(?:\.\d*)?|\.\d+)", re.ASCII)
_LONGITUDE = re.compile(r"(\d{3})(\d+(?:\.\d*)?|\.\d+)", re.ASCII)
_DECIMAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)
_CHECKSUM = re.compile(r"[0-9A-Fa-f]{2}", re.ASCII)

_HEMISPHERE_SIGNS = {
    "latitude": {"N": 1.0, "S": -1.0},
    "longitude": {"E": 1.0, "W": -1.0},
}


def nmea_checksum(body: str) -> int:
    """XOR of all characters between the leading '$' and the '*'."""
    checksum = 0
    for char in body:
        checksum ^= ord(char)
    return checksum


def _strip_checksum(
    line: str, verify: bool, line_number: Optional[int]
) -> str:
    """Remove a trailing '*hh' checksum, optionally verifying it first."""
    body, separator, checksum = line[1:].partition("*")
    if not verify:
        return "$" + body

    if not separator:
        raise SentenceParseError(
            "checksum", "", "Missing '*hh' checksum", line_number
        )
    checksum = checksum.strip()
    if not _CHECKSUM.fullmatch(checksum):
        raise SentenceParseError(
            "checksum", checksum, "Expecting two hexadecimal digits", line_number
        )
    actual = nmea_checksum(body)
    if int(checksum, 16) != actual:
        raise SentenceParseError(
            "checksum",
            checksum,
            f"Checksum mismatch; computed {actual:02X}",
            line_number,
        )
    return "$" + body


def _parse_coordinate(
    raw: str, pattern: "re.Pattern[str]", field: str, line_number: Optional[int]
) -> float:
    """Decode a packed degrees-minutes value into decimal degrees."""
    match = pattern.fullmatch(raw)
    if match is None:
        width = 2 if field == "latitude" else 3
        raise SentenceParseError(
            field,
            raw,
            f"Expecting a number formatted as {'d' * width}mm.mmmm",
            line_number,
        )
    degrees, minutes = match.groups()
    return float(degrees) + float(minutes) / 60.0


def _apply_hemisphere(
    value: float, indicator: str, field: str, line_number: Optional[int]
) -> float:
    signs = _HEMISPHERE_SIGNS[field]
    if indicator not in signs:
        expected = " or ".join(f"'{letter}'" for letter in signs)
        raise SentenceParseError(
            f"{field} hemisphere",
            indicator,
            f"Invalid hemisphere indicator; expecting {expected}",
            line_number,
        )
    return signs[indicator] * value


def parse_gga_fields(
    fields: Sequence[str], line_number: Optional[int] = None
) -> Optional[Position]:
    """
    Decode the fields of a GGA sentence (everything after the identifier).

    Args:
        fields: The comma-separated fields following '$xxGGA', checksum removed
        line_number: 1-based line number, used in error messages

    Returns:
        Position, or None if the sentence carries no fix (empty coordinate
        or altitude fields)

    Raises:
        SentenceParseError: On a wrong field count, an unparsable number or an
            invalid hemisphere indicator
    """
    if len(fields) != GGA_FIELD_COUNT:
        raise SentenceParseError(
            "sentence",
            str(len(fields)),
            f"Invalid GGA message length; expecting {GGA_FIELD_COUNT} fields",
            line_number,
        )

    raw_lat, ns, raw_lon, ew = fields[1], fields[2], fields[3], fields[4]
    raw_alt = fields[8]

    if not raw_lat or not raw_lon or not raw_alt:
        logger.debug(f"Line {line_number}: GGA sentence without a fix, skipping")
        return None

    latitude = _parse_coordinate(raw_lat, _LATITUDE, "latitude", line_number)
    longitude = _parse_coordinate(raw_lon, _LONGITUDE, "longitude", line_number)

    if _DECIMAL.fullmatch(raw_alt) is None:
        raise SentenceParseError(
            "altitude", raw_alt, "Expecting a decimal number of meters", line_number
        )
    altitude = float(raw_alt)

    latitude = _apply_hemisphere(latitude, ns, "latitude", line_number)
    longitude = _apply_hemisphere(longitude, ew, "longitude", line_number)

    return Position(latitude=latitude, longitude=longitude, altitude=altitude)


def parse_line(
    line: str,
    line_number: Optional[int] = None,
    talkers: Sequence[str] = DEFAULT_TALKERS,
    verify_checksum: bool = False,
) -> Optional[Position]:
    """
    Parse one line of a GPS log.

    Args:
        line: Raw text line (trailing whitespace is ignored)
        line_number: 1-based line number, used in error messages
        talkers: Accepted NMEA talker IDs; '$<talker>GGA' is recognised
        verify_checksum: Require and check the '*hh' checksum suffix

    Returns:
        Position for a GGA sentence with a fix, None for any other line

    Raises:
        SentenceParseError: If the line is a malformed GGA sentence
    """
    line = line.rstrip()
    if not line.startswith("$"):
        return None

    identifier = line.split(",", 1)[0].split("*", 1)[0]
    if identifier.startswith(PROPRIETARY_PREFIX):
        logger.debug(f"Line {line_number}: ignoring proprietary sentence {identifier}")
        return None
    if identifier not in {f"${talker}GGA" for talker in talkers}:
        return None

    body = _strip_checksum(line, verify_checksum, line_number)
    fields = body.split(",")[1:]
    return parse_gga_fields(fields, line_number)


def parse_lines(
    lines: Iterable[str],
    talkers: Sequence[str] = DEFAULT_TALKERS,
    verify_checksum: bool = False,
) -> List[Position]:
    """
    Parse every line of a log, keeping the positions in input order.

    Lines are numbered from 1. The first malformed GGA sentence aborts parsing.
    """
    positions = []
    ignored = 0
    line_number = 0
    for line_number, line in enumerate(lines, start=1):
        position = parse_line(line, line_number, talkers, verify_checksum)
        if position is None:
            ignored += 1
        else:
            positions.append(position)

    logger.debug(
        f"Parsed {len(positions)} positions from {line_number} lines ({ignored} ignored)"
    )
    return positions


def _decoded_lines(handle: BinaryIO, path: str) -> Iterator[str]:
    """Yield lines decoded one by one so decode errors name the right line."""
    line_number = 0
    while True:
        try:
            raw = handle.readline()
        except OSError as e:
            raise LineReadError(path, line_number + 1, str(e)) from e
        if not raw:
            return
        line_number += 1
        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise LineReadError(path, line_number, str(e)) from e
        yield line


def read_positions(
    path: str,
    talkers: Sequence[str] = DEFAULT_TALKERS,
    verify_checksum: bool = False,
) -> List[Position]:
    """
    Read a GPS log file and parse its positions.

    Args:
        path: Path to the log file
        talkers: Accepted NMEA talker IDs
        verify_checksum: Require and check sentence checksums

    Returns:
        List of Position objects in file order

    Raises:
        FileOpenError: If the file cannot be opened
        LineReadError: If a line cannot be read or is not valid UTF-8
        SentenceParseError: If a GGA sentence is malformed
    """
    try:
        handle = open(path, "rb")
    except OSError as e:
        raise FileOpenError(path, e.strerror or str(e)) from e

    with handle:
        positions = parse_lines(_decoded_lines(handle, path), talkers, verify_checksum)

    logger.info(f"Loaded {len(positions)} positions from {path}")
    return positions
