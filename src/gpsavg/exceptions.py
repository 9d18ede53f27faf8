"""
Errors raised while reading, parsing and summarising a GPS fix log.

Every error aborts the run; the CLI logs the message and exits non-zero, so
each message carries enough context (path, line number, field, raw value) to
locate the problem in the input.
"""

from typing import Optional


class GpsavgError(Exception):
    """Base class for all gpsavg errors."""


class FileOpenError(GpsavgError):
    """The input log could not be opened."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read input file at {path}: {reason}")


class LineReadError(GpsavgError):
    """A line of the input log could not be read or decoded."""

    def __init__(self, path: str, line_number: int, reason: str):
        self.path = path
        self.line_number = line_number
        self.reason = reason
        super().__init__(
            f"Failed to read line {line_number} of the input file {path}: {reason}"
        )


class SentenceParseError(GpsavgError, ValueError):
    """A recognised fix sentence is malformed."""

    def __init__(
        self,
        field: str,
        value: str,
        reason: str,
        line_number: Optional[int] = None,
    ):
        self.field = field
        self.value = value
        self.reason = reason
        self.line_number = line_number
        super().__init__(self._format())

    def _format(self) -> str:
        if self.line_number is not None:
            location = f"line {self.line_number} of the input file"
        else:
            location = "the sentence"
        return (
            f"Failed to parse {location}: "
            f"{self.reason} (field '{self.field}', got '{self.value}')"
        )


class StatisticsError(GpsavgError, ValueError):
    """Statistics were requested on a position set where they are undefined."""
