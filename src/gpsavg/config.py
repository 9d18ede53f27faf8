from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class GpsavgConfig:
    """Configuration for the gpsavg CLI."""

    outlier_sigma: float = 3.0
    histogram_cutoff: int = 3
    histogram_divisions: int = 6
    histogram_reference: str = "raw"
    show_histogram: bool = True
    talkers: Tuple[str, ...] = ("GP", "GN")
    verify_checksum: bool = False
    ellipsoid: str = "WGS84"
    log_level: str = "WARNING"
    metrics: bool = False
    short: bool = False
    create_map: bool = False
    output: Optional[str] = None
    open_map: bool = True
