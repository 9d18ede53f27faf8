"""
Position type and geodetic utilities.

Positions are plain (latitude, longitude, altitude) triples. Local
East-North-Up offsets are computed with pyproj on an explicitly named
ellipsoid rather than a hard-coded Earth model.
"""

from enum import Enum
from typing import NamedTuple, Tuple
import logging
import pyproj

logger = logging.getLogger(__name__)


class Position(NamedTuple):
    """Represents a geodetic position: degrees, degrees, meters."""

    latitude: float
    longitude: float
    altitude: float


class Axis(Enum):
    """The three scalar axes of a Position."""

    LATITUDE = "latitude"
    LONGITUDE = "longitude"
    ALTITUDE = "altitude"

    def __str__(self) -> str:
        return self.value

    def value_of(self, position: Position) -> float:
        """Project a position onto this axis."""
        return getattr(position, self.value)


def create_topocentric_transformer(
    reference: Position, ellipsoid: str = "WGS84"
) -> pyproj.Transformer:
    """
    Create a geodetic -> local East-North-Up transformer anchored at reference.

    Args:
        reference: Origin of the local tangent plane
        ellipsoid: PROJ ellipsoid name (see pyproj.get_ellps_map())

    Returns:
        pyproj.Transformer taking (longitude, latitude, altitude) in degrees/meters
        and returning (east, north, up) in meters

    Raises:
        ValueError: If the ellipsoid name is not known to PROJ
    """
    if ellipsoid not in pyproj.get_ellps_map():
        raise ValueError(f"Unknown ellipsoid: {ellipsoid}")

    proj_string = (
        f"+proj=pipeline "
        f"+step +proj=unitconvert +xy_in=deg +xy_out=rad "
        f"+step +proj=cart +ellps={ellipsoid} "
        f"+step +proj=topocentric +ellps={ellipsoid} "
        f"+lat_0={reference.latitude} +lon_0={reference.longitude} "
        f"+h_0={reference.altitude}"
    )
    return pyproj.Transformer.from_pipeline(proj_string)


def enu_offset(
    point: Position, reference: Position, ellipsoid: str = "WGS84"
) -> Tuple[float, float, float]:
    """
    Express point as an East-North-Up offset from reference.

    Args:
        point: Geodetic position to convert
        reference: Origin of the local tangent plane
        ellipsoid: PROJ ellipsoid name

    Returns:
        Tuple of (east, north, up) in meters
    """
    transformer = create_topocentric_transformer(reference, ellipsoid)
    east, north, up = transformer.transform(
        point.longitude, point.latitude, point.altitude
    )
    logger.debug(
        f"ENU offset on {ellipsoid}: east={east:.3f}m, north={north:.3f}m, up={up:.3f}m"
    )
    return (float(east), float(north), float(up))
