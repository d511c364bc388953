"""Coordinate - The fundamental geometry atom for polyline measuring.

A Coordinate is an immutable (lat, lon) pair in decimal degrees.
It is the single source of truth for location throughout the engine.

Used by:
- Vertex (user-placed point on a path)
- Segment (endpoints of a great-circle arc)
- MapSurface events (pointer and click locations)
"""

import math
from dataclasses import dataclass

from polyline_measure.constants import CoordinateConfig
from polyline_measure.core.geo_calculator import GeoCalculator
from polyline_measure.model.errors import InvalidCoordinateError


def normalize_longitude(lon: float) -> float:
    """Wrap a longitude into (-180, 180]; values already inside are returned as is."""
    if -180.0 < lon <= 180.0:
        return lon
    wrapped = math.fmod(lon + 180.0, 360.0)
    if wrapped <= 0.0:
        wrapped += 360.0
    return wrapped - 180.0



@dataclass(frozen=True)
class Coordinate:
    """A geographic location in decimal degrees (WGS84).

    Latitude must lie in [-90, 90]; longitude is wrapped into (-180, 180]
    on construction. Construction is the validation boundary: everything
    downstream assumes valid coordinates.

    Attributes:
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees, normalized

    Example:
        coord = Coordinate(lat=46.98, lon=190.0)
        print(coord.lon)  # -170.0
    """

    lat: float
    lon: float

    def __post_init__(self) -> None:
        """Validate latitude and normalize longitude."""
        if not math.isfinite(self.lat) or not math.isfinite(self.lon):
            raise InvalidCoordinateError(f"Coordinate must be finite, got ({self.lat}, {self.lon})")
        if not CoordinateConfig.MIN_LAT <= self.lat <= CoordinateConfig.MAX_LAT:
            raise InvalidCoordinateError(f"Latitude {self.lat} outside [-90, 90]")
        # Frozen dataclass: bypass __setattr__ for normalization
        object.__setattr__(self, "lon", normalize_longitude(self.lon))

    @property
    def lat_lon(self) -> tuple[float, float]:
        """Return (lat, lon) tuple - standard geographic order."""
        return (self.lat, self.lon)

    @property
    def lon_lat(self) -> tuple[float, float]:
        """Return (lon, lat) tuple - GeoJSON/Pydeck order."""
        return (self.lon, self.lat)

    def distance_to(self, other: "Coordinate") -> float:
        """Calculate haversine distance to another coordinate in meters."""
        return GeoCalculator.haversine_distance_m(
            lat1=self.lat,
            lon1=self.lon,
            lat2=other.lat,
            lon2=other.lon,
        )

    def is_same_location(self, other: "Coordinate") -> bool:
        """Check if two coordinates denote the same location within tolerance.

        Longitudes are compared modulo 360, so 180 and -180 are equal.
        """
        tol = CoordinateConfig.SAME_LOCATION_TOLERANCE_DEG
        dlon = abs(self.lon - other.lon) % 360.0
        return abs(self.lat - other.lat) <= tol and min(dlon, 360.0 - dlon) <= tol

    def offset(self, dlat: float, dlon: float) -> "Coordinate":
        """Return a new coordinate shifted by the given degrees.

        Latitude is clamped to [-90, 90]; longitude wraps.
        """
        lat = min(CoordinateConfig.MAX_LAT, max(CoordinateConfig.MIN_LAT, self.lat + dlat))
        return Coordinate(lat=lat, lon=self.lon + dlon)

    def __repr__(self) -> str:
        return f"Coordinate(lat={self.lat:.6f}, lon={self.lon:.6f})"
