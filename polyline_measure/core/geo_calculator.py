"""Geodesic calculations on Earth's surface.

Provides the geographic math behind polyline measuring:
- Distance calculation (Haversine formula)
- Bearing calculation (initial and final heading between points)
- Great-circle arc interpolation (spherical linear interpolation)
- Geodesic midpoint

All calculations use a spherical Earth approximation (R = 6,371 km).
"""

from math import atan2, cos, degrees, pi, radians, sin, sqrt

import numpy as np

from polyline_measure.constants import MeasureConfig

# Earth's radius in meters (spherical approximation)
EARTH_RADIUS_M = MeasureConfig.EARTH_RADIUS_M

# (lat, lon) in decimal degrees
LatLon = tuple[float, float]


class GeoCalculator:
    """Static methods for geodesic calculations on Earth's surface.

    All methods use a spherical Earth model (R = 6,371 km).
    Coordinates are in decimal degrees (WGS84).
    Bearings are in degrees clockwise from North (0-360).
    Distances are in meters.
    """

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate great-circle distance between two points using Haversine formula.

        Args:
            lat1: Latitude of first point (decimal degrees)
            lon1: Longitude of first point (decimal degrees)
            lat2: Latitude of second point (decimal degrees)
            lon2: Longitude of second point (decimal degrees)

        Returns:
            Distance in meters.
        """
        dlat = radians(lat2 - lat1)
        dlon = radians(lon2 - lon1)
        a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
        # Rounding can push a slightly past 1 for antipodal points
        a = min(1.0, a)
        return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))

    @staticmethod
    def initial_bearing_deg(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
        """Calculate initial bearing from point 1 to point 2.

        The bearing is the compass direction to travel from start to end,
        measured clockwise from true North.

        Args:
            lon1: Longitude of start point (decimal degrees)
            lat1: Latitude of start point (decimal degrees)
            lon2: Longitude of end point (decimal degrees)
            lat2: Latitude of end point (decimal degrees)

        Returns:
            Bearing in degrees (0-360, clockwise from North).
        """
        lon1_rad, lat1_rad = radians(lon1), radians(lat1)
        lon2_rad, lat2_rad = radians(lon2), radians(lat2)
        dlon = lon2_rad - lon1_rad
        y = sin(dlon) * cos(lat2_rad)
        x = cos(lat1_rad) * sin(lat2_rad) - sin(lat1_rad) * cos(lat2_rad) * cos(dlon)
        return (degrees(atan2(y, x)) + 360) % 360

    @staticmethod
    def final_bearing_deg(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
        """Calculate the bearing on arrival at point 2 when coming from point 1.

        Computed as the reversed initial bearing of the opposite direction.

        Returns:
            Bearing in degrees (0-360, clockwise from North).
        """
        reverse = GeoCalculator.initial_bearing_deg(lon1=lon2, lat1=lat2, lon2=lon1, lat2=lat1)
        return (reverse + 180) % 360

    @staticmethod
    def central_angle_rad(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Angle between two points seen from Earth's center.

        Uses atan2(|a x b|, a . b), which stays well-conditioned near both
        0 and pi (unlike acos of the dot product).
        """
        a = GeoCalculator._to_unit_vector(lat=lat1, lon=lon1)
        b = GeoCalculator._to_unit_vector(lat=lat2, lon=lon2)
        return float(np.arctan2(np.linalg.norm(np.cross(a, b)), np.dot(a, b)))

    @staticmethod
    def interpolate_arc(
        lat1: float,
        lon1: float,
        lat2: float,
        lon2: float,
        n: int = MeasureConfig.ARC_POINTS,
    ) -> list[LatLon]:
        """Sample n points along the minor great-circle arc from point 1 to point 2.

        Points are produced by spherical linear interpolation (slerp) of the
        Cartesian unit vectors and converted back with atan2, so the full
        ±180° longitude range survives. Longitudes are unwrapped point by point
        against the previous (already unwrapped) longitude, so an arc crossing
        the antimeridian is continuous (e.g. 179 → 181 instead of 179 → -179).

        Edge cases:
            - Coincident points: a single point (lat1, lon1) is returned.
            - Antipodal points: every great circle through both points is
              minimal; the meridian through point 1, heading north, is used.

        Args:
            lat1, lon1: Start point (decimal degrees)
            lat2, lon2: End point (decimal degrees)
            n: Number of points including both endpoints (>= 2)

        Returns:
            List of (lat, lon) tuples. The first is exactly (lat1, lon1); the
            last is (lat2, lon2 + k*360) for the k that keeps the arc continuous.

        Raises:
            ValueError: If n < 2.
        """
        if n < MeasureConfig.MIN_ARC_POINTS:
            raise ValueError(f"Arc needs at least {MeasureConfig.MIN_ARC_POINTS} points, got {n}")

        start = GeoCalculator._to_unit_vector(lat=lat1, lon=lon1)
        end = GeoCalculator._to_unit_vector(lat=lat2, lon=lon2)
        d = GeoCalculator.central_angle_rad(lat1=lat1, lon1=lon1, lat2=lat2, lon2=lon2)

        if d < MeasureConfig.COINCIDENT_TOLERANCE_RAD:
            return [(lat1, lon1)]

        t = np.linspace(0.0, 1.0, n)
        if pi - d < MeasureConfig.ANTIPODAL_TOLERANCE_RAD:
            # sin(d) -> 0: slerp weights blow up, rotate through the north tangent instead
            tangent = GeoCalculator._north_tangent(lat=lat1, lon=lon1)
            xyz = np.outer(np.cos(pi * t), start) + np.outer(np.sin(pi * t), tangent)
        else:
            sin_d = sin(d)
            xyz = np.outer(np.sin((1 - t) * d) / sin_d, start) + np.outer(np.sin(t * d) / sin_d, end)

        lats = np.degrees(np.arctan2(xyz[:, 2], np.hypot(xyz[:, 0], xyz[:, 1])))
        lons = np.degrees(np.arctan2(xyz[:, 1], xyz[:, 0]))

        lats[0] = lat1
        lons[0] = lon1
        lons = GeoCalculator.unwrap_longitudes(lons=lons)

        # Snap the end onto the exact target, shifted onto the arc's own branch
        lats[-1] = lat2
        lons[-1] = lon2 + 360.0 * round((lons[-1] - lon2) / 360.0)

        return [(float(lat), float(lon)) for lat, lon in zip(lats, lons)]

    @staticmethod
    def unwrap_longitudes(lons: np.ndarray) -> np.ndarray:
        """Remove 360° jumps between consecutive longitudes.

        Each longitude is shifted by the multiple of 360° that brings it
        closest to its predecessor's unwrapped value. The first value is kept.

        Args:
            lons: Longitudes in degrees

        Returns:
            New array of unwrapped longitudes.
        """
        lons = np.asarray(lons, dtype=float)
        if lons.size < 2:
            return lons.copy()
        steps = np.diff(lons)
        steps -= 360.0 * np.round(steps / 360.0)
        unwrapped = np.empty_like(lons)
        unwrapped[0] = lons[0]
        unwrapped[1:] = lons[0] + np.cumsum(steps)
        return unwrapped

    @staticmethod
    def midpoint(lat1: float, lon1: float, lat2: float, lon2: float) -> LatLon:
        """Geodesic midpoint of the minor arc between two points.

        Returns:
            (lat, lon) of the midpoint; point 1 itself for coincident points.
        """
        arc = GeoCalculator.interpolate_arc(lat1=lat1, lon1=lon1, lat2=lat2, lon2=lon2, n=3)
        return arc[len(arc) // 2]

    @staticmethod
    def _to_unit_vector(lat: float, lon: float) -> np.ndarray:
        """Convert (lat, lon) in degrees to a Cartesian unit vector."""
        lat_rad, lon_rad = radians(lat), radians(lon)
        return np.array(
            [
                cos(lat_rad) * cos(lon_rad),
                cos(lat_rad) * sin(lon_rad),
                sin(lat_rad),
            ]
        )

    @staticmethod
    def _north_tangent(lat: float, lon: float) -> np.ndarray:
        """Unit vector tangent to the meridian at (lat, lon), pointing north.

        At the poles this degenerates to the direction along the given
        meridian, which is still perpendicular to the position vector.
        """
        lat_rad, lon_rad = radians(lat), radians(lon)
        return np.array(
            [
                -sin(lat_rad) * cos(lon_rad),
                -sin(lat_rad) * sin(lon_rad),
                cos(lat_rad),
            ]
        )
