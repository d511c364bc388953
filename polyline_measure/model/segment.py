"""Segment - The great-circle arc between two consecutive vertices.

A Segment is derived data: it is rebuilt from its endpoint coordinates
whenever either of them changes (new vertex, vertex drag). It owns:
- the sampled arc points used to draw the curve
- the haversine length
- the outbound bearing at its start and inbound bearing at its end
- the direction arrow at the arc's geodesic midpoint
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from polyline_measure.constants import MeasureConfig
from polyline_measure.core.geo_calculator import GeoCalculator, LatLon
from polyline_measure.model.coordinate import Coordinate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArrowMarker:
    """Direction arrow placed on a segment.

    Attributes:
        position: (lat, lon) of the arc's geodesic midpoint
        rotation_deg: Geographic bearing of the arc at that point (0 = North)
    """

    position: LatLon
    rotation_deg: float


@dataclass
class Segment:
    """Arc between vertex[i] and vertex[i+1] of a path.

    Attributes:
        start: Coordinate of vertex[i]
        end: Coordinate of vertex[i+1]
        arc_points: Number of samples along the arc

    Computed by recompute():
        points: (lat, lon) samples, longitudes unwrapped for continuity
        length_m: Haversine length in meters
        bearing_out: Initial bearing at start (0-360)
        bearing_in: Final bearing at end (0-360)
        arrow: Midpoint arrow, None for a degenerate (zero-length) arc
        revision: Incremented on every recompute (render cache key)
    """

    start: Coordinate
    end: Coordinate
    arc_points: int = MeasureConfig.ARC_POINTS

    points: list[LatLon] = field(default_factory=list, init=False)
    length_m: float = field(default=0.0, init=False)
    bearing_out: float = field(default=0.0, init=False)
    bearing_in: float = field(default=0.0, init=False)
    arrow: Optional[ArrowMarker] = field(default=None, init=False)
    revision: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self.recompute()

    @property
    def is_degenerate(self) -> bool:
        """True if both endpoints coincide (single-point arc)."""
        return len(self.points) < 2

    def set_start(self, start: Coordinate) -> None:
        """Move the start endpoint and recompute the arc."""
        self.start = start
        self.recompute()

    def set_end(self, end: Coordinate) -> None:
        """Move the end endpoint and recompute the arc."""
        self.end = end
        self.recompute()

    def recompute(self) -> None:
        """Rebuild arc points, length, bearings and arrow from the endpoints."""
        s, e = self.start, self.end
        self.points = GeoCalculator.interpolate_arc(
            lat1=s.lat,
            lon1=s.lon,
            lat2=e.lat,
            lon2=e.lon,
            n=self.arc_points,
        )
        self.length_m = s.distance_to(other=e)
        self.bearing_out = GeoCalculator.initial_bearing_deg(lon1=s.lon, lat1=s.lat, lon2=e.lon, lat2=e.lat)
        self.bearing_in = GeoCalculator.final_bearing_deg(lon1=s.lon, lat1=s.lat, lon2=e.lon, lat2=e.lat)
        self.arrow = self._compute_arrow()
        self.revision += 1

    def _compute_arrow(self) -> Optional[ArrowMarker]:
        """Place the arrow on the geographic arc, independent of projection.

        Position is the geodesic midpoint; rotation is the bearing between
        the two samples straddling the fixed interior index n // 2.
        """
        if self.is_degenerate:
            return None

        k = len(self.points) // 2
        (lat_a, lon_a), (lat_b, lon_b) = self.points[k - 1], self.points[k]
        rotation = GeoCalculator.initial_bearing_deg(lon1=lon_a, lat1=lat_a, lon2=lon_b, lat2=lat_b)

        mid_lat, mid_lon = GeoCalculator.midpoint(
            lat1=self.start.lat,
            lon1=self.start.lon,
            lat2=self.end.lat,
            lon2=self.end.lon,
        )
        # Keep the arrow on the same longitude branch as the drawn arc
        mid_lon += 360.0 * round((lon_a - mid_lon) / 360.0)
        return ArrowMarker(position=(mid_lat, mid_lon), rotation_deg=rotation)

    def __repr__(self) -> str:
        return f"Segment({self.start} -> {self.end}, {self.length_m:.0f}m, rev={self.revision})"
