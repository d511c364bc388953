"""Data model classes for geodesic path measuring.

Follows the separation of Geometry (where things are) vs Topology (how things connect):
- Coordinate: Geometry atom (lat, lon)
- Vertex: User-placed point (wraps Coordinate, addressed by path ID and index)
- Segment: Great-circle arc between consecutive vertices
- Tooltip: Raw distance/bearing readout per vertex
- Path: Ordered vertices and segments, building or finalized
- PathSet: Central manager owning all paths
"""

from polyline_measure.model.coordinate import Coordinate
from polyline_measure.model.errors import (
    IllegalTransitionError,
    InvalidCoordinateError,
    MeasureError,
)
from polyline_measure.model.path import Path, RubberBand
from polyline_measure.model.path_set import PathSet
from polyline_measure.model.segment import ArrowMarker, Segment
from polyline_measure.model.tooltip import Tooltip, TooltipFormatter
from polyline_measure.model.vertex import Vertex, VertexRole

__all__ = [
    "Coordinate",
    "Vertex",
    "VertexRole",
    "Segment",
    "ArrowMarker",
    "Tooltip",
    "TooltipFormatter",
    "Path",
    "RubberBand",
    "PathSet",
    "MeasureError",
    "InvalidCoordinateError",
    "IllegalTransitionError",
]
