"""Vertex - User-placed point on a measured path.

A Vertex wraps a Coordinate (single source of truth for its location) and
carries its arena-style identity: the owning path's ID and its position
within that path. Both are fixed at creation; only the coordinate changes,
and only while the vertex is dragged.

The vertex role (start/intermediate/current/end) is not stored. It is
derived from the vertex position and the path state by Path.role_of().
"""

from dataclasses import dataclass
from enum import Enum

from polyline_measure.constants import StyleConfig
from polyline_measure.model.coordinate import Coordinate


class VertexRole(Enum):
    """Display role of a vertex, selecting its circle marker style."""

    START = "start"
    INTERMEDIATE = "intermediate"
    CURRENT = "current"
    END = "end"

    @property
    def style(self) -> dict:
        """Circle style record from StyleConfig.CIRCLE_STYLES."""
        return StyleConfig.CIRCLE_STYLES[self.value]


assert {role.value for role in VertexRole} == set(StyleConfig.CIRCLE_STYLES.keys())


@dataclass
class Vertex:
    """A user-placed point on a path.

    Attributes:
        coordinate: Current location (replaced when dragged)
        index: 0-based position within the path
        path_id: ID of the owning path

    Example:
        vertex = Vertex(coordinate=Coordinate(lat=0.0, lon=1.0), index=1, path_id=0)
        print(vertex.key)  # (0, 1)
    """

    coordinate: Coordinate
    index: int
    path_id: int

    @property
    def lat(self) -> float:
        """Latitude delegated from coordinate."""
        return self.coordinate.lat

    @property
    def lon(self) -> float:
        """Longitude delegated from coordinate."""
        return self.coordinate.lon

    @property
    def key(self) -> tuple[int, int]:
        """Arena address (path_id, index) used by PathSet and the renderer."""
        return (self.path_id, self.index)

    def __repr__(self) -> str:
        return f"Vertex(path={self.path_id}, index={self.index}, {self.coordinate})"
