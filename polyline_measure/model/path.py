"""Path - An ordered sequence of vertices joined by great-circle segments.

A Path has two states:
    Building: accepting new vertices, rubber-band preview follows the pointer
    Finalized: closed; only its last vertex can resume building, and any
        vertex can be dragged

Transitions:
    add_vertex: Building -> Building
    finalize: Building -> Finalized
    resume: Finalized -> Building (last vertex only)
    move_vertex: Finalized -> Finalized

Every rejected transition raises IllegalTransitionError before touching any
state, so a failed gesture never leaves a half-updated path.

Derived data (segments, tooltips, total distance) is kept consistent after
every mutation: a vertex move recomputes only its two neighbouring segments
and the tooltips whose readout depends on them.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from polyline_measure.constants import MeasureConfig
from polyline_measure.model.coordinate import Coordinate
from polyline_measure.model.errors import IllegalTransitionError
from polyline_measure.model.segment import Segment
from polyline_measure.model.tooltip import Tooltip
from polyline_measure.model.vertex import Vertex, VertexRole

logger = logging.getLogger(__name__)


@dataclass
class RubberBand:
    """Transient preview from the last vertex to the pointer.

    Attributes:
        segment: Arc from the last committed vertex to the pointer
        tooltip: Readout as if the pointer location were committed
        lon_offset: Multiple of 360° the last vertex is drawn at (see Path.display_offsets)
    """

    segment: Segment
    tooltip: Tooltip
    lon_offset: float = 0.0


@dataclass
class Path:
    """A measured path.

    Attributes:
        id: Index within the PathSet's completed paths (stable)
        arc_points: Samples per segment arc
        vertices: Ordered vertices, index == position
        segments: segments[i] joins vertices[i] and vertices[i + 1]
        tooltips: Readout per vertex index (>= 1); vertex 0 has none
        finalized: True once the user closed the path
        rubber_band: Live preview while building, None otherwise

    Example:
        path = Path(id=0)
        path.add_vertex(coord=Coordinate(lat=0.0, lon=0.0))
        path.add_vertex(coord=Coordinate(lat=0.0, lon=1.0))
        path.finalize()
        print(round(path.total_distance_m))  # 111195
    """

    id: int
    arc_points: int = MeasureConfig.ARC_POINTS
    vertices: list[Vertex] = field(default_factory=list)
    segments: list[Segment] = field(default_factory=list)
    tooltips: dict[int, Tooltip] = field(default_factory=dict)
    finalized: bool = False
    rubber_band: Optional[RubberBand] = None

    # ==========================================================================
    # Queries
    # ==========================================================================

    @property
    def is_building(self) -> bool:
        return not self.finalized

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def last_vertex(self) -> Optional[Vertex]:
        return self.vertices[-1] if self.vertices else None

    @property
    def total_distance_m(self) -> float:
        """Sum of all committed segment lengths in meters."""
        return sum(segment.length_m for segment in self.segments)

    def cumulative_distance_m(self, index: int) -> float:
        """Distance along the path from vertex 0 to vertex `index`."""
        return sum(segment.length_m for segment in self.segments[:index])

    def is_last_vertex(self, index: int) -> bool:
        return bool(self.vertices) and index == len(self.vertices) - 1

    def role_of(self, index: int) -> VertexRole:
        """Derive the display role of a vertex from its position and path state."""
        if self.is_last_vertex(index=index):
            return VertexRole.END if self.finalized else VertexRole.CURRENT
        if index == 0:
            return VertexRole.START
        return VertexRole.INTERMEDIATE

    def display_offsets(self) -> list[float]:
        """Per-vertex longitude shift (a multiple of 360°) for drawing.

        Stored coordinates stay in (-180, 180]. For drawing, vertex 0 keeps its
        longitude and every later vertex follows the end of the arc leading to
        it, so a path crossing the antimeridian stays on one continuous branch.
        Segment i is drawn shifted by offsets[i].
        """
        if not self.vertices:
            return []
        offsets = [0.0]
        for i, segment in enumerate(self.segments):
            arc_end_lon = segment.points[-1][1] + offsets[i]
            vertex_lon = self.vertices[i + 1].coordinate.lon
            offsets.append(360.0 * round((arc_end_lon - vertex_lon) / 360.0))
        return offsets

    # ==========================================================================
    # Building
    # ==========================================================================

    def add_vertex(self, coord: Coordinate) -> Optional[Vertex]:
        """Append a vertex and its trailing segment.

        Args:
            coord: Location of the new vertex

        Returns:
            The new Vertex, or None if coord repeats the last vertex (ignored).

        Raises:
            IllegalTransitionError: If the path is finalized.
        """
        if self.finalized:
            raise IllegalTransitionError(f"Path {self.id} is finalized, resume it before adding vertices")

        previous = self.last_vertex
        if previous is not None and previous.coordinate.is_same_location(other=coord):
            logger.debug(f"[PATH] Path {self.id}: duplicate click at {coord} ignored")
            return None

        vertex = Vertex(coordinate=coord, index=len(self.vertices), path_id=self.id)
        self.vertices.append(vertex)

        if previous is not None:
            segment = Segment(start=previous.coordinate, end=coord, arc_points=self.arc_points)
            self.segments.append(segment)
            if previous.index in self.tooltips:
                self.tooltips[previous.index].bearing_out = segment.bearing_out
            self.tooltips[vertex.index] = Tooltip(
                total_m=self.total_distance_m,
                difference_m=segment.length_m,
                bearing_in=segment.bearing_in,
            )

        # Preview restarts from the new vertex on the next pointer move
        self.rubber_band = None
        logger.info(f"[PATH] Path {self.id}: added vertex {vertex.index} at {coord}")
        return vertex

    def move_cursor(self, coord: Coordinate) -> Optional[RubberBand]:
        """Update the rubber-band preview towards the pointer.

        Committed vertices, segments and tooltips are never touched.

        Returns:
            The updated RubberBand, or None when not building or still empty.
        """
        last = self.last_vertex
        if self.finalized or last is None:
            return None

        if self.rubber_band is None or self.rubber_band.segment.start != last.coordinate:
            segment = Segment(start=last.coordinate, end=coord, arc_points=self.arc_points)
        else:
            segment = self.rubber_band.segment
            segment.set_end(end=coord)

        self.rubber_band = RubberBand(
            segment=segment,
            tooltip=Tooltip(
                total_m=self.total_distance_m + segment.length_m,
                difference_m=segment.length_m,
                bearing_in=segment.bearing_in,
            ),
            lon_offset=self.display_offsets()[-1],
        )
        return self.rubber_band

    def finalize(self) -> bool:
        """Close the path and drop the rubber-band preview.

        Returns:
            True if the path measures something, False if it holds a single
            vertex and must be discarded by its owner.

        Raises:
            IllegalTransitionError: If already finalized.
        """
        if self.finalized:
            raise IllegalTransitionError(f"Path {self.id} is already finalized")
        self.rubber_band = None
        self.finalized = True
        keep = len(self.vertices) > 1
        logger.info(
            f"[PATH] Path {self.id}: finalized with {len(self.vertices)} vertices, "
            f"{self.total_distance_m:.1f}m" + ("" if keep else " (single vertex, discarded)")
        )
        return keep

    def resume(self, from_vertex_index: int) -> None:
        """Reopen a finalized path for building from its last vertex.

        Raises:
            IllegalTransitionError: If the path is building or the vertex is not its last one.
        """
        if not self.finalized:
            raise IllegalTransitionError(f"Path {self.id} is not finalized, nothing to resume")
        if not self.is_last_vertex(index=from_vertex_index):
            raise IllegalTransitionError(
                f"Path {self.id} can only resume from its last vertex "
                f"{len(self.vertices) - 1}, got {from_vertex_index}"
            )
        self.finalized = False
        logger.info(f"[PATH] Path {self.id}: resumed from vertex {from_vertex_index}")

    # ==========================================================================
    # Editing
    # ==========================================================================

    def move_vertex(self, index: int, coord: Coordinate) -> tuple[int, ...]:
        """Move a vertex and recompute everything that depends on it.

        Recomputes the segment ending at the vertex (index > 0) and the one
        starting at it (index < last), then the tooltips from the vertex
        before it onward. Earlier cumulative distances are unchanged.

        Args:
            index: Vertex index within this path
            coord: New location

        Returns:
            Indices of the recomputed segments.

        Raises:
            IllegalTransitionError: If the path is building or index is unknown.
        """
        if not self.finalized:
            raise IllegalTransitionError(f"Path {self.id} is building, vertices cannot be moved")
        if not 0 <= index < len(self.vertices):
            raise IllegalTransitionError(f"Path {self.id} has no vertex {index}")

        self.vertices[index].coordinate = coord

        recomputed: list[int] = []
        if index > 0:
            self.segments[index - 1].set_end(end=coord)
            recomputed.append(index - 1)
        if index < len(self.segments):
            self.segments[index].set_start(start=coord)
            recomputed.append(index)

        self._recompute_tooltips(from_index=max(index - 1, 1))
        logger.debug(f"[PATH] Path {self.id}: vertex {index} moved to {coord}, segments {recomputed}")
        return tuple(recomputed)

    def _recompute_tooltips(self, from_index: int) -> None:
        """Rebuild tooltip records for vertices from_index..last."""
        total = self.cumulative_distance_m(index=from_index - 1)
        for i in range(from_index, len(self.vertices)):
            incoming = self.segments[i - 1]
            total += incoming.length_m
            outgoing = self.segments[i] if i < len(self.segments) else None
            self.tooltips[i] = Tooltip(
                total_m=total,
                difference_m=incoming.length_m,
                bearing_in=incoming.bearing_in,
                bearing_out=outgoing.bearing_out if outgoing is not None else None,
            )

    def __repr__(self) -> str:
        state = "finalized" if self.finalized else "building"
        return f"Path(id={self.id}, vertices={len(self.vertices)}, {self.total_distance_m:.1f}m, {state})"
