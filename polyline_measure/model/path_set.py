"""PathSet - Central manager owning all measured paths.

Holds the completed paths (append-only except full clear) plus the one path
currently being built. Vertices are addressed arena-style by
(path_id, vertex_index); completed_paths[k].id == k always holds.

A resumed path stays in completed_paths while it is active again, so its ID
and position never change. At most one path is building at any time.
"""

import logging
from typing import Optional

from polyline_measure.constants import MeasureConfig
from polyline_measure.core.unit_converter import MeasurementUnit
from polyline_measure.model.coordinate import Coordinate
from polyline_measure.model.errors import IllegalTransitionError
from polyline_measure.model.path import Path, RubberBand
from polyline_measure.model.vertex import Vertex

logger = logging.getLogger(__name__)


class PathSet:
    """All paths of one measuring session.

    Attributes:
        unit: Global unit system for all readouts
        show_bearings: Global bearing display switch
        arc_points: Samples per segment arc for new paths
        active_path: Path being built, None if none
        completed_paths: Finalized paths (and a resumed one), indexed by ID

    Example:
        paths = PathSet()
        paths.add_vertex(coord=Coordinate(lat=0.0, lon=0.0))
        paths.add_vertex(coord=Coordinate(lat=0.0, lon=1.0))
        path = paths.finalize_active()
        print(path.id, paths.completed_paths[0] is path)  # 0 True
    """

    def __init__(
        self,
        unit: MeasurementUnit = MeasurementUnit.METRIC,
        show_bearings: bool = MeasureConfig.SHOW_BEARINGS,
        arc_points: int = MeasureConfig.ARC_POINTS,
    ) -> None:
        self.unit = unit
        self.show_bearings = show_bearings
        self.arc_points = arc_points
        self.active_path: Optional[Path] = None
        self.completed_paths: list[Path] = []

    @property
    def is_building(self) -> bool:
        """True if a path is currently accepting vertices."""
        return self.active_path is not None

    def path(self, path_id: int) -> Path:
        """Look up a path by ID (completed or the new active one).

        Raises:
            IllegalTransitionError: If no such path exists.
        """
        if 0 <= path_id < len(self.completed_paths):
            return self.completed_paths[path_id]
        if self.active_path is not None and self.active_path.id == path_id:
            return self.active_path
        raise IllegalTransitionError(f"Unknown path {path_id}")

    def all_paths(self) -> list[Path]:
        """Completed paths followed by a new (never finalized) active path."""
        paths = list(self.completed_paths)
        if self.active_path is not None and self.active_path.id >= len(self.completed_paths):
            paths.append(self.active_path)
        return paths

    # ==========================================================================
    # Building
    # ==========================================================================

    def add_vertex(self, coord: Coordinate) -> Optional[Vertex]:
        """Add a vertex to the active path, starting a new path if none is active.

        Returns:
            The new Vertex, or None for a duplicate click.
        """
        if self.active_path is None:
            self.active_path = Path(id=len(self.completed_paths), arc_points=self.arc_points)
            logger.info(f"[PATHSET] Started path {self.active_path.id}")
        return self.active_path.add_vertex(coord=coord)

    def move_cursor(self, coord: Coordinate) -> Optional[RubberBand]:
        if self.active_path is None:
            return None
        return self.active_path.move_cursor(coord=coord)

    def finalize_active(self) -> Optional[Path]:
        """Finalize the active path.

        Single-vertex paths are discarded. A resumed path is already in
        completed_paths and keeps its place.

        Returns:
            The finalized path, or None if nothing was active or it was discarded.
        """
        path = self.active_path
        if path is None:
            return None
        self.active_path = None

        keep = path.finalize()
        is_resumed = path.id < len(self.completed_paths) and self.completed_paths[path.id] is path
        if is_resumed:
            return path
        if not keep:
            return None
        self.completed_paths.append(path)
        assert self.completed_paths[path.id] is path, f"Path ID {path.id} does not match its position"
        return path

    def resume(self, path_id: int, vertex_index: int) -> Path:
        """Reopen a completed path from its last vertex.

        Raises:
            IllegalTransitionError: If a path is building, the path is unknown
                or the vertex is not its last one.
        """
        if self.is_building:
            raise IllegalTransitionError(f"Cannot resume path {path_id} while path {self.active_path.id} is building")
        path = self.path(path_id=path_id)
        path.resume(from_vertex_index=vertex_index)
        self.active_path = path
        return path

    # ==========================================================================
    # Editing
    # ==========================================================================

    def move_vertex(self, path_id: int, vertex_index: int, coord: Coordinate) -> tuple[int, ...]:
        """Drag dispatch: move a vertex of a completed path.

        Returns:
            Indices of the recomputed segments of that path.

        Raises:
            IllegalTransitionError: If a path is building or the address is unknown.
        """
        if self.is_building:
            raise IllegalTransitionError("Vertices cannot be moved while a path is building")
        return self.path(path_id=path_id).move_vertex(index=vertex_index, coord=coord)

    def set_unit(self, unit: MeasurementUnit) -> None:
        """Switch the unit system. Stored meters are untouched."""
        self.unit = unit
        logger.info(f"[PATHSET] Unit set to {unit.value}")

    def clear(self) -> None:
        """Remove every path, including the active one."""
        count = len(self.all_paths())
        self.active_path = None
        self.completed_paths = []
        logger.info(f"[PATHSET] Cleared {count} path(s)")

    def __repr__(self) -> str:
        active = self.active_path.id if self.active_path is not None else None
        return f"PathSet(completed={len(self.completed_paths)}, active={active}, unit={self.unit.value})"
