"""Measure renderer - Thin adapter from the path model to host drawables.

MeasureRenderer is the only code that creates, updates or removes
drawables. It keeps them in arena-style maps keyed by (path_id, index):

- segment lines and arrows: (path_id, segment_index)
- vertex circles and tooltips: (path_id, vertex_index)

Segment drawables remember the Segment.revision they show, so a sync only
touches segments that were actually recomputed.

Z-order (back to front): segment lines → rubber-band → arrows → circles → tooltips
(creation order within each host layer; the pydeck surface groups by kind).
"""

from __future__ import annotations

import logging
from typing import Callable

from polyline_measure.constants import StyleConfig
from polyline_measure.model.path import Path, RubberBand
from polyline_measure.model.path_set import PathSet
from polyline_measure.model.segment import Segment
from polyline_measure.model.tooltip import TooltipFormatter
from polyline_measure.model.vertex import VertexRole
from polyline_measure.ui.surface import (
    CircleStyle,
    Drawable,
    LineStyle,
    MapSurface,
    PointerEvent,
    Subscription,
    TextStyle,
)

logger = logging.getLogger(__name__)

# (lat, lon)
LatLon = tuple[float, float]

# (path_id, index)
DrawableKey = tuple[int, int]
VertexHandler = Callable[[int, int, PointerEvent], None]


def shift_lon(points: list[LatLon], lon_offset: float) -> list[LatLon]:
    """Move points onto another 360° longitude branch."""
    if not lon_offset:
        return list(points)
    return [(lat, lon + lon_offset) for lat, lon in points]


class MeasureRenderer:
    """Renders paths onto a MapSurface.

    Args:
        surface: Host map
        formatter: Tooltip text formatter for the current unit/bearing options
        on_vertex_click: Called with (path_id, vertex_index, event) on circle click
        on_vertex_pointer_down: Called with (path_id, vertex_index, event) on circle pointer-down
    """

    def __init__(
        self,
        surface: MapSurface,
        formatter: TooltipFormatter,
        on_vertex_click: VertexHandler,
        on_vertex_pointer_down: VertexHandler,
    ) -> None:
        self.surface = surface
        self.formatter = formatter
        self._on_vertex_click = on_vertex_click
        self._on_vertex_pointer_down = on_vertex_pointer_down

        self.segment_lines: dict[DrawableKey, Drawable] = {}
        self.arrows: dict[DrawableKey, Drawable] = {}
        self.circles: dict[DrawableKey, Drawable] = {}
        self.tooltips: dict[DrawableKey, Drawable] = {}
        self._segment_revisions: dict[DrawableKey, tuple[int, float]] = {}
        self._circle_roles: dict[DrawableKey, VertexRole] = {}
        self._circle_hooks: dict[DrawableKey, list[Subscription]] = {}

        self.rubber_line: Drawable | None = None
        self.rubber_tooltip: Drawable | None = None

    # =========================================================================
    # PATHS
    # =========================================================================

    def sync_path(self, path: Path) -> None:
        """Create missing drawables for a path and restyle its vertices."""
        offsets = path.display_offsets()
        for i, segment in enumerate(path.segments):
            self._sync_segment(path_id=path.id, index=i, segment=segment, lon_offset=offsets[i])
        for vertex in path.vertices:
            self._sync_circle(path=path, index=vertex.index, lon_offset=offsets[vertex.index])
            if vertex.index in path.tooltips:
                self._sync_tooltip(path=path, index=vertex.index, lon_offset=offsets[vertex.index])

    def refresh_segments(self, path: Path, segment_indices: tuple[int, ...]) -> None:
        """Update recomputed segments plus the vertices and tooltips depending on them.

        Tooltips are refreshed from the first affected vertex onward (never
        vertex 0), since every later cumulative distance changed. Later
        segments are redrawn only if the move put them on another longitude
        branch.
        """
        if not segment_indices:
            return
        first = min(segment_indices)
        offsets = path.display_offsets()
        for i in range(first, len(path.segments)):
            self._sync_segment(path_id=path.id, index=i, segment=path.segments[i], lon_offset=offsets[i])

        for index in range(first, path.vertex_count):
            self._sync_circle(path=path, index=index, lon_offset=offsets[index])

        for index in range(max(first, 1), path.vertex_count):
            self._sync_tooltip(path=path, index=index, lon_offset=offsets[index])

    def refresh_all_tooltips(self, path_set: PathSet) -> None:
        """Re-render every tooltip text, e.g. after a unit or bearing change."""
        for path in path_set.all_paths():
            offsets = path.display_offsets()
            for index in path.tooltips:
                self._sync_tooltip(path=path, index=index, lon_offset=offsets[index])
        active = path_set.active_path
        if active is not None and active.rubber_band is not None:
            self.show_rubber_band(rubber_band=active.rubber_band)

    def remove_path(self, path_id: int) -> None:
        """Remove every drawable of one path (discarded single-vertex path)."""
        for drawables in (self.segment_lines, self.arrows, self.circles, self.tooltips):
            for key in [key for key in drawables if key[0] == path_id]:
                self.surface.remove(drawables.pop(key))
        for key in [key for key in self._circle_hooks if key[0] == path_id]:
            for subscription in self._circle_hooks.pop(key):
                subscription.cancel()
        self._segment_revisions = {k: v for k, v in self._segment_revisions.items() if k[0] != path_id}
        self._circle_roles = {k: v for k, v in self._circle_roles.items() if k[0] != path_id}

    # =========================================================================
    # RUBBER-BAND
    # =========================================================================

    def show_rubber_band(self, rubber_band: RubberBand) -> None:
        """Draw or update the dashed preview line and its live tooltip."""
        points = shift_lon(rubber_band.segment.points, lon_offset=rubber_band.lon_offset)
        text = self.formatter.format(tooltip=rubber_band.tooltip)
        end = points[-1]

        if self.rubber_line is None:
            self.rubber_line = self.surface.add_polyline(points=points, style=LineStyle.temporary())
        else:
            self.rubber_line.set_points(points)

        if self.rubber_tooltip is None:
            self.rubber_tooltip = self.surface.add_text_marker(
                position=end,
                text=text,
                style=TextStyle(color=StyleConfig.TOOLTIP_COLOR, size=StyleConfig.TOOLTIP_SIZE),
            )
        else:
            self.rubber_tooltip.set_points([end])
            self.rubber_tooltip.set_text(text)

    def hide_rubber_band(self) -> None:
        if self.rubber_line is not None:
            self.surface.remove(self.rubber_line)
            self.rubber_line = None
        if self.rubber_tooltip is not None:
            self.surface.remove(self.rubber_tooltip)
            self.rubber_tooltip = None

    def clear(self) -> None:
        """Remove every drawable."""
        self.hide_rubber_band()
        path_ids = {key[0] for key in self.circles} | {key[0] for key in self.segment_lines}
        for path_id in path_ids:
            self.remove_path(path_id=path_id)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _sync_segment(self, path_id: int, index: int, segment: Segment, lon_offset: float = 0.0) -> None:
        key = (path_id, index)
        if self._segment_revisions.get(key) == (segment.revision, lon_offset):
            return

        points = shift_lon(segment.points, lon_offset=lon_offset)
        if key in self.segment_lines:
            self.segment_lines[key].set_points(points)
        else:
            self.segment_lines[key] = self.surface.add_polyline(points=points, style=LineStyle.fixed())

        arrow = segment.arrow
        arrow_position = shift_lon([arrow.position], lon_offset=lon_offset)[0] if arrow is not None else None
        if arrow is None:
            if key in self.arrows:
                self.surface.remove(self.arrows.pop(key))
        elif key in self.arrows:
            self.arrows[key].set_points([arrow_position])
            self.arrows[key].set_rotation(arrow.rotation_deg)
        else:
            self.arrows[key] = self.surface.add_text_marker(
                position=arrow_position,
                text=StyleConfig.ARROW_GLYPH,
                style=TextStyle(color=StyleConfig.ARROW_COLOR, size=StyleConfig.ARROW_SIZE),
                rotation_deg=arrow.rotation_deg,
            )
        self._segment_revisions[key] = (segment.revision, lon_offset)

    def _sync_circle(self, path: Path, index: int, lon_offset: float = 0.0) -> None:
        key = (path.id, index)
        position = shift_lon([path.vertices[index].coordinate.lat_lon], lon_offset=lon_offset)[0]
        role = path.role_of(index=index)

        circle = self.circles.get(key)
        if circle is None:
            circle = self.surface.add_circle_marker(position=position, style=CircleStyle.for_role(role=role.value))
            self.circles[key] = circle
            self._circle_hooks[key] = [
                circle.on_click(lambda event, k=key: self._on_vertex_click(k[0], k[1], event)),
                circle.on_pointer_down(lambda event, k=key: self._on_vertex_pointer_down(k[0], k[1], event)),
            ]
        else:
            circle.set_points([position])
            if self._circle_roles.get(key) != role:
                circle.set_style(CircleStyle.for_role(role=role.value))
        self._circle_roles[key] = role

    def _sync_tooltip(self, path: Path, index: int, lon_offset: float = 0.0) -> None:
        key = (path.id, index)
        text = self.formatter.format(tooltip=path.tooltips[index])
        position = shift_lon([path.vertices[index].coordinate.lat_lon], lon_offset=lon_offset)[0]
        is_end = path.role_of(index=index) == VertexRole.END
        style = TextStyle(
            color=StyleConfig.TOOLTIP_END_COLOR if is_end else StyleConfig.TOOLTIP_COLOR,
            size=StyleConfig.TOOLTIP_SIZE,
        )

        tooltip = self.tooltips.get(key)
        if tooltip is None:
            self.tooltips[key] = self.surface.add_text_marker(position=position, text=text, style=style)
        else:
            tooltip.set_points([position])
            tooltip.set_text(text)
            tooltip.set_style(style)
