"""Interaction controller - Translates host events into path mutations.

Wiring:
    MapSurface events → InteractionController → MeasureStateMachine / PathSet
    → MeasureRenderer → MapSurface drawables

Gestures while measuring:
- pointer move: rubber-band preview from the last vertex
- map click: add a vertex (starting a new path if none is active)
- click on the active path's last vertex: finish the path
- Ctrl-click on a finished path's last vertex: resume that path
- pointer-down on a vertex (no path building): drag it; pointer-up commits
- Escape: finish the active path, or switch measuring off if there is none

Every rejected gesture is logged and ignored. Model operations raise
IllegalTransitionError before mutating, so state is never half-updated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from polyline_measure.constants import KeyConfig, MeasureConfig
from polyline_measure.core.unit_converter import MeasurementUnit
from polyline_measure.model.coordinate import Coordinate
from polyline_measure.model.errors import IllegalTransitionError
from polyline_measure.model.path import Path
from polyline_measure.model.path_set import PathSet
from polyline_measure.model.tooltip import TooltipFormatter
from polyline_measure.ui.renderer import MeasureRenderer
from polyline_measure.ui.state_machine import MeasureStateMachine
from polyline_measure.ui.surface import MapSurface, PointerEvent, Subscription

logger = logging.getLogger(__name__)


@dataclass
class MeasureOptions:
    """Runtime options of one measuring control.

    Attributes:
        unit: Unit system for all readouts
        show_bearings: Add In/Out bearing lines to tooltips
        clear_on_stop: Remove all paths when measuring is switched off
        distance_show_same_unit: Show increments in the unit of the total
        arc_points: Samples per great-circle segment
    """

    unit: MeasurementUnit = MeasurementUnit.METRIC
    show_bearings: bool = MeasureConfig.SHOW_BEARINGS
    clear_on_stop: bool = MeasureConfig.CLEAR_ON_STOP
    distance_show_same_unit: bool = MeasureConfig.DISTANCE_SHOW_SAME_UNIT
    arc_points: int = MeasureConfig.ARC_POINTS

    def __post_init__(self) -> None:
        if self.arc_points < MeasureConfig.MIN_ARC_POINTS:
            raise ValueError(f"arc_points must be >= {MeasureConfig.MIN_ARC_POINTS}, got {self.arc_points}")


class InteractionController:
    """Owns the PathSet and drives it from MapSurface events.

    Args:
        surface: Host map
        path_set: Paths to operate on (creates new from options if None)
        options: Measuring options (defaults if None)
        add_log_listener: Log every state transition

    Example:
        controller = InteractionController(surface=surface)
        controller.start()
        # host delivers events to the subscribed handlers from here on
    """

    def __init__(
        self,
        surface: MapSurface,
        path_set: PathSet | None = None,
        options: MeasureOptions | None = None,
        add_log_listener: bool = True,
    ) -> None:
        self.surface = surface
        self.options = options or MeasureOptions()
        if path_set is None:
            path_set = PathSet(
                unit=self.options.unit,
                show_bearings=self.options.show_bearings,
                arc_points=self.options.arc_points,
            )
        self.sm, self.context = MeasureStateMachine.create(path_set=path_set, add_log_listener=add_log_listener)
        self.renderer = MeasureRenderer(
            surface=surface,
            formatter=self._make_formatter(),
            on_vertex_click=self.handle_vertex_click,
            on_vertex_pointer_down=self.handle_vertex_pointer_down,
        )
        self._subscriptions: list[Subscription] = []

    @property
    def path_set(self) -> PathSet:
        return self.context.path_set

    @property
    def is_measuring(self) -> bool:
        """True while measuring is switched on (including during a drag)."""
        return not self.sm.is_idle

    # =========================================================================
    # EXTERNAL CONTROL
    # =========================================================================

    def toggle(self) -> bool:
        """Switch measuring on or off. Returns the new on/off state."""
        if self.is_measuring:
            self.stop()
        else:
            self.start()
        return self.is_measuring

    def start(self) -> bool:
        """Switch measuring on and subscribe to host events."""
        if not self.sm.try_transition("start_measuring"):
            return False
        self._subscriptions = [
            self.surface.on_pointer_move(self.handle_pointer_move),
            self.surface.on_click(self.handle_click),
            self.surface.on_pointer_up(self.handle_pointer_up),
            self.surface.on_key(self.handle_key),
        ]
        return True

    def stop(self) -> bool:
        """Switch measuring off.

        Commits a running drag, finishes the active path, unsubscribes and,
        with clear_on_stop, removes all paths.
        """
        if self.sm.is_dragging:
            self._end_drag()
        if not self.sm.is_measuring:
            return False

        self.finish_path()
        self.sm.try_transition("stop_measuring")
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        self.surface.set_panning_enabled(True)

        if self.options.clear_on_stop:
            self.clear_all()
        return True

    def clear_all(self) -> None:
        """Remove every path and drawable. Measuring stays on if it was on."""
        if self.sm.is_dragging:
            self._end_drag()
        self.path_set.clear()
        self.renderer.clear()

    def set_unit(self, unit: MeasurementUnit) -> None:
        """Switch the unit system and re-render every tooltip."""
        self.options.unit = unit
        self.path_set.set_unit(unit=unit)
        self._refresh_formatter()

    def cycle_unit(self) -> MeasurementUnit:
        """Advance to the next unit system (metric → land miles → nautical miles)."""
        self.set_unit(unit=self.path_set.unit.next())
        return self.path_set.unit

    def set_show_bearings(self, show_bearings: bool) -> None:
        self.options.show_bearings = show_bearings
        self.path_set.show_bearings = show_bearings
        self._refresh_formatter()

    def finish_path(self) -> Path | None:
        """Finalize the active path, if any.

        Returns:
            The finished path, or None if nothing was active or it was discarded.
        """
        active = self.path_set.active_path
        if active is None:
            return None
        finished = self.path_set.finalize_active()
        self.renderer.hide_rubber_band()
        if finished is None:
            self.renderer.remove_path(path_id=active.id)
        else:
            self.renderer.sync_path(path=finished)
        return finished

    # =========================================================================
    # HOST EVENTS
    # =========================================================================

    def handle_pointer_move(self, event: PointerEvent) -> None:
        if self.sm.is_dragging:
            self._drag_to(pointer=event.coordinate)
            return
        if not self.sm.is_measuring:
            return
        rubber_band = self.path_set.move_cursor(coord=event.coordinate)
        if rubber_band is not None:
            self.renderer.show_rubber_band(rubber_band=rubber_band)

    def handle_click(self, event: PointerEvent) -> None:
        """Map click (not on a vertex): add a vertex."""
        if self._consume_suppressed_click():
            return
        if not self.sm.is_measuring:
            return
        self._add_vertex(coord=event.coordinate)

    def handle_vertex_click(self, path_id: int, vertex_index: int, event: PointerEvent) -> None:
        """Click on a vertex circle: finish, resume or add a vertex."""
        if self._consume_suppressed_click():
            return
        if not self.sm.is_measuring:
            return

        active = self.path_set.active_path
        if active is not None and active.id == path_id and active.is_last_vertex(index=vertex_index):
            self.finish_path()
        elif event.ctrl and active is None:
            self._resume(path_id=path_id, vertex_index=vertex_index)
        else:
            self._add_vertex(coord=event.coordinate)

    def handle_vertex_pointer_down(self, path_id: int, vertex_index: int, event: PointerEvent) -> None:
        """Pointer-down on a vertex circle: start dragging it."""
        # Building paths finish by clicking their last vertex; Ctrl is reserved for resume
        if not self.sm.is_measuring or self.path_set.is_building or event.ctrl:
            return
        try:
            path = self.path_set.path(path_id=path_id)
        except IllegalTransitionError as e:
            logger.warning(f"[DRAG] Ignored: {e}")
            return
        if not 0 <= vertex_index < path.vertex_count:
            logger.warning(f"[DRAG] Ignored: path {path_id} has no vertex {vertex_index}")
            return

        started = self.sm.try_transition(
            "start_drag",
            path_id=path_id,
            vertex_index=vertex_index,
            pointer=event.coordinate,
            vertex_coordinate=path.vertices[vertex_index].coordinate,
        )
        if started:
            self.surface.set_panning_enabled(False)
            logger.info(f"[DRAG] Started on path {path_id} vertex {vertex_index}")

    def handle_pointer_up(self, event: PointerEvent) -> None:
        if not self.sm.is_dragging:
            return
        self._drag_to(pointer=event.coordinate)
        self._end_drag()

    def handle_key(self, key: str) -> None:
        """Escape finishes the active path, a second Escape stops measuring."""
        if key != KeyConfig.ESCAPE or not self.sm.is_measuring:
            return
        if self.path_set.is_building:
            self.finish_path()
        else:
            self.stop()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _add_vertex(self, coord: Coordinate) -> None:
        try:
            vertex = self.path_set.add_vertex(coord=coord)
        except IllegalTransitionError as e:
            logger.warning(f"Add vertex ignored: {e}")
            return
        if vertex is None:
            return
        self.renderer.hide_rubber_band()
        self.renderer.sync_path(path=self.path_set.active_path)

    def _resume(self, path_id: int, vertex_index: int) -> None:
        try:
            path = self.path_set.resume(path_id=path_id, vertex_index=vertex_index)
        except IllegalTransitionError as e:
            logger.warning(f"Resume ignored: {e}")
            return
        self.renderer.sync_path(path=path)

    def _drag_to(self, pointer: Coordinate) -> None:
        drag = self.context.drag
        if not drag.moved and pointer.is_same_location(other=drag.pointer_start):
            return
        drag.moved = True
        path_id, vertex_index = drag.path_id, drag.vertex_index
        try:
            recomputed = self.path_set.move_vertex(
                path_id=path_id,
                vertex_index=vertex_index,
                coord=drag.vertex_position_for(pointer=pointer),
            )
        except IllegalTransitionError as e:
            logger.warning(f"[DRAG] Move ignored: {e}")
            return
        self.renderer.refresh_segments(path=self.path_set.path(path_id=path_id), segment_indices=recomputed)

    def _end_drag(self) -> None:
        path_id, vertex_index = self.context.drag.path_id, self.context.drag.vertex_index
        if self.sm.try_transition("end_drag"):
            self.surface.set_panning_enabled(True)
            logger.info(f"[DRAG] Finished on path {path_id} vertex {vertex_index}")

    def _consume_suppressed_click(self) -> bool:
        if not self.context.suppress_next_click:
            return False
        self.context.suppress_next_click = False
        logger.debug("Click after drag suppressed")
        return True

    def _make_formatter(self) -> TooltipFormatter:
        return TooltipFormatter(
            unit=self.path_set.unit,
            show_bearings=self.path_set.show_bearings,
            distance_show_same_unit=self.options.distance_show_same_unit,
        )

    def _refresh_formatter(self) -> None:
        self.renderer.formatter = self._make_formatter()
        self.renderer.refresh_all_tooltips(path_set=self.path_set)
