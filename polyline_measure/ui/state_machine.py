"""State machine for the measuring interaction.

Uses python-statemachine for robust state management with:
- Clear state definitions
- Guarded transitions (conditions)
- Entry/exit hooks for side effects
- Explicit event-driven transitions

States (3 states):
    IDLE: Measuring switched off, map behaves normally
    MEASURING: Clicks add vertices, pointer moves drive the rubber-band
    DRAGGING_VERTEX: A committed vertex follows the pointer, map panning off

Path building (active path or not) is orthogonal to these states and lives
in the PathSet referenced by MeasureContext.

Transitions:
    IDLE -> MEASURING: start_measuring (toggle on)
    MEASURING -> IDLE: stop_measuring (toggle off, or Escape with no active path)
    MEASURING -> DRAGGING_VERTEX: start_drag (pointer-down on a vertex, no path building)
    DRAGGING_VERTEX -> MEASURING: end_drag (pointer-up)

A drag can only start from MEASURING, so a second start_drag while dragging
is rejected with TransitionNotAllowed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from polyline_measure.model.coordinate import Coordinate
from polyline_measure.model.path_set import PathSet

logger = logging.getLogger(__name__)


@dataclass
class DragContext:
    """Vertex drag state.

    The vertex keeps its initial offset to the pointer, so grabbing a circle
    off-center does not make it jump under the cursor.
    """

    path_id: int | None = None
    vertex_index: int | None = None
    pointer_start: Coordinate | None = None
    vertex_start: Coordinate | None = None
    moved: bool = False

    def clear(self) -> None:
        self.path_id = None
        self.vertex_index = None
        self.pointer_start = None
        self.vertex_start = None
        self.moved = False

    def is_active(self) -> bool:
        return self.path_id is not None

    def vertex_position_for(self, pointer: Coordinate) -> Coordinate:
        """Vertex location for a pointer location, keeping the grab offset."""
        assert self.pointer_start is not None and self.vertex_start is not None, "No drag in progress"
        return self.vertex_start.offset(
            dlat=pointer.lat - self.pointer_start.lat,
            dlon=pointer.lon - self.pointer_start.lon,
        )


@dataclass
class MeasureContext:
    """Shared model of the measuring state machine.

    Attributes:
        path_set: All measured paths (guards read its building state)
        drag: Current vertex drag, cleared when the drag ends
        suppress_next_click: Swallow the click the host fires right after a drag
    """

    path_set: PathSet = field(default_factory=PathSet)
    drag: DragContext = field(default_factory=DragContext)
    suppress_next_click: bool = False

    def __repr__(self) -> str:
        return f"MeasureContext(path_set={self.path_set!r}, dragging={self.drag.is_active()})"


class StateLogListener:
    """Listener logging every transition.

    Usage:
        sm = MeasureStateMachine(context=context)
        sm.add_listener(StateLogListener())
    """

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.info(f"[STATE] {source.name} --({event})--> {target.name}")


class MeasureStateMachine(StateMachine):
    """State machine for the measuring workflow.

    States:
        idle: Measuring off
        measuring: Measuring on, building or idle between paths
        dragging_vertex: Exclusive vertex drag
    """

    # ==========================================================================
    # State Definitions
    # ==========================================================================

    idle = State("Idle", initial=True)
    measuring = State("Measuring")
    dragging_vertex = State("DraggingVertex")

    # ==========================================================================
    # Transitions
    # ==========================================================================

    start_measuring = idle.to(measuring)
    stop_measuring = measuring.to(idle)
    # Drag only on completed paths: a path being built must be finished first
    start_drag = measuring.to(dragging_vertex, cond="no_path_building")
    end_drag = dragging_vertex.to(measuring)

    # ==========================================================================
    # Guards (Conditions)
    # ==========================================================================

    def no_path_building(self) -> bool:
        """Guard: No path is currently accepting vertices."""
        return not self.context.path_set.is_building

    # ==========================================================================
    # State Check Properties
    # ==========================================================================

    @property
    def is_idle(self) -> bool:
        return self.idle.is_active

    @property
    def is_measuring(self) -> bool:
        return self.measuring.is_active

    @property
    def is_dragging(self) -> bool:
        return self.dragging_vertex.is_active

    # ==========================================================================
    # Entry/Exit Hooks
    # ==========================================================================

    def on_enter_idle(self) -> None:
        """Hook: Entering idle state."""
        self.context.drag.clear()
        self.context.suppress_next_click = False

    def on_exit_dragging_vertex(self) -> None:
        """Hook: Exiting drag, the host's trailing click must not add a vertex."""
        self.context.suppress_next_click = self.context.drag.moved
        self.context.drag.clear()

    # ==========================================================================
    # Transition Actions (before_* hooks)
    # ==========================================================================

    def before_start_drag(
        self,
        path_id: int,
        vertex_index: int,
        pointer: Coordinate,
        vertex_coordinate: Coordinate,
    ) -> None:
        """Action before starting a drag: remember the grab offset."""
        self.context.drag.path_id = path_id
        self.context.drag.vertex_index = vertex_index
        self.context.drag.pointer_start = pointer
        self.context.drag.vertex_start = vertex_coordinate

    # ==========================================================================
    # Initialization
    # ==========================================================================

    def __init__(self, context: MeasureContext | None = None, start_value: str | None = None) -> None:
        """Initialize state machine with model pattern.

        Args:
            context: Shared context/model (creates new if None)
            start_value: Optional initial state value
        """
        model = context or MeasureContext()
        super().__init__(model=model, start_value=start_value)

    # ==========================================================================
    # Utility Methods
    # ==========================================================================

    @property
    def context(self) -> MeasureContext:
        """Alias for model."""
        return self.model

    def get_state_name(self) -> str:
        """Get current state name for display."""
        return self.current_state.name

    def __repr__(self) -> str:
        return f"MeasureStateMachine(state={self.get_state_name()}, model={self.context!r})"

    def try_transition(self, event: str, **kwargs: Any) -> bool:
        """Attempt a transition, returning success/failure.

        Args:
            event: Transition event name
            **kwargs: Arguments for transition

        Returns:
            True if transition succeeded, False otherwise.
        """
        try:
            self.send(event, **kwargs)
            return True
        except TransitionNotAllowed:
            logger.warning(f"Transition '{event}' not allowed from {self.get_state_name()}")
            return False

    @staticmethod
    def create(
        path_set: PathSet | None = None, add_log_listener: bool = True
    ) -> tuple["MeasureStateMachine", MeasureContext]:
        """Factory method to create state machine with context and optional log listener.

        Args:
            path_set: Paths to operate on (creates new if None)
            add_log_listener: If True, adds StateLogListener.

        Returns:
            Tuple of (MeasureStateMachine, MeasureContext)
        """
        context = MeasureContext(path_set=path_set if path_set is not None else PathSet())
        sm = MeasureStateMachine(context=context)
        if add_log_listener:
            sm.add_listener(StateLogListener())
        logger.info(f"Created {sm!r}")
        return sm, context
