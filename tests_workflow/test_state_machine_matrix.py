"""State Machine Transition Matrix - Parameterized validation of all event/state combinations.

Uses pytest.mark.parametrize to create a data-driven truth table for state transitions.
This serves as executable documentation of the state machine contract.

Test Categories:
    1. Valid transitions: Event fires successfully from allowed source states
    2. Invalid transitions: Event raises TransitionNotAllowed from forbidden states
    3. Guards and hooks: start_drag guard, drag bookkeeping on entry/exit

Matrix Reference (from state_machine.py docstring):
    3 states × 4 events = 12 combinations
    4 valid transitions
    8 invalid transitions
"""

import logging

import pytest
from statemachine.exceptions import TransitionNotAllowed

from polyline_measure.model.coordinate import Coordinate
from polyline_measure.model.path_set import PathSet
from polyline_measure.ui.state_machine import MeasureContext, MeasureStateMachine, StateLogListener

STATES = ["idle", "measuring", "dragging_vertex"]

# Arguments of before_start_drag
DRAG_ARGS = {
    "path_id": 0,
    "vertex_index": 1,
    "pointer": Coordinate(lat=0.1, lon=1.1),
    "vertex_coordinate": Coordinate(lat=0.0, lon=1.0),
}


# =============================================================================
# TRUTH TABLE: Valid Transitions
# =============================================================================
# Format: (event_name, source_state, target_state)

VALID_TRANSITIONS: list[tuple[str, str, str]] = [
    ("start_measuring", "idle", "measuring"),
    ("stop_measuring", "measuring", "idle"),
    ("start_drag", "measuring", "dragging_vertex"),
    ("end_drag", "dragging_vertex", "measuring"),
]


# =============================================================================
# TRUTH TABLE: Invalid Transitions (Events from forbidden states)
# =============================================================================
# Format: (event_name, invalid_source_states)

INVALID_TRANSITIONS: list[tuple[str, list[str]]] = [
    # Already measuring, or busy dragging
    ("start_measuring", ["measuring", "dragging_vertex"]),
    # A drag must end before measuring can stop
    ("stop_measuring", ["idle", "dragging_vertex"]),
    # Drags are exclusive and need measuring on
    ("start_drag", ["idle", "dragging_vertex"]),
    # No drag in progress
    ("end_drag", ["idle", "measuring"]),
]


def _machine_in(state_name: str, path_set: PathSet | None = None) -> MeasureStateMachine:
    """State machine started directly in the given state (bypasses transitions)."""
    context = MeasureContext(path_set=path_set if path_set is not None else PathSet())
    return MeasureStateMachine(context=context, start_value=state_name)


def _event_kwargs(event: str) -> dict:
    return DRAG_ARGS if event == "start_drag" else {}


class TestTransitionMatrix:
    """Parameterized tests validating the complete state machine transition matrix."""

    @pytest.mark.parametrize("event,source,target", VALID_TRANSITIONS)
    def test_valid_transitions(self, event: str, source: str, target: str) -> None:
        """Each event moves from its source state to its target state."""
        sm = _machine_in(state_name=source)

        getattr(sm, event)(**_event_kwargs(event))

        assert sm.current_state == getattr(sm, target)

    @pytest.mark.parametrize("event,invalid_states", INVALID_TRANSITIONS)
    def test_invalid_transitions_raise_error(self, event: str, invalid_states: list[str]) -> None:
        """Invalid transitions raise TransitionNotAllowed and keep the state."""
        for state_name in invalid_states:
            sm = _machine_in(state_name=state_name)

            with pytest.raises(TransitionNotAllowed):
                getattr(sm, event)(**_event_kwargs(event))

            assert sm.current_state == getattr(sm, state_name)

    def test_matrix_is_complete(self) -> None:
        """Every (event, state) pair appears in exactly one table."""
        valid = {(event, source) for event, source, _ in VALID_TRANSITIONS}
        invalid = {(event, state) for event, states in INVALID_TRANSITIONS for state in states}
        events = {event for event, _, _ in VALID_TRANSITIONS}

        assert valid.isdisjoint(invalid)
        assert valid | invalid == {(event, state) for event in events for state in STATES}

    @pytest.mark.parametrize("event", ["start_measuring", "stop_measuring", "start_drag", "end_drag"])
    def test_try_transition_reports_failure(self, event: str) -> None:
        """try_transition returns False instead of raising."""
        sm = _machine_in(state_name="dragging_vertex" if event != "end_drag" else "idle")
        assert sm.try_transition(event, **_event_kwargs(event)) is False


class TestStartDragGuard:
    """start_drag is guarded by no_path_building."""

    def test_drag_rejected_while_path_building(self) -> None:
        paths = PathSet()
        paths.add_vertex(coord=Coordinate(lat=0.0, lon=0.0))
        sm = _machine_in(state_name="measuring", path_set=paths)

        with pytest.raises(TransitionNotAllowed):
            sm.start_drag(**DRAG_ARGS)

        assert sm.is_measuring
        assert not sm.context.drag.is_active()

    def test_drag_allowed_on_finished_paths(self, finished_path_set: PathSet) -> None:
        sm = _machine_in(state_name="measuring", path_set=finished_path_set)
        sm.start_drag(**DRAG_ARGS)
        assert sm.is_dragging


class TestDragHooks:
    """Drag context bookkeeping in before/exit/enter hooks."""

    def test_start_drag_records_grab(self, sm_and_ctx: tuple) -> None:
        sm, ctx = sm_and_ctx
        sm.start_measuring()
        sm.start_drag(**DRAG_ARGS)

        assert ctx.drag.path_id == 0
        assert ctx.drag.vertex_index == 1
        assert ctx.drag.pointer_start == DRAG_ARGS["pointer"]
        assert ctx.drag.vertex_start == DRAG_ARGS["vertex_coordinate"]

    def test_grab_offset_is_kept(self, sm_and_ctx: tuple) -> None:
        sm, ctx = sm_and_ctx
        sm.start_measuring()
        sm.start_drag(**DRAG_ARGS)

        position = ctx.drag.vertex_position_for(pointer=Coordinate(lat=1.1, lon=2.1))

        assert position.lat == pytest.approx(1.0)
        assert position.lon == pytest.approx(2.0)

    @pytest.mark.parametrize("moved", [True, False])
    def test_end_drag_suppresses_click_only_after_move(self, sm_and_ctx: tuple, moved: bool) -> None:
        sm, ctx = sm_and_ctx
        sm.start_measuring()
        sm.start_drag(**DRAG_ARGS)
        ctx.drag.moved = moved

        sm.end_drag()

        assert ctx.suppress_next_click is moved
        assert not ctx.drag.is_active()

    def test_entering_idle_resets_drag_state(self, sm_and_ctx: tuple) -> None:
        sm, ctx = sm_and_ctx
        sm.start_measuring()
        ctx.suppress_next_click = True

        sm.stop_measuring()

        assert sm.is_idle
        assert ctx.suppress_next_click is False


class TestFactoryAndListener:
    """MeasureStateMachine.create and StateLogListener."""

    def test_create_starts_idle(self, sm_and_ctx: tuple) -> None:
        sm, ctx = sm_and_ctx
        assert sm.is_idle
        assert sm.context is ctx
        assert sm.get_state_name() == "Idle"

    def test_create_uses_given_path_set(self, finished_path_set: PathSet) -> None:
        sm, ctx = MeasureStateMachine.create(path_set=finished_path_set, add_log_listener=False)
        assert ctx.path_set is finished_path_set

    def test_listener_logs_transitions(self, caplog: pytest.LogCaptureFixture) -> None:
        sm, _ = MeasureStateMachine.create(add_log_listener=False)
        sm.add_listener(StateLogListener())

        with caplog.at_level(logging.INFO, logger="polyline_measure.ui.state_machine"):
            sm.start_measuring()

        assert "[STATE] Idle --(start_measuring)--> Measuring" in caplog.text
