"""End-to-End Integration Test using Streamlit AppTest Framework.

Simulates complete measuring sessions through the app's own glue code
(init_session_state, dispatch_click, render_sidebar), not just controller
methods, so bugs between the browser click mapping and the engine show up.

Architecture:
- Uses AppTest.from_function with COMMAND-BASED execution
- Each at.run() processes ONE queued click, then renders the sidebar
- Sidebar buttons are clicked through AppTest by key
"""

from __future__ import annotations

import math

import pytest
from streamlit.testing.v1 import AppTest

from polyline_measure.constants import MeasureConfig

ONE_DEGREE_M = MeasureConfig.EARTH_RADIUS_M * math.pi / 180


# =============================================================================
# COMMAND EXECUTOR - Simulates browser clicks via the app's click mapping
# =============================================================================


def run_click_commands() -> None:
    """Streamlit app that executes commands from session_state.command_queue.

    COMMAND TYPES:
        ("click", lat, lon) → dispatch_click on the map
        ("click_vertex", path_id, index, ctrl, move_mode) → dispatch_click on a vertex circle
    """
    import streamlit as st

    from polyline_measure.app import dispatch_click, init_session_state, render_sidebar

    init_session_state()
    controller = st.session_state.controller

    command_queue: list = st.session_state.get("command_queue", [])
    if command_queue:
        cmd = command_queue.pop(0)
        st.session_state.command_queue = command_queue

        if cmd[0] == "click":
            _, lat, lon = cmd
            dispatch_click(lat=lat, lon=lon, vertex_id=None, ctrl=False, move_mode=False)
        elif cmd[0] == "click_vertex":
            _, path_id, index, ctrl, move_mode = cmd
            vertex = controller.path_set.path(path_id=path_id).vertices[index]
            circle = controller.renderer.circles[(path_id, index)]
            dispatch_click(lat=vertex.lat, lon=vertex.lon, vertex_id=circle.id, ctrl=ctrl, move_mode=move_mode)

    render_sidebar()


def run_commands(at: AppTest, commands: list[tuple]) -> None:
    for cmd in commands:
        at.session_state["command_queue"] = [cmd]
        at.run()
        assert not at.exception, f"App raised on {cmd}: {at.exception}"


@pytest.fixture
def at() -> AppTest:
    app = AppTest.from_function(run_click_commands, default_timeout=30)
    app.session_state["command_queue"] = []
    app.run()
    return app


@pytest.mark.apptest
class TestMeasuringSession:
    """Complete sessions through the Streamlit glue."""

    def test_measure_and_finish_with_button(self, at: AppTest) -> None:
        run_commands(at, [("click", 0.0, 0.0), ("click", 0.0, 1.0)])
        at.button(key="btn_finish_path").click().run()

        paths = at.session_state["controller"].path_set
        assert paths.active_path is None
        assert len(paths.completed_paths) == 1
        assert round(paths.completed_paths[0].total_distance_m) == 111195

    def test_click_on_last_vertex_finishes(self, at: AppTest) -> None:
        run_commands(at, [("click", 0.0, 0.0), ("click", 0.0, 1.0), ("click_vertex", 0, 1, False, False)])

        paths = at.session_state["controller"].path_set
        assert paths.completed_paths[0].vertex_count == 2

    def test_resume_with_ctrl(self, at: AppTest) -> None:
        run_commands(
            at,
            [
                ("click", 0.0, 0.0),
                ("click", 0.0, 1.0),
                ("click_vertex", 0, 1, False, False),
                ("click_vertex", 0, 1, True, False),
                ("click", 0.0, 2.0),
                ("click_vertex", 0, 2, False, False),
            ],
        )

        paths = at.session_state["controller"].path_set
        assert len(paths.completed_paths) == 1
        assert paths.completed_paths[0].total_distance_m == pytest.approx(2 * ONE_DEGREE_M)

    def test_move_mode_drags_vertex(self, at: AppTest) -> None:
        run_commands(
            at,
            [
                ("click", 0.0, 0.0),
                ("click", 0.0, 1.0),
                ("click_vertex", 0, 1, False, False),
                ("click_vertex", 0, 1, False, True),
            ],
        )
        assert at.session_state["controller"].sm.is_dragging

        # Second click drops the vertex; the trailing map click is swallowed
        run_commands(at, [("click", 0.0, 3.0)])

        controller = at.session_state["controller"]
        assert not controller.sm.is_dragging
        assert controller.path_set.active_path is None
        assert controller.path_set.completed_paths[0].vertices[1].lon == pytest.approx(3.0)

    def test_move_mode_drop_in_place_starts_no_path(self, at: AppTest) -> None:
        run_commands(
            at,
            [
                ("click", 0.0, 0.0),
                ("click", 0.0, 1.0),
                ("click_vertex", 0, 1, False, False),
                ("click_vertex", 0, 1, False, True),
                ("click", 0.0, 1.0),
            ],
        )

        controller = at.session_state["controller"]
        assert not controller.sm.is_dragging
        assert controller.path_set.active_path is None
        assert len(controller.path_set.all_paths()) == 1
        assert controller.path_set.completed_paths[0].vertices[1].lon == 1.0

        # The next map click is a normal click again
        run_commands(at, [("click", 5.0, 5.0)])
        assert controller.path_set.active_path.vertex_count == 1

    def test_toggle_off_clears(self, at: AppTest) -> None:
        run_commands(at, [("click", 0.0, 0.0), ("click", 0.0, 1.0)])
        at.button(key="btn_toggle_measuring").click().run()

        controller = at.session_state["controller"]
        assert not controller.is_measuring
        assert controller.path_set.all_paths() == []

    def test_clear_all_button(self, at: AppTest) -> None:
        run_commands(at, [("click", 0.0, 0.0), ("click", 0.0, 1.0), ("click_vertex", 0, 1, False, False)])
        at.button(key="btn_clear_all").click().run()

        controller = at.session_state["controller"]
        assert controller.is_measuring
        assert controller.path_set.all_paths() == []
