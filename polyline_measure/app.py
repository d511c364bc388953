"""Polyline Measure - Interactive great-circle distance measuring.

Click points on the map to build paths; every segment is drawn as a true
great-circle arc with cumulative and incremental distances per vertex.

The browser map only reports clicks, so the app maps them onto the engine's
gestures:
- click on the map: add a vertex
- click on the last vertex of the active path: finish it
- "Ctrl" toggle + click on the last vertex of a finished path: resume it
- "Move vertex" toggle: first click grabs a vertex, second click drops it

Run: streamlit run polyline_measure/app.py
"""

import logging
import traceback
from typing import Any

import streamlit as st
from streamlit_deckgl import st_deckgl  # type: ignore[import-untyped]

from polyline_measure.constants import AppConfig, KeyConfig
from polyline_measure.core.unit_converter import MeasurementUnit, UnitConverter
from polyline_measure.ui.controller import InteractionController, MeasureOptions
from polyline_measure.ui.pydeck_surface import TYPE_VERTEX, PydeckMapSurface

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SESSION STATE
# =============================================================================


def init_session_state() -> None:
    """Initialize session state with the map surface and controller."""
    if "surface" not in st.session_state:
        st.session_state.surface = PydeckMapSurface()

    if "controller" not in st.session_state:
        controller = InteractionController(surface=st.session_state.surface, options=MeasureOptions())
        controller.start()
        st.session_state.controller = controller

    if "map_version" not in st.session_state:
        st.session_state.map_version = 0

    if "_last_click_id" not in st.session_state:
        st.session_state._last_click_id = None


def bump_map_version() -> None:
    """Force a fresh map component so stale click events are dropped."""
    st.session_state.map_version = st.session_state.get("map_version", 0) + 1


# =============================================================================
# CLICK HANDLING
# =============================================================================


def read_click(event: Any) -> tuple[float, float, str | None] | None:
    """Extract (lat, lon, vertex_id) from a st_deckgl click event.

    st_deckgl spreads picked object properties into the event dict, so a
    vertex click carries "type" == "vertex" and the drawable "id" next to
    "coordinate" ([lon, lat]).

    Returns:
        None for no click, a duplicate of the last click, or a click without coordinates.
    """
    if not event or not isinstance(event, dict):
        return None

    coord = event.get("coordinate")
    if not isinstance(coord, (list, tuple)) or len(coord) < 2:
        return None
    lon, lat = float(coord[0]), float(coord[1])
    vertex_id = event.get("id") if event.get("type") == TYPE_VERTEX else None

    # Streamlit reruns return the previous event again
    click_id = f"{vertex_id}_{lon:.6f}_{lat:.6f}"
    if click_id == st.session_state.get("_last_click_id"):
        return None
    st.session_state._last_click_id = click_id
    return lat, lon, vertex_id


def dispatch_click(lat: float, lon: float, vertex_id: str | None, ctrl: bool, move_mode: bool) -> None:
    """Translate one browser click into host pointer events."""
    surface: PydeckMapSurface = st.session_state.surface
    controller: InteractionController = st.session_state.controller

    if controller.sm.is_dragging:
        # Drop: move, release, then the click a browser fires after a real drag
        surface.emit_pointer_move(lat=lat, lon=lon)
        moved = controller.context.drag.moved
        surface.emit_pointer_up(lat=lat, lon=lon)
        if moved:
            surface.emit_click(lat=lat, lon=lon)
        return

    if move_mode and vertex_id is not None:
        surface.emit_pointer_down(lat=lat, lon=lon, object_id=vertex_id)
        if not controller.sm.is_dragging:
            st.toast("Finish the current path before moving vertices.")
        return

    surface.emit_click(lat=lat, lon=lon, object_id=vertex_id, ctrl=ctrl)


# =============================================================================
# SIDEBAR
# =============================================================================


def render_sidebar() -> dict[str, bool]:
    """Render measuring controls. Returns gesture modifiers."""
    controller: InteractionController = st.session_state.controller

    with st.sidebar:
        st.header("📏 Measuring")

        label = "⏹️ Stop measuring" if controller.is_measuring else "▶️ Start measuring"
        if st.button(label, key="btn_toggle_measuring", use_container_width=True):
            controller.toggle()
            bump_map_version()
            st.rerun()

        if st.button(
            "✅ Finish path (Esc)",
            key="btn_finish_path",
            use_container_width=True,
            disabled=not controller.path_set.is_building,
        ):
            st.session_state.surface.emit_key(KeyConfig.ESCAPE)
            st.rerun()

        if st.button("🗑️ Clear all", key="btn_clear_all", use_container_width=True):
            controller.clear_all()
            bump_map_version()
            st.rerun()

        st.divider()

        units = list(MeasurementUnit)
        unit = st.selectbox(
            "Units",
            options=units,
            index=units.index(controller.path_set.unit),
            format_func=lambda u: u.display_name,
            key="sel_unit",
        )
        if unit != controller.path_set.unit:
            controller.set_unit(unit=unit)

        show_bearings = st.checkbox("Show bearings", key="chk_bearings", value=controller.path_set.show_bearings)
        if show_bearings != controller.path_set.show_bearings:
            controller.set_show_bearings(show_bearings=show_bearings)

        ctrl = st.toggle("Ctrl (resume finished path)", key="tgl_ctrl", value=False)
        move_mode = st.toggle("Move vertex", key="tgl_move_mode", value=False, disabled=controller.path_set.is_building)

        st.divider()
        render_path_stats(controller=controller)

    return {"ctrl": ctrl, "move_mode": move_mode}


def render_path_stats(controller: InteractionController) -> None:
    paths = controller.path_set.all_paths()
    if not paths:
        st.caption("No paths yet. Click on the map to start.")
        return
    for path in paths:
        total = UnitConverter.format(distance_m=path.total_distance_m, unit=controller.path_set.unit)
        state = "building" if path.is_building else "finished"
        st.markdown(f"**Path {path.id + 1}** · {path.vertex_count} vertices · {total} _({state})_")


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Application entry point."""
    st.set_page_config(page_title=AppConfig.TITLE, page_icon=AppConfig.ICON, layout=AppConfig.LAYOUT)
    init_session_state()

    st.title(AppConfig.TITLE)

    try:
        _run_app_ui()
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.error(f"[UI] UI error caught: {error_msg}\n{traceback.format_exc()}")
        st.error(f"⚠️ [UI] Something went wrong: {error_msg}")

        if st.button("🔄 Reset and Continue", type="primary"):
            for key in ("surface", "controller"):
                st.session_state.pop(key, None)
            bump_map_version()
            st.rerun()


def _run_app_ui() -> None:
    """Run the main application UI. Separated for error handling wrapper."""
    surface: PydeckMapSurface = st.session_state.surface
    controller: InteractionController = st.session_state.controller
    logger.info(f"[MAIN] Render cycle: state={controller.sm.get_state_name()}, {controller.path_set!r}")

    modifiers = render_sidebar()

    if controller.sm.is_dragging:
        st.info("Click the new location of the grabbed vertex.")

    # MUST pass events=['click'] to enable click detection
    event = st_deckgl(
        surface.to_deck(),
        key=f"measure_map_{st.session_state.map_version}",
        height=AppConfig.MAP_HEIGHT,
        events=["click"],
    )

    click = read_click(event=event)
    if click is None:
        return
    lat, lon, vertex_id = click
    dispatch_click(lat=lat, lon=lon, vertex_id=vertex_id, **modifiers)
    st.rerun()


if __name__ == "__main__":
    main()
