"""Shared pytest fixtures for polyline_measure workflow tests.

Workflow tests drive the engine through PydeckMapSurface's emit_* methods,
the same entry points the Streamlit app uses, and inspect the resulting
pydeck layers. Keep this conftest minimal.

COORDINATE SYSTEM:
    Tests use coordinates on the equator (lat=0) near the prime meridian,
    where 1 degree of longitude is 111,194.93 m on the 6,371 km sphere.
"""

import pytest

from polyline_measure.model.coordinate import Coordinate
from polyline_measure.model.path_set import PathSet
from polyline_measure.ui.controller import InteractionController, MeasureOptions
from polyline_measure.ui.pydeck_surface import PydeckMapSurface
from polyline_measure.ui.state_machine import MeasureContext, MeasureStateMachine

SMAndCtx = tuple[MeasureStateMachine, MeasureContext]


@pytest.fixture
def pydeck_surface() -> PydeckMapSurface:
    """Surface centered on the origin, zoom 4."""
    return PydeckMapSurface(center_lat=0.0, center_lon=0.0, zoom=4)


@pytest.fixture
def workflow(pydeck_surface: PydeckMapSurface) -> InteractionController:
    """Started controller on the pydeck surface, paths kept when switched off."""
    controller = InteractionController(
        surface=pydeck_surface,
        options=MeasureOptions(clear_on_stop=False),
        add_log_listener=False,
    )
    controller.start()
    return controller


@pytest.fixture
def sm_and_ctx() -> SMAndCtx:
    """Fresh state machine in IDLE with an empty PathSet."""
    return MeasureStateMachine.create(path_set=PathSet(), add_log_listener=False)


@pytest.fixture
def finished_path_set() -> PathSet:
    """PathSet holding one finished path (0,0) → (0,1)."""
    paths = PathSet()
    paths.add_vertex(coord=Coordinate(lat=0.0, lon=0.0))
    paths.add_vertex(coord=Coordinate(lat=0.0, lon=1.0))
    paths.finalize_active()
    return paths
