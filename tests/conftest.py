"""Shared pytest fixtures for polyline_measure tests.

Provides RecordingSurface (a MapSurface fake) and reusable test data.
All fixtures use explicit values with documented rationale.

COORDINATE SYSTEM:
    Tests use coordinates on the equator (lat=0) near the prime meridian
    where 1 degree of longitude is a great-circle arc of exactly
    R * pi / 180 = 111,194.93 m on the 6,371 km sphere.
"""

import pytest

from polyline_measure.model.coordinate import Coordinate
from polyline_measure.model.path import Path
from polyline_measure.model.path_set import PathSet
from polyline_measure.ui.controller import InteractionController, MeasureOptions
from polyline_measure.ui.surface import PointerEvent


# =============================================================================
# RECORDING SURFACE
# =============================================================================


class RecordingSubscription:
    def __init__(self, handlers: list, handler: object) -> None:
        self.handlers = handlers
        self.handler = handler

    def cancel(self) -> None:
        if self.handler in self.handlers:
            self.handlers.remove(self.handler)


class RecordingDrawable:
    """Drawable fake recording every mutation."""

    def __init__(self, kind: str, points: list, style: object, text: str = "", rotation_deg: float = 0.0) -> None:
        self.kind = kind
        self.points = list(points)
        self.style = style
        self.text = text
        self.rotation_deg = rotation_deg
        self.removed = False
        self.updates = 0
        self.click_handlers: list = []
        self.pointer_down_handlers: list = []

    def set_points(self, points: list) -> None:
        self.points = list(points)
        self.updates += 1

    def set_style(self, style: object) -> None:
        self.style = style

    def set_text(self, text: str) -> None:
        self.text = text

    def set_rotation(self, rotation_deg: float) -> None:
        self.rotation_deg = rotation_deg

    def on_click(self, handler: object) -> RecordingSubscription:
        self.click_handlers.append(handler)
        return RecordingSubscription(handlers=self.click_handlers, handler=handler)

    def on_pointer_down(self, handler: object) -> RecordingSubscription:
        self.pointer_down_handlers.append(handler)
        return RecordingSubscription(handlers=self.pointer_down_handlers, handler=handler)

    def click(self, lat: float, lon: float, ctrl: bool = False) -> None:
        event = PointerEvent(coordinate=Coordinate(lat=lat, lon=lon), ctrl=ctrl)
        for handler in list(self.click_handlers):
            handler(event)

    def press(self, lat: float, lon: float, ctrl: bool = False) -> None:
        event = PointerEvent(coordinate=Coordinate(lat=lat, lon=lon), ctrl=ctrl)
        for handler in list(self.pointer_down_handlers):
            handler(event)


class RecordingSurface:
    """MapSurface fake: keeps drawables and handlers in plain lists.

    Test helpers move/click/release/key fire the subscribed map handlers
    the way a host map would.
    """

    def __init__(self) -> None:
        self.drawables: list[RecordingDrawable] = []
        self.handlers: dict[str, list] = {"move": [], "down": [], "up": [], "click": [], "key": []}
        self.panning_enabled = True
        self.panning_history: list[bool] = []

    # MapSurface protocol
    def on_pointer_move(self, handler: object) -> RecordingSubscription:
        return self._subscribe("move", handler)

    def on_pointer_down(self, handler: object) -> RecordingSubscription:
        return self._subscribe("down", handler)

    def on_pointer_up(self, handler: object) -> RecordingSubscription:
        return self._subscribe("up", handler)

    def on_click(self, handler: object) -> RecordingSubscription:
        return self._subscribe("click", handler)

    def on_key(self, handler: object) -> RecordingSubscription:
        return self._subscribe("key", handler)

    def project(self, coord: Coordinate) -> tuple[float, float]:
        return (coord.lon, -coord.lat)

    def set_panning_enabled(self, enabled: bool) -> None:
        self.panning_enabled = enabled
        self.panning_history.append(enabled)

    def add_polyline(self, points: list, style: object) -> RecordingDrawable:
        return self._add(RecordingDrawable(kind="polyline", points=points, style=style))

    def add_circle_marker(self, position: tuple, style: object) -> RecordingDrawable:
        return self._add(RecordingDrawable(kind="circle", points=[position], style=style))

    def add_text_marker(self, position: tuple, text: str, style: object, rotation_deg: float = 0.0) -> RecordingDrawable:
        return self._add(RecordingDrawable(kind="text", points=[position], style=style, text=text, rotation_deg=rotation_deg))

    def remove(self, drawable: RecordingDrawable) -> None:
        drawable.removed = True

    # Test helpers
    def live(self, kind: str | None = None) -> list[RecordingDrawable]:
        return [d for d in self.drawables if not d.removed and (kind is None or d.kind == kind)]

    def move(self, lat: float, lon: float) -> None:
        self._fire("move", PointerEvent(coordinate=Coordinate(lat=lat, lon=lon)))

    def click(self, lat: float, lon: float, ctrl: bool = False) -> None:
        self._fire("click", PointerEvent(coordinate=Coordinate(lat=lat, lon=lon), ctrl=ctrl))

    def release(self, lat: float, lon: float) -> None:
        self._fire("up", PointerEvent(coordinate=Coordinate(lat=lat, lon=lon)))

    def key(self, key: str) -> None:
        for handler in list(self.handlers["key"]):
            handler(key)

    def subscriber_count(self) -> int:
        return sum(len(handlers) for handlers in self.handlers.values())

    def _subscribe(self, event: str, handler: object) -> RecordingSubscription:
        self.handlers[event].append(handler)
        return RecordingSubscription(handlers=self.handlers[event], handler=handler)

    def _add(self, drawable: RecordingDrawable) -> RecordingDrawable:
        self.drawables.append(drawable)
        return drawable

    def _fire(self, event: str, pointer: PointerEvent) -> None:
        for handler in list(self.handlers[event]):
            handler(pointer)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def surface() -> RecordingSurface:
    """Fresh recording surface per test."""
    return RecordingSurface()


@pytest.fixture
def controller(surface: RecordingSurface) -> InteractionController:
    """Controller with measuring switched on and default options.

    clear_on_stop stays True (the default), tests that stop measuring and
    inspect paths afterwards build their own controller.
    """
    ctrl = InteractionController(surface=surface, options=MeasureOptions(), add_log_listener=False)
    ctrl.start()
    return ctrl


@pytest.fixture
def equator_path() -> Path:
    """Finalized 3-vertex path (0,0) → (0,1) → (1,1).

    Segment 0 runs 1° east along the equator (ONE_DEGREE_M), segment 1 runs
    1° north along the 1°E meridian (also ONE_DEGREE_M).
    """
    path = Path(id=0)
    path.add_vertex(coord=Coordinate(lat=0.0, lon=0.0))
    path.add_vertex(coord=Coordinate(lat=0.0, lon=1.0))
    path.add_vertex(coord=Coordinate(lat=1.0, lon=1.0))
    path.finalize()
    return path


@pytest.fixture
def path_set_with_two_paths() -> PathSet:
    """PathSet with two finalized paths: 0 along the equator, 1 along a meridian."""
    paths = PathSet()
    paths.add_vertex(coord=Coordinate(lat=0.0, lon=0.0))
    paths.add_vertex(coord=Coordinate(lat=0.0, lon=1.0))
    paths.finalize_active()
    paths.add_vertex(coord=Coordinate(lat=10.0, lon=20.0))
    paths.add_vertex(coord=Coordinate(lat=11.0, lon=20.0))
    paths.add_vertex(coord=Coordinate(lat=12.0, lon=20.0))
    paths.finalize_active()
    return paths


@pytest.fixture
def keeping_controller(surface: RecordingSurface) -> InteractionController:
    """Started controller with clear_on_stop=False, paths survive switching off."""
    ctrl = InteractionController(surface=surface, options=MeasureOptions(clear_on_stop=False), add_log_listener=False)
    ctrl.start()
    return ctrl
