"""Host map capabilities consumed by the measuring engine.

The engine never draws or listens on its own. It talks to the host map
through two protocols:

- MapSurface: event subscriptions, projection, panning switch and the
  drawable factory
- Drawable: a created polyline, circle marker or text marker, mutable in
  place and optionally clickable/draggable

Coordinates crossing this boundary are already validated Coordinate values:
hosts construct them from raw lat/lon and drop events that raise
InvalidCoordinateError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from polyline_measure.constants import StyleConfig
from polyline_measure.model.coordinate import Coordinate

# (x, y) in screen pixels
ScreenPoint = tuple[float, float]


@dataclass(frozen=True)
class PointerEvent:
    """Pointer event delivered by the host map.

    Attributes:
        coordinate: Geographic location of the pointer
        screen_point: Pixel location, None if the host does not report it
        ctrl: True if the Ctrl modifier key was held
    """

    coordinate: Coordinate
    screen_point: ScreenPoint | None = None
    ctrl: bool = False


@dataclass(frozen=True)
class LineStyle:
    """Polyline style record."""

    color: str
    weight: float
    dashed: bool = False

    @staticmethod
    def fixed() -> LineStyle:
        return LineStyle(**StyleConfig.FIXED_LINE)

    @staticmethod
    def temporary() -> LineStyle:
        return LineStyle(**StyleConfig.TEMP_LINE)


@dataclass(frozen=True)
class CircleStyle:
    """Point marker style record {strokeColor, strokeWeight, fillColor, fillOpacity, radius}."""

    color: str
    weight: float
    fill_color: str
    fill_opacity: float
    radius: float

    @staticmethod
    def for_role(role: str) -> CircleStyle:
        """Style for a vertex role name (start/intermediate/current/end)."""
        return CircleStyle(**StyleConfig.CIRCLE_STYLES[role])


@dataclass(frozen=True)
class TextStyle:
    """Text marker style record."""

    color: str
    size: float


PointerHandler = Callable[[PointerEvent], None]
KeyHandler = Callable[[str], None]


class Subscription(Protocol):
    """Handle returned by every on_* registration."""

    def cancel(self) -> None: ...


class Drawable(Protocol):
    """A shape owned by the host map."""

    def set_points(self, points: list[tuple[float, float]]) -> None: ...

    def set_style(self, style: LineStyle | CircleStyle | TextStyle) -> None: ...

    def set_text(self, text: str) -> None: ...

    def set_rotation(self, rotation_deg: float) -> None: ...

    def on_click(self, handler: PointerHandler) -> Subscription: ...

    def on_pointer_down(self, handler: PointerHandler) -> Subscription: ...


class MapSurface(Protocol):
    """The host map as seen by the engine."""

    def on_pointer_move(self, handler: PointerHandler) -> Subscription: ...

    def on_pointer_down(self, handler: PointerHandler) -> Subscription: ...

    def on_pointer_up(self, handler: PointerHandler) -> Subscription: ...

    def on_click(self, handler: PointerHandler) -> Subscription: ...

    def on_key(self, handler: KeyHandler) -> Subscription: ...

    def project(self, coord: Coordinate) -> ScreenPoint: ...

    def set_panning_enabled(self, enabled: bool) -> None: ...

    def add_polyline(self, points: list[tuple[float, float]], style: LineStyle) -> Drawable: ...

    def add_circle_marker(self, position: tuple[float, float], style: CircleStyle) -> Drawable: ...

    def add_text_marker(
        self,
        position: tuple[float, float],
        text: str,
        style: TextStyle,
        rotation_deg: float = 0.0,
    ) -> Drawable: ...

    def remove(self, drawable: Drawable) -> None: ...
