"""Pydeck map surface - MapSurface implementation backed by deck.gl layers.

Drawables live in memory; to_deck() turns them into pydeck layers:
- PathLayer: segment lines (solid) and the rubber-band (separate, translucent)
- ScatterplotLayer: vertex circles (pickable, carry type/id for click routing)
- TextLayer: arrows and tooltips

The host (Streamlit app, tests) feeds raw events through the emit_* methods.
Raw lat/lon is validated here: events with an invalid coordinate are logged
and dropped before reaching the engine.

Click routing: a click whose picked object is a vertex circle with click
handlers goes to that circle only; every other click goes to the map.

Layer data uses [lon, lat] (deck.gl order). Unwrapped longitudes beyond
±180 are passed through unchanged, so antimeridian arcs stay continuous.
"""

from __future__ import annotations

import itertools
import logging
import math
from typing import Any

import pydeck as pdk

from polyline_measure.constants import MapConfig
from polyline_measure.model.coordinate import Coordinate
from polyline_measure.model.errors import InvalidCoordinateError
from polyline_measure.ui.surface import (
    CircleStyle,
    KeyHandler,
    LineStyle,
    PointerEvent,
    PointerHandler,
    ScreenPoint,
    TextStyle,
)

logger = logging.getLogger(__name__)

# Picked-object type of vertex circles (matches the "type" field in layer data)
TYPE_VERTEX = "vertex"

# Alpha of dashed lines: deck.gl PathLayer has no dash without extensions
TEMP_LINE_ALPHA = 140


def hex_to_rgba(color: str, opacity: float = 1.0) -> list[int]:
    """Convert "#RRGGBB" to a deck.gl [r, g, b, a] list."""
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected #RRGGBB color, got {color!r}")
    r, g, b = (int(value[i : i + 2], 16) for i in (0, 2, 4))
    return [r, g, b, round(255 * opacity)]


class PydeckSubscription:
    """Handle removing one handler from its list on cancel()."""

    def __init__(self, handlers: list, handler: Any) -> None:
        self._handlers = handlers
        self._handler = handler

    def cancel(self) -> None:
        if self._handler in self._handlers:
            self._handlers.remove(self._handler)


class PydeckDrawable:
    """In-memory drawable rendered by PydeckMapSurface.

    Attributes:
        id: Unique ID, exposed as "id" in layer data for click routing
        kind: "polyline", "circle" or "text"
        points: (lat, lon) points; markers hold exactly one
        style: LineStyle, CircleStyle or TextStyle
        text: Text of text markers
        rotation_deg: Geographic rotation of text markers (clockwise from North)
    """

    def __init__(
        self,
        drawable_id: str,
        kind: str,
        points: list[tuple[float, float]],
        style: LineStyle | CircleStyle | TextStyle,
        text: str = "",
        rotation_deg: float = 0.0,
    ) -> None:
        self.id = drawable_id
        self.kind = kind
        self.points = list(points)
        self.style = style
        self.text = text
        self.rotation_deg = rotation_deg
        self.click_handlers: list[PointerHandler] = []
        self.pointer_down_handlers: list[PointerHandler] = []

    def set_points(self, points: list[tuple[float, float]]) -> None:
        self.points = list(points)

    def set_style(self, style: LineStyle | CircleStyle | TextStyle) -> None:
        self.style = style

    def set_text(self, text: str) -> None:
        self.text = text

    def set_rotation(self, rotation_deg: float) -> None:
        self.rotation_deg = rotation_deg

    def on_click(self, handler: PointerHandler) -> PydeckSubscription:
        self.click_handlers.append(handler)
        return PydeckSubscription(handlers=self.click_handlers, handler=handler)

    def on_pointer_down(self, handler: PointerHandler) -> PydeckSubscription:
        self.pointer_down_handlers.append(handler)
        return PydeckSubscription(handlers=self.pointer_down_handlers, handler=handler)

    @property
    def position(self) -> tuple[float, float]:
        return self.points[0]

    def __repr__(self) -> str:
        return f"PydeckDrawable(id={self.id}, kind={self.kind}, points={len(self.points)})"


class PydeckMapSurface:
    """MapSurface keeping drawables in memory and rendering them as a pydeck Deck.

    Args:
        center_lat, center_lon: View center
        zoom: Web Mercator zoom level (used by project and the initial view)
    """

    def __init__(
        self,
        center_lat: float = MapConfig.START_CENTER_LAT,
        center_lon: float = MapConfig.START_CENTER_LON,
        zoom: float = MapConfig.DEFAULT_ZOOM,
    ) -> None:
        self.center_lat = center_lat
        self.center_lon = center_lon
        self.zoom = zoom
        self.panning_enabled = True
        self.drawables: dict[str, PydeckDrawable] = {}
        self._ids = itertools.count(1)
        self._handlers: dict[str, list] = {
            "pointer_move": [],
            "pointer_down": [],
            "pointer_up": [],
            "click": [],
            "key": [],
        }

    # =========================================================================
    # MapSurface: subscriptions
    # =========================================================================

    def on_pointer_move(self, handler: PointerHandler) -> PydeckSubscription:
        return self._subscribe(event="pointer_move", handler=handler)

    def on_pointer_down(self, handler: PointerHandler) -> PydeckSubscription:
        return self._subscribe(event="pointer_down", handler=handler)

    def on_pointer_up(self, handler: PointerHandler) -> PydeckSubscription:
        return self._subscribe(event="pointer_up", handler=handler)

    def on_click(self, handler: PointerHandler) -> PydeckSubscription:
        return self._subscribe(event="click", handler=handler)

    def on_key(self, handler: KeyHandler) -> PydeckSubscription:
        return self._subscribe(event="key", handler=handler)

    def _subscribe(self, event: str, handler: Any) -> PydeckSubscription:
        self._handlers[event].append(handler)
        return PydeckSubscription(handlers=self._handlers[event], handler=handler)

    # =========================================================================
    # MapSurface: view
    # =========================================================================

    def project(self, coord: Coordinate) -> ScreenPoint:
        """Web Mercator pixel offset of a coordinate from the view center."""
        x, y = self._world_pixels(lat=coord.lat, lon=coord.lon)
        cx, cy = self._world_pixels(lat=self.center_lat, lon=self.center_lon)
        return (x - cx, y - cy)

    def _world_pixels(self, lat: float, lon: float) -> tuple[float, float]:
        world_size = MapConfig.TILE_SIZE_PX * 2**self.zoom
        lat = max(-MapConfig.MAX_MERCATOR_LAT, min(MapConfig.MAX_MERCATOR_LAT, lat))
        lat_rad = math.radians(lat)
        x = (lon + 180.0) / 360.0 * world_size
        y = (1.0 - math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad)) / math.pi) / 2.0 * world_size
        return (x, y)

    def set_panning_enabled(self, enabled: bool) -> None:
        self.panning_enabled = enabled
        logger.debug(f"Map panning {'enabled' if enabled else 'disabled'}")

    # =========================================================================
    # MapSurface: drawable factory
    # =========================================================================

    def add_polyline(self, points: list[tuple[float, float]], style: LineStyle) -> PydeckDrawable:
        return self._add(kind="polyline", points=points, style=style)

    def add_circle_marker(self, position: tuple[float, float], style: CircleStyle) -> PydeckDrawable:
        return self._add(kind="circle", points=[position], style=style)

    def add_text_marker(
        self,
        position: tuple[float, float],
        text: str,
        style: TextStyle,
        rotation_deg: float = 0.0,
    ) -> PydeckDrawable:
        return self._add(kind="text", points=[position], style=style, text=text, rotation_deg=rotation_deg)

    def remove(self, drawable: PydeckDrawable) -> None:
        self.drawables.pop(drawable.id, None)

    def _add(self, kind: str, points: list[tuple[float, float]], style: Any, **kwargs: Any) -> PydeckDrawable:
        drawable = PydeckDrawable(drawable_id=f"{kind}_{next(self._ids)}", kind=kind, points=points, style=style, **kwargs)
        self.drawables[drawable.id] = drawable
        return drawable

    # =========================================================================
    # HOST EVENTS
    # =========================================================================

    def emit_pointer_move(self, lat: float, lon: float, ctrl: bool = False) -> bool:
        return self._emit_pointer(event="pointer_move", lat=lat, lon=lon, ctrl=ctrl)

    def emit_pointer_up(self, lat: float, lon: float, ctrl: bool = False) -> bool:
        return self._emit_pointer(event="pointer_up", lat=lat, lon=lon, ctrl=ctrl)

    def emit_pointer_down(self, lat: float, lon: float, object_id: str | None = None, ctrl: bool = False) -> bool:
        """Pointer-down, routed to the picked drawable if it listens for it."""
        drawable = self.drawables.get(object_id) if object_id else None
        if drawable is not None and drawable.pointer_down_handlers:
            return self._emit_to(handlers=drawable.pointer_down_handlers, lat=lat, lon=lon, ctrl=ctrl)
        return self._emit_pointer(event="pointer_down", lat=lat, lon=lon, ctrl=ctrl)

    def emit_click(self, lat: float, lon: float, object_id: str | None = None, ctrl: bool = False) -> bool:
        """Click, routed to the picked drawable if it listens for clicks, else to the map.

        Returns:
            True if the event was delivered, False if its coordinate was invalid.
        """
        drawable = self.drawables.get(object_id) if object_id else None
        if drawable is not None and drawable.click_handlers:
            return self._emit_to(handlers=drawable.click_handlers, lat=lat, lon=lon, ctrl=ctrl)
        return self._emit_pointer(event="click", lat=lat, lon=lon, ctrl=ctrl)

    def emit_key(self, key: str) -> None:
        for handler in list(self._handlers["key"]):
            handler(key)

    def _emit_pointer(self, event: str, lat: float, lon: float, ctrl: bool) -> bool:
        return self._emit_to(handlers=self._handlers[event], lat=lat, lon=lon, ctrl=ctrl)

    def _emit_to(self, handlers: list[PointerHandler], lat: float, lon: float, ctrl: bool) -> bool:
        try:
            coordinate = Coordinate(lat=lat, lon=lon)
        except InvalidCoordinateError as e:
            logger.warning(f"Dropped pointer event: {e}")
            return False
        event = PointerEvent(coordinate=coordinate, screen_point=self.project(coord=coordinate), ctrl=ctrl)
        # Handlers may unsubscribe while running
        for handler in list(handlers):
            handler(event)
        return True

    # =========================================================================
    # RENDERING
    # =========================================================================

    def of_kind(self, kind: str) -> list[PydeckDrawable]:
        return [d for d in self.drawables.values() if d.kind == kind]

    def to_layers(self) -> list[pdk.Layer]:
        """Build pydeck layers. Z-order: lines → rubber-band → circles → text."""
        fixed_lines, temp_lines = [], []
        for line in self.of_kind(kind="polyline"):
            row = {
                "type": "line",
                "id": line.id,
                "path": [[lon, lat] for lat, lon in line.points],
                "color": hex_to_rgba(line.style.color),
                "width": line.style.weight,
            }
            if line.style.dashed:
                row["color"][3] = TEMP_LINE_ALPHA
                temp_lines.append(row)
            else:
                fixed_lines.append(row)

        circles = [
            {
                "type": TYPE_VERTEX,
                "id": circle.id,
                "position": [circle.position[1], circle.position[0]],
                "radius": circle.style.radius,
                "fill_color": hex_to_rgba(circle.style.fill_color, opacity=circle.style.fill_opacity),
                "line_color": hex_to_rgba(circle.style.color),
            }
            for circle in self.of_kind(kind="circle")
        ]

        texts = [
            {
                "type": "text",
                "id": text.id,
                "position": [text.position[1], text.position[0]],
                "text": text.text,
                # deck.gl angles are counter-clockwise, bearings clockwise
                "angle": -text.rotation_deg,
                "size": text.style.size,
                "color": hex_to_rgba(text.style.color),
            }
            for text in self.of_kind(kind="text")
        ]

        return [
            pdk.Layer(
                "PathLayer",
                fixed_lines,
                get_path="path",
                get_color="color",
                get_width="width",
                width_units="pixels",
                pickable=False,
                id="measure_lines",
            ),
            pdk.Layer(
                "PathLayer",
                temp_lines,
                get_path="path",
                get_color="color",
                get_width="width",
                width_units="pixels",
                pickable=False,
                id="measure_rubber_band",
            ),
            pdk.Layer(
                "ScatterplotLayer",
                circles,
                get_position="position",
                get_radius="radius",
                radius_units="pixels",
                radius_min_pixels=3,
                get_fill_color="fill_color",
                get_line_color="line_color",
                stroked=True,
                line_width_min_pixels=1,
                pickable=True,
                auto_highlight=True,
                id="measure_vertices",
            ),
            pdk.Layer(
                "TextLayer",
                texts,
                get_position="position",
                get_text="text",
                get_angle="angle",
                get_size="size",
                get_color="color",
                character_set="auto",
                pickable=False,
                id="measure_text",
            ),
        ]

    def to_deck(self) -> pdk.Deck:
        """Complete Deck with the current view and all measuring layers."""
        return pdk.Deck(
            map_style=MapConfig.BASEMAP_STYLE,
            initial_view_state=pdk.ViewState(
                latitude=self.center_lat,
                longitude=self.center_lon,
                zoom=self.zoom,
            ),
            layers=self.to_layers(),
            tooltip=False,
        )
