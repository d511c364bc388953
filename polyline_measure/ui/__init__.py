"""Interaction layer between the host map and the measuring model.

Core Components:
- surface.py: MapSurface / Drawable protocols and style records
- state_machine.py: MeasureStateMachine (3 states) + MeasureContext
- renderer.py: MeasureRenderer, the only code creating drawables
- controller.py: InteractionController + MeasureOptions

Host adapter (imported explicitly, pulls in pydeck):
- pydeck_surface.py: PydeckMapSurface rendering drawables as deck.gl layers
"""

from polyline_measure.ui.controller import InteractionController, MeasureOptions
from polyline_measure.ui.renderer import MeasureRenderer
from polyline_measure.ui.state_machine import (
    DragContext,
    MeasureContext,
    MeasureStateMachine,
    StateLogListener,
)
from polyline_measure.ui.surface import (
    CircleStyle,
    Drawable,
    LineStyle,
    MapSurface,
    PointerEvent,
    Subscription,
    TextStyle,
)

__all__ = [
    # Controller
    "InteractionController",
    "MeasureOptions",
    "MeasureRenderer",
    # State machine
    "MeasureStateMachine",
    "MeasureContext",
    "DragContext",
    "StateLogListener",
    # Surface protocols
    "MapSurface",
    "Drawable",
    "Subscription",
    "PointerEvent",
    "LineStyle",
    "CircleStyle",
    "TextStyle",
]
