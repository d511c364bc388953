"""Polyline Measure - Great-circle distance measuring on interactive maps.

A geodesic measuring engine featuring:
- Great-circle arc interpolation that stays continuous across the antimeridian
- Multi-vertex paths with finish, resume and vertex drag editing
- Cumulative and incremental distances in metric, land or nautical miles
- State machine-based interaction on top of an abstract map surface

Modules:
    core: Foundation classes (geo calculations, unit conversion)
    model: Data structures (Coordinate, Vertex, Segment, Path, PathSet)
    ui: Interaction layer (state machine, controller, renderer, pydeck surface)

Example:
    from polyline_measure.model import Coordinate, PathSet
    from polyline_measure.ui import InteractionController
    from polyline_measure.ui.pydeck_surface import PydeckMapSurface
"""
