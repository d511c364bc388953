"""Core foundation classes for geodesic measuring.

This module provides the mathematical backbone of the measuring engine:
- GeoCalculator: Geodesic calculations (distances, bearings, great-circle arcs)
- UnitConverter: Meter distances to display values under a unit system
- MeasurementUnit: Metric, land miles, nautical miles
"""

from polyline_measure.core.geo_calculator import GeoCalculator
from polyline_measure.core.unit_converter import (
    FormattedDistance,
    MeasurementUnit,
    UnitConverter,
)

__all__ = [
    # Geo calculator
    "GeoCalculator",
    # Unit converter
    "UnitConverter",
    "MeasurementUnit",
    "FormattedDistance",
]
