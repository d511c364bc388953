"""Tooltip - Distance and bearing readout attached to a vertex.

The Tooltip record holds raw numbers only (meters and degrees). Text is
produced at render time by TooltipFormatter, so switching the unit system
or the bearing display never touches stored distances.

Layout of the formatted text:

    12.34 km (+2.10 km)
    In: 87.2°
    Out: 91.0°

The difference part is omitted when it would read as zero. The "Out" line
only exists for vertices followed by a segment.

Vertex 0 has no tooltip, so the outbound bearing of the first segment is
never printed. Its direction is shown by the segment's arrow, and the value
stays available as Segment.bearing_out.
"""

from dataclasses import dataclass
from typing import Optional

from polyline_measure.constants import TooltipConfig
from polyline_measure.core.unit_converter import FormattedDistance, MeasurementUnit, UnitConverter


@dataclass
class Tooltip:
    """Raw readout values for one vertex (index >= 1).

    Attributes:
        total_m: Cumulative path distance up to this vertex
        difference_m: Length of the segment ending at this vertex
        bearing_in: Arrival bearing of the incoming segment
        bearing_out: Departure bearing of the outgoing segment, None for the last vertex
    """

    total_m: float
    difference_m: float
    bearing_in: float
    bearing_out: Optional[float] = None


class TooltipFormatter:
    """Turns Tooltip records into display text for the current options.

    Args:
        unit: Unit system for all distances
        show_bearings: Append "In"/"Out" bearing lines
        distance_show_same_unit: Show the difference in the unit chosen for the
            total instead of formatting it independently
    """

    def __init__(
        self,
        unit: MeasurementUnit,
        show_bearings: bool = False,
        distance_show_same_unit: bool = False,
    ) -> None:
        self.unit = unit
        self.show_bearings = show_bearings
        self.distance_show_same_unit = distance_show_same_unit

    def format_total(self, tooltip: Tooltip) -> FormattedDistance:
        return UnitConverter.format(distance_m=tooltip.total_m, unit=self.unit)

    def format_difference(self, tooltip: Tooltip) -> FormattedDistance:
        if self.distance_show_same_unit:
            total = self.format_total(tooltip=tooltip)
            return UnitConverter.format_in(distance_m=tooltip.difference_m, unit=self.unit, symbol=total.symbol)
        return UnitConverter.format(distance_m=tooltip.difference_m, unit=self.unit)

    def format(self, tooltip: Tooltip) -> str:
        """Full multi-line tooltip text."""
        total = self.format_total(tooltip=tooltip)
        first_line = TooltipConfig.TOTAL_TEMPLATE.format(value=total.value, symbol=total.symbol)

        difference = self.format_difference(tooltip=tooltip)
        if not difference.is_zero:
            first_line += " " + TooltipConfig.DIFFERENCE_TEMPLATE.format(
                value=difference.value, symbol=difference.symbol
            )

        lines = [first_line]
        if self.show_bearings:
            lines.append(TooltipConfig.BEARING_IN_TEMPLATE.format(bearing=tooltip.bearing_in))
            if tooltip.bearing_out is not None:
                lines.append(TooltipConfig.BEARING_OUT_TEMPLATE.format(bearing=tooltip.bearing_out))
        return TooltipConfig.LINE_SEPARATOR.join(lines)
