"""Unit conversion for displayed distances.

Raw distances are always meters. UnitConverter turns them into a display
value and symbol under one of three unit systems, using the same four-tier
precision shape for each:

    >= 1000 large units: 0 decimals  (e.g. "1234 km")
    >=  100 large units: 1 decimal   (e.g. "123.4 km")
    >=    1 large unit:  2 decimals  (e.g. "12.34 km")
    below:               small unit with 1 decimal (e.g. "123.4 m", "456.7 ft")

Three decimals are never used: in locales with "." as thousands separator
"1.234 km" could be read as 1234 km.
"""

import math
from dataclasses import dataclass
from enum import Enum

from polyline_measure.constants import UnitConfig


class MeasurementUnit(Enum):
    """Unit system for all displayed distances."""

    METRIC = "metres"
    LANDMILES = "landmiles"
    NAUTICALMILES = "nauticalmiles"

    @property
    def display_name(self) -> str:
        """Human-friendly name for selection widgets."""
        return UnitConfig.DISPLAY_NAMES[self.value]

    @property
    def large_symbol(self) -> str:
        return UnitConfig.SYSTEMS[self.value][0]

    @property
    def small_symbol(self) -> str:
        return UnitConfig.SYSTEMS[self.value][2]

    def next(self) -> "MeasurementUnit":
        """Next unit in cycling order (metric → land miles → nautical miles → metric)."""
        members = list(MeasurementUnit)
        return members[(members.index(self) + 1) % len(members)]


assert {unit.value for unit in MeasurementUnit} == set(UnitConfig.UNITS)


@dataclass(frozen=True)
class FormattedDistance:
    """A distance ready for display.

    Attributes:
        value: Number formatted with the tier's decimals (e.g. "12.34")
        symbol: Unit symbol (e.g. "km")
    """

    value: str
    symbol: str

    @property
    def is_zero(self) -> bool:
        """True if the displayed number reads as zero."""
        return float(self.value) == 0.0

    def __str__(self) -> str:
        return f"{self.value} {self.symbol}"


class UnitConverter:
    """Static methods converting meters to display values."""

    @staticmethod
    def format(distance_m: float, unit: MeasurementUnit) -> FormattedDistance:
        """Format a distance under the given unit system.

        Args:
            distance_m: Distance in meters (finite, >= 0)
            unit: Target unit system

        Returns:
            FormattedDistance with value string and symbol.

        Raises:
            ValueError: If distance_m is negative or not finite.
        """
        UnitConverter._check_distance(distance_m=distance_m)
        large_symbol, meters_per_large, small_symbol, meters_per_small = UnitConfig.SYSTEMS[unit.value]

        for min_large_units, decimals in UnitConfig.LARGE_UNIT_TIERS:
            if distance_m >= min_large_units * meters_per_large:
                return FormattedDistance(
                    value=f"{distance_m / meters_per_large:.{decimals}f}",
                    symbol=large_symbol,
                )

        return FormattedDistance(
            value=f"{distance_m / meters_per_small:.{UnitConfig.SMALL_UNIT_DECIMALS}f}",
            symbol=small_symbol,
        )

    @staticmethod
    def format_in(distance_m: float, unit: MeasurementUnit, symbol: str) -> FormattedDistance:
        """Format a distance in a fixed symbol of the unit system.

        Used to show an incremental distance in the same unit as the total
        it belongs to. The large unit always uses 2 decimals here so short
        increments stay readable (e.g. "+0.05 km").

        Args:
            distance_m: Distance in meters (finite, >= 0)
            unit: Unit system the symbol belongs to
            symbol: Either the large or the small symbol of the system

        Raises:
            ValueError: If distance_m is invalid or symbol is not part of the system.
        """
        UnitConverter._check_distance(distance_m=distance_m)
        large_symbol, meters_per_large, small_symbol, meters_per_small = UnitConfig.SYSTEMS[unit.value]

        if symbol == large_symbol:
            return FormattedDistance(value=f"{distance_m / meters_per_large:.2f}", symbol=large_symbol)
        if symbol == small_symbol:
            return FormattedDistance(
                value=f"{distance_m / meters_per_small:.{UnitConfig.SMALL_UNIT_DECIMALS}f}",
                symbol=small_symbol,
            )
        raise ValueError(f"Symbol '{symbol}' is not part of unit system {unit.value}")

    @staticmethod
    def _check_distance(distance_m: float) -> None:
        if not math.isfinite(distance_m) or distance_m < 0:
            raise ValueError(f"Distance must be finite and non-negative, got {distance_m}")
