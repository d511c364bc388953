"""Configuration constants for Polyline Measure.

All configurable parameters are centralized here for easy tuning.

Classes:
    AppConfig: Streamlit demo app settings
    MapConfig: Default map view parameters
    MeasureConfig: Arc sampling and measuring behavior
    UnitConfig: Unit systems, divisors and precision tiers
    CoordinateConfig: Coordinate comparison tolerances
    StyleConfig: Line and circle marker styling
    TooltipConfig: Tooltip text layout
    KeyConfig: Keyboard bindings
"""


class AppConfig:
    """Streamlit demo app settings."""

    TITLE = "Polyline Measure - Great-Circle Distances"
    ICON = "📏"
    LAYOUT = "wide"
    MAP_HEIGHT = 650


class MapConfig:
    """Default map view parameters."""

    # Initial center: North Atlantic, so transatlantic arcs show their curvature
    START_CENTER_LAT = 45.0
    START_CENTER_LON = -30.0
    DEFAULT_ZOOM = 2

    # Web Mercator tile size in pixels (zoom 0 = one tile for the whole world)
    TILE_SIZE_PX = 256
    # Mercator projection is undefined at the poles
    MAX_MERCATOR_LAT = 85.05112878

    BASEMAP_STYLE = "light"


class MeasureConfig:
    """Arc sampling and measuring behavior."""

    # Earth's mean radius in meters (spherical approximation)
    EARTH_RADIUS_M = 6_371_000

    # Points per great-circle arc (99 sub-segments)
    ARC_POINTS = 100
    MIN_ARC_POINTS = 2

    # Central angle below which two points are treated as coincident
    COINCIDENT_TOLERANCE_RAD = 1e-12
    # Distance from pi below which two points are treated as antipodal
    ANTIPODAL_TOLERANCE_RAD = 1e-9

    # Clear all measurements when measuring is switched off
    CLEAR_ON_STOP = True
    # Show bearings in tooltips
    SHOW_BEARINGS = False
    # Show the incremental distance in the same unit as the total
    DISTANCE_SHOW_SAME_UNIT = False


assert MeasureConfig.ARC_POINTS >= MeasureConfig.MIN_ARC_POINTS


class UnitConfig:
    """Unit systems, divisors and precision tiers.

    Each system has one large unit and one small unit. Distances at or above
    one large unit use the large unit with tiered decimals; below that the
    small unit with SMALL_UNIT_DECIMALS.
    """

    METERS_PER_KM = 1000.0
    METERS_PER_LANDMILE = 1609.344
    METERS_PER_NAUTICALMILE = 1852.0
    METERS_PER_FOOT = 0.3048

    # (minimum value in large units, decimals), checked top to bottom
    # 0 decimals at high magnitude avoids ambiguous thousands separators
    LARGE_UNIT_TIERS = (
        (1000, 0),
        (100, 1),
        (1, 2),
    )
    SMALL_UNIT_DECIMALS = 1

    # unit name -> (large symbol, meters per large unit, small symbol, meters per small unit)
    SYSTEMS = {
        "metres": ("km", METERS_PER_KM, "m", 1.0),
        "landmiles": ("mi", METERS_PER_LANDMILE, "ft", METERS_PER_FOOT),
        "nauticalmiles": ("nm", METERS_PER_NAUTICALMILE, "ft", METERS_PER_FOOT),
    }
    UNITS = list(SYSTEMS.keys())

    DISPLAY_NAMES = {
        "metres": "Metric (km / m)",
        "landmiles": "Land miles (mi / ft)",
        "nauticalmiles": "Nautical miles (nm / ft)",
    }
    assert set(DISPLAY_NAMES.keys()) == set(UNITS)


class CoordinateConfig:
    """Configuration for coordinate handling and comparison.

    STRICT: All coordinate comparisons must use Coordinate.is_same_location,
    NEVER use == for lat/lon floats directly!
    """

    SAME_LOCATION_TOLERANCE_DEG = 1e-9
    MIN_LAT = -90.0
    MAX_LAT = 90.0


class StyleConfig:
    """Line and circle marker styling.

    Circle styles follow the vertex role: start, intermediate, current, end.
    Colors are hex strings; the pydeck surface converts them to RGBA.
    """

    # Dashed rubber-band line while moving the pointer
    TEMP_LINE = {"color": "#0000FF", "weight": 2, "dashed": True}
    # Solid line of committed segments
    FIXED_LINE = {"color": "#000066", "weight": 2, "dashed": False}

    CIRCLE_STYLES = {
        "start": {"color": "#000000", "weight": 1, "fill_color": "#00FF00", "fill_opacity": 1.0, "radius": 3},
        "intermediate": {"color": "#000000", "weight": 1, "fill_color": "#FFFF00", "fill_opacity": 1.0, "radius": 3},
        "current": {"color": "#000000", "weight": 1, "fill_color": "#FF00FF", "fill_opacity": 1.0, "radius": 3},
        "end": {"color": "#000000", "weight": 1, "fill_color": "#FF0000", "fill_opacity": 1.0, "radius": 3},
    }

    # Arrow glyph placed at each segment's geodesic midpoint, rotated by bearing
    ARROW_GLYPH = "▲"
    ARROW_COLOR = "#000066"
    ARROW_SIZE = 12

    TOOLTIP_COLOR = "#000000"
    TOOLTIP_END_COLOR = "#CC0000"
    TOOLTIP_SIZE = 12


class TooltipConfig:
    """Tooltip text layout."""

    TOTAL_TEMPLATE = "{value} {symbol}"
    DIFFERENCE_TEMPLATE = "(+{value} {symbol})"
    BEARING_IN_TEMPLATE = "In: {bearing:.1f}°"
    BEARING_OUT_TEMPLATE = "Out: {bearing:.1f}°"
    LINE_SEPARATOR = "\n"


class KeyConfig:
    """Keyboard bindings."""

    ESCAPE = "Escape"
