"""Smoke tests for module imports and configuration validation.

Quick tests that verify the system is correctly installed and configured.
"""

import importlib
import re

import pytest

from polyline_measure.constants import MeasureConfig, StyleConfig, TooltipConfig, UnitConfig
from polyline_measure.core.unit_converter import MeasurementUnit
from polyline_measure.model.vertex import VertexRole

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


# =============================================================================
# MODULE IMPORT TESTS
# =============================================================================


class TestModuleImports:
    """Parametrized smoke tests for module imports."""

    @pytest.mark.parametrize(
        "module_path,class_name",
        [
            # Core modules
            pytest.param("polyline_measure.core.geo_calculator", "GeoCalculator", id="core_geo"),
            pytest.param("polyline_measure.core.unit_converter", "UnitConverter", id="core_units"),
            # Model modules
            pytest.param("polyline_measure.model.coordinate", "Coordinate", id="model_coordinate"),
            pytest.param("polyline_measure.model.vertex", "Vertex", id="model_vertex"),
            pytest.param("polyline_measure.model.segment", "Segment", id="model_segment"),
            pytest.param("polyline_measure.model.tooltip", "TooltipFormatter", id="model_tooltip"),
            pytest.param("polyline_measure.model.path", "Path", id="model_path"),
            pytest.param("polyline_measure.model.path_set", "PathSet", id="model_pathset"),
            # UI modules
            pytest.param("polyline_measure.ui.surface", "MapSurface", id="ui_surface"),
            pytest.param("polyline_measure.ui.state_machine", "MeasureStateMachine", id="ui_statemachine"),
            pytest.param("polyline_measure.ui.renderer", "MeasureRenderer", id="ui_renderer"),
            pytest.param("polyline_measure.ui.controller", "InteractionController", id="ui_controller"),
            pytest.param("polyline_measure.ui.pydeck_surface", "PydeckMapSurface", id="ui_pydeck"),
        ],
    )
    def test_module_import(self, module_path: str, class_name: str) -> None:
        """Module can be imported without errors."""
        module = importlib.import_module(module_path)
        cls = getattr(module, class_name)
        assert cls is not None

    def test_package_exports(self) -> None:
        import polyline_measure.model as model
        import polyline_measure.ui as ui

        for name in model.__all__:
            assert hasattr(model, name), f"polyline_measure.model.{name} missing"
        for name in ui.__all__:
            assert hasattr(ui, name), f"polyline_measure.ui.{name} missing"


# =============================================================================
# CONFIGURATION VALIDATION TESTS
# =============================================================================


class TestConfigurationValidation:
    """Tests that configuration constants are valid and consistent."""

    def test_unit_tiers_descending(self) -> None:
        """Tiers are checked top to bottom, so thresholds must shrink."""
        thresholds = [minimum for minimum, _ in UnitConfig.LARGE_UNIT_TIERS]
        assert thresholds == sorted(thresholds, reverse=True)
        assert thresholds[-1] == 1

    def test_no_three_decimal_tier(self) -> None:
        """Three decimals would read as a thousands separator in some locales."""
        decimals = [d for _, d in UnitConfig.LARGE_UNIT_TIERS] + [UnitConfig.SMALL_UNIT_DECIMALS]
        assert 3 not in decimals

    @pytest.mark.parametrize("unit", list(MeasurementUnit))
    def test_unit_system_complete(self, unit: MeasurementUnit) -> None:
        large_symbol, meters_per_large, small_symbol, meters_per_small = UnitConfig.SYSTEMS[unit.value]
        assert meters_per_large > meters_per_small > 0
        assert large_symbol != small_symbol
        assert unit.display_name

    def test_circle_style_for_every_role(self) -> None:
        assert set(StyleConfig.CIRCLE_STYLES) == {role.value for role in VertexRole}

    def test_colors_are_hex(self) -> None:
        colors = [
            StyleConfig.TEMP_LINE["color"],
            StyleConfig.FIXED_LINE["color"],
            StyleConfig.ARROW_COLOR,
            StyleConfig.TOOLTIP_COLOR,
            StyleConfig.TOOLTIP_END_COLOR,
        ]
        for style in StyleConfig.CIRCLE_STYLES.values():
            colors.extend([style["color"], style["fill_color"]])
        assert all(HEX_COLOR.match(color) for color in colors)

    def test_rubber_band_is_dashed(self) -> None:
        assert StyleConfig.TEMP_LINE["dashed"] is True
        assert StyleConfig.FIXED_LINE["dashed"] is False

    def test_arc_sampling(self) -> None:
        assert MeasureConfig.ARC_POINTS >= MeasureConfig.MIN_ARC_POINTS == 2
        assert MeasureConfig.COINCIDENT_TOLERANCE_RAD < MeasureConfig.ANTIPODAL_TOLERANCE_RAD

    def test_tooltip_templates(self) -> None:
        assert TooltipConfig.DIFFERENCE_TEMPLATE.format(value="1.00", symbol="km") == "(+1.00 km)"
        assert TooltipConfig.BEARING_IN_TEMPLATE.format(bearing=87.25) == "In: 87.2°"
