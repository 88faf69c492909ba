from dataclasses import replace

import pytest

from millcalc.errors import InvalidParameterError
from millcalc.force import TOOL_FORCE_MULTIPLIERS, calculate_cutting_force, get_tool_material_force_multiplier
from millcalc.models import Severity, ToolType


def test_every_tool_type_has_a_force_multiplier():
    assert set(TOOL_FORCE_MULTIPLIERS) == set(ToolType)


class TestCuttingForce:
    def test_chip_area_times_coefficient(self, aluminum, endmill_6mm):
        result = calculate_cutting_force(aluminum, endmill_6mm, 1.8, 0.05)
        assert result.chip_area_mm2 == pytest.approx(0.09)
        assert result.base_force == pytest.approx(63.0)
        assert result.tool_material_multiplier == pytest.approx(0.85)
        assert result.force == pytest.approx(63.0 * 0.85)
        assert result.warnings == ()

    def test_tool_type_multiplier(self, aluminum, endmill_6mm):
        drill = replace(endmill_6mm, type=ToolType.DRILL)
        assert calculate_cutting_force(aluminum, drill, 1.8, 0.05).force == pytest.approx(63.0 * 0.85 * 1.5)

    def test_coating_reduces_force(self, endmill_6mm):
        coated = replace(endmill_6mm, coating="AlTiN")
        assert get_tool_material_force_multiplier(coated) < get_tool_material_force_multiplier(endmill_6mm)

    def test_high_force_warning(self, aluminum, endmill_6mm):
        result = calculate_cutting_force(aluminum, endmill_6mm, 6.0, 0.6)
        assert [(w.type, w.severity) for w in result.warnings] == [("high_force", Severity.WARNING)]

    def test_high_force_danger(self, aluminum, endmill_6mm):
        result = calculate_cutting_force(aluminum, endmill_6mm, 6.0, 1.0)
        assert result.warnings[0].severity is Severity.DANGER

    def test_reference_diameter_scales_warning(self, aluminum, endmill_6mm):
        result = calculate_cutting_force(aluminum, endmill_6mm, 6.0, 0.6, reference_diameter_mm=20.0)
        assert result.warnings == ()

    def test_zero_width_gives_zero_force(self, aluminum, endmill_6mm):
        assert calculate_cutting_force(aluminum, endmill_6mm, 0.0, 0.05).force == 0.0

    def test_rejects_negative(self, aluminum, endmill_6mm):
        with pytest.raises(InvalidParameterError):
            calculate_cutting_force(aluminum, endmill_6mm, -1.0, 0.05)
