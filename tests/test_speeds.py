import pytest

from millcalc.errors import InvalidParameterError, UnknownTypeError
from millcalc.models import CutType
from millcalc.speeds import CUT_SPEED_FACTORS, calculate_speed_and_rpm, get_speed_factor


def test_every_cut_type_has_a_speed_factor():
    assert set(CUT_SPEED_FACTORS) == set(CutType)


class TestSpeedFactor:
    def test_accepts_strings(self):
        assert get_speed_factor("adaptive") == 1.2
        assert get_speed_factor(CutType.SLOT) == 0.8

    def test_unknown(self):
        with pytest.raises(UnknownTypeError):
            get_speed_factor("plunge")


class TestCalculateSpeed:
    def test_midpoint_without_tool(self, aluminum, spindle_2_2kw):
        result = calculate_speed_and_rpm(aluminum, spindle_2_2kw, 4.0, CutType.PROFILE)
        assert result.vc_target == pytest.approx(90.0)
        assert result.rpm_actual == pytest.approx(result.rpm_theoretical)
        assert result.vc_actual == pytest.approx(90.0)
        assert result.warnings == ()

    def test_clamped_to_spindle_max(self, aluminum, spindle_2_2kw, endmill_6mm):
        # carbide in aluminum: 90 * 3.6 = 324 m/min -> ~17189 rpm at 6 mm, so go smaller
        result = calculate_speed_and_rpm(aluminum, spindle_2_2kw, 3.0, CutType.ADAPTIVE, tool=endmill_6mm)
        assert result.rpm_theoretical > spindle_2_2kw.rpm_max
        assert result.rpm_actual == spindle_2_2kw.rpm_max
        assert [w.type for w in result.warnings if w.type == "rpm_limited"] == ["rpm_limited"]
        assert result.vc_actual < result.vc_target

    def test_raised_to_spindle_min(self, aluminum, spindle_2_2kw):
        result = calculate_speed_and_rpm(aluminum, spindle_2_2kw, 50.0, CutType.SLOT)
        assert result.rpm_actual == spindle_2_2kw.rpm_min
        assert "minimum" in result.warnings[-1].message

    def test_rpm_always_within_spindle_range(self, aluminum, spindle_2_2kw):
        for d in (0.5, 2, 6, 12, 40, 100):
            for cut in CutType:
                rpm = calculate_speed_and_rpm(aluminum, spindle_2_2kw, d, cut, 2.0).rpm_actual
                assert spindle_2_2kw.rpm_min <= rpm <= spindle_2_2kw.rpm_max

    def test_tool_material_note(self, aluminum, spindle_2_2kw, endmill_6mm):
        result = calculate_speed_and_rpm(aluminum, spindle_2_2kw, 6.0, CutType.PROFILE, tool=endmill_6mm)
        assert result.vc_target == pytest.approx(90.0 * 3.6)
        assert any(w.type == "tool_material_note" for w in result.warnings)

    def test_speed_multiplier(self, aluminum, spindle_2_2kw):
        result = calculate_speed_and_rpm(aluminum, spindle_2_2kw, 6.0, CutType.PROFILE, speed_multiplier=0.6)
        assert result.vc_target == pytest.approx(54.0)

    def test_rejects_bad_diameter(self, aluminum, spindle_2_2kw):
        with pytest.raises(InvalidParameterError):
            calculate_speed_and_rpm(aluminum, spindle_2_2kw, 0.0, CutType.PROFILE)
