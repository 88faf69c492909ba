from dataclasses import replace

import pytest

from millcalc.hobby import (
    HOBBY_DEFLECTION_LIMITS,
    HOBBY_LD_GUIDELINES,
    HobbyParams,
    MachineClass,
    apply_hobby_adjustments,
    classify_machine,
    classify_rigidity,
    evaluate_hobby_tool_suitability,
    get_hobby_adjustment,
    get_hobby_deflection_limits,
    validate_hobby_deflection,
    validate_hobby_power,
)


def test_every_class_has_limits():
    assert set(HOBBY_DEFLECTION_LIMITS) == set(MachineClass)
    assert set(HOBBY_LD_GUIDELINES) == set(MachineClass)


class TestClassification:
    @pytest.mark.parametrize("rigidity, expected", [
        (0.15, MachineClass.ULTRA_LIGHT),
        (0.2, MachineClass.MEDIUM_HOBBY),
        (0.39, MachineClass.MEDIUM_HOBBY),
        (0.4, MachineClass.HEAVY_HOBBY),
        (0.7, MachineClass.ENTRY_COMMERCIAL),
        (1.0, MachineClass.ENTRY_COMMERCIAL),
    ])
    def test_buckets(self, rigidity, expected):
        assert classify_rigidity(rigidity) is expected

    def test_machine(self, hobby_machine):
        assert classify_machine(hobby_machine) is MachineClass.ULTRA_LIGHT


class TestAdjustments:
    def test_lookup(self, hobby_machine, aluminum):
        adj = get_hobby_adjustment(hobby_machine, aluminum)
        assert adj.surface_speed_multiplier == 0.6
        assert adj.max_axial_engagement_mm == 0.3

    def test_material_without_entry(self, hobby_machine, aluminum):
        assert get_hobby_adjustment(hobby_machine, replace(aluminum, id="mdf")) is None

    def test_apply_caps_engagement(self, hobby_machine, aluminum):
        adj = get_hobby_adjustment(hobby_machine, aluminum)
        out = apply_hobby_adjustments(HobbyParams(1.0, 1.0, 0.3, 3.0), adj)
        assert out.surface_speed == pytest.approx(0.6)
        assert out.chipload == pytest.approx(0.7)
        assert out.radial_engagement == 0.25
        assert out.axial_engagement_mm == 0.3
        assert [w.type for w in out.warnings] == ["hobby_adjustment", "hobby_adjustment", "hobby_strategy"]

    def test_apply_within_limits(self, hobby_machine, aluminum):
        adj = get_hobby_adjustment(hobby_machine, aluminum)
        out = apply_hobby_adjustments(HobbyParams(1.0, 1.0, 0.1, 0.2), adj)
        assert (out.radial_engagement, out.axial_engagement_mm) == (0.1, 0.2)
        assert [w.type for w in out.warnings] == ["hobby_strategy"]


class TestPostChecks:
    def test_deflection(self, hobby_machine, aluminum):
        adj = get_hobby_adjustment(hobby_machine, aluminum)
        assert validate_hobby_deflection(0.01, adj) is None
        assert validate_hobby_deflection(0.02, adj).type == "hobby_deflection"

    def test_power(self, hobby_machine, aluminum):
        adj = get_hobby_adjustment(hobby_machine, aluminum)
        assert validate_hobby_power(0.5, adj) is None
        assert validate_hobby_power(0.7, adj).type == "hobby_power"

    def test_deflection_limits(self):
        warn, danger = get_hobby_deflection_limits(0.15, "general")
        assert danger == 0.015
        assert warn == pytest.approx(0.01125)
        assert get_hobby_deflection_limits(0.9, "rough") == pytest.approx((0.045, 0.06))

    def test_tool_suitability(self):
        ok = evaluate_hobby_tool_suitability(6.0, 15.0, 0.15)
        assert ok.is_recommended and ok.warning is None
        long = evaluate_hobby_tool_suitability(6.0, 30.0, 0.15, "precision")
        assert not long.is_recommended
        assert long.recommended_max_ld_ratio == 2.5
        assert "ultra light" in long.warning
