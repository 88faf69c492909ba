import math

import pytest

from millcalc.deflection import (
    DeflectionOptimizationConfig,
    amplification_factor,
    calculate_deflection,
    calculate_dynamic_amplification,
    calculate_static_deflection,
    deflection_warnings,
    estimate_tool_mass,
    get_youngs_modulus,
    optimize_tool_configuration,
    suggest_tools_for_target_deflection,
)
from millcalc.errors import InvalidParameterError
from millcalc.models import PrecisionLevel, Severity


class TestStaticDeflection:
    def test_holder_compliance(self, endmill_6mm):
        static = calculate_static_deflection(endmill_6mm, 300.0, 0.002)
        assert static.holder_mm == pytest.approx(0.6)

    def test_cantilever_bending(self, endmill_6mm):
        static = calculate_static_deflection(endmill_6mm, 300.0, 0.0)
        inertia = math.pi * 6.0 ** 4 / 64.0
        assert static.bending_mm == pytest.approx(300.0 * 20.0 ** 3 / (3 * 600000.0 * inertia))
        assert static.total_mm == pytest.approx(static.bending_mm + static.shear_mm)

    def test_effective_diameter_override_is_stiffer(self, endmill_6mm):
        nominal = calculate_static_deflection(endmill_6mm, 100.0, 0.0)
        wider = calculate_static_deflection(endmill_6mm, 100.0, 0.0, diameter_mm=12.0)
        assert wider.bending_mm == pytest.approx(nominal.bending_mm / 16.0)

    def test_youngs_modulus_fallback(self):
        assert get_youngs_modulus("Carbide") == 600.0
        assert get_youngs_modulus("HSS") == 210.0
        assert get_youngs_modulus("cermet") == 400.0

    def test_tool_mass(self, endmill_6mm):
        assert estimate_tool_mass(endmill_6mm) == pytest.approx(math.pi * 0.09 * 2.0 * 14.5 / 1000.0)


class TestAmplification:
    @pytest.mark.parametrize("ratio, expected", [
        (0.5, 1.05),
        (0.7, 3.0 + 2.0 * math.sin(0.7 * math.pi)),
        (1.0, 3.0),
        (1.3, 3.0 + 2.0 * math.sin(1.3 * math.pi)),
        (2.0, 0.25),
        (100.0, 0.1),
    ])
    def test_piecewise(self, ratio, expected):
        assert amplification_factor(ratio) == pytest.approx(expected, abs=1e-9)

    def test_dynamic_frequencies(self, endmill_6mm):
        dyn = calculate_dynamic_amplification(endmill_6mm, 12000, 3)
        assert dyn.operating_frequency_hz == pytest.approx(600.0)
        assert dyn.frequency_ratio == pytest.approx(600.0 / dyn.natural_frequency_hz)
        assert dyn.amplification_factor == amplification_factor(dyn.frequency_ratio)

    def test_rejects_zero_rpm(self, endmill_6mm):
        with pytest.raises(InvalidParameterError):
            calculate_dynamic_amplification(endmill_6mm, 0, 3)


class TestDeflectionWarnings:
    def test_thresholds(self):
        assert deflection_warnings(0.01) == []
        assert deflection_warnings(0.03)[0].type == "deflection_warning"
        danger = deflection_warnings(0.06)[0]
        assert danger.type == "deflection_danger" and danger.severity is Severity.DANGER


class TestCalculateDeflection:
    def test_total_is_static_times_amplification(self, endmill_6mm):
        result = calculate_deflection(endmill_6mm, 50.0, 12000, 3)
        assert result.total_deflection_mm == pytest.approx(
            result.static.total_mm * result.dynamic.amplification_factor
        )

    def test_hobby_limits_and_ld_check(self, endmill_6mm):
        # 3018 class, general work: limit 0.015 mm, L/D 20/6 > 3.0
        result = calculate_deflection(endmill_6mm, 50.0, 12000, 3, machine_rigidity_factor=0.15,
                                      precision_level=PrecisionLevel.GENERAL)
        types = [w.type for w in result.warnings]
        assert "deflection_danger" in types
        assert any("L/D ratio" in w.message for w in result.warnings)


class TestOptimizer:
    def make_config(self, **kw):
        base = dict(target_deflection_mm=0.05, force_n=10.0, rpm=10000, effective_flutes=2)
        base.update(kw)
        return DeflectionOptimizationConfig(**base)

    def test_sorted_by_error(self):
        result = suggest_tools_for_target_deflection(self.make_config())
        errors = [s.deflection_error for s in result.suggestions]
        assert errors == sorted(errors)
        assert len(result.suggestions) == 5
        assert result.total_evaluations == 15 * 20

    def test_rigidity_score(self):
        result = suggest_tools_for_target_deflection(self.make_config())
        for s in result.suggestions:
            assert s.rigidity_score == pytest.approx(10.0 / s.predicted_deflection_mm, rel=0.05)

    def test_reversed_ranges_are_swapped(self):
        result = suggest_tools_for_target_deflection(
            self.make_config(diameter_range_mm=(12.0, 4.0), stickout_range_mm=(60.0, 20.0))
        )
        assert result.diameter_range_mm == (4.0, 12.0)
        assert result.stickout_range_mm == (20.0, 60.0)
        assert all(4.0 <= s.diameter_mm <= 12.0 for s in result.suggestions)

    def test_parallel_matches_serial(self):
        serial = suggest_tools_for_target_deflection(self.make_config())
        parallel = suggest_tools_for_target_deflection(self.make_config(workers=4))
        assert parallel.suggestions == serial.suggestions

    def test_unreachable_target_still_returns_candidates(self):
        result = suggest_tools_for_target_deflection(self.make_config(target_deflection_mm=1e-6))
        assert result.suggestions
        assert not any(s.is_within_tolerance for s in result.suggestions)

    @pytest.mark.parametrize("kw", [
        {"target_deflection_mm": 0.0},
        {"force_n": -1.0},
        {"effective_flutes": 0},
    ])
    def test_rejects_bad_config(self, kw):
        with pytest.raises(InvalidParameterError):
            suggest_tools_for_target_deflection(self.make_config(**kw))

    def test_zero_width_range_has_no_duplicates(self):
        result = suggest_tools_for_target_deflection(
            self.make_config(diameter_range_mm=(6.0, 6.0), stickout_range_mm=(20.0, 60.0))
        )
        cells = [(s.diameter_mm, s.stickout_mm) for s in result.suggestions]
        assert len(cells) == len(set(cells)) == 5
        assert result.total_evaluations == 20
        assert all(s.diameter_mm == 6.0 for s in result.suggestions)

    def test_cells_snap_to_tenth_mm(self):
        result = suggest_tools_for_target_deflection(
            self.make_config(diameter_range_mm=(6.0, 6.2), stickout_range_mm=(30.0, 30.0))
        )
        assert result.total_evaluations == 3
        assert sorted(s.diameter_mm for s in result.suggestions) == [6.0, 6.1, 6.2]

    def test_rejects_sub_tenth_range(self):
        with pytest.raises(InvalidParameterError):
            suggest_tools_for_target_deflection(self.make_config(diameter_range_mm=(0.04, 2.0)))

    def test_around_existing_tool(self, endmill_6mm):
        result = optimize_tool_configuration(endmill_6mm, 0.05, 10.0, 10000, 3)
        assert result.diameter_range_mm == (3.0, 9.0)
        assert result.stickout_range_mm == pytest.approx((14.0, 26.0))
        assert len(result.suggestions) == 3
