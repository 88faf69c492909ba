import math
from dataclasses import replace

import pytest

from millcalc.chipload import (
    TOOL_CHIPLOAD_FACTORS,
    calculate_chipload_and_feed,
    chip_thinning_factor,
    get_chipload_range,
    get_coating_factor,
)
from millcalc.errors import InvalidParameterError
from millcalc.models import Severity, ToolType


def test_every_tool_type_has_a_chipload_factor():
    assert set(TOOL_CHIPLOAD_FACTORS) == set(ToolType)


class TestChiploadRange:
    def test_interpolates_between_entries(self, aluminum):
        lo, hi = get_chipload_range(aluminum, 6.0)
        assert lo == pytest.approx(0.02)
        assert hi == pytest.approx(0.04)

    def test_exact_entry(self, aluminum):
        assert get_chipload_range(aluminum, 12.0) == (0.04, 0.08)

    def test_clamps_outside_table(self, aluminum):
        assert get_chipload_range(aluminum, 1.0) == (0.01, 0.02)
        assert get_chipload_range(aluminum, 50.0) == (0.04, 0.08)

    def test_string_keys_are_normalized(self, aluminum):
        material = replace(aluminum, fz_mm_per_tooth_by_diameter={"12": [0.04, 0.08], "3": [0.01, 0.02]})
        assert get_chipload_range(material, 6.0) == pytest.approx((0.02, 0.04))


class TestChipThinning:
    def test_light_engagement(self, aluminum):
        assert chip_thinning_factor(aluminum, 6.0, 1.8) == pytest.approx(math.sqrt(6.0 / 1.8))

    def test_capped_at_material_limit(self, aluminum):
        assert chip_thinning_factor(aluminum, 6.0, 0.5) == pytest.approx(2.5)

    def test_not_applied_at_threshold(self, aluminum):
        assert chip_thinning_factor(aluminum, 6.0, 3.0) == 1.0


class TestCoatingFactor:
    def test_known_and_unknown(self):
        assert get_coating_factor("AlTiN") == 1.2
        assert get_coating_factor("mystery") == 1.0


class TestCalculateChipload:
    def test_feed_from_thinned_chipload(self, aluminum, rigid_machine, endmill_6mm):
        result = calculate_chipload_and_feed(aluminum, rigid_machine, endmill_6mm, 6.0, 3, 10000, 1.8)
        assert result.fz_base == pytest.approx(0.03)
        assert result.fz_adjusted == pytest.approx(0.03 * math.sqrt(6.0 / 1.8))
        assert result.feed_rate == pytest.approx(10000 * 3 * result.fz_adjusted)
        assert not result.feed_limited
        assert result.warnings == ()

    def test_machine_feed_cap(self, aluminum, hobby_machine, endmill_6mm):
        result = calculate_chipload_and_feed(aluminum, hobby_machine, endmill_6mm, 6.0, 3, 10000, 1.8)
        assert result.feed_limited
        assert result.feed_rate == 1000
        assert result.fz_adjusted == pytest.approx(1000 / 30000)
        assert result.warnings[0].type == "feed_limited"

    def test_rubbing_is_danger(self, aluminum, hobby_machine, endmill_6mm):
        result = calculate_chipload_and_feed(aluminum, hobby_machine, endmill_6mm, 6.0, 6, 24000, 1.8)
        danger = [w for w in result.warnings if w.type == "chipload_danger"]
        assert danger and danger[0].severity is Severity.DANGER

    def test_excessive_chipload_warning(self, aluminum, rigid_machine, endmill_6mm):
        result = calculate_chipload_and_feed(aluminum, rigid_machine, endmill_6mm, 6.0, 3, 10000, 1.8, 3.0)
        assert [w.type for w in result.warnings] == ["chipload_warning"]

    def test_chipload_multiplier(self, aluminum, rigid_machine, endmill_6mm):
        result = calculate_chipload_and_feed(aluminum, rigid_machine, endmill_6mm, 6.0, 3, 10000, 3.0,
                                             chipload_multiplier=0.5)
        assert result.fz_base == pytest.approx(0.015)

    def test_rejects_zero_rpm(self, aluminum, rigid_machine, endmill_6mm):
        with pytest.raises(InvalidParameterError):
            calculate_chipload_and_feed(aluminum, rigid_machine, endmill_6mm, 6.0, 3, 0, 1.8)
