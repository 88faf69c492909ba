# millcalc/chipload.py
# Chipload lookup, chip thinning, and feed rate with the machine feed cap.

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType

from millcalc.errors import InvalidParameterError
from millcalc.formulas import chipload_from_feed, clamp, feed_from_chipload, lerp
from millcalc.models import CalcWarning, Machine, Material, Severity, Tool, ToolType, coerce_enum

TOOL_CHIPLOAD_FACTORS = MappingProxyType({
    ToolType.ENDMILL_FLAT: 1.0,
    ToolType.DRILL: 0.8,
    ToolType.VBIT: 0.6,
    ToolType.FACEMILL: 1.1,
    ToolType.BORING: 0.9,
    ToolType.SLITTING: 0.7,
})

COATING_CHIPLOAD_FACTORS = MappingProxyType({
    "uncoated": 1.0,
    "tin": 1.1,
    "altin": 1.2,
    "alcrn": 1.15,
    "diamond": 1.3,
})

LOW_CHIPLOAD_FRACTION = 0.5   # below min * this: rubbing
HIGH_CHIPLOAD_FRACTION = 1.5  # above max * this: breakage risk


@dataclass(frozen=True)
class ChiploadResult:
    fz_range: tuple[float, float]
    fz_base: float
    fz_adjusted: float
    chip_thinning_factor: float
    feed_rate: float
    feed_limited: bool = False
    warnings: tuple[CalcWarning, ...] = ()


def get_tool_chipload_factor(tool_type) -> float:
    return TOOL_CHIPLOAD_FACTORS[coerce_enum(ToolType, tool_type, "tool type")]


def get_coating_factor(coating: str) -> float:
    return COATING_CHIPLOAD_FACTORS.get((coating or "").strip().lower(), 1.0)


def get_chipload_range(material: Material, effective_diameter: float) -> tuple[float, float]:
    """Chipload [min, max] at a diameter, interpolated from the material table.

    Diameters outside the table clamp to the nearest entry.
    """
    table = material.fz_mm_per_tooth_by_diameter
    diameters = list(table)  # sorted ascending on construction
    if not diameters:
        raise InvalidParameterError(f"Material {material.id} has no chipload data")

    if effective_diameter in table:
        return table[effective_diameter]
    if effective_diameter <= diameters[0]:
        return table[diameters[0]]
    if effective_diameter >= diameters[-1]:
        return table[diameters[-1]]

    for lower, upper in zip(diameters, diameters[1:]):
        if lower <= effective_diameter <= upper:
            t = (effective_diameter - lower) / (upper - lower)
            lo_range, hi_range = table[lower], table[upper]
            return (lerp(lo_range[0], hi_range[0], t), lerp(lo_range[1], hi_range[1], t))

    return table[diameters[-1]]


def chip_thinning_factor(material: Material, effective_diameter: float, width_of_cut: float) -> float:
    thinning = material.chip_thinning
    if 0 < width_of_cut < effective_diameter * thinning.enable_below_fraction:
        return clamp(math.sqrt(effective_diameter / width_of_cut), 1.0, thinning.limit_factor)
    return 1.0


def calculate_chipload_and_feed(
    material: Material,
    machine: Machine,
    tool: Tool,
    effective_diameter: float,
    effective_flutes: int,
    rpm: float,
    width_of_cut: float,
    aggressiveness: float = 1.0,
    chipload_multiplier: float = 1.0,
) -> ChiploadResult:
    if rpm <= 0:
        raise InvalidParameterError("RPM must be > 0")
    if effective_flutes < 1:
        raise InvalidParameterError("Flute count must be >= 1")

    warnings: list[CalcWarning] = []
    fz_min, fz_max = get_chipload_range(material, effective_diameter)
    fz_base = (
        (fz_min + fz_max) / 2.0
        * aggressiveness
        * get_tool_chipload_factor(tool.type)
        * get_coating_factor(tool.coating)
        * chipload_multiplier
    )

    thinning = chip_thinning_factor(material, effective_diameter, width_of_cut)
    fz_adjusted = fz_base * thinning
    feed = feed_from_chipload(fz_adjusted, effective_flutes, rpm)

    feed_limited = False
    if feed > machine.axis_max_feed_mm_min:
        feed = machine.axis_max_feed_mm_min
        fz_adjusted = chipload_from_feed(feed, effective_flutes, rpm)
        feed_limited = True
        warnings.append(CalcWarning(
            "feed_limited",
            f"Feed rate limited to machine maximum ({machine.axis_max_feed_mm_min:.0f} mm/min)",
        ))

    if fz_adjusted < fz_min * LOW_CHIPLOAD_FRACTION:
        warnings.append(CalcWarning(
            "chipload_danger",
            f"Chipload {fz_adjusted:.4f} mm is far below recommended minimum ({fz_min:.4f} mm); tool will rub",
            Severity.DANGER,
        ))
    elif fz_adjusted > fz_max * HIGH_CHIPLOAD_FRACTION:
        warnings.append(CalcWarning(
            "chipload_warning",
            f"Chipload {fz_adjusted:.4f} mm is well above recommended maximum ({fz_max:.4f} mm)",
        ))

    return ChiploadResult(
        fz_range=(fz_min, fz_max),
        fz_base=fz_base,
        fz_adjusted=fz_adjusted,
        chip_thinning_factor=thinning,
        feed_rate=feed,
        feed_limited=feed_limited,
        warnings=tuple(warnings),
    )
