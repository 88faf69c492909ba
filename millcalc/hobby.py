# millcalc/hobby.py
"""Machine-class derating for low-rigidity (hobby) machines.

Machines are bucketed by rigidity factor. Each (material, class) pair may
carry a derating entry; materials without one get no adjustment at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Optional

from millcalc.models import CalcWarning, Machine, Material, PrecisionLevel, coerce_enum


class MachineClass(str, Enum):
    ULTRA_LIGHT = "ultra_light"            # 3018 class
    MEDIUM_HOBBY = "medium_hobby"          # Lowrider / Queenbee
    HEAVY_HOBBY = "heavy_hobby"            # PrintNC
    ENTRY_COMMERCIAL = "entry_commercial"  # benchtop mills, small VMCs


@dataclass(frozen=True)
class HobbyAdjustment:
    surface_speed_multiplier: float
    chipload_multiplier: float
    max_radial_engagement: float  # fraction of diameter
    max_axial_engagement_mm: float
    force_reduction_factor: float
    recommended_strategy: str
    deflection_limit_mm: float
    power_limit_fraction: float


@dataclass(frozen=True)
class HobbyParams:
    surface_speed: float
    chipload: float
    radial_engagement: float  # fraction of diameter
    axial_engagement_mm: float


@dataclass(frozen=True)
class HobbyAdjustedParams:
    surface_speed: float
    chipload: float
    radial_engagement: float
    axial_engagement_mm: float
    warnings: tuple[CalcWarning, ...] = ()


@dataclass(frozen=True)
class ToolSuitability:
    is_recommended: bool
    actual_ld_ratio: float
    recommended_max_ld_ratio: float
    warning: Optional[str] = None


_U, _M, _H, _E = MachineClass

HOBBY_ADJUSTMENTS = MappingProxyType({
    ("aluminum_6061", _U): HobbyAdjustment(0.6, 0.7, 0.25, 0.3, 0.8, "Multiple light passes, conventional milling, high RPM", 0.015, 0.6),
    ("aluminum_6061", _M): HobbyAdjustment(0.75, 0.8, 0.4, 0.8, 0.9, "Adaptive clearing, climb milling acceptable", 0.02, 0.7),
    ("aluminum_6061", _H): HobbyAdjustment(0.9, 0.9, 0.6, 2.0, 1.0, "Standard aluminum parameters, climb milling preferred", 0.025, 0.8),
    ("aluminum_6061", _E): HobbyAdjustment(0.95, 0.95, 0.8, 4.0, 1.0, "Near-industrial parameters acceptable", 0.03, 0.85),

    ("steel_1045", _U): HobbyAdjustment(0.4, 0.5, 0.15, 0.1, 0.6, "Avoid steel on ultra-light machines if possible", 0.01, 0.4),
    ("steel_1045", _M): HobbyAdjustment(0.6, 0.7, 0.25, 0.4, 0.7, "Light steel cuts possible, use carbide tools", 0.015, 0.6),
    ("steel_1045", _H): HobbyAdjustment(0.8, 0.8, 0.4, 1.0, 0.85, "Moderate steel machining possible with proper tooling", 0.02, 0.7),
    ("steel_1045", _E): HobbyAdjustment(0.9, 0.9, 0.6, 2.5, 0.95, "Good steel machining capability", 0.025, 0.8),

    # stainless work-hardens: speeds drop hard but chipload stays up
    ("stainless_316", _U): HobbyAdjustment(0.3, 0.8, 0.1, 0.05, 0.5, "Avoid stainless on ultra-light machines", 0.008, 0.3),
    ("stainless_316", _M): HobbyAdjustment(0.5, 0.9, 0.2, 0.2, 0.6, "Very light stainless cuts, flood coolant essential", 0.012, 0.5),
    ("stainless_316", _H): HobbyAdjustment(0.7, 0.9, 0.3, 0.6, 0.75, "Light stainless machining possible with care", 0.015, 0.65),
    ("stainless_316", _E): HobbyAdjustment(0.85, 0.95, 0.5, 1.5, 0.9, "Moderate stainless capability with proper technique", 0.02, 0.75),
})

# (precision, general, rough) in mm
HOBBY_DEFLECTION_LIMITS = MappingProxyType({
    _U: (0.008, 0.015, 0.03),
    _M: (0.01, 0.02, 0.04),
    _H: (0.015, 0.025, 0.05),
    _E: (0.02, 0.03, 0.06),
})

# max stickout/diameter, (precision, general, rough)
HOBBY_LD_GUIDELINES = MappingProxyType({
    _U: (2.5, 3.0, 4.0),
    _M: (3.0, 4.0, 5.0),
    _H: (4.0, 5.0, 6.5),
    _E: (5.0, 6.0, 8.0),
})

_PRECISION_INDEX = MappingProxyType({
    PrecisionLevel.PRECISION: 0,
    PrecisionLevel.GENERAL: 1,
    PrecisionLevel.ROUGH: 2,
})

DEFLECTION_WARNING_FRACTION = 0.75


def classify_rigidity(rigidity_factor: float) -> MachineClass:
    if rigidity_factor < 0.2:
        return MachineClass.ULTRA_LIGHT
    if rigidity_factor < 0.4:
        return MachineClass.MEDIUM_HOBBY
    if rigidity_factor < 0.7:
        return MachineClass.HEAVY_HOBBY
    return MachineClass.ENTRY_COMMERCIAL


def classify_machine(machine: Machine) -> MachineClass:
    return classify_rigidity(machine.rigidity_factor)


def get_hobby_adjustment(machine: Machine, material: Material) -> Optional[HobbyAdjustment]:
    return HOBBY_ADJUSTMENTS.get((material.id, classify_machine(machine)))


def apply_hobby_adjustments(base: HobbyParams, adjustment: HobbyAdjustment) -> HobbyAdjustedParams:
    warnings: list[CalcWarning] = []

    radial = base.radial_engagement
    if radial > adjustment.max_radial_engagement:
        radial = adjustment.max_radial_engagement
        warnings.append(CalcWarning(
            "hobby_adjustment",
            f"Radial engagement limited to {adjustment.max_radial_engagement:.0%} for hobby machine safety",
        ))

    axial = base.axial_engagement_mm
    if axial > adjustment.max_axial_engagement_mm:
        axial = adjustment.max_axial_engagement_mm
        warnings.append(CalcWarning(
            "hobby_adjustment",
            f"Axial engagement limited to {adjustment.max_axial_engagement_mm}mm for hobby machine safety",
        ))

    if adjustment.recommended_strategy.strip():
        warnings.append(CalcWarning("hobby_strategy", f"Recommended strategy: {adjustment.recommended_strategy}"))

    return HobbyAdjustedParams(
        surface_speed=base.surface_speed * adjustment.surface_speed_multiplier,
        chipload=base.chipload * adjustment.chipload_multiplier,
        radial_engagement=radial,
        axial_engagement_mm=axial,
        warnings=tuple(warnings),
    )


def validate_hobby_deflection(deflection_mm: float, adjustment: HobbyAdjustment) -> Optional[CalcWarning]:
    if deflection_mm > adjustment.deflection_limit_mm:
        return CalcWarning(
            "hobby_deflection",
            f"Tool deflection ({deflection_mm:.3f}mm) exceeds hobby machine limit "
            f"({adjustment.deflection_limit_mm}mm). Reduce cutting parameters.",
        )
    return None


def validate_hobby_power(power_usage_fraction: float, adjustment: HobbyAdjustment) -> Optional[CalcWarning]:
    if power_usage_fraction > adjustment.power_limit_fraction:
        return CalcWarning(
            "hobby_power",
            f"Power usage ({power_usage_fraction:.0%}) exceeds hobby machine limit "
            f"({adjustment.power_limit_fraction:.0%}). Reduce cutting parameters.",
        )
    return None


def get_hobby_deflection_limits(rigidity_factor: float, precision_level=PrecisionLevel.GENERAL) -> tuple[float, float]:
    """Return (warning, danger) deflection thresholds in mm for the machine's class."""
    level = coerce_enum(PrecisionLevel, precision_level, "precision level")
    limit = HOBBY_DEFLECTION_LIMITS[classify_rigidity(rigidity_factor)][_PRECISION_INDEX[level]]
    return limit * DEFLECTION_WARNING_FRACTION, limit


def evaluate_hobby_tool_suitability(
    diameter_mm: float,
    stickout_mm: float,
    rigidity_factor: float,
    precision_level=PrecisionLevel.GENERAL,
) -> ToolSuitability:
    level = coerce_enum(PrecisionLevel, precision_level, "precision level")
    machine_class = classify_rigidity(rigidity_factor)
    max_ld = HOBBY_LD_GUIDELINES[machine_class][_PRECISION_INDEX[level]]
    actual = stickout_mm / diameter_mm
    if actual <= max_ld:
        return ToolSuitability(True, actual, max_ld)
    return ToolSuitability(
        False,
        actual,
        max_ld,
        f"Tool L/D ratio ({actual:.1f}) exceeds recommendation ({max_ld}) for "
        f"{machine_class.value.replace('_', ' ')} machine {level.value} work. "
        "Consider shorter tool or larger diameter.",
    )

