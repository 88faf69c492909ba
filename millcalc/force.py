# millcalc/force.py
# Tangential cutting force from chip cross-section.

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from millcalc.errors import InvalidParameterError
from millcalc.models import CalcWarning, Material, Severity, Tool, ToolType, coerce_enum
from millcalc.tooling import get_tool_properties

TOOL_FORCE_MULTIPLIERS = MappingProxyType({
    ToolType.ENDMILL_FLAT: 1.0,
    ToolType.DRILL: 1.5,
    ToolType.VBIT: 0.8,
    ToolType.FACEMILL: 0.6,
    ToolType.BORING: 1.2,
    ToolType.SLITTING: 1.3,
})

FORCE_WARNING_N_PER_MM = 300.0
FORCE_DANGER_N_PER_MM = 500.0


@dataclass(frozen=True)
class ForceResult:
    chip_area_mm2: float
    base_force: float
    force: float
    tool_type_multiplier: float
    tool_material_multiplier: float
    warnings: tuple[CalcWarning, ...] = ()


def get_tool_force_multiplier(tool_type) -> float:
    return TOOL_FORCE_MULTIPLIERS[coerce_enum(ToolType, tool_type, "tool type")]


def get_tool_material_force_multiplier(tool: Tool) -> float:
    return get_tool_properties(tool.material, tool.coating).force_reduction


def calculate_cutting_force(
    material: Material,
    tool: Tool,
    width_of_cut_mm: float,
    chipload_mm: float,
    reference_diameter_mm: Optional[float] = None,
) -> ForceResult:
    """Force in N; ``reference_diameter_mm`` (defaults to the nominal diameter) scales the warnings."""
    if width_of_cut_mm < 0 or chipload_mm < 0:
        raise InvalidParameterError("Width of cut and chipload must be >= 0")

    chip_area = width_of_cut_mm * chipload_mm
    # kN/mm^2 * mm^2 -> N
    base = material.force_coeff_kn_mm2 * chip_area * 1000.0
    type_mult = get_tool_force_multiplier(tool.type)
    material_mult = get_tool_material_force_multiplier(tool)
    force = base * type_mult * material_mult

    warnings: list[CalcWarning] = []
    diameter = reference_diameter_mm or tool.diameter_mm
    if diameter > 0:
        per_mm = force / diameter
        if per_mm > FORCE_DANGER_N_PER_MM:
            warnings.append(CalcWarning(
                "high_force",
                f"Very high cutting force: {force:.0f} N ({per_mm:.0f} N/mm of diameter)",
                Severity.DANGER,
            ))
        elif per_mm > FORCE_WARNING_N_PER_MM:
            warnings.append(CalcWarning(
                "high_force",
                f"High cutting force: {force:.0f} N ({per_mm:.0f} N/mm of diameter)",
            ))

    return ForceResult(
        chip_area_mm2=chip_area,
        base_force=base,
        force=force,
        tool_type_multiplier=type_mult,
        tool_material_multiplier=material_mult,
        warnings=tuple(warnings),
    )
