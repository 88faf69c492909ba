# millcalc/speeds.py
# Target surface speed -> RPM, clamped to what the spindle can turn.

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from millcalc.errors import InvalidParameterError
from millcalc.formulas import rpm_from_vc, vc_from_rpm
from millcalc.models import CalcWarning, CutType, Material, Spindle, Tool, coerce_enum
from millcalc.tooling import get_tool_material_recommendations

CUT_SPEED_FACTORS = MappingProxyType({
    CutType.SLOT: 0.8,       # full engagement, heat builds up
    CutType.PROFILE: 1.0,
    CutType.ADAPTIVE: 1.2,   # light radial engagement
    CutType.FACING: 0.9,
    CutType.DRILLING: 0.7,
    CutType.BORING: 0.8,
})


@dataclass(frozen=True)
class SpeedResult:
    vc_target: float
    rpm_theoretical: float
    rpm_actual: float
    vc_actual: float
    warnings: tuple[CalcWarning, ...] = ()


def get_speed_factor(cut_type) -> float:
    return CUT_SPEED_FACTORS[coerce_enum(CutType, cut_type, "cut type")]


def calculate_speed_and_rpm(
    material: Material,
    spindle: Spindle,
    effective_diameter: float,
    cut_type,
    aggressiveness: float = 1.0,
    tool: Optional[Tool] = None,
    speed_multiplier: float = 1.0,
) -> SpeedResult:
    """Pick the spindle speed.

    ``tool`` enables the tool-material/workpiece multiplier; ``speed_multiplier``
    is an extra derate applied on top (hobby class tables use it).
    """
    if effective_diameter <= 0:
        raise InvalidParameterError("Effective diameter must be > 0")
    if aggressiveness <= 0:
        raise InvalidParameterError("Aggressiveness must be > 0")

    warnings: list[CalcWarning] = []
    vc_min, vc_max = material.vc_range_m_min
    vc_base = (vc_min + vc_max) / 2.0

    tool_factor = 1.0
    if tool is not None:
        rec = get_tool_material_recommendations(tool.material, material.category)
        tool_factor = rec.surface_speed_multiplier
        warnings.extend(CalcWarning("tool_material_note", note) for note in rec.notes)

    vc_target = vc_base * get_speed_factor(cut_type) * aggressiveness * tool_factor * speed_multiplier
    rpm_theoretical = rpm_from_vc(effective_diameter, vc_target)

    rpm_actual = rpm_theoretical
    if rpm_actual > spindle.rpm_max:
        rpm_actual = spindle.rpm_max
        warnings.append(CalcWarning(
            "rpm_limited",
            f"RPM limited to spindle maximum ({spindle.rpm_max:.0f}); theoretical {rpm_theoretical:.0f}",
        ))
    elif rpm_actual < spindle.rpm_min:
        rpm_actual = spindle.rpm_min
        warnings.append(CalcWarning(
            "rpm_limited",
            f"RPM raised to spindle minimum ({spindle.rpm_min:.0f}); theoretical {rpm_theoretical:.0f}",
        ))

    return SpeedResult(
        vc_target=vc_target,
        rpm_theoretical=rpm_theoretical,
        rpm_actual=rpm_actual,
        vc_actual=vc_from_rpm(effective_diameter, rpm_actual),
        warnings=tuple(warnings),
    )
