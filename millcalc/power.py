# millcalc/power.py
# Required vs available spindle power and the power-limit scaling factor.

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from millcalc.errors import InvalidParameterError
from millcalc.formulas import clamp, lerp
from millcalc.models import CalcWarning, Machine, Material, Spindle, Tool, ToolType, coerce_enum

TOOL_POWER_FACTORS = MappingProxyType({
    ToolType.ENDMILL_FLAT: 1.0,
    ToolType.DRILL: 1.3,
    ToolType.VBIT: 0.9,
    ToolType.FACEMILL: 0.8,
    ToolType.BORING: 1.1,
    ToolType.SLITTING: 1.2,
})

SPINDLE_LOSS_FRACTION = 0.15
POWER_LIMIT_THRESHOLD = 0.9  # of available power
POWER_LIMIT_TARGET = 0.85    # rescale so required lands here


@dataclass(frozen=True)
class PowerResult:
    cutting_power: float
    power_with_tool: float
    spindle_losses: float
    total_power: float
    available_power: float
    power_limited: bool
    scaling_factor: Optional[float] = None
    warnings: tuple[CalcWarning, ...] = ()


def get_tool_power_factor(tool_type) -> float:
    return TOOL_POWER_FACTORS[coerce_enum(ToolType, tool_type, "tool type")]


def get_spindle_power_at_rpm(spindle: Spindle, rpm: float) -> float:
    """Available power in W at ``rpm``, linearly interpolated from the spindle curve."""
    curve = sorted(spindle.power_curve, key=lambda p: p.rpm)
    if not curve:
        raise InvalidParameterError(f"Spindle {spindle.id} has no power curve")

    rpm = clamp(rpm, spindle.rpm_min, spindle.rpm_max)
    if rpm <= curve[0].rpm:
        return curve[0].power_kw * 1000.0
    if rpm >= curve[-1].rpm:
        return curve[-1].power_kw * 1000.0

    for lower, upper in zip(curve, curve[1:]):
        if lower.rpm <= rpm <= upper.rpm:
            if upper.rpm == lower.rpm:
                return lower.power_kw * 1000.0
            t = (rpm - lower.rpm) / (upper.rpm - lower.rpm)
            return lerp(lower.power_kw, upper.power_kw, t) * 1000.0

    return curve[-1].power_kw * 1000.0


def check_power_limit(total_power: float, available_power: float) -> tuple[bool, Optional[float]]:
    if available_power > 0 and total_power > available_power * POWER_LIMIT_THRESHOLD:
        return True, available_power * POWER_LIMIT_TARGET / total_power
    return False, None


def calculate_power(
    material: Material,
    machine: Machine,
    spindle: Spindle,
    tool: Tool,
    mrr: float,
    rpm: float,
) -> PowerResult:
    if mrr < 0:
        raise InvalidParameterError("MRR must be >= 0")
    if rpm <= 0:
        raise InvalidParameterError("RPM must be > 0")

    # mm^3/min * J/mm^3 / 60 -> W
    cutting = mrr * material.specific_cutting_energy_j_mm3 / 60.0
    with_tool = cutting * get_tool_power_factor(tool.type) * machine.rigidity_factor
    losses = with_tool * SPINDLE_LOSS_FRACTION
    total = with_tool + losses
    available = get_spindle_power_at_rpm(spindle, rpm)

    limited, scaling = check_power_limit(total, available)
    warnings: list[CalcWarning] = []
    if limited:
        warnings.append(CalcWarning(
            "power_limited",
            f"Power limited: {total:.0f} W required, {available:.0f} W available at {rpm:.0f} RPM. "
            f"Feed reduced by {(1 - scaling) * 100:.0f}%",
        ))

    return PowerResult(
        cutting_power=cutting,
        power_with_tool=with_tool,
        spindle_losses=losses,
        total_power=total,
        available_power=available,
        power_limited=limited,
        scaling_factor=scaling,
        warnings=tuple(warnings),
    )


def apply_power_limiting(feed: float, mrr: float, scaling_factor: Optional[float] = None) -> tuple[float, float]:
    if scaling_factor is None:
        return feed, mrr
    return feed * scaling_factor, mrr * scaling_factor
