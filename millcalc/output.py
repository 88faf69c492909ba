# millcalc/output.py
# Collects stage results into one flat record, plus the display rounding pass.

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from types import MappingProxyType
from typing import Optional

from millcalc.chipload import ChiploadResult
from millcalc.deflection import DeflectionResult
from millcalc.engagement import EngagementResult
from millcalc.force import ForceResult
from millcalc.formulas import round_half_up, sfm_from_vc
from millcalc.models import CalcWarning, Tool
from millcalc.power import PowerResult
from millcalc.speeds import SpeedResult

# field -> decimal places for the display pass
OUTPUT_PRECISION = MappingProxyType({
    "fz_mm": 4,
    "fz_actual_mm": 4,
    "ae_mm": 2,
    "ap_mm": 2,
    "mrr_mm3_min": 1,
    "power_w": 1,
    "power_available_w": 1,
    "force_n": 1,
    "deflection_mm": 4,
    "effective_diameter": 2,
})


@dataclass(frozen=True)
class CalculationOutput:
    rpm: int
    feed_mm_min: int
    vc_m_min: int
    sfm: int
    fz_mm: float
    fz_actual_mm: float
    ae_mm: float
    ap_mm: float
    mrr_mm3_min: float
    power_w: float
    power_available_w: float
    force_n: float
    deflection_mm: float
    warnings: tuple[CalcWarning, ...]
    tool_type: str
    effective_diameter: float
    user_doc_override: bool
    power_limited: bool = False
    scaling_factor: Optional[float] = None
    scaling_applied: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data["warnings"] = [w.to_dict() for w in self.warnings]
        return data


@dataclass(frozen=True)
class OutputAssembly:
    tool: Tool
    effective_diameter: float
    user_doc_override: bool
    speed: SpeedResult
    chipload: ChiploadResult
    engagement: EngagementResult
    power: PowerResult
    force: ForceResult
    deflection: DeflectionResult
    validation_warnings: tuple[CalcWarning, ...] = ()
    extra_warnings: tuple[CalcWarning, ...] = ()


def assemble_output(assembly: OutputAssembly) -> CalculationOutput:
    # validation, speed, chipload, engagement, power, force, deflection, then anything else
    warnings = (
        tuple(assembly.validation_warnings)
        + assembly.speed.warnings
        + assembly.chipload.warnings
        + assembly.engagement.warnings
        + assembly.power.warnings
        + assembly.force.warnings
        + assembly.deflection.warnings
        + tuple(assembly.extra_warnings)
    )
    vc = assembly.speed.vc_actual
    return CalculationOutput(
        rpm=round_half_up(assembly.speed.rpm_actual),
        feed_mm_min=round_half_up(assembly.chipload.feed_rate),
        vc_m_min=round_half_up(vc),
        sfm=round_half_up(sfm_from_vc(vc)),
        fz_mm=assembly.chipload.fz_adjusted,
        fz_actual_mm=assembly.chipload.fz_base,
        ae_mm=assembly.engagement.ae,
        ap_mm=assembly.engagement.ap,
        mrr_mm3_min=assembly.engagement.mrr,
        power_w=assembly.power.total_power,
        power_available_w=assembly.power.available_power,
        force_n=assembly.force.force,
        deflection_mm=assembly.deflection.total_deflection_mm,
        warnings=warnings,
        tool_type=assembly.tool.type.value,
        effective_diameter=assembly.effective_diameter,
        user_doc_override=assembly.user_doc_override,
        power_limited=assembly.power.power_limited,
        scaling_factor=assembly.power.scaling_factor,
    )


def round_for_output(value: float, decimal_places: int) -> float:
    return round_half_up(value, decimal_places)


def apply_output_rounding(output: CalculationOutput) -> CalculationOutput:
    """Round float fields for display. Idempotent."""
    return replace(output, **{
        name: round_for_output(getattr(output, name), places)
        for name, places in OUTPUT_PRECISION.items()
    })
