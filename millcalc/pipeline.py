# millcalc/pipeline.py
"""Run every stage for one calculation request.

``compute`` returns the unscaled, unrounded result. When the spindle is
power-limited the caller applies ``apply_scaling`` to get the safe feed
and MRR, then ``apply_output_rounding`` for display.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from millcalc.catalog import Catalog
from millcalc.chipload import calculate_chipload_and_feed
from millcalc.deflection import DEFAULT_HOLDER_COMPLIANCE_MM_PER_N, calculate_deflection
from millcalc.engagement import calculate_engagement_and_mrr
from millcalc.errors import ValidationFailed
from millcalc.force import calculate_cutting_force
from millcalc.formulas import round_half_up
from millcalc.geometry import effective_diameter, effective_flutes
from millcalc.hobby import (
    HobbyParams,
    apply_hobby_adjustments,
    classify_machine,
    get_hobby_adjustment,
    validate_hobby_deflection,
    validate_hobby_power,
)
from millcalc.models import Inputs, PrecisionLevel, coerce_enum
from millcalc.output import CalculationOutput, OutputAssembly, assemble_output
from millcalc.power import apply_power_limiting, calculate_power
from millcalc.speeds import calculate_speed_and_rpm
from millcalc.tool_config import ToolConfiguration, create_tool_from_configuration
from millcalc.validation import validate_inputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationOptions:
    holder_compliance_mm_per_n: float = DEFAULT_HOLDER_COMPLIANCE_MM_PER_N
    hobby_mode: bool = False
    precision_level: PrecisionLevel = PrecisionLevel.GENERAL
    use_tool_material_factors: bool = True

    def __post_init__(self):
        object.__setattr__(
            self, "precision_level", coerce_enum(PrecisionLevel, self.precision_level, "precision level"),
        )


def compute(inputs: Inputs, catalog: Catalog, options: Optional[CalculationOptions] = None) -> CalculationOutput:
    options = options or CalculationOptions()

    validation = validate_inputs(inputs, catalog)
    if not validation.is_valid:
        raise ValidationFailed(list(validation.errors))

    machine = catalog.machine(inputs.machine_id)
    spindle = catalog.spindle(inputs.spindle_id)
    material = catalog.material(inputs.material_id)
    tool = catalog.tool(inputs.tool_id)
    if inputs.override_stickout_mm is not None:
        tool = replace(tool, stickout_mm=inputs.override_stickout_mm)
    if inputs.override_flutes is not None:
        tool = replace(tool, flutes=inputs.override_flutes)

    doc = tool.default_doc_mm if inputs.user_doc_mm is None else inputs.user_doc_mm
    woc = tool.default_woc_mm if inputs.user_woc_mm is None else inputs.user_woc_mm
    diameter = effective_diameter(tool, doc)
    flutes = effective_flutes(tool)  # single-point tools stay at 1

    # ----- Hobby class derating (before speeds/feeds) -----
    speed_multiplier = chipload_multiplier = 1.0
    hobby_warnings = []
    adjustment = get_hobby_adjustment(machine, material) if options.hobby_mode else None
    if adjustment is not None:
        adjusted = apply_hobby_adjustments(HobbyParams(1.0, 1.0, woc / diameter, doc), adjustment)
        speed_multiplier = adjusted.surface_speed
        chipload_multiplier = adjusted.chipload
        woc = adjusted.radial_engagement * diameter
        doc = adjusted.axial_engagement_mm
        diameter = effective_diameter(tool, doc)  # V-bit diameter follows depth
        hobby_warnings.extend(adjusted.warnings)
        logger.info(
            "Hobby adjustment for %s on %s (%s): speed x%.2f, chipload x%.2f",
            material.id, machine.id, classify_machine(machine).value, speed_multiplier, chipload_multiplier,
        )

    # ----- Speeds & feeds -----
    speed = calculate_speed_and_rpm(
        material, spindle, diameter, inputs.cut_type, inputs.aggressiveness,
        tool if options.use_tool_material_factors else None, speed_multiplier,
    )
    logger.debug("speed: vc=%.1f m/min rpm=%.0f (theoretical %.0f)", speed.vc_actual, speed.rpm_actual, speed.rpm_theoretical)

    chipload = calculate_chipload_and_feed(
        material, machine, tool, diameter, flutes, speed.rpm_actual, woc, inputs.aggressiveness, chipload_multiplier,
    )
    logger.debug("chipload: fz=%.4f mm thinning=%.2f feed=%.0f mm/min", chipload.fz_adjusted, chipload.chip_thinning_factor, chipload.feed_rate)

    engagement = calculate_engagement_and_mrr(material, tool, diameter, chipload.feed_rate, doc, woc)
    logger.debug("engagement: ae=%.2f ap=%.2f mrr=%.0f mm^3/min", engagement.ae, engagement.ap, engagement.mrr)

    # ----- Loads -----
    power = calculate_power(material, machine, spindle, tool, engagement.mrr, speed.rpm_actual)
    logger.debug("power: required=%.0f W available=%.0f W", power.total_power, power.available_power)
    if power.power_limited:
        logger.info("Power limited on %s: scaling feed by %.3f", spindle.id, power.scaling_factor)

    force = calculate_cutting_force(material, tool, engagement.ae, chipload.fz_adjusted, reference_diameter_mm=diameter)
    deflection = calculate_deflection(
        tool,
        force.force,
        speed.rpm_actual,
        flutes,
        options.holder_compliance_mm_per_n,
        machine.rigidity_factor if options.hobby_mode else None,
        options.precision_level,
        diameter_mm=diameter,
    )
    logger.debug("force=%.1f N deflection=%.4f mm (G=%.2f)", force.force, deflection.total_deflection_mm, deflection.dynamic.amplification_factor)

    # ----- Hobby re-validation (after the pipeline) -----
    if adjustment is not None:
        usage = power.total_power / power.available_power if power.available_power > 0 else 0.0
        for warning in (
            validate_hobby_deflection(deflection.total_deflection_mm, adjustment),
            validate_hobby_power(usage, adjustment),
        ):
            if warning is not None:
                hobby_warnings.append(warning)

    return assemble_output(OutputAssembly(
        tool=tool,
        effective_diameter=diameter,
        user_doc_override=inputs.user_doc_mm is not None,
        speed=speed,
        chipload=chipload,
        engagement=engagement,
        power=power,
        force=force,
        deflection=deflection,
        validation_warnings=validation.warnings,
        extra_warnings=tuple(hobby_warnings),
    ))


def apply_scaling(output: CalculationOutput) -> CalculationOutput:
    """Rescale feed and MRR by the power-limit factor. Safe to call twice."""
    if not output.power_limited or output.scaling_applied or output.scaling_factor is None:
        return output
    feed, mrr = apply_power_limiting(output.feed_mm_min, output.mrr_mm3_min, output.scaling_factor)
    return replace(output, feed_mm_min=round_half_up(feed), mrr_mm3_min=mrr, scaling_applied=True)


def compute_with_tool_config(
    inputs: Inputs,
    catalog: Catalog,
    tool_config: ToolConfiguration,
    options: Optional[CalculationOptions] = None,
) -> CalculationOutput:
    """Same as compute() but with a free-form tool instead of a catalog entry."""
    tool = create_tool_from_configuration(tool_config, inputs.tool_id or "configured_tool")
    return compute(replace(inputs, tool_id=tool.id), catalog.with_tool(tool), options)
