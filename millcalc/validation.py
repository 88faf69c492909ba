# millcalc/validation.py
"""Input checks run before the pipeline.

Errors stop the calculation; warnings ride along with the result. An
override that exceeds the tool's own diameter (or a stickout beyond 10x
diameter) is graded as danger.
"""

from __future__ import annotations

from dataclasses import dataclass

from millcalc.catalog import Catalog
from millcalc.deflection import deflection_warnings
from millcalc.errors import CalculationError, ValidationIssue
from millcalc.geometry import effective_diameter
from millcalc.models import CalcWarning, CutType, Inputs, Severity

AGGRESSIVENESS_RANGE = (0.1, 3.0)
MAX_TYPICAL_FLUTES = 12
STICKOUT_RATIO_WARNING = 6.0
STICKOUT_RATIO_DANGER = 10.0


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[CalcWarning, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_inputs(inputs: Inputs, catalog: Catalog) -> ValidationResult:
    errors: list[ValidationIssue] = []
    warnings: list[CalcWarning] = []

    material = catalog.material(inputs.material_id)
    machine = catalog.machine(inputs.machine_id)
    tool = catalog.tool(inputs.tool_id)
    spindle = catalog.spindle(inputs.spindle_id)
    for found, fieldname, label, ref in (
        (material, "material_id", "Material", inputs.material_id),
        (machine, "machine_id", "Machine", inputs.machine_id),
        (tool, "tool_id", "Tool", inputs.tool_id),
        (spindle, "spindle_id", "Spindle", inputs.spindle_id),
    ):
        if found is None:
            errors.append(ValidationIssue(fieldname, f"{label} with ID '{ref}' not found"))

    if not isinstance(inputs.cut_type, CutType):
        choices = ", ".join(c.value for c in CutType)
        errors.append(ValidationIssue("cut_type", f"Unknown cut type {inputs.cut_type!r} (expected one of {choices})"))

    # ----- Physical domain -----
    if inputs.aggressiveness <= 0:
        errors.append(ValidationIssue("aggressiveness", "Aggressiveness must be > 0"))
    if inputs.user_doc_mm is not None and inputs.user_doc_mm <= 0:
        errors.append(ValidationIssue("user_doc_mm", "Depth of cut must be > 0"))
    if inputs.user_woc_mm is not None and inputs.user_woc_mm <= 0:
        errors.append(ValidationIssue("user_woc_mm", "Width of cut must be > 0"))
    if inputs.override_flutes is not None and inputs.override_flutes < 1:
        errors.append(ValidationIssue("override_flutes", "Flute count must be >= 1"))
    if inputs.override_stickout_mm is not None and inputs.override_stickout_mm <= 0:
        errors.append(ValidationIssue("override_stickout_mm", "Stickout must be > 0"))

    if errors:
        return ValidationResult(tuple(errors), tuple(warnings))

    lo, hi = AGGRESSIVENESS_RANGE
    if not lo <= inputs.aggressiveness <= hi:
        warnings.append(CalcWarning(
            "aggressiveness_warning",
            f"Aggressiveness factor {inputs.aggressiveness} is outside normal range ({lo}-{hi})",
        ))

    doc_for_geometry = tool.default_doc_mm if inputs.user_doc_mm is None else inputs.user_doc_mm
    try:
        diameter = effective_diameter(tool, doc_for_geometry)
    except CalculationError as e:
        return ValidationResult((ValidationIssue("tool_id", str(e)),), tuple(warnings))

    # ----- Override limits -----
    if inputs.user_doc_mm is not None:
        doc = inputs.user_doc_mm
        recommended = min(diameter * material.max_engagement_fraction, tool.default_doc_mm * 2)
        if doc > recommended:
            warnings.append(CalcWarning(
                "doc_override_warning",
                f"User DOC ({doc:.2f} mm) exceeds recommended maximum ({recommended:.2f} mm)",
            ))
        if doc > diameter:
            warnings.append(CalcWarning(
                "doc_override_danger",
                f"User DOC ({doc:.2f} mm) exceeds tool diameter ({diameter:.2f} mm)",
                Severity.DANGER,
            ))

    if inputs.user_woc_mm is not None and inputs.user_woc_mm > diameter:
        warnings.append(CalcWarning(
            "woc_override_danger",
            f"User WOC ({inputs.user_woc_mm:.2f} mm) exceeds tool diameter ({diameter:.2f} mm)",
            Severity.DANGER,
        ))

    if inputs.override_flutes is not None and inputs.override_flutes > MAX_TYPICAL_FLUTES:
        warnings.append(CalcWarning(
            "flutes_override_warning",
            f"Override flutes ({inputs.override_flutes}) is unusually high",
        ))

    if inputs.override_stickout_mm is not None:
        stickout = inputs.override_stickout_mm
        ratio = stickout / diameter
        if ratio > STICKOUT_RATIO_DANGER:
            warnings.append(CalcWarning(
                "stickout_override_danger",
                f"Override stickout ({stickout:.1f} mm) gives very high L/D ratio ({ratio:.1f}). "
                "Dangerous deflection expected.",
                Severity.DANGER,
            ))
        elif ratio > STICKOUT_RATIO_WARNING:
            warnings.append(CalcWarning(
                "stickout_override_warning",
                f"Override stickout ({stickout:.1f} mm) gives high L/D ratio ({ratio:.1f}). "
                "High deflection expected.",
            ))

    return ValidationResult((), tuple(warnings))


def evaluate_deflection(deflection_mm: float) -> list[CalcWarning]:
    """Grade a deflection against the standard 0.02/0.05 mm thresholds."""
    return deflection_warnings(deflection_mm)
