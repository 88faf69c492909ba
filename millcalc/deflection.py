# millcalc/deflection.py
"""Tool deflection: cantilever statics, dynamic amplification, and a grid
optimizer that searches diameter/stickout for a target deflection.

Static deflection treats the tool as a solid cylinder clamped at the holder:

    bending = F L^3 / (3 E I)      I = pi d^4 / 64
    shear   = 1.2 F L / (G A)      A = pi d^2 / 4,  G = E / 2.6
    holder  = F * compliance

Units are N, mm and N/mm^2 except for the natural frequency, which is
evaluated in SI.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from millcalc.errors import InvalidParameterError
from millcalc.formulas import clamp, round_half_up
from millcalc.hobby import evaluate_hobby_tool_suitability, get_hobby_deflection_limits
from millcalc.models import CalcWarning, PrecisionLevel, Severity, Tool, ToolType, coerce_enum
from millcalc.tooling import lookup_tool_material

logger = logging.getLogger(__name__)

DEFAULT_HOLDER_COMPLIANCE_MM_PER_N = 0.002

DEFLECTION_WARNING_MM = 0.02
DEFLECTION_DANGER_MM = 0.05

YOUNGS_MODULUS_GPA = MappingProxyType({
    "carbide": 600.0,
    "hss": 210.0,
    "high_speed_steel": 210.0,
    "steel": 210.0,
})
DEFAULT_YOUNGS_MODULUS_GPA = 400.0

# Transition band around resonance, inclusive at both ends.
RESONANCE_BAND = (0.7, 1.3)
AMPLIFICATION_BOUNDS = (0.1, 50.0)

OPTIMIZER_DIAMETER_STEPS = 15
OPTIMIZER_STICKOUT_STEPS = 20
OPTIMIZER_TOLERANCE_PCT = 10.0


@dataclass(frozen=True)
class StaticDeflection:
    bending_mm: float
    shear_mm: float
    holder_mm: float
    total_mm: float


@dataclass(frozen=True)
class DynamicAmplification:
    natural_frequency_hz: float
    operating_frequency_hz: float
    frequency_ratio: float
    amplification_factor: float


@dataclass(frozen=True)
class DeflectionResult:
    static: StaticDeflection
    dynamic: DynamicAmplification
    total_deflection_mm: float
    warnings: tuple[CalcWarning, ...] = ()


def get_youngs_modulus(material: str) -> float:
    """Young's modulus in GPa; unknown tool materials fall back to 400."""
    return YOUNGS_MODULUS_GPA.get((material or "").strip().lower(), DEFAULT_YOUNGS_MODULUS_GPA)


def _dimensions(tool: Tool, diameter_mm: Optional[float]) -> tuple[float, float]:
    d = tool.diameter_mm if diameter_mm is None else diameter_mm
    length = tool.stickout_mm
    if d <= 0:
        raise InvalidParameterError("Tool diameter must be > 0")
    if length <= 0:
        raise InvalidParameterError("Tool stickout must be > 0")
    return d, length


def estimate_tool_mass(tool: Tool, diameter_mm: Optional[float] = None) -> float:
    """Mass in kg of the unsupported length, modelled as a solid cylinder."""
    d, length = _dimensions(tool, diameter_mm)
    density = lookup_tool_material(tool.material).density_g_cm3
    volume_cm3 = math.pi * (d / 2 / 10) ** 2 * (length / 10)
    return volume_cm3 * density / 1000.0


def calculate_static_deflection(
    tool: Tool,
    force_n: float,
    holder_compliance_mm_per_n: float = DEFAULT_HOLDER_COMPLIANCE_MM_PER_N,
    diameter_mm: Optional[float] = None,
) -> StaticDeflection:
    d, length = _dimensions(tool, diameter_mm)
    e = get_youngs_modulus(tool.material) * 1000.0  # GPa -> N/mm^2
    inertia = math.pi * d ** 4 / 64.0
    area = math.pi * d ** 2 / 4.0
    g = e / 2.6

    bending = force_n * length ** 3 / (3.0 * e * inertia)
    shear = 1.2 * force_n * length / (g * area)
    holder = force_n * holder_compliance_mm_per_n
    return StaticDeflection(bending, shear, holder, bending + shear + holder)


def amplification_factor(ratio: float) -> float:
    """Dynamic amplification G for an operating/natural frequency ratio."""
    lo, hi = RESONANCE_BAND
    if ratio < lo:
        g = 1.0 + 0.1 * ratio
    elif ratio <= hi:
        g = 3.0 + 2.0 * math.sin(math.pi * ratio)
    else:
        g = 1.0 / ratio ** 2
    return clamp(g, *AMPLIFICATION_BOUNDS)


def calculate_dynamic_amplification(
    tool: Tool,
    rpm: float,
    effective_flutes: int,
    diameter_mm: Optional[float] = None,
) -> DynamicAmplification:
    if rpm <= 0:
        raise InvalidParameterError("RPM must be > 0")
    d, length = _dimensions(tool, diameter_mm)
    d_m = d / 1000.0
    length_m = length / 1000.0
    e = get_youngs_modulus(tool.material) * 1e9  # N/m^2
    inertia = math.pi * d_m ** 4 / 64.0
    mass = estimate_tool_mass(tool, d)

    natural = (1.0 / (2.0 * math.pi)) * math.sqrt(3.0 * e * inertia / (mass * length_m ** 3))
    operating = rpm / 60.0 * effective_flutes
    ratio = operating / natural
    return DynamicAmplification(natural, operating, ratio, amplification_factor(ratio))


def deflection_warnings(
    deflection_mm: float,
    warning_mm: float = DEFLECTION_WARNING_MM,
    danger_mm: float = DEFLECTION_DANGER_MM,
    context: str = "",
) -> list[CalcWarning]:
    suffix = f" {context}" if context else ""
    if deflection_mm > danger_mm:
        return [CalcWarning(
            "deflection_danger",
            f"Dangerous tool deflection ({deflection_mm:.3f} mm > {danger_mm:.3f} mm){suffix}",
            Severity.DANGER,
        )]
    if deflection_mm > warning_mm:
        return [CalcWarning(
            "deflection_warning",
            f"High tool deflection ({deflection_mm:.3f} mm > {warning_mm:.3f} mm){suffix}",
        )]
    return []


def calculate_deflection(
    tool: Tool,
    force_n: float,
    rpm: float,
    effective_flutes: int,
    holder_compliance_mm_per_n: float = DEFAULT_HOLDER_COMPLIANCE_MM_PER_N,
    machine_rigidity_factor: Optional[float] = None,
    precision_level=PrecisionLevel.GENERAL,
    diameter_mm: Optional[float] = None,
) -> DeflectionResult:
    """Total deflection = static * G(ratio).

    With ``machine_rigidity_factor`` the hobby-class limits replace the
    standard 0.02/0.05 mm thresholds and an L/D check is added.
    """
    static = calculate_static_deflection(tool, force_n, holder_compliance_mm_per_n, diameter_mm)
    dynamic = calculate_dynamic_amplification(tool, rpm, effective_flutes, diameter_mm)
    total = static.total_mm * dynamic.amplification_factor

    if machine_rigidity_factor is None:
        warnings = deflection_warnings(total)
    else:
        level = coerce_enum(PrecisionLevel, precision_level, "precision level")
        warn_mm, danger_mm = get_hobby_deflection_limits(machine_rigidity_factor, level)
        warnings = deflection_warnings(total, warn_mm, danger_mm, f"for hobby machine {level.value} work")
        d = tool.diameter_mm if diameter_mm is None else diameter_mm
        suitability = evaluate_hobby_tool_suitability(d, tool.stickout_mm, machine_rigidity_factor, level)
        if suitability.warning:
            warnings.append(CalcWarning("deflection_warning", suitability.warning))

    return DeflectionResult(static, dynamic, total, tuple(warnings))


# ----------------------------
# Target-deflection optimizer
# ----------------------------
@dataclass(frozen=True)
class DeflectionOptimizationConfig:
    target_deflection_mm: float
    force_n: float
    rpm: float
    effective_flutes: int
    tool_type: ToolType = ToolType.ENDMILL_FLAT
    diameter_range_mm: tuple[float, float] = (3.0, 25.0)
    stickout_range_mm: tuple[float, float] = (10.0, 100.0)
    max_suggestions: int = 5
    holder_compliance_mm_per_n: float = DEFAULT_HOLDER_COMPLIANCE_MM_PER_N
    workers: Optional[int] = None


@dataclass(frozen=True)
class ToolDeflectionSuggestion:
    diameter_mm: float
    stickout_mm: float
    predicted_deflection_mm: float
    deflection_error: float
    relative_error: float  # percent
    is_within_tolerance: bool
    rigidity_score: int


@dataclass(frozen=True)
class DeflectionOptimizationResult:
    target_deflection_mm: float
    suggestions: tuple[ToolDeflectionSuggestion, ...]
    diameter_range_mm: tuple[float, float]
    stickout_range_mm: tuple[float, float]
    total_evaluations: int


def _grid(lo: float, hi: float, steps: int) -> list[float]:
    if hi == lo:
        return [lo]
    step = (hi - lo) / (steps - 1)
    return [lo + i * step for i in range(steps)]


def _evaluate_cell(config: DeflectionOptimizationConfig, tool_type: ToolType, diameter: float, stickout: float):
    probe = Tool(
        id="optimization_probe",
        type=tool_type,
        diameter_mm=diameter,
        flutes=config.effective_flutes,
        coating="uncoated",
        stickout_mm=stickout,
        material="carbide",
        default_doc_mm=diameter * 0.1,
        default_woc_mm=diameter * 0.5,
    )
    predicted = calculate_deflection(
        probe, config.force_n, config.rpm, config.effective_flutes, config.holder_compliance_mm_per_n,
    ).total_deflection_mm

    error = abs(predicted - config.target_deflection_mm)
    relative = error / config.target_deflection_mm * 100.0
    return ToolDeflectionSuggestion(
        diameter_mm=diameter,
        stickout_mm=stickout,
        predicted_deflection_mm=round_half_up(predicted, 3),
        deflection_error=round_half_up(error, 3),
        relative_error=round_half_up(relative, 1),
        is_within_tolerance=relative <= OPTIMIZER_TOLERANCE_PCT,
        rigidity_score=round_half_up(config.force_n / predicted),
    )


def suggest_tools_for_target_deflection(config: DeflectionOptimizationConfig) -> DeflectionOptimizationResult:
    """Brute-force a diameter x stickout grid and rank by distance to the target.

    An unreachable target still returns the closest candidates.
    """
    if config.target_deflection_mm <= 0:
        raise InvalidParameterError("Target deflection must be > 0")
    if config.force_n <= 0:
        raise InvalidParameterError("Force must be > 0")
    if config.effective_flutes < 1:
        raise InvalidParameterError("Flute count must be >= 1")

    tool_type = coerce_enum(ToolType, config.tool_type, "tool type")
    d_lo, d_hi = sorted(config.diameter_range_mm)
    s_lo, s_hi = sorted(config.stickout_range_mm)
    if d_lo < 0.1 or s_lo < 0.1:
        raise InvalidParameterError("Search ranges must start at 0.1 mm or more")

    # cells are snapped to 0.1 mm; identical cells are evaluated once
    cells = list(dict.fromkeys(
        (round_half_up(d, 1), round_half_up(s, 1))
        for d in _grid(d_lo, d_hi, OPTIMIZER_DIAMETER_STEPS)
        for s in _grid(s_lo, s_hi, OPTIMIZER_STICKOUT_STEPS)
    ))

    if config.workers and config.workers > 1:
        with ThreadPoolExecutor(max_workers=config.workers) as pool:
            evaluated = list(pool.map(lambda cell: _evaluate_cell(config, tool_type, *cell), cells))
    else:
        evaluated = [_evaluate_cell(config, tool_type, d, s) for d, s in cells]

    # sorted() is stable, so ties keep grid order whatever the worker count
    ranked = sorted(evaluated, key=lambda s: s.deflection_error)
    logger.debug(
        "Deflection search: target=%.3f mm, %d cells, best error=%.3f mm",
        config.target_deflection_mm, len(cells), ranked[0].deflection_error,
    )

    return DeflectionOptimizationResult(
        target_deflection_mm=config.target_deflection_mm,
        suggestions=tuple(ranked[:max(config.max_suggestions, 0)]),
        diameter_range_mm=(d_lo, d_hi),
        stickout_range_mm=(s_lo, s_hi),
        total_evaluations=len(cells),
    )


def optimize_tool_configuration(
    base_tool: Tool,
    target_deflection_mm: float,
    force_n: float,
    rpm: float,
    effective_flutes: int,
    holder_compliance_mm_per_n: float = DEFAULT_HOLDER_COMPLIANCE_MM_PER_N,
    workers: Optional[int] = None,
) -> DeflectionOptimizationResult:
    """Search +-50% diameter and +-30% stickout around an existing tool."""
    d = base_tool.diameter_mm
    length = base_tool.stickout_mm
    config = DeflectionOptimizationConfig(
        target_deflection_mm=target_deflection_mm,
        force_n=force_n,
        rpm=rpm,
        effective_flutes=effective_flutes,
        tool_type=base_tool.type,
        diameter_range_mm=(max(d * 0.5, 3.0), min(d * 1.5, 25.0)),
        stickout_range_mm=(max(length * 0.7, 10.0), min(length * 1.3, 100.0)),
        max_suggestions=3,
        holder_compliance_mm_per_n=holder_compliance_mm_per_n,
        workers=workers,
    )
    return suggest_tools_for_target_deflection(config)
