# millcalc/engagement.py
# Radial/axial engagement and material removal rate.

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from millcalc.errors import InvalidParameterError
from millcalc.models import CalcWarning, Material, Tool, ToolType, coerce_enum


@dataclass(frozen=True)
class EngagementResult:
    ae: float  # radial, mm
    ap: float  # axial, mm
    mrr: float  # mm^3/min
    max_engagement_mm: float
    doc_limited: bool = False
    woc_limited: bool = False
    warnings: tuple[CalcWarning, ...] = ()


def calculate_mrr(tool_type, effective_diameter: float, ae: float, ap: float, feed_rate: float) -> float:
    if coerce_enum(ToolType, tool_type, "tool type") is ToolType.DRILL:
        return math.pi * effective_diameter ** 2 / 4.0 * feed_rate
    return ae * ap * feed_rate


def calculate_engagement_and_mrr(
    material: Material,
    tool: Tool,
    effective_diameter: float,
    feed_rate: float,
    user_doc_mm: Optional[float] = None,
    user_woc_mm: Optional[float] = None,
) -> EngagementResult:
    if effective_diameter <= 0:
        raise InvalidParameterError("Effective diameter must be > 0")
    if feed_rate < 0:
        raise InvalidParameterError("Feed rate must be >= 0")

    warnings: list[CalcWarning] = []
    max_engagement = material.max_engagement_fraction * effective_diameter

    ap = tool.default_doc_mm if user_doc_mm is None else user_doc_mm
    ae = tool.default_woc_mm if user_woc_mm is None else user_woc_mm

    doc_limited = ap > max_engagement
    if doc_limited:
        warnings.append(CalcWarning(
            "doc_limited",
            f"Depth of cut limited to {max_engagement:.2f} mm "
            f"({material.max_engagement_fraction:.0%} of diameter for {material.id})",
        ))
        ap = max_engagement

    woc_limited = ae > max_engagement
    if woc_limited:
        warnings.append(CalcWarning(
            "woc_limited",
            f"Width of cut limited to {max_engagement:.2f} mm "
            f"({material.max_engagement_fraction:.0%} of diameter for {material.id})",
        ))
        ae = max_engagement

    return EngagementResult(
        ae=ae,
        ap=ap,
        mrr=calculate_mrr(tool.type, effective_diameter, ae, ap, feed_rate),
        max_engagement_mm=max_engagement,
        doc_limited=doc_limited,
        woc_limited=woc_limited,
        warnings=tuple(warnings),
    )
