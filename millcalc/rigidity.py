# millcalc/rigidity.py
"""Estimate a machine rigidity factor from how the machine is built.

The estimate is a product of independent factors (frame, motion system,
spindle mount, weight density) with span and aspect penalties, clamped
to [0.1, 1.0]. It is a starting point for custom machines, not a
measurement; nearby reference machines are reported so the user can
sanity-check it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Optional

from millcalc.errors import InvalidParameterError
from millcalc.formulas import clamp
from millcalc.models import coerce_enum

logger = logging.getLogger(__name__)


class FrameType(str, Enum):
    ALUMINUM_EXTRUSION = "aluminum_extrusion"
    TORSION_BOX = "torsion_box"
    ALUMINUM_MACHINED = "aluminum_machined"
    STEEL_FABRICATED = "steel_fabricated"
    STEEL_WELDED = "steel_welded"
    CAST_IRON = "cast_iron"
    COMPOSITE = "composite"  # epoxy granite


class MotionType(str, Enum):
    BELT_DRIVE = "belt_drive"
    LEADSCREW = "leadscrew"
    BALLSCREW = "ballscrew"
    RACK_PINION = "rack_pinion"
    LINEAR_MOTOR = "linear_motor"


class SpindleMountType(str, Enum):
    ROUTER_CLAMP = "router_clamp"
    FIXED_MOUNT = "fixed_mount"
    CARTRIDGE_SPINDLE = "cartridge_spindle"
    INTEGRATED_SPINDLE = "integrated_spindle"


FRAME_FACTORS = MappingProxyType({
    FrameType.ALUMINUM_EXTRUSION: 0.2,
    FrameType.TORSION_BOX: 0.3,
    FrameType.ALUMINUM_MACHINED: 0.4,
    FrameType.STEEL_FABRICATED: 0.5,
    FrameType.STEEL_WELDED: 0.6,
    FrameType.CAST_IRON: 0.8,
    FrameType.COMPOSITE: 0.85,
})

MOTION_FACTORS = MappingProxyType({
    MotionType.BELT_DRIVE: 0.7,
    MotionType.LEADSCREW: 0.9,
    MotionType.BALLSCREW: 1.0,
    MotionType.RACK_PINION: 0.8,
    MotionType.LINEAR_MOTOR: 1.1,
})

MOUNT_FACTORS = MappingProxyType({
    SpindleMountType.ROUTER_CLAMP: 0.8,
    SpindleMountType.FIXED_MOUNT: 0.95,
    SpindleMountType.CARTRIDGE_SPINDLE: 1.0,
    SpindleMountType.INTEGRATED_SPINDLE: 1.1,
})

# kg per litre of working volume -> factor, checked top down
DENSITY_PENALTIES = ((10.0, 1.0), (5.0, 0.95), (2.0, 0.9), (1.0, 0.8), (0.5, 0.7))
MIN_DENSITY_PENALTY = 0.6

WELL_CHARACTERIZED_FRAMES = frozenset({FrameType.CAST_IRON, FrameType.STEEL_WELDED, FrameType.ALUMINUM_EXTRUSION})


@dataclass(frozen=True)
class KnownMachine:
    id: str
    rigidity_factor: float
    weight_kg: float
    frame: FrameType
    motion: MotionType
    mount: SpindleMountType
    working_volume_mm3: float
    description: str


KNOWN_MACHINES = (
    KnownMachine("3018_cnc", 0.15, 8, FrameType.ALUMINUM_EXTRUSION, MotionType.LEADSCREW,
                 SpindleMountType.ROUTER_CLAMP, 300 * 180 * 45, "Small hobby CNC with aluminum extrusion frame"),
    KnownMachine("lowrider_v3", 0.25, 25, FrameType.TORSION_BOX, MotionType.BELT_DRIVE,
                 SpindleMountType.ROUTER_CLAMP, 1220 * 2440 * 89, "Torsion box table CNC with belt drive"),
    KnownMachine("queenbee_pro", 0.35, 45, FrameType.ALUMINUM_MACHINED, MotionType.BALLSCREW,
                 SpindleMountType.FIXED_MOUNT, 790 * 790 * 80, "Machined aluminum frame with linear rails"),
    KnownMachine("printnc", 0.6, 150, FrameType.STEEL_WELDED, MotionType.BALLSCREW,
                 SpindleMountType.FIXED_MOUNT, 500 * 500 * 300, "Welded steel frame CNC"),
    KnownMachine("benchtop_mill", 0.45, 80, FrameType.CAST_IRON, MotionType.LEADSCREW,
                 SpindleMountType.INTEGRATED_SPINDLE, 400 * 200 * 300, "Small cast iron benchtop mill"),
    KnownMachine("entry_vmc", 0.8, 2500, FrameType.CAST_IRON, MotionType.BALLSCREW,
                 SpindleMountType.INTEGRATED_SPINDLE, 600 * 400 * 500, "Entry-level VMC with cast iron construction"),
)


@dataclass(frozen=True)
class RigidityInputs:
    weight_kg: float
    working_volume_mm3: float
    frame: FrameType
    motion: MotionType
    mount: SpindleMountType
    max_span_mm: Optional[float] = None
    height_to_width_ratio: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "frame", coerce_enum(FrameType, self.frame, "frame construction type"))
        object.__setattr__(self, "motion", coerce_enum(MotionType, self.motion, "motion system type"))
        object.__setattr__(self, "mount", coerce_enum(SpindleMountType, self.mount, "spindle mount type"))


@dataclass(frozen=True)
class SimilarMachine:
    machine_id: str
    rigidity_factor: float
    similarity: float
    reason: str


@dataclass(frozen=True)
class RigidityEstimate:
    rigidity_factor: float
    confidence: float
    frame_factor: float
    motion_factor: float
    mount_factor: float
    size_penalty: float
    breakdown: dict
    nearest_known_machines: tuple[SimilarMachine, ...]
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class EstimatorCheck:
    machine_id: str
    actual: float
    estimated: float
    error: float


@dataclass(frozen=True)
class EstimatorReport:
    average_error: float
    max_error: float
    predictions: tuple[EstimatorCheck, ...]


def size_penalty(weight_kg: float, working_volume_mm3: float) -> float:
    density = weight_kg / (working_volume_mm3 / 1_000_000)
    for floor, factor in DENSITY_PENALTIES:
        if density >= floor:
            return factor
    return MIN_DENSITY_PENALTY


def find_similar_machines(inputs: RigidityInputs, limit: int = 3) -> tuple[SimilarMachine, ...]:
    found = []
    for known in KNOWN_MACHINES:
        score = 0.0
        reasons = []
        if known.frame is inputs.frame:
            score += 0.4
            reasons.append("same frame construction")
        if known.motion is inputs.motion:
            score += 0.3
            reasons.append("same motion system")
        if known.mount is inputs.mount:
            score += 0.2
            reasons.append("same spindle mount")
        weight_ratio = min(inputs.weight_kg, known.weight_kg) / max(inputs.weight_kg, known.weight_kg)
        if weight_ratio > 0.5:
            score += 0.1 * weight_ratio
            reasons.append("similar weight")
        if score > 0.2:
            found.append(SimilarMachine(known.id, known.rigidity_factor, score, ", ".join(reasons)))

    found.sort(key=lambda m: m.similarity, reverse=True)
    return tuple(found[:limit])


def _label(value: Enum) -> str:
    return value.value.replace("_", " ", 1)


def estimate_machine_rigidity(inputs: RigidityInputs) -> RigidityEstimate:
    if inputs.weight_kg <= 0:
        raise InvalidParameterError("Machine weight must be positive")
    if inputs.working_volume_mm3 <= 0:
        raise InvalidParameterError("Working volume must be positive")

    warnings = []
    frame = FRAME_FACTORS[inputs.frame]
    motion = MOTION_FACTORS[inputs.motion]
    mount = MOUNT_FACTORS[inputs.mount]
    size = size_penalty(inputs.weight_kg, inputs.working_volume_mm3)

    rigidity = frame * motion * mount * size
    if inputs.height_to_width_ratio and inputs.height_to_width_ratio > 1.5:
        rigidity *= 0.9
        warnings.append("High height-to-width ratio may reduce stability")
    if inputs.max_span_mm and inputs.max_span_mm > 1000:
        rigidity *= max(0.7, 1 - (inputs.max_span_mm - 1000) / 5000)
        warnings.append("Large unsupported spans reduce rigidity")
    rigidity = clamp(rigidity, 0.1, 1.0)

    confidence = 0.7
    if inputs.frame in WELL_CHARACTERIZED_FRAMES:
        confidence += 0.2
    if inputs.weight_kg < 5 or inputs.weight_kg > 5000:
        confidence -= 0.1
        warnings.append("Machine weight is outside typical range")
    confidence = clamp(confidence, 0.3, 0.95)

    logger.debug("Estimated rigidity %.3f (confidence %.2f) for %s", rigidity, confidence, inputs)

    volume_l = inputs.working_volume_mm3 / 1_000_000
    return RigidityEstimate(
        rigidity_factor=rigidity,
        confidence=confidence,
        frame_factor=frame,
        motion_factor=motion,
        mount_factor=mount,
        size_penalty=size,
        breakdown={
            "frame_type": f"{_label(inputs.frame)} construction (factor: {frame:.2f})",
            "motion_system": f"{_label(inputs.motion)} motion system (factor: {motion:.2f})",
            "spindle_mount": f"{_label(inputs.mount)} spindle mount (factor: {mount:.2f})",
            "size_analysis": f"Weight: {inputs.weight_kg:g}kg, Volume: {volume_l:.1f}L (factor: {size:.2f})",
        },
        nearest_known_machines=find_similar_machines(inputs),
        warnings=tuple(warnings),
    )


def validate_estimation_framework() -> EstimatorReport:
    """Run the estimator over the reference machines and report its error."""
    checks = []
    for known in KNOWN_MACHINES:
        estimate = estimate_machine_rigidity(RigidityInputs(
            weight_kg=known.weight_kg,
            working_volume_mm3=known.working_volume_mm3,
            frame=known.frame,
            motion=known.motion,
            mount=known.mount,
        ))
        checks.append(EstimatorCheck(
            known.id, known.rigidity_factor, estimate.rigidity_factor,
            abs(estimate.rigidity_factor - known.rigidity_factor),
        ))

    errors = [c.error for c in checks]
    return EstimatorReport(
        average_error=sum(errors) / len(errors),
        max_error=max(errors),
        predictions=tuple(checks),
    )
