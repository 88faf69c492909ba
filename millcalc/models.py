# millcalc/models.py
"""Immutable value records for catalog entities and calculation inputs.

Catalog records are built once from the static datasets (see millcalc.data)
and never mutated. Raw dict rows are checked by the pydantic ``*Row`` schemas
at the bottom of this module; ``from_dict`` reports every problem in a row
as one CatalogError.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, Field, StringConstraints, ValidationError, field_validator, model_validator

from millcalc.errors import CatalogError, UnknownTypeError

E = TypeVar("E", bound=Enum)


class ToolType(str, Enum):
    ENDMILL_FLAT = "endmill_flat"
    DRILL = "drill"
    VBIT = "vbit"
    FACEMILL = "facemill"
    BORING = "boring"
    SLITTING = "slitting"


class CutType(str, Enum):
    SLOT = "slot"
    PROFILE = "profile"
    ADAPTIVE = "adaptive"
    FACING = "facing"
    DRILLING = "drilling"
    BORING = "boring"


class Severity(str, Enum):
    WARNING = "warning"
    DANGER = "danger"


class PrecisionLevel(str, Enum):
    PRECISION = "precision"
    GENERAL = "general"
    ROUGH = "rough"


def coerce_enum(enum_cls: Type[E], value: Any, label: str) -> E:
    """Return ``value`` as a member of ``enum_cls`` or raise UnknownTypeError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise UnknownTypeError(f"Unknown {label}: {value!r} (expected one of {choices})") from None


@dataclass(frozen=True)
class CalcWarning:
    type: str
    message: str
    severity: Severity = Severity.WARNING

    def to_dict(self) -> dict:
        return {"type": self.type, "message": self.message, "severity": self.severity.value}


# ----------------------------
# Catalog entities
# ----------------------------
@dataclass(frozen=True)
class ToolMetadata:
    angle_deg: Optional[float] = None  # included angle of a V-bit
    body_diameter_mm: Optional[float] = None  # facemill body / boring bit diameter


@dataclass(frozen=True)
class Tool:
    id: str
    type: ToolType
    diameter_mm: float
    flutes: int
    coating: str
    stickout_mm: float
    material: str
    default_doc_mm: float
    default_woc_mm: float
    metadata: ToolMetadata = field(default_factory=ToolMetadata)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Tool":
        return parse_row(ToolRow, data, "tool")


@dataclass(frozen=True)
class ChipThinning:
    enable_below_fraction: float
    limit_factor: float


@dataclass(frozen=True)
class Material:
    id: str
    category: str
    vc_range_m_min: tuple[float, float]
    fz_mm_per_tooth_by_diameter: Mapping[float, tuple[float, float]]
    force_coeff_kn_mm2: float
    specific_cutting_energy_j_mm3: float
    chip_thinning: ChipThinning
    max_engagement_fraction: float
    name: str = ""

    def __post_init__(self):
        # Keys may arrive as JSON-style strings ("6.0"); normalize to floats in ascending order.
        table = {float(k): (float(v[0]), float(v[1])) for k, v in dict(self.fz_mm_per_tooth_by_diameter).items()}
        object.__setattr__(self, "fz_mm_per_tooth_by_diameter", MappingProxyType(dict(sorted(table.items()))))
        object.__setattr__(self, "vc_range_m_min", (float(self.vc_range_m_min[0]), float(self.vc_range_m_min[1])))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Material":
        return parse_row(MaterialRow, data, "material")


@dataclass(frozen=True)
class Aggressiveness:
    axial: float = 1.0
    radial: float = 1.0
    feed: float = 1.0


@dataclass(frozen=True)
class Machine:
    id: str
    axis_max_feed_mm_min: float
    rigidity_factor: float
    aggressiveness: Aggressiveness = field(default_factory=Aggressiveness)
    name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Machine":
        return parse_row(MachineRow, data, "machine")


@dataclass(frozen=True)
class PowerCurvePoint:
    rpm: float
    power_kw: float


@dataclass(frozen=True)
class Spindle:
    id: str
    rated_power_kw: float
    rpm_min: float
    rpm_max: float
    base_rpm: float
    power_curve: tuple[PowerCurvePoint, ...]
    name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Spindle":
        return parse_row(SpindleRow, data, "spindle")


# ----------------------------
# Raw catalog rows
# ----------------------------
# Numbers are strict: "60" in a numeric field is a bad row, not a coercion.
Positive = Annotated[float, Field(strict=True, gt=0)]
NonNegative = Annotated[float, Field(strict=True, ge=0)]
Fraction = Annotated[float, Field(strict=True, gt=0, le=1)]
Range = Annotated[list[Positive], Field(min_length=2, max_length=2)]
Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ToolMetadataRow(BaseModel):
    angle_deg: Optional[Annotated[float, Field(strict=True, gt=0, lt=180)]] = None
    body_diameter_mm: Optional[Positive] = None


class ToolRow(BaseModel):
    id: Text
    type: ToolType
    diameter_mm: Positive
    flutes: int = Field(strict=True, ge=1)
    coating: Text
    stickout_mm: Positive
    material: Text
    default_doc_mm: Positive
    default_woc_mm: Positive
    metadata: Optional[ToolMetadataRow] = None

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, v: Any) -> ToolType:
        return coerce_enum(ToolType, v, "tool type")

    def to_record(self) -> Tool:
        meta = self.metadata or ToolMetadataRow()
        return Tool(
            id=self.id,
            type=self.type,
            diameter_mm=self.diameter_mm,
            flutes=self.flutes,
            coating=self.coating,
            stickout_mm=self.stickout_mm,
            material=self.material,
            default_doc_mm=self.default_doc_mm,
            default_woc_mm=self.default_woc_mm,
            metadata=ToolMetadata(angle_deg=meta.angle_deg, body_diameter_mm=meta.body_diameter_mm),
        )


class ChipThinningRow(BaseModel):
    enable_below_fraction: Fraction
    limit_factor: Positive


class MaterialRow(BaseModel):
    id: Text
    category: Text
    name: Optional[str] = None
    vc_range_m_min: Range
    fz_mm_per_tooth_by_diameter: dict[float, Range] = Field(min_length=1)
    force_coeff_kn_mm2: Positive
    specific_cutting_energy_j_mm3: Positive
    chip_thinning: ChipThinningRow
    max_engagement_fraction: Fraction

    @model_validator(mode="after")
    def _ranges_ordered(self) -> "MaterialRow":
        lo, hi = self.vc_range_m_min
        if lo > hi:
            raise ValueError("vc_range min must be <= max")
        for diameter, (fz_lo, fz_hi) in self.fz_mm_per_tooth_by_diameter.items():
            if fz_lo > fz_hi:
                raise ValueError(f"fz range at {diameter:g}: min must be <= max")
        return self

    def to_record(self) -> Material:
        return Material(
            id=self.id,
            category=self.category,
            vc_range_m_min=tuple(self.vc_range_m_min),
            fz_mm_per_tooth_by_diameter=self.fz_mm_per_tooth_by_diameter,
            force_coeff_kn_mm2=self.force_coeff_kn_mm2,
            specific_cutting_energy_j_mm3=self.specific_cutting_energy_j_mm3,
            chip_thinning=ChipThinning(**self.chip_thinning.model_dump()),
            max_engagement_fraction=self.max_engagement_fraction,
            name=self.name or self.id,
        )


class AggressivenessRow(BaseModel):
    axial: Positive = 1.0
    radial: Positive = 1.0
    feed: Positive = 1.0


class MachineRow(BaseModel):
    id: Text
    name: Optional[str] = None
    axis_max_feed_mm_min: Positive
    rigidity_factor: Positive
    aggressiveness: Optional[AggressivenessRow] = None

    def to_record(self) -> Machine:
        aggr = self.aggressiveness or AggressivenessRow()
        return Machine(
            id=self.id,
            axis_max_feed_mm_min=self.axis_max_feed_mm_min,
            rigidity_factor=self.rigidity_factor,
            aggressiveness=Aggressiveness(**aggr.model_dump()),
            name=self.name or self.id,
        )


class PowerCurvePointRow(BaseModel):
    rpm: Positive
    power_kw: NonNegative


class SpindleRow(BaseModel):
    id: Text
    name: Optional[str] = None
    rated_power_kw: Positive
    rpm_min: Positive
    rpm_max: Positive
    base_rpm: Positive
    power_curve: list[PowerCurvePointRow] = Field(min_length=1)

    @model_validator(mode="after")
    def _rpm_window(self) -> "SpindleRow":
        if self.rpm_min > self.rpm_max:
            raise ValueError("Minimum RPM must be <= maximum RPM")
        if not self.rpm_min <= self.base_rpm <= self.rpm_max:
            raise ValueError("Base RPM must be within min/max RPM range")
        return self

    def to_record(self) -> Spindle:
        return Spindle(
            id=self.id,
            rated_power_kw=self.rated_power_kw,
            rpm_min=self.rpm_min,
            rpm_max=self.rpm_max,
            base_rpm=self.base_rpm,
            power_curve=tuple(PowerCurvePoint(rpm=p.rpm, power_kw=p.power_kw) for p in self.power_curve),
            name=self.name or self.id,
        )


def row_problems(exc: ValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into ``"field: message"`` strings."""
    problems = []
    for err in exc.errors():
        where = ".".join(str(part) for part in err["loc"])
        cause = (err.get("ctx") or {}).get("error")
        message = str(cause) if isinstance(cause, ValueError) else err["msg"]
        problems.append(f"{where}: {message}" if where else message)
    return problems


def parse_row(schema: Type[BaseModel], data: Any, kind: str):
    try:
        return schema.model_validate(data).to_record()
    except ValidationError as e:
        row_id = data.get("id") if isinstance(data, Mapping) else None
        raise CatalogError(f"Invalid {kind} {row_id or '<unnamed>'}", row_problems(e)) from None


# ----------------------------
# Per-request inputs
# ----------------------------
@dataclass(frozen=True)
class Inputs:
    machine_id: str
    spindle_id: str
    tool_id: str
    material_id: str
    cut_type: CutType
    aggressiveness: float = 1.0
    user_doc_mm: Optional[float] = None
    user_woc_mm: Optional[float] = None
    override_flutes: Optional[int] = None
    override_stickout_mm: Optional[float] = None

    def __post_init__(self):
        # Unknown cut types are left as-is and reported by validate_inputs().
        if not isinstance(self.cut_type, CutType):
            try:
                object.__setattr__(self, "cut_type", coerce_enum(CutType, self.cut_type, "cut type"))
            except UnknownTypeError:
                pass

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Inputs":
        def opt_float(key):
            val = data.get(key)
            return None if val in (None, "") else float(val)

        flutes = data.get("override_flutes")
        aggressiveness = opt_float("aggressiveness")
        return cls(
            machine_id=str(data.get("machine_id") or ""),
            spindle_id=str(data.get("spindle_id") or ""),
            tool_id=str(data.get("tool_id") or ""),
            material_id=str(data.get("material_id") or ""),
            cut_type=data.get("cut_type") or "",
            aggressiveness=1.0 if aggressiveness is None else aggressiveness,
            user_doc_mm=opt_float("user_doc_mm"),
            user_woc_mm=opt_float("user_woc_mm"),
            override_flutes=None if flutes in (None, "") else int(flutes),
            override_stickout_mm=opt_float("override_stickout_mm"),
        )
