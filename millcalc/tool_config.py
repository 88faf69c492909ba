# millcalc/tool_config.py
# Free-form tool description (as typed into a form) -> Tool record.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from millcalc.errors import InvalidParameterError
from millcalc.models import Tool, ToolMetadata, ToolType, coerce_enum

DEFAULT_DOC_FRACTION = 0.5
DEFAULT_WOC_FRACTION = 0.3


@dataclass(frozen=True)
class ToolConfiguration:
    tool_type: Optional[str] = None
    diameter_mm: Optional[float] = None
    flutes: Optional[int] = None
    stickout_mm: Optional[float] = None
    material: Optional[str] = None
    coating: Optional[str] = None
    vbit_angle_deg: Optional[float] = None
    body_diameter_mm: Optional[float] = None  # face mill body / boring bit
    default_doc_mm: Optional[float] = None
    default_woc_mm: Optional[float] = None

    @classmethod
    def default(cls) -> "ToolConfiguration":
        return cls(
            tool_type=ToolType.ENDMILL_FLAT.value,
            diameter_mm=6.0,
            flutes=2,
            stickout_mm=25.0,
            material="carbide",
            coating="TiAlN",
            default_doc_mm=3.0,
            default_woc_mm=1.8,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToolConfiguration":
        def num(key, cast=float):
            val = data.get(key)
            return None if val in (None, "") else cast(val)

        return cls(
            tool_type=data.get("tool_type") or None,
            diameter_mm=num("diameter_mm"),
            flutes=num("flutes", int),
            stickout_mm=num("stickout_mm"),
            material=data.get("material") or None,
            coating=data.get("coating") or None,
            vbit_angle_deg=num("vbit_angle_deg"),
            body_diameter_mm=num("body_diameter_mm"),
            default_doc_mm=num("default_doc_mm"),
            default_woc_mm=num("default_woc_mm"),
        )

    def missing_fields(self) -> list[str]:
        missing = [
            name for name in ("tool_type", "diameter_mm", "flutes", "stickout_mm", "material", "coating")
            if not getattr(self, name)
        ]
        if self.tool_type == ToolType.VBIT.value and not self.vbit_angle_deg:
            missing.append("vbit_angle_deg")
        if self.tool_type in (ToolType.FACEMILL.value, ToolType.BORING.value) and not self.body_diameter_mm:
            missing.append("body_diameter_mm")
        return missing


def create_tool_from_configuration(config: ToolConfiguration, fallback_id: str = "custom_tool") -> Tool:
    if not config.tool_type:
        raise InvalidParameterError("Tool type is required")
    tool_type = coerce_enum(ToolType, config.tool_type, "tool type")
    if not config.diameter_mm or config.diameter_mm <= 0:
        raise InvalidParameterError("Tool diameter must be positive")
    if not config.flutes or config.flutes < 1:
        raise InvalidParameterError("Tool flutes must be at least 1")
    if not config.stickout_mm or config.stickout_mm <= 0:
        raise InvalidParameterError("Tool stickout must be positive")
    if not config.material:
        raise InvalidParameterError("Tool material is required")
    if not config.coating:
        raise InvalidParameterError("Tool coating is required")

    d = config.diameter_mm
    metadata = ToolMetadata()
    if tool_type is ToolType.VBIT:
        metadata = ToolMetadata(angle_deg=config.vbit_angle_deg)
    elif tool_type in (ToolType.FACEMILL, ToolType.BORING):
        metadata = ToolMetadata(body_diameter_mm=config.body_diameter_mm)

    return Tool(
        id=fallback_id,
        type=tool_type,
        diameter_mm=d,
        flutes=int(config.flutes),
        coating=config.coating,
        stickout_mm=config.stickout_mm,
        material=config.material,
        default_doc_mm=config.default_doc_mm or d * DEFAULT_DOC_FRACTION,
        default_woc_mm=config.default_woc_mm or d * DEFAULT_WOC_FRACTION,
        metadata=metadata,
    )
