# millcalc/geometry.py
# Effective cutting diameter and flute count per tool type.

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Callable, Optional

from millcalc.errors import InvalidParameterError, MissingMetadataError
from millcalc.models import Tool, ToolType, coerce_enum


def _nominal(tool: Tool, doc_mm: Optional[float]) -> float:
    return tool.diameter_mm


def _vbit(tool: Tool, doc_mm: Optional[float]) -> float:
    angle = tool.metadata.angle_deg
    if angle is None:
        raise MissingMetadataError(f"V-bit {tool.id} requires metadata.angle_deg")
    if doc_mm is None:
        raise MissingMetadataError(f"V-bit {tool.id} requires a depth of cut")
    if not 0 < angle < 180:
        raise InvalidParameterError("V-bit included angle must be between 0 and 180 degrees")
    if doc_mm < 0:
        raise InvalidParameterError("Depth of cut must be >= 0")
    half = math.radians(angle / 2.0)
    return tool.diameter_mm + 2.0 * math.tan(half) * doc_mm


def _facemill(tool: Tool, doc_mm: Optional[float]) -> float:
    body = tool.metadata.body_diameter_mm
    if body is None:
        raise MissingMetadataError(f"Face mill {tool.id} requires metadata.body_diameter_mm")
    return body


def _boring(tool: Tool, doc_mm: Optional[float]) -> float:
    # For boring heads "diameter" is the radial offset; the bit sits on the body.
    bit = tool.metadata.body_diameter_mm
    if bit is None:
        raise MissingMetadataError(f"Boring tool {tool.id} requires metadata.body_diameter_mm")
    return 2.0 * (tool.diameter_mm + bit / 2.0)


DIAMETER_RESOLVERS: "MappingProxyType[ToolType, Callable[[Tool, Optional[float]], float]]" = MappingProxyType({
    ToolType.ENDMILL_FLAT: _nominal,
    ToolType.DRILL: _nominal,
    ToolType.SLITTING: _nominal,
    ToolType.VBIT: _vbit,
    ToolType.FACEMILL: _facemill,
    ToolType.BORING: _boring,
})

# Face mills and slitting saws keep the full count for now.
SINGLE_POINT_TYPES = frozenset({ToolType.BORING})


def effective_diameter(tool: Tool, doc_mm: Optional[float] = None) -> float:
    tool_type = coerce_enum(ToolType, tool.type, "tool type")
    diameter = DIAMETER_RESOLVERS[tool_type](tool, doc_mm)
    if diameter <= 0:
        raise InvalidParameterError(f"Effective diameter must be > 0 (got {diameter})")
    return diameter


def effective_flutes(tool: Tool) -> int:
    tool_type = coerce_enum(ToolType, tool.type, "tool type")
    if tool_type in SINGLE_POINT_TYPES:
        return 1
    if tool.flutes < 1:
        raise InvalidParameterError("Flute count must be >= 1")
    return tool.flutes
