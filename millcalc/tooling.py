# millcalc/tooling.py
"""Tool material and coating properties.

Starter values from Machinery's Handbook and the big tooling catalogs.
HSS is the 1.0 baseline for every performance multiplier.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class ToolMaterialProperties:
    youngs_modulus_gpa: float
    density_g_cm3: float
    hardness_hrc: float
    surface_speed_multiplier: float
    chipload_multiplier: float
    force_reduction_factor: float  # 1.0 = no reduction
    max_operating_temp_c: float
    wear_resistance: float
    toughness_rating: float


@dataclass(frozen=True)
class CoatingProperties:
    surface_speed_boost: float
    chipload_boost: float
    force_reduction: float
    wear_resistance_boost: float
    friction_coefficient: float


@dataclass(frozen=True)
class CombinedToolProperties:
    material: ToolMaterialProperties
    coating: CoatingProperties
    surface_speed_multiplier: float
    chipload_multiplier: float
    force_reduction: float
    youngs_modulus_gpa: float
    density_g_cm3: float
    wear_resistance: float


@dataclass(frozen=True)
class ToolMaterialRecommendation:
    surface_speed_multiplier: float
    chipload_multiplier: float
    notes: tuple[str, ...]


TOOL_MATERIALS = MappingProxyType({
    # ----- High speed steels -----
    "HSS": ToolMaterialProperties(210, 8.0, 62, 1.0, 1.0, 1.0, 600, 1.0, 1.4),
    "M1_HSS": ToolMaterialProperties(205, 8.1, 63, 1.1, 1.05, 0.98, 620, 1.1, 1.3),
    "M2_HSS": ToolMaterialProperties(210, 8.2, 64, 1.2, 1.1, 0.95, 650, 1.2, 1.25),
    "M42_HSS": ToolMaterialProperties(220, 8.4, 67, 1.4, 1.15, 0.92, 700, 1.4, 1.1),  # cobalt

    # ----- Carbides -----
    "carbide": ToolMaterialProperties(600, 14.5, 92, 3.0, 1.3, 0.85, 1000, 2.5, 0.7),
    "C1_carbide": ToolMaterialProperties(620, 15.0, 94, 3.5, 1.2, 0.88, 1000, 3.0, 0.6),
    "C2_carbide": ToolMaterialProperties(600, 14.5, 92, 3.0, 1.3, 0.85, 1000, 2.5, 0.7),
    "C3_carbide": ToolMaterialProperties(580, 14.0, 89, 2.5, 1.5, 0.82, 950, 2.0, 0.9),

    # ----- Other -----
    "cermet": ToolMaterialProperties(350, 6.0, 93, 4.0, 0.9, 0.90, 1200, 3.5, 0.5),
    "tool_steel": ToolMaterialProperties(210, 7.8, 58, 0.8, 0.9, 1.05, 500, 0.8, 1.6),
})

TOOL_COATINGS = MappingProxyType({
    "uncoated": CoatingProperties(1.0, 1.0, 1.0, 1.0, 0.6),
    "TiN": CoatingProperties(1.15, 1.1, 0.95, 1.3, 0.45),
    "TiAlN": CoatingProperties(1.25, 1.15, 0.90, 1.6, 0.40),
    "AlCrN": CoatingProperties(1.30, 1.2, 0.88, 1.8, 0.38),
    "AlTiN": CoatingProperties(1.35, 1.25, 0.85, 2.0, 0.35),
    "DLC": CoatingProperties(1.20, 1.3, 0.80, 2.5, 0.25),
    "PVD": CoatingProperties(1.20, 1.15, 0.92, 1.5, 0.42),
    "CVD": CoatingProperties(1.40, 1.1, 0.93, 2.2, 0.50),
})

_MATERIALS_BY_KEY = MappingProxyType({k.lower(): v for k, v in TOOL_MATERIALS.items()})
_COATINGS_BY_KEY = MappingProxyType({k.lower(): v for k, v in TOOL_COATINGS.items()})


def lookup_tool_material(name: str) -> ToolMaterialProperties:
    key = (name or "").lower().strip()
    if key in _MATERIALS_BY_KEY:
        return _MATERIALS_BY_KEY[key]
    if "carbide" in key:
        return TOOL_MATERIALS["carbide"]
    if "hss" in key or "high_speed_steel" in key:
        return TOOL_MATERIALS["HSS"]
    if "steel" in key:
        return TOOL_MATERIALS["tool_steel"]
    return TOOL_MATERIALS["HSS"]


def lookup_coating(name: str) -> CoatingProperties:
    return _COATINGS_BY_KEY.get((name or "").lower().strip(), TOOL_COATINGS["uncoated"])


def get_tool_properties(material: str, coating: str) -> CombinedToolProperties:
    mat = lookup_tool_material(material)
    coat = lookup_coating(coating)
    return CombinedToolProperties(
        material=mat,
        coating=coat,
        surface_speed_multiplier=mat.surface_speed_multiplier * coat.surface_speed_boost,
        chipload_multiplier=mat.chipload_multiplier * coat.chipload_boost,
        force_reduction=mat.force_reduction_factor * coat.force_reduction,
        youngs_modulus_gpa=mat.youngs_modulus_gpa,
        density_g_cm3=mat.density_g_cm3,
        wear_resistance=mat.wear_resistance * coat.wear_resistance_boost,
    )


def get_tool_material_recommendations(tool_material: str, workpiece_category: str) -> ToolMaterialRecommendation:
    """Speed/chipload multipliers for a tool material cutting a workpiece category.

    Coatings are ignored here; the multipliers start from the uncoated tool
    material and are nudged for known good or bad pairings.
    """
    props = get_tool_properties(tool_material, "uncoated")
    speed = props.surface_speed_multiplier
    chip = props.chipload_multiplier
    notes: list[str] = []

    tool = (tool_material or "").lower()
    is_carbide = "carbide" in tool
    is_hss = "hss" in tool or "high_speed_steel" in tool
    workpiece = (workpiece_category or "").lower()

    if "aluminum" in workpiece:
        if is_carbide:
            speed *= 1.2
            chip *= 1.1
            notes.append("Carbide excels in aluminum - can run very high speeds")
        elif is_hss:
            speed *= 0.9
            notes.append("HSS in aluminum requires slower speeds to prevent built-up edge")
    elif "stainless" in workpiece:
        if is_carbide:
            chip *= 1.2
            notes.append("Carbide recommended for stainless - maintain aggressive cuts")
        elif is_hss:
            speed *= 0.8
            notes.append("HSS in stainless requires reduced speeds due to work hardening")
    elif "steel" in workpiece:
        if is_carbide:
            notes.append("Carbide provides good steel cutting performance")
        elif is_hss:
            speed *= 1.1
            chip *= 1.05
            notes.append("HSS performs well in steel with good toughness")

    return ToolMaterialRecommendation(
        surface_speed_multiplier=speed,
        chipload_multiplier=chip,
        notes=tuple(notes),
    )
