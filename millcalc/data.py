# millcalc/data.py

# Built-in starter catalog (tune to your shop/machine/rigidity/grade).
# Metric throughout: mm, mm/min, m/min, kW.

from functools import lru_cache

from millcalc.catalog import Catalog, load_catalog

MACHINES = [
    # ----- Hobby routers -----
    {"id": "3018_cnc", "name": "3018 desktop CNC", "axis_max_feed_mm_min": 1000, "rigidity_factor": 0.15,
     "aggressiveness": {"axial": 0.5, "radial": 0.5, "feed": 0.6}},
    {"id": "lowrider_v3", "name": "LowRider V3", "axis_max_feed_mm_min": 2500, "rigidity_factor": 0.25,
     "aggressiveness": {"axial": 0.6, "radial": 0.6, "feed": 0.7}},

    # ----- PrintNC (welded steel) -----
    {"id": "printnc_compact", "name": "PrintNC compact", "axis_max_feed_mm_min": 8000, "rigidity_factor": 0.75,
     "aggressiveness": {"axial": 0.8, "radial": 0.85, "feed": 0.85}},
    {"id": "printnc_standard", "name": "PrintNC standard", "axis_max_feed_mm_min": 7000, "rigidity_factor": 0.65,
     "aggressiveness": {"axial": 0.75, "radial": 0.8, "feed": 0.8}},
    {"id": "printnc_large", "name": "PrintNC large", "axis_max_feed_mm_min": 6000, "rigidity_factor": 0.55,
     "aggressiveness": {"axial": 0.7, "radial": 0.75, "feed": 0.75}},

    # ----- Commercial mills -----
    {"id": "tormach_1100mx", "name": "Tormach 1100MX", "axis_max_feed_mm_min": 11430, "rigidity_factor": 0.85,
     "aggressiveness": {"axial": 0.9, "radial": 0.9, "feed": 0.9}},
    {"id": "entry_vmc", "name": "Entry-level VMC", "axis_max_feed_mm_min": 15000, "rigidity_factor": 0.8,
     "aggressiveness": {"axial": 0.9, "radial": 0.9, "feed": 0.95}},
    {"id": "haas_vf2", "name": "Haas VF-2", "axis_max_feed_mm_min": 25400, "rigidity_factor": 1.0,
     "aggressiveness": {"axial": 1.0, "radial": 1.0, "feed": 1.0}},
    {"id": "makino_v33i", "name": "Makino V33i", "axis_max_feed_mm_min": 20000, "rigidity_factor": 1.0,
     "aggressiveness": {"axial": 1.0, "radial": 1.0, "feed": 1.0}},
]

SPINDLES = [
    # ----- Routers & DC motors (flat-ish curves) -----
    {"id": "spindle_300w_dc", "name": "300 W DC spindle", "rated_power_kw": 0.3,
     "rpm_min": 1000, "rpm_max": 10000, "base_rpm": 10000,
     "power_curve": [{"rpm": 1000, "power_kw": 0.05}, {"rpm": 5000, "power_kw": 0.18}, {"rpm": 10000, "power_kw": 0.3}]},
    {"id": "router_makita_rt0701", "name": "Makita RT0701C trim router", "rated_power_kw": 0.71,
     "rpm_min": 10000, "rpm_max": 30000, "base_rpm": 10000,
     "power_curve": [{"rpm": 10000, "power_kw": 0.71}, {"rpm": 30000, "power_kw": 0.71}]},

    # ----- VFD spindles (constant torque up to base, ~linear power) -----
    {"id": "spindle_0_8kw_high_speed", "name": "0.8 kW air-cooled VFD spindle", "rated_power_kw": 0.8,
     "rpm_min": 8000, "rpm_max": 24000, "base_rpm": 24000,
     "power_curve": [{"rpm": 8000, "power_kw": 0.27}, {"rpm": 16000, "power_kw": 0.53}, {"rpm": 24000, "power_kw": 0.8}]},
    {"id": "spindle_2_2kw", "name": "2.2 kW water-cooled VFD spindle", "rated_power_kw": 2.2,
     "rpm_min": 6000, "rpm_max": 24000, "base_rpm": 24000,
     "power_curve": [{"rpm": 6000, "power_kw": 0.55}, {"rpm": 12000, "power_kw": 1.1},
                     {"rpm": 18000, "power_kw": 1.65}, {"rpm": 24000, "power_kw": 2.2}]},
    {"id": "spindle_7_5kw", "name": "7.5 kW ATC spindle", "rated_power_kw": 7.5,
     "rpm_min": 500, "rpm_max": 12000, "base_rpm": 3000,
     "power_curve": [{"rpm": 500, "power_kw": 1.25}, {"rpm": 1500, "power_kw": 3.75},
                     {"rpm": 3000, "power_kw": 7.5}, {"rpm": 12000, "power_kw": 7.5}]},

    # ----- Machine tool spindles -----
    {"id": "spindle_haas_vf2", "name": "Haas VF-2 8.1k inline", "rated_power_kw": 22.4,
     "rpm_min": 100, "rpm_max": 8100, "base_rpm": 2000,
     "power_curve": [{"rpm": 100, "power_kw": 1.1}, {"rpm": 2000, "power_kw": 22.4}, {"rpm": 8100, "power_kw": 22.4}]},
]

TOOLS = [
    # ----- Flat end mills -----
    {"id": "endmill_3mm_carbide_1fl", "type": "endmill_flat", "diameter_mm": 3.0, "flutes": 1,
     "coating": "uncoated", "stickout_mm": 12.0, "material": "carbide",
     "default_doc_mm": 1.0, "default_woc_mm": 0.9},
    {"id": "endmill_6mm_carbide", "type": "endmill_flat", "diameter_mm": 6.0, "flutes": 3,
     "coating": "AlTiN", "stickout_mm": 20.0, "material": "carbide",
     "default_doc_mm": 3.0, "default_woc_mm": 1.8},
    {"id": "endmill_10mm_carbide_4fl", "type": "endmill_flat", "diameter_mm": 10.0, "flutes": 4,
     "coating": "TiAlN", "stickout_mm": 30.0, "material": "carbide",
     "default_doc_mm": 5.0, "default_woc_mm": 3.0},
    {"id": "endmill_12mm_hss", "type": "endmill_flat", "diameter_mm": 12.0, "flutes": 4,
     "coating": "TiN", "stickout_mm": 35.0, "material": "M2_HSS",
     "default_doc_mm": 6.0, "default_woc_mm": 3.6},

    # ----- Drills -----
    {"id": "drill_8mm_hss", "type": "drill", "diameter_mm": 8.0, "flutes": 2,
     "coating": "TiN", "stickout_mm": 60.0, "material": "HSS",
     "default_doc_mm": 16.0, "default_woc_mm": 8.0},

    # ----- Engraving -----
    {"id": "vbit_90deg_carbide", "type": "vbit", "diameter_mm": 0.2, "flutes": 2,
     "coating": "uncoated", "stickout_mm": 15.0, "material": "carbide",
     "default_doc_mm": 1.0, "default_woc_mm": 0.5, "metadata": {"angle_deg": 90}},

    # ----- Face mills, boring, saws -----
    {"id": "facemill_63mm_insert", "type": "facemill", "diameter_mm": 63.0, "flutes": 5,
     "coating": "TiAlN", "stickout_mm": 40.0, "material": "carbide",
     "default_doc_mm": 1.5, "default_woc_mm": 40.0, "metadata": {"body_diameter_mm": 63.0}},
    {"id": "boring_head_22mm", "type": "boring", "diameter_mm": 8.0, "flutes": 1,
     "coating": "uncoated", "stickout_mm": 50.0, "material": "carbide",
     "default_doc_mm": 0.5, "default_woc_mm": 0.3, "metadata": {"body_diameter_mm": 6.0}},
    {"id": "slitting_saw_50mm_hss", "type": "slitting", "diameter_mm": 50.0, "flutes": 24,
     "coating": "uncoated", "stickout_mm": 10.0, "material": "HSS",
     "default_doc_mm": 2.0, "default_woc_mm": 1.5},
]

# vc ranges are the HSS baseline; tool material/coating multipliers scale them up.
MATERIALS = [
    # ----- Aluminum -----
    {"id": "aluminum_6061", "name": "6061-T6 Aluminum", "category": "aluminum",
     "vc_range_m_min": [60, 120],
     "fz_mm_per_tooth_by_diameter": {
         3: [0.013, 0.025], 6: [0.025, 0.05], 10: [0.04, 0.08], 12: [0.05, 0.1], 20: [0.08, 0.14], 63: [0.1, 0.2]},
     "force_coeff_kn_mm2": 0.7, "specific_cutting_energy_j_mm3": 0.7,
     "chip_thinning": {"enable_below_fraction": 0.5, "limit_factor": 2.5},
     "max_engagement_fraction": 0.8},

    # ----- Carbon steel -----
    {"id": "steel_1045", "name": "1045 Steel", "category": "steel",
     "vc_range_m_min": [25, 40],
     "fz_mm_per_tooth_by_diameter": {
         3: [0.01, 0.02], 6: [0.02, 0.04], 10: [0.03, 0.06], 12: [0.04, 0.07], 20: [0.06, 0.1], 63: [0.08, 0.15]},
     "force_coeff_kn_mm2": 2.0, "specific_cutting_energy_j_mm3": 2.5,
     "chip_thinning": {"enable_below_fraction": 0.5, "limit_factor": 2.0},
     "max_engagement_fraction": 0.5},

    # ----- Stainless -----
    {"id": "stainless_316", "name": "316 Stainless", "category": "stainless",
     "vc_range_m_min": [15, 25],
     "fz_mm_per_tooth_by_diameter": {
         3: [0.008, 0.016], 6: [0.016, 0.032], 10: [0.025, 0.05], 12: [0.03, 0.055], 20: [0.05, 0.08], 63: [0.07, 0.12]},
     "force_coeff_kn_mm2": 2.5, "specific_cutting_energy_j_mm3": 3.0,
     "chip_thinning": {"enable_below_fraction": 0.4, "limit_factor": 1.8},
     "max_engagement_fraction": 0.4},

    # ----- Copper & brass -----
    {"id": "brass_360", "name": "C360 Free-Machining Brass", "category": "brass",
     "vc_range_m_min": [60, 100],
     "fz_mm_per_tooth_by_diameter": {3: [0.015, 0.03], 6: [0.03, 0.06], 12: [0.05, 0.1], 20: [0.07, 0.13]},
     "force_coeff_kn_mm2": 0.8, "specific_cutting_energy_j_mm3": 1.0,
     "chip_thinning": {"enable_below_fraction": 0.5, "limit_factor": 2.0},
     "max_engagement_fraction": 0.8},

    # ----- Plastics & wood -----
    {"id": "hdpe", "name": "HDPE", "category": "plastic",
     "vc_range_m_min": [100, 250],
     "fz_mm_per_tooth_by_diameter": {3: [0.05, 0.1], 6: [0.1, 0.2], 12: [0.15, 0.3]},
     "force_coeff_kn_mm2": 0.1, "specific_cutting_energy_j_mm3": 0.2,
     "chip_thinning": {"enable_below_fraction": 0.5, "limit_factor": 3.0},
     "max_engagement_fraction": 1.0},
    {"id": "mdf", "name": "MDF", "category": "wood",
     "vc_range_m_min": [150, 300],
     "fz_mm_per_tooth_by_diameter": {3: [0.05, 0.12], 6: [0.1, 0.25], 12: [0.2, 0.4]},
     "force_coeff_kn_mm2": 0.15, "specific_cutting_energy_j_mm3": 0.25,
     "chip_thinning": {"enable_below_fraction": 0.5, "limit_factor": 3.0},
     "max_engagement_fraction": 1.0},
]

DATASETS = {
    "machines": MACHINES,
    "spindles": SPINDLES,
    "tools": TOOLS,
    "materials": MATERIALS,
}


@lru_cache(maxsize=None)
def default_catalog() -> Catalog:
    return load_catalog(DATASETS)
