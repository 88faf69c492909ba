import pytest

from millcalc.catalog import Catalog
from millcalc.data import default_catalog
from millcalc.models import Machine, Material, Spindle, Tool


@pytest.fixture
def aluminum():
    return Material.from_dict({
        "id": "aluminum_6061",
        "category": "aluminum",
        "vc_range_m_min": [60, 120],
        "fz_mm_per_tooth_by_diameter": {3: [0.01, 0.02], 12: [0.04, 0.08]},
        "force_coeff_kn_mm2": 0.7,
        "specific_cutting_energy_j_mm3": 0.7,
        "chip_thinning": {"enable_below_fraction": 0.5, "limit_factor": 2.5},
        "max_engagement_fraction": 0.8,
    })


@pytest.fixture
def endmill_6mm():
    return Tool.from_dict({
        "id": "endmill_6mm_carbide",
        "type": "endmill_flat",
        "diameter_mm": 6.0,
        "flutes": 3,
        "coating": "uncoated",
        "stickout_mm": 20.0,
        "material": "carbide",
        "default_doc_mm": 3.0,
        "default_woc_mm": 1.8,
    })


@pytest.fixture
def spindle_2_2kw():
    return Spindle.from_dict({
        "id": "spindle_2_2kw",
        "rated_power_kw": 2.2,
        "rpm_min": 6000,
        "rpm_max": 24000,
        "base_rpm": 24000,
        "power_curve": [{"rpm": 6000, "power_kw": 0.55}, {"rpm": 24000, "power_kw": 2.2}],
    })


@pytest.fixture
def flat_1kw_spindle():
    return Spindle.from_dict({
        "id": "flat_1kw",
        "rated_power_kw": 1.0,
        "rpm_min": 1000,
        "rpm_max": 24000,
        "base_rpm": 1000,
        "power_curve": [{"rpm": 1000, "power_kw": 1.0}],
    })


@pytest.fixture
def rigid_machine():
    return Machine.from_dict({"id": "vmc", "axis_max_feed_mm_min": 10000, "rigidity_factor": 1.0})


@pytest.fixture
def hobby_machine():
    return Machine.from_dict({"id": "3018_cnc", "axis_max_feed_mm_min": 1000, "rigidity_factor": 0.15})


@pytest.fixture
def small_catalog(aluminum, endmill_6mm, spindle_2_2kw, rigid_machine, hobby_machine):
    return Catalog.from_records(
        machines=[rigid_machine, hobby_machine],
        spindles=[spindle_2_2kw],
        tools=[endmill_6mm],
        materials=[aluminum],
    )


@pytest.fixture
def catalog():
    return default_catalog()
