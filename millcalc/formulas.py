# millcalc/formulas.py
# Metric base units: mm, min, N, W, RPM, degrees.

import math
from decimal import ROUND_HALF_UP, Decimal

FT_PER_M = 3.28084


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def round_half_up(value: float, decimal_places: int = 0):
    """Round halves away from zero (2.5 -> 3, 0.125 -> 0.13); returns an int at 0 places."""
    if not math.isfinite(value):
        return value
    step = Decimal(1).scaleb(-decimal_places)
    rounded = Decimal(str(value)).quantize(step, rounding=ROUND_HALF_UP)
    return int(rounded) if decimal_places == 0 else float(rounded)


def rpm_from_vc(diameter_mm: float, vc_m_min: float) -> float:
    if diameter_mm <= 0 or vc_m_min <= 0:
        raise ValueError("Diameter and surface speed must be > 0")
    return (vc_m_min * 1000.0) / (math.pi * diameter_mm)


def vc_from_rpm(diameter_mm: float, rpm: float) -> float:
    if diameter_mm <= 0 or rpm <= 0:
        raise ValueError("Diameter and RPM must be > 0")
    return (rpm * math.pi * diameter_mm) / 1000.0


def feed_from_chipload(chipload_mm: float, flutes: int, rpm: float) -> float:
    if chipload_mm <= 0 or flutes <= 0 or rpm <= 0:
        raise ValueError("Chipload, flutes, and RPM must be > 0")
    return chipload_mm * flutes * rpm


def chipload_from_feed(feed_mm_min: float, flutes: int, rpm: float) -> float:
    if feed_mm_min <= 0 or flutes <= 0 or rpm <= 0:
        raise ValueError("Feed, flutes, and RPM must be > 0")
    return feed_mm_min / (flutes * rpm)


def sfm_from_vc(vc_m_min: float) -> float:
    return vc_m_min * FT_PER_M
