import logging

from millcalc.data import default_catalog
from millcalc.errors import CalculationError
from millcalc.models import CutType, Inputs
from millcalc.output import apply_output_rounding
from millcalc.pipeline import CalculationOptions, apply_scaling, compute


def get_float(prompt: str, default=None) -> float:
    while True:
        raw = input(prompt).strip()
        if raw == "" and default is not None:
            return default
        try:
            val = float(raw)
            if val <= 0:
                print("Enter a number > 0.")
                continue
            return val
        except ValueError:
            print("Enter a valid number.")

def pick(label: str, options: list[str]) -> str:
    for i, opt in enumerate(options, start=1):
        print(f"  {i}) {opt}")
    while True:
        raw = input(f"{label} 1-{len(options)}: ").strip()
        if raw.isdigit() and 1 <= int(raw) <= len(options):
            return options[int(raw) - 1]
        print("Invalid choice.")

def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    catalog = default_catalog()

    print("\nMill Feeds & Speeds")
    machine_id = pick("Machine", sorted(catalog.machines))
    spindle_id = pick("Spindle", sorted(catalog.spindles))
    tool_id = pick("Tool", sorted(catalog.tools))
    material_id = pick("Material", sorted(catalog.materials))
    cut_type = pick("Operation", [c.value for c in CutType])
    aggressiveness = get_float("Aggressiveness [1.0]: ", default=1.0)
    hobby = input("Hobby machine limits? [y/N]: ").strip().lower().startswith("y")

    inputs = Inputs(machine_id, spindle_id, tool_id, material_id, cut_type, aggressiveness)
    try:
        out = apply_output_rounding(apply_scaling(compute(inputs, catalog, CalculationOptions(hobby_mode=hobby))))
    except CalculationError as e:
        print(f"\nError: {e}")
        return 1

    print(f"\nRPM       = {out.rpm}")
    print(f"Feed      = {out.feed_mm_min} mm/min")
    print(f"Vc        = {out.vc_m_min} m/min ({out.sfm} SFM)")
    print(f"Chipload  = {out.fz_mm:.4f} mm/tooth")
    print(f"WOC x DOC = {out.ae_mm:.2f} x {out.ap_mm:.2f} mm")
    print(f"MRR       = {out.mrr_mm3_min:.1f} mm³/min")
    print(f"Power     = {out.power_w:.1f} / {out.power_available_w:.1f} W")
    print(f"Force     = {out.force_n:.1f} N")
    print(f"Deflection= {out.deflection_mm:.4f} mm")
    for w in out.warnings:
        print(f"  [{w.severity.value}] {w.message}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
