import pytest

from millcalc.errors import InvalidParameterError, UnknownTypeError
from millcalc.rigidity import (
    FRAME_FACTORS,
    MOTION_FACTORS,
    MOUNT_FACTORS,
    FrameType,
    MotionType,
    RigidityInputs,
    SpindleMountType,
    estimate_machine_rigidity,
    size_penalty,
    validate_estimation_framework,
)


def test_factor_tables_are_exhaustive():
    assert set(FRAME_FACTORS) == set(FrameType)
    assert set(MOTION_FACTORS) == set(MotionType)
    assert set(MOUNT_FACTORS) == set(SpindleMountType)


def printnc_like(**kw):
    base = dict(weight_kg=150, working_volume_mm3=500 * 500 * 300, frame="steel_welded",
                motion="ballscrew", mount="fixed_mount")
    base.update(kw)
    return RigidityInputs(**base)


class TestSizePenalty:
    @pytest.mark.parametrize("kg_per_l, expected", [(20, 1.0), (5, 0.95), (2.5, 0.9), (1, 0.8), (0.6, 0.7), (0.1, 0.6)])
    def test_density_bands(self, kg_per_l, expected):
        assert size_penalty(kg_per_l, 1_000_000) == expected


class TestEstimate:
    def test_product_of_factors(self):
        est = estimate_machine_rigidity(printnc_like())
        # 150 kg / 75 L = 2 kg/L -> 0.9
        assert est.rigidity_factor == pytest.approx(0.6 * 1.0 * 0.95 * 0.9)
        assert est.confidence == pytest.approx(0.9)
        assert est.nearest_known_machines[0].machine_id == "printnc"

    def test_span_and_aspect_penalties(self):
        est = estimate_machine_rigidity(printnc_like(max_span_mm=2000, height_to_width_ratio=2.0))
        assert est.rigidity_factor == pytest.approx(0.6 * 0.95 * 0.9 * 0.9 * 0.8)
        assert len(est.warnings) == 2

    def test_clamped(self):
        est = estimate_machine_rigidity(printnc_like(weight_kg=1, frame="aluminum_extrusion", motion="belt_drive",
                                                     mount="router_clamp", max_span_mm=6000))
        assert est.rigidity_factor == 0.1
        assert "outside typical range" in est.warnings[-1]

    def test_similar_machines_sorted(self):
        est = estimate_machine_rigidity(printnc_like())
        scores = [m.similarity for m in est.nearest_known_machines]
        assert scores == sorted(scores, reverse=True)
        assert len(scores) <= 3

    def test_breakdown(self):
        est = estimate_machine_rigidity(printnc_like())
        assert set(est.breakdown) == {"frame_type", "motion_system", "spindle_mount", "size_analysis"}

    def test_rejects_non_positive(self):
        with pytest.raises(InvalidParameterError):
            estimate_machine_rigidity(printnc_like(weight_kg=0))

    def test_unknown_frame(self):
        with pytest.raises(UnknownTypeError):
            printnc_like(frame="bamboo")


def test_framework_report_covers_reference_machines():
    report = validate_estimation_framework()
    assert len(report.predictions) == 6
    assert report.max_error >= report.average_error >= 0
