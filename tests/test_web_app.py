import pytest

from web_app import app as flask_app

FORM = {
    "machine_id": "printnc_standard",
    "spindle_id": "spindle_2_2kw",
    "tool_id": "endmill_6mm_carbide",
    "material_id": "aluminum_6061",
    "cut_type": "adaptive",
    "aggressiveness": "1.0",
    "user_doc_mm": "",
    "user_woc_mm": "",
    "override_flutes": "",
    "override_stickout_mm": "",
    "precision_level": "general",
}


@pytest.fixture
def client():
    flask_app.config.update(TESTING=True)
    with flask_app.test_client() as client:
        yield client


class TestPages:
    def test_home(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert b"Milling Calculator" in resp.data

    def test_mill_form(self, client):
        resp = client.get("/mill")
        assert resp.status_code == 200
        assert b"endmill_6mm_carbide" in resp.data

    def test_mill_calculate(self, client):
        resp = client.post("/mill", data=FORM)
        assert resp.status_code == 200
        assert b"Milling Results" in resp.data
        assert b"Error:" not in resp.data

    def test_mill_remembers_last_inputs(self, client):
        client.post("/mill", data=dict(FORM, user_doc_mm="1.5"))
        resp = client.get("/mill")
        assert b'value="1.5"' in resp.data

    def test_mill_shows_validation_error(self, client):
        resp = client.post("/mill", data=dict(FORM, tool_id="missing_tool"))
        assert resp.status_code == 200
        assert b"Error:" in resp.data
        assert b"missing_tool" in resp.data

    def test_rigidity_form(self, client):
        resp = client.post("/rigidity", data={
            "frame": "steel_welded", "motion": "ballscrew", "mount": "fixed_mount",
            "weight_kg": "150", "x_mm": "500", "y_mm": "500", "z_mm": "300",
            "max_span_mm": "", "height_to_width_ratio": "",
        })
        assert resp.status_code == 200
        assert b"Rigidity factor:" in resp.data


class TestCalculateApi:
    def test_ok(self, client):
        resp = client.post("/api/calculate", json=FORM)
        assert resp.status_code == 200
        data = resp.get_json()
        assert 6000 <= data["rpm"] <= 24000
        assert data["tool_type"] == "endmill_flat"
        assert isinstance(data["warnings"], list)

    def test_power_limited_is_scaled(self, client):
        resp = client.post("/api/calculate", json={
            "machine_id": "haas_vf2", "spindle_id": "spindle_300w_dc",
            "tool_id": "endmill_10mm_carbide_4fl", "material_id": "aluminum_6061", "cut_type": "slot",
        })
        data = resp.get_json()
        assert data["power_limited"] and data["scaling_applied"]

    def test_validation_error_is_400(self, client):
        resp = client.post("/api/calculate", json=dict(FORM, material_id="unobtainium"))
        assert resp.status_code == 400
        assert resp.get_json()["errors"][0]["field"] == "material_id"

    def test_malformed_number_is_422(self, client):
        resp = client.post("/api/calculate", json=dict(FORM, aggressiveness="lots"))
        assert resp.status_code == 422

    def test_tool_config(self, client):
        resp = client.post("/api/calculate", json=dict(FORM, tool_id="", tool_config={
            "tool_type": "vbit", "diameter_mm": 0.2, "flutes": 2, "stickout_mm": 15,
            "material": "carbide", "coating": "uncoated", "vbit_angle_deg": 90, "default_doc_mm": 1.0,
        }))
        assert resp.status_code == 200
        assert resp.get_json()["effective_diameter"] == pytest.approx(2.2)

    def test_malformed_tool_config_is_422(self, client):
        resp = client.post("/api/calculate", json=dict(FORM, tool_id="", tool_config={
            "tool_type": "endmill_flat", "diameter_mm": 6, "flutes": "two",
        }))
        assert resp.status_code == 422
        assert "tool_config" in resp.get_json()["error"]

    def test_hobby_option(self, client):
        resp = client.post("/api/calculate", json=dict(
            FORM, machine_id="3018_cnc", spindle_id="spindle_300w_dc", options={"hobby_mode": True},
        ))
        assert any(w["type"] == "hobby_strategy" for w in resp.get_json()["warnings"])


class TestOtherApis:
    def test_catalog(self, client):
        data = client.get("/api/catalog").get_json()
        assert "aluminum_6061" in data["materials"]
        assert "adaptive" in data["cut_types"]

    def test_optimize_around_tool(self, client):
        resp = client.post("/api/optimize", json={
            "tool_id": "endmill_6mm_carbide", "target_deflection_mm": 0.05, "force_n": 10, "rpm": 10000,
        })
        assert resp.status_code == 200
        assert len(resp.get_json()["suggestions"]) == 3

    def test_optimize_grid(self, client):
        resp = client.post("/api/optimize", json={
            "target_deflection_mm": 0.05, "force_n": 10, "rpm": 10000, "diameter_range_mm": [4, 12],
        })
        data = resp.get_json()
        assert data["total_evaluations"] == 300
        assert data["diameter_range_mm"] == [4, 12]

    def test_optimize_unknown_tool(self, client):
        resp = client.post("/api/optimize", json={
            "tool_id": "nope", "target_deflection_mm": 0.05, "force_n": 10, "rpm": 10000,
        })
        assert resp.status_code == 400

    def test_optimize_missing_fields(self, client):
        assert client.post("/api/optimize", json={"force_n": 10}).status_code == 422

    @pytest.mark.parametrize("extra", [
        {"diameter_range_mm": [6]},
        {"stickout_range_mm": ["short", "long"]},
        {"max_suggestions": "many"},
        {"effective_flutes": "two"},
    ])
    def test_optimize_malformed_is_422(self, client, extra):
        resp = client.post("/api/optimize", json=dict(
            {"target_deflection_mm": 0.05, "force_n": 10, "rpm": 10000}, **extra,
        ))
        assert resp.status_code == 422

    def test_rigidity(self, client):
        resp = client.post("/api/rigidity", json={
            "weight_kg": 150, "working_volume_mm3": 75_000_000,
            "frame": "steel_welded", "motion": "ballscrew", "mount": "fixed_mount",
        })
        assert resp.status_code == 200
        assert resp.get_json()["rigidity_factor"] == pytest.approx(0.513)

    def test_rigidity_unknown_frame(self, client):
        resp = client.post("/api/rigidity", json={
            "weight_kg": 150, "working_volume_mm3": 75_000_000,
            "frame": "bamboo", "motion": "ballscrew", "mount": "fixed_mount",
        })
        assert resp.status_code == 422

    @pytest.mark.parametrize("extra", [{"weight_kg": "heavy"}, {"max_span_mm": "wide"}])
    def test_rigidity_malformed_number_is_422(self, client, extra):
        resp = client.post("/api/rigidity", json=dict({
            "weight_kg": 150, "working_volume_mm3": 75_000_000,
            "frame": "steel_welded", "motion": "ballscrew", "mount": "fixed_mount",
        }, **extra))
        assert resp.status_code == 422
