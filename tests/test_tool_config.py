import pytest

from millcalc.errors import InvalidParameterError, UnknownTypeError
from millcalc.geometry import effective_diameter
from millcalc.models import ToolType
from millcalc.tool_config import ToolConfiguration, create_tool_from_configuration


class TestToolConfiguration:
    def test_default_is_complete(self):
        assert ToolConfiguration.default().missing_fields() == []

    def test_from_form_strings(self):
        config = ToolConfiguration.from_dict({"tool_type": "vbit", "diameter_mm": "0.2", "flutes": "2",
                                              "stickout_mm": "", "material": "carbide", "coating": ""})
        assert config.diameter_mm == 0.2
        assert config.flutes == 2
        assert config.stickout_mm is None
        assert config.missing_fields() == ["stickout_mm", "coating", "vbit_angle_deg"]


class TestCreateTool:
    def test_defaults_engagement_from_diameter(self):
        config = ToolConfiguration(tool_type="endmill_flat", diameter_mm=10.0, flutes=4, stickout_mm=30.0,
                                   material="carbide", coating="TiAlN")
        tool = create_tool_from_configuration(config)
        assert tool.id == "custom_tool"
        assert tool.type is ToolType.ENDMILL_FLAT
        assert tool.default_doc_mm == pytest.approx(5.0)
        assert tool.default_woc_mm == pytest.approx(3.0)

    def test_vbit_metadata(self):
        config = ToolConfiguration(tool_type="vbit", diameter_mm=0.2, flutes=2, stickout_mm=15.0,
                                   material="carbide", coating="uncoated", vbit_angle_deg=90.0)
        tool = create_tool_from_configuration(config, "engraver")
        assert tool.id == "engraver"
        assert effective_diameter(tool, 1.0) == pytest.approx(2.2)

    def test_facemill_body(self):
        config = ToolConfiguration(tool_type="facemill", diameter_mm=50.0, flutes=5, stickout_mm=40.0,
                                   material="carbide", coating="TiAlN", body_diameter_mm=63.0)
        assert effective_diameter(create_tool_from_configuration(config)) == 63.0

    def test_missing_diameter(self):
        config = ToolConfiguration(tool_type="endmill_flat", flutes=2, stickout_mm=20.0,
                                   material="carbide", coating="TiN")
        with pytest.raises(InvalidParameterError):
            create_tool_from_configuration(config)

    def test_unknown_type(self):
        config = ToolConfiguration(tool_type="ballnose", diameter_mm=6.0, flutes=2, stickout_mm=20.0,
                                   material="carbide", coating="TiN")
        with pytest.raises(UnknownTypeError):
            create_tool_from_configuration(config)
