"""Tests for [tool.nbmolviz2d] configuration loading."""

from __future__ import annotations

import pytest

from nbmolviz2d._config import VizConfig, find_pyproject, load_config
from nbmolviz2d.exceptions import SimulationConfigError


class TestLoadConfig:
    def test_empty_section_uses_defaults(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[tool.nbmolviz2d]\n")
        assert load_config(tmp_path) == VizConfig()

    def test_no_section(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')
        assert load_config(tmp_path) == VizConfig()

    def test_section_values(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(
            "[tool.nbmolviz2d]\nwidth = 640\nlink-distance = 30.0\nstrict = true\nunknown = 1\n"
        )
        config = load_config(tmp_path)
        assert config.width == 640
        assert config.link_distance == 30.0
        assert config.strict is True
        assert config.height == 300

    def test_found_from_subdirectory(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[tool.nbmolviz2d]\nheight = 120\n")
        sub = tmp_path / "a" / "b"
        sub.mkdir(parents=True)
        assert find_pyproject(sub) == (tmp_path / "pyproject.toml").resolve()
        assert load_config(sub).height == 120

    def test_frozen(self):
        with pytest.raises(AttributeError):
            VizConfig().width = 1


class TestVizConfig:
    def test_int_coerced_for_float_fields(self):
        config = VizConfig.from_mapping({"link-strength": 2, "width": 500})
        assert config.link_strength == 2.0
        assert isinstance(config.link_strength, float)
        assert config.width == 500

    def test_invalid_values(self):
        with pytest.raises(SimulationConfigError, match="alpha_min"):
            VizConfig(alpha_min=1.5)
        with pytest.raises(SimulationConfigError, match="size"):
            VizConfig(width=0)

    def test_with_overrides_skips_none(self):
        config = VizConfig(width=640).with_overrides(width=None, height=120)
        assert (config.width, config.height) == (640, 120)

    def test_bad_value_in_pyproject(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[tool.nbmolviz2d]\nvelocity-decay = 2\n")
        with pytest.raises(SimulationConfigError):
            load_config(tmp_path)
