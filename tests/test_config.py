"""
Unit tests for run configuration.

Tests cover:
- Defaults and validation
- JSON file loading and JSON string overrides
- Precedence of defaults, file, flags and overrides
"""

import json

import pytest

from mbcs.config import SECTIONS, RunConfig, load_config, parse_overrides
from mbcs.__main__ import parse_args, build_config


class TestRunConfig:
    """Tests for RunConfig."""

    def test_defaults(self):
        """Test default configuration runs every section."""
        config = RunConfig()
        assert config.sections == SECTIONS
        assert config.pp == 0.6
        assert config.k1 is None
        assert config.cycle_lengths == [5.0, 10.0, 15.0]

    def test_unknown_section(self):
        """Test invalid section raises error."""
        with pytest.raises(ValueError, match="Unknown section"):
            RunConfig(sections=["astronomy"])

    def test_invalid_rate(self):
        """Test non-positive rate constants raise errors."""
        with pytest.raises(ValueError, match="k1 must be > 0"):
            RunConfig(k1=-0.1)

    def test_dict_roundtrip(self):
        """Test to_dict / from_dict."""
        config = RunConfig(r=1.5, counts=[1, 2, 3])
        assert RunConfig.from_dict(config.to_dict()) == config

    def test_unknown_key(self):
        """Test unknown keys are rejected."""
        with pytest.raises(ValueError, match="Unknown config key"):
            RunConfig.from_dict({"temperature": 300})

    def test_updated_ignores_none(self):
        """Test None overrides keep existing values."""
        config = RunConfig(pp=0.4).updated({"pp": None, "dd": 0.1})
        assert config.pp == 0.4
        assert config.dd == 0.1

    def test_updated_revalidates(self):
        """Test overrides go through validation."""
        with pytest.raises(ValueError, match="r must be > 0"):
            RunConfig().updated({"r": 0.0})


class TestLoading:
    """Tests for config files and JSON overrides."""

    def test_load_config(self, tmp_path):
        """Test loading a JSON file."""
        path = tmp_path / "run.json"
        path.write_text(json.dumps({"sections": ["growth"], "r": 1.2}))
        config = load_config(path)
        assert config.sections == ["growth"]
        assert config.r == 1.2

    def test_missing_file(self, tmp_path):
        """Test a missing file raises error."""
        with pytest.raises(ValueError, match="config file not found"):
            load_config(tmp_path / "missing.json")

    def test_not_an_object(self, tmp_path):
        """Test the file must hold a JSON object."""
        path = tmp_path / "run.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError, match="JSON object"):
            load_config(path)

    def test_parse_overrides(self):
        """Test JSON strings of overrides."""
        assert parse_overrides(None) == {}
        assert parse_overrides('{"Ea": 5}') == {"Ea": 5}
        with pytest.raises(ValueError, match="not valid JSON"):
            parse_overrides("{Ea: 5}")
        with pytest.raises(ValueError, match="JSON object"):
            parse_overrides("[5]")

    def test_precedence(self, tmp_path):
        """Test file < flags < --params."""
        path = tmp_path / "run.json"
        path.write_text(json.dumps({"pp": 0.3, "dd": 0.3, "Ea": 2.0}))
        args = parse_args(["--config", str(path), "--pp", "0.5", "--section", "stemcells",
                           "--params", '{"dd": 0.1}'])
        config = build_config(args)
        assert config.pp == 0.5
        assert config.dd == 0.1
        assert config.Ea == 2.0
        assert config.sections == ["stemcells"]
