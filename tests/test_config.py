"""
Tests for configuration management module.
"""

import pytest
import tempfile
from pathlib import Path
import json

from specrad.core.config import load_config, save_config, validate_radiation_config
from specrad.core.exceptions import ConfigurationError


def test_load_config_yaml(temp_config_file):
    """Test loading YAML configuration."""
    config = load_config(temp_config_file)
    assert "radiation" in config
    assert "bands" in config
    assert config["radiation"]["nlayer"] == 3


def test_load_config_json(sample_config_dict):
    """Test loading JSON configuration."""
    config_fd, config_path = tempfile.mkstemp(suffix=".json")

    try:
        with open(config_path, "w") as f:
            json.dump(sample_config_dict, f)

        config = load_config(config_path)
        assert config["bands"][0]["name"] == "sw"
    finally:
        Path(config_path).unlink()


def test_load_config_not_found():
    """Test loading non-existent config file."""
    with pytest.raises(FileNotFoundError):
        load_config("nonexistent.yaml")


def test_load_config_invalid_format(tmp_path):
    """Test loading invalid file format."""
    path = tmp_path / "config.txt"
    path.write_text("not yaml or json")

    with pytest.raises(ValueError, match="Unsupported config file format"):
        load_config(path)


def test_load_config_root_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")

    with pytest.raises(ConfigurationError, match="mapping"):
        load_config(path)


def test_save_config_yaml(sample_config_dict, tmp_path):
    """Test saving YAML configuration."""
    written = save_config(sample_config_dict, tmp_path / "out.yaml")
    assert written.exists()
    assert load_config(written) == sample_config_dict


def test_save_config_json(sample_config_dict, tmp_path):
    """Test saving JSON configuration."""
    written = save_config(sample_config_dict, tmp_path / "out.json")
    assert load_config(written) == sample_config_dict


def test_save_config_unknown_suffix(sample_config_dict, tmp_path):
    written = save_config(sample_config_dict, tmp_path / "out.cfg")
    assert written.suffix == ".yaml"
    assert written.exists()


def test_validate_radiation_config_valid(sample_config_dict):
    """Test validation of a valid configuration."""
    assert validate_radiation_config(sample_config_dict) is True


def test_validate_missing_radiation_section(sample_config_dict):
    del sample_config_dict["radiation"]
    with pytest.raises(ConfigurationError, match="radiation"):
        validate_radiation_config(sample_config_dict)


def test_validate_missing_nlayer(sample_config_dict):
    del sample_config_dict["radiation"]["nlayer"]
    with pytest.raises(ConfigurationError, match="nlayer"):
        validate_radiation_config(sample_config_dict)


def test_validate_bad_direction(sample_config_dict):
    sample_config_dict["radiation"]["directions"] = [[0.0, 0.0]]
    with pytest.raises(ConfigurationError, match="Direction cosine"):
        validate_radiation_config(sample_config_dict)


def test_validate_empty_bands(sample_config_dict):
    sample_config_dict["bands"] = []
    with pytest.raises(ConfigurationError, match="bands"):
        validate_radiation_config(sample_config_dict)


def test_validate_duplicate_band(sample_config_dict):
    sample_config_dict["bands"][1]["name"] = "sw"
    with pytest.raises(ConfigurationError, match="Duplicate band name"):
        validate_radiation_config(sample_config_dict)


@pytest.mark.parametrize("field", ["name", "grid", "absorbers"])
def test_validate_band_fields(sample_config_dict, field):
    del sample_config_dict["bands"][0][field]
    with pytest.raises(ConfigurationError, match=field):
        validate_radiation_config(sample_config_dict)


def test_validate_absorber_entries(sample_config_dict):
    del sample_config_dict["bands"][0]["absorbers"][0]["type"]
    with pytest.raises(ConfigurationError, match="'type' and 'name'"):
        validate_radiation_config(sample_config_dict)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
