"""Tests for configuration loading and validation."""

import pytest
import yaml

from asciimap.config import Config, config_from_dict, load_config
from asciimap.errors import ConfigError


def _write_yaml(temp_dir, data, name="asciimap.yaml"):
    path = temp_dir / name
    with open(path, 'w') as f:
        yaml.dump(data, f)
    return str(path)


def test_load_config_success(mock_config_file):
    config = load_config(mock_config_file)

    assert config.file_path.endswith("test-points.csv")
    assert config.map_width == 10
    assert config.map_height == 5
    assert config.delimiter == ","
    assert config.skip_header_lines == 1
    assert config.lat_column == 0
    assert config.lon_column == 1
    assert config.density_chars == " .123"
    assert config.parallel is False
    assert config.html_enabled is True
    assert config.html_path == "./map.html"
    assert config.error_count == 10
    assert config.error_report_limit == 10


def test_missing_file_uses_defaults_with_override(temp_dir):
    config = load_config(str(temp_dir / "absent.yaml"), {"input.file_path": "points.csv"})
    assert config.file_path == "points.csv"
    assert config.map_width == 80
    assert config.map_height == 24
    assert config.density_chars == " .:-=+*#%@"


def test_missing_file_without_data_path(temp_dir):
    with pytest.raises(ConfigError, match="Missing required configuration property: input.file_path"):
        load_config(str(temp_dir / "absent.yaml"))


def test_overrides_replace_file_values(mock_config_file):
    config = load_config(mock_config_file, {
        "map.width": 30,
        "map.height": None,
        "processing.parallel": True,
        "processing.workers": 3,
        "processing.error_count": -1,
    })
    assert config.map_width == 30
    assert config.map_height == 5
    assert config.parallel is True
    assert config.workers == 3
    assert config.error_report_limit is None


def test_invalid_dimensions(temp_dir):
    path = _write_yaml(temp_dir, {"input": {"file_path": "x.csv"}, "map": {"width": 0, "height": 5}})
    with pytest.raises(ConfigError, match="Map width and height must be >0"):
        load_config(path)


def test_invalid_yaml(temp_dir):
    path = temp_dir / "broken.yaml"
    path.write_text("input: [unclosed\n")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(str(path))


def test_yaml_must_be_mapping(temp_dir):
    path = temp_dir / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError):
        load_config(str(path))


@pytest.mark.parametrize("section, key, value, message", [
    ("input", "skip_header_lines", -1, "cannot be negative"),
    ("input", "delimiter", "", "delimiter"),
    ("input", "long_column", 0, "must be non-negative and different"),
    ("input", "lat_column", -2, "must be non-negative and different"),
    ("render", "density_chars", " ", "at least 2 characters"),
    ("processing", "error_count", -5, "error_count"),
    ("processing", "workers", 0, "workers"),
    ("map", "width", "wide", "must be an integer"),
    ("processing", "parallel", "sometimes", "true or false"),
])
def test_invalid_values(section, key, value, message):
    data = {"input": {"file_path": "x.csv"}}
    data.setdefault(section, {})[key] = value
    with pytest.raises(ConfigError, match=message):
        config_from_dict(data)


def test_two_character_alphabet_is_enough():
    config = config_from_dict({"input": {"file_path": "x.csv"}, "render": {"density_chars": " #"}})
    assert config.density_chars == " #"


def test_fixed_bounds_must_be_ordered():
    data = {
        "input": {"file_path": "x.csv"},
        "bounds": {"use_fixed": True, "fixed": {"min_lat": 10, "max_lat": 5, "min_lon": 0, "max_lon": 1}},
    }
    with pytest.raises(ConfigError, match="Fixed bounds are invalid"):
        config_from_dict(data)


def test_fixed_bounds_loaded():
    config = config_from_dict({
        "input": {"file_path": "x.csv"},
        "bounds": {"use_fixed": True, "fixed": {"min_lat": 10, "max_lat": 20, "min_lon": -5, "max_lon": 5}},
    })
    assert config.use_fixed_bounds
    assert (config.fixed_min_lat, config.fixed_max_lat) == (10.0, 20.0)
    assert (config.fixed_min_lon, config.fixed_max_lon) == (-5.0, 5.0)


def test_config_is_validated_on_construction():
    with pytest.raises(ConfigError):
        Config(file_path="x.csv", map_width=10, map_height=5, delimiter=",", skip_header_lines=0,
               density_chars=" .", lat_column=1, lon_column=1)


def test_invalid_regex_delimiter():
    data = {"input": {"file_path": "x.csv", "delimiter": "(", "delimiter_regex": True}}
    with pytest.raises(ConfigError, match="not a valid regular expression"):
        config_from_dict(data)


def test_regex_characters_are_fine_as_literal_delimiter():
    config = config_from_dict({"input": {"file_path": "x.csv", "delimiter": "("}})
    assert config.delimiter == "("
    assert config.delimiter_regex is False
