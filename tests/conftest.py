"""Pytest configuration and shared fixtures for asciimap tests."""

import pytest
import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from asciimap.config import Config


# Six valid points spanning lat/lon 1.0..9.0, plus one line of each kind of
# problem: off the globe, non-numeric, too few fields, blank.
SAMPLE_POINTS = """lat,lon,name,value
1.0,1.0,sw,1
9.0,9.0,ne,2
5.0,5.0,mid,3
95.0,10.0,bad_lat,4
5.1,5.1,mid2,5
abc,5.0,text,6
1.5,8.5,se,7

7.0
8.5,1.5,nw,8
"""


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_file(temp_dir):
    """Write text to a file in the temporary directory and return its path."""
    def _write(name, text):
        path = temp_dir / name
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def sample_points_file(write_file):
    """The standard sample data file."""
    return write_file("test-points.csv", SAMPLE_POINTS)


@pytest.fixture
def make_config():
    """Build a Config for a data file; keyword arguments replace the test defaults."""
    def _make(file_path, **kwargs):
        settings = dict(
            file_path=file_path,
            map_width=10,
            map_height=5,
            delimiter=",",
            skip_header_lines=1,
            density_chars=" .123",
            lat_column=0,
            lon_column=1,
            error_count=10,
        )
        settings.update(kwargs)
        return Config(**settings)
    return _make


@pytest.fixture
def mock_config_file(temp_dir, sample_points_file):
    """Create a YAML configuration file pointing at the sample data."""
    config_path = temp_dir / "asciimap.yaml"
    config = {
        "input": {
            "file_path": sample_points_file,
            "delimiter": ",",
            "skip_header_lines": 1,
            "lat_column": 0,
            "long_column": 1,
        },
        "map": {"width": 10, "height": 5},
        "render": {"density_chars": " .123"},
        "processing": {"parallel": False, "error_count": 10},
        "output": {"html_enabled": True, "html_path": "./map.html"},
    }

    import yaml
    with open(config_path, 'w') as f:
        yaml.dump(config, f)

    return str(config_path)

