"""Configuration loading for asciimap.

Settings come from a YAML file (``asciimap.yaml`` by default) with nested
sections; anything the file leaves out falls back to DEFAULT_CONFIG. Command
line overrides are applied on top using dotted keys such as ``map.width``.
"""

import copy
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "asciimap.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "input": {
        "file_path": None,
        "delimiter": ",",
        "delimiter_regex": False,
        "skip_header_lines": 0,
        "lat_column": 0,
        "long_column": 1,
    },
    "map": {
        "width": 80,
        "height": 24,
    },
    "render": {
        "density_chars": " .:-=+*#%@",
    },
    "bounds": {
        "use_fixed": False,
        "fixed": {
            "min_lat": -90.0,
            "max_lat": 90.0,
            "min_lon": -180.0,
            "max_lon": 180.0,
        },
    },
    "processing": {
        "parallel": False,
        "workers": None,
        "error_count": 10,
    },
    "output": {
        "html_enabled": False,
        "html_path": "./map.html",
    },
}


@dataclass(frozen=True)
class Config:
    """Validated settings for one plotting run."""

    file_path: str
    map_width: int
    map_height: int
    delimiter: str
    skip_header_lines: int
    density_chars: str
    lat_column: int
    lon_column: int
    error_count: int = 10
    delimiter_regex: bool = False
    parallel: bool = False
    workers: Optional[int] = None
    use_fixed_bounds: bool = False
    fixed_min_lat: float = -90.0
    fixed_max_lat: float = 90.0
    fixed_min_lon: float = -180.0
    fixed_max_lon: float = 180.0
    html_enabled: bool = False
    html_path: Optional[str] = None

    def __post_init__(self):
        validate_config(self)

    @property
    def error_report_limit(self) -> Optional[int]:
        """Number of per-line errors to log individually, or None for all."""
        return None if self.error_count == -1 else self.error_count


def validate_config(config: Config) -> None:
    """Raise ConfigError if any setting is out of its accepted range."""
    if not config.file_path or not str(config.file_path).strip():
        raise ConfigError("Missing required configuration property: input.file_path")
    if config.map_width <= 0 or config.map_height <= 0:
        raise ConfigError("Map width and height must be >0.")
    if not config.delimiter:
        raise ConfigError("input.delimiter must not be empty.")
    if config.delimiter_regex:
        try:
            re.compile(config.delimiter)
        except re.error as e:
            raise ConfigError(f"input.delimiter is not a valid regular expression: {e}") from e
    if config.skip_header_lines < 0:
        raise ConfigError("input.skip_header_lines cannot be negative.")
    if not config.density_chars or len(config.density_chars) < 2:
        raise ConfigError("render.density_chars must contain at least 2 characters.")
    if config.lat_column < 0 or config.lon_column < 0 or config.lat_column == config.lon_column:
        raise ConfigError("input.lat_column and input.long_column must be non-negative and different.")
    if config.error_count < -1:
        raise ConfigError("processing.error_count must be >= 0, or -1 to report every error.")
    if config.workers is not None and config.workers <= 0:
        raise ConfigError("processing.workers must be a positive integer.")
    if config.use_fixed_bounds and (config.fixed_min_lat >= config.fixed_max_lat
                                    or config.fixed_min_lon >= config.fixed_max_lon):
        raise ConfigError("Fixed bounds are invalid: min must be less than max.")


def _merge(base: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``extra`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_overrides(data: Dict[str, Any], overrides: Dict[str, Any]) -> None:
    for dotted, value in overrides.items():
        if value is None:
            continue
        section = data
        *parents, leaf = dotted.split(".")
        for name in parents:
            section = section.setdefault(name, {})
        section[leaf] = value


def _as_int(value: Any, key: str, allow_none: bool = False) -> Optional[int]:
    if value is None and allow_none:
        return None
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be an integer, got {value!r}")


def _as_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be a number, got {value!r}")


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "on", "1"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no", "off", "0"):
        return False
    raise ConfigError(f"{key} must be true or false, got {value!r}")


def config_from_dict(data: Dict[str, Any]) -> Config:
    """Build a validated Config from nested settings (missing keys use defaults)."""
    settings = _merge(DEFAULT_CONFIG, data or {})
    source = settings["input"]
    grid = settings["map"]
    render = settings["render"]
    bounds = settings["bounds"]
    fixed = bounds.get("fixed") or {}
    processing = settings["processing"]
    output = settings["output"]

    file_path = source.get("file_path")
    density_chars = render.get("density_chars")

    return Config(
        file_path=str(file_path).strip() if file_path is not None else "",
        map_width=_as_int(grid.get("width"), "map.width"),
        map_height=_as_int(grid.get("height"), "map.height"),
        delimiter="" if source.get("delimiter") is None else str(source["delimiter"]),
        skip_header_lines=_as_int(source.get("skip_header_lines"), "input.skip_header_lines"),
        density_chars="" if density_chars is None else str(density_chars),
        lat_column=_as_int(source.get("lat_column"), "input.lat_column"),
        lon_column=_as_int(source.get("long_column"), "input.long_column"),
        error_count=_as_int(processing.get("error_count"), "processing.error_count"),
        delimiter_regex=_as_bool(source.get("delimiter_regex"), "input.delimiter_regex"),
        parallel=_as_bool(processing.get("parallel"), "processing.parallel"),
        workers=_as_int(processing.get("workers"), "processing.workers", allow_none=True),
        use_fixed_bounds=_as_bool(bounds.get("use_fixed"), "bounds.use_fixed"),
        fixed_min_lat=_as_float(fixed.get("min_lat"), "bounds.fixed.min_lat"),
        fixed_max_lat=_as_float(fixed.get("max_lat"), "bounds.fixed.max_lat"),
        fixed_min_lon=_as_float(fixed.get("min_lon"), "bounds.fixed.min_lon"),
        fixed_max_lon=_as_float(fixed.get("max_lon"), "bounds.fixed.max_lon"),
        html_enabled=_as_bool(output.get("html_enabled"), "output.html_enabled"),
        html_path=output.get("html_path"),
    )


def load_config(config_path: str = DEFAULT_CONFIG_FILE,
                overrides: Optional[Dict[str, Any]] = None) -> Config:
    """Load configuration from a YAML file.

    A missing file is not an error: defaults are used and the data file must
    then come from ``overrides`` (``input.file_path``).

    Args:
        config_path: Path to the YAML settings file
        overrides: Dotted keys to replace after the file is read; None values are ignored
    """
    config_file = Path(config_path)
    data: Dict[str, Any] = {}
    if config_file.exists():
        logger.info("Loading configuration from %s", config_file)
        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read configuration file {config_file}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {config_file} must contain a mapping")
    else:
        logger.debug("Configuration file %s not found, using defaults", config_file)

    if overrides:
        _apply_overrides(data, overrides)

    return config_from_dict(data)
