"""Runs the two passes over the data file and renders the result."""

import logging
from dataclasses import dataclass

from .bounds import Bounds, find_bounds, find_bounds_parallel
from .config import Config
from .grid import DensityGrid, populate, populate_parallel
from .map_renderer import render_map

logger = logging.getLogger(__name__)


@dataclass
class PlotResult:
    bounds: Bounds
    grid: DensityGrid
    text: str
    points_placed: int
    parse_errors: int
    out_of_bounds: int


def resolve_bounds(config: Config) -> Bounds:
    """Bounds for the second pass: preset from config, or found by scanning the file."""
    if config.use_fixed_bounds:
        bounds = Bounds.fixed(config.fixed_min_lat, config.fixed_max_lat,
                              config.fixed_min_lon, config.fixed_max_lon)
        logger.info("Using fixed bounds: %s", bounds)
        return bounds
    logger.info("Finding data bounds...")
    if config.parallel:
        return find_bounds_parallel(config)
    return find_bounds(config)


def plot(config: Config) -> PlotResult:
    """Produce the text map for ``config``.

    Raises:
        NoValidDataFound: the first pass found no usable points
        IOFailure: the data file could not be read
    """
    bounds = resolve_bounds(config)
    if config.parallel:
        populated = populate_parallel(config, bounds)
    else:
        populated = populate(config, bounds)
    text = render_map(populated.grid, bounds, config.density_chars)
    return PlotResult(
        bounds=bounds,
        grid=populated.grid,
        text=text,
        points_placed=populated.points_placed,
        parse_errors=populated.parse_errors,
        out_of_bounds=populated.out_of_bounds,
    )
