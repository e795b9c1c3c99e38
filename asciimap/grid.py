"""Second pass: count the points that fall into each cell of the map grid."""

import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .bounds import Bounds
from .config import Config
from .errors import RecordError
from .records import iter_data_lines, iter_shard_lines, parse_record, plan_shards
from .reporting import ErrorTally, summarize_errors
from . import sharding

logger = logging.getLogger(__name__)


class DensityGrid:
    """Point counts for a ``height`` x ``width`` grid, stored row-major in one flat list.

    Row 0 is the northern edge, column 0 the western edge.
    """

    def __init__(self, width: int, height: int, cells: Optional[List[int]] = None):
        self.width = width
        self.height = height
        self.cells = cells if cells is not None else [0] * (width * height)
        if len(self.cells) != width * height:
            raise ValueError(f"expected {width * height} cells, got {len(self.cells)}")

    def increment(self, row: int, col: int) -> None:
        self.cells[row * self.width + col] += 1

    def __getitem__(self, key: Tuple[int, int]) -> int:
        row, col = key
        return self.cells[row * self.width + col]

    def merge(self, other: "DensityGrid") -> "DensityGrid":
        """Add ``other`` into this grid cell by cell and return it."""
        if (other.width, other.height) != (self.width, self.height):
            raise ValueError(
                f"cannot merge a {other.width}x{other.height} grid into a {self.width}x{self.height} grid")
        self.cells = [a + b for a, b in zip(self.cells, other.cells)]
        return self

    def max_count(self) -> int:
        return max(self.cells, default=0)

    def total(self) -> int:
        return sum(self.cells)

    def rows(self) -> List[List[int]]:
        return [self.cells[y * self.width:(y + 1) * self.width] for y in range(self.height)]

    def __eq__(self, other) -> bool:
        if not isinstance(other, DensityGrid):
            return NotImplemented
        return (self.width, self.height, self.cells) == (other.width, other.height, other.cells)

    def __repr__(self) -> str:
        return f"DensityGrid({self.width}x{self.height}, total={self.total()})"


@dataclass
class PopulateResult:
    grid: DensityGrid
    points_placed: int = 0
    parse_errors: int = 0
    out_of_bounds: int = 0


def cell_for(lat: float, lon: float, bounds: Bounds, width: int, height: int) -> Tuple[int, int]:
    """Map a point inside ``bounds`` to its ``(row, col)`` cell.

    Higher latitudes get smaller row numbers so north is drawn at the top. A
    zero-width range puts every point in the middle row or column. Points on
    the max edges are clamped into the last row or column.
    """
    lat_range = bounds.lat_range
    lon_range = bounds.lon_range

    if lon_range == 0:
        col = width // 2
    else:
        col = int(((lon - bounds.min_lon) / lon_range) * width)

    if lat_range == 0:
        row = height // 2
    else:
        row = int(((bounds.max_lat - lat) / lat_range) * height)

    col = max(0, min(width - 1, col))
    row = max(0, min(height - 1, row))
    return row, col


def _place(config: Config, bounds: Bounds, line: str, grid: DensityGrid,
           errors: ErrorTally, outside: ErrorTally, where: str) -> bool:
    """Parse one line and count it into ``grid``; returns True if it was placed."""
    try:
        point = parse_record(line, config.delimiter, config.lat_column, config.lon_column,
                             config.delimiter_regex)
    except RecordError as e:
        errors.record("(%s): Skipping line: %s [%s]", where, e, line.strip())
        return False
    if point is None:
        return False
    if not bounds.contains(point):
        outside.record("(%s): Skipping point outside bounds (Lat: %s, Lon: %s)",
                       where, point.lat, point.lon)
        return False
    row, col = cell_for(point.lat, point.lon, bounds, grid.width, grid.height)
    grid.increment(row, col)
    return True


def populate(config: Config, bounds: Bounds) -> PopulateResult:
    """Re-read the data file sequentially and count each in-bounds point into its cell.

    Raises:
        IOFailure: the file could not be read
    """
    logger.info("Populating density grid...")
    start_time = time.perf_counter()
    result = PopulateResult(DensityGrid(config.map_width, config.map_height))
    errors = ErrorTally(logger, config.error_report_limit)
    outside = ErrorTally(logger, config.error_report_limit)

    for line_number, line in iter_data_lines(config.file_path, config.skip_header_lines):
        if _place(config, bounds, line, result.grid, errors, outside, f"Pass 2, Line {line_number}"):
            result.points_placed += 1

    result.parse_errors = errors.count
    result.out_of_bounds = outside.count
    summarize_errors(logger, errors.count, config.error_report_limit)
    summarize_errors(logger, outside.count, config.error_report_limit, "points outside bounds")
    logger.info("Processed %d points during grid population in %.3f seconds.",
                result.points_placed, time.perf_counter() - start_time)
    return result


def _grid_for_shard(config: Config, bounds: Bounds, start: int, end: int) -> PopulateResult:
    result = PopulateResult(DensityGrid(config.map_width, config.map_height))
    errors = ErrorTally(logger, config.error_report_limit, shared=sharding.shared_counter("errors"))
    outside = ErrorTally(logger, config.error_report_limit, shared=sharding.shared_counter("outside"))
    where = f"Pass 2 Parallel, bytes {start}-{end}"
    for line in iter_shard_lines(config.file_path, start, end):
        if _place(config, bounds, line, result.grid, errors, outside, where):
            result.points_placed += 1
    result.parse_errors = errors.count
    result.out_of_bounds = outside.count
    return result


def merge_results(partials: List[PopulateResult], width: int, height: int) -> PopulateResult:
    merged = PopulateResult(DensityGrid(width, height))
    for partial in partials:
        merged.grid.merge(partial.grid)
        merged.points_placed += partial.points_placed
        merged.parse_errors += partial.parse_errors
        merged.out_of_bounds += partial.out_of_bounds
    return merged


def populate_parallel(config: Config, bounds: Bounds, shard_count: Optional[int] = None) -> PopulateResult:
    """Like populate, but each shard of the file fills its own grid in a worker process.

    The per-shard grids are summed cell by cell once every worker has finished.
    """
    logger.info("Populating density grid using parallel workers...")
    start_time = time.perf_counter()
    workers = sharding.worker_count(config.workers)
    shards = plan_shards(config.file_path, config.skip_header_lines, shard_count or workers)

    partials, _ = sharding.run_sharded(_grid_for_shard, shards, workers, config, bounds,
                                       counters=("errors", "outside"))
    result = merge_results(partials, config.map_width, config.map_height)

    summarize_errors(logger, result.parse_errors, config.error_report_limit)
    summarize_errors(logger, result.out_of_bounds, config.error_report_limit, "points outside bounds")
    logger.info("Processed %d points during parallel grid population in %.3f seconds.",
                result.points_placed, time.perf_counter() - start_time)
    return result
