"""First pass: find the geographic rectangle covered by the valid data."""

import logging
import math
import time
from dataclasses import dataclass
from functools import reduce
from typing import List, Optional, Tuple

from .config import Config
from .errors import NoValidDataFound, OutOfRangeCoordinate, RecordError
from .records import Point, iter_data_lines, iter_shard_lines, parse_record, plan_shards
from .reporting import ErrorTally, summarize_errors
from . import sharding

logger = logging.getLogger(__name__)


@dataclass
class Bounds:
    """Running min/max of latitude and longitude plus the number of points seen.

    An empty Bounds holds +inf minima and -inf maxima; those values are
    placeholders, not coordinates.
    """

    min_lat: float = math.inf
    max_lat: float = -math.inf
    min_lon: float = math.inf
    max_lon: float = -math.inf
    point_count: int = 0

    @classmethod
    def fixed(cls, min_lat: float, max_lat: float, min_lon: float, max_lon: float) -> "Bounds":
        """A preset rectangle that no points have been counted into."""
        return cls(min_lat, max_lat, min_lon, max_lon, 0)

    def add(self, point: Point) -> None:
        self.min_lat = min(self.min_lat, point.lat)
        self.max_lat = max(self.max_lat, point.lat)
        self.min_lon = min(self.min_lon, point.lon)
        self.max_lon = max(self.max_lon, point.lon)
        self.point_count += 1

    def merge(self, other: "Bounds") -> "Bounds":
        """Fold ``other`` into this accumulator and return it."""
        self.min_lat = min(self.min_lat, other.min_lat)
        self.max_lat = max(self.max_lat, other.max_lat)
        self.min_lon = min(self.min_lon, other.min_lon)
        self.max_lon = max(self.max_lon, other.max_lon)
        self.point_count += other.point_count
        return self

    @property
    def lat_range(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def lon_range(self) -> float:
        return self.max_lon - self.min_lon

    def contains(self, point: Point) -> bool:
        return (self.min_lat <= point.lat <= self.max_lat
                and self.min_lon <= point.lon <= self.max_lon)

    def is_valid(self) -> bool:
        return self.point_count > 0 and all(
            math.isfinite(v) for v in (self.min_lat, self.max_lat, self.min_lon, self.max_lon))

    def has_range(self) -> bool:
        return self.is_valid() and (self.max_lat > self.min_lat or self.max_lon > self.min_lon)

    def __str__(self) -> str:
        return (f"Bounds [Lat: {self.min_lat:.4f} to {self.max_lat:.4f}, "
                f"Lon: {self.min_lon:.4f} to {self.max_lon:.4f}], Points: {self.point_count}")


def _accept(config: Config, line: str, tally: ErrorTally, where: str) -> Optional[Point]:
    """Parse and sanity check one line; problems are recorded on ``tally``."""
    try:
        point = parse_record(line, config.delimiter, config.lat_column, config.lon_column,
                             config.delimiter_regex)
        if point is not None and not point.on_globe():
            raise OutOfRangeCoordinate(point.lat, point.lon)
    except (RecordError, OutOfRangeCoordinate) as e:
        tally.record("(%s): Skipping line: %s [%s]", where, e, line.strip())
        return None
    return point


def check_bounds(bounds: Bounds) -> Bounds:
    """Reject an empty result and warn when all points coincide."""
    if not bounds.is_valid():
        raise NoValidDataFound("No valid coordinate data found in the file matching config criteria.")
    if not bounds.has_range():
        logger.warning("All valid points are identical or very close.")
    return bounds


def find_bounds(config: Config) -> Bounds:
    """Scan the data file once, sequentially, and return the bounds of its valid points.

    Raises:
        NoValidDataFound: no line produced a point inside [-90, 90] x [-180, 180]
        IOFailure: the file could not be read
    """
    start_time = time.perf_counter()
    bounds = Bounds()
    tally = ErrorTally(logger, config.error_report_limit)

    for line_number, line in iter_data_lines(config.file_path, config.skip_header_lines):
        point = _accept(config, line, tally, f"Pass 1, Line {line_number}")
        if point is not None:
            bounds.add(point)

    summarize_errors(logger, tally.count, config.error_report_limit)
    check_bounds(bounds)
    logger.info("Sequential bounds processing completed in %.3f seconds.",
                time.perf_counter() - start_time)
    logger.info("Bounds found using sequential processing: %s", bounds)
    return bounds


def _bounds_for_shard(config: Config, start: int, end: int) -> Tuple[Bounds, int]:
    tally = ErrorTally(logger, config.error_report_limit, shared=sharding.shared_counter("errors"))
    bounds = Bounds()
    for line in iter_shard_lines(config.file_path, start, end):
        point = _accept(config, line, tally, f"Pass 1 Parallel, bytes {start}-{end}")
        if point is not None:
            bounds.add(point)
    return bounds, tally.count


def merge_bounds(partials: List[Bounds]) -> Bounds:
    return reduce(Bounds.merge, partials, Bounds())


def find_bounds_parallel(config: Config, shard_count: Optional[int] = None) -> Bounds:
    """Like find_bounds, but the file body is split into shards scanned by worker processes.

    Each shard builds its own Bounds; the partial results are merged at the end,
    so the outcome does not depend on where the shard boundaries fall.
    """
    logger.info("Finding data bounds using parallel workers...")
    start_time = time.perf_counter()
    workers = sharding.worker_count(config.workers)
    shards = plan_shards(config.file_path, config.skip_header_lines, shard_count or workers)

    results, _ = sharding.run_sharded(_bounds_for_shard, shards, workers, config)
    bounds = merge_bounds([partial for partial, _ in results])
    errors = sum(count for _, count in results)

    logger.info("Parallel bounds finding completed in %.3f seconds.", time.perf_counter() - start_time)
    summarize_errors(logger, errors, config.error_report_limit)
    check_bounds(bounds)
    logger.info("Bounds found using parallel processing: %s", bounds)
    return bounds
