"""Reading data lines and turning them into points.

Both passes read the file through the helpers here so that header skipping,
line splitting and field parsing behave identically in each pass and in each
execution mode. Lines are read as bytes and split on ``\\n`` only, which keeps
the sequential reader and the byte-range shards in agreement about what a line
is.
"""

import math
import os
import re
from typing import Iterator, List, NamedTuple, Optional, Tuple

from .errors import IOFailure, MalformedLine, NonNumericField

ENCODING = "utf-8"


class Point(NamedTuple):
    """A parsed latitude/longitude pair."""

    lat: float
    lon: float

    def on_globe(self) -> bool:
        return -90.0 <= self.lat <= 90.0 and -180.0 <= self.lon <= 180.0


def _parse_coordinate(field: str) -> float:
    text = field.strip()
    try:
        value = float(text)
    except ValueError:
        raise NonNumericField(text)
    if not math.isfinite(value):
        raise NonNumericField(text)
    return value


def parse_record(line: str, delimiter: str, lat_column: int, lon_column: int,
                 regex: bool = False) -> Optional[Point]:
    """Parse one data line into a Point.

    Returns None for a blank line. The coordinates are not range checked.

    Raises:
        MalformedLine: fewer fields than the highest configured column needs
        NonNumericField: the latitude or longitude field is not a finite number
    """
    text = line.strip()
    if not text:
        return None
    parts = re.split(delimiter, text) if regex else text.split(delimiter)
    needed = max(lat_column, lon_column) + 1
    if len(parts) < needed:
        raise MalformedLine(len(parts), needed)
    return Point(_parse_coordinate(parts[lat_column]), _parse_coordinate(parts[lon_column]))


def iter_data_lines(path: str, skip_header_lines: int = 0) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, text)`` for every line after the header.

    Line numbers are 1-based and count header lines.
    """
    try:
        with open(path, 'rb') as f:
            for line_number, raw in enumerate(f, start=1):
                if line_number <= skip_header_lines:
                    continue
                yield line_number, raw.decode(ENCODING, errors='replace')
    except OSError as e:
        raise IOFailure(path, e) from e


def plan_shards(path: str, skip_header_lines: int, shard_count: int) -> List[Tuple[int, int]]:
    """Split the body of a file into newline-aligned byte ranges.

    The header lines are excluded. Each range ``(start, end)`` begins at the
    first byte of a line and ends just after a newline (or at end of file), so
    every data line lands in exactly one range. An empty body gives no ranges.
    """
    shard_count = max(1, shard_count)
    try:
        with open(path, 'rb') as f:
            for _ in range(skip_header_lines):
                if not f.readline():
                    break
            body_start = f.tell()
            size = os.fstat(f.fileno()).st_size
            if size <= body_start:
                return []

            step = max(1, (size - body_start) // shard_count)
            shards = []
            start = body_start
            while start < size:
                end = start + step
                if end >= size:
                    end = size
                else:
                    # Extend to the end of the line holding byte end-1
                    f.seek(end - 1)
                    f.readline()
                    end = f.tell()
                shards.append((start, end))
                start = end
            return shards
    except OSError as e:
        raise IOFailure(path, e) from e


def iter_shard_lines(path: str, start: int, end: int) -> Iterator[str]:
    """Yield the lines of one byte range, in file order."""
    try:
        with open(path, 'rb') as f:
            f.seek(start)
            position = start
            while position < end:
                raw = f.readline()
                if not raw:
                    break
                position += len(raw)
                yield raw.decode(ENCODING, errors='replace')
    except OSError as e:
        raise IOFailure(path, e) from e
