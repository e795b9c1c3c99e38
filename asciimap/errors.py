"""Exception hierarchy for the plotting pipeline.

Per-line problems (RecordError, OutOfRangeCoordinate) are absorbed by the
passes that read the file. NoValidDataFound, IOFailure and ConfigError end the
run; only the command line entry point turns them into an exit status.
"""


class AsciiMapError(Exception):
    """Base error for asciimap."""


class RecordError(AsciiMapError):
    """A data line could not be turned into a point."""


class MalformedLine(RecordError):
    """The line has too few fields for the configured columns."""

    def __init__(self, found: int, needed: int):
        self.found = found
        self.needed = needed
        super().__init__(f"expected at least {needed} fields, found {found}")


class NonNumericField(RecordError):
    """A latitude or longitude field is not a finite decimal number."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"not a decimal number: {value!r}")


class OutOfRangeCoordinate(AsciiMapError):
    """A point falls outside the accepted rectangle."""

    def __init__(self, lat: float, lon: float):
        self.lat = lat
        self.lon = lon
        super().__init__(f"coordinate out of range (Lat:{lat}, Lon:{lon})")


class NoValidDataFound(AsciiMapError):
    """No line of the data file produced a usable point."""


class IOFailure(AsciiMapError):
    """The data file could not be read."""

    def __init__(self, path: str, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"cannot read data file '{path}': {cause}")

    def __reduce__(self):
        return (type(self), (self.path, self.cause))


class ConfigError(AsciiMapError):
    """Configuration is missing or invalid."""
