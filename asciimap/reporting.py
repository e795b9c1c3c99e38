"""Console logging and capped per-line error reporting."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "asciimap"


def configure_logging(verbose: bool = False, level: Optional[int] = None) -> None:
    """Send asciimap log records to stderr through rich.

    ``level`` overrides the level chosen by ``verbose``; worker processes use it
    to match their parent.
    """
    root = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    if level is None:
        level = logging.DEBUG if verbose else logging.INFO
    root.setLevel(level)


class ErrorTally:
    """Counts per-line problems and logs them until a report limit is reached.

    Args:
        logger: Where individual reports go
        limit: How many problems to report individually; None reports all
        shared: Optional multiprocessing.Value('q') holding a count shared by
            several worker processes. When given, the limit applies to the
            shared count as seen at increment time.
    """

    def __init__(self, logger: logging.Logger, limit: Optional[int], shared=None):
        self.logger = logger
        self.limit = limit
        self.shared = shared
        self.count = 0

    def record(self, message: str, *args) -> int:
        """Count one problem, log it if under the limit, and return its ordinal."""
        self.count += 1
        if self.shared is None:
            ordinal = self.count
        else:
            with self.shared.get_lock():
                self.shared.value += 1
                ordinal = self.shared.value
        if self.limit is None or ordinal <= self.limit:
            self.logger.warning(message, *args)
        return ordinal


def summarize_errors(logger: logging.Logger, total: int, limit: Optional[int],
                     what: str = "parse errors") -> None:
    """Log the closing tally for one pass."""
    if limit is not None and total > limit:
        logger.warning("Encountered %d total %s (first %d shown).", total, what, limit)
    elif total > 0:
        logger.warning("Encountered %d total %s.", total, what)
