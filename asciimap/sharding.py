"""Fan-out of per-shard work over a process pool.

Each shard is a byte range of the data file (see records.plan_shards). Workers
receive a set of named counters at start-up that all of them increment;
everything else they build is private and comes back as the task's return
value for the caller to merge.
"""

import logging
import multiprocessing
import os
from concurrent.futures import ProcessPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .reporting import PACKAGE_LOGGER, configure_logging

logger = logging.getLogger(__name__)

_shared_counters: Dict[str, object] = {}


def _init_worker(counters, log_level: int) -> None:
    global _shared_counters
    _shared_counters = counters
    configure_logging(level=log_level)


def shared_counter(name: str):
    """A counter shared with the other workers, or None outside a pool."""
    return _shared_counters.get(name)


def worker_count(requested: Optional[int] = None) -> int:
    return requested or os.cpu_count() or 1


def run_sharded(task: Callable, shards: List[Tuple[int, int]], workers: int, *args,
                counters: Sequence[str] = ("errors",)) -> Tuple[list, Dict[str, int]]:
    """Run ``task(*args, start, end)`` for every shard and wait for all of them.

    Returns:
        (results in shard order, final value of each shared counter)
    """
    shared = {name: multiprocessing.Value('q', 0) for name in counters}
    if not shards:
        return [], {name: 0 for name in counters}
    workers = max(1, min(workers, len(shards)))
    logger.debug("Dispatching %d shards to %d worker processes", len(shards), workers)
    log_level = logging.getLogger(PACKAGE_LOGGER).getEffectiveLevel()
    with ProcessPoolExecutor(max_workers=workers, initializer=_init_worker,
                             initargs=(shared, log_level)) as pool:
        futures = [pool.submit(task, *args, start, end) for start, end in shards]
        results = [future.result() for future in futures]
    return results, {name: value.value for name, value in shared.items()}
