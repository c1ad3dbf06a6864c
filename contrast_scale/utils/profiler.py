"""Lightweight wall-clock timing for the long phases.

Provides:
    - timer(): Context manager for wall-clock timing with optional sink
    - log_sink(): Sink factory that reports timings through a logger

Used to measure:
    - Catalog generation
    - Catalog load and partitioning
    - Lightness table computation
    - The separation search itself
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Optional


@contextmanager
def timer(name: str, sink: Optional[Callable[[str, float], None]] = None):
    """Context manager for wall-clock timing.

    Parameters
    ----------
    name : str
        Timer name (for logging/display)
    sink : Optional[Callable[[str, float], None]]
        Optional callback(name, elapsed_seconds)
        If None, prints to stdout

    Yields
    ------
    None

    Examples
    --------
    >>> with timer("load_catalog", sink=log_sink(logger)):
    ...     buckets = partition_catalog(iter_colors(path))
    load_catalog: 41.873 s
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if sink is not None:
            sink(name, elapsed)
        else:
            print(f"{name}: {elapsed:.3f} s")


def log_sink(logger: logging.Logger, level: int = logging.INFO) -> Callable[[str, float], None]:
    """Build a timer sink that logs ``"<name>: <seconds> s"``."""
    def _sink(name: str, elapsed: float) -> None:
        logger.log(level, "%s: %.3f s", name, elapsed)
    return _sink
