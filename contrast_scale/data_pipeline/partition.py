"""Group catalog colors into lightness buckets.

One streaming pass over the catalog builds ``{rounded_ok_l: [Color, ...]}``.
The full catalog (16.7M colors) is the only large in-memory structure of a
search run; buckets are read-only once built.

Public API:
    partition_catalog(colors, total, update_interval) → ColorBuckets
    bucket_availability(buckets, table, interval) → List[BucketSample]
"""

import logging
import time
from typing import Dict, Iterable, List, NamedTuple, Optional

from .catalog import Color
from .lightness_table import LightnessTable

logger = logging.getLogger(__name__)

ColorBuckets = Dict[float, List[Color]]


class BucketSample(NamedTuple):
    """How many catalog colors sit at one step's target lightness."""
    step: int
    lightness: float
    count: int


def _log_load_progress(loaded: int, total: int, start: float) -> None:
    elapsed = max(time.perf_counter() - start, 1e-9)
    rate = loaded / elapsed
    remaining = (total - loaded) / rate if rate > 0 else 0.0
    progress = loaded / total * 100 if total else 100.0
    logger.info(
        f"Progress: {loaded:,} / {total:,} ({progress:.1f}%) - "
        f"{rate:.0f} colors/sec - ETA: {remaining:.0f}s"
    )


def partition_catalog(
    colors: Iterable[Color],
    total: Optional[int] = None,
    update_interval: int = 500_000,
) -> ColorBuckets:
    """Group colors by rounded OKHSL lightness.

    Parameters
    ----------
    colors : Iterable[Color]
        Catalog stream (e.g. ``catalog.iter_colors(path)``)
    total : int, optional
        Expected row count; enables percentage and ETA progress lines
    update_interval : int
        Rows between progress lines, default 500,000

    Returns
    -------
    ColorBuckets
        Lightness → colors, in catalog order within each bucket
    """
    buckets: ColorBuckets = {}
    loaded = 0
    start = time.perf_counter()

    for c in colors:
        bucket = buckets.get(c.rounded_ok_l)
        if bucket is None:
            bucket = buckets[c.rounded_ok_l] = []
        bucket.append(c)
        loaded += 1

        if total and loaded % update_interval == 0:
            _log_load_progress(loaded, total, start)

    elapsed = time.perf_counter() - start
    logger.info(f"✓ Loaded {loaded:,} colors in {elapsed:.1f}s")
    logger.info(f"✓ Grouped into {len(buckets)} lightness buckets")
    return buckets


def bucket_availability(
    buckets: ColorBuckets,
    table: LightnessTable,
    interval: int = 200,
) -> List[BucketSample]:
    """Sample bucket sizes every ``interval`` steps (0, interval, ..., ≤ scale_max)."""
    samples = []
    for step in range(0, table.scale_max + 1, interval):
        lightness = table[step]
        samples.append(BucketSample(step, lightness, len(buckets.get(lightness, ()))))
    return samples
