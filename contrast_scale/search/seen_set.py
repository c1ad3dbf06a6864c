"""Membership sets for already-tested color pairs.

The search needs ``insert(key)`` / ``contains(key)`` over up to 10⁸ pair
keys per distance level. Two implementations share that capability:

    - BloomSeenSet: wraps ``rbloom.Bloom``, sized for an expected item count
      and false-positive rate. No false negatives; false positives at roughly
      the configured rate, which only makes the search skip a few untested
      pairs.
    - ExactSeenSet: plain Python set. Deterministic, for tests and small
      catalogs.

The search builds a fresh set at every distance level through a factory, so
sets are never shared or reused.
"""

import logging
from typing import Callable, Protocol, Set

from rbloom import Bloom

from ..utils.validators import SeenSetConfig

logger = logging.getLogger(__name__)


class SeenSet(Protocol):
    """Capability used by the search to skip repeated pairs."""

    def insert(self, key: str) -> None:
        ...

    def contains(self, key: str) -> bool:
        ...

    def __len__(self) -> int:
        ...


SeenSetFactory = Callable[[], SeenSet]


class ExactSeenSet:
    """Exact membership backed by a Python set."""

    def __init__(self):
        self._keys: Set[str] = set()

    def insert(self, key: str) -> None:
        self._keys.add(key)

    def contains(self, key: str) -> bool:
        return key in self._keys

    def __contains__(self, key: str) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)


class BloomSeenSet:
    """Approximate membership with a Bloom filter.

    Parameters
    ----------
    expected_items : int
        Insertions the filter is sized for
    false_positive_rate : float
        Target false-positive probability at ``expected_items`` insertions

    Notes
    -----
    ``len()`` counts insert calls, not distinct keys. Keys are hashed with
    the builtin ``hash``, so a filter is only meaningful within one process.
    """

    def __init__(self, expected_items: int, false_positive_rate: float):
        if expected_items <= 0:
            raise ValueError(f"expected_items must be positive, got {expected_items}")
        if not 0.0 < false_positive_rate < 1.0:
            raise ValueError(f"false_positive_rate must be in (0, 1), got {false_positive_rate}")

        self.expected_items = expected_items
        self.false_positive_rate = false_positive_rate
        self._bloom = Bloom(expected_items, false_positive_rate)
        self._count = 0

    def insert(self, key: str) -> None:
        self._bloom.add(key)
        self._count += 1

    def contains(self, key: str) -> bool:
        return key in self._bloom

    def __contains__(self, key: str) -> bool:
        return key in self._bloom

    def __len__(self) -> int:
        return self._count

    @property
    def size_bytes(self) -> int:
        return self._bloom.size_in_bits // 8


def make_seen_set_factory(cfg: SeenSetConfig) -> SeenSetFactory:
    """Factory producing identically configured, empty seen-sets."""
    if cfg.kind == "exact":
        logger.info("Seen-set: exact (Python set)")
        return ExactSeenSet

    def factory() -> BloomSeenSet:
        return BloomSeenSet(cfg.expected_items, cfg.false_positive_rate)

    logger.info(
        f"Bloom filter sized for {cfg.expected_items:,} items with "
        f"{cfg.false_positive_rate * 100:.1f}% false positive rate"
    )
    return factory
