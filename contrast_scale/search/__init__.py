"""Minimum lightness separation search.

Modules:
    - separation: adaptive randomized search and its records
    - seen_set: Bloom and exact pair-membership sets
    - report: text reports (failures, success, availability)
"""

from . import report
from . import seen_set
from . import separation

from .seen_set import BloomSeenSet, ExactSeenSet, make_seen_set_factory
from .separation import (
    AdaptiveSeparationSearch,
    ContrastFailure,
    PairTest,
    SearchResult,
    pair_key,
)

__all__ = [
    'report',
    'seen_set',
    'separation',
    'AdaptiveSeparationSearch',
    'BloomSeenSet',
    'ContrastFailure',
    'ExactSeenSet',
    'PairTest',
    'SearchResult',
    'make_seen_set_factory',
    'pair_key',
]
