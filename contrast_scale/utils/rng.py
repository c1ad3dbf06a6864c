"""Seedable random source for the separation search.

The search never touches global random state. It receives a
``numpy.random.Generator`` (anything exposing ``integers(low, high)`` works)
so that runs are reproducible when a seed is given and independent when not.

Reproducibility:
    The seed actually used (drawn from OS entropy when none is configured) is
    returned alongside the generator so scripts can log it and a run can be
    replayed with ``--seed``.
"""

from typing import Optional, Protocol, Tuple

import numpy as np


class RandomSource(Protocol):
    """Minimal interface the search needs from a random generator."""

    def integers(self, low: int, high: int) -> int:
        ...


def make_rng(seed: Optional[int] = None) -> Tuple[np.random.Generator, int]:
    """Create a PCG64 generator.

    Parameters
    ----------
    seed : int, optional
        Seed for reproducible runs; None draws one from OS entropy

    Returns
    -------
    Tuple[np.random.Generator, int]
        Generator and the seed it was built from
    """
    if seed is None:
        seed = int(np.random.SeedSequence().entropy % (2 ** 63))
    return np.random.default_rng(seed), seed
