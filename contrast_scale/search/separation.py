"""Adaptive search for the minimum safe lightness separation.

Hypothesis: any two colors whose target lightness levels are ``distance``
scale steps apart have WCAG contrast ≥ ``min_contrast``. The search tests the
hypothesis on random color pairs and escalates the distance on the first
counterexample:

    distance = initial_distance
    loop:
        step1 ~ U{s in [0, scale_max - distance] with both buckets non-empty}
        step2 = step1 + distance
        color1 ~ bucket(table[step1]);  color2 ~ bucket(table[step2])
        skip if the pair was already tested
        contrast < min_contrast → record failure, distance += 1, reset
        otherwise pass_count += 1; stop at pass_target

Each distance level gets a fresh seen-set, so pairs tested at an earlier
distance are tested again. A level with no reachable pair (every step1 has an
empty bucket at one end) is skipped without a failure. Drawing step1 only among
reachable steps is the same distribution as drawing it from the whole range
and discarding empty-bucket draws.

When every reachable pair has been tested and passed, the search stops early
instead of spinning: ``max_idle_draws`` consecutive draws of already-tested
pairs with at least one pass end the run successfully with ``exhausted=True``.

Growing past the end of the scale raises InfeasibleSeparation.

The lightness table, buckets, seen-set factory and random generator are all
passed in; a run is reproducible for a fixed seed.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from ..data_pipeline.catalog import Color
from ..data_pipeline.lightness_table import LightnessTable
from ..data_pipeline.partition import ColorBuckets
from ..errors import InfeasibleSeparation
from ..utils import color as color_math
from ..utils.logging_config import push_context
from ..utils.rng import RandomSource
from ..utils.validators import SearchConfig
from . import report
from .seen_set import SeenSet, SeenSetFactory

logger = logging.getLogger(__name__)


def rgb_to_numeric(c: Color) -> int:
    """Pack a color as ``r * 65536 + g * 256 + b``."""
    return c.r * 65536 + c.g * 256 + c.b


def pair_key(color1: Color, color2: Color) -> str:
    """Order-independent key ``"r,g,b|r,g,b"`` (numerically smaller color first)."""
    if rgb_to_numeric(color1) <= rgb_to_numeric(color2):
        first, second = color1, color2
    else:
        first, second = color2, color1
    return f"{first.r},{first.g},{first.b}|{second.r},{second.g},{second.b}"


# ============================================================================
# RECORDS
# ============================================================================

@dataclass(frozen=True)
class PairTest:
    """One evaluated pair (passed or failed)."""
    distance: int
    step1: int
    step2: int
    lightness1: float
    lightness2: float
    color1: Color
    color2: Color
    contrast: float
    passed: bool


@dataclass(frozen=True)
class ContrastFailure:
    """Counterexample that forced the distance up."""
    total_run: int
    distance: int
    step1: int
    step2: int
    lightness1: float
    lightness2: float
    color1: Color
    color2: Color
    contrast: float
    min_contrast: float


@dataclass(frozen=True)
class SearchResult:
    """Outcome of a successful search."""
    distance: int
    total_run: int
    pass_count: int
    scale_max: int
    exhausted: bool = False
    failures: Tuple[ContrastFailure, ...] = ()

    @property
    def separation_percent(self) -> float:
        return self.distance / self.scale_max * 100


@dataclass
class SearchState:
    """Mutable progress of one run."""
    distance: int
    seen: SeenSet
    pass_count: int = 0
    total_run: int = 0
    idle_draws: int = 0
    reachable: Tuple[int, ...] = ()
    failures: List[ContrastFailure] = field(default_factory=list)

    def escalate(self, seen: SeenSet) -> None:
        """Move to the next distance with an empty seen-set."""
        self.distance += 1
        self.pass_count = 0
        self.idle_draws = 0
        self.seen = seen


# ============================================================================
# SEARCH
# ============================================================================

class AdaptiveSeparationSearch:
    """Randomized search for the smallest separation meeting the contrast target.

    Parameters
    ----------
    table : LightnessTable
        Step → rounded lightness
    buckets : ColorBuckets
        Rounded lightness → catalog colors (read-only)
    cfg : SearchConfig
        Thresholds, targets and progress intervals
    seen_set_factory : SeenSetFactory
        Builds an empty seen-set for each distance level
    rng : RandomSource
        Uniform integer source, e.g. ``numpy.random.default_rng(seed)``
    on_pair_tested : Callable[[PairTest], None], optional
        Observer called after every evaluated pair

    Examples
    --------
    >>> rng, seed = make_rng(42)
    >>> search = AdaptiveSeparationSearch(table, buckets, cfg.search,
    ...                                   make_seen_set_factory(cfg.seen_set), rng)
    >>> result = search.run()
    >>> result.distance
    572
    """

    def __init__(
        self,
        table: LightnessTable,
        buckets: ColorBuckets,
        cfg: SearchConfig,
        seen_set_factory: SeenSetFactory,
        rng: RandomSource,
        on_pair_tested: Optional[Callable[[PairTest], None]] = None,
    ):
        self.table = table
        self.buckets = buckets
        self.cfg = cfg
        self.seen_set_factory = seen_set_factory
        self.rng = rng
        self.on_pair_tested = on_pair_tested
        self.scale_max = table.scale_max

    def _reachable_steps(self, distance: int) -> Tuple[int, ...]:
        """Every step1 with colors at both ends of the separation."""
        return tuple(
            step1 for step1 in range(self.scale_max - distance + 1)
            if self.buckets.get(self.table[step1]) and self.buckets.get(self.table[step1 + distance])
        )

    def _pick(self, lightness: float) -> Color:
        bucket = self.buckets[lightness]
        return bucket[int(self.rng.integers(0, len(bucket)))]

    def _enter_level(self, state: SearchState) -> bool:
        """Announce the current distance; False if it has nothing to test."""
        push_context(distance=state.distance)
        if state.distance > self.scale_max:
            raise InfeasibleSeparation(state.distance, self.scale_max, state.total_run)
        state.reachable = self._reachable_steps(state.distance)
        if not state.reachable:
            logger.info(
                f"Distance {state.distance}: no step pair has colors at both ends, skipping"
            )
            return False
        return True

    def run(self) -> SearchResult:
        """Search until the pass target is met or the reachable pairs run out.

        Returns
        -------
        SearchResult
            Accepted distance, test counts and the failures along the way

        Raises
        ------
        InfeasibleSeparation
            If the distance grows past ``scale_max``
        """
        cfg = self.cfg
        state = SearchState(distance=cfg.initial_distance, seen=self.seen_set_factory())
        logger.info(
            f"Starting contrast testing at distance {state.distance} "
            f"(target {cfg.pass_target:,} passes at ≥ {cfg.min_contrast}:1)"
        )

        while not self._enter_level(state):
            state.escalate(state.seen)

        while True:
            if state.idle_draws >= cfg.max_idle_draws:
                if state.pass_count > 0:
                    logger.info(
                        f"Distance {state.distance}: no untested pairs left after "
                        f"{state.pass_count:,} passes"
                    )
                    return self._result(state, exhausted=True)
                state.idle_draws = 0

            step1 = state.reachable[int(self.rng.integers(0, len(state.reachable)))]
            step2 = step1 + state.distance
            lightness1 = self.table[step1]
            lightness2 = self.table[step2]

            color1 = self._pick(lightness1)
            color2 = self._pick(lightness2)

            key = pair_key(color1, color2)
            if state.seen.contains(key):
                state.idle_draws += 1
                continue
            state.seen.insert(key)
            state.idle_draws = 0

            contrast = color_math.contrast_ratio(color1.y, color2.y)
            state.total_run += 1
            passed = contrast >= cfg.min_contrast

            if self.on_pair_tested is not None:
                self.on_pair_tested(PairTest(
                    state.distance, step1, step2, lightness1, lightness2,
                    color1, color2, contrast, passed,
                ))

            if passed:
                state.pass_count += 1
                if state.pass_count % cfg.test_update_interval == 0:
                    logger.info(
                        f"Distance {state.distance}: {state.pass_count:,} / "
                        f"{cfg.pass_target:,} tests passed..."
                    )
                if state.pass_count >= cfg.pass_target:
                    return self._result(state, exhausted=False)
                continue

            failure = ContrastFailure(
                state.total_run, state.distance, step1, step2, lightness1, lightness2,
                color1, color2, contrast, cfg.min_contrast,
            )
            state.failures.append(failure)
            logger.info("\n" + report.format_failure(failure))

            state.escalate(self.seen_set_factory())
            logger.info(f"→ Increasing distance to {state.distance} and continuing (new seen-set)")
            while not self._enter_level(state):
                state.escalate(state.seen)

    def _result(self, state: SearchState, exhausted: bool) -> SearchResult:
        return SearchResult(
            distance=state.distance,
            total_run=state.total_run,
            pass_count=state.pass_count,
            scale_max=self.scale_max,
            exhausted=exhausted,
            failures=tuple(state.failures),
        )
