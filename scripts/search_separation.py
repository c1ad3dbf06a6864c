"""Find the minimum lightness separation that guarantees a contrast ratio.

Pipeline:
    1. Load config (configs/contrast_scale_v1.yaml) and apply CLI overrides
    2. Check that the catalog and the lightness table exist
    3. Load the lightness table
    4. Stream the catalog into lightness buckets
    5. Run the adaptive separation search
    6. Report the accepted distance

Both inputs are checked before any loading starts, so a missing file fails
in milliseconds instead of after a multi-minute catalog load.

CLI:
    python scripts/search_separation.py
    python scripts/search_separation.py colors.db --seed 42
    python scripts/search_separation.py toy.db --initial-distance 1 \\
        --pass-target 1000 --exact-seen-set

Exit status:
    0  separation found
    1  missing or invalid input (catalog, lightness table, config)
    2  no separation within the scale
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from contrast_scale.data_pipeline import catalog, lightness_table, partition
from contrast_scale.errors import InfeasibleSeparation, MissingInputError
from contrast_scale.search import report
from contrast_scale.search.seen_set import make_seen_set_factory
from contrast_scale.search.separation import AdaptiveSeparationSearch, SearchResult
from contrast_scale.utils import fs, hashing, validators
from contrast_scale.utils.logging_config import (
    install_excepthook,
    push_context,
    setup_logging_from_config,
)
from contrast_scale.utils.profiler import log_sink, timer
from contrast_scale.utils.rng import make_rng

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Search for the minimum lightness separation meeting a WCAG contrast ratio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "catalog",
        type=Path,
        nargs="?",
        help="SQLite color catalog (default: catalog.path from config)",
    )
    parser.add_argument("--config", type=Path, help="Project config YAML")
    parser.add_argument("--lightness", type=Path, help="Lightness table YAML (default: lightness.output_path)")
    parser.add_argument("--seed", type=int, help="Random seed for a reproducible run")
    parser.add_argument("--initial-distance", type=int, help="First separation to test (steps)")
    parser.add_argument("--pass-target", type=int, help="Passing tests needed to accept a distance")
    parser.add_argument(
        "--exact-seen-set",
        action="store_true",
        help="Track tested pairs exactly instead of with a Bloom filter",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def run_search(
    cfg: validators.ProjectConfigV1,
    catalog_path: Path,
    lightness_path: Path,
    seed: Optional[int] = None,
) -> SearchResult:
    """Load inputs, partition the catalog and run the search.

    Raises
    ------
    MissingInputError
        If the catalog or the lightness table is absent
    InfeasibleSeparation
        If no distance within the scale satisfies the threshold
    """
    fs.require_file(catalog_path, "Database file", "run scripts/create_catalog.py first")
    fs.require_file(lightness_path, "Lightness table", "run scripts/precompute_lightness.py first")

    sink = log_sink(logger)

    logger.info("Loading precomputed lightness values...")
    table = lightness_table.load_lightness_table(lightness_path, scale_max=cfg.lightness.scale_max)
    logger.info(f"Lightness table sha256: {hashing.sha256_file(lightness_path)}")

    logger.info("Counting colors in database...")
    total = catalog.count_colors(catalog_path)
    logger.info(f"✓ Found {total:,} colors to load")

    with timer("load_catalog", sink=sink):
        buckets = partition.partition_catalog(
            catalog.iter_colors(catalog_path),
            total=total,
            update_interval=cfg.catalog.load_update_interval,
        )

    samples = partition.bucket_availability(buckets, table, cfg.search.sample_display_interval)
    logger.info(report.format_availability(samples))

    rng, seed = make_rng(seed)
    push_context(seed=seed)
    logger.info(f"Random seed: {seed}")

    search = AdaptiveSeparationSearch(
        table,
        buckets,
        cfg.search,
        make_seen_set_factory(cfg.seen_set),
        rng,
    )
    with timer("search", sink=sink):
        return search.run()


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint; returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        cfg = validators.load_config(args.config)
        cfg = validators.with_overrides(cfg, {
            "search": {
                "seed": args.seed,
                "initial_distance": args.initial_distance,
                "pass_target": args.pass_target,
            },
            "seen_set": {"kind": "exact" if args.exact_seen_set else None},
            "logging": {"level": "DEBUG" if args.verbose else None},
        })
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging_from_config(cfg.logging, context={"app": "search"})
    install_excepthook()

    catalog_path = args.catalog or Path(cfg.catalog.path)
    lightness_path = args.lightness or Path(cfg.lightness.output_path)
    logger.info(f"Database: {catalog_path}")

    try:
        result = run_search(cfg, catalog_path, lightness_path, seed=cfg.search.seed)
    except (MissingInputError, ValueError) as e:
        logger.error(f"❌ {e}")
        return 1
    except InfeasibleSeparation as e:
        logger.error(f"❌ {e}")
        return 2

    logger.info("\n" + report.format_success(result, cfg.search.pass_target, cfg.search.min_contrast))
    return 0


if __name__ == "__main__":
    sys.exit(main())
