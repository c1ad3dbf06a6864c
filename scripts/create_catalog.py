"""Generate the SQLite color catalog (all 16,777,216 sRGB colors).

Each row holds the 8-bit channels, XYZ-D65, OKHSL and the OKHSL lightness
rounded onto the 0.01 bucket grid used by the separation search.

Skips generation when the catalog already exists; delete the file to rebuild.

CLI:
    python scripts/create_catalog.py
    python scripts/create_catalog.py data/colors.db
    python scripts/create_catalog.py small.db --step 17    # 16³ subset
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from contrast_scale.data_pipeline import catalog
from contrast_scale.utils import validators
from contrast_scale.utils.logging_config import install_excepthook, setup_logging_from_config
from contrast_scale.utils.profiler import log_sink, timer

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for catalog generation."""
    parser = argparse.ArgumentParser(description="Generate the sRGB color catalog")
    parser.add_argument("path", type=Path, nargs="?", help="Catalog path (default: catalog.path from config)")
    parser.add_argument("--config", type=Path, help="Project config YAML")
    parser.add_argument(
        "--step",
        type=int,
        default=1,
        help="Channel stride; values >1 build a reduced catalog (default: 1)",
    )
    args = parser.parse_args(argv)

    try:
        cfg = validators.load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if args.step < 1:
        print("Error: --step must be >= 1", file=sys.stderr)
        return 1

    setup_logging_from_config(cfg.logging, context={"app": "create_catalog"})
    install_excepthook()

    path = args.path or Path(cfg.catalog.path)
    if path.exists():
        logger.info(f"Database already exists at {path}; skipping generation")
        return 0

    with timer("create_catalog", sink=log_sink(logger)):
        written = catalog.generate_catalog(
            path,
            cfg.catalog,
            cfg.lightness,
            channel_values=range(0, 256, args.step),
        )
    logger.info(f"✓ Inserted {written:,} colors into {path}")

    stats = catalog.catalog_stats(path)
    logger.info(f"Total colors: {stats.total_colors:,}")
    logger.info(f"Distinct rounded lightness values: {stats.distinct_lightness}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
