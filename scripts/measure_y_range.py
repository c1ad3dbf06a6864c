"""Report the relative-luminance (Y) spread inside each lightness bucket.

CLI:
    python scripts/measure_y_range.py
    python scripts/measure_y_range.py data/colors.db
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from contrast_scale.data_pipeline import y_range
from contrast_scale.errors import MissingInputError
from contrast_scale.utils import validators
from contrast_scale.utils.logging_config import install_excepthook, setup_logging_from_config

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint; prints the report to stdout."""
    parser = argparse.ArgumentParser(description="Measure Y range per OKHSL lightness group")
    parser.add_argument("catalog", type=Path, nargs="?", help="SQLite color catalog (default: catalog.path)")
    parser.add_argument("--config", type=Path, help="Project config YAML")
    args = parser.parse_args(argv)

    try:
        cfg = validators.load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging_from_config(cfg.logging, context={"app": "measure_y_range"})
    install_excepthook()

    path = args.catalog or Path(cfg.catalog.path)
    logger.info("Analyzing Y distance for all OKHSL lightness groups...")

    try:
        groups = y_range.lightness_groups(path)
        if not groups:
            print("No lightness groups found in database.")
            return 0
        stats = y_range.summarize(groups)
        widest = y_range.widest_group(groups)
        extremes = y_range.extreme_colors(path, widest)
    except MissingInputError as e:
        logger.error(f"❌ {e}")
        return 1

    print(y_range.format_report(stats, groups, widest, extremes))
    return 0


if __name__ == "__main__":
    sys.exit(main())
