"""Precompute the scale step → OKHSL lightness table.

Writes a lightness_table.v1 YAML artifact (default lightness_values.yaml)
with one rounded lightness per step 0..scale_max. The search loads this file
instead of recomputing the WCAG inversion and color conversions.

Skips when the artifact exists unless --force is given.

CLI:
    python scripts/precompute_lightness.py
    python scripts/precompute_lightness.py --output data/lightness.yaml --force
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from contrast_scale.data_pipeline import lightness_table
from contrast_scale.utils import validators
from contrast_scale.utils.logging_config import install_excepthook, setup_logging_from_config

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for lightness table generation."""
    parser = argparse.ArgumentParser(description="Precompute the lightness table")
    parser.add_argument("--config", type=Path, help="Project config YAML")
    parser.add_argument("--output", type=Path, help="Artifact path (default: lightness.output_path)")
    parser.add_argument("--force", action="store_true", help="Overwrite an existing artifact")
    args = parser.parse_args(argv)

    try:
        cfg = validators.load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging_from_config(cfg.logging, context={"app": "precompute_lightness"})
    install_excepthook()

    output = args.output or Path(cfg.lightness.output_path)
    if output.exists() and not args.force:
        logger.info(f"Lightness table already exists at {output}; use --force to rebuild")
        return 0

    logger.info(f"Precomputing lightness values for steps 0-{cfg.lightness.scale_max}...")
    table = lightness_table.build_lightness_table(cfg.lightness)
    lightness_table.save_lightness_table(table, output, cfg.lightness)
    logger.info(f"✓ {len(table.levels())} distinct lightness levels")
    return 0


if __name__ == "__main__":
    sys.exit(main())
