"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Color science and WCAG contrast (color)
    - Config and artifact validation (validators)
    - Atomic I/O and input checks (fs)
    - Provenance hashing (hashing)
    - Unified logging (logging_config)
    - Phase timing (profiler)
    - Seedable random source (rng)

No module in utils/ may import from upper layers (data_pipeline, search).

Convenience imports:
    from contrast_scale.utils import color, fs, validators
    from contrast_scale.utils.logging_config import setup_logging, get_logger
"""

from . import color
from . import fs
from . import hashing
from . import logging_config
from . import profiler
from . import rng
from . import validators

from .logging_config import get_logger, push_context, setup_logging

__all__ = [
    # Modules
    'color',
    'fs',
    'hashing',
    'logging_config',
    'profiler',
    'rng',
    'validators',
    # Direct exports
    'setup_logging',
    'get_logger',
    'push_context',
]
