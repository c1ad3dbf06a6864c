"""Offline data preparation: color catalog and lightness table.

Modules:
    - catalog: generate and stream the SQLite sRGB color catalog
    - lightness_table: scale step → target OKHSL lightness
    - partition: group catalog colors into lightness buckets
    - y_range: luminance spread inside each lightness bucket

Depends only on contrast_scale.utils.
"""

from . import catalog
from . import lightness_table
from . import partition
from . import y_range

from .catalog import Color, iter_colors
from .lightness_table import LightnessTable, build_lightness_table, load_lightness_table
from .partition import ColorBuckets, partition_catalog

__all__ = [
    'catalog',
    'lightness_table',
    'partition',
    'y_range',
    'Color',
    'ColorBuckets',
    'LightnessTable',
    'build_lightness_table',
    'iter_colors',
    'load_lightness_table',
    'partition_catalog',
]
