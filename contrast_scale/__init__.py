"""Contrast Scale: minimum lightness separation for accessible palettes.

This package finds the smallest distance, on a 0-1000 lightness scale, that
two colors must be apart for every color pair at that distance to meet a
WCAG contrast threshold (4.5:1 by default).

Architecture layers (strict one-way dependency):
    scripts/ → contrast_scale/{search,data_pipeline}/ → contrast_scale/utils/

Key invariants:
    - Scale steps are integers in [0, scale_max] (scale_max = 1000)
    - Lightness values are OKHSL lightness rounded to 0.01
    - The lightness table and the color buckets are read-only once built
    - YAML-only configs and artifacts; the color catalog is SQLite
"""

__version__ = "1.0.0"
