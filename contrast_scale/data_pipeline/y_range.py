"""Relative-luminance spread inside each lightness bucket.

Colors sharing a rounded OKHSL lightness can differ in Y (hue and chroma
shift luminance at fixed perceptual lightness). The spread bounds how much
contrast a fixed separation can lose, which is why the search samples real
colors instead of trusting the nominal scale contrast.

Aggregation is done in SQL (GROUP BY rounded_ok_l); summary statistics use
numpy.

Public API:
    lightness_groups(path) → List[LightnessGroup]
    summarize(groups) → YRangeStats
    widest_group(groups) → LightnessGroup
    extreme_colors(path, group) → (darkest, brightest) row dicts
    format_report(...) → str
"""

import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Sequence, Tuple, Union

import numpy as np

from ..utils import fs

logger = logging.getLogger(__name__)

SEPARATOR = "=" * 80
RULE = "-" * 80


class LightnessGroup(NamedTuple):
    rounded_ok_l: float
    min_y: float
    max_y: float
    y_distance: float
    color_count: int


class YRangeStats(NamedTuple):
    total_groups: int
    mean_distance: float
    median_distance: float
    min_distance: float
    max_distance: float


def _connect(path: Union[str, Path]) -> sqlite3.Connection:
    path = fs.require_file(path, "Database file", "run scripts/create_catalog.py first")
    conn = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
    conn.row_factory = sqlite3.Row
    return conn


def lightness_groups(path: Union[str, Path]) -> List[LightnessGroup]:
    """Min/max Y and color count per lightness bucket, ascending lightness."""
    conn = _connect(path)
    try:
        rows = conn.execute("""
            SELECT
                rounded_ok_l,
                MIN(y) AS min_y,
                MAX(y) AS max_y,
                (MAX(y) - MIN(y)) AS y_distance,
                COUNT(*) AS color_count
            FROM colors
            GROUP BY rounded_ok_l
            ORDER BY rounded_ok_l ASC
        """).fetchall()
    finally:
        conn.close()
    return [LightnessGroup(*tuple(row)) for row in rows]


def summarize(groups: Sequence[LightnessGroup]) -> YRangeStats:
    """Mean, median and extremes of the per-group Y distance.

    Raises
    ------
    ValueError
        If ``groups`` is empty
    """
    if not groups:
        raise ValueError("Cannot calculate statistics for empty group list")

    distances = np.array([g.y_distance for g in groups], dtype=np.float64)
    return YRangeStats(
        total_groups=len(groups),
        mean_distance=float(distances.mean()),
        median_distance=float(np.median(distances)),
        min_distance=float(distances.min()),
        max_distance=float(distances.max()),
    )


def widest_group(groups: Sequence[LightnessGroup]) -> LightnessGroup:
    """Group with the largest Y distance (first one on ties)."""
    if not groups:
        raise ValueError("Cannot find max distance group in empty list")
    return groups[int(np.argmax([g.y_distance for g in groups]))]


def extreme_colors(
    path: Union[str, Path],
    group: LightnessGroup,
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Full catalog rows with the minimum and maximum Y in ``group``."""
    conn = _connect(path)
    try:
        found = []
        for order in ("ASC", "DESC"):
            row = conn.execute(
                f"SELECT * FROM colors WHERE rounded_ok_l = ? ORDER BY y {order} LIMIT 1",
                (group.rounded_ok_l,),
            ).fetchone()
            if row is None:
                raise LookupError(
                    f"Could not find extreme colors for lightness {group.rounded_ok_l}"
                )
            found.append(dict(row))
    finally:
        conn.close()
    return found[0], found[1]


def format_report(
    stats: YRangeStats,
    groups: Sequence[LightnessGroup],
    widest: LightnessGroup,
    extremes: Tuple[Dict[str, Any], Dict[str, Any]],
) -> str:
    """Render the Y-range report as plain text."""
    lines = [
        "OVERALL STATISTICS:",
        SEPARATOR,
        f"Total lightness groups: {stats.total_groups}",
        f"Mean Y distance: {stats.mean_distance}",
        f"Median Y distance: {stats.median_distance}",
        f"Min Y distance: {stats.min_distance}",
        f"Max Y distance: {stats.max_distance}",
        "",
        "",
        "Y DISTANCE FOR EACH LIGHTNESS GROUP:",
        SEPARATOR,
        f"{'Lightness':<9} | {'Min Y':<8} | {'Max Y':<8} | {'Y Distance':<10} | Color Count",
        RULE,
    ]
    for g in groups:
        lines.append(
            f"{g.rounded_ok_l:<9.2f} | {g.min_y:<8.2f} | {g.max_y:<8.2f} | "
            f"{g.y_distance:<10.2f} | {g.color_count:,}"
        )

    darkest, brightest = extremes
    lines += [
        "",
        "",
        "GROUP WITH LARGEST Y DISTANCE:",
        SEPARATOR,
        f"Lightness: {widest.rounded_ok_l:.2f}",
        f"Y Distance: {widest.y_distance}",
        f"Y Range: [{widest.min_y}, {widest.max_y}]",
        f"Color Count: {widest.color_count:,}",
        "",
        "Colors creating the largest Y distance:",
        RULE,
        "",
        "Color with MINIMUM Y:",
        str(darkest),
        "",
        "Color with MAXIMUM Y:",
        str(brightest),
    ]
    return "\n".join(lines)
