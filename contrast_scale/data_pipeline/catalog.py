"""Color catalog: every 8-bit sRGB color with its XYZ and OKHSL coordinates.

Generation enumerates all 256³ channel triples (16,777,216 rows), converts
them through sRGB → XYZ-D65 → Oklab → OKHSL and stores them in SQLite:

    colors(id, r, g, b, x, y, z, ok_h, ok_s, ok_l, rounded_ok_l)

with indexes on (r, g, b), (x, y, z), (ok_h, ok_s, ok_l) and rounded_ok_l.
Conversion is vectorized one red-channel plane (65,536 colors) at a time.

The database is built under a temporary name and renamed into place when
complete, so an interrupted run never leaves a catalog that later runs would
mistake for a finished one.

Reading streams only the columns the search needs, as ``Color`` records.

Public API:
    generate_catalog(path, cfg, channel_values=range(256)) → row count
    iter_colors(path) → Iterator[Color]
    count_colors(path) → int
    catalog_stats(path) → CatalogStats
"""

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from ..utils import color, fs
from ..utils.validators import CatalogConfig, LightnessConfig

logger = logging.getLogger(__name__)

SELECT_COLORS = "SELECT r, g, b, y, rounded_ok_l FROM colors ORDER BY id"
COUNT_COLORS = "SELECT COUNT(*) FROM colors"
COUNT_DISTINCT_LIGHTNESS = "SELECT COUNT(DISTINCT rounded_ok_l) FROM colors"
INSERT_ROW = """
    INSERT INTO colors (r, g, b, x, y, z, ok_h, ok_s, ok_l, rounded_ok_l)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

CatalogRow = Tuple[int, int, int, float, float, float, float, float, float, float]


class Color(NamedTuple):
    """One catalog color as seen by the search (read-only)."""
    r: int
    g: int
    b: int
    y: float
    rounded_ok_l: float


@dataclass(frozen=True)
class CatalogStats:
    """Summary printed after generation."""
    total_colors: int
    distinct_lightness: int


# ============================================================================
# GENERATION
# ============================================================================

def convert_rgb(rgb8: np.ndarray, cfg: Optional[LightnessConfig] = None) -> List[CatalogRow]:
    """Convert 8-bit sRGB triples to catalog rows.

    Parameters
    ----------
    rgb8 : np.ndarray
        Integer channels, shape (N, 3), range [0, 255]
    cfg : LightnessConfig, optional
        Rounding rules for ``rounded_ok_l``

    Returns
    -------
    List[CatalogRow]
        ``(r, g, b, x, y, z, ok_h, ok_s, ok_l, rounded_ok_l)`` per color
    """
    cfg = cfg or LightnessConfig()
    rgb8 = np.asarray(rgb8, dtype=np.int64).reshape(-1, 3)

    xyz = color.srgb8_to_xyz(rgb8)
    okhsl = color.oklab_to_okhsl(color.xyz_to_oklab(xyz))
    rounded = color.round_lightness(okhsl[:, 2], cfg.precision, cfg.cap_threshold, cfg.near_white)

    columns = (
        rgb8[:, 0].tolist(), rgb8[:, 1].tolist(), rgb8[:, 2].tolist(),
        xyz[:, 0].tolist(), xyz[:, 1].tolist(), xyz[:, 2].tolist(),
        okhsl[:, 0].tolist(), okhsl[:, 1].tolist(), okhsl[:, 2].tolist(),
        np.atleast_1d(rounded).tolist(),
    )
    return list(zip(*columns))


def _create_schema(conn: sqlite3.Connection) -> None:
    conn.execute("""
        CREATE TABLE colors (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            r INTEGER NOT NULL,
            g INTEGER NOT NULL,
            b INTEGER NOT NULL,
            x REAL NOT NULL,
            y REAL NOT NULL,
            z REAL NOT NULL,
            ok_h REAL NOT NULL,
            ok_s REAL NOT NULL,
            ok_l REAL NOT NULL,
            rounded_ok_l REAL NOT NULL
        )
    """)
    logger.info("✓ Table created")


def _create_indexes(conn: sqlite3.Connection) -> None:
    logger.info("Creating indexes...")
    conn.executescript("""
        CREATE INDEX idx_rgb ON colors(r, g, b);
        CREATE INDEX idx_xyz ON colors(x, y, z);
        CREATE INDEX idx_okhsl ON colors(ok_h, ok_s, ok_l);
        CREATE INDEX idx_rounded_ok_l ON colors(rounded_ok_l);
    """)
    logger.info("✓ Indexes created")


def generate_catalog(
    path: Union[str, Path],
    catalog_cfg: Optional[CatalogConfig] = None,
    lightness_cfg: Optional[LightnessConfig] = None,
    channel_values: Sequence[int] = range(256),
) -> int:
    """Enumerate channel triples and persist them as a SQLite catalog.

    Parameters
    ----------
    path : Union[str, Path]
        Target database path (must not exist)
    catalog_cfg : CatalogConfig, optional
        Insert batch size
    lightness_cfg : LightnessConfig, optional
        Rounding rules for ``rounded_ok_l``
    channel_values : Sequence[int]
        Channel levels to enumerate; the full catalog uses range(256)

    Returns
    -------
    int
        Number of rows written

    Raises
    ------
    FileExistsError
        If ``path`` already exists
    """
    catalog_cfg = catalog_cfg or CatalogConfig()
    lightness_cfg = lightness_cfg or LightnessConfig()
    path = Path(path)
    if path.exists():
        raise FileExistsError(f"Catalog already exists at: {path}")

    levels = np.asarray(list(channel_values), dtype=np.int64)
    if levels.size == 0 or levels.min() < 0 or levels.max() > 255:
        raise ValueError("Channel values must be non-empty and within [0, 255]")

    fs.ensure_dir(path.parent)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    if tmp_path.exists():
        tmp_path.unlink()

    g_grid, b_grid = np.meshgrid(levels, levels, indexing="ij")
    gb = np.stack([g_grid.ravel(), b_grid.ravel()], axis=-1)

    processed = 0
    conn = sqlite3.connect(tmp_path)
    try:
        conn.execute("PRAGMA journal_mode = OFF")
        conn.execute("PRAGMA synchronous = OFF")
        _create_schema(conn)

        logger.info(f"Generating {levels.size ** 3:,} sRGB colors...")
        for r in levels:
            plane = np.column_stack([np.full(len(gb), r), gb])
            rows = convert_rgb(plane, lightness_cfg)
            for start in range(0, len(rows), catalog_cfg.batch_size):
                with conn:
                    conn.executemany(INSERT_ROW, rows[start:start + catalog_cfg.batch_size])
            processed += len(rows)
            logger.info(f"Progress: {processed:,} colors")

        _create_indexes(conn)
        conn.commit()
    except BaseException:
        conn.close()
        tmp_path.unlink(missing_ok=True)
        raise
    conn.close()

    tmp_path.replace(path)
    return processed


# ============================================================================
# READING
# ============================================================================

def _connect_readonly(path: Union[str, Path]) -> sqlite3.Connection:
    path = fs.require_file(path, "Database file", "run scripts/create_catalog.py first")
    return sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)


def iter_colors(path: Union[str, Path], fetch_size: int = 100_000) -> Iterator[Color]:
    """Stream every catalog color as a ``Color`` record.

    Raises
    ------
    MissingInputError
        If the catalog is absent (raised on first iteration)
    """
    conn = _connect_readonly(path)
    try:
        cursor = conn.execute(SELECT_COLORS)
        while True:
            rows = cursor.fetchmany(fetch_size)
            if not rows:
                break
            for row in rows:
                yield Color(*row)
    finally:
        conn.close()


def count_colors(path: Union[str, Path]) -> int:
    """Total number of rows in the catalog."""
    conn = _connect_readonly(path)
    try:
        return conn.execute(COUNT_COLORS).fetchone()[0]
    finally:
        conn.close()


def catalog_stats(path: Union[str, Path]) -> CatalogStats:
    """Row count and number of distinct lightness buckets."""
    conn = _connect_readonly(path)
    try:
        total = conn.execute(COUNT_COLORS).fetchone()[0]
        distinct = conn.execute(COUNT_DISTINCT_LIGHTNESS).fetchone()[0]
    finally:
        conn.close()
    return CatalogStats(total_colors=total, distinct_lightness=distinct)


def write_colors(path: Union[str, Path], colors: Iterable[Color]) -> int:
    """Write ``Color`` records to a new catalog (x, z and OKHSL h/s zeroed).

    For small hand-built catalogs (fixtures, experiments); the lightness
    column is taken from ``rounded_ok_l``.
    """
    path = Path(path)
    if path.exists():
        raise FileExistsError(f"Catalog already exists at: {path}")
    fs.ensure_dir(path.parent)

    rows = [
        (c.r, c.g, c.b, 0.0, c.y, 0.0, 0.0, 0.0, c.rounded_ok_l, c.rounded_ok_l)
        for c in colors
    ]
    conn = sqlite3.connect(path)
    try:
        _create_schema(conn)
        with conn:
            conn.executemany(INSERT_ROW, rows)
        _create_indexes(conn)
    finally:
        conn.close()
    return len(rows)
