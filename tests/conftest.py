"""Shared fixtures: toy catalog, lightness tables, configs, seeded generators."""

from pathlib import Path

import numpy as np
import pytest

from contrast_scale.data_pipeline.catalog import Color, write_colors
from contrast_scale.data_pipeline.lightness_table import build_lightness_table
from contrast_scale.search.seen_set import ExactSeenSet
from contrast_scale.utils import color
from contrast_scale.utils.logging_config import pop_context, setup_logging
from contrast_scale.utils.validators import LightnessConfig, SearchConfig


def _make_color(r: int, g: int, b: int, lightness: float) -> Color:
    y = float(color.srgb8_to_xyz(np.array([r, g, b]))[1])
    return Color(r, g, b, y, lightness)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop context fields and handlers installed by the test."""
    yield
    pop_context()
    setup_logging(level="WARNING", to_stderr=False, capture_warnings=False)


@pytest.fixture(scope="session")
def project_root():
    """Project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def lightness_table():
    """Full 0-1000 lightness table with default settings."""
    return build_lightness_table(LightnessConfig())


@pytest.fixture
def make_color():
    """Build a catalog color with its true relative luminance."""
    return _make_color


@pytest.fixture
def toy_colors():
    """Four colors in three lightness buckets (0.90, 0.50, 0.10)."""
    return [
        _make_color(10, 10, 10, 0.10),
        _make_color(128, 128, 128, 0.50),
        _make_color(130, 126, 129, 0.50),
        _make_color(240, 240, 240, 0.90),
    ]


@pytest.fixture
def toy_buckets(toy_colors):
    buckets = {}
    for c in toy_colors:
        buckets.setdefault(c.rounded_ok_l, []).append(c)
    return buckets


@pytest.fixture
def toy_catalog(tmp_path, toy_colors):
    """SQLite catalog holding the toy colors."""
    path = tmp_path / "toy.db"
    write_colors(path, toy_colors)
    return path


@pytest.fixture
def small_search_cfg():
    """Search settings sized for toy catalogs."""
    return SearchConfig(
        min_contrast=4.5,
        initial_distance=1,
        pass_target=5,
        max_idle_draws=100_000,
        seed=0,
        test_update_interval=1,
    )


@pytest.fixture
def exact_factory():
    return ExactSeenSet


@pytest.fixture
def rng():
    """Seeded generator (reproducible draws)."""
    return np.random.default_rng(12345)
