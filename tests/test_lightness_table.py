"""Test the scale step → lightness table.

Tests for contrast_scale.data_pipeline.lightness_table:
    - End points: step 0 is white (1.00), last step is black (0.00)
    - Non-increasing with step
    - Values sit on the 0.01 grid (plus the 0.99 near-white bucket)
    - Deterministic rebuilds
    - YAML artifact save/load with validation
    - Missing artifact raises MissingInputError
    - Scale mismatch and tampered artifacts are rejected

Test cases:
    - test_table_endpoints()
    - test_table_non_increasing()
    - test_table_on_grid()
    - test_table_covers_mid_levels()
    - test_build_deterministic()
    - test_compute_lightness_matches_color_chain()
    - test_save_load_roundtrip()
    - test_load_missing_artifact()
    - test_load_scale_mismatch()
    - test_load_rejects_increasing_values()
    - test_small_scale_config()

Run:
    pytest tests/test_lightness_table.py -v
"""

import pytest

from contrast_scale.data_pipeline import lightness_table as lt
from contrast_scale.errors import MissingInputError
from contrast_scale.utils import color, fs
from contrast_scale.utils.validators import LightnessConfig


# ============================================================================
# TABLE CONTENT
# ============================================================================

def test_table_endpoints(lightness_table):
    """Step 0 → 1.00, step 1000 → 0.00; 1001 entries."""
    assert len(lightness_table) == 1001
    assert lightness_table.scale_max == 1000
    assert lightness_table[0] == 1.0
    assert lightness_table[1000] == 0.0


def test_table_non_increasing(lightness_table):
    """table[s1] ≥ table[s2] for s1 < s2."""
    values = list(lightness_table)
    assert all(a >= b for a, b in zip(values, values[1:]))


def test_table_on_grid(lightness_table):
    """Every value is a two-decimal level."""
    for value in lightness_table:
        assert round(value * 100) / 100 == value


def test_table_covers_mid_levels(lightness_table):
    """Steps are fine enough that every interior 0.01 level is reached."""
    levels = set(lightness_table.levels())
    for level in (0.10, 0.50, 0.90, 0.99):
        assert level in levels
    # Only pure white rounds to 1.00
    assert [v for v in lightness_table if v == 1.0] == [1.0]


def test_build_deterministic():
    assert lt.build_lightness_table() == lt.build_lightness_table()


def test_compute_lightness_matches_color_chain():
    """Raw lightness = toe(Oklab L) of the luminance at the step's contrast."""
    step = 571
    contrast = color.scale_to_contrast(step)
    y = color.reverse_wcag_contrast(contrast, 1.0)
    expected = color.luminance_to_okhsl_lightness(y)
    assert lt.compute_lightness(step) == pytest.approx(expected)
    assert 0.0 < lt.compute_lightness(step) < 1.0


def test_small_scale_config():
    """Scale length follows the config."""
    table = lt.build_lightness_table(LightnessConfig(scale_max=10, progress_interval=5))
    assert len(table) == 11
    assert table[0] == 1.0
    assert table[10] == 0.0


def test_table_is_read_only(lightness_table):
    with pytest.raises(TypeError):
        lightness_table[0] = 0.5


# ============================================================================
# ARTIFACT I/O
# ============================================================================

def test_save_load_roundtrip(tmp_path, lightness_table):
    """Saved artifact reloads to an equal table."""
    path = tmp_path / "lightness_values.yaml"
    lt.save_lightness_table(lightness_table, path)

    data = fs.load_yaml(path)
    assert data["schema"] == "lightness_table.v1"
    assert data["scale_max"] == 1000
    assert len(data["config_sha256"]) == 64

    assert lt.load_lightness_table(path, scale_max=1000) == lightness_table


def test_load_missing_artifact(tmp_path):
    with pytest.raises(MissingInputError) as exc_info:
        lt.load_lightness_table(tmp_path / "absent.yaml")
    assert "precompute_lightness" in str(exc_info.value)


def test_load_scale_mismatch(tmp_path):
    path = tmp_path / "small.yaml"
    cfg = LightnessConfig(scale_max=10)
    lt.save_lightness_table(lt.build_lightness_table(cfg), path, cfg)

    with pytest.raises(ValueError, match="expected 0..1000"):
        lt.load_lightness_table(path, scale_max=1000)


def test_load_rejects_increasing_values(tmp_path):
    """A tampered artifact fails validation."""
    path = tmp_path / "bad.yaml"
    fs.atomic_yaml_dump(
        {"schema": "lightness_table.v1", "scale_max": 2, "values": {0: 1.0, 1: 0.2, 2: 0.5}},
        path,
    )
    with pytest.raises(ValueError, match="non-increasing"):
        lt.load_lightness_table(path)


def test_load_rejects_missing_steps(tmp_path):
    path = tmp_path / "gap.yaml"
    fs.atomic_yaml_dump(
        {"schema": "lightness_table.v1", "scale_max": 3, "values": {0: 1.0, 1: 0.5, 3: 0.0}},
        path,
    )
    with pytest.raises(ValueError, match="missing"):
        lt.load_lightness_table(path)
