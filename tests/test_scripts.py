"""Test the command-line entrypoints end to end on tiny inputs.

Tests for scripts/:
    - search_separation.py: missing inputs exit 1 before any loading
    - search_separation.py: infeasible search exits 2
    - search_separation.py: successful run exits 0 and reports the distance
    - precompute_lightness.py: writes the artifact, skips unless --force
    - create_catalog.py: reduced catalog via --step, skips existing file
    - measure_y_range.py: prints the report; missing catalog exits 1

Test cases:
    - test_search_missing_catalog()
    - test_search_missing_lightness_table()
    - test_search_infeasible_exit_code()
    - test_search_success()
    - test_search_invalid_override()
    - test_precompute_lightness()
    - test_create_catalog_reduced()
    - test_measure_y_range()
    - test_measure_y_range_missing()

Run:
    pytest tests/test_scripts.py -v
"""

import importlib.util
import sys
from pathlib import Path

import pytest

from contrast_scale.data_pipeline import catalog
from contrast_scale.data_pipeline.lightness_table import LightnessTable, save_lightness_table
from contrast_scale.utils import fs, hashing

SCRIPTS_DIR = Path(__file__).parent.parent / "scripts"


def _load_script(name):
    spec = importlib.util.spec_from_file_location(f"_script_{name}", SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(autouse=True)
def _keep_excepthook(monkeypatch):
    """Scripts install a logging excepthook; restore the original afterwards."""
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)


@pytest.fixture
def small_config(tmp_path):
    """Config for a 2-step scale with exact seen-sets."""
    path = tmp_path / "cfg.yaml"
    fs.atomic_yaml_dump({
        "schema": "contrast_scale.v1",
        "lightness": {"scale_max": 2},
        "search": {
            "initial_distance": 1,
            "pass_target": 5,
            "max_idle_draws": 5_000,
            "seed": 1,
            "sample_display_interval": 1,
        },
        "seen_set": {"kind": "exact"},
    }, path)
    return path


@pytest.fixture
def small_table(tmp_path):
    path = tmp_path / "lightness.yaml"
    save_lightness_table(LightnessTable([0.90, 0.50, 0.10]), path)
    return path


# ============================================================================
# search_separation.py
# ============================================================================

def test_search_missing_catalog(tmp_path, small_config, small_table, caplog):
    """Absent catalog → exit 1 with a diagnostic naming the file."""
    search = _load_script("search_separation")
    missing = tmp_path / "absent.db"

    code = search.main([str(missing), "--config", str(small_config), "--lightness", str(small_table)])

    assert code == 1
    assert "Database file not found" in caplog.text
    assert str(missing) in caplog.text
    assert "Loading precomputed lightness values" not in caplog.text


def test_search_missing_lightness_table(tmp_path, small_config, toy_catalog, caplog):
    search = _load_script("search_separation")

    code = search.main([
        str(toy_catalog), "--config", str(small_config), "--lightness", str(tmp_path / "absent.yaml"),
    ])

    assert code == 1
    assert "Lightness table not found" in caplog.text
    assert "Counting colors" not in caplog.text


def test_search_infeasible_exit_code(tmp_path, small_config, small_table, make_color):
    """Every reachable pair fails at every distance → exit 2."""
    db = tmp_path / "grays.db"
    catalog.write_colors(db, [
        make_color(128, 128, 128, 0.90),
        make_color(129, 129, 129, 0.50),
        make_color(127, 127, 127, 0.10),
    ])
    search = _load_script("search_separation")

    assert search.main([str(db), "--config", str(small_config), "--lightness", str(small_table)]) == 2


def test_search_success(tmp_path, small_config, small_table, make_color, caplog):
    """Light/dark catalog: distance 1 fails (0.90 ↔ 0.50), distance 2 passes."""
    db = tmp_path / "light_dark.db"
    colors = [make_color(240, 240, 240 - i, 0.90) for i in range(4)]
    colors += [make_color(200, 200, 200, 0.50)]
    colors += [make_color(5, 5, 5 + i, 0.10) for i in range(4)]
    catalog.write_colors(db, colors)
    search = _load_script("search_separation")

    code = search.main([
        str(db), "--config", str(small_config), "--lightness", str(small_table),
        "--pass-target", "8", "--seed", "3",
    ])

    assert code == 0
    assert "Minimum safe distance: 2 steps" in caplog.text
    assert "Random seed: 3" in caplog.text
    assert "Sample color availability:" in caplog.text
    assert f"Lightness table sha256: {hashing.sha256_file(small_table)}" in caplog.text


def test_search_invalid_override(small_config, small_table, toy_catalog):
    """--initial-distance beyond the scale is a config error (exit 1)."""
    search = _load_script("search_separation")
    code = search.main([
        str(toy_catalog), "--config", str(small_config), "--lightness", str(small_table),
        "--initial-distance", "50",
    ])
    assert code == 1


# ============================================================================
# precompute_lightness.py / create_catalog.py / measure_y_range.py
# ============================================================================

def test_precompute_lightness(tmp_path, small_config):
    precompute = _load_script("precompute_lightness")
    output = tmp_path / "out.yaml"

    assert precompute.main(["--config", str(small_config), "--output", str(output)]) == 0
    data = fs.load_yaml(output)
    assert data["scale_max"] == 2
    assert data["values"][0] == 1.0

    output.write_text("sentinel")
    assert precompute.main(["--config", str(small_config), "--output", str(output)]) == 0
    assert output.read_text() == "sentinel"

    assert precompute.main(["--config", str(small_config), "--output", str(output), "--force"]) == 0
    assert fs.load_yaml(output)["schema"] == "lightness_table.v1"


def test_create_catalog_reduced(tmp_path):
    create = _load_script("create_catalog")
    db = tmp_path / "small.db"

    assert create.main([str(db), "--step", "85"]) == 0
    assert catalog.count_colors(db) == 4 ** 3

    # Existing catalog is kept as is
    assert create.main([str(db), "--step", "255"]) == 0
    assert catalog.count_colors(db) == 4 ** 3


def test_measure_y_range(toy_catalog, capsys):
    measure = _load_script("measure_y_range")
    assert measure.main([str(toy_catalog)]) == 0
    out = capsys.readouterr().out
    assert "OVERALL STATISTICS:" in out
    assert "Total lightness groups: 3" in out


def test_measure_y_range_missing(tmp_path):
    measure = _load_script("measure_y_range")
    assert measure.main([str(tmp_path / "absent.db")]) == 1
