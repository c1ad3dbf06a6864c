"""Test atomic filesystem operations.

Tests for contrast_scale.utils.fs:
    - Atomic writes leave no tmp file behind
    - YAML roundtrip preserves structure and key order
    - require_file raises MissingInputError with a hint
    - ensure_dir creates parents

Test cases:
    - test_atomic_write_bytes()
    - test_atomic_write_replaces_existing()
    - test_atomic_yaml_roundtrip()
    - test_load_yaml_missing()
    - test_require_file()
    - test_require_file_directory()
    - test_ensure_dir()

Run:
    pytest tests/test_fs.py -v
"""

import pytest

from contrast_scale.errors import ContrastScaleError, MissingInputError
from contrast_scale.utils import fs


def test_atomic_write_bytes(tmp_path):
    path = tmp_path / "sub" / "data.bin"
    fs.atomic_write_bytes(path, b"\x00\x01payload")
    assert path.read_bytes() == b"\x00\x01payload"
    assert not path.with_suffix(".bin.tmp").exists()


def test_atomic_write_replaces_existing(tmp_path):
    path = tmp_path / "note.txt"
    fs.atomic_write_text(path, "first")
    fs.atomic_write_text(path, "second")
    assert path.read_text() == "second"


def test_atomic_yaml_roundtrip(tmp_path):
    """Integer keys, floats and key order survive."""
    path = tmp_path / "table.yaml"
    data = {"schema": "lightness_table.v1", "scale_max": 2, "values": {0: 1.0, 1: 0.57, 2: 0.0}}
    fs.atomic_yaml_dump(data, path)

    loaded = fs.load_yaml(path)
    assert loaded == data
    assert list(loaded) == ["schema", "scale_max", "values"]


def test_load_yaml_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        fs.load_yaml(tmp_path / "absent.yaml")


def test_require_file(tmp_path):
    present = tmp_path / "colors.db"
    present.write_bytes(b"")
    assert fs.require_file(present, "Database file") == present

    with pytest.raises(MissingInputError) as exc_info:
        fs.require_file(tmp_path / "absent.db", "Database file", "run scripts/create_catalog.py first")
    err = exc_info.value
    assert isinstance(err, FileNotFoundError)
    assert isinstance(err, ContrastScaleError)
    assert str(err) == (
        f"Database file not found at: {tmp_path / 'absent.db'} "
        "(run scripts/create_catalog.py first)"
    )


def test_require_file_directory(tmp_path):
    """A directory is not an acceptable input file."""
    with pytest.raises(MissingInputError):
        fs.require_file(tmp_path, "Lightness table")


def test_ensure_dir(tmp_path):
    target = tmp_path / "a" / "b" / "c"
    assert fs.ensure_dir(target) == target
    assert target.is_dir()
    fs.ensure_dir(target)
