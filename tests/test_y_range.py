"""Test the per-bucket luminance spread report.

Tests for contrast_scale.data_pipeline.y_range:
    - Grouping matches a hand computation on the toy catalog
    - Summary statistics (mean, median, min, max)
    - Widest group and its extreme colors
    - Report text layout

Test cases:
    - test_lightness_groups()
    - test_summarize()
    - test_summarize_even_median()
    - test_summarize_empty()
    - test_widest_group_and_extremes()
    - test_format_report()
    - test_missing_catalog()

Run:
    pytest tests/test_y_range.py -v
"""

import pytest

from contrast_scale.data_pipeline import y_range
from contrast_scale.errors import MissingInputError


def test_lightness_groups(toy_catalog, toy_colors):
    groups = y_range.lightness_groups(toy_catalog)
    assert [g.rounded_ok_l for g in groups] == [0.10, 0.50, 0.90]
    assert [g.color_count for g in groups] == [1, 2, 1]

    mid = groups[1]
    ys = [c.y for c in toy_colors if c.rounded_ok_l == 0.50]
    assert mid.min_y == pytest.approx(min(ys))
    assert mid.max_y == pytest.approx(max(ys))
    assert mid.y_distance == pytest.approx(max(ys) - min(ys))
    assert groups[0].y_distance == 0.0


def test_summarize():
    groups = [
        y_range.LightnessGroup(0.1, 0.0, 0.1, 0.1, 3),
        y_range.LightnessGroup(0.2, 0.0, 0.4, 0.4, 2),
        y_range.LightnessGroup(0.3, 0.0, 0.2, 0.2, 1),
    ]
    stats = y_range.summarize(groups)
    assert stats.total_groups == 3
    assert stats.mean_distance == pytest.approx(0.7 / 3)
    assert stats.median_distance == pytest.approx(0.2)
    assert stats.min_distance == pytest.approx(0.1)
    assert stats.max_distance == pytest.approx(0.4)


def test_summarize_even_median():
    groups = [y_range.LightnessGroup(0.1 * i, 0.0, d, d, 1) for i, d in enumerate([0.1, 0.3])]
    assert y_range.summarize(groups).median_distance == pytest.approx(0.2)


def test_summarize_empty():
    with pytest.raises(ValueError):
        y_range.summarize([])
    with pytest.raises(ValueError):
        y_range.widest_group([])


def test_widest_group_and_extremes(toy_catalog):
    groups = y_range.lightness_groups(toy_catalog)
    widest = y_range.widest_group(groups)
    assert widest.rounded_ok_l == 0.50

    darkest, brightest = y_range.extreme_colors(toy_catalog, widest)
    assert darkest["y"] <= brightest["y"]
    assert {(darkest["r"], darkest["g"], darkest["b"]), (brightest["r"], brightest["g"], brightest["b"])} == {
        (128, 128, 128), (130, 126, 129)
    }


def test_format_report(toy_catalog):
    groups = y_range.lightness_groups(toy_catalog)
    stats = y_range.summarize(groups)
    widest = y_range.widest_group(groups)
    text = y_range.format_report(stats, groups, widest, y_range.extreme_colors(toy_catalog, widest))

    assert "Total lightness groups: 3" in text
    assert "GROUP WITH LARGEST Y DISTANCE:" in text
    assert "Lightness: 0.50" in text
    assert text.count("\n0.") >= 3


def test_missing_catalog(tmp_path):
    with pytest.raises(MissingInputError):
        y_range.lightness_groups(tmp_path / "absent.db")
