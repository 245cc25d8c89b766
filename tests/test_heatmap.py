"""Tests for the calendar heatmap grid."""

from datetime import date

import pytest

from listenstats.heatmap import build_heatmap, intensity_level, sunday_weekday
from listenstats.models import DayBucket, HeatLevel

SATURDAY = date(2024, 1, 6)
WEDNESDAY = date(2024, 1, 3)


def test_window_is_365_days_and_week_aligned():
    grid = build_heatmap([], today=SATURDAY)
    assert grid.end == "2024-01-06"
    assert grid.start == "2023-01-07"
    assert len(grid.days) == 365
    # 2023-01-07 is a Saturday: six placeholders then one real day
    first = grid.weeks[0]
    assert [c.is_placeholder for c in first] == [True] * 6 + [False]
    assert all(len(week) == 7 for week in grid.weeks)
    assert len(grid.weeks) == 53


def test_partial_last_week():
    grid = build_heatmap([], today=WEDNESDAY)
    assert grid.start == "2023-01-04"
    assert sum(c.is_placeholder for c in grid.weeks[0]) == 3
    last = grid.weeks[-1]
    assert [c.date for c in last] == ["2023-12-31", "2024-01-01", "2024-01-02", "2024-01-03"]
    assert [c.weekday for c in last] == [0, 1, 2, 3]


def test_columns_run_sunday_to_saturday():
    grid = build_heatmap([], today=SATURDAY)
    for week in grid.weeks:
        assert [c.weekday for c in week] == list(range(7))


def test_zero_fill_and_values():
    days = [
        DayBucket(date="2024-01-01", minutes=100, streams=30),
        DayBucket(date="2024-01-02", minutes=20, streams=5),
        DayBucket(date="2024-01-03", minutes=50, streams=12),
        DayBucket(date="2024-01-04", minutes=30, streams=8),
        DayBucket(date="2022-01-01", minutes=1000, streams=200),  # outside the window
    ]
    grid = build_heatmap(days, today=SATURDAY)
    by_date = {c.date: c for c in grid.days}
    assert grid.max_minutes == 100
    assert by_date["2024-01-01"].streams == 30
    assert by_date["2024-01-01"].level == HeatLevel.PEAK
    assert by_date["2024-01-02"].level == HeatLevel.LOW
    assert by_date["2024-01-04"].level == HeatLevel.MID
    assert by_date["2024-01-03"].level == HeatLevel.HIGH
    assert by_date["2024-01-05"].minutes == 0
    assert by_date["2024-01-05"].level == HeatLevel.OFF
    assert "2022-01-01" not in by_date


def test_placeholders_carry_no_date():
    grid = build_heatmap([], today=WEDNESDAY)
    placeholder = grid.weeks[0][0]
    assert placeholder.date is None
    assert placeholder.minutes == 0
    assert placeholder.level == HeatLevel.OFF


def test_custom_window():
    grid = build_heatmap([], today=SATURDAY, window_days=7)
    assert len(grid.days) == 7
    assert grid.start == "2023-12-31"
    assert len(grid.weeks) == 1


@pytest.mark.parametrize("minutes,expected", [
    (0, HeatLevel.OFF),
    (1, HeatLevel.LOW),
    (24, HeatLevel.LOW),
    (25, HeatLevel.MID),
    (49, HeatLevel.MID),
    (50, HeatLevel.HIGH),
    (74, HeatLevel.HIGH),
    (75, HeatLevel.PEAK),
    (100, HeatLevel.PEAK),
])
def test_intensity_bands(minutes, expected):
    assert intensity_level(minutes, 100) == expected


def test_intensity_with_no_activity():
    assert intensity_level(0, 0) == HeatLevel.OFF


def test_sunday_weekday():
    assert sunday_weekday(date(2024, 1, 7)) == 0
    assert sunday_weekday(date(2024, 1, 6)) == 6


def test_grid_serializes():
    import json
    grid = build_heatmap([DayBucket(date="2024-01-01", minutes=3, streams=1)], today=SATURDAY)
    data = json.loads(json.dumps(grid.to_dict()))
    assert data["end"] == "2024-01-06"
    assert data["weeks"][0][0]["date"] is None
