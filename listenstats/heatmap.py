"""
Calendar heatmap grid for daily listening activity.

The grid covers a fixed window of days ending on ``today``. Columns are weeks
running Sunday to Saturday; the first column is padded with placeholder cells
for the days of its week that fall before the window starts.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from .config import DEFAULT_HEATMAP_DAYS
from .models import DayBucket, HeatLevel, HeatmapCell, HeatmapGrid

# Ratio of the window maximum at which each band starts
LEVEL_THRESHOLDS = (
    (0.25, HeatLevel.LOW),
    (0.50, HeatLevel.MID),
    (0.75, HeatLevel.HIGH),
)


def sunday_weekday(day: date) -> int:
    """Weekday index with Sunday as 0."""
    return (day.weekday() + 1) % 7


def intensity_level(minutes: float, max_minutes: float) -> HeatLevel:
    """
    Band a day's minutes relative to the busiest day.

    0 minutes is OFF; below 25% of the max is LOW, below 50% MID, below 75%
    HIGH, anything else PEAK.
    """
    if minutes <= 0:
        return HeatLevel.OFF
    ratio = minutes / max(max_minutes, 1)
    for threshold, level in LEVEL_THRESHOLDS:
        if ratio < threshold:
            return level
    return HeatLevel.PEAK


def build_heatmap(days: Iterable[DayBucket], today: Optional[date] = None,
                  window_days: int = DEFAULT_HEATMAP_DAYS) -> HeatmapGrid:
    """
    Build the week-aligned grid for the ``window_days`` days ending on ``today``.

    Args:
        days: Day buckets from a StatisticsBundle
        today: Last day of the window; defaults to the current date
        window_days: Number of real days in the grid

    Returns:
        HeatmapGrid whose days are zero-filled where ``days`` has no entry
    """
    if today is None:
        today = date.today()
    start = today - timedelta(days=window_days - 1)

    by_date: Dict[str, DayBucket] = {d.date: d for d in days}

    window: List[tuple] = []
    for offset in range(window_days):
        day = start + timedelta(days=offset)
        key = day.isoformat()
        bucket = by_date.get(key)
        window.append((
            key,
            bucket.minutes if bucket else 0,
            bucket.streams if bucket else 0,
            sunday_weekday(day),
        ))

    max_minutes = max((minutes for _, minutes, _, _ in window), default=0)

    weeks: List[tuple] = []
    current: List[HeatmapCell] = [
        HeatmapCell(date=None, minutes=0, streams=0, weekday=i)
        for i in range(window[0][3])
    ]
    for index, (key, minutes, streams, weekday) in enumerate(window):
        current.append(HeatmapCell(
            date=key,
            minutes=minutes,
            streams=streams,
            weekday=weekday,
            level=intensity_level(minutes, max_minutes),
        ))
        if weekday == 6 or index == len(window) - 1:
            weeks.append(tuple(current))
            current = []

    return HeatmapGrid(
        weeks=tuple(weeks),
        start=start.isoformat(),
        end=today.isoformat(),
        max_minutes=max_minutes,
    )
