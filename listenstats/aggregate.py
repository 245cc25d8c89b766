"""
Listening statistics over canonical records.

``aggregate`` is a pure function: it rebuilds a StatisticsBundle from scratch on
every call and keeps no state between calls. Minutes are accumulated as floats
(``ms_played / 60000``) and rounded only when a bucket is emitted.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

import numpy as np
import pandas as pd

from .config import DEFAULT_TOP_N
from .models import (
    ArtistStat,
    CanonicalRecord,
    DayBucket,
    HourBucket,
    MonthBucket,
    StatisticsBundle,
    TrackStat,
    WeekdayBucket,
)

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def round_minutes(value: float) -> int:
    """Round half up, so 2.5 minutes reads as 3 rather than banker's 2."""
    return int(np.floor(value + 0.5))


def records_frame(records: Iterable[CanonicalRecord]) -> pd.DataFrame:
    """Build the working DataFrame, one row per record, in insertion order."""
    rows = [
        (r.timestamp, r.artist_name, r.track_name, r.ms_played)
        for r in records
    ]
    df = pd.DataFrame(rows, columns=["timestamp", "artist_name", "track_name", "ms_played"])
    df["timestamp"] = pd.to_datetime(df["timestamp"], errors="coerce")
    df["minutes_played"] = df["ms_played"].astype("float64") / 60000
    return df


def _ranked(stats: pd.DataFrame, top_n: int) -> pd.DataFrame:
    # groupby(sort=False) keeps first-seen order; a stable sort keeps it on ties
    return stats.sort_values("plays", ascending=False, kind="stable").head(top_n)


def _top_tracks(df: pd.DataFrame, top_n: int) -> tuple:
    stats = (
        df.groupby(["track_name", "artist_name"], sort=False)
        .agg(plays=("ms_played", "size"), minutes=("minutes_played", "sum"))
        .reset_index()
    )
    return tuple(
        TrackStat(
            name=row.track_name,
            artist=row.artist_name,
            plays=int(row.plays),
            minutes=round_minutes(row.minutes),
        )
        for row in _ranked(stats, top_n).itertuples(index=False)
    ), len(stats)


def _top_artists(df: pd.DataFrame, top_n: int) -> tuple:
    stats = (
        df.groupby("artist_name", sort=False)
        .agg(plays=("ms_played", "size"), minutes=("minutes_played", "sum"))
        .reset_index()
    )
    return tuple(
        ArtistStat(name=row.artist_name, plays=int(row.plays), minutes=round_minutes(row.minutes))
        for row in _ranked(stats, top_n).itertuples(index=False)
    ), len(stats)


def _time_series(df: pd.DataFrame) -> Dict[str, tuple]:
    timed = df.dropna(subset=["timestamp"]).copy()
    timed["month"] = timed["timestamp"].dt.strftime("%Y-%m")
    timed["date"] = timed["timestamp"].dt.strftime("%Y-%m-%d")
    timed["hour"] = timed["timestamp"].dt.hour
    # pandas counts Monday as 0; buckets are Sunday-first
    timed["weekday"] = (timed["timestamp"].dt.dayofweek + 1) % 7

    by_month = timed.groupby("month")["minutes_played"].sum().sort_index()
    by_day = (
        timed.groupby("date")
        .agg(minutes=("minutes_played", "sum"), streams=("ms_played", "size"))
        .sort_index()
    )
    by_hour = timed.groupby("hour")["minutes_played"].sum().reindex(range(24), fill_value=0.0)
    by_weekday = timed.groupby("weekday")["minutes_played"].sum().reindex(range(7), fill_value=0.0)

    return {
        "listening_by_month": tuple(
            MonthBucket(month=month, minutes=round_minutes(minutes))
            for month, minutes in by_month.items()
        ),
        "listening_by_day": tuple(
            DayBucket(date=day, minutes=round_minutes(row.minutes), streams=int(row.streams))
            for day, row in by_day.iterrows()
        ),
        "listening_by_hour": tuple(
            HourBucket(hour=int(hour), minutes=round_minutes(minutes))
            for hour, minutes in by_hour.items()
        ),
        "listening_by_weekday": tuple(
            WeekdayBucket(weekday=int(idx), day=WEEKDAY_NAMES[int(idx)], minutes=round_minutes(minutes))
            for idx, minutes in by_weekday.items()
        ),
    }


def aggregate(records: Iterable[CanonicalRecord], top_n: int = DEFAULT_TOP_N) -> Optional[StatisticsBundle]:
    """
    Compute the statistics bundle for ``records``.

    Returns None for an empty input so callers can tell "no data" apart from
    a bundle whose values happen to be zero.

    Records without a timestamp count towards totals and rankings but are left
    out of the month, day, hour and weekday series.
    """
    df = records_frame(records)
    if df.empty:
        return None

    top_tracks, unique_tracks = _top_tracks(df, top_n)
    top_artists, unique_artists = _top_artists(df, top_n)

    return StatisticsBundle(
        total_streams=len(df),
        total_minutes=round_minutes(df["minutes_played"].sum()),
        unique_tracks=unique_tracks,
        unique_artists=unique_artists,
        top_tracks=top_tracks,
        top_artists=top_artists,
        **_time_series(df),
    )


def bundle_frames(bundle: StatisticsBundle) -> Dict[str, pd.DataFrame]:
    """
    Tidy DataFrames for each series in the bundle, ready for charting or export.

    Args:
        bundle: Output of ``aggregate``

    Returns:
        Dict keyed by series name (summary, top_tracks, top_artists, by_month,
        by_day, by_hour, by_weekday)
    """
    def frame(rows, columns):
        return pd.DataFrame([vars(r) for r in rows], columns=columns)

    return {
        "summary": pd.DataFrame([{
            "total_streams": bundle.total_streams,
            "total_minutes": bundle.total_minutes,
            "unique_tracks": bundle.unique_tracks,
            "unique_artists": bundle.unique_artists,
        }]),
        "top_tracks": frame(bundle.top_tracks, ["name", "artist", "plays", "minutes"]),
        "top_artists": frame(bundle.top_artists, ["name", "plays", "minutes"]),
        "by_month": frame(bundle.listening_by_month, ["month", "minutes"]),
        "by_day": frame(bundle.listening_by_day, ["date", "minutes", "streams"]),
        "by_hour": frame(bundle.listening_by_hour, ["hour", "minutes"]),
        "by_weekday": frame(bundle.listening_by_weekday, ["weekday", "day", "minutes"]),
    }
