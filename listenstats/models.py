"""
Value types shared by the parsers, the import tracker and the aggregator.

Everything here is plain data: frozen dataclasses and enums with no behavior
beyond coercion and serialization helpers.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class CanonicalRecord:
    """One playback event normalized from any export format."""
    timestamp: Optional[datetime]
    artist_name: str
    track_name: str
    ms_played: int

    @property
    def minutes(self) -> float:
        return self.ms_played / 60000


class FileStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class FileImportState:
    """Lifecycle of one accepted file. Replaced, never mutated, on each transition."""
    file_id: int
    name: str
    size: int
    status: FileStatus = FileStatus.PENDING
    error: Optional[str] = None
    record_count: Optional[int] = None


def _coerce_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


@dataclass(frozen=True)
class FilterCriteria:
    """
    Record filter. Every field is optional; the default instance passes everything.

    Dates may be given as ``date``/``datetime`` objects or ISO strings and are
    compared inclusively against the calendar day of a record's timestamp.
    """
    artist_substring: str = ""
    track_substring: str = ""
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    min_played_minutes: float = 0

    def __post_init__(self):
        # frozen, so coerce through object.__setattr__
        object.__setattr__(self, "artist_substring", (self.artist_substring or "").strip())
        object.__setattr__(self, "track_substring", (self.track_substring or "").strip())
        object.__setattr__(self, "date_from", _coerce_date(self.date_from))
        object.__setattr__(self, "date_to", _coerce_date(self.date_to))
        object.__setattr__(self, "min_played_minutes", float(self.min_played_minutes or 0))

    @property
    def is_empty(self) -> bool:
        return not (
            self.artist_substring
            or self.track_substring
            or self.date_from
            or self.date_to
            or self.min_played_minutes > 0
        )


# Statistics bundle rows

@dataclass(frozen=True)
class TrackStat:
    name: str
    artist: str
    plays: int
    minutes: int


@dataclass(frozen=True)
class ArtistStat:
    name: str
    plays: int
    minutes: int


@dataclass(frozen=True)
class MonthBucket:
    month: str
    minutes: int


@dataclass(frozen=True)
class DayBucket:
    date: str
    minutes: int
    streams: int


@dataclass(frozen=True)
class HourBucket:
    hour: int
    minutes: int


@dataclass(frozen=True)
class WeekdayBucket:
    weekday: int  # 0 = Sunday
    day: str
    minutes: int


@dataclass(frozen=True)
class StatisticsBundle:
    total_streams: int
    total_minutes: int
    unique_tracks: int
    unique_artists: int
    top_tracks: Tuple[TrackStat, ...] = field(default_factory=tuple)
    top_artists: Tuple[ArtistStat, ...] = field(default_factory=tuple)
    listening_by_month: Tuple[MonthBucket, ...] = field(default_factory=tuple)
    listening_by_day: Tuple[DayBucket, ...] = field(default_factory=tuple)
    listening_by_hour: Tuple[HourBucket, ...] = field(default_factory=tuple)
    listening_by_weekday: Tuple[WeekdayBucket, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return asdict(self)


# Heatmap

class HeatLevel(str, Enum):
    OFF = "off"
    LOW = "low"
    MID = "mid"
    HIGH = "high"
    PEAK = "peak"


@dataclass(frozen=True)
class HeatmapCell:
    """A day in the grid. Placeholder cells have ``date=None`` and are drawn transparent."""
    date: Optional[str]
    minutes: int
    streams: int
    weekday: int
    level: HeatLevel = HeatLevel.OFF

    @property
    def is_placeholder(self) -> bool:
        return self.date is None


@dataclass(frozen=True)
class HeatmapGrid:
    weeks: Tuple[Tuple[HeatmapCell, ...], ...]
    start: str
    end: str
    max_minutes: int

    @property
    def days(self) -> Tuple[HeatmapCell, ...]:
        return tuple(cell for week in self.weeks for cell in week if not cell.is_placeholder)

    def to_dict(self) -> dict:
        return asdict(self)
