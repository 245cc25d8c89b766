"""
listenstats - Listening history from streaming exports, as plain statistics.

Imports personal streaming-history exports (CSV or JSON), merges them into one
collection and derives rankings, time series and a calendar heatmap.

Usage:
    from listenstats import ListeningSession

    session = ListeningSession()
    session.import_files(["StreamingHistory_music_0.json", "history.csv"])

    stats = session.statistics
    session.set_filters(artist_substring="radiohead")
    filtered = session.statistics
    grid = session.heatmap()
"""

from .aggregate import aggregate, bundle_frames
from .config import ImportConfig
from .errors import (
    ListenStatsError,
    ConfigurationError,
    UnsupportedFileError,
    IllegalTransitionError,
    EntryNotRemovableError,
    NoDataError,
    setup_logging,
)
from .export import export_table, export_bundle
from .filters import filter_records, matches
from .heatmap import build_heatmap, intensity_level
from .models import (
    CanonicalRecord,
    FileImportState,
    FileStatus,
    FilterCriteria,
    StatisticsBundle,
    HeatmapGrid,
    HeatmapCell,
    HeatLevel,
)
from .parsers import parse_records, parse_csv, parse_json
from .session import ListeningSession
from .tracker import FileImportTracker, SourceFile, WorkingCollection, transition

__version__ = "0.1.0"

__all__ = [
    # Session
    "ListeningSession",
    "ImportConfig",
    # Import
    "FileImportTracker",
    "SourceFile",
    "WorkingCollection",
    "transition",
    "parse_records",
    "parse_csv",
    "parse_json",
    # Statistics
    "aggregate",
    "bundle_frames",
    "filter_records",
    "matches",
    "build_heatmap",
    "intensity_level",
    # Models
    "CanonicalRecord",
    "FileImportState",
    "FileStatus",
    "FilterCriteria",
    "StatisticsBundle",
    "HeatmapGrid",
    "HeatmapCell",
    "HeatLevel",
    # Errors
    "ListenStatsError",
    "ConfigurationError",
    "UnsupportedFileError",
    "IllegalTransitionError",
    "EntryNotRemovableError",
    "NoDataError",
    "setup_logging",
    # Utilities
    "export_table",
    "export_bundle",
]
