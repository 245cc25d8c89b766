#!/usr/bin/env python3
"""
listenstats Quickstart Example

Pass one or more streaming-history exports on the command line:
    python examples/01_quickstart.py StreamingHistory_music_0.json history.csv
"""

import sys
from datetime import date

from listenstats import ListeningSession, bundle_frames

# Import every file given (JSON tried first, CSV as fallback)
session = ListeningSession.from_env(progress=True)
session.import_files(sys.argv[1:])

# Per-file status
for entry in session.tracker.entries:
    detail = f"{entry.record_count:,} records" if entry.record_count else entry.error
    print(f"   • {entry.name}: {entry.status.value} ({detail})")

stats = session.statistics
print(f"\n📊 Your Listening:")
print(f"   • {stats.total_streams:,} streams")
print(f"   • {stats.total_minutes:,} minutes")
print(f"   • {stats.unique_tracks:,} unique tracks")
print(f"   • {stats.unique_artists:,} unique artists")

# Narrow down to long plays only
session.set_filters(min_played_minutes=2)
long_plays = session.statistics
if long_plays is not None:
    print(f"\n🎧 Streams over 2 minutes: {long_plays.total_streams:,}")
session.clear_filters()

# Tidy tables for charting
frames = bundle_frames(stats)
print(frames["by_month"].tail())

# Calendar heatmap
grid = session.heatmap(today=date.today())
print(f"\n🗓️  Heatmap: {len(grid.weeks)} weeks, busiest day {grid.max_minutes} min")
