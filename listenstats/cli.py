"""
listenstats CLI - Command line interface for streaming-history exports.
"""

from __future__ import annotations

import argparse
import json
from datetime import date

from .config import ImportConfig
from .errors import ListenStatsError, NoDataError, UnsupportedFileError, setup_logging
from .export import export_bundle
from .session import ListeningSession


def _add_files(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("files", nargs="+", help="Export files (.csv or .json)")


def _add_filters(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--artist", default="", help="Keep artists containing this text")
    ap.add_argument("--track", default="", help="Keep tracks containing this text")
    ap.add_argument("--from", dest="date_from", default=None, help="First day (YYYY-MM-DD)")
    ap.add_argument("--to", dest="date_to", default=None, help="Last day (YYYY-MM-DD)")
    ap.add_argument("--min-minutes", type=float, default=0,
                    help="Minimum minutes played per stream")


def _print_stats(stats) -> None:
    print(f"Streams:        {stats.total_streams:,}")
    print(f"Minutes:        {stats.total_minutes:,}")
    print(f"Unique tracks:  {stats.unique_tracks:,}")
    print(f"Unique artists: {stats.unique_artists:,}")
    print("\nTop tracks:")
    for i, t in enumerate(stats.top_tracks, 1):
        print(f"  {i:2d}. {t.name} - {t.artist} ({t.plays} plays, {t.minutes} min)")
    print("\nTop artists:")
    for i, a in enumerate(stats.top_artists, 1):
        print(f"  {i:2d}. {a.name} ({a.plays} plays, {a.minutes} min)")


def main(argv=None):
    ap = argparse.ArgumentParser(
        prog="listenstats",
        description="Streaming history exports -> listening statistics.",
    )
    ap.add_argument("--progress", action="store_true", help="Show a progress bar while importing")
    sub = ap.add_subparsers(dest="cmd", required=True)

    # Stats command
    ap_stats = sub.add_parser("stats", help="Print statistics for the given exports.")
    _add_files(ap_stats)
    _add_filters(ap_stats)
    ap_stats.add_argument("--json", action="store_true", help="Print the bundle as JSON")

    # Export command
    ap_export = sub.add_parser("export", help="Write each statistics series to disk.")
    _add_files(ap_export)
    _add_filters(ap_export)
    ap_export.add_argument("--out", default=None, help="Output directory (default: data dir)")
    ap_export.add_argument("--fmt", default="csv", choices=["csv", "parquet", "json"])

    # Heatmap command
    ap_heat = sub.add_parser("heatmap", help="Print the daily activity grid as JSON.")
    _add_files(ap_heat)
    _add_filters(ap_heat)
    ap_heat.add_argument("--today", default=None, help="Last day of the window (YYYY-MM-DD)")

    args = ap.parse_args(argv)

    config = ImportConfig.from_env()
    setup_logging(config.log_level)
    session = ListeningSession(config, progress=args.progress)

    try:
        summary = session.import_files(args.files)
    except UnsupportedFileError as e:
        print(f"⚠️  {e}")
        summary = e.summary
        if not session.has_data:
            raise SystemExit(f"Error: {summary.error or 'no files to import'}")
    except NoDataError as e:
        raise SystemExit(f"Error: {e}")

    for entry in session.tracker.entries:
        if entry.error:
            print(f"⚠️  {entry.name}: {entry.error}")
    print(f"✅ Imported {summary.records_added:,} records from {summary.succeeded} file(s)")

    try:
        session.set_filters(
            artist_substring=args.artist,
            track_substring=args.track,
            date_from=args.date_from,
            date_to=args.date_to,
            min_played_minutes=args.min_minutes,
        )
    except ValueError as e:
        raise SystemExit(f"Error: invalid date: {e}")

    stats = session.statistics
    if stats is None:
        print("No streams match the current filters.")
        return

    if args.cmd == "stats":
        if args.json:
            print(json.dumps(stats.to_dict(), indent=2))
        else:
            _print_stats(stats)
        return

    if args.cmd == "export":
        out_dir = args.out or str(config.data_dir)
        paths = export_bundle(stats, out_dir, fmt=args.fmt)
        print(f"✅ Exported {len(paths)} tables to {out_dir}")
        return

    if args.cmd == "heatmap":
        try:
            today = date.fromisoformat(args.today) if args.today else None
        except ValueError as e:
            raise SystemExit(f"Error: invalid date: {e}")
        grid = session.heatmap(today=today)
        print(json.dumps(grid.to_dict(), indent=2))
        return

    raise ListenStatsError(f"Unknown command: {args.cmd}")


if __name__ == "__main__":
    main()
