"""
ZoneTrack - Command Line Interface
Import FIT files and browse stored activities from the terminal
"""

import argparse
import asyncio
import logging
import os
import sys
from datetime import date

from pydantic import ValidationError

from zonetrack.analyzer import FitAnalyzer
from zonetrack.config import AppConfig
from zonetrack.db import DatabaseManager
from zonetrack.errors import ZoneTrackError
from zonetrack.hr_zones import HR_ZONE_DESCRIPTIONS, HR_ZONE_ORDER, HR_ZONE_RANGE_LABELS
from zonetrack.library_manager import ImportStatus, LibraryManager
from zonetrack.log import setup_logging
from zonetrack.models import month_start, week_start
from zonetrack.track import track_frame, zone_percentages

logger = logging.getLogger(__name__)


def _format_duration(seconds):
    seconds = int(round(seconds or 0))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def _parse_date(text):
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date: {text!r} (expected YYYY-MM-DD)")


def _print_progress(progress):
    position = f"[{progress.file_index + 1}/{progress.total_files}]"
    if progress.status == ImportStatus.DONE:
        print(f"{position} ✅ {progress.filename} (id {progress.activity_id})")
    elif progress.status == ImportStatus.ERROR:
        print(f"{position} ❌ {progress.filename}: {progress.error}")
    elif progress.status == ImportStatus.SKIPPED:
        print(f"{position} ⏭️  {progress.filename} skipped")


def _print_zones(zones):
    shares = zone_percentages(zones)
    for zone in HR_ZONE_ORDER:
        seconds = getattr(zones, zone)
        print(
            f"  {HR_ZONE_RANGE_LABELS[zone]:<26} {HR_ZONE_DESCRIPTIONS[zone]:<10}"
            f" {_format_duration(seconds):>9}  {shares[zone]:5.1f}%"
        )


async def _import_paths(manager, paths):
    files = [p for p in paths if not os.path.isdir(p)]
    folders = [p for p in paths if os.path.isdir(p)]

    reports = []
    for folder in folders:
        reports.append(await manager.ingest_folder(folder))
    if files:
        reports.append(await manager.ingest_files(files))
    return reports


def cmd_import(args, config, db):
    analyzer = FitAnalyzer(geocode_enabled=config.geocode_enabled)
    manager = LibraryManager(
        db=db,
        analyzer=analyzer,
        max_workers=config.import_workers,
        stop_on_error=config.stop_on_error,
        progress_callback=_print_progress,
    )

    print(f"📂 Importing into: {config.db_path}")
    print("=" * 60)
    reports = asyncio.run(_import_paths(manager, args.paths))

    imported = sum(r.imported for r in reports)
    duplicates = sum(r.duplicates for r in reports)
    failed = sum(r.failed for r in reports)
    skipped = sum(r.skipped for r in reports)
    for report in reports:
        for error in report.errors:
            logger.debug("Import error: %s", error)

    print(f"\n✅ Imported {imported} file(s): {duplicates} duplicate(s), {failed} failed, {skipped} skipped")
    return 0 if all(r.ok for r in reports) else 1


def cmd_list(args, config, db):
    activities = db.list_activities()
    if not activities:
        print("No activities stored.")
        return 0

    print(f"{'ID':>5}  {'Date':<10}  {'Type':<9}  {'Duration':>9}  {'Distance':>9}  Location")
    for activity in activities:
        distance_km = (activity['total_distance'] or 0.0) / 1000.0
        print(
            f"{activity['id']:>5}  {activity['activity_date']:<10}  {activity['activity_type']:<9}  "
            f"{_format_duration(activity['total_duration']):>9}  {distance_km:>7.2f}km  "
            f"{activity['location'] or '-'}"
        )
    return 0


def cmd_show(args, config, db):
    activity = db.get_activity(args.activity_id)

    print(f"🏃 {activity['filename']} ({activity['activity_type']})")
    print(f"  Start:     {activity['start_time']}")
    print(f"  Location:  {activity['location'] or '-'}")
    print(f"  Duration:  {_format_duration(activity['total_duration'])}")
    print(f"  Distance:  {(activity['total_distance'] or 0.0) / 1000.0:.2f} km")
    print(f"  Elevation: +{activity['elevation_gain'] or 0.0:.0f} m")
    print(f"  Records:   {activity['total_records']}")
    print("  Zones:")
    _print_zones(activity['zones'])

    if args.csv:
        df = track_frame(activity['records'])
        df.to_csv(args.csv, index=False)
        print(f"\n💾 Track written to {args.csv}")
    return 0


def cmd_week(args, config, db):
    anchor = week_start(args.date)
    summary = db.get_weekly_summary(anchor)
    print(f"📅 Week of {summary.period_start}: {summary.activity_count} activit{'y' if summary.activity_count == 1 else 'ies'}")
    _print_zones(summary.zones)
    return 0


def cmd_month(args, config, db):
    anchor = month_start(args.date)
    summary = db.get_monthly_summary(anchor)
    print(f"📅 Month of {summary.period_start}: {summary.activity_count} activit{'y' if summary.activity_count == 1 else 'ies'}")
    _print_zones(summary.zones)
    return 0


def cmd_delete(args, config, db):
    db.delete_activity(args.activity_id)
    print(f"🗑️  Deleted activity {args.activity_id}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="zonetrack",
        description="Heart-rate zone tracking for FIT activity files",
    )
    parser.add_argument("--db", help="Path to the activity database")
    parser.add_argument("--no-geocode", action="store_true", help="Skip reverse geocoding on import")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL")

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_import = subparsers.add_parser("import", help="Import FIT files or folders")
    p_import.add_argument("paths", nargs="+", help="FIT files and/or folders")
    p_import.set_defaults(func=cmd_import)

    p_list = subparsers.add_parser("list", help="List stored activities")
    p_list.set_defaults(func=cmd_list)

    p_show = subparsers.add_parser("show", help="Show one activity")
    p_show.add_argument("activity_id", type=int)
    p_show.add_argument("--csv", help="Write the track records to a CSV file")
    p_show.set_defaults(func=cmd_show)

    p_week = subparsers.add_parser("week", help="Zone totals for the week containing DATE")
    p_week.add_argument("date", type=_parse_date)
    p_week.set_defaults(func=cmd_week)

    p_month = subparsers.add_parser("month", help="Zone totals for the month containing DATE")
    p_month.add_argument("date", type=_parse_date)
    p_month.set_defaults(func=cmd_month)

    p_delete = subparsers.add_parser("delete", help="Delete a stored activity")
    p_delete.add_argument("activity_id", type=int)
    p_delete.set_defaults(func=cmd_delete)

    return parser


def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    overrides = {}
    if args.db:
        overrides["db_path"] = args.db
    if args.no_geocode:
        overrides["geocode_enabled"] = False
    if args.log_level:
        overrides["log_level"] = args.log_level

    try:
        config = AppConfig(**overrides)
    except ValidationError as exc:
        print(f"❌ Invalid configuration: {exc}")
        return 1

    setup_logging(config.log_level, config.log_file)
    config.ensure_data_dir()

    try:
        db = DatabaseManager(str(config.db_path))
        return args.func(args, config, db)
    except ZoneTrackError as exc:
        print(f"❌ Error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
