import json
import logging
import sqlite3
from datetime import date
from typing import Any, Dict, List, Union

from .errors import ActivityNotFoundError, DuplicateActivityError
from .models import ActivitySummary, ZoneSummary, ZoneTimes

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS activities (
    id              INTEGER PRIMARY KEY,
    filename        TEXT NOT NULL UNIQUE,
    activity_type   TEXT NOT NULL DEFAULT 'Other',
    activity_date   TEXT NOT NULL,
    start_time      TEXT NOT NULL,
    location        TEXT,
    week_start      TEXT NOT NULL,
    month_start     TEXT NOT NULL,
    total_duration  REAL NOT NULL,
    total_distance  REAL,
    total_records   INTEGER NOT NULL,
    elevation_gain  REAL,
    max_altitude    REAL,
    min_altitude    REAL,
    imported_at     TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS activity_zones (
    activity_id     INTEGER PRIMARY KEY REFERENCES activities(id),
    zone1_seconds   REAL DEFAULT 0,
    zone2_seconds   REAL DEFAULT 0,
    zone3_seconds   REAL DEFAULT 0,
    zone4_seconds   REAL DEFAULT 0,
    zone5_seconds   REAL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS records (
    id              INTEGER PRIMARY KEY,
    activity_id     INTEGER REFERENCES activities(id),
    timestamp       TEXT NOT NULL,
    elapsed_time    REAL,
    heart_rate      INTEGER,
    distance        REAL,
    altitude        REAL,
    speed           REAL,
    temperature     INTEGER,
    position_lat    REAL,
    position_long   REAL,
    zone            TEXT,
    extras          TEXT
);

CREATE INDEX IF NOT EXISTS idx_activities_week ON activities(week_start);
CREATE INDEX IF NOT EXISTS idx_activities_month ON activities(month_start);
CREATE INDEX IF NOT EXISTS idx_records_activity ON records(activity_id);
"""

ACTIVITY_COLUMNS = """
    a.id, a.filename, a.activity_type, a.activity_date, a.start_time, a.location,
    a.week_start, a.month_start, a.total_duration, a.total_distance, a.total_records,
    a.elevation_gain, a.max_altitude, a.min_altitude,
    z.zone1_seconds, z.zone2_seconds, z.zone3_seconds, z.zone4_seconds, z.zone5_seconds
"""


def _activity_from_row(row: sqlite3.Row) -> Dict[str, Any]:
    return {
        'id': row['id'],
        'filename': row['filename'],
        'activity_type': row['activity_type'],
        'activity_date': row['activity_date'],
        'start_time': row['start_time'],
        'location': row['location'],
        'week_start': row['week_start'],
        'month_start': row['month_start'],
        'total_duration': row['total_duration'],
        'total_distance': row['total_distance'],
        'total_records': row['total_records'],
        'elevation_gain': row['elevation_gain'],
        'max_altitude': row['max_altitude'],
        'min_altitude': row['min_altitude'],
        'zones': ZoneTimes(
            zone1=row['zone1_seconds'] or 0.0,
            zone2=row['zone2_seconds'] or 0.0,
            zone3=row['zone3_seconds'] or 0.0,
            zone4=row['zone4_seconds'] or 0.0,
            zone5=row['zone5_seconds'] or 0.0,
        ),
    }


def _record_from_row(row: sqlite3.Row) -> Dict[str, Any]:
    try:
        extras = json.loads(row['extras']) if row['extras'] else {}
    except ValueError:
        extras = {}
    return {
        'timestamp': row['timestamp'],
        'elapsed_time': row['elapsed_time'],
        'heart_rate': row['heart_rate'],
        'distance': row['distance'],
        'altitude': row['altitude'],
        'speed': row['speed'],
        'temperature': row['temperature'],
        'position_lat': row['position_lat'],
        'position_long': row['position_long'],
        'zone': row['zone'],
        'extras': extras,
    }


class DatabaseManager:
    """Sqlite-backed store for activity summaries and their track records."""

    def __init__(self, db_path='fitness.db'):
        self.db_path = db_path
        self.create_tables()

    def get_connection(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def create_tables(self):
        with self.get_connection() as conn:
            conn.executescript(SCHEMA_SQL)

            # Older databases predate activity typing
            cursor = conn.execute("PRAGMA table_info(activities)")
            columns = [info[1] for info in cursor.fetchall()]

            migrations = {
                'activity_type': "TEXT NOT NULL DEFAULT 'Other'",
                'location': 'TEXT',
            }

            for col, dtype in migrations.items():
                if col not in columns:
                    logger.info("Migrating database: adding %s column", col)
                    conn.execute(f"ALTER TABLE activities ADD COLUMN {col} {dtype}")

    def activity_exists(self, filename: str) -> bool:
        with self.get_connection() as conn:
            cursor = conn.execute("SELECT 1 FROM activities WHERE filename = ?", (filename,))
            return cursor.fetchone() is not None

    def insert_activity(self, summary: ActivitySummary) -> int:
        """Store a summary with its zones and records; returns the new id."""
        with self.get_connection() as conn:
            exists = conn.execute(
                "SELECT 1 FROM activities WHERE filename = ?", (summary.filename,)
            ).fetchone()
            if exists:
                raise DuplicateActivityError(summary.filename)

            cursor = conn.execute('''
                INSERT INTO activities (
                    filename, activity_type, activity_date, start_time, location,
                    week_start, month_start, total_duration, total_distance,
                    total_records, elevation_gain, max_altitude, min_altitude
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                summary.filename,
                summary.activity_type,
                summary.activity_date.isoformat(),
                summary.start_time,
                summary.location,
                summary.week_start.isoformat(),
                summary.month_start.isoformat(),
                summary.total_duration,
                summary.total_distance,
                len(summary.records),
                summary.elevation_gain,
                summary.max_altitude,
                summary.min_altitude,
            ))
            activity_id = cursor.lastrowid

            zones = summary.zones
            conn.execute('''
                INSERT INTO activity_zones (
                    activity_id, zone1_seconds, zone2_seconds,
                    zone3_seconds, zone4_seconds, zone5_seconds
                ) VALUES (?, ?, ?, ?, ?, ?)
            ''', (activity_id, zones.zone1, zones.zone2, zones.zone3, zones.zone4, zones.zone5))

            conn.executemany('''
                INSERT INTO records (
                    activity_id, timestamp, elapsed_time, heart_rate, distance,
                    altitude, speed, temperature, position_lat, position_long,
                    zone, extras
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', [
                (
                    activity_id,
                    record.timestamp.isoformat(),
                    record.elapsed_time,
                    record.heart_rate,
                    record.distance,
                    record.altitude,
                    record.speed,
                    record.temperature,
                    record.position_lat,
                    record.position_long,
                    record.zone,
                    json.dumps(record.extras),
                )
                for record in summary.records
            ])

        logger.debug("Stored %s as activity %d", summary.filename, activity_id)
        return activity_id

    def get_count(self):
        with self.get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM activities").fetchone()[0]

    def list_activities(self) -> List[Dict[str, Any]]:
        """All activity summaries, newest first."""
        with self.get_connection() as conn:
            rows = conn.execute(f'''
                SELECT {ACTIVITY_COLUMNS}
                FROM activities a
                JOIN activity_zones z ON z.activity_id = a.id
                ORDER BY a.start_time DESC
            ''').fetchall()
            return [_activity_from_row(row) for row in rows]

    def get_activity(self, activity_id: int) -> Dict[str, Any]:
        """Summary plus replayed track records, ordered by timestamp."""
        with self.get_connection() as conn:
            row = conn.execute(f'''
                SELECT {ACTIVITY_COLUMNS}
                FROM activities a
                JOIN activity_zones z ON z.activity_id = a.id
                WHERE a.id = ?
            ''', (activity_id,)).fetchone()
            if row is None:
                raise ActivityNotFoundError(activity_id)

            activity = _activity_from_row(row)
            record_rows = conn.execute('''
                SELECT timestamp, elapsed_time, heart_rate, distance, altitude, speed,
                       temperature, position_lat, position_long, zone, extras
                FROM records
                WHERE activity_id = ?
                ORDER BY timestamp, id
            ''', (activity_id,)).fetchall()
            activity['records'] = [_record_from_row(r) for r in record_rows]
            return activity

    def _zone_summary(self, column: str, period_start: Union[str, date]) -> ZoneSummary:
        if isinstance(period_start, date):
            period_start = period_start.isoformat()
        with self.get_connection() as conn:
            row = conn.execute(f'''
                SELECT COUNT(*),
                       COALESCE(SUM(z.zone1_seconds), 0),
                       COALESCE(SUM(z.zone2_seconds), 0),
                       COALESCE(SUM(z.zone3_seconds), 0),
                       COALESCE(SUM(z.zone4_seconds), 0),
                       COALESCE(SUM(z.zone5_seconds), 0)
                FROM activities a
                JOIN activity_zones z ON z.activity_id = a.id
                WHERE a.{column} = ?
            ''', (period_start,)).fetchone()
        return ZoneSummary(
            period_start=period_start,
            activity_count=row[0],
            zones=ZoneTimes(*row[1:6]),
        )

    def get_weekly_summary(self, week_start) -> ZoneSummary:
        return self._zone_summary('week_start', week_start)

    def get_monthly_summary(self, month_start) -> ZoneSummary:
        return self._zone_summary('month_start', month_start)

    def delete_activity(self, activity_id: int) -> None:
        with self.get_connection() as conn:
            exists = conn.execute(
                "SELECT 1 FROM activities WHERE id = ?", (activity_id,)
            ).fetchone()
            if not exists:
                raise ActivityNotFoundError(activity_id)

            # Children first for the foreign keys
            conn.execute("DELETE FROM records WHERE activity_id = ?", (activity_id,))
            conn.execute("DELETE FROM activity_zones WHERE activity_id = ?", (activity_id,))
            conn.execute("DELETE FROM activities WHERE id = ?", (activity_id,))
