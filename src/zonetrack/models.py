"""Data model for decoded samples, track records, and activity summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from .hr_zones import HR_ZONE_ORDER


@dataclass
class ZoneTimes:
    """Seconds spent in each heart-rate zone."""
    zone1: float = 0.0
    zone2: float = 0.0
    zone3: float = 0.0
    zone4: float = 0.0
    zone5: float = 0.0

    def add(self, zone: str, seconds: float) -> None:
        if zone not in HR_ZONE_ORDER:
            return
        setattr(self, zone, getattr(self, zone) + seconds)

    def total(self) -> float:
        return sum(getattr(self, zone) for zone in HR_ZONE_ORDER)

    def as_dict(self) -> Dict[str, float]:
        return {zone: getattr(self, zone) for zone in HR_ZONE_ORDER}


@dataclass(frozen=True)
class Sample:
    """One reconciled sample message, before per-activity derivation."""
    timestamp: datetime
    heart_rate: Optional[int] = None
    distance: Optional[float] = None
    altitude: Optional[float] = None
    speed: Optional[float] = None
    temperature: Optional[int] = None
    position_lat: Optional[float] = None
    position_long: Optional[float] = None
    extras: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ReconciledRecord:
    """A sample plus its elapsed-time offset and zone label."""
    timestamp: datetime
    elapsed_time: float
    heart_rate: Optional[int]
    distance: Optional[float]
    altitude: Optional[float]
    speed: Optional[float]
    temperature: Optional[int]
    position_lat: Optional[float]
    position_long: Optional[float]
    zone: str
    extras: Dict[str, float] = field(default_factory=dict)

    @property
    def has_position(self) -> bool:
        return self.position_lat is not None and self.position_long is not None

    def as_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp.isoformat(),
            'elapsed_time': self.elapsed_time,
            'heart_rate': self.heart_rate,
            'distance': self.distance,
            'altitude': self.altitude,
            'speed': self.speed,
            'temperature': self.temperature,
            'position_lat': self.position_lat,
            'position_long': self.position_long,
            'zone': self.zone,
            'extras': dict(self.extras),
        }


@dataclass(frozen=True)
class ActivitySummary:
    """Result of decoding one activity file."""
    filename: str
    activity_type: str
    activity_date: date
    start_time: str
    location: Optional[str]
    week_start: date
    month_start: date
    total_duration: float
    total_distance: float
    zones: ZoneTimes
    elevation_gain: float
    max_altitude: Optional[float]
    min_altitude: Optional[float]
    records: Tuple[ReconciledRecord, ...] = ()

    def as_dict(self, include_records: bool = False) -> Dict[str, Any]:
        data = {
            'filename': self.filename,
            'activity_type': self.activity_type,
            'activity_date': self.activity_date.isoformat(),
            'start_time': self.start_time,
            'location': self.location,
            'week_start': self.week_start.isoformat(),
            'month_start': self.month_start.isoformat(),
            'total_duration': self.total_duration,
            'total_distance': self.total_distance,
            'zones': self.zones.as_dict(),
            'elevation_gain': self.elevation_gain,
            'max_altitude': self.max_altitude,
            'min_altitude': self.min_altitude,
            'total_records': len(self.records),
        }
        if include_records:
            data['records'] = [record.as_dict() for record in self.records]
        return data


@dataclass(frozen=True)
class ZoneSummary:
    """Zone totals across all activities sharing a week or month anchor."""
    period_start: str
    activity_count: int
    zones: ZoneTimes


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def month_start(day: date) -> date:
    """First day of the month containing ``day``."""
    return day.replace(day=1)
