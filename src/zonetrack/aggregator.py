"""
Single-pass activity aggregation over time-sorted samples.

Two notions of time are tracked and must not be mixed:

- ``elapsed_time`` per record is the wall-clock offset from the first sample.
- ``total_duration`` and zone times are sums of inter-record deltas, each
  clamped to MAX_SAMPLE_GAP_SEC, so pauses and GPS dropouts do not count.
  For recordings with long gaps the duration can be much shorter than the
  wall-clock span; zone times rely on this definition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from .constants import MAX_SAMPLE_GAP_SEC
from .hr_zones import zone_for_sample
from .models import ReconciledRecord, Sample, ZoneTimes


def sample_delta_seconds(current: datetime, following: Optional[datetime]) -> float:
    """Clamped time from this sample to the next one (0 for the last sample)."""
    if following is None:
        return 0.0
    delta = (following - current).total_seconds()
    return max(0.0, min(MAX_SAMPLE_GAP_SEC, delta))


@dataclass
class ActivityAccumulator:
    """Running state threaded through one aggregation pass."""
    first_timestamp: Optional[datetime] = None
    zones: ZoneTimes = field(default_factory=ZoneTimes)
    total_duration: float = 0.0
    total_distance: float = 0.0
    elevation_gain: float = 0.0
    max_altitude: Optional[float] = None
    min_altitude: Optional[float] = None
    last_altitude: Optional[float] = None

    def add(self, sample: Sample, next_timestamp: Optional[datetime]) -> ReconciledRecord:
        if self.first_timestamp is None:
            self.first_timestamp = sample.timestamp

        elapsed_time = (sample.timestamp - self.first_timestamp).total_seconds()
        zone = zone_for_sample(sample.heart_rate)
        delta = sample_delta_seconds(sample.timestamp, next_timestamp)

        # Placeholder zone for HR-less samples is display only
        if sample.heart_rate is not None:
            self.zones.add(zone, delta)
        self.total_duration += delta

        if sample.distance is not None:
            self.total_distance = max(self.total_distance, sample.distance)

        self._track_altitude(sample.altitude)

        return ReconciledRecord(
            timestamp=sample.timestamp,
            elapsed_time=elapsed_time,
            heart_rate=sample.heart_rate,
            distance=sample.distance,
            altitude=sample.altitude,
            speed=sample.speed,
            temperature=sample.temperature,
            position_lat=sample.position_lat,
            position_long=sample.position_long,
            zone=zone,
            extras=dict(sample.extras),
        )

    def _track_altitude(self, altitude: Optional[float]) -> None:
        # Missing altitudes are skipped; the chain continues from the last present one
        if altitude is None:
            return
        self.min_altitude = altitude if self.min_altitude is None else min(self.min_altitude, altitude)
        self.max_altitude = altitude if self.max_altitude is None else max(self.max_altitude, altitude)
        if self.last_altitude is not None and altitude > self.last_altitude:
            self.elevation_gain += altitude - self.last_altitude
        self.last_altitude = altitude


@dataclass(frozen=True)
class AggregateResult:
    records: Tuple[ReconciledRecord, ...]
    zones: ZoneTimes
    total_duration: float
    total_distance: float
    elevation_gain: float
    max_altitude: Optional[float]
    min_altitude: Optional[float]


def aggregate_samples(samples: Sequence[Sample]) -> AggregateResult:
    """Walk time-sorted samples once, producing records and activity totals."""
    acc = ActivityAccumulator()
    records: List[ReconciledRecord] = []

    for index, sample in enumerate(samples):
        following = samples[index + 1].timestamp if index + 1 < len(samples) else None
        records.append(acc.add(sample, following))

    return AggregateResult(
        records=tuple(records),
        zones=acc.zones,
        total_duration=acc.total_duration,
        total_distance=acc.total_distance,
        elevation_gain=acc.elevation_gain,
        max_altitude=acc.max_altitude,
        min_altitude=acc.min_altitude,
    )
