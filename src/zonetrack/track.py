"""Tabular views of activity track data."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Union

import numpy as np
import pandas as pd

from .hr_zones import HR_ZONE_ORDER
from .models import ReconciledRecord, ZoneTimes

TRACK_COLUMNS = [
    'timestamp',
    'elapsed_time',
    'heart_rate',
    'distance',
    'altitude',
    'speed',
    'temperature',
    'position_lat',
    'position_long',
    'zone',
]

NUMERIC_COLUMNS = [
    'elapsed_time', 'heart_rate', 'distance', 'altitude', 'speed',
    'temperature', 'position_lat', 'position_long',
]

TrackRow = Union[ReconciledRecord, Mapping[str, Any]]


def extra_column(name: str) -> str:
    """Column name for an extras key; keys that clash with a core column get a prefix."""
    if name in TRACK_COLUMNS:
        return f'extra_{name}'
    return name


def _row_dict(record: TrackRow) -> Dict[str, Any]:
    if isinstance(record, ReconciledRecord):
        return record.as_dict()
    return dict(record)


def track_frame(records: Iterable[TrackRow]) -> pd.DataFrame:
    """
    One row per track record, extras expanded into their own columns.

    Accepts freshly decoded records or replayed dict records from the store.
    """
    rows: List[Dict[str, Any]] = []
    extra_keys: List[str] = []
    for record in records:
        data = _row_dict(record)
        extras = data.pop('extras', None) or {}
        for key, value in extras.items():
            column = extra_column(key)
            if column not in extra_keys:
                extra_keys.append(column)
            data[column] = value
        rows.append(data)

    df = pd.DataFrame(rows, columns=TRACK_COLUMNS + extra_keys)
    if df.empty:
        return df

    df['timestamp'] = pd.to_datetime(df['timestamp'], utc=True)
    for col in NUMERIC_COLUMNS + extra_keys:
        df[col] = pd.to_numeric(df[col], errors='coerce')
    return df


def zone_percentages(zones: ZoneTimes) -> Dict[str, float]:
    """Share of zone time per zone, as percentages of the zone total."""
    seconds = np.array([getattr(zones, zone) for zone in HR_ZONE_ORDER], dtype=float)
    total = seconds.sum()
    if total <= 0:
        return {zone: 0.0 for zone in HR_ZONE_ORDER}
    shares = np.round(seconds / total * 100.0, 1)
    return {zone: float(share) for zone, share in zip(HR_ZONE_ORDER, shares)}
