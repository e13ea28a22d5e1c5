"""
Sample-message reconciliation.

Turns raw ``record`` messages into time-sorted ``Sample`` values: resolves
enhanced vs. legacy fields, converts semicircles to degrees, and keeps any
other numeric field in an open ``extras`` map.
"""

from __future__ import annotations

import numbers
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from .constants import (
    CORE_FIELDS,
    HR_MAX,
    HR_MIN,
    SAMPLE_MESSAGE,
    SEMICIRCLE_SCALE,
    SINT32_MAX,
    SINT32_MIN,
    TEMPERATURE_MAX,
    TEMPERATURE_MIN,
)
from .errors import EmptyActivityError
from .fit_decoder import RawField, RawMessage
from .models import Sample


def extract_float(value: Any, enum: bool = False) -> Optional[float]:
    """
    Widen a decoded numeric value to float.

    Returns None for anything that is not a plain number: strings, enum
    tags, timestamps, arrays, booleans and missing values.
    """
    if enum or value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        return float(value)
    return None


def collect_extras(fields: Iterable[RawField]) -> Dict[str, float]:
    """Numeric non-core fields keyed by their original name."""
    extras: Dict[str, float] = {}
    for raw_field in fields:
        if raw_field.name in CORE_FIELDS:
            continue
        number = extract_float(raw_field.value, raw_field.enum)
        if number is not None:
            extras[raw_field.name] = number
    return extras


def semicircles_to_degrees(semicircles: int) -> float:
    return semicircles * SEMICIRCLE_SCALE


def _as_utc(value: Any) -> Optional[datetime]:
    if not isinstance(value, datetime):
        return None
    # fitparse hands back naive datetimes that are already UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _bounded_int(value: Any, low: int, high: int) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        return None
    value = int(value)
    if low <= value <= high:
        return value
    return None


def reconcile_message(message: RawMessage) -> Optional[Sample]:
    """
    Build a Sample from one sample message.

    Returns None when the message carries no usable timestamp.
    """
    timestamp = None
    heart_rate = None
    distance = None
    altitude = None
    enhanced_altitude = None
    speed = None
    enhanced_speed = None
    temperature = None
    position_lat = None
    position_long = None

    for raw_field in message.fields:
        name, value = raw_field.name, raw_field.value
        if name == 'timestamp':
            timestamp = _as_utc(value)
        elif name == 'heart_rate':
            heart_rate = _bounded_int(value, HR_MIN, HR_MAX)
        elif name == 'distance':
            distance = extract_float(value, raw_field.enum)
        elif name == 'altitude':
            altitude = extract_float(value, raw_field.enum)
        elif name == 'enhanced_altitude':
            enhanced_altitude = extract_float(value, raw_field.enum)
        elif name == 'speed':
            speed = extract_float(value, raw_field.enum)
        elif name == 'enhanced_speed':
            enhanced_speed = extract_float(value, raw_field.enum)
        elif name == 'temperature':
            temperature = _bounded_int(value, TEMPERATURE_MIN, TEMPERATURE_MAX)
        elif name == 'position_lat':
            position_lat = _bounded_int(value, SINT32_MIN, SINT32_MAX)
        elif name == 'position_long':
            position_long = _bounded_int(value, SINT32_MIN, SINT32_MAX)

    if timestamp is None:
        return None

    lat_deg = lon_deg = None
    if position_lat is not None and position_long is not None:
        lat_deg = semicircles_to_degrees(position_lat)
        lon_deg = semicircles_to_degrees(position_long)

    return Sample(
        timestamp=timestamp,
        heart_rate=heart_rate,
        distance=distance,
        altitude=enhanced_altitude if enhanced_altitude is not None else altitude,
        speed=enhanced_speed if enhanced_speed is not None else speed,
        temperature=temperature,
        position_lat=lat_deg,
        position_long=lon_deg,
        extras=collect_extras(message.fields),
    )


def reconcile_samples(messages: Iterable[RawMessage]) -> List[Sample]:
    """
    Reconcile every sample message and sort by timestamp.

    Equal timestamps keep their decode order.

    Raises:
        EmptyActivityError: no sample message had a timestamp
    """
    samples = []
    for message in messages:
        if message.kind != SAMPLE_MESSAGE:
            continue
        sample = reconcile_message(message)
        if sample is not None:
            samples.append(sample)

    if not samples:
        raise EmptyActivityError()

    samples.sort(key=lambda sample: sample.timestamp)
    return samples
