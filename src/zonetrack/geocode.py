"""
Best-effort reverse geocoding for an activity's starting point.

Lookups use the offline ``reverse_geocoder`` dataset. A failed or empty
lookup never fails the import; the activity just has no location.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Tuple

import reverse_geocoder as rg

from .models import ReconciledRecord

logger = logging.getLogger(__name__)

# (latitude, longitude) -> (place name, region code)
GeocodeLookup = Callable[[float, float], Optional[Tuple[str, str]]]


class ReverseGeocoderLookup:
    """Nearest-place lookup backed by reverse_geocoder."""

    def __call__(self, lat: float, lon: float) -> Optional[Tuple[str, str]]:
        # mode=1 keeps the k-d tree search in-process
        results = rg.search([(lat, lon)], mode=1, verbose=False)
        if not results:
            return None
        top = results[0]
        name = top.get('name', '')
        region = top.get('cc', '')
        if not name:
            return None
        return name, region


def format_location(place: str, region: str) -> str:
    return f"{place}, {region}"


def first_position(records: Iterable[ReconciledRecord]) -> Optional[Tuple[float, float]]:
    for record in records:
        if record.has_position:
            return record.position_lat, record.position_long
    return None


def resolve_location(
    records: Iterable[ReconciledRecord],
    lookup: Optional[GeocodeLookup],
) -> Optional[str]:
    """Geocode the first record with both coordinates, at most once."""
    if lookup is None:
        return None
    position = first_position(records)
    if position is None:
        return None

    lat, lon = position
    try:
        result = lookup(lat, lon)
    except Exception as exc:
        logger.warning("Reverse geocode failed for (%.5f, %.5f): %s", lat, lon, exc)
        return None

    if not result:
        return None
    return format_location(*result)
