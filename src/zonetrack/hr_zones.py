"""Heart-rate zone bands, labels, and classification."""

from __future__ import annotations

from typing import Dict, NamedTuple, Optional, Tuple


class HrZone(NamedTuple):
    name: str
    min_hr: int
    max_hr: int


# Contiguous, inclusive bands covering 0-255 bpm.
HR_ZONES: Tuple[HrZone, ...] = (
    HrZone('zone1', 0, 116),
    HrZone('zone2', 117, 136),
    HrZone('zone3', 137, 155),
    HrZone('zone4', 156, 175),
    HrZone('zone5', 176, 255),
)

HR_ZONE_ORDER: Tuple[str, ...] = tuple(zone.name for zone in HR_ZONES)

# Display placeholder for samples without a heart rate
DEFAULT_ZONE = 'zone1'

HR_ZONE_DESCRIPTIONS: Dict[str, str] = {
    'zone1': 'Recovery',
    'zone2': 'Aerobic',
    'zone3': 'Tempo',
    'zone4': 'Threshold',
    'zone5': 'VO2max',
}

HR_ZONE_RANGE_LABELS: Dict[str, str] = {
    zone.name: f'Zone {index} ({zone.min_hr}-{zone.max_hr} bpm)'
    for index, zone in enumerate(HR_ZONES, start=1)
}


def get_zone(hr: int) -> str:
    """Return the zone name whose band contains ``hr``."""
    for zone in HR_ZONES:
        if zone.min_hr <= hr <= zone.max_hr:
            return zone.name
    return DEFAULT_ZONE


def zone_for_sample(hr: Optional[int]) -> str:
    """Zone label for a record; samples without HR get the placeholder zone."""
    if hr is None:
        return DEFAULT_ZONE
    return get_zone(hr)
