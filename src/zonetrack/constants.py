"""
Shared constants for FIT decoding, aggregation, and activity typing.

Sport matching tables live here rather than inline in the classifier so they
can be tuned per device ecosystem without touching the matching logic.
"""

from typing import Dict, FrozenSet, Tuple

# --- FIT message kinds ---
SAMPLE_MESSAGE = 'record'
ACTIVITY_MESSAGES: FrozenSet[str] = frozenset({'session', 'activity'})

# The ten sample fields with dedicated ReconciledRecord slots.
# Anything else numeric on a sample lands in `extras`.
CORE_FIELDS: FrozenSet[str] = frozenset({
    'timestamp',
    'heart_rate',
    'distance',
    'altitude',
    'enhanced_altitude',
    'speed',
    'enhanced_speed',
    'temperature',
    'position_lat',
    'position_long',
})

# Semicircles: +/- 2^31 maps to +/- 180 degrees
SEMICIRCLE_SCALE = 180.0 / 2**31

# Upper bound for a single inter-record delta (seconds)
MAX_SAMPLE_GAP_SEC = 10.0

HR_MIN = 0
HR_MAX = 255
TEMPERATURE_MIN = -128
TEMPERATURE_MAX = 127
SINT32_MIN = -2**31
SINT32_MAX = 2**31 - 1

# --- Activity typing ---
DEFAULT_ACTIVITY_TYPE = 'Other'

SPORT_FIELDS: Tuple[str, ...] = ('sport', 'sub_sport')

# Evaluated in order; first group with a substring hit wins.
SPORT_KEYWORD_GROUPS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (('hike', 'hiking'), 'Hike'),
    (('walk', 'walking'), 'Walk'),
    (('swim', 'swimming'), 'Swimming'),
    (('run', 'running'), 'Run'),
    (('strength', 'training'), 'Strength'),
)

SPORT_CODE_TYPES: Dict[int, str] = {
    1: 'Run',
    5: 'Swimming',
    11: 'Walk',
    17: 'Hike',
    # Training / strength-like codes vary by device.
    7: 'Strength',
    8: 'Strength',
    9: 'Strength',
}
