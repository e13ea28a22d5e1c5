"""Coarse activity typing from session/activity sport fields."""

from __future__ import annotations

import numbers
from typing import Iterable, List, Optional, Tuple

from .constants import (
    ACTIVITY_MESSAGES,
    DEFAULT_ACTIVITY_TYPE,
    SPORT_CODE_TYPES,
    SPORT_FIELDS,
    SPORT_KEYWORD_GROUPS,
)
from .fit_decoder import RawMessage


def map_sport_text(raw: str) -> Optional[str]:
    """Case-insensitive keyword match; the first matching group wins."""
    text = raw.lower()
    for keywords, activity_type in SPORT_KEYWORD_GROUPS:
        if any(keyword in text for keyword in keywords):
            return activity_type
    return None


def map_sport_code(code: int) -> Optional[str]:
    return SPORT_CODE_TYPES.get(code)


def _sport_values(message: RawMessage) -> Tuple[List[str], List[int]]:
    texts: List[str] = []
    codes: List[int] = []
    for raw_field in message.fields:
        if raw_field.name not in SPORT_FIELDS:
            continue
        value = raw_field.value
        if isinstance(value, str):
            texts.append(value)
        elif isinstance(value, numbers.Integral) and not isinstance(value, bool):
            codes.append(int(value))
    return texts, codes


def classify_message(message: RawMessage) -> Optional[str]:
    """Type for one session/activity message; text beats code."""
    texts, codes = _sport_values(message)
    for text in texts:
        mapped = map_sport_text(text)
        if mapped:
            return mapped
    for code in codes:
        mapped = map_sport_code(code)
        if mapped:
            return mapped
    return None


def classify_activity(messages: Iterable[RawMessage]) -> str:
    """First mapped type across session/activity messages, else 'Other'."""
    for message in messages:
        if message.kind not in ACTIVITY_MESSAGES:
            continue
        mapped = classify_message(message)
        if mapped:
            return mapped
    return DEFAULT_ACTIVITY_TYPE
