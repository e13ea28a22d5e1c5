"""
Exception hierarchy for ZoneTrack.

Only whole-file failures raise. Field-level oddities inside a FIT file are
absorbed by the reconciler (missing values stay absent, unknown fields go to
extras) and never surface here.
"""

from typing import Any, Dict, Optional


class ZoneTrackError(Exception):
    """Base exception for all ZoneTrack errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class ActivityImportError(ZoneTrackError):
    """A single activity file could not be turned into a summary."""
    pass


class SourceUnreadableError(ActivityImportError):
    """
    Raised when the input file cannot be opened or read.

    Examples:
    - File does not exist
    - Permission denied
    """
    pass


class MalformedFitError(ActivityImportError):
    """
    Raised when the FIT decoder rejects the byte stream.

    Examples:
    - Bad header or CRC
    - Truncated data section
    """
    pass


class EmptyActivityError(ActivityImportError):
    """Raised when decoding succeeds but yields no timestamped sample records."""

    def __init__(self, message: str = "No records found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class DuplicateActivityError(ZoneTrackError):
    """An activity with the same filename is already stored."""

    def __init__(self, filename: str):
        super().__init__(f"Duplicate activity: {filename}")
        self.filename = filename


class ActivityNotFoundError(ZoneTrackError):
    """No stored activity has the requested id."""

    def __init__(self, activity_id: int):
        super().__init__(f"Activity not found: {activity_id}")
        self.activity_id = activity_id
