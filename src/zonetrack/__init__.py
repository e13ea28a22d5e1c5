"""
ZoneTrack
Heart-rate zone tracking for FIT activity files.
"""

__version__ = "1.0.0"
__author__ = ""

from zonetrack.analyzer import FitAnalyzer, build_activity_summary
from zonetrack.db import DatabaseManager
from zonetrack.errors import (
    ActivityImportError,
    ActivityNotFoundError,
    DuplicateActivityError,
    EmptyActivityError,
    MalformedFitError,
    SourceUnreadableError,
    ZoneTrackError,
)
from zonetrack.library_manager import LibraryManager
from zonetrack.models import ActivitySummary, ReconciledRecord, ZoneSummary, ZoneTimes

__all__ = [
    "FitAnalyzer",
    "build_activity_summary",
    "DatabaseManager",
    "LibraryManager",
    "ActivitySummary",
    "ReconciledRecord",
    "ZoneSummary",
    "ZoneTimes",
    "ZoneTrackError",
    "ActivityImportError",
    "SourceUnreadableError",
    "MalformedFitError",
    "EmptyActivityError",
    "DuplicateActivityError",
    "ActivityNotFoundError",
]
