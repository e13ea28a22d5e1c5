"""
FIT Activity Analyzer - decode, reconcile, aggregate, classify.

One call to ``FitAnalyzer.analyze_file`` runs the whole pipeline for a single
file and either returns an ``ActivitySummary`` or raises an
``ActivityImportError``. Nothing is kept between files.
"""

import logging
import os
from datetime import timezone
from typing import Callable, List, Optional, Sequence

from .activity_type import classify_activity
from .aggregator import aggregate_samples
from .errors import ActivityImportError
from .fit_decoder import RawMessage, decode_fit_file
from .geocode import GeocodeLookup, ReverseGeocoderLookup, resolve_location
from .models import ActivitySummary, month_start, week_start
from .records import reconcile_samples

logger = logging.getLogger(__name__)


def build_activity_summary(
    filename: str,
    messages: Sequence[RawMessage],
    geocoder: Optional[GeocodeLookup] = None,
) -> ActivitySummary:
    """
    Turn decoded messages into an ActivitySummary.

    Raises:
        EmptyActivityError: no timestamped sample messages
    """
    samples = reconcile_samples(messages)
    aggregate = aggregate_samples(samples)
    activity_type = classify_activity(messages)

    first = aggregate.records[0].timestamp.astimezone(timezone.utc)
    activity_date = first.date()
    location = resolve_location(aggregate.records, geocoder)

    return ActivitySummary(
        filename=filename,
        activity_type=activity_type,
        activity_date=activity_date,
        start_time=first.isoformat(),
        location=location,
        week_start=week_start(activity_date),
        month_start=month_start(activity_date),
        total_duration=aggregate.total_duration,
        total_distance=aggregate.total_distance,
        zones=aggregate.zones,
        elevation_gain=aggregate.elevation_gain,
        max_altitude=aggregate.max_altitude,
        min_altitude=aggregate.min_altitude,
        records=aggregate.records,
    )


class FitAnalyzer:
    """Runs the activity pipeline for FIT files."""

    def __init__(
        self,
        output_callback: Optional[Callable[[str], None]] = None,
        geocoder: Optional[GeocodeLookup] = None,
        geocode_enabled: bool = True,
    ):
        """
        Initialize analyzer.

        Args:
            output_callback: Optional function to call with output lines
            geocoder: Reverse-geocode lookup; defaults to reverse_geocoder
            geocode_enabled: Set False to skip location lookup entirely
        """
        self.output_callback = output_callback or self._default_output
        if not geocode_enabled:
            self.geocoder = None
        else:
            self.geocoder = geocoder or ReverseGeocoderLookup()

    def _default_output(self, text: str):
        logger.info(text)

    def _emit(self, text: str):
        self.output_callback(text)

    def analyze_file(self, filename: str) -> ActivitySummary:
        """
        Analyze a single FIT file.

        Raises:
            SourceUnreadableError, MalformedFitError, EmptyActivityError
        """
        basename = os.path.basename(filename)
        messages = decode_fit_file(filename)
        summary = build_activity_summary(basename, messages, self.geocoder)

        logger.debug(
            "%s: %d records, %.0fs, %.0fm, type=%s",
            basename, len(summary.records), summary.total_duration,
            summary.total_distance, summary.activity_type,
        )
        self._emit(f"Processing: {basename}... Done.")
        return summary

    def analyze_folder(self, folder_path: str) -> List[ActivitySummary]:
        """
        Analyze all FIT files in a folder.

        A failing file is reported and skipped; the rest still run.
        """
        files = sorted(f for f in os.listdir(folder_path) if f.lower().endswith('.fit'))

        if not files:
            self._emit(f"⚠️ No .fit files found in {folder_path}")
            return []

        self._emit(f"📁 Found {len(files)} FIT file(s) in {folder_path}")

        results = []
        for f in files:
            filepath = os.path.join(folder_path, f)
            try:
                results.append(self.analyze_file(filepath))
            except ActivityImportError as exc:
                logger.warning("Skipping %s: %s", f, exc)
                self._emit(f"❌ Error processing {f}: {exc}")

        self._emit(f"✅ Analysis complete! Processed {len(results)} file(s).")
        return results
