from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from .analyzer import FitAnalyzer
from .db import DatabaseManager
from .errors import ActivityImportError, DuplicateActivityError
from .models import ActivitySummary


logger = logging.getLogger(__name__)


class ImportStatus:
    PARSING = "parsing"
    SAVING = "saving"
    DONE = "done"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass
class ImportProgress:
    file_index: int
    total_files: int
    filename: str
    status: str
    error: Optional[str] = None
    activity_id: Optional[int] = None


@dataclass
class ImportReport:
    started_at: str
    finished_at: str
    total_files: int = 0
    imported: int = 0
    duplicates: int = 0
    failed: int = 0
    skipped: int = 0
    activity_ids: List[int] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.duplicates == 0


@dataclass
class _FileOutcome:
    index: int
    path: str
    filename: str
    summary: Optional[ActivitySummary] = None
    error: Optional[Exception] = None
    skipped: bool = False


class LibraryManager:
    """Batch import of FIT files into the activity store."""

    def __init__(
        self,
        db: Optional[DatabaseManager] = None,
        analyzer: Optional[FitAnalyzer] = None,
        max_workers: int = 1,
        stop_on_error: bool = False,
        progress_callback: Optional[Callable[[ImportProgress], None]] = None,
    ) -> None:
        self.db = db or DatabaseManager()
        self.analyzer = analyzer or FitAnalyzer()
        self.max_workers = max(1, int(max_workers))
        self.stop_on_error = stop_on_error
        self.progress_callback = progress_callback
        self._import_lock = asyncio.Lock()
        self._halt_index: Optional[int] = None

    async def ingest_folder(self, folder: str) -> ImportReport:
        normalized = self._normalize_path(folder)
        if not normalized or not os.path.isdir(normalized):
            now_iso = self._utc_now_iso()
            return ImportReport(
                started_at=now_iso,
                finished_at=now_iso,
                failed=1,
                errors=["Folder does not exist: {0}".format(folder)],
            )

        paths, scan_errors = await asyncio.to_thread(self._scan_fit_files, normalized)
        report = await self.ingest_files(paths)
        report.errors = scan_errors + report.errors
        return report

    async def ingest_files(self, paths: Sequence[str]) -> ImportReport:
        normalized_paths: List[str] = []
        for raw_path in paths:
            normalized = self._normalize_path(raw_path)
            if normalized and normalized not in normalized_paths:
                normalized_paths.append(normalized)

        if not normalized_paths:
            now_iso = self._utc_now_iso()
            return ImportReport(
                started_at=now_iso,
                finished_at=now_iso,
                errors=["No FIT files were provided to import."],
            )

        async with self._import_lock:
            return await self._run_import(normalized_paths)

    async def _run_import(self, paths: List[str]) -> ImportReport:
        started_at = self._utc_now_iso()
        report = ImportReport(started_at=started_at, finished_at=started_at, total_files=len(paths))
        self._halt_index = None
        semaphore = asyncio.Semaphore(self.max_workers)

        tasks = [
            asyncio.create_task(self._decode_file(index, path, len(paths), semaphore))
            for index, path in enumerate(paths)
        ]

        # Decodes may finish out of order; results are stored in input order.
        for task in tasks:
            outcome = await task
            await self._record_outcome(outcome, report)

        report.finished_at = self._utc_now_iso()
        logger.info(
            "Import finished: %d imported, %d duplicates, %d failed, %d skipped",
            report.imported, report.duplicates, report.failed, report.skipped,
        )
        return report

    async def _decode_file(
        self,
        index: int,
        path: str,
        total: int,
        semaphore: asyncio.Semaphore,
    ) -> _FileOutcome:
        filename = os.path.basename(path)
        outcome = _FileOutcome(index=index, path=path, filename=filename)

        async with semaphore:
            if self._is_halted_before(index):
                outcome.skipped = True
                return outcome

            try:
                if await asyncio.to_thread(self.db.activity_exists, filename):
                    raise DuplicateActivityError(filename)
                self._notify(ImportProgress(index, total, filename, ImportStatus.PARSING))
                outcome.summary = await asyncio.to_thread(self.analyzer.analyze_file, path)
            except (ActivityImportError, DuplicateActivityError) as exc:
                outcome.error = exc
                self._halt_after(index)
            except Exception as exc:
                logger.exception("Unexpected error decoding %s", path)
                outcome.error = exc
                self._halt_after(index)
        return outcome

    def _is_halted_before(self, index: int) -> bool:
        return self._halt_index is not None and index > self._halt_index

    def _halt_after(self, index: int) -> None:
        if not self.stop_on_error:
            return
        if self._halt_index is None or index < self._halt_index:
            self._halt_index = index

    async def _record_outcome(self, outcome: _FileOutcome, report: ImportReport) -> None:
        total = report.total_files

        if outcome.skipped or (outcome.error is None and self._is_halted_before(outcome.index)):
            # Decoded before the halt but not yet stored: leave it out
            report.skipped += 1
            self._notify(ImportProgress(outcome.index, total, outcome.filename, ImportStatus.SKIPPED))
            return

        if outcome.error is None:
            self._notify(ImportProgress(outcome.index, total, outcome.filename, ImportStatus.SAVING))
            try:
                activity_id = await asyncio.to_thread(self.db.insert_activity, outcome.summary)
            except DuplicateActivityError as exc:
                outcome.error = exc
                self._halt_after(outcome.index)
            except Exception as exc:
                logger.exception("Unexpected error storing %s", outcome.path)
                outcome.error = exc
                self._halt_after(outcome.index)
            else:
                report.imported += 1
                report.activity_ids.append(activity_id)
                self._notify(ImportProgress(
                    outcome.index, total, outcome.filename, ImportStatus.DONE,
                    activity_id=activity_id,
                ))
                return

        if isinstance(outcome.error, DuplicateActivityError):
            report.duplicates += 1
        else:
            report.failed += 1
        error_text = str(outcome.error) or type(outcome.error).__name__
        report.errors.append("{0}: {1}".format(outcome.path, error_text))
        logger.warning("Import failed for %s: %s", outcome.path, error_text)
        self._notify(ImportProgress(
            outcome.index, total, outcome.filename, ImportStatus.ERROR, error=error_text,
        ))

    def _notify(self, progress: ImportProgress) -> None:
        if self.progress_callback is None:
            return
        try:
            self.progress_callback(progress)
        except Exception as exc:
            logger.warning("Progress callback error: %s", exc)

    def _scan_fit_files(self, root: str) -> Tuple[List[str], List[str]]:
        fit_files: List[str] = []
        errors: List[str] = []

        def _on_error(err: OSError) -> None:
            filename = getattr(err, "filename", root)
            errors.append("{0}: {1}".format(filename, err))

        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            dirnames.sort()
            for name in sorted(filenames):
                if name.lower().endswith(".fit"):
                    fit_files.append(os.path.join(dirpath, name))
        return fit_files, errors

    @staticmethod
    def _normalize_path(path: str) -> Optional[str]:
        if not path:
            return None
        return os.path.realpath(os.path.expanduser(str(path)))

    @staticmethod
    def _utc_now_iso() -> str:
        return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
