"""Filtered scanning: collects matching files and their total size."""

from __future__ import annotations

import logging
import os
import threading
from typing import Callable

from deletor.core.walker import BoundedWalker, check_root
from deletor.models.file_filter import FileFilter
from deletor.models.scan_result import EntryOutcome, MatchedEntry, ScanReport
from deletor.utils import format_size

log = logging.getLogger(__name__)

MatchCallback = Callable[[str, int], None]  # (path, size_bytes)


class FileScanner:
    """Finds files under a root that satisfy a FileFilter."""

    def __init__(
        self,
        file_filter: FileFilter,
        *,
        workers: int | None = None,
        on_match: MatchCallback | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        self.filter = file_filter
        self.workers = workers
        self.on_match = on_match
        self.cancel = cancel if cancel is not None else threading.Event()

    def scan(self, root: str | os.PathLike[str], recursive: bool = False) -> ScanReport:
        """Scan *root*, descending into subdirectories only if *recursive*."""
        if recursive:
            return self.scan_recursively(root)
        return self.scan_current_level(root)

    def scan_current_level(self, root: str | os.PathLike[str]) -> ScanReport:
        """Scan only the immediate children of *root*; subdirectories are ignored."""
        path = check_root(root)
        report = ScanReport(root=path)

        with os.scandir(path) as it:
            for entry in it:
                if self.cancel.is_set():
                    report.cancelled = True
                    break
                try:
                    if entry.is_dir(follow_symlinks=False):
                        continue
                    info = entry.stat(follow_symlinks=False)
                except OSError as exc:
                    log.debug("Skipping %s: %s", entry.path, exc)
                    report.skipped.append(EntryOutcome(entry.path, exc.strerror or str(exc)))
                    continue
                if self.filter.matches(info, entry.path):
                    self._record(report, entry.path, info.st_size)
                    if self.on_match:
                        self.on_match(entry.path, info.st_size)

        log.info("Scanned %s: %d matches, %s", path, len(report.matches), format_size(report.total_bytes))
        return report

    def scan_recursively(self, root: str | os.PathLike[str]) -> ScanReport:
        """Scan the whole tree under *root* using the bounded worker pool."""
        path = check_root(root)
        report = ScanReport(root=path)
        lock = threading.Lock()

        def _evaluate(entry_path: str, info: os.stat_result) -> None:
            # Predicate runs outside the lock; only the aggregate update is serialized.
            if not self.filter.matches(info, entry_path):
                return
            with lock:
                self._record(report, entry_path, info.st_size)
            if self.on_match:
                self.on_match(entry_path, info.st_size)

        walker = BoundedWalker(self.workers, self.cancel)
        report.skipped.extend(walker.run(path, _evaluate, recursive=True))
        report.cancelled = walker.cancelled

        log.info("Scanned %s: %d matches, %s", path, len(report.matches), format_size(report.total_bytes))
        return report

    def _record(self, report: ScanReport, path: str, size: int) -> None:
        report.matches[path] = format_size(size)
        report.entries.append(MatchedEntry(path=path, size_bytes=size))
        report.total_bytes += size
