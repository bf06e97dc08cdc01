"""Scanning and cleaning orchestration engine."""

from __future__ import annotations

import logging
import os
import threading
from typing import Callable

from deletor.core.force_delete import ForceDeleter
from deletor.core.operations import delete_matching, delete_paths
from deletor.core.pruner import find_empty_dirs, prune_empty_subfolders
from deletor.core.scanner import FileScanner
from deletor.models.clean_result import CleanResult
from deletor.models.file_filter import FileFilter
from deletor.models.scan_result import ScanReport

log = logging.getLogger(__name__)

MatchCallback = Callable[[str, int], None]  # (path, size_bytes)


class DeletorEngine:
    """Runs filtered scans and deletions under one FileFilter.

    ``scan()`` remembers its report per root so that ``clean()`` removes
    exactly what the user was shown.
    """

    def __init__(
        self,
        file_filter: FileFilter,
        *,
        workers: int | None = None,
        force_deleter: ForceDeleter | None = None,
    ) -> None:
        self.filter = file_filter
        self.workers = workers
        self.force_deleter = force_deleter
        self._cancel = threading.Event()
        self._last_scan: dict[str, ScanReport] = {}

    def cancel(self) -> None:
        """Stop in-flight walks; entries already being processed still finish."""
        self._cancel.set()

    def reset(self) -> None:
        """Clear a previous cancellation so the engine can be reused."""
        self._cancel.clear()

    def scan(
        self,
        root: str | os.PathLike[str],
        recursive: bool = False,
        on_match: MatchCallback | None = None,
    ) -> ScanReport:
        """Find files matching the filter.

        Args:
            root: Directory to scan.
            recursive: Include subdirectories.
            on_match: Optional callback fired for every match.

        Raises:
            RootAccessError: If *root* cannot be listed.
        """
        scanner = FileScanner(self.filter, workers=self.workers, on_match=on_match, cancel=self._cancel)
        report = scanner.scan(root, recursive=recursive)
        self._last_scan[report.root] = report
        return report

    def clean(self, root: str | os.PathLike[str], recursive: bool = False) -> CleanResult:
        """Delete the files found by the last scan of *root*.

        Scans first if *root* has not been scanned yet.
        """
        key = os.fspath(root)
        report = self._last_scan.pop(key, None)
        if report is None:
            report = self.scan(root, recursive=recursive)
            self._last_scan.pop(key, None)

        result = delete_paths(report.paths, target=key, force_deleter=self.force_deleter)
        if result.errors:
            log.warning("%d of %d files under %s could not be deleted", len(result.errors), len(report.entries), key)
        return result

    def delete_matching(self, root: str | os.PathLike[str], recursive: bool = True) -> CleanResult:
        """Walk *root* and delete matches directly, without a preview scan."""
        self._last_scan.pop(os.fspath(root), None)
        return delete_matching(
            root,
            self.filter,
            recursive=recursive,
            workers=self.workers,
            cancel=self._cancel,
            force_deleter=self.force_deleter,
        )

    def find_empty_dirs(self, root: str | os.PathLike[str]) -> list[str]:
        """List empty subdirectories of *root*, parents first."""
        return find_empty_dirs(root, self._cancel)

    def prune(self, root: str | os.PathLike[str]) -> CleanResult:
        """Remove empty subdirectories of *root*, deepest first."""
        return prune_empty_subfolders(root, self._cancel)

    def get_last_scan(self, root: str | os.PathLike[str]) -> ScanReport | None:
        """Get the cached scan report for a root."""
        return self._last_scan.get(os.fspath(root))
