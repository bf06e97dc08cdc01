"""Scanning and clearing of OS cache locations."""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable

from deletor.core.force_delete import ForceDeleteError, ForceDeleter, get_force_deleter
from deletor.core.locations import locations_for
from deletor.core.operations import remove_file
from deletor.core.walker import RootAccessError, check_root, iter_entries
from deletor.models.cache_location import CacheLocation
from deletor.models.clean_result import CleanResult
from deletor.models.scan_result import ScanResult
from deletor.utils import current_os, format_size

log = logging.getLogger(__name__)

ResultCallback = Callable[[ScanResult], None]


class CacheManager:
    """Measures and clears the cache locations of one operating system."""

    def __init__(
        self,
        os_name: str | None = None,
        locations: Iterable[CacheLocation] | None = None,
        force_deleter: ForceDeleter | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        self.os_name = os_name or current_os()
        self.locations = list(locations) if locations is not None else locations_for(self.os_name)
        self.force_deleter = force_deleter or get_force_deleter(self.os_name)
        self.cancel = cancel if cancel is not None else threading.Event()

    def scan_all(self, on_result: ResultCallback | None = None) -> list[ScanResult]:
        """Scan every location concurrently, one task per location.

        Result order is not guaranteed. Returns only after every location
        has been scanned.
        """
        if not self.locations:
            return []

        results: list[ScanResult] = []
        lock = threading.Lock()

        def _scan_location(location: CacheLocation) -> None:
            result = self.scan(location.path)
            with lock:
                results.append(result)
            if on_result:
                on_result(result)

        with ThreadPoolExecutor(max_workers=len(self.locations), thread_name_prefix="deletor-cache") as executor:
            futures = [executor.submit(_scan_location, location) for location in self.locations]
            for future in futures:
                future.result()

        return results

    def scan(self, path: str) -> ScanResult:
        """Count and size every entry under *path*, the directory itself included."""
        try:
            check_root(path)
            root_info = os.lstat(path)
        except (RootAccessError, OSError) as exc:
            log.debug("Cannot scan cache location %s: %s", path, exc)
            return ScanResult(path=path, error=str(exc))

        count = 1
        size = root_info.st_size
        for _entry_path, info in iter_entries(path, include_dirs=True, cancel=self.cancel):
            count += 1
            size += info.st_size

        log.info("Cache location %s: %d entries, %s", path, count, format_size(size))
        return ScanResult(path=path, file_count=count, size_bytes=size)

    def clear_cache(self) -> CleanResult:
        """Remove every file in every location, forcing removal where needed.

        Directories are left in place. Files that cannot be removed even by
        the forced fallback are listed in ``errors``.
        """
        result = CleanResult(operation="cache", target=", ".join(loc.path for loc in self.locations))

        for location in self.locations:
            for path, info in iter_entries(location.path, cancel=self.cancel, on_error=_log_skip):
                try:
                    remove_file(path, self.force_deleter)
                except (OSError, ForceDeleteError) as exc:
                    log.debug("Could not remove %s: %s", path, exc)
                    result.errors.append(f"{path}: {exc}")
                    continue
                result.removed.append(path)
                result.freed_bytes += info.st_size

        log.info(
            "Cleared %d cache files (%s), %d errors",
            result.files_removed,
            format_size(result.freed_bytes),
            len(result.errors),
        )
        return result


def _log_skip(path: str, exc: OSError) -> None:
    log.debug("Skipping %s: %s", path, exc)
