"""File removal operations."""

from __future__ import annotations

import logging
import os
import threading
from typing import Iterable

from deletor.core.force_delete import ForceDeleteError, ForceDeleter
from deletor.core.walker import BoundedWalker
from deletor.models.clean_result import CleanResult
from deletor.models.file_filter import FileFilter
from deletor.utils import format_size

log = logging.getLogger(__name__)


def remove_file(path: str, force_deleter: ForceDeleter | None = None) -> None:
    """Remove a single file, falling back to *force_deleter* if that fails.

    Raises:
        OSError: If removal fails and no fallback is given.
        ForceDeleteError: If the fallback fails too.
    """
    try:
        os.remove(path)
    except OSError as exc:
        if force_deleter is None:
            raise
        log.debug("Removing %s failed (%s), forcing", path, exc)
        force_deleter.delete(path)


def delete_matching(
    root: str | os.PathLike[str],
    file_filter: FileFilter,
    *,
    recursive: bool = True,
    workers: int | None = None,
    cancel: threading.Event | None = None,
    force_deleter: ForceDeleter | None = None,
) -> CleanResult:
    """Remove every file under *root* that matches *file_filter*.

    Each file is evaluated and removed independently by the worker pool;
    a failure on one file never stops the others and is reported in
    ``CleanResult.errors`` instead of being raised.

    Raises:
        RootAccessError: If *root* cannot be listed.
    """
    result = CleanResult(operation="delete", target=os.fspath(root))
    lock = threading.Lock()

    def _delete(path: str, info: os.stat_result) -> None:
        if not file_filter.matches(info, path):
            return
        try:
            remove_file(path, force_deleter)
        except (OSError, ForceDeleteError) as exc:
            log.debug("Could not delete %s: %s", path, exc)
            with lock:
                result.errors.append(f"{path}: {exc}")
            return
        with lock:
            result.removed.append(path)
            result.freed_bytes += info.st_size

    walker = BoundedWalker(workers, cancel)
    walker.run(root, _delete, recursive=recursive)

    log.info(
        "Deleted %d files (%s) under %s, %d errors",
        result.files_removed,
        format_size(result.freed_bytes),
        result.target,
        len(result.errors),
    )
    return result


def delete_paths(
    paths: Iterable[str],
    *,
    target: str = "",
    force_deleter: ForceDeleter | None = None,
) -> CleanResult:
    """Remove an explicit list of files, e.g. the matches of a previous scan."""
    result = CleanResult(operation="delete", target=target)
    for path in paths:
        try:
            size = os.lstat(path).st_size
            remove_file(path, force_deleter)
        except (OSError, ForceDeleteError) as exc:
            log.debug("Could not delete %s: %s", path, exc)
            result.errors.append(f"{path}: {exc}")
            continue
        result.removed.append(path)
        result.freed_bytes += size
    return result
