"""Detection and removal of empty directory trees."""

from __future__ import annotations

import logging
import os
import stat
import threading

from deletor.core.walker import check_root, iter_entries
from deletor.models.clean_result import CleanResult

log = logging.getLogger(__name__)


def is_empty_dir(path: str | os.PathLike[str]) -> bool:
    """Check whether a directory holds nothing but (recursively) empty directories.

    A directory that cannot be listed counts as non-empty so it is never removed.
    """
    stack = [os.fspath(path)]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    if not entry.is_dir(follow_symlinks=False):
                        return False
                    stack.append(entry.path)
        except OSError:
            return False
    return True


def find_empty_dirs(
    root: str | os.PathLike[str],
    cancel: threading.Event | None = None,
) -> list[str]:
    """List the empty subdirectories of *root*, parents before children.

    *root* itself is never included.

    Raises:
        RootAccessError: If *root* cannot be listed.
    """
    path = check_root(root)
    dirs: list[str] = []
    occupied: set[str] = set()

    def occupy(start: str) -> None:
        # Mark start and its ancestors as holding content.
        current = start
        while current != path and current not in occupied:
            occupied.add(current)
            parent = os.path.dirname(current)
            if parent == current:
                break
            current = parent

    def on_error(entry_path: str, exc: OSError) -> None:
        log.debug("Treating %s as non-empty: %s", entry_path, exc)
        occupy(entry_path)

    for entry_path, info in iter_entries(path, include_dirs=True, cancel=cancel, on_error=on_error):
        if stat.S_ISDIR(info.st_mode):
            dirs.append(entry_path)
        else:
            occupy(os.path.dirname(entry_path))

    # A partial walk cannot prove any directory empty.
    if cancel is not None and cancel.is_set():
        return []
    return [d for d in dirs if d not in occupied]


def prune_empty_subfolders(
    root: str | os.PathLike[str],
    cancel: threading.Event | None = None,
) -> CleanResult:
    """Remove every empty subdirectory of *root*, deepest first.

    The full list is collected before anything is removed, then removed in
    reverse so each child goes before its parent. Failures are recorded in
    the result and the remaining directories are still attempted.

    Raises:
        RootAccessError: If *root* cannot be listed.
    """
    empty = find_empty_dirs(root, cancel)
    result = CleanResult(operation="prune", target=os.fspath(root))

    for dir_path in reversed(empty):
        try:
            os.rmdir(dir_path)
        except OSError as exc:
            log.debug("Could not remove %s: %s", dir_path, exc)
            result.errors.append(f"{dir_path}: {exc}")
            continue
        result.removed.append(dir_path)

    log.info("Removed %d empty directories under %s", result.files_removed, result.target)
    return result
