"""Directory traversal and the bounded worker pool that processes walked entries."""

from __future__ import annotations

import logging
import os
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterator

from deletor.models.scan_result import EntryOutcome

log = logging.getLogger(__name__)

EntryHandler = Callable[[str, os.stat_result], None]
ErrorCallback = Callable[[str, OSError], None]

_SENTINEL = object()


class DeletorError(Exception):
    """Base class for errors surfaced to callers."""


class RootAccessError(DeletorError):
    """Raised when the root directory of an operation cannot be listed."""


def check_root(root: str | os.PathLike[str]) -> str:
    """Verify that *root* is a listable directory and return it as a string.

    Raises:
        RootAccessError: If the directory is missing, not a directory or unreadable.
    """
    path = os.fspath(root)
    try:
        with os.scandir(path):
            pass
    except FileNotFoundError:
        raise RootAccessError(f"Directory does not exist: {path}") from None
    except NotADirectoryError:
        raise RootAccessError(f"Not a directory: {path}") from None
    except OSError as exc:
        raise RootAccessError(f"Cannot read directory {path}: {exc.strerror or exc}") from exc
    return path


def iter_entries(
    root: str,
    *,
    recursive: bool = True,
    include_dirs: bool = False,
    cancel: threading.Event | None = None,
    on_error: ErrorCallback | None = None,
) -> Iterator[tuple[str, os.stat_result]]:
    """Yield ``(path, stat)`` for entries under *root* in depth-first pre-order.

    Symlinks are never followed; they are reported as non-directory entries.
    Entries that cannot be stat'ed and directories that cannot be listed are
    passed to *on_error* and skipped. The walk stops early once *cancel* is set.
    """
    stack = [root]
    while stack:
        if cancel is not None and cancel.is_set():
            return
        current = stack.pop()
        subdirs: list[str] = []
        try:
            with os.scandir(current) as it:
                for entry in it:
                    if cancel is not None and cancel.is_set():
                        return
                    try:
                        is_dir = entry.is_dir(follow_symlinks=False)
                        info = entry.stat(follow_symlinks=False)
                    except OSError as exc:
                        if on_error:
                            on_error(entry.path, exc)
                        continue
                    if is_dir:
                        if recursive:
                            subdirs.append(entry.path)
                        if include_dirs:
                            yield entry.path, info
                    else:
                        yield entry.path, info
        except OSError as exc:
            if on_error:
                on_error(current, exc)
            continue
        # Reversed so directories are visited in listing order.
        stack.extend(reversed(subdirs))


class BoundedWalker:
    """Walks a tree and hands every file entry to a fixed pool of workers.

    A single producer thread (the caller) walks the tree and feeds a bounded
    queue; ``workers`` threads pull from it and run the handler. ``run()``
    returns only after every queued entry has been handled.
    """

    def __init__(self, workers: int | None = None, cancel: threading.Event | None = None) -> None:
        self.workers = max(1, workers or os.cpu_count() or 1)
        self.cancel = cancel if cancel is not None else threading.Event()

    @property
    def cancelled(self) -> bool:
        return self.cancel.is_set()

    def run(
        self,
        root: str | os.PathLike[str],
        handler: EntryHandler,
        *,
        recursive: bool = True,
    ) -> list[EntryOutcome]:
        """Dispatch every file entry under *root* to *handler*.

        Args:
            root: Directory to walk.
            handler: Called from a worker thread as ``handler(path, stat)``.
                An OSError raised by the handler is recorded and the walk continues.
            recursive: Descend into subdirectories.

        Returns:
            Entries that were skipped, with the reason.

        Raises:
            RootAccessError: If *root* itself cannot be listed.
        """
        path = check_root(root)
        skipped: list[EntryOutcome] = []
        lock = threading.Lock()

        def on_error(entry_path: str, exc: OSError) -> None:
            log.debug("Skipping %s: %s", entry_path, exc)
            with lock:
                skipped.append(EntryOutcome(entry_path, exc.strerror or str(exc)))

        items: queue.Queue = queue.Queue(maxsize=self.workers * 4)

        def _work() -> None:
            while True:
                item = items.get()
                if item is _SENTINEL:
                    return
                if self.cancel.is_set():
                    continue
                entry_path, info = item
                try:
                    handler(entry_path, info)
                except OSError as exc:
                    on_error(entry_path, exc)
                except Exception:
                    log.exception("Handler failed for %s", entry_path)

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="deletor-walk") as executor:
            futures = [executor.submit(_work) for _ in range(self.workers)]
            try:
                for item in iter_entries(path, recursive=recursive, cancel=self.cancel, on_error=on_error):
                    items.put(item)
            finally:
                for _ in futures:
                    items.put(_SENTINEL)
            for future in futures:
                future.result()

        if self.cancel.is_set():
            log.info("Walk of %s cancelled", path)
        return skipped
