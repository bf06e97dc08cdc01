"""File filter value and the predicate evaluated against every walked entry."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from deletor.utils import normalize_extensions, parse_age, parse_size


@dataclass(frozen=True)
class FileFilter:
    """Immutable set of size, extension, exclusion and age criteria.

    A zero size bound, an empty extension set, an empty exclude list and a
    ``None`` age bound never restrict matching.
    """

    min_size: int = 0
    max_size: int = 0
    extensions: frozenset[str] = field(default_factory=frozenset)
    exclude: tuple[str, ...] = ()
    older_than: datetime | None = None
    newer_than: datetime | None = None

    @classmethod
    def from_options(
        cls,
        *,
        min_size: str | int | None = None,
        max_size: str | int | None = None,
        extensions: Iterable[str] = (),
        exclude: Iterable[str] = (),
        older_than: str | datetime | None = None,
        newer_than: str | datetime | None = None,
        now: datetime | None = None,
    ) -> FileFilter:
        """Build a filter from raw user input.

        Sizes accept strings like ``"10kb"``; ages accept relative strings
        like ``"7days"`` (resolved against *now*) or absolute datetimes.
        Raises ValueError for malformed sizes or ages.
        """
        now = now or datetime.now()
        return cls(
            min_size=_size(min_size),
            max_size=_size(max_size),
            extensions=normalize_extensions(extensions),
            exclude=tuple(p for p in exclude if p),
            older_than=_cutoff(older_than, now),
            newer_than=_cutoff(newer_than, now),
        )

    def is_excluded(self, path: str, name: str | None = None) -> bool:
        """Check whether *path* is hidden by one of the exclude patterns.

        A pattern excludes an entry when the slash-normalized path contains
        ``pattern + "/"`` or when the entry's base name starts with it.
        """
        if not self.exclude:
            return False
        slashed = path.replace(os.sep, "/")
        if name is None:
            name = os.path.basename(path)
        for pattern in self.exclude:
            if pattern + "/" in slashed or name.startswith(pattern):
                return True
        return False

    def matches(self, info: os.stat_result, path: str) -> bool:
        """Return True if the entry described by *info* at *path* passes every criterion."""
        name = os.path.basename(path)
        if self.is_excluded(path, name):
            return False

        if self.extensions and _extension(name) not in self.extensions:
            return False

        size = info.st_size
        if self.max_size > 0 and size > self.max_size:
            return False
        if self.min_size > 0 and size < self.min_size:
            return False

        # Two independent bounds, not a range.
        mtime = info.st_mtime
        if self.older_than is not None and not mtime < self.older_than.timestamp():
            return False
        if self.newer_than is not None and not mtime > self.newer_than.timestamp():
            return False

        return True


def matches(info: os.stat_result, path: str, file_filter: FileFilter) -> bool:
    """Evaluate *file_filter* against one entry."""
    return file_filter.matches(info, path)


def _size(value: str | int | None) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, int):
        return value
    return parse_size(value)


def _cutoff(value: str | datetime | None, now: datetime) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return now - parse_age(value)


def _extension(name: str) -> str:
    # Suffix from the last dot; a dotfile such as ".env" is all extension.
    idx = name.rfind(".")
    return name[idx:] if idx >= 0 else ""
