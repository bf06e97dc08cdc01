"""Scan result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class MatchedEntry:
    """Single filesystem entry that passed the filter."""

    path: str
    size_bytes: int


@dataclass(slots=True, frozen=True)
class EntryOutcome:
    """Why an entry was skipped during a walk (stat failure, unreadable dir...)."""

    path: str
    reason: str


@dataclass(slots=True)
class ScanReport:
    """Result of a filtered scan under one root.

    ``matches`` maps each matched path to its human-readable size label.
    """

    root: str
    matches: dict[str, str] = field(default_factory=dict)
    total_bytes: int = 0
    entries: list[MatchedEntry] = field(default_factory=list)
    skipped: list[EntryOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def paths(self) -> list[str]:
        return [e.path for e in self.entries]


@dataclass(slots=True, frozen=True)
class ScanResult:
    """Aggregate size of one cache location.

    ``file_count`` counts every walked entry, directories included, and
    ``size_bytes`` sums the reported size of each of them. ``error`` is set
    only when the location's root could not be walked at all.
    """

    path: str
    file_count: int = 0
    size_bytes: int = 0
    error: str = ""
