"""Cleaning result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class CleanResult:
    """Result of a delete, prune or cache-clear operation.

    ``operation`` is one of ``"delete"``, ``"prune"`` or ``"cache"``.
    ``errors`` holds ``"<path>: <error>"`` strings for entries that could
    not be removed; they never abort the operation.
    """

    operation: str
    target: str = ""
    freed_bytes: int = 0
    removed: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def files_removed(self) -> int:
        return len(self.removed)
