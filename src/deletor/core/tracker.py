"""Tracks freed space across sessions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from deletor import storage
from deletor.models.clean_result import CleanResult

log = logging.getLogger(__name__)


class Tracker:
    """Collects the CleanResults of one run and persists them as a session."""

    def __init__(self) -> None:
        self._results: list[CleanResult] = []

    @property
    def session_bytes_freed(self) -> int:
        return sum(r.freed_bytes for r in self._results)

    @property
    def session_files_removed(self) -> int:
        return sum(r.files_removed for r in self._results)

    def record(self, *results: CleanResult) -> None:
        """Record results for the current session."""
        self._results.extend(results)

    def save_session(self) -> None:
        """Persist the current session and log every removed path.

        Sessions that removed nothing are not saved.
        """
        if not any(r.removed for r in self._results):
            self._results.clear()
            return

        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": [
                {
                    "operation": r.operation,
                    "target": r.target,
                    "bytes_freed": r.freed_bytes,
                    "files_removed": r.files_removed,
                    "errors": len(r.errors),
                }
                for r in self._results
            ],
        }
        storage.append_session(entry)
        storage.log_deletions(path for r in self._results for path in r.removed)

        log.info(
            "Saved session: %d bytes freed, %d entries removed",
            self.session_bytes_freed,
            self.session_files_removed,
        )
        self._results.clear()

    def get_stats(self, period: str = "all") -> dict[str, Any]:
        """Aggregate statistics for 'today', 'week', 'month' or 'all'."""
        all_sessions = storage.load_history().get("sessions", [])

        match period:
            case "today":
                cutoff = _start_of_today()
            case "week":
                cutoff = _start_of_today() - timedelta(days=7)
            case "month":
                cutoff = _start_of_today() - timedelta(days=30)
            case _:
                cutoff = None

        if cutoff is not None:
            sessions = [s for s in all_sessions if datetime.fromisoformat(s["timestamp"]) >= cutoff]
        else:
            sessions = all_sessions

        per_operation: dict[str, dict[str, int]] = {}
        for session in sessions:
            for detail in session.get("details", []):
                totals = per_operation.setdefault(detail["operation"], {"bytes_freed": 0, "files_removed": 0})
                totals["bytes_freed"] += detail.get("bytes_freed", 0)
                totals["files_removed"] += detail.get("files_removed", 0)

        return {
            "period": period,
            "bytes_freed": sum(t["bytes_freed"] for t in per_operation.values()),
            "files_removed": sum(t["files_removed"] for t in per_operation.values()),
            "session_count": len(sessions),
            "lifetime_bytes_freed": sum(
                d.get("bytes_freed", 0) for s in all_sessions for d in s.get("details", [])
            ),
            "per_operation": per_operation,
        }


def _start_of_today() -> datetime:
    """Return the start of the current UTC day."""
    now = datetime.now(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)
