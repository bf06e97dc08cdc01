"""On-disk records of past deletions.

Two files live under ``$XDG_DATA_HOME/deletor``: ``history.json`` with one
summary per session, and ``deletions.log`` with one line per removed path.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Iterable

from deletor.utils import xdg_data_home

log = logging.getLogger(__name__)

_DATA_DIR = xdg_data_home() / "deletor"

HISTORY_FILE = _DATA_DIR / "history.json"
DELETION_LOG = _DATA_DIR / "deletions.log"

# Oldest sessions are dropped beyond this.
MAX_SESSIONS = 500


def load_history() -> dict[str, Any]:
    """Load the history file, returning an empty structure if missing or corrupt."""
    if not HISTORY_FILE.exists():
        return {"sessions": []}
    try:
        data = json.loads(HISTORY_FILE.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        log.exception("Failed to load history file: %s", HISTORY_FILE)
        return {"sessions": []}
    if not isinstance(data, dict) or not isinstance(data.get("sessions"), list):
        log.warning("Ignoring malformed history file: %s", HISTORY_FILE)
        return {"sessions": []}
    return data


def append_session(session: dict[str, Any]) -> None:
    """Add one session summary to the history file."""
    history = load_history()
    history["sessions"].append(session)
    del history["sessions"][:-MAX_SESSIONS]
    try:
        HISTORY_FILE.parent.mkdir(parents=True, exist_ok=True)
        HISTORY_FILE.write_text(json.dumps(history, indent=2) + "\n", encoding="utf-8")
    except OSError:
        log.exception("Failed to save history file: %s", HISTORY_FILE)


def log_deletions(paths: Iterable[str], when: datetime | None = None) -> None:
    """Append ``[timestamp] path`` lines for removed paths to the deletion log."""
    stamp = (when or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    lines = "".join(f"[{stamp}] {path}\n" for path in paths)
    if not lines:
        return
    try:
        DELETION_LOG.parent.mkdir(parents=True, exist_ok=True)
        with open(DELETION_LOG, "a", encoding="utf-8") as f:
            f.write(lines)
    except OSError:
        log.exception("Failed to write deletion log: %s", DELETION_LOG)
