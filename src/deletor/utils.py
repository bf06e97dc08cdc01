"""Shared utility functions."""

from __future__ import annotations

import os
import re
import sys
from datetime import timedelta
from pathlib import Path
from typing import Iterable

_KB = 1 << 10
_MB = 1 << 20
_GB = 1 << 30
_TB = 1 << 40

_SIZE_UNITS = {
    "b": 1,
    "kb": _KB,
    "mb": _MB,
    "gb": _GB,
    "tb": _TB,
}

_AGE_RE = re.compile(r"^(\d+)\s*(sec|min|hour|day|week|month|year)s?$")

_AGE_UNITS = {
    "sec": timedelta(seconds=1),
    "min": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}


def current_os() -> str:
    """Return the OS identifier used to pick cache locations and deleters."""
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def xdg_cache_home() -> Path:
    """Return XDG_CACHE_HOME, defaulting to ~/.cache."""
    return Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def xdg_data_home() -> Path:
    """Return XDG_DATA_HOME, defaulting to ~/.local/share."""
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def expand_tilde(path: str) -> str:
    """Expand a leading ``~`` to the user's home directory.

    Returns the path unchanged when the home directory cannot be resolved.
    """
    if not path.startswith("~"):
        return path
    try:
        home = Path.home()
    except RuntimeError:
        return path
    return str(home / path[1:].lstrip("/\\"))


def split_list(raw: str | None) -> list[str]:
    """Split a comma-separated option value, dropping blanks."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    """Normalize user-supplied extensions to lower-case, dot-prefixed form.

    ``["TXT", ".log", " md "]`` becomes ``{".txt", ".log", ".md"}``.
    """
    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = "." + ext
        normalized.add(ext)
    return frozenset(normalized)


def parse_size(size_str: str) -> int:
    """Convert a size string such as ``"10kb"`` or ``"1.5 MB"`` to bytes.

    Units are 1024-based. Raises ValueError on malformed input.
    """
    text = size_str.strip().lower()
    idx = 0
    while idx < len(text) and (text[idx].isdigit() or text[idx] == "."):
        idx += 1

    number, unit = text[:idx], text[idx:].strip()
    try:
        value = float(number)
    except ValueError:
        raise ValueError(f"invalid number format: {size_str!r}") from None

    if unit not in _SIZE_UNITS:
        raise ValueError(f"unknown unit of measurement: {unit!r}")
    return int(value * _SIZE_UNITS[unit])


def parse_age(age_str: str) -> timedelta:
    """Convert a relative age such as ``"7days"`` or ``"24 hours"`` to a timedelta."""
    match = _AGE_RE.match(age_str.strip().lower())
    if match is None:
        raise ValueError(
            "expected format: number followed by time unit "
            "(sec, min, hour, day, week, month, year)"
        )
    return int(match.group(1)) * _AGE_UNITS[match.group(2)]


def format_size(size_bytes: int) -> str:
    """Convert a byte count to a human-readable label (``"5 B"``, ``"1.50 KB"``)."""
    if size_bytes >= _TB:
        return f"{size_bytes / _TB:.2f} TB"
    if size_bytes >= _GB:
        return f"{size_bytes / _GB:.2f} GB"
    if size_bytes >= _MB:
        return f"{size_bytes / _MB:.2f} MB"
    if size_bytes >= _KB:
        return f"{size_bytes / _KB:.2f} KB"
    return f"{size_bytes} B"
