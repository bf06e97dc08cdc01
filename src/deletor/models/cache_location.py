"""Cache location dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CacheType(str, Enum):
    """Kind of cache directory."""

    SYSTEM = "system"  # Shared temp directories
    APP = "app"  # Per-user application cache


@dataclass(frozen=True)
class CacheLocation:
    """Well-known OS cache or temp directory."""

    path: str
    type: CacheType = CacheType.SYSTEM
