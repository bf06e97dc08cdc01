"""Well-known cache and temp directories per operating system."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from deletor.models.cache_location import CacheLocation, CacheType
from deletor.utils import xdg_cache_home

log = logging.getLogger(__name__)


def locations_for(os_name: str) -> list[CacheLocation]:
    """Return the cache locations for *os_name*.

    Unsupported platforms yield an empty list. Locations whose base
    directory comes from an unset environment variable or an unresolvable
    home directory are left out rather than raising.
    """
    match os_name:
        case "windows":
            return _windows_locations()
        case "linux":
            return _linux_locations()
        case "darwin":
            return _darwin_locations()
        case _:
            log.debug("No cache locations known for OS '%s'", os_name)
            return []


def _windows_locations() -> list[CacheLocation]:
    local_app_data = os.environ.get("LOCALAPPDATA")
    if not local_app_data:
        log.debug("LOCALAPPDATA is not set, no Windows cache locations")
        return []
    return [
        CacheLocation(os.path.join(local_app_data, "Temp")),
        CacheLocation(os.path.join(local_app_data, "Microsoft", "Windows", "Explorer")),
    ]


def _linux_locations() -> list[CacheLocation]:
    locations = [
        CacheLocation("/tmp"),
        CacheLocation("/var/tmp"),
    ]
    try:
        locations.append(CacheLocation(str(xdg_cache_home()), CacheType.APP))
    except RuntimeError:
        log.debug("Cannot resolve home directory, skipping user cache")
    return locations


def _darwin_locations() -> list[CacheLocation]:
    locations = []
    tmpdir = os.environ.get("TMPDIR")
    if tmpdir:
        locations.append(CacheLocation(tmpdir.rstrip("/") or "/"))
    try:
        caches = Path.home() / "Library" / "Caches"
    except RuntimeError:
        log.debug("Cannot resolve home directory, skipping user caches")
        return locations
    locations.append(CacheLocation(str(caches), CacheType.APP))
    return locations
