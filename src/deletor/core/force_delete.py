"""Forced deletion fallbacks used when an ordinary remove call fails.

One implementation per platform family behind the ForceDeleter interface;
``get_force_deleter()`` picks the one matching the running OS.
"""

from __future__ import annotations

import ctypes
import logging
import os
import stat
from abc import ABC, abstractmethod

from deletor.utils import current_os

log = logging.getLogger(__name__)

# Any of these permission bits set triggers a chmod to _PERMISSIVE_MODE.
_MODE_CHECK_MASK = 0o744
_PERMISSIVE_MODE = 0o744

FILE_ATTRIBUTE_READONLY = 0x1
INVALID_FILE_ATTRIBUTES = 0xFFFFFFFF


class ForceDeleteError(Exception):
    """Raised when forced deletion of a path fails."""


class ForceDeleter(ABC):
    """Removes a path after clearing whatever blocks an ordinary removal."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove *path* or raise ForceDeleteError."""


class UnixForceDeleter(ForceDeleter):
    """chmod the target to a permissive mode, then unlink or rmdir it.

    Files and symlinks are unlinked; directories are removed only when they
    contain no entries at all.
    """

    def delete(self, path: str) -> None:
        try:
            info = os.lstat(path)
        except OSError as exc:
            raise ForceDeleteError(f"Cannot stat {path}: {exc.strerror or exc}") from exc

        is_dir = stat.S_ISDIR(info.st_mode)
        if is_dir and not _is_bare_dir(path):
            raise ForceDeleteError(f"Directory is not empty: {path}")

        # chmod would follow a symlink to its target
        widened = not stat.S_ISLNK(info.st_mode) and bool(info.st_mode & _MODE_CHECK_MASK)
        if widened:
            try:
                os.chmod(path, _PERMISSIVE_MODE)
            except OSError as exc:
                raise ForceDeleteError(f"Cannot chmod {path}: {exc.strerror or exc}") from exc

        try:
            if is_dir:
                os.rmdir(path)
            else:
                os.unlink(path)
        except OSError as exc:
            if widened:
                _restore_mode(path, info.st_mode)
            raise ForceDeleteError(f"Cannot remove {path}: {exc.strerror or exc}") from exc
        log.debug("Force-deleted %s", path)


class WindowsForceDeleter(ForceDeleter):
    """Clear the read-only attribute, then delete via ``DeleteFileW``."""

    def __init__(self, kernel32=None) -> None:
        self._kernel32 = kernel32

    @property
    def kernel32(self):
        if self._kernel32 is None:
            self._kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
        return self._kernel32

    def delete(self, path: str) -> None:
        kernel32 = self.kernel32

        attrs = kernel32.GetFileAttributesW(path) & 0xFFFFFFFF
        if attrs == INVALID_FILE_ATTRIBUTES:
            raise ForceDeleteError(f"Cannot read attributes of {path}: {_last_error()}")

        if attrs & FILE_ATTRIBUTE_READONLY:
            if not kernel32.SetFileAttributesW(path, attrs & ~FILE_ATTRIBUTE_READONLY):
                raise ForceDeleteError(f"Cannot clear read-only attribute of {path}: {_last_error()}")

        if not kernel32.DeleteFileW(path):
            error = _last_error()
            if attrs & FILE_ATTRIBUTE_READONLY and not kernel32.SetFileAttributesW(path, attrs):
                log.warning("Could not restore read-only attribute of %s", path)
            raise ForceDeleteError(f"Cannot delete {path}: {error}")
        log.debug("Force-deleted %s", path)


class UnsupportedForceDeleter(ForceDeleter):
    """Stand-in for platforms without a forced deletion routine."""

    def __init__(self, os_name: str = "") -> None:
        self.os_name = os_name

    def delete(self, path: str) -> None:
        raise ForceDeleteError(f"Forced deletion is not supported on {self.os_name or 'this platform'}: {path}")


def get_force_deleter(os_name: str | None = None) -> ForceDeleter:
    """Return the forced deletion strategy for *os_name* (default: running OS)."""
    os_name = os_name or current_os()
    if os_name == "windows":
        return WindowsForceDeleter()
    if os_name in ("linux", "darwin"):
        return UnixForceDeleter()
    return UnsupportedForceDeleter(os_name)


def _is_bare_dir(path: str) -> bool:
    try:
        with os.scandir(path) as it:
            return next(it, None) is None
    except OSError:
        return False


def _restore_mode(path: str, mode: int) -> None:
    try:
        os.chmod(path, stat.S_IMODE(mode))
    except OSError as exc:
        log.warning("Could not restore mode of %s: %s", path, exc)


def _last_error() -> str:
    code = ctypes.get_last_error()
    return f"error code {code}" if code else "unknown error"
