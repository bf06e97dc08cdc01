"""Tests for cache locations and the cache manager."""

from __future__ import annotations

import os

import pytest

from deletor.core.cache import CacheManager
from deletor.core.force_delete import ForceDeleteError, ForceDeleter
from deletor.core.locations import locations_for
from deletor.models import CacheLocation, CacheType


class TestLocationsFor:
    def test_windows(self, monkeypatch):
        monkeypatch.setenv("LOCALAPPDATA", r"C:\Users\me\AppData\Local")
        paths = [loc.path for loc in locations_for("windows")]
        assert paths == [
            os.path.join(r"C:\Users\me\AppData\Local", "Temp"),
            os.path.join(r"C:\Users\me\AppData\Local", "Microsoft", "Windows", "Explorer"),
        ]

    def test_windows_without_localappdata(self, monkeypatch):
        monkeypatch.delenv("LOCALAPPDATA", raising=False)
        assert locations_for("windows") == []

    def test_linux(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
        locations = locations_for("linux")
        assert [loc.path for loc in locations] == ["/tmp", "/var/tmp", str(tmp_path / "cache")]
        assert locations[-1].type is CacheType.APP

    def test_darwin(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TMPDIR", "/var/folders/xy/T/")
        monkeypatch.setenv("HOME", str(tmp_path))
        paths = [loc.path for loc in locations_for("darwin")]
        assert paths == ["/var/folders/xy/T", str(tmp_path / "Library" / "Caches")]

    def test_unknown_os(self):
        assert locations_for("plan9") == []


class RecordingDeleter(ForceDeleter):
    def __init__(self):
        self.calls = []

    def delete(self, path):
        self.calls.append(path)
        raise ForceDeleteError(f"refused {path}")


@pytest.fixture
def caches(tmp_path, make_file):
    first = tmp_path / "cache1"
    second = tmp_path / "cache2"
    make_file(first / "a.bin", size=100)
    make_file(first / "nested" / "b.bin", size=50)
    make_file(second / "c.bin", size=10)
    return [CacheLocation(str(first)), CacheLocation(str(second), CacheType.APP)]


class TestScan:
    def test_counts_root_and_directories(self, caches):
        first = caches[0].path
        result = CacheManager(locations=caches).scan(first)

        expected_paths = [first, os.path.join(first, "a.bin"), os.path.join(first, "nested"),
                          os.path.join(first, "nested", "b.bin")]
        assert result.error == ""
        assert result.file_count == 4
        assert result.size_bytes == sum(os.lstat(p).st_size for p in expected_paths)

    def test_missing_location_reports_error(self, tmp_path):
        missing = str(tmp_path / "nope")
        result = CacheManager(locations=[]).scan(missing)
        assert result.path == missing
        assert result.file_count == 0
        assert "does not exist" in result.error


class TestScanAll:
    def test_one_result_per_location(self, caches, tmp_path):
        locations = caches + [CacheLocation(str(tmp_path / "missing"))]
        seen = []
        results = CacheManager(locations=locations).scan_all(on_result=seen.append)

        assert sorted(r.path for r in results) == sorted(loc.path for loc in locations)
        assert len(seen) == 3
        errors = [r for r in results if r.error]
        assert [r.path for r in errors] == [str(tmp_path / "missing")]

    def test_no_locations(self):
        assert CacheManager(locations=[]).scan_all() == []

    def test_unsupported_os(self):
        manager = CacheManager(os_name="plan9")
        assert manager.locations == []
        assert manager.scan_all() == []


class TestClearCache:
    def test_removes_files_keeps_directories(self, caches):
        result = CacheManager(locations=caches, force_deleter=RecordingDeleter()).clear_cache()

        assert result.operation == "cache"
        assert result.files_removed == 3
        assert result.freed_bytes == 160
        assert result.errors == []
        assert os.path.isdir(os.path.join(caches[0].path, "nested"))
        assert os.listdir(caches[1].path) == []

    def test_fallback_errors_are_collected(self, caches, monkeypatch):
        def refuse(path):
            raise PermissionError(13, "Permission denied", path)

        monkeypatch.setattr("deletor.core.operations.os.remove", refuse)
        deleter = RecordingDeleter()
        result = CacheManager(locations=caches, force_deleter=deleter).clear_cache()

        assert result.removed == []
        assert len(result.errors) == 3
        assert len(deleter.calls) == 3
