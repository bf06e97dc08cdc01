"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest

import deletor.storage as storage


@pytest.fixture
def isolate_storage(tmp_path_factory, monkeypatch):
    """Redirect storage to a temp directory."""
    data_dir = tmp_path_factory.mktemp("deletor_data")
    history_file = data_dir / "history.json"
    monkeypatch.setattr(storage, "HISTORY_FILE", history_file)
    monkeypatch.setattr(storage, "DELETION_LOG", data_dir / "deletions.log")
    monkeypatch.setattr(storage, "_DATA_DIR", data_dir)
    return history_file


@pytest.fixture
def isolate_config(tmp_path, monkeypatch):
    """Point XDG_CONFIG_HOME at a temp directory and return the settings path."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "deletor" / "settings.json"


@pytest.fixture
def make_file():
    """Create a file with *size* bytes and an optional mtime offset (seconds in the past)."""

    def _make(path, size=0, age=None):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)
        if age is not None:
            stamp = path.stat().st_mtime - age
            os.utime(path, (stamp, stamp))
        return path

    return _make
