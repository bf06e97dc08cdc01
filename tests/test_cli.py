"""Tests for the command-line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from deletor.cli import main
from deletor.models import CacheLocation

pytestmark = pytest.mark.usefixtures("isolate_storage", "isolate_config")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tree(tmp_path, make_file):
    root = tmp_path / "data"
    make_file(root / "a.txt", size=5)
    make_file(root / "b.log", size=5000)
    make_file(root / "sub" / "c.txt", size=7)
    (root / "empty" / "deeper").mkdir(parents=True)
    return root


class TestScan:
    def test_lists_matches(self, runner, tree):
        result = runner.invoke(main, ["scan", str(tree), "-e", "txt"])
        assert result.exit_code == 0
        assert str(tree / "a.txt") in result.output
        assert "sub" not in result.output
        assert "1 files" in result.output

    def test_json_recursive(self, runner, tree):
        result = runner.invoke(main, ["scan", str(tree), "--ext", "txt", "--subdirs", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["total_bytes"] == 12
        assert sorted(f["path"] for f in data["files"]) == sorted([str(tree / "a.txt"), str(tree / "sub" / "c.txt")])

    def test_nothing_found(self, runner, tree):
        result = runner.invoke(main, ["scan", str(tree), "-e", "pdf"])
        assert result.exit_code == 0
        assert "No matching files found." in result.output

    def test_missing_directory(self, runner, tmp_path):
        result = runner.invoke(main, ["scan", str(tmp_path / "missing")])
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_bad_size(self, runner, tree):
        result = runner.invoke(main, ["scan", str(tree), "--min-size", "lots"])
        assert result.exit_code == 2
        assert "invalid number format" in result.output

    def test_saved_rules(self, runner, tree):
        assert runner.invoke(main, ["rules", "set", "extensions", "log"]).exit_code == 0
        result = runner.invoke(main, ["scan", str(tree), "--rules", "--json"])
        data = json.loads(result.output)
        assert [f["path"] for f in data["files"]] == [str(tree / "b.log")]


class TestDelete:
    def test_confirm_and_delete(self, runner, tree, isolate_storage):
        result = runner.invoke(main, ["delete", str(tree), "-e", "txt"], input="y\n")
        assert result.exit_code == 0
        assert not (tree / "a.txt").exists()
        assert (tree / "sub" / "c.txt").exists()
        assert (tree / "b.log").exists()
        assert isolate_storage.exists()

    def test_abort(self, runner, tree):
        result = runner.invoke(main, ["delete", str(tree), "-e", "txt"], input="n\n")
        assert result.exit_code == 0
        assert "Aborted." in result.output
        assert (tree / "a.txt").exists()

    def test_dry_run(self, runner, tree):
        result = runner.invoke(main, ["delete", str(tree), "--subdirs", "--dry-run"])
        assert result.exit_code == 0
        assert "dry run" in result.output
        assert (tree / "a.txt").exists()

    def test_prune_empty_json(self, runner, tree):
        result = runner.invoke(main, ["delete", str(tree), "-e", "txt", "--subdirs", "--prune-empty", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        operations = [r["operation"] for r in data["results"]]
        assert operations == ["delete", "prune"]
        assert not (tree / "sub").exists()
        assert not (tree / "empty").exists()
        assert (tree / "b.log").exists()
        assert tree.is_dir()


class TestPrune:
    def test_prune_with_yes(self, runner, tree):
        result = runner.invoke(main, ["prune", str(tree), "--yes"])
        assert result.exit_code == 0
        assert not (tree / "empty").exists()
        assert (tree / "sub" / "c.txt").exists()

    def test_nothing_to_prune(self, runner, tmp_path, make_file):
        make_file(tmp_path / "keep" / "f.txt")
        result = runner.invoke(main, ["prune", str(tmp_path)])
        assert "No empty directories found." in result.output


class TestCache:
    @pytest.fixture
    def cache_dir(self, tmp_path, make_file, monkeypatch):
        cache_dir = tmp_path / "cache"
        make_file(cache_dir / "blob.bin", size=64)
        monkeypatch.setattr("deletor.core.cache.locations_for", lambda os_name: [CacheLocation(str(cache_dir))])
        return cache_dir

    def test_scan_json(self, runner, cache_dir):
        result = runner.invoke(main, ["cache", "scan", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data[0]["path"] == str(cache_dir)
        assert data[0]["file_count"] == 2
        assert data[0]["error"] == ""

    def test_clean(self, runner, cache_dir):
        result = runner.invoke(main, ["cache", "clean", "--yes"])
        assert result.exit_code == 0
        assert not (cache_dir / "blob.bin").exists()
        assert cache_dir.is_dir()

    def test_no_locations(self, runner, monkeypatch):
        monkeypatch.setattr("deletor.core.cache.locations_for", lambda os_name: [])
        result = runner.invoke(main, ["cache", "scan"])
        assert result.exit_code == 0
        assert "No cache locations known" in result.output


class TestStatsAndRules:
    def test_stats_after_delete(self, runner, tree):
        runner.invoke(main, ["delete", str(tree), "-e", "log", "--yes"])
        result = runner.invoke(main, ["stats", "--json"])
        data = json.loads(result.output)
        assert data["bytes_freed"] == 5000
        assert data["per_operation"]["delete"]["files_removed"] == 1

    def test_rules_show(self, runner):
        runner.invoke(main, ["rules", "set", "min_size", "10kb"])
        result = runner.invoke(main, ["rules", "show"])
        assert result.exit_code == 0
        assert "'10kb'" in result.output

    def test_rules_set_rejects_bad_values(self, runner):
        assert runner.invoke(main, ["rules", "set", "colour", "red"]).exit_code == 2
        assert runner.invoke(main, ["rules", "set", "older_than", "ages"]).exit_code == 2
