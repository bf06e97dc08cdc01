"""Tests for persisted settings and rules."""

from __future__ import annotations

import json

import pytest

from deletor.models import FileFilter
from deletor.settings import Rules, Settings


class TestSettings:
    def test_default_path(self, isolate_config):
        assert Settings().path == isolate_config

    def test_get_set_dot_notation(self, isolate_config):
        settings = Settings()
        settings.set("rules.exclude", ["node_modules"])

        assert settings.get("rules.exclude") == ["node_modules"]
        assert settings.get("rules.missing", "dflt") == "dflt"
        assert json.loads(isolate_config.read_text()) == {"rules": {"exclude": ["node_modules"]}}

    def test_reload(self, isolate_config):
        Settings().set("rules.min_size", "10kb")
        assert Settings().rules.min_size == "10kb"

    def test_corrupt_file(self, isolate_config):
        isolate_config.parent.mkdir(parents=True)
        isolate_config.write_text("[1, 2")
        assert Settings().rules == Rules()


class TestRules:
    def test_unknown_keys_ignored(self):
        assert Rules.from_dict({"min_size": "1kb", "colour": "red"}) == Rules(min_size="1kb")

    def test_to_filter(self):
        rules = Rules(extensions=["log"], exclude=["keep"], min_size="1kb")
        file_filter = rules.to_filter()
        assert file_filter.extensions == {".log"}
        assert file_filter.exclude == ("keep",)
        assert file_filter.min_size == 1024
        assert file_filter.older_than is None

    def test_empty_rules_match_everything(self):
        assert Rules().to_filter() == FileFilter()


class TestSetRule:
    def test_typed_values(self, isolate_config):
        settings = Settings()
        assert settings.set_rule("extensions", "txt, log") == ["txt", "log"]
        assert settings.set_rule("subdirs", "yes") is True
        assert settings.set_rule("older_than", " 7days ") == "7days"

        rules = Settings().rules
        assert rules.extensions == ["txt", "log"]
        assert rules.subdirs is True
        assert rules.older_than == "7days"

    def test_unknown_rule(self, isolate_config):
        with pytest.raises(KeyError):
            Settings().set_rule("colour", "red")

    def test_invalid_value_not_saved(self, isolate_config):
        settings = Settings()
        with pytest.raises(ValueError):
            settings.set_rule("max_size", "huge")
        assert not isolate_config.exists()
