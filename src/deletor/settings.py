"""Persisted user settings and default filter rules."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from deletor.models.file_filter import FileFilter
from deletor.utils import split_list, xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "deletor"
_SETTINGS_FILE = "settings.json"


@dataclass
class Rules:
    """Default filter values applied when the user passes ``--rules``.

    Sizes and ages are kept in their textual form ("10mb", "7days") and
    only resolved when a filter is built.
    """

    path: str = ""
    extensions: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    min_size: str = ""
    max_size: str = ""
    older_than: str = ""
    newer_than: str = ""
    subdirs: bool = False
    prune_empty: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Rules:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_filter(self) -> FileFilter:
        """Build a FileFilter from these rules. Raises ValueError on bad values."""
        return FileFilter.from_options(
            min_size=self.min_size or None,
            max_size=self.max_size or None,
            extensions=self.extensions,
            exclude=self.exclude,
            older_than=self.older_than or None,
            newer_than=self.newer_than or None,
        )


class Settings:
    """Settings backed by a JSON file, addressed with dot-notation keys.

        settings.get("rules.min_size")          # data["rules"]["min_size"]
        settings.set("rules.exclude", ["tmp"])  # writes + saves
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = self._load()

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a value and persist the file."""
        *parents, leaf = key.split(".")
        node = self._data
        for part in parents:
            if not isinstance(node.get(part), dict):
                node[part] = {}
            node = node[part]
        node[leaf] = value
        self._save()

    @property
    def rules(self) -> Rules:
        raw = self.get("rules", {})
        return Rules.from_dict(raw if isinstance(raw, dict) else {})

    def set_rule(self, name: str, raw_value: str) -> Any:
        """Store one rule from its command-line text form and return the stored value.

        Raises:
            KeyError: If *name* is not a rule.
            ValueError: If the value does not parse.
        """
        if name not in {f.name for f in fields(Rules)}:
            raise KeyError(name)
        default = getattr(Rules(), name)
        if isinstance(default, bool):
            value: Any = raw_value.strip().lower() in ("1", "true", "yes", "on")
        elif isinstance(default, list):
            value = split_list(raw_value)
        else:
            value = raw_value.strip()

        candidate = Rules.from_dict({**asdict(self.rules), name: value})
        candidate.to_filter()
        self.set(f"rules.{name}", value)
        return value

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self.path, e)
