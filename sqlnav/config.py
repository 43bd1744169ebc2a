"""Configuration for the navigation tree.

The configuration is an explicit value: it is handed to the listing
service and the tree service instead of being read from global state.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from .stores.settings import SettingsStore, resolve_settings_path

SETTINGS_KEY = "navigation"


def normalize_separators(value: Any) -> tuple[str, ...]:
    """Accept a separator string or a list of them; drop empty entries."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    return tuple(str(item) for item in value if item)


def normalize_patterns(value: Any) -> tuple[str, ...]:
    if value is None or value == "":
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value if item)


@dataclass(frozen=True)
class NavigationConfig:
    """Navigation tree settings.

    Attributes:
        grouping_enabled: Group databases sharing a name prefix.
        db_separator: Separator(s) splitting database names into prefixes.
        db_separator_depth: How many times database grouping recurses.
        table_grouping_enabled: Group tables and views sharing a prefix.
        table_separator: Separator(s) for table and view names.
        table_separator_depth: How many times table grouping recurses.
        first_level_page_size: Databases listed per page.
        page_size: Tables, views, columns and indexes listed per page.
        hide_db_pattern: Regular expression of database names to hide.
        only_db_patterns: LIKE patterns; when set, only matching databases show.
        database_expansion_disabled: Databases cannot be expanded in the UI.
    """

    grouping_enabled: bool = True
    db_separator: str | tuple[str, ...] = "_"
    db_separator_depth: int = 1
    table_grouping_enabled: bool = True
    table_separator: str | tuple[str, ...] = "__"
    table_separator_depth: int = 1
    first_level_page_size: int = 100
    page_size: int = 50
    hide_db_pattern: str | None = None
    only_db_patterns: tuple[str, ...] = ()
    database_expansion_disabled: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.db_separator, str):
            object.__setattr__(self, "db_separator", normalize_separators(self.db_separator))
        if not isinstance(self.table_separator, str):
            object.__setattr__(self, "table_separator", normalize_separators(self.table_separator))
        object.__setattr__(self, "only_db_patterns", normalize_patterns(self.only_db_patterns))
        if self.first_level_page_size < 1 or self.page_size < 1:
            raise ValueError("Page sizes must be positive")
        if self.db_separator_depth < 0 or self.table_separator_depth < 0:
            raise ValueError("Separator depths cannot be negative")
        if self.hide_db_pattern:
            try:
                re.compile(self.hide_db_pattern)
            except re.error as error:
                raise ValueError(f"Invalid hide_db_pattern {self.hide_db_pattern!r}: {error}") from error

    @property
    def db_separators(self) -> tuple[str, ...]:
        return normalize_separators(self.db_separator)

    @property
    def table_separators(self) -> tuple[str, ...]:
        return normalize_separators(self.table_separator)

    def with_grouping(self, enabled: bool) -> NavigationConfig:
        return replace(self, grouping_enabled=enabled, table_grouping_enabled=enabled)

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> NavigationConfig:
        """Build a config from the ``"navigation"`` section of settings.

        Unknown keys are ignored.

        Raises:
            ValueError: If a value is out of range or the hide pattern is invalid.
        """
        section = settings.get(SETTINGS_KEY, {})
        if not isinstance(section, Mapping):
            raise ValueError(f"Settings key {SETTINGS_KEY!r} must be an object")
        known = {f.name for f in fields(cls)}
        payload = {key: value for key, value in section.items() if key in known}
        for key in ("db_separator", "table_separator"):
            if isinstance(payload.get(key), list):
                payload[key] = tuple(payload[key])
        return cls(**payload)

    def to_settings(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = list(value) if isinstance(value, tuple) else value
        return {SETTINGS_KEY: data}


def load_navigation_config(settings_path: str | Path | None = None) -> NavigationConfig:
    """Load the navigation config from the settings file, defaults when absent."""
    store = SettingsStore(resolve_settings_path(str(settings_path) if settings_path else None))
    return NavigationConfig.from_settings(store.read())
