"""Settings store for the navigator."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from sqlnav.shared.core.store import CONFIG_DIR, JSONFileStore


def resolve_settings_path(override: str | None = None) -> Path:
    """Settings file: explicit override, then SQLNAV_SETTINGS_PATH, then the config dir."""
    if override:
        return Path(override).expanduser()
    env_override = os.environ.get("SQLNAV_SETTINGS_PATH", "").strip()
    if env_override:
        return Path(env_override).expanduser()
    return CONFIG_DIR / "settings.json"


class SettingsStore(JSONFileStore):
    """Store for application settings.

    Settings are stored as a JSON object in ~/.sqlnav/settings.json.
    Navigation options live under the ``"navigation"`` key.
    """

    def __init__(self, file_path: Path | None = None) -> None:
        super().__init__(file_path or resolve_settings_path())

    def get(self, key: str, default: Any = None) -> Any:
        return self.read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store one setting; ``None`` removes it."""
        self.update(key, value)
