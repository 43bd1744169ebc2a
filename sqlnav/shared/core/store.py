"""JSON object files kept under the sqlnav config directory."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from loguru import logger

# SQLNAV_CONFIG_DIR moves every store, which is how the tests isolate them
CONFIG_DIR = Path(os.environ.get("SQLNAV_CONFIG_DIR", Path.home() / ".sqlnav"))


class JSONFileStore:
    """One JSON object in one file.

    A missing file, a file that does not parse and a file holding anything
    but an object all read as ``{}``; the next write replaces them. Writes
    go through a temporary file in the same directory and a rename.
    """

    def __init__(self, file_path: Path):
        self._file_path = Path(file_path)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def exists(self) -> bool:
        return self._file_path.exists()

    def read(self) -> dict[str, Any]:
        try:
            text = self._file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as error:
            logger.warning("Ignoring unreadable store file {}: {}", self._file_path, error)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store file {}: top level is {}, not an object", self._file_path, type(data).__name__)
            return {}
        return data

    def write(self, data: Mapping[str, Any]) -> None:
        directory = self._file_path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{self._file_path.name}.", suffix=".tmp")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(dict(data), f, indent=2, sort_keys=True)
            tmp_path.replace(self._file_path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    def update(self, key: str, value: Any) -> None:
        """Set one top-level key; ``None`` removes it."""
        data = self.read()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self.write(data)
