"""Store for expanded tree nodes, per server."""

from __future__ import annotations

from pathlib import Path

from sqlnav.shared.core.store import CONFIG_DIR, JSONFileStore


class ExpansionStateStore(JSONFileStore):
    """Store for the set of expanded nodes of each server.

    Stored as a JSON object in ~/.sqlnav/expanded_nodes.json
    Structure: { "server_name": ["<encoded virtual path>", ...] }

    Paths are encoded virtual paths, so they follow what was on screen,
    group nodes included.
    """

    def __init__(self, file_path: Path | None = None) -> None:
        super().__init__(file_path or CONFIG_DIR / "expanded_nodes.json")

    def load_for_server(self, server_name: str) -> set[str]:
        paths = self.read().get(server_name, [])
        if not isinstance(paths, list):
            return set()
        return {path for path in paths if isinstance(path, str)}

    def save_for_server(self, server_name: str, paths: set[str]) -> None:
        self.update(server_name, sorted(paths) or None)

    def clear_server(self, server_name: str) -> None:
        self.update(server_name, None)
