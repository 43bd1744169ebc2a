"""Name sources for the navigation tree.

``SQLiteCatalog`` answers listing requests with SQL against a SQLite
connection; attached databases are the databases of the "server".
``StaticEnumerator`` and ``StaticCatalog`` serve names from memory, for
the mock profile and for tests.
"""

from __future__ import annotations

import re
import sqlite3
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, TypeVar

from loguru import logger

from sqlnav.domains.navigation.domain.listing_request import ListingRequest, NameFilter

from .exceptions import DataUnavailableError

# Listings keyed by scope, then by item type.
Listings = Mapping[tuple[str, ...], Mapping[str, Sequence[str]]]

_E = TypeVar("_E", bound="StaticEnumerator")

SCOPE_LENGTHS = {
    "databases": 0,
    "tables": 1,
    "views": 1,
    "columns": 2,
    "indexes": 2,
}


def resolve_file_path(path_str: str) -> Path:
    """Resolve a SQLite file path, expanding ``~``."""
    return Path(path_str.strip()).expanduser().resolve()


def quote_identifier(name: str) -> str:
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _check_scope(item_type: str, scope: tuple[str, ...]) -> None:
    expected = SCOPE_LENGTHS.get(item_type)
    if expected is None:
        raise ValueError(f"Unknown item type {item_type!r}")
    if len(scope) != expected:
        raise ValueError(f"{item_type} need a scope of {expected} names, got {scope!r}")


def _regexp(pattern: str, value: Any) -> bool:
    if value is None:
        return False
    return re.search(pattern, str(value), re.IGNORECASE) is not None


class SQLiteCatalog:
    """Metadata catalog over a SQLite connection.

    Usage:
        with SQLiteCatalog.open("shop.db", attach={"archive": "archive.db"}) as catalog:
            names = catalog.list_names(ListingRequest("tables", scope=("main",)))
    """

    def __init__(self, connection: sqlite3.Connection, server_name: str = "sqlite"):
        self._connection = connection
        self.server_name = server_name
        connection.create_function("REGEXP", 2, _regexp, deterministic=True)

    @classmethod
    def open(
        cls,
        file_path: str,
        *,
        attach: Mapping[str, str] | None = None,
        read_only: bool = True,
    ) -> SQLiteCatalog:
        """Open a SQLite file, attaching extra database files by name.

        Raises:
            DataUnavailableError: If a file cannot be opened or attached.
        """
        path = resolve_file_path(file_path)
        mode = "ro" if read_only else "rwc"
        try:
            connection = sqlite3.connect(f"{path.as_uri()}?mode={mode}", uri=True)
            for alias, attach_path in (attach or {}).items():
                attach_uri = f"{resolve_file_path(attach_path).as_uri()}?mode={mode}"
                connection.execute("ATTACH DATABASE ? AS " + quote_identifier(alias), (attach_uri,))
        except sqlite3.Error as error:
            raise DataUnavailableError("databases", cause=error) from error
        logger.debug("Opened SQLite catalog {} ({} attached)", path, len(attach or {}))
        return cls(connection, server_name=path.name)

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> SQLiteCatalog:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _base_query(self, item_type: str, scope: tuple[str, ...]) -> tuple[str, list[Any], str]:
        """SQL producing a ``name`` column, its parameters, and its ORDER BY."""
        _check_scope(item_type, scope)
        if item_type == "databases":
            return "SELECT name FROM pragma_database_list WHERE name <> 'temp'", [], "name"
        if item_type in ("tables", "views"):
            object_type = "table" if item_type == "tables" else "view"
            master = f"{quote_identifier(scope[0])}.sqlite_master"
            return (
                f"SELECT name FROM {master} WHERE type = ? AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\'",
                [object_type],
                "name",
            )
        database, table = scope
        if item_type == "columns":
            return "SELECT name, cid FROM pragma_table_info(?, ?)", [table, database], "cid"
        return "SELECT name FROM pragma_index_list(?, ?)", [table, database], "name"

    def _where(self, name_filter: NameFilter) -> tuple[str, list[Any]]:
        clauses = ["1 = 1"]
        params: list[Any] = []
        if name_filter.search:
            clauses.append("name LIKE ? ESCAPE '\\'")
            params.append(f"%{escape_like(name_filter.search)}%")
        if name_filter.hide_pattern:
            clauses.append("NOT (name REGEXP ?)")
            params.append(name_filter.hide_pattern)
        if name_filter.only_patterns:
            clauses.append("(" + " OR ".join("name LIKE ? ESCAPE '\\'" for _ in name_filter.only_patterns) + ")")
            params.extend(name_filter.only_patterns)
        return " AND ".join(clauses), params

    def _execute(self, request: ListingRequest, sql: str, params: list[Any]) -> list[Any]:
        try:
            return self._connection.execute(sql, params).fetchall()
        except sqlite3.Error as error:
            raise DataUnavailableError(request.item_type, scope=request.scope, cause=error) from error

    def list_names(self, request: ListingRequest) -> list[str]:
        base, params, order = self._base_query(request.item_type, request.scope)
        where, where_params = self._where(request.name_filter)
        sql = f"SELECT name FROM ({base}) WHERE {where} ORDER BY {order} LIMIT ? OFFSET ?"
        limit = -1 if request.limit is None else request.limit
        rows = self._execute(request, sql, params + where_params + [limit, request.offset])
        return [row[0] for row in rows]

    def count_names(self, request: ListingRequest) -> int:
        base, params, _order = self._base_query(request.item_type, request.scope)
        where, where_params = self._where(request.name_filter)
        rows = self._execute(request, f"SELECT COUNT(*) FROM ({base}) WHERE {where}", params + where_params)
        return int(rows[0][0]) if rows else 0


class StaticEnumerator:
    """Enumerates names from memory.

    A scope listed in ``unavailable`` raises :class:`DataUnavailableError`,
    which is how tests and the mock profile simulate a failing backend.
    """

    def __init__(self, listings: Listings, *, unavailable: Iterable[tuple[str, ...]] = ()):
        self._listings = {tuple(scope): dict(items) for scope, items in listings.items()}
        self._unavailable = {tuple(scope) for scope in unavailable}

    @classmethod
    def from_hierarchy(cls: type[_E], databases: Mapping[str, Mapping[str, Any]], **kwargs: Any) -> _E:
        """Build listings from nested dicts.

        Structure::

            {"shop": {"tables": {"orders": {"columns": ["id"], "indexes": []}},
                      "views": {"recent_orders": {"columns": ["id"]}}}}
        """
        listings: dict[tuple[str, ...], dict[str, list[str]]] = {(): {"databases": list(databases)}}
        for database, folders in databases.items():
            db_items = listings.setdefault((database,), {})
            for item_type, objects in folders.items():
                db_items[item_type] = list(objects)
                if not isinstance(objects, Mapping):
                    continue
                for table, children in objects.items():
                    table_items = listings.setdefault((database, table), {})
                    for child_type, names in (children or {}).items():
                        table_items[child_type] = list(names)
        return cls(listings, **kwargs)

    def enumerate_names(self, item_type: str, scope: tuple[str, ...]) -> Iterable[str]:
        scope = tuple(scope)
        if scope in self._unavailable:
            raise DataUnavailableError(item_type, scope=scope)
        return iter(self._listings.get(scope, {}).get(item_type, ()))


class StaticCatalog(StaticEnumerator):
    """In-memory catalog that filters, orders and pages like a SQL backend."""

    def list_names(self, request: ListingRequest) -> list[str]:
        names = sorted(self._matching(request))
        stop = None if request.limit is None else request.offset + request.limit
        return names[request.offset : stop]

    def count_names(self, request: ListingRequest) -> int:
        return len(self._matching(request))

    def _matching(self, request: ListingRequest) -> list[str]:
        names = self.enumerate_names(request.item_type, request.scope)
        return [name for name in names if request.name_filter.matches(name)]
