"""Tests for the SQLite metadata catalog."""

from __future__ import annotations

import sqlite3

import pytest

from sqlnav.db.catalog import SQLiteCatalog, StaticEnumerator, escape_like, quote_identifier
from sqlnav.db.exceptions import DataUnavailableError
from sqlnav.domains.navigation.app.listing import ListingService
from sqlnav.domains.navigation.domain.listing_request import ListingRequest, NameFilter

SCHEMA = """
CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, email TEXT);
CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER, total REAL);
CREATE TABLE audit__logins (id INTEGER PRIMARY KEY, at TEXT);
CREATE TABLE audit__payments (id INTEGER PRIMARY KEY, amount REAL);
CREATE TABLE "odd%name" (id INTEGER);
CREATE VIEW recent_orders AS SELECT * FROM orders;
CREATE INDEX orders_user_idx ON orders(user_id);
CREATE INDEX orders_total_idx ON orders(total);
"""


@pytest.fixture
def catalog():
    connection = sqlite3.connect(":memory:")
    connection.executescript(SCHEMA)
    connection.execute("ATTACH DATABASE ':memory:' AS archive")
    connection.execute("CREATE TABLE archive.orders_2023 (id INTEGER)")
    with SQLiteCatalog(connection, server_name="test") as cat:
        yield cat


class TestSQLiteCatalog:
    """Tests for catalog queries."""

    def test_databases_exclude_temp(self, catalog):
        assert catalog.list_names(ListingRequest("databases")) == ["archive", "main"]

    def test_tables_and_views(self, catalog):
        tables = catalog.list_names(ListingRequest("tables", scope=("main",)))
        assert tables == ["audit__logins", "audit__payments", "odd%name", "orders", "users"]
        assert catalog.list_names(ListingRequest("views", scope=("main",))) == ["recent_orders"]
        assert catalog.list_names(ListingRequest("tables", scope=("archive",))) == ["orders_2023"]

    def test_columns_in_declaration_order(self, catalog):
        columns = catalog.list_names(ListingRequest("columns", scope=("main", "orders")))
        assert columns == ["id", "user_id", "total"]

    def test_indexes(self, catalog):
        indexes = catalog.list_names(ListingRequest("indexes", scope=("main", "orders")))
        assert indexes == ["orders_total_idx", "orders_user_idx"]
        assert catalog.count_names(ListingRequest("indexes", scope=("main", "users"))) == 0

    def test_window_and_count(self, catalog):
        request = ListingRequest("tables", scope=("main",), offset=1, limit=2)
        assert catalog.list_names(request) == ["audit__payments", "odd%name"]
        assert catalog.count_names(request) == 5

    def test_search_escapes_like_wildcards(self, catalog):
        request = ListingRequest("tables", scope=("main",), name_filter=NameFilter(search="%"))
        assert catalog.list_names(request) == ["odd%name"]

    def test_search_is_case_insensitive(self, catalog):
        request = ListingRequest("tables", scope=("main",), name_filter=NameFilter(search="ORDER"))
        assert catalog.list_names(request) == ["orders"]

    def test_hide_pattern_uses_regexp(self, catalog):
        request = ListingRequest("databases", name_filter=NameFilter(hide_pattern="^ARCH"))
        assert catalog.list_names(request) == ["main"]

    def test_only_patterns(self, catalog):
        request = ListingRequest("tables", scope=("main",), name_filter=NameFilter(only_patterns=("audit%", "users")))
        assert catalog.list_names(request) == ["audit__logins", "audit__payments", "users"]

    def test_unknown_item_type(self, catalog):
        with pytest.raises(ValueError):
            catalog.list_names(ListingRequest("procedures", scope=("main",)))

    def test_wrong_scope_length(self, catalog):
        with pytest.raises(ValueError):
            catalog.list_names(ListingRequest("columns", scope=("main",)))

    def test_unknown_database_is_unavailable(self, catalog):
        with pytest.raises(DataUnavailableError) as exc_info:
            catalog.list_names(ListingRequest("tables", scope=("nope",)))
        assert exc_info.value.scope == ("nope",)
        assert "nope" in str(exc_info.value)

    def test_listing_service_degrades_unknown_database(self, catalog):
        service = ListingService(catalog)
        assert service.list_names(ListingRequest("tables", scope=("nope",))) == []

    def test_grouped_tables_through_service(self, catalog):
        service = ListingService(catalog)
        request = ListingRequest("tables", scope=("main",), limit=1, separators=("__",))
        assert service.count_names(request) == 4
        assert service.list_names(request) == ["audit__logins", "audit__payments"]


class TestOpen:
    """Tests for opening catalog files."""

    def test_open_with_attach(self, tmp_path):
        main_path = tmp_path / "shop.db"
        other_path = tmp_path / "archive.db"
        for path, table in ((main_path, "orders"), (other_path, "old_orders")):
            connection = sqlite3.connect(path)
            connection.execute(f"CREATE TABLE {table} (id INTEGER)")
            connection.commit()
            connection.close()

        with SQLiteCatalog.open(str(main_path), attach={"archive": str(other_path)}) as catalog:
            assert catalog.server_name == "shop.db"
            assert catalog.list_names(ListingRequest("databases")) == ["archive", "main"]
            assert catalog.list_names(ListingRequest("tables", scope=("archive",))) == ["old_orders"]

    def test_open_missing_file(self, tmp_path):
        with pytest.raises(DataUnavailableError):
            SQLiteCatalog.open(str(tmp_path / "missing.db"))


class TestHelpers:
    """Tests for SQL helpers and the static enumerator."""

    def test_quote_identifier(self):
        assert quote_identifier('we"ird') == '"we""ird"'

    def test_escape_like(self):
        assert escape_like("a_b%c\\") == "a\\_b\\%c\\\\"

    def test_from_hierarchy_accepts_plain_lists(self):
        source = StaticEnumerator.from_hierarchy({"shop": {"tables": ["orders", "users"]}})
        assert list(source.enumerate_names("databases", ())) == ["shop"]
        assert list(source.enumerate_names("tables", ("shop",))) == ["orders", "users"]
        assert list(source.enumerate_names("columns", ("shop", "orders"))) == []
