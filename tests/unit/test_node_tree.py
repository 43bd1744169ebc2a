"""Tests for Node ownership, traversal, paths and predicates."""

from __future__ import annotations

import gc

import pytest

from sqlnav.domains.navigation.domain.exceptions import TreeStructureError
from sqlnav.domains.navigation.domain.node import (
    ICON_COLLAPSED,
    ICON_EXPANDED,
    Node,
    NodeType,
)
from sqlnav.domains.navigation.domain.path_codec import decode_path, decode_segment


def build_server() -> dict[str, Node]:
    """server -> shop -> Tables -> orders -> Columns -> id."""
    server = Node("server", NodeType.CONTAINER)
    shop = Node("shop")
    tables = Node("Tables", NodeType.CONTAINER)
    orders = Node("orders")
    columns = Node("Columns", NodeType.CONTAINER)
    column = Node("id")
    server.add_child(shop)
    shop.add_child(tables)
    tables.add_child(orders)
    orders.add_child(columns)
    columns.add_child(column)
    return {
        "server": server,
        "shop": shop,
        "tables": tables,
        "orders": orders,
        "columns": columns,
        "id": column,
    }


class TestOwnership:
    """Tests for adding, finding and removing children."""

    def test_add_child_sets_parent(self):
        parent = Node("shop")
        child = Node("orders")
        parent.add_child(child)

        assert child.parent is parent
        assert parent.children == [child]

    def test_parent_reference_does_not_own(self):
        """A child does not keep its parent alive."""
        parent = Node("shop")
        child = Node("orders")
        parent.add_child(child)

        del parent
        gc.collect()

        assert child.parent is None

    def test_name_defaults_to_empty_string(self):
        node = Node(None)
        assert node.name == ""
        assert node.real_name == ""

    def test_unknown_type_falls_back_to_object(self):
        node = Node("x", "anything")  # type: ignore[arg-type]
        assert node.type == NodeType.OBJECT

    def test_real_name_is_read_only(self):
        node = Node("orders")
        with pytest.raises(AttributeError):
            node.real_name = "other"  # type: ignore[misc]

    def test_get_child_by_name_and_real_name(self):
        """A node renamed by grouping is found by either identifier."""
        tables = Node("Tables", NodeType.CONTAINER)
        orders = Node("orders")
        tables.add_child(orders)
        orders.name = "ord"

        assert tables.get_child("orders", by_real_name=True) is orders
        assert tables.get_child("ord") is orders
        assert tables.get_child("orders") is None

    def test_get_child_missing_returns_none(self):
        assert Node("shop").get_child("nope") is None

    def test_remove_child_detaches_subtree(self):
        nodes = build_server()
        nodes["shop"].remove_child("Tables")

        assert nodes["shop"].children == []
        assert nodes["tables"].parent is None
        assert nodes["orders"].parent is None
        assert nodes["tables"].children == []

    def test_remove_missing_child_is_noop(self):
        nodes = build_server()
        nodes["shop"].remove_child("Views")
        assert nodes["shop"].children == [nodes["tables"]]


class TestParents:
    """Tests for ancestor traversal."""

    def test_full_chain_length_is_depth_plus_one(self):
        nodes = build_server()
        chain = nodes["id"].parents(True, True, True)

        assert len(chain) == 6
        assert chain[0] is nodes["id"]
        assert chain[-1].parent is None

    def test_containers_skipped_by_default(self):
        nodes = build_server()
        assert nodes["id"].parents() == [nodes["orders"], nodes["shop"]]

    def test_include_self_respects_filters(self):
        nodes = build_server()
        assert nodes["columns"].parents(include_self=True) == [nodes["orders"], nodes["shop"]]
        assert nodes["columns"].parents(include_self=True, include_containers=True)[0] is nodes["columns"]

    def test_groups_need_their_own_flag(self):
        tables = Node("Tables", NodeType.CONTAINER)
        group = Node("user", NodeType.CONTAINER, is_group=True)
        log = Node("user_log")
        tables.add_child(group)
        group.add_child(log)

        assert log.parents(include_containers=True) == [tables]
        assert log.parents(include_containers=True, include_groups=True) == [group, tables]

    def test_real_parent_walks_to_objects(self):
        """Applied twice on a column, real_parent reaches the database."""
        nodes = build_server()
        table = nodes["id"].real_parent()

        assert table is nodes["orders"]
        assert table.real_parent() is nodes["shop"]
        assert nodes["shop"].real_parent() is None

    def test_cycle_raises(self):
        a = Node("a")
        b = Node("b")
        a.add_child(b)
        a.parent = b

        with pytest.raises(TreeStructureError):
            b.parents()


class TestPaths:
    """Tests for actual and virtual paths."""

    def test_encoded_segments_decode_to_clean_path(self):
        nodes = build_server()
        paths = nodes["id"].get_paths()

        assert paths.a_path_clean == ("server", "shop", "Tables", "orders", "Columns", "id")
        assert [decode_segment(s) for s in paths.a_path.split(".")] == list(paths.a_path_clean)
        assert decode_path(paths.v_path) == list(paths.v_path_clean)

    def test_groups_only_in_virtual_path(self):
        tables = Node("Tables", NodeType.CONTAINER)
        group = Node("user", NodeType.CONTAINER, is_group=True)
        log = Node("user_log")
        tables.add_child(group)
        group.add_child(log)
        log.name = "log"

        paths = log.get_paths()
        assert paths.a_path_clean == ("Tables", "user_log")
        assert paths.v_path_clean == ("Tables", "user", "log")

    def test_root_path_is_its_own_name(self):
        paths = Node("server", NodeType.CONTAINER).get_paths()
        assert paths.a_path_clean == ("server",)
        assert paths.v_path_clean == ("server",)


class TestPredicates:
    """Tests for child and sibling predicates."""

    def test_num_children_counts_through_containers(self):
        shop = Node("shop")
        tables = Node("Tables", NodeType.CONTAINER)
        views = Node("Views", NodeType.CONTAINER)
        shop.add_child(tables)
        shop.add_child(views)
        tables.add_child(Node("orders"))
        tables.add_child(Node("users"))
        views.add_child(Node("recent"))

        assert tables.num_children() == 2
        assert shop.num_children() == tables.num_children() + views.num_children() == 3

    def test_empty_nested_containers_count_zero(self):
        outer = Node("outer", NodeType.CONTAINER)
        middle = Node("middle", NodeType.CONTAINER)
        inner = Node("inner", NodeType.CONTAINER)
        outer.add_child(middle)
        middle.add_child(inner)

        assert outer.num_children() == 0
        assert outer.has_children() is True
        assert outer.has_children(count_empty_containers=False) is False

    def test_has_children_sees_deep_object(self):
        outer = Node("outer", NodeType.CONTAINER)
        middle = Node("middle", NodeType.CONTAINER)
        outer.add_child(middle)
        middle.add_child(Node("orders"))

        assert outer.has_children(count_empty_containers=False) is True

    def test_root_has_no_siblings(self):
        assert Node("server", NodeType.CONTAINER).has_siblings() is False

    def test_empty_sibling_container_does_not_count(self):
        shop = Node("shop")
        tables = Node("Tables", NodeType.CONTAINER)
        views = Node("Views", NodeType.CONTAINER)
        shop.add_child(tables)
        shop.add_child(views)
        tables.add_child(Node("orders"))

        assert views.has_siblings() is True
        assert tables.has_siblings() is False

    def test_lone_column_container_still_has_siblings(self):
        """server.db.table.column always reports siblings."""
        server = Node("server")
        db = Node("db")
        table = Node("table")
        column = Node("column")
        server.add_child(db)
        db.add_child(table)
        table.add_child(column)

        assert column.has_structural_siblings() is False
        assert column.always_render_container() is True
        assert column.has_siblings() is True


class TestRenderHints:
    """Tests for icons and CSS classes."""

    def test_matched_node_gets_expanded_icon_and_visible(self):
        node = Node("orders")
        assert node.get_icon(True) == ICON_EXPANDED
        assert node.visible is True

    def test_unmatched_node_gets_collapsed_icon(self):
        node = Node("orders")
        assert node.get_icon(False) == ICON_COLLAPSED
        assert node.visible is False

    def test_group_never_marked_visible(self):
        group = Node("user", NodeType.CONTAINER, is_group=True)
        assert group.get_icon(True) == ICON_COLLAPSED
        assert group.visible is False

    def test_expansion_disabled_yields_nothing(self):
        node = Node("shop")
        assert node.get_icon(True, expansion_disabled=True) == ""
        assert node.get_css_classes(True, expansion_disabled=True) == ""

    def test_css_classes(self):
        assert Node("orders").get_css_classes(False) == "expander"
        assert Node("orders").get_css_classes(True) == "expander loaded"
        group = Node("user", NodeType.CONTAINER, is_group=True)
        assert group.get_css_classes(False) == "expander loaded container"

    def test_walk_is_depth_first(self):
        nodes = build_server()
        assert [n.name for n in nodes["server"].walk()] == ["server", "shop", "Tables", "orders", "Columns", "id"]
