"""Fetch strategies for the object kinds of the tree.

A node carries the kind that lists its children: the root lists
databases, a database lists tables and views, a table lists columns and
indexes. Containers share the kind of the object they belong to, so
asking the "Tables" container or its database gives the same answer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .listing_request import ListingRequest, NameFilter

if TYPE_CHECKING:
    from sqlnav.config import NavigationConfig
    from sqlnav.domains.navigation.app.listing import ListingService

    from .node import Node


def scope_of(node: Node) -> tuple[str, ...]:
    """Real names of the objects from the top down to ``node``."""
    return tuple(parent.real_name for parent in reversed(node.parents(include_self=True)))


class NodeKind:
    """Base kind: a leaf that lists nothing."""

    name = "leaf"
    # (container label, item type) created under an object of this kind
    containers: tuple[tuple[str, str], ...] = ()

    @property
    def item_types(self) -> tuple[str, ...]:
        return tuple(item_type for _label, item_type in self.containers)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"

    def child_kind(self, item_type: str) -> NodeKind:
        """Kind of the objects listed under ``item_type``."""
        return LEAF_KIND

    def page_size(self, config: NavigationConfig) -> int:
        return config.page_size

    def separators_for(self, item_type: str, config: NavigationConfig) -> tuple[str, ...]:
        return ()

    def name_filter(self, search_filter: str, config: NavigationConfig) -> NameFilter:
        return NameFilter(search=search_filter)

    def scope(self, node: Node) -> tuple[str, ...]:
        return scope_of(node)

    def build_request(
        self,
        node: Node,
        item_type: str,
        offset: int,
        search_filter: str,
        config: NavigationConfig,
    ) -> ListingRequest:
        """Describe one page of ``item_type`` children of ``node``.

        Raises:
            ValueError: If this kind does not list ``item_type``.
        """
        if not item_type and self.item_types:
            item_type = self.item_types[0]
        if item_type not in self.item_types:
            raise ValueError(f"{self!r} does not list {item_type!r}")
        return ListingRequest(
            item_type=item_type,
            scope=self.scope(node),
            offset=max(offset, 0),
            limit=self.page_size(config),
            name_filter=self.name_filter(search_filter, config),
            separators=self.separators_for(item_type, config),
        )

    def get_data(
        self,
        node: Node,
        listing: ListingService,
        item_type: str,
        offset: int,
        search_filter: str,
    ) -> list[str]:
        if not self.item_types:
            return []
        request = self.build_request(node, item_type, offset, search_filter, listing.config)
        return listing.list_names(request)

    def get_presence(
        self,
        node: Node,
        listing: ListingService,
        item_type: str,
        search_filter: str,
    ) -> int:
        if not self.item_types:
            return 0
        request = self.build_request(node, item_type, 0, search_filter, listing.config)
        return listing.count_names(request)


class ServerKind(NodeKind):
    """Lists the databases of a server, honouring hide/only patterns and grouping."""

    name = "server"
    containers = (("Databases", "databases"),)

    def child_kind(self, item_type: str) -> NodeKind:
        return DATABASE_KIND

    def page_size(self, config: NavigationConfig) -> int:
        return config.first_level_page_size

    def separators_for(self, item_type: str, config: NavigationConfig) -> tuple[str, ...]:
        return config.db_separators if config.grouping_enabled else ()

    def name_filter(self, search_filter: str, config: NavigationConfig) -> NameFilter:
        return NameFilter(
            search=search_filter,
            hide_pattern=config.hide_db_pattern or None,
            only_patterns=config.only_db_patterns,
        )

    def scope(self, node: Node) -> tuple[str, ...]:
        return ()


class DatabaseKind(NodeKind):
    name = "database"
    containers = (("Tables", "tables"), ("Views", "views"))

    def child_kind(self, item_type: str) -> NodeKind:
        return TABLE_KIND

    def separators_for(self, item_type: str, config: NavigationConfig) -> tuple[str, ...]:
        return config.table_separators if config.table_grouping_enabled else ()


class TableKind(NodeKind):
    name = "table"
    containers = (("Columns", "columns"), ("Indexes", "indexes"))


LEAF_KIND = NodeKind()
SERVER_KIND = ServerKind()
DATABASE_KIND = DatabaseKind()
TABLE_KIND = TableKind()
