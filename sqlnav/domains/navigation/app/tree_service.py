"""Navigation tree service: lazy population, paging and grouping."""

from __future__ import annotations

import weakref
from collections.abc import Iterator, Sequence

from loguru import logger

from sqlnav.config import NavigationConfig
from sqlnav.domains.navigation.domain.exceptions import TreeStructureError
from sqlnav.domains.navigation.domain.grouping import (
    group_members,
    group_node,
    regroup_node,
    ungroup_node,
)
from sqlnav.domains.navigation.domain.kinds import (
    DATABASE_KIND,
    SERVER_KIND,
    TABLE_KIND,
    NodeKind,
)
from sqlnav.domains.navigation.domain.node import Node, NodeType

from .listing import ListingService


class NavigationTree:
    """A lazily expanded tree over one server.

    The root is a container listing the databases. Expanding a database
    or a table creates one container per category that has items
    ("Tables", "Views" / "Columns", "Indexes") and loads the first page of
    each, so sibling tests see real content. Expanding a container that
    is already loaded does nothing; :meth:`load_more` fetches the next page.

    Page offsets: the root uses :attr:`pos`, database-level containers
    their ``pos2``, table-level containers their ``pos3``. Under grouping
    offsets count prefixes.
    """

    def __init__(self, listing: ListingService, server_name: str = "server"):
        self._listing = listing
        self.pos = 0
        self.search_filter = ""
        self._loaded: weakref.WeakSet[Node] = weakref.WeakSet()
        self.root = Node(server_name, NodeType.CONTAINER, kind=SERVER_KIND, item_type="databases")
        self._configure_grouping(self.root)

    @property
    def config(self) -> NavigationConfig:
        return self._listing.config

    @property
    def listing(self) -> ListingService:
        return self._listing

    # --------------------------------------------------------------- loading

    def is_loaded(self, node: Node) -> bool:
        return node in self._loaded

    def can_expand(self, node: Node) -> bool:
        if node.type == NodeType.CONTAINER:
            return True
        if node.kind is DATABASE_KIND and self.config.database_expansion_disabled:
            return False
        return bool(self._kind_of(node).item_types)

    def expand(self, node: Node) -> list[Node]:
        """Load the children of ``node`` once and return them."""
        if node.is_group or node in self._loaded:
            return node.children
        if not self.can_expand(node):
            return []
        self._loaded.add(node)
        if node.type == NodeType.CONTAINER:
            self._load_page(node)
        else:
            self._add_containers(node)
        return node.children

    def load_more(self, node: Node) -> list[Node]:
        """Advance the page offset of the container holding ``node`` and load it."""
        container = self.listing_container(node)
        offset = self.offset_for(container) + self._page_size(container)
        self._set_offset(container, offset)
        self._loaded.add(container)
        return self._load_page(container)

    def has_more(self, node: Node) -> bool:
        """Whether the catalog holds items past the current page."""
        container = self.listing_container(node)
        presence = container.get_presence(self._listing, container.item_type or "", self.search_filter)
        return self.offset_for(container) + self._page_size(container) < presence

    def reload(self, node: Node) -> list[Node]:
        """Drop the children of ``node`` and load them again from offset zero.

        A group is reloaded through the listing container it belongs to.
        """
        if node.is_group:
            node = self.listing_container(node)
        for child in list(node.children):
            child.detach()
        node.children = []
        self._loaded.discard(node)
        if node.type == NodeType.CONTAINER and not node.is_group:
            self._set_offset(node, 0)
        return self.expand(node)

    def listing_container(self, node: Node) -> Node:
        """The non-group container whose listing ``node`` belongs to.

        Raises:
            TreeStructureError: If ``node`` is an object outside any container.
        """
        current: Node | None = node
        if node.type == NodeType.OBJECT:
            current = node.parent
        while current is not None and current.is_group:
            current = current.parent
        if current is None or current.type != NodeType.CONTAINER:
            raise TreeStructureError(f"{node!r} is not inside a listing container")
        return current

    def offset_for(self, container: Node) -> int:
        if container is self.root:
            return self.pos
        if container.kind is DATABASE_KIND:
            return container.pos2
        return container.pos3

    def _set_offset(self, container: Node, offset: int) -> None:
        if container is self.root:
            self.pos = offset
        elif container.kind is DATABASE_KIND:
            container.pos2 = offset
        else:
            container.pos3 = offset

    def _page_size(self, container: Node) -> int:
        return self._kind_of(container).page_size(self.config)

    def _kind_of(self, node: Node) -> NodeKind:
        return node.kind if node.kind is not None else SERVER_KIND

    def _add_containers(self, node: Node) -> None:
        kind = self._kind_of(node)
        for label, item_type in kind.containers:
            if node.get_presence(self._listing, item_type) <= 0:
                continue
            container = Node(label, NodeType.CONTAINER, kind=kind, item_type=item_type)
            self._configure_grouping(container)
            node.add_child(container)
            self._loaded.add(container)
            self._load_page(container)

    def _load_page(self, container: Node) -> list[Node]:
        item_type = container.item_type or ""
        offset = self.offset_for(container)
        names = container.get_data(self._listing, item_type, offset, self.search_filter)
        known = {member.real_name for member in group_members(container)}
        child_kind = self._kind_of(container).child_kind(item_type)
        added: list[Node] = []
        for name in names:
            if name in known:
                continue
            known.add(name)
            child = Node(name, NodeType.OBJECT, kind=child_kind)
            container.add_child(child)
            added.append(child)
        logger.debug("Loaded {} {} into {}", len(added), item_type, container.get_paths().a_path_clean)
        if added:
            regroup_node(container)
        return added

    # -------------------------------------------------------------- grouping

    def _configure_grouping(self, container: Node) -> None:
        config = self.config
        if container is self.root:
            container.separator = config.db_separator
            container.separator_depth = config.db_separator_depth if config.grouping_enabled else 0
        elif container.kind is DATABASE_KIND:
            container.separator = config.table_separator
            container.separator_depth = config.table_separator_depth if config.table_grouping_enabled else 0
        else:
            container.separator = ""
            container.separator_depth = 0

    def set_grouping(self, enabled: bool) -> None:
        """Switch grouping on or off for the whole loaded tree."""
        self._listing = self._listing.with_config(self.config.with_grouping(enabled))
        ungroup_node(self.root)
        containers = [
            node for node in self.root.walk() if node.type == NodeType.CONTAINER and not node.is_group
        ]
        for container in containers:
            self._configure_grouping(container)
            group_node(container)

    # ----------------------------------------------------------------- paths

    def find_by_path(self, v_path_clean: Sequence[str]) -> Node:
        """Resolve a node from its clean virtual path.

        Raises:
            TreeStructureError: If a segment is not present in the loaded tree.
        """
        if not v_path_clean or v_path_clean[0] != self.root.name:
            raise TreeStructureError(f"Path {list(v_path_clean)!r} does not start at {self.root.name!r}")
        node = self.root
        for segment in v_path_clean[1:]:
            child = node.get_child(segment)
            if child is None:
                raise TreeStructureError(f"No node {segment!r} under {node!r}")
            node = child
        return node

    def find_by_actual_path(self, a_path_clean: Sequence[str]) -> Node:
        """Resolve a node from its clean actual path, looking through groups.

        Raises:
            TreeStructureError: If a segment is not present in the loaded tree.
        """
        if not a_path_clean or a_path_clean[0] != self.root.real_name:
            raise TreeStructureError(f"Path {list(a_path_clean)!r} does not start at {self.root.real_name!r}")
        node = self.root
        for segment in a_path_clean[1:]:
            child = next((m for m in group_members(node) if m.real_name == segment), None)
            if child is None:
                raise TreeStructureError(f"No node {segment!r} under {node!r}")
            node = child
        return node

    def expand_path(self, v_path_clean: Sequence[str]) -> Node:
        """Load the tree along a virtual path and mark the nodes on it as matched.

        Raises:
            TreeStructureError: If the path leaves the catalog's content.
        """
        if not v_path_clean or v_path_clean[0] != self.root.name:
            raise TreeStructureError(f"Path {list(v_path_clean)!r} does not start at {self.root.name!r}")
        node = self.root
        self._mark_matched(node)
        for segment in v_path_clean[1:]:
            self.expand(node)
            child = node.get_child(segment)
            if child is None:
                raise TreeStructureError(f"No node {segment!r} under {node!r}")
            node = child
            self._mark_matched(node)
        return node

    def _mark_matched(self, node: Node) -> None:
        node.icon = node.get_icon(True, expansion_disabled=self.config.database_expansion_disabled)
        node.classes = node.get_css_classes(True, expansion_disabled=self.config.database_expansion_disabled)

    # ------------------------------------------------------------- rendering

    def visible_children(self, node: Node) -> Iterator[Node]:
        """Children as a UI shows them.

        A non-group container without siblings is skipped and its children
        shown in its place; column and index containers always show.
        """
        for child in node.children:
            if self._is_flattened(child):
                yield from self.visible_children(child)
            else:
                yield child

    def paged_containers(self, node: Node) -> list[Node]:
        """Listing containers whose pages show directly under ``node``."""
        containers = [node] if node.type == NodeType.CONTAINER and not node.is_group else []
        for child in node.children:
            if self._is_flattened(child):
                containers.extend(self.paged_containers(child))
        return containers

    def _is_flattened(self, node: Node) -> bool:
        return node.type == NodeType.CONTAINER and not node.is_group and not node.has_siblings()
