"""The Node is the building block of the navigation tree.

A tree mirrors the object hierarchy of a database server::

    server -> Databases -> Tables/Views -> Columns/Indexes

OBJECT nodes stand for real database objects. CONTAINER nodes are
structural: either folders from the literal hierarchy ("Tables") or
groups synthesized by :mod:`.grouping` from a shared name prefix.

Every node answers two paths. The actual path uses ``real_name`` and
skips groups, so it can be used to build catalog queries. The virtual
path uses ``name`` and includes groups, so it addresses what the UI is
currently showing.
"""

from __future__ import annotations

import weakref
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .exceptions import TreeStructureError
from .path_codec import encode_path

if TYPE_CHECKING:
    from sqlnav.domains.navigation.app.listing import ListingService

    from .kinds import NodeKind

ICON_EXPANDED = "▼"
ICON_COLLAPSED = "▶"

# Nodes deeper than server.database.table always render their containers.
ALWAYS_RENDER_DEPTH = 3


class NodeType(Enum):
    """Structural kind of a node."""

    CONTAINER = "container"
    OBJECT = "object"


@dataclass(frozen=True)
class NodePaths:
    """Actual and virtual paths of a node, clean and encoded, root first."""

    a_path: str
    a_path_clean: tuple[str, ...]
    v_path: str
    v_path_clean: tuple[str, ...]


class Node:
    """A node in the navigation tree.

    Attributes:
        name: Display identifier. Grouping may trim it to a suffix of
            ``real_name``.
        type: CONTAINER or OBJECT.
        is_group: Whether grouping synthesized this container.
        visible: Set when the node matched an expansion path.
        parent: Owning node, ``None`` for the root. Held through a weak
            reference: children are owned, parents are not.
        children: Owned child nodes in render order.
        separator: String, or tuple of strings, used to group children.
        separator_depth: How many times grouping is applied recursively.
        pos2: Pagination offset of the second-level branch.
        pos3: Pagination offset of the third-level branch.
        kind: Fetch strategy used by :meth:`get_data` and :meth:`get_presence`.
        item_type: Catalog category listed by a container ("tables", ...).
    """

    def __init__(
        self,
        name: str | None,
        type: NodeType = NodeType.OBJECT,
        is_group: bool = False,
        *,
        kind: NodeKind | None = None,
        item_type: str | None = None,
    ):
        self.name: str = name or ""
        self._real_name: str = name or ""
        self.type = NodeType.CONTAINER if type == NodeType.CONTAINER else NodeType.OBJECT
        self.is_group = bool(is_group)
        self.visible = False
        self._parent: weakref.ref[Node] | None = None
        self.children: list[Node] = []
        self.separator: str | tuple[str, ...] = ""
        self.separator_depth = 1
        self.pos2 = 0
        self.pos3 = 0
        self.kind = kind
        self.item_type = item_type
        self.icon: str | None = None
        self.links: dict[str, str] = {}
        self.classes = ""
        self.is_new = False

    @property
    def real_name(self) -> str:
        """Canonical identifier, fixed at construction."""
        return self._real_name

    @property
    def parent(self) -> Node | None:
        return self._parent() if self._parent is not None else None

    @parent.setter
    def parent(self, node: Node | None) -> None:
        self._parent = weakref.ref(node) if node is not None else None

    @property
    def is_container(self) -> bool:
        return self.type == NodeType.CONTAINER

    def __repr__(self) -> str:
        extra = " group" if self.is_group else ""
        if self.name != self._real_name:
            return f"<Node {self.type.value}{extra} {self.name!r} ({self._real_name!r})>"
        return f"<Node {self.type.value}{extra} {self.name!r}>"

    # ---------------------------------------------------------------- ownership

    def add_child(self, child: Node) -> None:
        """Append ``child`` and make this node its parent.

        No duplicate check is made; callers keep ``real_name`` unique.
        """
        self.children.append(child)
        child.parent = self

    def get_child(self, name: str, by_real_name: bool = False) -> Node | None:
        """Return the first child whose name (or real name) equals ``name``."""
        for child in self.children:
            key = child.real_name if by_real_name else child.name
            if key == name:
                return child
        return None

    def remove_child(self, name: str) -> None:
        """Remove and detach the first child named ``name``, if any."""
        for index, child in enumerate(self.children):
            if child.name == name:
                del self.children[index]
                child.detach()
                return

    def detach(self) -> None:
        """Drop the parent reference of this node and of its whole subtree."""
        self.parent = None
        for child in self.children:
            child.detach()
        self.children = []

    # ---------------------------------------------------------------- traversal

    def parents(
        self,
        include_self: bool = False,
        include_containers: bool = False,
        include_groups: bool = False,
    ) -> list[Node]:
        """Return ancestors nearest first, filtered by node type.

        Containers are skipped unless ``include_containers`` and groups
        unless ``include_groups``. With ``include_self`` the node itself is
        considered first, under the same filters.

        Raises:
            TreeStructureError: If the parent chain loops back on itself.
        """

        def wanted(node: Node) -> bool:
            if node.type == NodeType.CONTAINER and not include_containers:
                return False
            if node.is_group and not include_groups:
                return False
            return True

        result: list[Node] = []
        if include_self and wanted(self):
            result.append(self)

        seen = {id(self)}
        current = self.parent
        while current is not None:
            if id(current) in seen:
                raise TreeStructureError(f"Cycle in parent chain of {self!r}")
            seen.add(id(current))
            if wanted(current):
                result.append(current)
            current = current.parent
        return result

    def real_parent(self) -> Node | None:
        """Nearest ancestor that is neither a container nor a group.

        Applied twice on a column node this yields the table and then the
        database, whose names can go straight into catalog queries.
        """
        ancestors = self.parents()
        if not ancestors:
            return None
        return ancestors[0]

    def get_paths(self) -> NodePaths:
        actual = [node.real_name for node in self.parents(True, True, False)]
        actual.reverse()
        virtual = [node.name for node in self.parents(True, True, True)]
        virtual.reverse()
        return NodePaths(
            a_path=encode_path(actual),
            a_path_clean=tuple(actual),
            v_path=encode_path(virtual),
            v_path_clean=tuple(virtual),
        )

    # --------------------------------------------------------------- predicates

    def has_children(self, count_empty_containers: bool = True) -> bool:
        """Whether this node has children.

        With ``count_empty_containers`` false, containers only count when
        some OBJECT exists somewhere beneath them.
        """
        if count_empty_containers:
            return bool(self.children)
        return any(
            child.type == NodeType.OBJECT or child.has_children(False)
            for child in self.children
        )

    def num_children(self) -> int:
        """Number of OBJECT descendants; containers are counted through."""
        total = 0
        for child in self.children:
            if child.type == NodeType.OBJECT:
                total += 1
            else:
                total += child.num_children()
        return total

    def has_structural_siblings(self) -> bool:
        """Whether another child of the parent is an object or holds one."""
        if self.parent is None:
            return False
        return any(
            child is not self
            and (child.type == NodeType.OBJECT or child.has_children(False))
            for child in self.parent.children
        )

    def always_render_container(self) -> bool:
        """Columns and indexes keep their containers even when alone."""
        return len(self.get_paths().a_path_clean) > ALWAYS_RENDER_DEPTH

    def has_siblings(self) -> bool:
        return self.always_render_container() or self.has_structural_siblings()

    # -------------------------------------------------------------------- data

    def _resolved_kind(self) -> NodeKind:
        if self.kind is not None:
            return self.kind
        from .kinds import SERVER_KIND

        return SERVER_KIND

    def get_data(
        self,
        listing: ListingService,
        item_type: str,
        offset: int = 0,
        search_filter: str = "",
    ) -> list[str]:
        """Names of one page of ``item_type`` children, from the catalog."""
        return self._resolved_kind().get_data(self, listing, item_type, offset, search_filter)

    def get_presence(
        self,
        listing: ListingService,
        item_type: str = "",
        search_filter: str = "",
    ) -> int:
        """Number of ``item_type`` children (or prefixes, under grouping)."""
        return self._resolved_kind().get_presence(self, listing, item_type, search_filter)

    # ------------------------------------------------------------ render hints

    def get_css_classes(self, matched: bool, *, expansion_disabled: bool = False) -> str:
        if expansion_disabled:
            return ""
        classes = ["expander"]
        if self.is_group or matched:
            classes.append("loaded")
        if self.type == NodeType.CONTAINER:
            classes.append("container")
        return " ".join(classes)

    def get_icon(self, matched: bool, *, expansion_disabled: bool = False) -> str:
        """Expand/collapse icon; marks the node visible when it matched."""
        if expansion_disabled:
            return ""
        if matched and not self.is_group:
            self.visible = True
            return ICON_EXPANDED
        return ICON_COLLAPSED

    def walk(self) -> Iterator[Node]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()
