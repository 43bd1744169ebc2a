"""Textual browser for the navigation tree.

Widget nodes carry the :class:`Node` they show as ``data``. Expanding a
widget node asks the tree service for the node's children and mirrors
them; a trailing "… more" leaf loads the next page of the listing.
Expanded virtual paths are saved per server and expanded again on start.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Union

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Tree
from textual.widgets.tree import TreeNode

from sqlnav.domains.navigation.app.tree_service import NavigationTree
from sqlnav.domains.navigation.domain.node import Node
from sqlnav.stores.expansion import ExpansionStateStore

from .render import MORE_LABEL, format_label


@dataclass
class LoadMore:
    """Data of the "… more" leaf: the container whose next page it loads."""

    container: Node


TreeData = Union[Node, LoadMore]


def populate_children(tree: NavigationTree, widget_node: Any, node: Node) -> None:
    """Replace the children of ``widget_node`` with the visible children of ``node``.

    ``widget_node`` only needs the ``TreeNode`` methods ``remove_children``,
    ``add`` and ``add_leaf``.
    """
    widget_node.remove_children()
    for child in tree.visible_children(node):
        label = format_label(tree, child, icons=False)
        if tree.can_expand(child):
            widget_node.add(label, data=child, allow_expand=True)
        else:
            widget_node.add_leaf(label, data=child)
    for container in tree.paged_containers(node):
        if tree.has_more(container):
            widget_node.add_leaf(MORE_LABEL, data=LoadMore(container))


def expanded_nodes(widget_node: Any) -> list[Node]:
    """Tree nodes behind every expanded widget node in a subtree, parents first."""
    nodes: list[Node] = []
    data = widget_node.data
    if widget_node.is_expanded and isinstance(data, Node):
        nodes.append(data)
    for child in widget_node.children:
        nodes.extend(expanded_nodes(child))
    return nodes


def collect_expanded(widget_node: Any) -> set[str]:
    """Encoded virtual paths of every expanded widget node in a subtree."""
    return {node.get_paths().v_path for node in expanded_nodes(widget_node)}


class NavigatorTree(Tree[TreeData]):
    """Tree widget showing one server."""

    DEFAULT_CSS = """
    NavigatorTree {
        height: 1fr;
        background: $surface;
    }

    NavigatorTree > .tree--guides {
        color: $text-muted;
    }
    """


class NavigatorApp(App[None]):
    """Browse a server's databases, tables and columns."""

    TITLE = "sqlnav"

    BINDINGS = [
        Binding("g", "toggle_grouping", "Grouping"),
        Binding("r", "refresh_node", "Refresh"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        tree: NavigationTree,
        *,
        expansion_store: ExpansionStateStore | None = None,
    ) -> None:
        super().__init__()
        self.navigation = tree
        self._expansion_store = expansion_store
        self._restore_paths: set[str] = set()
        if expansion_store is not None:
            self._restore_paths = expansion_store.load_for_server(tree.root.real_name)

    def compose(self) -> ComposeResult:
        yield Header()
        yield NavigatorTree(format_label(self.navigation, self.navigation.root, icons=False), id="navigator")
        yield Footer()

    @property
    def object_tree(self) -> NavigatorTree:
        return self.query_one("#navigator", NavigatorTree)

    def on_mount(self) -> None:
        root = self.object_tree.root
        root.data = self.navigation.root
        self._load(root)
        root.expand()
        self.object_tree.focus()

    # ---------------------------------------------------------------- events

    def on_tree_node_expanded(self, event: Tree.NodeExpanded[TreeData]) -> None:
        """Load children of a node the first time it is expanded."""
        node = event.node
        if isinstance(node.data, Node) and not node.children:
            self._load(node)
        self.call_later(self._save_expanded_state)

    def on_tree_node_collapsed(self, event: Tree.NodeCollapsed[TreeData]) -> None:
        self.call_later(self._save_expanded_state)

    def on_tree_node_selected(self, event: Tree.NodeSelected[TreeData]) -> None:
        data = event.node.data
        parent = event.node.parent
        if not isinstance(data, LoadMore) or parent is None or not isinstance(parent.data, Node):
            return
        self._rebuild(parent, lambda: self.navigation.load_more(data.container))

    # --------------------------------------------------------------- actions

    def action_toggle_grouping(self) -> None:
        enabled = not self.navigation.config.grouping_enabled
        root = self.object_tree.root
        # Groups are rebuilt, so only objects carry their expansion over.
        kept = [node for node in expanded_nodes(root) if not node.is_group]
        self.navigation.set_grouping(enabled)
        self._restore_paths |= {node.get_paths().v_path for node in kept}
        self._load(root)
        self.notify(f"Grouping {'on' if enabled else 'off'}")

    def action_refresh_node(self) -> None:
        widget_node = self.object_tree.cursor_node
        while widget_node is not None and not (
            isinstance(widget_node.data, Node) and not widget_node.data.is_group
        ):
            widget_node = widget_node.parent
        if widget_node is None:
            return
        node = widget_node.data
        assert isinstance(node, Node)
        self._rebuild(widget_node, lambda: self.navigation.reload(node))

    # --------------------------------------------------------------- helpers

    def _load(self, widget_node: TreeNode[TreeData]) -> None:
        node = widget_node.data
        if not isinstance(node, Node):
            return
        self.navigation.expand(node)
        populate_children(self.navigation, widget_node, node)
        for child in widget_node.children:
            if isinstance(child.data, Node) and child.data.get_paths().v_path in self._restore_paths:
                child.expand()

    def _rebuild(self, widget_node: TreeNode[TreeData], update: Callable[[], object]) -> None:
        """Apply ``update`` to the tree and rebuild a subtree, keeping what was expanded in it expanded.

        Expanded paths are read before ``update`` runs, while the widget
        nodes still point at nodes attached to the tree.
        """
        self._restore_paths |= collect_expanded(widget_node)
        update()
        self._load(widget_node)

    def _save_expanded_state(self) -> None:
        if self._expansion_store is None:
            return
        self._expansion_store.save_for_server(
            self.navigation.root.real_name,
            collect_expanded(self.object_tree.root),
        )
