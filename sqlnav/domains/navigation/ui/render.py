"""Rich rendering of a navigation tree."""

from __future__ import annotations

from rich.markup import escape as escape_markup
from rich.tree import Tree as RichTree

from sqlnav.domains.navigation.app.tree_service import NavigationTree
from sqlnav.domains.navigation.domain.node import Node, NodeType

MORE_LABEL = "[dim italic]… more[/]"


def format_label(tree: NavigationTree, node: Node, *, icons: bool = True) -> str:
    """Markup label for a node: icon, name, and a dim hint for groups/containers."""
    name = escape_markup(node.name)
    if not tree.can_expand(node):
        return f"[dim]{name}[/]" if node.kind is None or not node.kind.item_types else name
    prefix = ""
    if icons:
        icon = node.get_icon(tree.is_loaded(node), expansion_disabled=tree.config.database_expansion_disabled)
        prefix = f"{icon} " if icon else ""
    if node.is_group:
        return f"{prefix}[dim]{name}[/][dim]…[/] [italic dim]({node.num_children()})[/]"
    if node.type == NodeType.CONTAINER:
        return f"{prefix}[bold]{name}[/]"
    return f"{prefix}{name}"


def render_tree(tree: NavigationTree, *, max_depth: int = 1) -> RichTree:
    """Render the tree, expanding nodes down to ``max_depth`` object levels.

    Depth counts object levels: 1 shows databases, 2 adds tables and
    views, 3 adds columns and indexes. Containers and groups do not count.
    """
    tree.expand(tree.root)
    rendered = RichTree(f"[bold]{escape_markup(tree.root.name)}[/]")
    _add_children(tree, tree.root, rendered, depth=1, max_depth=max_depth)
    return rendered


def _add_children(
    tree: NavigationTree,
    node: Node,
    branch: RichTree,
    *,
    depth: int,
    max_depth: int,
) -> None:
    for child in tree.visible_children(node):
        if child.type == NodeType.CONTAINER:
            tree.expand(child)
            sub_branch = branch.add(format_label(tree, child))
            _add_children(tree, child, sub_branch, depth=depth, max_depth=max_depth)
            continue
        if depth < max_depth and tree.can_expand(child):
            tree.expand(child)
        sub_branch = branch.add(format_label(tree, child))
        if tree.is_loaded(child):
            _add_children(tree, child, sub_branch, depth=depth + 1, max_depth=max_depth)
    if any(tree.has_more(container) for container in tree.paged_containers(node)):
        branch.add(MORE_LABEL)
