"""Grouping of sibling nodes that share a name prefix.

``user_log`` and ``user_session`` under a container with separator ``_``
end up inside a synthetic group container named ``user``, renamed to
``log`` and ``session``. Their ``real_name`` is untouched, so actual paths
do not change while virtual paths gain the group segment.

Listing under grouping pages over prefixes, not names. The pure
:func:`paginate_prefixes` does both phases: choose a page of distinct
first-level prefixes, then expand it to every name carrying one of them.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .node import Node, NodeType

GROUP_CLASS = "navGroup"


def split_prefix(name: str, separators: Sequence[str]) -> str | None:
    """Prefix before the earliest separator, or None if no separator splits ``name``.

    A separator at position 0 does not split: ``_tmp`` has no prefix.
    """
    position: int | None = None
    for separator in separators:
        if not separator:
            continue
        index = name.find(separator)
        if index > 0 and (position is None or index < position):
            position = index
    if position is None:
        return None
    return name[:position]


def first_level_prefix(name: str, separators: Sequence[str]) -> str:
    """Prefix a name is paged under: the split prefix, or the name itself."""
    prefix = split_prefix(name, separators)
    return name if prefix is None else prefix


def count_prefixes(names: Iterable[str], separators: Sequence[str]) -> int:
    return len({first_level_prefix(name, separators) for name in names})


@dataclass(frozen=True)
class PrefixPage:
    """One page of prefixes and the names they expand to."""

    prefixes: tuple[str, ...]
    expansion: dict[str, tuple[str, ...]] = field(default_factory=dict)
    names: tuple[str, ...] = ()


def paginate_prefixes(
    names: Iterable[str],
    separators: Sequence[str],
    offset: int,
    page_size: int,
    *,
    ordered: bool = False,
    expand_from: Iterable[str] | None = None,
) -> PrefixPage:
    """Page over distinct first-level prefixes, then expand them to names.

    Args:
        names: Filtered names the prefixes are chosen from.
        separators: Grouping separators.
        offset: Index of the first prefix of the page.
        page_size: Number of prefixes per page.
        ordered: Sort prefixes and names, as a catalog query would. Otherwise
            prefixes keep encounter order and reading ``names`` stops as soon
            as the page is complete.
        expand_from: Names the selected prefixes expand to. Defaults to
            ``names``; pass the listing without the search filter to show
            whole groups for a matching prefix.
    """
    if expand_from is None:
        names = list(names)
        expand_from = names

    if ordered:
        distinct = sorted({first_level_prefix(name, separators) for name in names})
        selected = distinct[offset : offset + page_size]
    else:
        seen: dict[str, None] = {}
        wanted = offset + page_size
        for name in names:
            seen.setdefault(first_level_prefix(name, separators), None)
            if len(seen) >= wanted:
                break
        selected = list(seen)[offset:]

    members = sorted(expand_from) if ordered else expand_from
    expansion: dict[str, list[str]] = {prefix: [] for prefix in selected}
    page_names: list[str] = []
    for name in members:
        bucket = expansion.get(first_level_prefix(name, separators))
        if bucket is not None:
            bucket.append(name)
            page_names.append(name)

    return PrefixPage(
        prefixes=tuple(selected),
        expansion={prefix: tuple(items) for prefix, items in expansion.items()},
        names=tuple(page_names),
    )


def _belongs_to(child: Node, prefix: str, separators: Sequence[str]) -> bool:
    if child.type != NodeType.OBJECT:
        return False
    if child.name == prefix:
        return True
    return any(child.name.startswith(prefix + separator) for separator in separators)


def _trimmed_name(name: str, prefix: str, separators: Sequence[str]) -> str:
    for separator in sorted(separators, key=len, reverse=True):
        head = prefix + separator
        if name.startswith(head) and len(name) > len(head):
            return name[len(head) :]
    return name


def group_node(node: Node) -> None:
    """Move OBJECT children sharing a prefix into group containers.

    Only containers with a separator and a positive ``separator_depth`` are
    grouped. A prefix needs at least two members; a child named exactly
    like a prefix joins that group. Each group takes the position of its
    first member and is grouped again with one less depth.
    """
    if node.type != NodeType.CONTAINER or node.separator_depth < 1:
        return
    separators = _separators_of(node)
    if not separators:
        return

    objects = [child for child in node.children if child.type == NodeType.OBJECT]
    counts: dict[str, int] = {}
    for child in objects:
        prefix = split_prefix(child.name, separators)
        if prefix is not None:
            counts[prefix] = counts.get(prefix, 0) + 1
    for child in objects:
        if child.name in counts:
            counts[child.name] += 1

    groups: list[Node] = []
    for prefix, count in counts.items():
        if count < 2:
            continue
        members = [child for child in node.children if _belongs_to(child, prefix, separators)]
        if len(members) < 2:
            continue
        group = Node(prefix, NodeType.CONTAINER, is_group=True, kind=node.kind, item_type=node.item_type)
        group.separator = node.separator
        group.separator_depth = node.separator_depth - 1
        group.classes = GROUP_CLASS

        position = node.children.index(members[0])
        node.children = [child for child in node.children if all(child is not m for m in members)]
        node.children.insert(position, group)
        group.parent = node
        for member in members:
            member.name = _trimmed_name(member.name, prefix, separators)
            group.add_child(member)
        groups.append(group)

    for group in groups:
        group_node(group)


def regroup_node(node: Node) -> None:
    """Group OBJECT children added since ``node`` was last grouped.

    Existing group nodes are kept: a new child whose prefix names one of
    them joins it, and the remaining ungrouped children go through
    :func:`group_node`. Nodes already handed out keep their place and paths.
    """
    if node.type != NodeType.CONTAINER or node.separator_depth < 1:
        return
    separators = _separators_of(node)
    if not separators:
        return

    groups = [child for child in node.children if child.is_group]
    joined: list[Node] = []
    for child in list(node.children):
        if child.type != NodeType.OBJECT:
            continue
        group = next((g for g in groups if _belongs_to(child, g.name, separators)), None)
        if group is None:
            continue
        node.children = [c for c in node.children if c is not child]
        child.name = _trimmed_name(child.name, group.name, separators)
        group.add_child(child)
        if all(group is not g for g in joined):
            joined.append(group)

    for group in joined:
        regroup_node(group)
    group_node(node)


def ungroup_node(node: Node, deep: bool = True) -> None:
    """Flatten groups back into their parent and restore original names.

    With ``deep`` every group of the subtree is flattened; otherwise only
    the groups holding children of ``node`` are, leaving deeper levels
    grouped.
    """
    flattened: list[Node] = []
    for child in node.children:
        if child.is_group:
            ungroup_node(child, deep)
            for grandchild in child.children:
                grandchild.parent = node
                flattened.append(grandchild)
            child.children = []
            child.parent = None
        else:
            child.name = child.real_name
            if deep:
                ungroup_node(child, deep)
            flattened.append(child)
    node.children = flattened


def group_members(node: Node) -> list[Node]:
    """Children of ``node`` seen through any groups, in render order."""
    members: list[Node] = []
    for child in node.children:
        if child.is_group:
            members.extend(group_members(child))
        else:
            members.append(child)
    return members


def _separators_of(node: Node) -> tuple[str, ...]:
    separator = node.separator
    if isinstance(separator, str):
        return (separator,) if separator else ()
    return tuple(item for item in separator if item)
