"""Expansion state: which nodes are open, keyed by encoded virtual path."""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from sqlnav.domains.navigation.domain.exceptions import TreeStructureError
from sqlnav.domains.navigation.domain.node import Node
from sqlnav.domains.navigation.domain.path_codec import decode_path
from sqlnav.stores.expansion import ExpansionStateStore

from .tree_service import NavigationTree


def expanded_paths(nodes: Iterable[Node]) -> set[str]:
    return {node.get_paths().v_path for node in nodes}


def save_expanded_state(store: ExpansionStateStore, tree: NavigationTree, nodes: Iterable[Node]) -> None:
    store.save_for_server(tree.root.real_name, expanded_paths(nodes))


def restore_expanded_state(store: ExpansionStateStore, tree: NavigationTree) -> list[Node]:
    """Expand every stored path that still resolves, shallowest first.

    Paths that no longer resolve (renamed objects, changed grouping) are
    skipped.
    """
    decoded: list[list[str]] = []
    for encoded in store.load_for_server(tree.root.real_name):
        try:
            decoded.append(decode_path(encoded))
        except ValueError:
            logger.debug("Skipping undecodable expansion path {!r}", encoded)

    restored: list[Node] = []
    for path in sorted(decoded, key=len):
        try:
            node = tree.expand_path(path)
        except TreeStructureError as error:
            logger.debug("Skipping stale expansion path: {}", error)
            continue
        tree.expand(node)
        restored.append(node)
    return restored
