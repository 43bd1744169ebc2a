#!/usr/bin/env python3
"""sqlnav - A navigation tree for SQL database servers."""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from .domains.navigation.app.tree_service import NavigationTree
    from .shared.core.protocols import NameSource


def parse_attach(values: list[str] | None) -> dict[str, str]:
    """Parse repeated ``NAME=PATH`` arguments.

    Raises:
        ValueError: If an argument has no ``=`` or an empty name.
    """
    attached: dict[str, str] = {}
    for value in values or []:
        name, sep, path = value.partition("=")
        if not sep or not name.strip() or not path.strip():
            raise ValueError(f"Expected NAME=PATH, got {value!r}")
        attached[name.strip()] = path.strip()
    return attached


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("db_file", nargs="?", metavar="DB_FILE", help="SQLite database file")
    parser.add_argument(
        "--attach",
        action="append",
        metavar="NAME=PATH",
        help="Attach another SQLite file as database NAME (repeatable)",
    )
    parser.add_argument(
        "--mock",
        metavar="PROFILE",
        help="Use mock data instead of a file (profiles: shop, shop-enumerator, many-databases, empty)",
    )
    parser.add_argument("--filter", default="", metavar="TEXT", help="Only list names containing TEXT")
    parser.add_argument("--no-grouping", action="store_true", help="Do not group names by prefix")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlnav",
        description="A navigation tree for SQL database servers",
        epilog="Example: sqlnav tree shop.db --attach archive=archive.db --depth 2",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--settings",
        metavar="PATH",
        help="Path to settings JSON file (overrides ~/.sqlnav/settings.json)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    tree_parser = subparsers.add_parser("tree", help="Print the navigation tree")
    _add_source_arguments(tree_parser)
    tree_parser.add_argument(
        "--depth",
        type=int,
        default=1,
        metavar="N",
        help="Object levels to expand: 1 databases, 2 tables, 3 columns (default: 1)",
    )
    tree_parser.add_argument(
        "--restore",
        action="store_true",
        help="Also expand the nodes left open in the browser",
    )

    browse_parser = subparsers.add_parser("browse", help="Browse the tree interactively")
    _add_source_arguments(browse_parser)
    return parser


def _open_source(args: argparse.Namespace) -> tuple[NameSource, str]:
    """Name source and server name for the parsed arguments.

    Raises:
        ValueError: If neither a file nor a known mock profile is given.
    """
    if args.mock:
        from .mocks import get_mock_profile, list_mock_profiles

        source = get_mock_profile(args.mock)
        if source is None:
            raise ValueError(f"Unknown mock profile: {args.mock} (available: {', '.join(list_mock_profiles())})")
        return source, f"mock:{args.mock}"
    if not args.db_file:
        raise ValueError("A DB_FILE or --mock PROFILE is required")

    from .db.catalog import SQLiteCatalog

    catalog = SQLiteCatalog.open(args.db_file, attach=parse_attach(args.attach))
    return catalog, catalog.server_name


def _build_tree(args: argparse.Namespace) -> NavigationTree:
    from .config import load_navigation_config
    from .domains.navigation.app.listing import ListingService
    from .domains.navigation.app.tree_service import NavigationTree

    config = load_navigation_config(args.settings)
    if args.no_grouping:
        config = config.with_grouping(False)
    source, server_name = _open_source(args)
    tree = NavigationTree(ListingService(source, config), server_name=server_name)
    tree.search_filter = args.filter
    return tree


def _run_tree(args: argparse.Namespace, tree: NavigationTree) -> int:
    from rich.console import Console

    from .domains.navigation.ui.render import render_tree

    if args.restore:
        from .domains.navigation.app.expansion_state import restore_expanded_state
        from .stores.expansion import ExpansionStateStore

        restore_expanded_state(ExpansionStateStore(), tree)
    Console().print(render_tree(tree, max_depth=max(args.depth, 0)))
    return 0


def _run_browse(tree: NavigationTree) -> int:
    from .domains.navigation.ui.browser import NavigatorApp
    from .stores.expansion import ExpansionStateStore

    app = NavigatorApp(tree, expansion_store=ExpansionStateStore())
    app.run()
    return 0


def _close_source(tree: NavigationTree) -> None:
    from .db.catalog import SQLiteCatalog

    source = tree.listing.source
    if isinstance(source, SQLiteCatalog):
        source.close()


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    from .db.exceptions import DataUnavailableError
    from .shared.app.logging_config import configure_logging

    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        tree = _build_tree(args)
    except (ValueError, DataUnavailableError) as exc:
        logger.error("{}", exc)
        return 1

    try:
        if args.command == "tree":
            return _run_tree(args, tree)
        return _run_browse(tree)
    finally:
        _close_source(tree)


if __name__ == "__main__":
    sys.exit(main())
