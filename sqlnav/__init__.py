"""sqlnav - A navigation tree for SQL database servers."""

from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING, Any

__all__ = [
    "__version__",
    "main",
    "Node",
    "NodeType",
    "NavigationConfig",
    "NavigationTree",
]

try:
    __version__ = version("sqlnav")
except PackageNotFoundError:
    __version__ = "0.0.0.dev"

if TYPE_CHECKING:
    from .cli import main
    from .config import NavigationConfig
    from sqlnav.domains.navigation.app.tree_service import NavigationTree
    from sqlnav.domains.navigation.domain.node import Node, NodeType


def __getattr__(name: str) -> Any:
    """Lazy import for heavy modules to keep package import side-effect free."""
    if name == "main":
        from .cli import main

        return main
    if name == "NavigationConfig":
        from .config import NavigationConfig

        return NavigationConfig
    if name == "NavigationTree":
        from sqlnav.domains.navigation.app.tree_service import NavigationTree

        return NavigationTree
    if name in ("Node", "NodeType"):
        from sqlnav.domains.navigation.domain import node

        return getattr(node, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
