"""Mock name sources for demos and testing the navigator without a database."""

from __future__ import annotations

from collections.abc import Callable

from sqlnav.db.catalog import StaticCatalog, StaticEnumerator
from sqlnav.shared.core.protocols import NameSource

SHOP_HIERARCHY = {
    "shop": {
        "tables": {
            "users": {"columns": ["id", "name", "email", "created_at"], "indexes": ["users_email_idx"]},
            "products": {"columns": ["id", "name", "price", "stock"], "indexes": []},
            "orders": {
                "columns": ["id", "user_id", "product_id", "quantity", "created_at"],
                "indexes": ["orders_user_idx", "orders_product_idx"],
            },
            "audit__logins": {"columns": ["id", "user_id", "at"]},
            "audit__payments": {"columns": ["id", "order_id", "amount"]},
        },
        "views": {"recent_orders": {"columns": ["id", "created_at"]}},
    },
    "shop_archive": {"tables": {"orders": {"columns": ["id", "quantity"]}}},
    "shop_staging": {"tables": {"orders": {"columns": ["id", "quantity"]}}},
    "analytics": {"tables": {"events": {"columns": ["id", "kind", "at"]}}},
}


def create_shop_catalog() -> StaticCatalog:
    """Catalog mode: filtering and paging as a SQL backend does it."""
    return StaticCatalog.from_hierarchy(SHOP_HIERARCHY)


def create_shop_enumerator() -> StaticEnumerator:
    """Enumerator mode: names only, filtered and paged by the listing service."""
    return StaticEnumerator.from_hierarchy(SHOP_HIERARCHY)


def create_many_databases() -> StaticCatalog:
    """Enough databases to page: tenant_000 .. tenant_249 plus a few singles."""
    hierarchy: dict[str, dict[str, dict[str, dict[str, list[str]]]]] = {
        f"tenant_{index:03d}": {"tables": {"accounts": {"columns": ["id", "name"]}}} for index in range(250)
    }
    for name in ("admin", "metrics", "scratch"):
        hierarchy[name] = {"tables": {"notes": {"columns": ["id", "body"]}}}
    return StaticCatalog.from_hierarchy(hierarchy)


def create_empty() -> StaticCatalog:
    return StaticCatalog({(): {"databases": []}})


MOCK_PROFILES: dict[str, Callable[[], NameSource]] = {
    "shop": create_shop_catalog,
    "shop-enumerator": create_shop_enumerator,
    "many-databases": create_many_databases,
    "empty": create_empty,
}


def get_mock_profile(name: str) -> NameSource | None:
    """Get a mock name source by profile name."""
    factory = MOCK_PROFILES.get(name)
    if factory:
        return factory()
    return None


def list_mock_profiles() -> list[str]:
    """List available mock profile names."""
    return list(MOCK_PROFILES.keys())
