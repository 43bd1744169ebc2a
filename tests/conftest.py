"""Pytest fixtures for sqlnav tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

_TEST_CONFIG_DIR = Path(tempfile.mkdtemp(prefix="sqlnav-test-config-"))
os.environ.setdefault("SQLNAV_CONFIG_DIR", str(_TEST_CONFIG_DIR))
os.environ.pop("SQLNAV_SETTINGS_PATH", None)

SHOP = {
    "shop": {
        "tables": {
            "users": {"columns": ["id", "name", "email"], "indexes": ["users_email_idx"]},
            "orders": {"columns": ["id", "user_id", "total"], "indexes": []},
            "audit__logins": {"columns": ["id", "at"]},
            "audit__payments": {"columns": ["id", "amount"]},
        },
        "views": {"recent_orders": {"columns": ["id"]}},
    },
    "shop_archive": {"tables": {"orders": {"columns": ["id"]}}},
    "shop_staging": {"tables": {"orders": {"columns": ["id"]}}},
    "analytics": {"tables": {"events": {"columns": ["id", "kind"]}}},
}


@pytest.fixture
def shop_hierarchy() -> dict:
    return SHOP
