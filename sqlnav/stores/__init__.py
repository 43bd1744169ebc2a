"""Data persistence stores for sqlnav.

- SettingsStore: manages application settings
- ExpansionStateStore: manages expanded tree nodes per server
"""

from .expansion import ExpansionStateStore
from .settings import SettingsStore

__all__ = [
    "ExpansionStateStore",
    "SettingsStore",
]
