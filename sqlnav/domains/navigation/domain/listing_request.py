"""Value types describing a request for child names."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from functools import lru_cache


@lru_cache(maxsize=256)
def like_to_regex(pattern: str) -> re.Pattern[str]:
    r"""Compile a SQL LIKE pattern (``%``, ``_``, ``\`` escapes), case-insensitive."""
    parts: list[str] = []
    escaped = False
    for char in pattern:
        if escaped:
            parts.append(re.escape(char))
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    if escaped:
        parts.append(re.escape("\\"))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def like_matches(pattern: str, name: str) -> bool:
    return like_to_regex(pattern).fullmatch(name) is not None


@dataclass(frozen=True)
class NameFilter:
    """Which names a listing keeps.

    Attributes:
        search: Case-insensitive substring a name must contain.
        hide_pattern: Regular expression; matching names are dropped.
        only_patterns: LIKE patterns; when set, a name must match one.
    """

    search: str = ""
    hide_pattern: str | None = None
    only_patterns: tuple[str, ...] = ()

    def matches(self, name: str) -> bool:
        if self.search and self.search.lower() not in name.lower():
            return False
        if self.hide_pattern and re.search(self.hide_pattern, name, re.IGNORECASE):
            return False
        if self.only_patterns and not any(like_matches(p, name) for p in self.only_patterns):
            return False
        return True

    def without_search(self) -> NameFilter:
        return replace(self, search="")


@dataclass(frozen=True)
class ListingRequest:
    """A bounded, filtered request for the names of one category of children.

    Attributes:
        item_type: Category ("databases", "tables", "views", "columns", "indexes").
        scope: Real names locating the parent object, e.g. ("shop", "orders").
        offset: First item (or first prefix, under grouping) of the page.
        limit: Page length; None for everything.
        name_filter: Filter applied to names.
        separators: Grouping separators; empty when grouping is off.
    """

    item_type: str
    scope: tuple[str, ...] = ()
    offset: int = 0
    limit: int | None = None
    name_filter: NameFilter = NameFilter()
    separators: tuple[str, ...] = ()

    @property
    def grouped(self) -> bool:
        return bool(self.separators)

    def unbounded(self) -> ListingRequest:
        return replace(self, offset=0, limit=None)
