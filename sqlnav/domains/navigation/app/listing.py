"""Listing service: turns listing requests into names and counts.

Two source modes are supported:

- a :class:`MetadataCatalog` filters and pages in the backend;
- an :class:`ObjectEnumerator` only enumerates, so filtering and paging
  happen here.

Under grouping, the paged unit is the first-level prefix. Both modes go
through :func:`paginate_prefixes`: the catalog with ordered prefixes, the
enumerator with prefixes in encounter order.

Backend failures never reach the caller: a :class:`DataUnavailableError`
is logged and turned into an empty listing or a zero count, which the UI
reads as "nothing to expand".
"""

from __future__ import annotations

import itertools
import sys
from collections.abc import Iterator
from dataclasses import replace

from loguru import logger

from sqlnav.config import NavigationConfig
from sqlnav.db.exceptions import DataUnavailableError
from sqlnav.domains.navigation.domain.grouping import (
    PrefixPage,
    count_prefixes,
    paginate_prefixes,
)
from sqlnav.domains.navigation.domain.listing_request import ListingRequest, NameFilter
from sqlnav.shared.core.protocols import MetadataCatalog, NameSource


class ListingService:
    """Answers listing requests from a name source under a configuration."""

    def __init__(self, source: NameSource, config: NavigationConfig | None = None):
        self._source = source
        self._config = config or NavigationConfig()

    @property
    def config(self) -> NavigationConfig:
        return self._config

    @property
    def source(self) -> NameSource:
        return self._source

    @property
    def supports_catalog(self) -> bool:
        return isinstance(self._source, MetadataCatalog)

    def with_config(self, config: NavigationConfig) -> ListingService:
        return ListingService(self._source, config)

    def list_names(self, request: ListingRequest) -> list[str]:
        """Names of one page; empty when the source is unavailable."""
        logger.debug(
            "list {} in {} offset={} limit={} grouped={}",
            request.item_type,
            request.scope,
            request.offset,
            request.limit,
            request.grouped,
        )
        try:
            if request.grouped:
                return list(self._prefix_page(request).names)
            return self._list_page(request)
        except DataUnavailableError as error:
            logger.warning("Listing degraded to empty: {}", error)
            return []

    def count_names(self, request: ListingRequest) -> int:
        """Number of matching names, or of distinct prefixes under grouping."""
        try:
            if request.grouped:
                return count_prefixes(self._all_names(request), request.separators)
            if self.supports_catalog:
                return int(self._source.count_names(request))  # type: ignore[union-attr]
            return sum(1 for _ in self._filtered(request, request.name_filter))
        except DataUnavailableError as error:
            logger.warning("Presence degraded to zero: {}", error)
            return 0

    def prefix_page(self, request: ListingRequest) -> PrefixPage:
        """The page of prefixes for a grouped request and their expansion."""
        try:
            return self._prefix_page(request)
        except DataUnavailableError as error:
            logger.warning("Prefix listing degraded to empty: {}", error)
            return PrefixPage(prefixes=())

    def _list_page(self, request: ListingRequest) -> list[str]:
        if self.supports_catalog:
            return list(self._source.list_names(request))  # type: ignore[union-attr]
        stop = None if request.limit is None else request.offset + request.limit
        return list(itertools.islice(self._filtered(request, request.name_filter), request.offset, stop))

    def _prefix_page(self, request: ListingRequest) -> PrefixPage:
        page_size = request.limit if request.limit is not None else sys.maxsize
        broad_filter = request.name_filter.without_search()
        if self.supports_catalog:
            names = self._all_names(request)
            universe = names
            if request.name_filter.search:
                universe = self._all_names(replace(request, name_filter=broad_filter))
            return paginate_prefixes(
                names,
                request.separators,
                request.offset,
                page_size,
                ordered=True,
                expand_from=universe,
            )
        return paginate_prefixes(
            self._filtered(request, request.name_filter),
            request.separators,
            request.offset,
            page_size,
            expand_from=self._filtered(request, broad_filter),
        )

    def _all_names(self, request: ListingRequest) -> list[str]:
        if self.supports_catalog:
            return list(self._source.list_names(request.unbounded()))  # type: ignore[union-attr]
        return list(self._filtered(request, request.name_filter))

    def _filtered(self, request: ListingRequest, name_filter: NameFilter) -> Iterator[str]:
        names = self._source.enumerate_names(request.item_type, request.scope)  # type: ignore[union-attr]
        return (name for name in names if name_filter.matches(name))
