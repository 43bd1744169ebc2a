"""Protocols for the collaborators the navigation tree depends on.

The tree never talks to a database directly. It asks a name source,
which is either a metadata catalog that filters and pages by itself, or
a plain enumerator whose output is filtered and paged by the caller.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqlnav.domains.navigation.domain.listing_request import ListingRequest


@runtime_checkable
class MetadataCatalog(Protocol):
    """A source that answers filtered, paginated name queries itself."""

    def list_names(self, request: ListingRequest) -> list[str]:
        """List names of ``request.item_type`` inside ``request.scope``.

        Args:
            request: Category, scope, name filter and window. Grouping
                separators are handled by the caller and may be ignored.

        Returns:
            Matching names ordered by name, windowed by offset and limit.

        Raises:
            DataUnavailableError: If the backend cannot answer.
        """
        ...

    def count_names(self, request: ListingRequest) -> int:
        """Count names matching the request, ignoring its window.

        Raises:
            DataUnavailableError: If the backend cannot answer.
        """
        ...


@runtime_checkable
class ObjectEnumerator(Protocol):
    """A source that can only enumerate every name of a category."""

    def enumerate_names(self, item_type: str, scope: tuple[str, ...]) -> Iterable[str]:
        """Yield every name of ``item_type`` inside ``scope``, unfiltered.

        Raises:
            DataUnavailableError: If the backend cannot answer.
        """
        ...


NameSource = MetadataCatalog | ObjectEnumerator
