"""Port describing the catalog store the engine reconciles against."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from feedsync.domain.model import CatalogEntry, EntryChanges, EntryDraft, EntryId


@runtime_checkable
class CatalogStore(Protocol):
    """Key-value-by-identifier catalog.

    Write methods raise ``CatalogWriteError`` when the store rejects the change.
    """

    def find_by_sku(self, sku: str) -> EntryId | None: ...

    def load(self, entry_id: EntryId) -> CatalogEntry | None: ...

    def create(self, draft: EntryDraft) -> EntryId: ...

    def update(self, entry_id: EntryId, changes: EntryChanges) -> None: ...

    def delete(self, entry_id: EntryId) -> None: ...

    def set_metadata(self, entry_id: EntryId, key: str, value: str) -> None: ...

    def delete_metadata(self, entry_id: EntryId, key: str) -> None: ...

    def tag(self, entry_id: EntryId, taxonomy: str, value: str) -> None: ...

    def untag(self, entry_id: EntryId, taxonomy: str, value: str) -> None: ...

    def query_by_flag(
        self,
        key: str,
        value: str,
        *,
        page_size: int = 200,
    ) -> Iterator[EntryId]:
        """Yield ids of entries whose metadata ``key`` equals ``value``, page by page."""
        ...
