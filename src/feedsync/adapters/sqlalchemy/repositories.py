"""Catalog store backed by SQLAlchemy Core statements on a session."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from feedsync.adapters.sqlalchemy.mappings import (
    catalog_entry_meta_table,
    catalog_entry_table,
    catalog_entry_tag_table,
)
from feedsync.domain.feed_sync.errors import CatalogWriteError
from feedsync.domain.model import CatalogEntry, new_entry_id, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.orm import Session
    from sqlalchemy.sql import Executable

    from feedsync.domain.model import EntryChanges, EntryDraft, EntryId
    from feedsync.domain.ports.catalog import CatalogStore


class SqlAlchemyCatalogStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    # Reads -----------------------------------------------------------------

    def find_by_sku(self, sku: str) -> EntryId | None:
        stmt = select(catalog_entry_table.c.id).where(catalog_entry_table.c.sku == sku)
        return self.session.execute(stmt).scalar_one_or_none()

    def load(self, entry_id: EntryId) -> CatalogEntry | None:
        row = self.session.execute(
            select(catalog_entry_table).where(catalog_entry_table.c.id == entry_id)
        ).one_or_none()
        if row is None:
            return None

        metadata_rows = self.session.execute(
            select(catalog_entry_meta_table.c.key, catalog_entry_meta_table.c.value).where(
                catalog_entry_meta_table.c.entry_id == entry_id
            )
        ).all()
        tag_rows = self.session.execute(
            select(catalog_entry_tag_table.c.taxonomy, catalog_entry_tag_table.c.value).where(
                catalog_entry_tag_table.c.entry_id == entry_id
            )
        ).all()

        return CatalogEntry(
            id=row.id,
            sku=row.sku,
            name=row.name,
            description=row.description,
            price=row.price,
            stock_status=row.stock_status,
            manage_stock=row.manage_stock,
            visibility=row.visibility,
            brand=row.brand,
            image_id=row.image_id,
            gallery_image_ids=list(row.gallery_image_ids),
            metadata={key: value for key, value in metadata_rows},
            tags={(taxonomy, value) for taxonomy, value in tag_rows},
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def query_by_flag(
        self,
        key: str,
        value: str,
        *,
        page_size: int = 200,
    ) -> Iterator[EntryId]:
        """Yield matching entry ids ordered by id, one keyset page at a time.

        Each page is fetched fresh so entries deleted while iterating are tolerated.
        """

        if page_size < 1:
            raise ValueError("page_size must be positive")
        last_seen: EntryId | None = None
        while True:
            stmt = (
                select(catalog_entry_meta_table.c.entry_id)
                .where(catalog_entry_meta_table.c.key == key)
                .where(catalog_entry_meta_table.c.value == value)
                .order_by(catalog_entry_meta_table.c.entry_id)
                .limit(page_size)
            )
            if last_seen is not None:
                stmt = stmt.where(catalog_entry_meta_table.c.entry_id > last_seen)
            page = list(self.session.execute(stmt).scalars())
            yield from page
            if len(page) < page_size:
                return
            last_seen = page[-1]

    # Writes ----------------------------------------------------------------

    def create(self, draft: EntryDraft) -> EntryId:
        entry_id = new_entry_id()
        now = utcnow()
        self._write(
            insert(catalog_entry_table).values(
                id=entry_id,
                sku=draft.sku,
                name=draft.name,
                description=draft.description,
                price=draft.price,
                stock_status=draft.stock_status,
                manage_stock=draft.manage_stock,
                visibility=draft.visibility,
                brand=draft.brand,
                image_id=None,
                gallery_image_ids=[],
                created_at=now,
                updated_at=now,
            ),
            f"create entry for SKU {draft.sku}",
        )
        return entry_id

    def update(self, entry_id: EntryId, changes: EntryChanges) -> None:
        values = changes.as_values()
        if not values:
            return
        self._write(
            update(catalog_entry_table)
            .where(catalog_entry_table.c.id == entry_id)
            .values(**values, updated_at=utcnow()),
            f"update entry {entry_id}",
        )

    def delete(self, entry_id: EntryId) -> None:
        # Child rows are removed explicitly; SQLite does not enforce ON DELETE by default.
        self._write(
            delete(catalog_entry_meta_table).where(catalog_entry_meta_table.c.entry_id == entry_id),
            f"delete metadata of entry {entry_id}",
        )
        self._write(
            delete(catalog_entry_tag_table).where(catalog_entry_tag_table.c.entry_id == entry_id),
            f"delete tags of entry {entry_id}",
        )
        self._write(
            delete(catalog_entry_table).where(catalog_entry_table.c.id == entry_id),
            f"delete entry {entry_id}",
        )

    def set_metadata(self, entry_id: EntryId, key: str, value: str) -> None:
        self.delete_metadata(entry_id, key)
        self._write(
            insert(catalog_entry_meta_table).values(entry_id=entry_id, key=key, value=value),
            f"set metadata {key} on entry {entry_id}",
        )

    def delete_metadata(self, entry_id: EntryId, key: str) -> None:
        self._write(
            delete(catalog_entry_meta_table)
            .where(catalog_entry_meta_table.c.entry_id == entry_id)
            .where(catalog_entry_meta_table.c.key == key),
            f"delete metadata {key} on entry {entry_id}",
        )

    def tag(self, entry_id: EntryId, taxonomy: str, value: str) -> None:
        exists = self.session.execute(
            select(catalog_entry_tag_table.c.entry_id)
            .where(catalog_entry_tag_table.c.entry_id == entry_id)
            .where(catalog_entry_tag_table.c.taxonomy == taxonomy)
            .where(catalog_entry_tag_table.c.value == value)
        ).first()
        if exists is not None:
            return
        self._write(
            insert(catalog_entry_tag_table).values(
                entry_id=entry_id, taxonomy=taxonomy, value=value
            ),
            f"tag entry {entry_id} with {taxonomy}:{value}",
        )

    def untag(self, entry_id: EntryId, taxonomy: str, value: str) -> None:
        self._write(
            delete(catalog_entry_tag_table)
            .where(catalog_entry_tag_table.c.entry_id == entry_id)
            .where(catalog_entry_tag_table.c.taxonomy == taxonomy)
            .where(catalog_entry_tag_table.c.value == value),
            f"untag entry {entry_id} from {taxonomy}:{value}",
        )

    def _write(self, stmt: Executable, action: str) -> None:
        try:
            self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise CatalogWriteError(f"Could not {action}: {exc}") from exc


if TYPE_CHECKING:
    from sqlalchemy.orm import Session as _Session

    _store_check: CatalogStore = SqlAlchemyCatalogStore(_Session())
