"""Per-item reconciliation: decide create/update/skip and apply it to the catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from feedsync.domain.feed_sync.errors import CatalogWriteError
from feedsync.domain.feed_sync.images import attach_images, resolve_image_urls
from feedsync.domain.feed_sync.normalize import (
    normalize_price,
    resolve_stock,
    sanitize_description,
)
from feedsync.domain.feed_sync.policy import ReconcilePolicy
from feedsync.domain.feed_sync.report import ItemOutcome
from feedsync.domain.model import (
    EXTERNAL_ID_KEY,
    FEED_ORIGIN_KEY,
    FLAG_VALUE,
    NEW_FROM_FEED_TAG,
    PRODUCT_TAG_TAXONOMY,
    EntryChanges,
    EntryDraft,
    StockStatus,
)

if TYPE_CHECKING:
    from feedsync.domain.feed_sync.journal import SyncJournal
    from feedsync.domain.model import EntryId, FeedItem
    from feedsync.domain.ports.catalog import CatalogStore
    from feedsync.domain.ports.media import ImageSideloader


@dataclass(slots=True, kw_only=True)
class ItemResult:
    outcome: ItemOutcome
    sku: str | None = None
    entry_id: EntryId | None = None
    reason: str | None = None


@dataclass(slots=True)
class ItemReconciler:
    """Apply one feed item to the catalog.

    Identity is the SKU, which always equals the feed's external id. In dry-run mode
    the decision path is identical but nothing is written and no image is fetched.
    """

    catalog: CatalogStore
    sideload: ImageSideloader
    journal: SyncJournal
    policy: ReconcilePolicy = field(default_factory=ReconcilePolicy)
    dry_run: bool = False

    def reconcile(self, item: FeedItem) -> ItemResult:
        sku = item.external_id.strip()
        if not sku:
            self.journal.warning("Skipping product with missing external ID")
            return ItemResult(outcome=ItemOutcome.SKIPPED, reason="missing external id")

        existing_id = self.catalog.find_by_sku(sku)
        if existing_id is None:
            return self._create(sku, item)
        return self._update(sku, existing_id, item)

    def _create(self, sku: str, item: FeedItem) -> ItemResult:
        self.journal.info("Creating product for SKU %s", sku)
        if self.dry_run:
            return ItemResult(outcome=ItemOutcome.SKIPPED, sku=sku, reason="dry run")

        draft = EntryDraft(
            sku=sku,
            name=item.name.strip(),
            description=sanitize_description(item.description_raw),
            price=normalize_price(item.price_raw),
            stock_status=StockStatus.from_flag(resolve_stock(item.stock_marker)),
            brand=item.brand,
        )
        try:
            entry_id = self.catalog.create(draft)
        except CatalogWriteError as exc:
            self.journal.error("Failed to create product for SKU %s: %s", sku, exc)
            return ItemResult(outcome=ItemOutcome.ERROR, sku=sku, reason=str(exc))

        entry = self.catalog.load(entry_id)
        if entry is None:
            self.journal.error("Failed to load created product for SKU %s", sku)
            return ItemResult(
                outcome=ItemOutcome.ERROR,
                sku=sku,
                entry_id=entry_id,
                reason="created entry could not be loaded",
            )

        try:
            self._attach_images(entry.id, sku, item)
            self._mark_feed_origin(entry.id, sku)
            self.catalog.tag(entry.id, PRODUCT_TAG_TAXONOMY, NEW_FROM_FEED_TAG)
        except CatalogWriteError as exc:
            self.journal.error("Failed to finish product for SKU %s: %s", sku, exc)
            return ItemResult(
                outcome=ItemOutcome.ERROR, sku=sku, entry_id=entry.id, reason=str(exc)
            )

        return ItemResult(outcome=ItemOutcome.CREATED, sku=sku, entry_id=entry.id)

    def _update(self, sku: str, entry_id: EntryId, item: FeedItem) -> ItemResult:
        entry = self.catalog.load(entry_id)
        if entry is None:
            self.journal.error("Could not load product with ID %s for SKU %s", entry_id, sku)
            return ItemResult(
                outcome=ItemOutcome.ERROR,
                sku=sku,
                entry_id=entry_id,
                reason="matched entry could not be loaded",
            )

        self.journal.info("Updating product for SKU %s", sku)
        if self.dry_run:
            return ItemResult(outcome=ItemOutcome.UPDATED, sku=sku, entry_id=entry.id)

        changes = EntryChanges(
            manage_stock=False,
            stock_status=StockStatus.from_flag(resolve_stock(item.stock_marker)),
        )
        if self.policy.overwrite_content_on_update:
            changes.name = item.name.strip()
            changes.description = sanitize_description(item.description_raw)
            changes.price = normalize_price(item.price_raw)

        try:
            self.catalog.update(entry.id, changes)
            self._mark_feed_origin(entry.id, sku)
        except CatalogWriteError as exc:
            self.journal.error("Failed to update product for SKU %s: %s", sku, exc)
            return ItemResult(
                outcome=ItemOutcome.ERROR, sku=sku, entry_id=entry.id, reason=str(exc)
            )

        return ItemResult(outcome=ItemOutcome.UPDATED, sku=sku, entry_id=entry.id)

    def _attach_images(self, entry_id: EntryId, sku: str, item: FeedItem) -> None:
        urls = resolve_image_urls(item.image_refs)
        if not urls:
            return

        attachment = attach_images(urls, self.sideload)
        for url in attachment.failed_urls:
            self.journal.warning("Failed to sideload image %s for SKU %s", url, sku)
        if attachment.is_empty:
            return

        self.catalog.update(
            entry_id,
            EntryChanges(
                image_id=attachment.image_id,
                gallery_image_ids=attachment.gallery_ids or None,
            ),
        )

    def _mark_feed_origin(self, entry_id: EntryId, sku: str) -> None:
        self.catalog.set_metadata(entry_id, FEED_ORIGIN_KEY, FLAG_VALUE)
        self.catalog.set_metadata(entry_id, EXTERNAL_ID_KEY, sku)
