"""Catalog-side entities owned by the catalog store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Final
from uuid import UUID, uuid4

from feedsync.domain.model.enums import StockStatus, Visibility

type EntryId = UUID
type AssetId = str

# Persistent metadata keys and tags written by the sync engine.
FEED_ORIGIN_KEY: Final[str] = "_from_xml_feed"
EXTERNAL_ID_KEY: Final[str] = "_external_id"
NOT_IN_FEED_KEY: Final[str] = "_not_in_xml_feed"
FLAG_VALUE: Final[str] = "yes"

PRODUCT_TAG_TAXONOMY: Final[str] = "product_tag"
NEW_FROM_FEED_TAG: Final[str] = "new-from-xml-feed"
NOT_IN_FEED_TAG: Final[str] = "not-in-xml-feed"


def new_entry_id() -> EntryId:
    return uuid4()


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class CatalogEntry:
    """Snapshot of a catalog entry as returned by ``CatalogStore.load``."""

    id: EntryId = field(default_factory=new_entry_id)
    sku: str
    name: str = ""
    description: str = ""
    price: Decimal = field(default_factory=Decimal)
    stock_status: StockStatus = StockStatus.OUT_OF_STOCK
    manage_stock: bool = False
    visibility: Visibility = Visibility.DRAFT
    brand: str | None = None
    image_id: AssetId | None = None
    gallery_image_ids: list[AssetId] = field(default_factory=list[AssetId])
    metadata: dict[str, str] = field(default_factory=dict[str, str])
    tags: set[tuple[str, str]] = field(default_factory=set[tuple[str, str]])
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_feed_origin(self) -> bool:
        return self.metadata.get(FEED_ORIGIN_KEY) == FLAG_VALUE

    @property
    def is_flagged_missing(self) -> bool:
        return self.metadata.get(NOT_IN_FEED_KEY) == FLAG_VALUE

    @property
    def external_id(self) -> str | None:
        return self.metadata.get(EXTERNAL_ID_KEY)

    def has_tag(self, taxonomy: str, value: str) -> bool:
        return (taxonomy, value) in self.tags


@dataclass(slots=True, kw_only=True)
class EntryDraft:
    """Initial field values for a catalog entry about to be created."""

    sku: str
    name: str
    description: str
    price: Decimal
    stock_status: StockStatus
    visibility: Visibility = Visibility.DRAFT
    manage_stock: bool = False
    brand: str | None = None


@dataclass(slots=True, kw_only=True)
class EntryChanges:
    """Partial update; ``None`` leaves the stored value untouched."""

    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    stock_status: StockStatus | None = None
    manage_stock: bool | None = None
    visibility: Visibility | None = None
    image_id: AssetId | None = None
    gallery_image_ids: list[AssetId] | None = None

    def as_values(self) -> dict[str, object]:
        values: dict[str, object] = {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "stock_status": self.stock_status,
            "manage_stock": self.manage_stock,
            "visibility": self.visibility,
            "image_id": self.image_id,
            "gallery_image_ids": self.gallery_image_ids,
        }
        return {key: value for key, value in values.items() if value is not None}

    def is_empty(self) -> bool:
        return not self.as_values()
