"""Domain model for the feed/catalog reconciliation."""

from __future__ import annotations

from .catalog import (
    EXTERNAL_ID_KEY,
    FEED_ORIGIN_KEY,
    FLAG_VALUE,
    NEW_FROM_FEED_TAG,
    NOT_IN_FEED_KEY,
    NOT_IN_FEED_TAG,
    PRODUCT_TAG_TAXONOMY,
    AssetId,
    CatalogEntry,
    EntryChanges,
    EntryDraft,
    EntryId,
    new_entry_id,
    utcnow,
)
from .enums import StockStatus, TriggerSource, Visibility
from .feed import ADDITIONAL_SLOT_PREFIX, PRIMARY_SLOT, FeedItem, ImageRef, StockMarker

__all__ = [
    "ADDITIONAL_SLOT_PREFIX",
    "EXTERNAL_ID_KEY",
    "FEED_ORIGIN_KEY",
    "FLAG_VALUE",
    "NEW_FROM_FEED_TAG",
    "NOT_IN_FEED_KEY",
    "NOT_IN_FEED_TAG",
    "PRIMARY_SLOT",
    "PRODUCT_TAG_TAXONOMY",
    "AssetId",
    "CatalogEntry",
    "EntryChanges",
    "EntryDraft",
    "EntryId",
    "FeedItem",
    "ImageRef",
    "StockMarker",
    "StockStatus",
    "TriggerSource",
    "Visibility",
    "new_entry_id",
    "utcnow",
]
