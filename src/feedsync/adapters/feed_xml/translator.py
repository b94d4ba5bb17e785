"""Translate feed payloads into domain feed items."""

from __future__ import annotations

from typing import TYPE_CHECKING

from feedsync.domain.feed_sync.images import collect_image_refs
from feedsync.domain.model import FeedItem, StockMarker

if TYPE_CHECKING:
    from .schema import FeedItemPayload


def to_feed_item(payload: FeedItemPayload, *, base_url: str | None = None) -> FeedItem:
    stock_marker = (
        StockMarker(presence_id=payload.stock.presence_id, text=payload.stock.text)
        if payload.stock is not None
        else None
    )
    return FeedItem(
        external_id=payload.external_id,
        name=payload.name,
        description_raw=payload.description,
        price_raw=payload.price,
        stock_marker=stock_marker,
        brand=payload.brand,
        image_refs=collect_image_refs(
            payload.primary_image,
            payload.extra_fields(),
            base_url=base_url,
        ),
    )
