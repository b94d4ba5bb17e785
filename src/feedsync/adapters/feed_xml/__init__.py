"""Public interface for the XML feed adapter."""

from __future__ import annotations

from .client import HttpFeedSource
from .parser import parse_feed_document
from .schema import FeedItemPayload, StockMarkerPayload
from .translator import to_feed_item

__all__ = [
    "FeedItemPayload",
    "HttpFeedSource",
    "StockMarkerPayload",
    "parse_feed_document",
    "to_feed_item",
]
