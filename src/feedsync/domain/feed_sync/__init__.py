"""Feed-to-catalog reconciliation engine."""

from __future__ import annotations

from .errors import (
    CatalogWriteError,
    FeedFetchError,
    FeedParseError,
    FeedSyncError,
    SideloadError,
    SyncInProgressError,
)
from .images import ImageAttachment, attach_images, collect_image_refs, resolve_image_urls
from .journal import SyncJournal
from .normalize import normalize_price, resolve_stock, sanitize_description
from .orchestrator import FeedSyncService
from .policy import ReconcilePolicy, SweepPolicy
from .reconcile import ItemReconciler, ItemResult
from .report import ItemOutcome, RunReport
from .sweep import CatalogSweep, SweepOutcome

__all__ = [
    "CatalogSweep",
    "CatalogWriteError",
    "FeedFetchError",
    "FeedParseError",
    "FeedSyncError",
    "FeedSyncService",
    "ImageAttachment",
    "ItemOutcome",
    "ItemReconciler",
    "ItemResult",
    "ReconcilePolicy",
    "RunReport",
    "SideloadError",
    "SweepOutcome",
    "SweepPolicy",
    "SyncInProgressError",
    "SyncJournal",
    "attach_images",
    "collect_image_refs",
    "normalize_price",
    "resolve_image_urls",
    "resolve_stock",
    "sanitize_description",
]
