"""Post-pass over feed-origin catalog entries that vanished from the feed."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from feedsync.domain.feed_sync.errors import CatalogWriteError
from feedsync.domain.feed_sync.policy import ReconcilePolicy, SweepPolicy
from feedsync.domain.model import (
    FEED_ORIGIN_KEY,
    FLAG_VALUE,
    NOT_IN_FEED_KEY,
    NOT_IN_FEED_TAG,
    PRODUCT_TAG_TAXONOMY,
    EntryChanges,
    Visibility,
)

if TYPE_CHECKING:
    from collections.abc import Set

    from feedsync.domain.feed_sync.journal import SyncJournal
    from feedsync.domain.feed_sync.report import RunReport
    from feedsync.domain.model import CatalogEntry, EntryId
    from feedsync.domain.ports.catalog import CatalogStore


class SweepOutcome(StrEnum):
    KEPT = "kept"
    IGNORED = "ignored"
    SKIPPED = "skipped"
    FLAGGED = "flagged"
    RESTORED = "restored"
    DELETED = "deleted"
    ERROR = "error"


type SweepCheckpoint = Callable[[SweepOutcome], None]


@dataclass(slots=True)
class CatalogSweep:
    """Compare feed-origin entries against the SKUs seen during this run.

    Must only run once the seen set is complete. Entries without the feed-origin
    flag are never touched, even if a store returns them.
    """

    catalog: CatalogStore
    journal: SyncJournal
    policy: ReconcilePolicy = field(default_factory=ReconcilePolicy)
    dry_run: bool = False

    def run(
        self,
        seen: Set[str],
        report: RunReport,
        *,
        checkpoint: SweepCheckpoint | None = None,
    ) -> None:
        entry_ids = self.catalog.query_by_flag(
            FEED_ORIGIN_KEY,
            FLAG_VALUE,
            page_size=self.policy.sweep_page_size,
        )
        for entry_id in entry_ids:
            outcome = self.process(entry_id, seen)
            _count(report, outcome)
            if checkpoint is not None:
                checkpoint(outcome)

    def process(self, entry_id: EntryId, seen: Set[str]) -> SweepOutcome:
        entry = self.catalog.load(entry_id)
        if entry is None or not entry.is_feed_origin:
            return SweepOutcome.IGNORED

        try:
            if entry.sku in seen:
                return self._handle_present(entry)
            return self._handle_missing(entry)
        except CatalogWriteError as exc:
            self.journal.error(
                "Failed to sweep product ID %s (SKU %s): %s", entry.id, entry.sku, exc
            )
            return SweepOutcome.ERROR

    def _handle_missing(self, entry: CatalogEntry) -> SweepOutcome:
        if self.policy.sweep is SweepPolicy.DELETE:
            self.journal.info(
                "Deleting product ID %s (SKU %s) missing from feed", entry.id, entry.sku
            )
            if self.dry_run:
                return SweepOutcome.SKIPPED
            self.catalog.delete(entry.id)
            return SweepOutcome.DELETED

        self.journal.info(
            "Marking product ID %s (SKU %s) as missing from feed", entry.id, entry.sku
        )
        if self.dry_run:
            return SweepOutcome.SKIPPED
        return self._mark_missing(entry)

    def _mark_missing(self, entry: CatalogEntry) -> SweepOutcome:
        # Re-assert every marker; an entry republished while still missing is demoted again.
        changed = False
        if entry.visibility is not Visibility.DRAFT:
            self.catalog.update(entry.id, EntryChanges(visibility=Visibility.DRAFT))
            changed = True
        if not entry.has_tag(PRODUCT_TAG_TAXONOMY, NOT_IN_FEED_TAG):
            self.catalog.tag(entry.id, PRODUCT_TAG_TAXONOMY, NOT_IN_FEED_TAG)
            changed = True
        if not entry.is_flagged_missing:
            self.catalog.set_metadata(entry.id, NOT_IN_FEED_KEY, FLAG_VALUE)
            changed = True
        return SweepOutcome.FLAGGED if changed else SweepOutcome.KEPT

    def _handle_present(self, entry: CatalogEntry) -> SweepOutcome:
        if self.policy.sweep is SweepPolicy.DELETE:
            return SweepOutcome.KEPT
        if not entry.is_flagged_missing and not entry.has_tag(
            PRODUCT_TAG_TAXONOMY, NOT_IN_FEED_TAG
        ):
            return SweepOutcome.KEPT

        self.journal.info(
            "Product ID %s (SKU %s) present in feed; removing missing markers",
            entry.id,
            entry.sku,
        )
        if self.dry_run:
            return SweepOutcome.KEPT
        self.catalog.delete_metadata(entry.id, NOT_IN_FEED_KEY)
        self.catalog.untag(entry.id, PRODUCT_TAG_TAXONOMY, NOT_IN_FEED_TAG)
        return SweepOutcome.RESTORED


def _count(report: RunReport, outcome: SweepOutcome) -> None:
    match outcome:
        case SweepOutcome.SKIPPED:
            report.skipped += 1
        case SweepOutcome.FLAGGED:
            report.flagged += 1
        case SweepOutcome.RESTORED:
            report.restored += 1
        case SweepOutcome.DELETED:
            report.deleted += 1
        case SweepOutcome.ERROR:
            report.errors += 1
        case SweepOutcome.KEPT | SweepOutcome.IGNORED:
            pass
