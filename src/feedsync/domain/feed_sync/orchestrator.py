"""Drive one full feed synchronisation run."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import uuid4

from feedsync.domain.feed_sync.errors import FeedFetchError, FeedParseError, SyncInProgressError
from feedsync.domain.feed_sync.journal import SyncJournal
from feedsync.domain.feed_sync.policy import ReconcilePolicy
from feedsync.domain.feed_sync.reconcile import ItemReconciler
from feedsync.domain.feed_sync.report import ItemOutcome, RunReport
from feedsync.domain.feed_sync.sweep import CatalogSweep, SweepOutcome
from feedsync.domain.model import TriggerSource

if TYPE_CHECKING:
    from feedsync.domain.model import FeedItem
    from feedsync.domain.ports.fetching import FeedSource
    from feedsync.domain.ports.locking import RunLock
    from feedsync.domain.ports.media import ImageSideloader
    from feedsync.domain.ports.oplog import OperationLog
    from feedsync.domain.ports.unit_of_work import CatalogUnitOfWork

DEFAULT_LOCK_TTL = timedelta(hours=1)

type CatalogUnitOfWorkFactory = Callable[[], CatalogUnitOfWork]


@dataclass(slots=True)
class FeedSyncService:
    """Fetch, parse, reconcile every item, then sweep.

    Fetch and parse failures abort the run before any catalog access, so a broken or
    partial document can never cause entries to be swept.
    """

    source: FeedSource
    unit_of_work_factory: CatalogUnitOfWorkFactory
    sideload: ImageSideloader
    oplog: OperationLog | None = None
    run_lock: RunLock | None = None
    policy: ReconcilePolicy = field(default_factory=ReconcilePolicy)
    lock_ttl: timedelta = DEFAULT_LOCK_TTL

    def run_sync(
        self,
        *,
        dry_run: bool = False,
        source: TriggerSource | str = TriggerSource.MANUAL,
    ) -> RunReport:
        trigger = TriggerSource(source)
        report = RunReport(source=trigger, dry_run=dry_run)
        journal = SyncJournal(oplog=self.oplog, dry_run=dry_run)

        holder = f"{trigger.value}-{uuid4().hex}"
        if self.run_lock is not None and not self.run_lock.acquire(holder, ttl=self.lock_ttl):
            error = SyncInProgressError("Another feed sync run is in progress")
            journal.error("%s", error)
            report.abort(str(error))
            journal.flush()
            return report.finish()

        try:
            journal.info("Starting feed sync (source=%s)", trigger.value)
            items = self._load_items(journal, report)
            if items is not None:
                self._reconcile(items, journal, report, dry_run=dry_run)
                journal.info("%s", report.summary())
        finally:
            journal.flush()
            if self.run_lock is not None:
                self.run_lock.release(holder)

        return report.finish()

    def _load_items(self, journal: SyncJournal, report: RunReport) -> list[FeedItem] | None:
        try:
            body = self.source.fetch()
        except FeedFetchError as exc:
            journal.error("Failed to fetch XML feed: %s", exc)
            report.abort(f"Failed to fetch XML feed: {exc}")
            return None

        try:
            items = self.source.parse(body)
        except FeedParseError as exc:
            journal.error("Failed to parse XML feed: %s", exc)
            report.abort(f"Failed to parse XML feed: {exc}")
            return None

        journal.info("Feed contains %s products", len(items))
        return items

    def _reconcile(
        self,
        items: list[FeedItem],
        journal: SyncJournal,
        report: RunReport,
        *,
        dry_run: bool,
    ) -> None:
        seen: set[str] = set()

        with self.unit_of_work_factory() as uow:
            catalog = uow.repositories.catalog

            def checkpoint(*, failed: bool) -> None:
                if not dry_run:
                    if failed:
                        uow.rollback()
                    else:
                        uow.commit()
                journal.flush()

            reconciler = ItemReconciler(
                catalog=catalog,
                sideload=self.sideload,
                journal=journal,
                policy=self.policy,
                dry_run=dry_run,
            )
            for item in items:
                result = reconciler.reconcile(item)
                report.record(result.outcome)
                if result.sku is not None:
                    seen.add(result.sku)
                checkpoint(failed=result.outcome is ItemOutcome.ERROR)

            sweep = CatalogSweep(
                catalog=catalog,
                journal=journal,
                policy=self.policy,
                dry_run=dry_run,
            )
            sweep.run(
                frozenset(seen),
                report,
                checkpoint=lambda outcome: checkpoint(failed=outcome is SweepOutcome.ERROR),
            )
