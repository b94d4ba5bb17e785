from __future__ import annotations

import copy

import pytest

from feedsync.domain.feed_sync import FeedSyncService, ReconcilePolicy, SweepPolicy
from feedsync.domain.model import NOT_IN_FEED_KEY, TriggerSource
from tests.support.catalog import (
    FakeCatalogStore,
    FakeUnitOfWork,
    InMemoryOperationLog,
    InMemoryRunLock,
)
from tests.support.feed import FakeFeedSource, FakeSideloader, make_feed_item


def _service(
    fake_uow: FakeUnitOfWork,
    source: FakeFeedSource,
    *,
    sideloader: FakeSideloader | None = None,
    oplog: InMemoryOperationLog | None = None,
    run_lock: InMemoryRunLock | None = None,
    policy: ReconcilePolicy | None = None,
) -> FeedSyncService:
    return FeedSyncService(
        source=source,
        unit_of_work_factory=lambda: fake_uow,
        sideload=sideloader or FakeSideloader(),
        oplog=oplog,
        run_lock=run_lock,
        policy=policy or ReconcilePolicy(),
    )


def test_full_run_creates_updates_and_flags(
    catalog: FakeCatalogStore, fake_uow: FakeUnitOfWork, oplog: InMemoryOperationLog
) -> None:
    catalog.add_entry("OLD")
    catalog.add_entry("KEEP")
    source = FakeFeedSource([make_feed_item("NEW"), make_feed_item("KEEP"), make_feed_item("")])

    report = _service(fake_uow, source, oplog=oplog).run_sync()

    assert report.succeeded
    assert (report.created, report.updated, report.skipped, report.errors) == (1, 1, 1, 0)
    assert report.flagged == 1
    assert report.items_seen == 3
    assert report.finished_at is not None
    old = catalog.by_sku("OLD")
    assert old is not None
    assert old.metadata[NOT_IN_FEED_KEY] == "yes"
    # three items plus three sweep checkpoints
    assert fake_uow.commits == 6
    assert oplog.lines[0] == "Starting feed sync (source=manual)"
    assert oplog.lines[-1] == report.summary()


def test_every_item_is_accounted_for(
    catalog: FakeCatalogStore, fake_uow: FakeUnitOfWork
) -> None:
    catalog.add_entry("EXISTS")
    catalog.fail_skus.add("BROKEN")
    items = [
        make_feed_item("A"),
        make_feed_item("EXISTS"),
        make_feed_item(""),
        make_feed_item("BROKEN"),
    ]

    report = _service(fake_uow, FakeFeedSource(items)).run_sync()

    assert report.created + report.updated + report.skipped + report.errors == len(items)
    assert fake_uow.rollbacks == 1


def test_second_run_on_unchanged_feed_only_updates(
    catalog: FakeCatalogStore, fake_uow: FakeUnitOfWork
) -> None:
    source = FakeFeedSource([make_feed_item("A"), make_feed_item("B")])
    service = _service(fake_uow, source)

    first = service.run_sync()
    second = service.run_sync()

    assert first.created == 2
    assert (second.created, second.updated, second.deleted, second.flagged) == (0, 2, 0, 0)


def test_dry_run_leaves_catalog_identical(
    catalog: FakeCatalogStore, fake_uow: FakeUnitOfWork
) -> None:
    catalog.add_entry("OLD")
    catalog.add_entry("KEEP")
    before = copy.deepcopy(catalog.entries)
    sideloader = FakeSideloader()
    source = FakeFeedSource(
        [make_feed_item("NEW", images=["https://cdn/1.jpg"]), make_feed_item("KEEP")]
    )

    report = _service(fake_uow, source, sideloader=sideloader).run_sync(dry_run=True)

    assert report.dry_run
    assert (report.created, report.updated, report.skipped) == (0, 1, 2)
    assert catalog.writes == []
    assert sideloader.calls == []
    assert fake_uow.commits == 0
    assert fake_uow.rollbacks == 0
    assert {key: vars(entry) for key, entry in catalog.entries.items()} == {
        key: vars(entry) for key, entry in before.items()
    }


def test_item_that_failed_to_load_is_not_swept(
    catalog: FakeCatalogStore, fake_uow: FakeUnitOfWork, monkeypatch: pytest.MonkeyPatch
) -> None:
    entry = catalog.add_entry("FLAKY")
    original_load = catalog.load
    calls = {"count": 0}

    def flaky_load(entry_id: object) -> object:
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return original_load(entry_id)  # type: ignore[arg-type]

    monkeypatch.setattr(catalog, "load", flaky_load)
    policy = ReconcilePolicy(sweep=SweepPolicy.DELETE)

    report = _service(fake_uow, FakeFeedSource([make_feed_item("FLAKY")]), policy=policy).run_sync()

    assert report.errors == 1
    assert report.deleted == 0
    assert entry.id in catalog.entries


@pytest.mark.parametrize(
    ("source", "message"),
    [
        (FakeFeedSource(fetch_error="Unexpected response code: 500"), "Failed to fetch XML feed"),
        (FakeFeedSource(parse_error="No products found in XML feed"), "Failed to parse XML feed"),
    ],
)
def test_fatal_feed_errors_abort_before_catalog_access(
    catalog: FakeCatalogStore,
    fake_uow: FakeUnitOfWork,
    oplog: InMemoryOperationLog,
    source: FakeFeedSource,
    message: str,
) -> None:
    catalog.add_entry("OLD")
    lock = InMemoryRunLock()

    report = _service(fake_uow, source, oplog=oplog, run_lock=lock).run_sync(
        source=TriggerSource.CRON
    )

    assert not report.succeeded
    assert report.fatal_error is not None
    assert report.fatal_error.startswith(message)
    assert report.errors == 1
    assert report.flagged == 0
    assert catalog.writes == []
    assert report.summary().startswith("Feed sync failed: " + message)
    assert any(line.startswith(message) for line in oplog.lines)
    assert lock.holder is None
    assert len(lock.released) == 1


def test_refuses_to_run_while_another_run_holds_the_lock(
    catalog: FakeCatalogStore, fake_uow: FakeUnitOfWork, oplog: InMemoryOperationLog
) -> None:
    source = FakeFeedSource([make_feed_item("A")])
    lock = InMemoryRunLock(held_by="cron-other")

    report = _service(fake_uow, source, oplog=oplog, run_lock=lock).run_sync()

    assert not report.succeeded
    assert report.errors == 1
    assert source.fetch_calls == 0
    assert catalog.entries == {}
    assert lock.holder == "cron-other"
    assert oplog.lines == ["Another feed sync run is in progress"]


def test_trigger_source_accepts_strings(fake_uow: FakeUnitOfWork) -> None:
    report = _service(fake_uow, FakeFeedSource([make_feed_item("A")])).run_sync(source="cron")

    assert report.source is TriggerSource.CRON


def test_dry_run_journal_lines_are_prefixed(
    fake_uow: FakeUnitOfWork, oplog: InMemoryOperationLog
) -> None:
    _service(fake_uow, FakeFeedSource([make_feed_item("A")]), oplog=oplog).run_sync(dry_run=True)

    assert oplog.lines
    assert all(line.startswith("[dry-run] ") for line in oplog.lines)
