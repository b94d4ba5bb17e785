from __future__ import annotations

from collections.abc import Callable  # noqa: TC003

import pytest

from feedsync import app
from feedsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork
from feedsync.config import FeedSyncConfig
from feedsync.domain.feed_sync import ReconcilePolicy, RunReport, SweepPolicy
from feedsync.domain.model import NOT_IN_FEED_KEY, Visibility
from tests.support.feed import FakeFeedSource, FakeSideloader, make_feed_item

CONFIG = FeedSyncConfig(feed_url="https://shop.example.com/feed.xml")

type UowFactory = Callable[[], SqlAlchemyCatalogUnitOfWork]


def _run(
    source: FakeFeedSource,
    *,
    dry_run: bool = False,
    config: FeedSyncConfig = CONFIG,
    sideloader: FakeSideloader | None = None,
) -> RunReport:
    return app.run_sync(
        dry_run=dry_run,
        config=config,
        feed_source=source,
        sideloader=sideloader or FakeSideloader(),
    )


def test_sync_persists_catalog_and_operation_log(sqlite_unit_of_work: UowFactory) -> None:
    sideloader = FakeSideloader()
    source = FakeFeedSource(
        [make_feed_item("A", images=["https://cdn/a.jpg"]), make_feed_item("B")]
    )

    report = _run(source, sideloader=sideloader)

    assert report.succeeded
    assert (report.created, report.updated, report.errors) == (2, 0, 0)
    with sqlite_unit_of_work() as uow:
        entry_id = uow.repositories.catalog.find_by_sku("A")
        assert entry_id is not None
        entry = uow.repositories.catalog.load(entry_id)
    assert entry is not None
    assert entry.is_feed_origin
    assert entry.image_id == FakeSideloader.asset_for("https://cdn/a.jpg")
    lines = [item.line for item in app.read_operation_log()]
    assert lines[0] == "Starting feed sync (source=manual)"
    assert "Creating product for SKU A" in lines
    assert lines[-1] == report.summary()


def test_second_run_is_idempotent_and_sweeps(sqlite_unit_of_work: UowFactory) -> None:
    _run(FakeFeedSource([make_feed_item("A"), make_feed_item("B")]))

    report = _run(FakeFeedSource([make_feed_item("A")]))

    assert (report.created, report.updated, report.flagged, report.deleted) == (0, 1, 1, 0)
    with sqlite_unit_of_work() as uow:
        entry_id = uow.repositories.catalog.find_by_sku("B")
        assert entry_id is not None
        entry = uow.repositories.catalog.load(entry_id)
    assert entry is not None
    assert entry.visibility is Visibility.DRAFT
    assert entry.metadata[NOT_IN_FEED_KEY] == "yes"


def test_delete_policy_mirrors_the_feed(sqlite_unit_of_work: UowFactory) -> None:
    config = FeedSyncConfig(
        feed_url=CONFIG.feed_url,
        policy=ReconcilePolicy(sweep=SweepPolicy.DELETE, sweep_page_size=1),
    )
    _run(FakeFeedSource([make_feed_item("A"), make_feed_item("B"), make_feed_item("C")]))

    report = _run(FakeFeedSource([make_feed_item("B")]), config=config)

    assert report.deleted == 2
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.catalog.find_by_sku("A") is None
        assert uow.repositories.catalog.find_by_sku("B") is not None


def test_dry_run_writes_only_the_operation_log(sqlite_unit_of_work: UowFactory) -> None:
    sideloader = FakeSideloader()

    report = _run(
        FakeFeedSource([make_feed_item("A", images=["https://cdn/a.jpg"])]),
        dry_run=True,
        sideloader=sideloader,
    )

    assert (report.created, report.skipped) == (0, 1)
    assert sideloader.calls == []
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.catalog.find_by_sku("A") is None
    lines = [item.line for item in app.read_operation_log()]
    assert lines
    assert all(line.startswith("[dry-run] ") for line in lines)


def test_fatal_fetch_error_is_reported_and_lock_released(
    sqlite_unit_of_work: UowFactory,
) -> None:
    failed = _run(FakeFeedSource(fetch_error="Timed out fetching feed"))

    assert not failed.succeeded
    assert failed.errors == 1
    assert app.read_operation_log(1)[0].line == (
        "Failed to fetch XML feed: Timed out fetching feed"
    )

    # the lease was released, so the next run proceeds
    assert _run(FakeFeedSource([make_feed_item("A")])).succeeded


def test_run_sync_reads_configuration_from_environment(
    sqlite_unit_of_work: UowFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("FEEDSYNC_FEED_URL", "https://shop.example.com/feed.xml")
    monkeypatch.setenv("FEEDSYNC_SWEEP_POLICY", "delete")

    report = app.run_sync(
        source="cron",
        feed_source=FakeFeedSource([make_feed_item("A")]),
        sideloader=FakeSideloader(),
    )

    assert report.succeeded
    assert report.source.value == "cron"
