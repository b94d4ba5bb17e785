from __future__ import annotations

import pytest

from feedsync.domain.feed_sync import ItemOutcome, RunReport, SyncJournal
from tests.support.catalog import InMemoryOperationLog


def test_record_counts_each_outcome() -> None:
    report = RunReport()
    for outcome in ItemOutcome:
        report.record(outcome)

    assert (report.created, report.updated, report.skipped, report.errors) == (1, 1, 1, 1)
    assert report.items_seen == 4
    assert report.succeeded


def test_summary_lines() -> None:
    report = RunReport(dry_run=True, created=2, flagged=1)

    assert report.summary() == (
        "Feed sync finished (dry run): created=2, updated=0, deleted=0, flagged=1, "
        "restored=0, skipped=0, errors=0"
    )

    report.abort("Failed to fetch XML feed: boom")

    assert report.summary() == "Feed sync failed: Failed to fetch XML feed: boom"
    assert report.errors == 1
    assert not report.succeeded


def test_journal_buffers_lines_until_flush() -> None:
    oplog = InMemoryOperationLog()
    journal = SyncJournal(oplog=oplog)

    journal.info("Creating product for SKU %s", "A")
    journal.warning("plain %d%%")

    assert oplog.lines == []

    journal.flush()
    journal.flush()

    assert oplog.lines == ["Creating product for SKU A", "plain %d%%"]


def test_journal_without_oplog_only_logs(caplog: pytest.LogCaptureFixture) -> None:
    journal = SyncJournal(dry_run=True)

    with caplog.at_level("INFO", logger="feedsync.domain.feed_sync.journal"):
        journal.error("Failed for SKU %s", "B")
        journal.flush()

    assert "[dry-run] Failed for SKU B" in caplog.text
