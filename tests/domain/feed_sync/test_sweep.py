from __future__ import annotations

from feedsync.domain.feed_sync import (
    CatalogSweep,
    ReconcilePolicy,
    RunReport,
    SweepOutcome,
    SweepPolicy,
    SyncJournal,
)
from feedsync.domain.model import (
    FEED_ORIGIN_KEY,
    NOT_IN_FEED_KEY,
    NOT_IN_FEED_TAG,
    PRODUCT_TAG_TAXONOMY,
    Visibility,
)
from tests.support.catalog import FakeCatalogStore


def _sweep(
    catalog: FakeCatalogStore,
    *,
    policy: SweepPolicy = SweepPolicy.FLAG,
    dry_run: bool = False,
) -> CatalogSweep:
    return CatalogSweep(
        catalog=catalog,
        journal=SyncJournal(dry_run=dry_run),
        policy=ReconcilePolicy(sweep=policy),
        dry_run=dry_run,
    )


def test_flag_policy_demotes_and_marks_missing_entries(catalog: FakeCatalogStore) -> None:
    gone = catalog.add_entry("GONE", visibility=Visibility.PUBLISH)
    kept = catalog.add_entry("KEPT", visibility=Visibility.PUBLISH)
    report = RunReport()

    _sweep(catalog).run({"KEPT"}, report)

    assert gone.visibility is Visibility.DRAFT
    assert gone.metadata[NOT_IN_FEED_KEY] == "yes"
    assert gone.has_tag(PRODUCT_TAG_TAXONOMY, NOT_IN_FEED_TAG)
    assert kept.visibility is Visibility.PUBLISH
    assert NOT_IN_FEED_KEY not in kept.metadata
    assert report.flagged == 1
    assert report.deleted == 0


def test_fully_flagged_entries_are_left_alone(catalog: FakeCatalogStore) -> None:
    entry = catalog.add_entry("GONE", visibility=Visibility.DRAFT)
    entry.metadata[NOT_IN_FEED_KEY] = "yes"
    entry.tags.add((PRODUCT_TAG_TAXONOMY, NOT_IN_FEED_TAG))
    report = RunReport()

    outcome = _sweep(catalog).process(entry.id, set())
    _sweep(catalog).run(set(), report)

    assert outcome is SweepOutcome.KEPT
    assert catalog.writes == []
    assert report.flagged == 0


def test_republished_missing_entries_are_demoted_again(catalog: FakeCatalogStore) -> None:
    entry = catalog.add_entry("GONE", visibility=Visibility.PUBLISH)
    entry.metadata[NOT_IN_FEED_KEY] = "yes"
    report = RunReport()

    _sweep(catalog).run(set(), report)

    assert entry.visibility is Visibility.DRAFT
    assert entry.has_tag(PRODUCT_TAG_TAXONOMY, NOT_IN_FEED_TAG)
    assert report.flagged == 1


def test_repeated_flag_sweeps_are_idempotent(catalog: FakeCatalogStore) -> None:
    catalog.add_entry("GONE", visibility=Visibility.PUBLISH)
    first = RunReport()
    second = RunReport()

    _sweep(catalog).run(set(), first)
    writes_after_first = len(catalog.writes)
    _sweep(catalog).run(set(), second)

    assert first.flagged == 1
    assert second.flagged == 0
    assert len(catalog.writes) == writes_after_first


def test_dry_run_counts_already_flagged_missing_entries(catalog: FakeCatalogStore) -> None:
    entry = catalog.add_entry("GONE")
    entry.metadata[NOT_IN_FEED_KEY] = "yes"
    report = RunReport()

    _sweep(catalog, dry_run=True).run(set(), report)

    assert report.skipped == 1
    assert report.flagged == 0
    assert catalog.writes == []


def test_returning_entries_lose_the_missing_markers(catalog: FakeCatalogStore) -> None:
    entry = catalog.add_entry("BACK")
    entry.metadata[NOT_IN_FEED_KEY] = "yes"
    entry.tags.add((PRODUCT_TAG_TAXONOMY, NOT_IN_FEED_TAG))
    report = RunReport()

    _sweep(catalog).run({"BACK"}, report)

    assert NOT_IN_FEED_KEY not in entry.metadata
    assert not entry.has_tag(PRODUCT_TAG_TAXONOMY, NOT_IN_FEED_TAG)
    assert entry.metadata[FEED_ORIGIN_KEY] == "yes"
    assert report.restored == 1


def test_delete_policy_removes_missing_entries(catalog: FakeCatalogStore) -> None:
    gone = catalog.add_entry("GONE")
    kept = catalog.add_entry("KEPT")
    report = RunReport()

    _sweep(catalog, policy=SweepPolicy.DELETE).run({"KEPT"}, report)

    assert gone.id not in catalog.entries
    assert kept.id in catalog.entries
    assert report.deleted == 1


def test_entries_without_feed_origin_are_never_touched(catalog: FakeCatalogStore) -> None:
    manual = catalog.add_entry("MANUAL", feed_origin=False)
    report = RunReport()

    _sweep(catalog, policy=SweepPolicy.DELETE).run(set(), report)
    outcome = _sweep(catalog, policy=SweepPolicy.DELETE).process(manual.id, set())

    assert outcome is SweepOutcome.IGNORED
    assert manual.id in catalog.entries
    assert catalog.writes == []


def test_dry_run_sweep_counts_skips_without_writes(catalog: FakeCatalogStore) -> None:
    catalog.add_entry("GONE")
    report = RunReport()

    _sweep(catalog, policy=SweepPolicy.DELETE, dry_run=True).run(set(), report)

    assert catalog.writes == []
    assert report.skipped == 1
    assert report.deleted == 0


def test_write_failures_are_counted_and_sweep_continues(catalog: FakeCatalogStore) -> None:
    first = catalog.add_entry("A")
    second = catalog.add_entry("B")
    catalog.fail_skus.add("A")
    report = RunReport()
    outcomes: list[SweepOutcome] = []

    _sweep(catalog).run(set(), report, checkpoint=outcomes.append)

    assert report.errors == 1
    assert report.flagged == 1
    assert sorted(outcomes) == sorted([SweepOutcome.ERROR, SweepOutcome.FLAGGED])
    assert NOT_IN_FEED_KEY not in first.metadata
    assert second.metadata[NOT_IN_FEED_KEY] == "yes"
