"""Run statistics for a single sync invocation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from feedsync.domain.model import TriggerSource, utcnow


class ItemOutcome(StrEnum):
    """Terminal state of one feed item."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(slots=True, kw_only=True)
class RunReport:
    source: TriggerSource = TriggerSource.MANUAL
    dry_run: bool = False
    created: int = 0
    updated: int = 0
    deleted: int = 0
    flagged: int = 0
    restored: int = 0
    skipped: int = 0
    errors: int = 0
    items_seen: int = 0
    fatal_error: str | None = None
    started_at: datetime = field(default_factory=utcnow)
    finished_at: datetime | None = None

    def record(self, outcome: ItemOutcome) -> None:
        self.items_seen += 1
        match outcome:
            case ItemOutcome.CREATED:
                self.created += 1
            case ItemOutcome.UPDATED:
                self.updated += 1
            case ItemOutcome.SKIPPED:
                self.skipped += 1
            case ItemOutcome.ERROR:
                self.errors += 1

    def abort(self, message: str) -> None:
        """Mark the run as failed before item processing."""

        self.fatal_error = message
        self.errors += 1

    def finish(self) -> RunReport:
        self.finished_at = utcnow()
        return self

    @property
    def succeeded(self) -> bool:
        return self.fatal_error is None

    def summary(self) -> str:
        if self.fatal_error is not None:
            return f"Feed sync failed: {self.fatal_error}"
        mode = " (dry run)" if self.dry_run else ""
        return (
            f"Feed sync finished{mode}: created={self.created}, updated={self.updated}, "
            f"deleted={self.deleted}, flagged={self.flagged}, restored={self.restored}, "
            f"skipped={self.skipped}, errors={self.errors}"
        )
