"""Reconciliation policy switches."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class SweepPolicy(StrEnum):
    """What happens to feed-origin entries that disappeared from the feed."""

    FLAG = "flag"  # demote to draft and mark, keep the entry
    DELETE = "delete"  # catalog is a strict mirror of the feed


@dataclass(slots=True, frozen=True)
class ReconcilePolicy:
    sweep: SweepPolicy = SweepPolicy.FLAG
    # Once an entry exists its listing content and pricing are managed downstream;
    # only availability is kept live unless this is switched on.
    overwrite_content_on_update: bool = False
    sweep_page_size: int = 200
