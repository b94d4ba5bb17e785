"""Logging side channel for a sync run.

Every decision is written to the module logger and mirrored into the injected
operation log, so a scheduled run leaves a readable trail without any console.
Operation log lines are buffered until ``flush`` so that they are written between
catalog transactions rather than inside one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from feedsync.domain.ports.oplog import OperationLog

log = logging.getLogger(__name__)

DRY_RUN_PREFIX = "[dry-run] "


@dataclass(slots=True)
class SyncJournal:
    oplog: OperationLog | None = None
    dry_run: bool = False
    _pending: list[str] = field(default_factory=list[str], init=False, repr=False)

    def info(self, message: str, *args: object) -> None:
        self._write(logging.INFO, message, args)

    def warning(self, message: str, *args: object) -> None:
        self._write(logging.WARNING, message, args)

    def error(self, message: str, *args: object) -> None:
        self._write(logging.ERROR, message, args)

    def flush(self) -> None:
        if self.oplog is None:
            self._pending.clear()
            return
        while self._pending:
            self.oplog.append(self._pending.pop(0))

    def _write(self, level: int, message: str, args: tuple[object, ...]) -> None:
        text = message % args if args else message
        if self.dry_run:
            text = DRY_RUN_PREFIX + text
        log.log(level, "%s", text)
        if self.oplog is not None:
            self._pending.append(text)
