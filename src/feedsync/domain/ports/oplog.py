"""Port for the rolling operation log."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime


@dataclass(slots=True, frozen=True)
class OperationLogEntry:
    created_at: datetime
    line: str


@runtime_checkable
class OperationLog(Protocol):
    """Append-only sink retaining only the most recent lines."""

    def append(self, line: str) -> None: ...

    def tail(self, limit: int | None = None) -> Sequence[OperationLogEntry]: ...
