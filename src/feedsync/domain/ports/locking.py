"""Port guarding against overlapping sync runs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import timedelta


@runtime_checkable
class RunLock(Protocol):
    """Lease-style lock; an expired lease may be taken over by a new holder."""

    def acquire(self, holder: str, *, ttl: timedelta) -> bool: ...

    def release(self, holder: str) -> None: ...
