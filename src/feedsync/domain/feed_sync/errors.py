"""Exception hierarchy for feed synchronisation."""

from __future__ import annotations


class FeedSyncError(RuntimeError):
    """Base class for all sync failures."""


class FeedFetchError(FeedSyncError):
    """The feed could not be retrieved (transport failure, timeout, non-200 status)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FeedParseError(FeedSyncError):
    """The feed document is malformed or lacks the expected item list."""


class SyncInProgressError(FeedSyncError):
    """Another run currently holds the sync lease."""


class CatalogWriteError(FeedSyncError):
    """The catalog store rejected a create/update/delete."""


class SideloadError(FeedSyncError):
    """An image could not be downloaded or stored."""

    def __init__(self, message: str, *, url: str) -> None:
        super().__init__(message)
        self.url = url
