"""Domain port definitions for adapters."""

from __future__ import annotations

from .catalog import CatalogStore
from .fetching import FeedSource
from .locking import RunLock
from .media import ImageSideloader
from .oplog import OperationLog, OperationLogEntry
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogRepositories",
    "CatalogStore",
    "CatalogUnitOfWork",
    "FeedSource",
    "ImageSideloader",
    "OperationLog",
    "OperationLogEntry",
    "RepositoryCollection",
    "RunLock",
    "UnitOfWork",
]
