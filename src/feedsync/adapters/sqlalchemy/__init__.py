"""SQLAlchemy adapter: catalog store, operation log, run lock and unit of work."""

from __future__ import annotations

from feedsync.adapters.sqlalchemy.locking import SqlAlchemyRunLock
from feedsync.adapters.sqlalchemy.mappings import metadata
from feedsync.adapters.sqlalchemy.oplog import SqlAlchemyOperationLog
from feedsync.adapters.sqlalchemy.repositories import SqlAlchemyCatalogStore

__all__ = [
    "SqlAlchemyCatalogStore",
    "SqlAlchemyOperationLog",
    "SqlAlchemyRunLock",
    "metadata",
]
