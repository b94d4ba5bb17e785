"""Lease-based run lock stored in the ``sync_run_lock`` table."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError

from feedsync.adapters.sqlalchemy.mappings import sync_run_lock_table
from feedsync.domain.model import utcnow

if TYPE_CHECKING:
    from datetime import timedelta

    from sqlalchemy.engine import Engine

    from feedsync.domain.ports.locking import RunLock

log = getLogger(__name__)

DEFAULT_LOCK_NAME: Final[str] = "feed_sync"


class SqlAlchemyRunLock:
    def __init__(self, engine: Engine, *, name: str = DEFAULT_LOCK_NAME) -> None:
        self.engine = engine
        self.name = name

    def acquire(self, holder: str, *, ttl: timedelta) -> bool:
        now = utcnow()
        try:
            with self.engine.begin() as connection:
                expired = connection.execute(
                    delete(sync_run_lock_table)
                    .where(sync_run_lock_table.c.name == self.name)
                    .where(sync_run_lock_table.c.expires_at <= now)
                )
                if expired.rowcount:
                    log.warning("Taking over expired run lock %s", self.name)
                connection.execute(
                    insert(sync_run_lock_table).values(
                        name=self.name,
                        holder=holder,
                        acquired_at=now,
                        expires_at=now + ttl,
                    )
                )
        except IntegrityError:
            log.info("Run lock %s is held by another run", self.name)
            return False
        return True

    def release(self, holder: str) -> None:
        with self.engine.begin() as connection:
            connection.execute(
                delete(sync_run_lock_table)
                .where(sync_run_lock_table.c.name == self.name)
                .where(sync_run_lock_table.c.holder == holder)
            )


if TYPE_CHECKING:
    from sqlalchemy import create_engine

    _lock_check: RunLock = SqlAlchemyRunLock(create_engine("sqlite://"))
