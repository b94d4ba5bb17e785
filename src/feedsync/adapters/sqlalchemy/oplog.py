"""Rolling operation log persisted in the ``operation_log`` table."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, func, insert, select

from feedsync.adapters.sqlalchemy.mappings import operation_log_table
from feedsync.config.feed_sync import DEFAULT_OPERATION_LOG_CAPACITY
from feedsync.domain.model import utcnow
from feedsync.domain.ports.oplog import OperationLogEntry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.engine import Engine

    from feedsync.domain.ports.oplog import OperationLog


class SqlAlchemyOperationLog:
    """Operation log keeping only the newest ``capacity`` lines.

    Each append runs in its own transaction so journal lines survive a rolled back
    catalog change.
    """

    def __init__(self, engine: Engine, *, capacity: int = DEFAULT_OPERATION_LOG_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.engine = engine
        self.capacity = capacity

    def append(self, line: str) -> None:
        with self.engine.begin() as connection:
            connection.execute(insert(operation_log_table).values(created_at=utcnow(), line=line))
            count = connection.execute(select(func.count()).select_from(operation_log_table))
            if count.scalar_one() <= self.capacity:
                return
            threshold = connection.execute(
                select(operation_log_table.c.id)
                .order_by(operation_log_table.c.id.desc())
                .offset(self.capacity - 1)
                .limit(1)
            ).scalar_one()
            connection.execute(
                delete(operation_log_table).where(operation_log_table.c.id < threshold)
            )

    def tail(self, limit: int | None = None) -> Sequence[OperationLogEntry]:
        """Return the newest lines in chronological order."""

        stmt = select(operation_log_table.c.created_at, operation_log_table.c.line).order_by(
            operation_log_table.c.id.desc()
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.engine.connect() as connection:
            rows = connection.execute(stmt).all()
        return [
            OperationLogEntry(created_at=row.created_at, line=row.line) for row in reversed(rows)
        ]


if TYPE_CHECKING:
    from sqlalchemy import create_engine

    _oplog_check: OperationLog = SqlAlchemyOperationLog(create_engine("sqlite://"))
