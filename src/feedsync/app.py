"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from feedsync.adapters.feed_xml import HttpFeedSource
from feedsync.adapters.media import HttpImageSideloader
from feedsync.adapters.sqlalchemy import SqlAlchemyOperationLog, SqlAlchemyRunLock
from feedsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    configured_engine,
    is_started,
    startup,
)
from feedsync.config import get_feed_sync_config, get_storage_config
from feedsync.domain.feed_sync import FeedSyncService
from feedsync.domain.model import TriggerSource
from feedsync.domain.ports.unit_of_work import CatalogUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.engine import Engine

    from feedsync.config import FeedSyncConfig
    from feedsync.domain.feed_sync import RunReport
    from feedsync.domain.ports.fetching import FeedSource
    from feedsync.domain.ports.media import ImageSideloader
    from feedsync.domain.ports.oplog import OperationLogEntry

UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]


log = getLogger(__name__)


def _ensure_engine() -> Engine:
    if not is_started():
        return startup()
    engine = configured_engine()
    assert engine is not None
    return engine


def run_sync(
    *,
    dry_run: bool = False,
    source: TriggerSource | str = TriggerSource.MANUAL,
    config: FeedSyncConfig | None = None,
    feed_source: FeedSource | None = None,
    sideloader: ImageSideloader | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> RunReport:
    """Run one feed synchronisation using the configured adapters."""

    effective_config = config or get_feed_sync_config()
    engine = _ensure_engine()
    effective_source = feed_source or HttpFeedSource(
        effective_config.feed_url,
        resilience=effective_config.feed_resilience,
    )
    effective_uow = unit_of_work_factory or SqlAlchemyCatalogUnitOfWork

    owned_sideloader: HttpImageSideloader | None = None
    if sideloader is None:
        owned_sideloader = HttpImageSideloader(
            get_storage_config().media_dir(),
            resilience=effective_config.image_resilience,
        )
        sideloader = owned_sideloader

    service = FeedSyncService(
        source=effective_source,
        unit_of_work_factory=effective_uow,
        sideload=sideloader,
        oplog=SqlAlchemyOperationLog(engine, capacity=effective_config.operation_log_capacity),
        run_lock=SqlAlchemyRunLock(engine),
        policy=effective_config.policy,
        lock_ttl=effective_config.lock_ttl,
    )
    log.info(
        "Starting feed sync: url=%s, dry_run=%s, source=%s, sweep=%s",
        effective_config.feed_url,
        dry_run,
        TriggerSource(source).value,
        effective_config.policy.sweep.value,
    )
    try:
        return service.run_sync(dry_run=dry_run, source=source)
    finally:
        if owned_sideloader is not None:
            owned_sideloader.close()


def read_operation_log(limit: int | None = None) -> Sequence[OperationLogEntry]:
    """Return the most recent operation log lines, oldest first."""

    return SqlAlchemyOperationLog(_ensure_engine()).tail(limit)
