"""SQLAlchemy table metadata for the catalog, operation log and run lock."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
)

from feedsync.domain.model import StockStatus, Visibility

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class DecimalString(TypeDecorator[Decimal]):
    """Exact decimal stored as text, independent of backend numeric support."""

    impl = String(32)
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return str(value)

    def process_result_value(self, value: str | None, dialect: Dialect) -> Decimal | None:
        _ = dialect
        if value is None:
            return None
        try:
            return Decimal(value)
        except InvalidOperation:
            log.warning("Discarding unreadable stored price %r", value)
            return Decimal(0)


class StringListType(TypeDecorator[list[str]]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(list(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[str]:
        _ = dialect
        if value is None:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        items = cast(list[Any], loaded)
        return [item for item in items if isinstance(item, str)]


def _value_enum(enum_cls: type[StrEnum]) -> Enum:
    return Enum(
        enum_cls,
        native_enum=False,
        length=16,
        values_callable=lambda members: [member.value for member in members],
    )


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

# Catalog ---------------------------------------------------------------------

catalog_entry_table = Table(
    "catalog_entry",
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("sku", String(255), nullable=False, unique=True),
    Column("name", String(512), nullable=False, default=""),
    Column("description", Text, nullable=False, default=""),
    Column("price", DecimalString(), nullable=False),
    Column("stock_status", _value_enum(StockStatus), nullable=False),
    Column("manage_stock", Boolean, nullable=False, default=False),
    Column("visibility", _value_enum(Visibility), nullable=False),
    Column("brand", String(255), nullable=True),
    Column("image_id", String(128), nullable=True),
    Column("gallery_image_ids", StringListType(), nullable=False, default=list),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

catalog_entry_meta_table = Table(
    "catalog_entry_meta",
    metadata,
    Column(
        "entry_id",
        UUIDColumnType,
        ForeignKey("catalog_entry.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("key", String(128), primary_key=True),
    Column("value", Text, nullable=False),
    Index("ix_catalog_entry_meta_key_value", "key", "value"),
)

catalog_entry_tag_table = Table(
    "catalog_entry_tag",
    metadata,
    Column(
        "entry_id",
        UUIDColumnType,
        ForeignKey("catalog_entry.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("taxonomy", String(64), primary_key=True),
    Column("value", String(255), primary_key=True),
)

# Run bookkeeping -------------------------------------------------------------

operation_log_table = Table(
    "operation_log",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("line", Text, nullable=False),
)

sync_run_lock_table = Table(
    "sync_run_lock",
    metadata,
    Column("name", String(64), primary_key=True),
    Column("holder", String(128), nullable=False),
    Column("acquired_at", UTCDateTime(), nullable=False),
    Column("expires_at", UTCDateTime(), nullable=False),
)
