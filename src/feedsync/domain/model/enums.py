"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class StockStatus(StrEnum):
    IN_STOCK = "instock"
    OUT_OF_STOCK = "outofstock"

    @classmethod
    def from_flag(cls, in_stock: bool) -> StockStatus:  # noqa: FBT001
        return cls.IN_STOCK if in_stock else cls.OUT_OF_STOCK


class Visibility(StrEnum):
    DRAFT = "draft"
    PENDING = "pending"
    PUBLISH = "publish"


class TriggerSource(StrEnum):
    """What started a sync run."""

    MANUAL = "manual"
    CRON = "cron"
