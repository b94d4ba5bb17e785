"""Feed-side value objects, rebuilt from the XML document on every run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

PRIMARY_SLOT: Final[str] = "primary-0"
ADDITIONAL_SLOT_PREFIX: Final[str] = "additional-"


@dataclass(slots=True, frozen=True)
class StockMarker:
    """Availability element of a feed item: optional presence id plus free text."""

    presence_id: str | None = None
    text: str = ""


@dataclass(slots=True, frozen=True)
class ImageRef:
    slot_key: str
    url: str

    @property
    def is_primary(self) -> bool:
        return self.slot_key == PRIMARY_SLOT


@dataclass(slots=True, frozen=True, kw_only=True)
class FeedItem:
    """One product as declared by the feed, before normalisation."""

    external_id: str
    name: str = ""
    description_raw: str = ""
    price_raw: str = ""
    stock_marker: StockMarker | None = None
    brand: str | None = None
    image_refs: tuple[ImageRef, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return bool(self.external_id.strip())
