"""Image reference collection, ordering and attachment."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final
from urllib.parse import urljoin

from feedsync.domain.feed_sync.errors import SideloadError
from feedsync.domain.model import ADDITIONAL_SLOT_PREFIX, PRIMARY_SLOT, AssetId, ImageRef

if TYPE_CHECKING:
    from collections.abc import Iterable

    from feedsync.domain.ports.media import ImageSideloader

log = getLogger(__name__)

ADDITIONAL_IMAGE_FIELD: Final[re.Pattern[str]] = re.compile(r"^dodatnaSlika(\d*)$", re.IGNORECASE)
_DIGITS = re.compile(r"(\d+)")


@dataclass(slots=True)
class ImageAttachment:
    """Result of sideloading an item's images."""

    image_id: AssetId | None = None
    gallery_ids: list[AssetId] = field(default_factory=list[AssetId])
    failed_urls: list[str] = field(default_factory=list[str])

    @property
    def is_empty(self) -> bool:
        return self.image_id is None and not self.gallery_ids


def collect_image_refs(
    primary: str | None,
    fields: Mapping[str, str] | Iterable[tuple[str, str]],
    *,
    base_url: str | None = None,
) -> tuple[ImageRef, ...]:
    """Key the primary image and every ``dodatnaSlikaN`` field by slot.

    A field without a numeric suffix takes order index 0. When two fields map to the
    same slot the later one wins.
    """

    slots: dict[str, str] = {}
    primary_url = (primary or "").strip()
    if primary_url:
        slots[PRIMARY_SLOT] = _absolute(primary_url, base_url)

    pairs = fields.items() if isinstance(fields, Mapping) else fields
    for name, value in pairs:
        match = ADDITIONAL_IMAGE_FIELD.match(name)
        if match is None:
            continue
        url = (value or "").strip()
        if not url:
            continue
        order = int(match.group(1)) if match.group(1) else 0
        slots[f"{ADDITIONAL_SLOT_PREFIX}{order:04d}"] = _absolute(url, base_url)

    return tuple(ImageRef(slot_key=slot, url=url) for slot, url in slots.items())


def resolve_image_urls(refs: Iterable[ImageRef]) -> list[str]:
    """Return image URLs primary first, then by natural slot order, without duplicates."""

    keyed: dict[str, str] = {}
    for ref in refs:
        keyed[ref.slot_key] = ref.url

    urls: list[str] = []
    for slot in sorted(keyed, key=_slot_sort_key):
        url = keyed[slot]
        if url and url not in urls:
            urls.append(url)
    return urls


def attach_images(urls: Iterable[str], sideload: ImageSideloader) -> ImageAttachment:
    """Sideload ``urls`` in order; the first success becomes the primary image.

    Failures are recorded and skipped, never raised.
    """

    attachment = ImageAttachment()
    for url in urls:
        if not url:
            continue
        try:
            asset_id = sideload(url)
        except SideloadError as exc:
            log.debug("Failed to sideload image %s: %s", url, exc)
            attachment.failed_urls.append(url)
            continue

        if attachment.image_id is None:
            attachment.image_id = asset_id
        elif asset_id != attachment.image_id and asset_id not in attachment.gallery_ids:
            attachment.gallery_ids.append(asset_id)
    return attachment


def _slot_sort_key(slot: str) -> tuple[int, tuple[str | int, ...]]:
    rank = 0 if slot == PRIMARY_SLOT else 1
    chunks = tuple(int(chunk) if chunk.isdigit() else chunk for chunk in _DIGITS.split(slot))
    return rank, chunks


def _absolute(url: str, base_url: str | None) -> str:
    if base_url is None:
        return url
    return urljoin(base_url, url)
