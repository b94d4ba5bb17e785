"""Port for storing remote images as local media assets."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from feedsync.domain.model import AssetId


@runtime_checkable
class ImageSideloader(Protocol):
    """Download ``url`` into media storage; raise ``SideloadError`` on failure."""

    def __call__(self, url: str) -> AssetId: ...
